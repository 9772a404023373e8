"""Result type constants for ocp_catalog_validator results.

These constants prevent stringly-typed result types and keep the
rendered messages aligned with the operator-framework manifest results.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Manifest result types."""

    # Bundle could not be validated at all (nil bundle / missing CSV)
    INVALID_BUNDLE = "ErrorInvalidBundle"
    # Compatibility findings scoped to the CSV
    INVALID_CSV = "ErrorInvalidCSV"
    # Findings forwarded from another validator (deprecated APIs)
    FAILED_VALIDATION = "ErrorFailedValidation"


class Level(str, Enum):
    """Severity of a manifest result."""

    ERROR = "Error"
    WARNING = "Warning"

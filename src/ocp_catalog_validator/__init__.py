"""ocp_catalog_validator: OpenShift catalog compatibility checks for Operator bundles."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("ocp-catalog-validator")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from ocp_catalog_validator.api import validate_openshift_bundle, validate_bundles, validate_bundle_dir
from ocp_catalog_validator.config import CompatibilityConfig, OptionalValues
from ocp_catalog_validator.contracts import ManifestIssue, ManifestResult
from ocp_catalog_validator.codes import ErrorType, Level

__all__ = [
    "__version__",
    "validate_openshift_bundle",
    "validate_bundles",
    "validate_bundle_dir",
    "CompatibilityConfig",
    "OptionalValues",
    "ManifestIssue",
    "ManifestResult",
    "ErrorType",
    "Level",
]

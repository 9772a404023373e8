"""Caller-supplied options for the OpenShift compatibility checks."""

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ocp_catalog_validator.kernel.version_range import VersionParseError, parse_tolerant

logger = logging.getLogger(__name__)

# Keys accepted through --optional-values (e.g. --optional-values="file=bundle.Dockerfile")
FILE_PATH_KEY = "file"
RANGE_KEY = "range"
OCP_VERSION_KEY = "ocp-version"

DEFAULT_UNSUPPORTED_OCP_VERSION = "4.9"

# OCP 4.y ships Kubernetes 1.(y + 13): 4.9 -> 1.22, 4.12 -> 1.25
OCP4_KUBERNETES_MINOR_OFFSET = 13


class OptionalValues(BaseModel):
    """Where to find the com.redhat.openshift.versions label.

    Exactly one source may be given: a file to read the label from
    (bundle.Dockerfile or metadata/annotations.yaml) or the label range itself.
    """
    file_path: Optional[str] = None
    label_range: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_single_source(self) -> "OptionalValues":
        if self.file_path and self.label_range:
            raise ValueError(
                f"'{FILE_PATH_KEY}' and '{RANGE_KEY}' are mutually exclusive, inform only one of them"
            )
        return self

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, str]]) -> "OptionalValues":
        """Build from --optional-values pairs. 'file' wins over 'range'."""
        values = values or {}
        file_path = values.get(FILE_PATH_KEY) or None
        label_range = values.get(RANGE_KEY) or None
        if file_path and label_range:
            logger.warning(
                "Both '%s' and '%s' informed; the label will be read from %s",
                FILE_PATH_KEY, RANGE_KEY, file_path,
            )
            label_range = None
        return cls(file_path=file_path, label_range=label_range)


class CompatibilityConfig(BaseModel):
    """Thresholds used by the compatibility checks."""
    # First OCP version which no longer serves the removed APIs
    unsupported_ocp_version: str = DEFAULT_UNSUPPORTED_OCP_VERSION

    model_config = ConfigDict(frozen=True)

    @field_validator("unsupported_ocp_version")
    @classmethod
    def validate_unsupported_ocp_version(cls, v: str) -> str:
        """Validate the threshold is a plain major.minor version."""
        v = v.strip()
        if v.startswith("v"):
            v = v[1:]
        try:
            parsed = parse_tolerant(v)
        except VersionParseError as e:
            raise ValueError(f"Unsupported OCP version '{v}' is not a valid version: {e}")
        if parsed.patch != 0 or v.count(".") != 1:
            raise ValueError(f"Unsupported OCP version '{v}' must be informed as major.minor (e.g. 4.9)")
        if parsed.major != 4:
            raise ValueError(f"Unsupported OCP version '{v}' must be an OCP 4 release")
        return f"{parsed.major}.{parsed.minor}"

    @property
    def removed_kubernetes_version(self) -> str:
        """Kubernetes release whose API removals match the OCP threshold."""
        minor = parse_tolerant(self.unsupported_ocp_version).minor
        return f"1.{minor + OCP4_KUBERNETES_MINOR_OFFSET}"

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, str]]) -> "CompatibilityConfig":
        """Build from --optional-values pairs, defaulting the threshold."""
        version = (values or {}).get(OCP_VERSION_KEY)
        if version:
            return cls(unsupported_ocp_version=version)
        return cls()

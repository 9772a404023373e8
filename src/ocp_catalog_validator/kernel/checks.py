"""OpenShift compatibility checks for a single bundle.

The checks run as an ordered list of stages over a CompatibilityCheck.
Each stage takes the check and returns an updated copy; a stage never
raises, it appends an error or warning instead, so every later stage still
runs. Within a stage a failed parse skips the checks that need its result.

Checks performed:

- When the bundle uses APIs removed in the Kubernetes release shipped by the
  unsupported OCP version, the CSV must carry olm.maxOpenShiftVersion with a
  lower value, and the com.redhat.openshift.versions label must not include
  the unsupported version.
- olm.maxOpenShiftVersion must be a major.minor version.
- olm.maxOpenShiftVersion must lie within the com.redhat.openshift.versions range.

The label is only checked when a file or a range was informed.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ocp_catalog_validator.config import CompatibilityConfig, OptionalValues
from ocp_catalog_validator.kernel.annotations import (
    OLM_MAX_OCP_VERSION,
    OLM_PROPERTIES,
    AnnotationParseError,
    extract_max_ocp_version,
)
from ocp_catalog_validator.kernel.labels import (
    OCP_LABEL,
    LabelSyntaxError,
    clean_version_string,
    extract_label_from_text,
)
from ocp_catalog_validator.kernel.version_range import (
    RangeParseError,
    VersionParseError,
    parse_tolerant,
    range_contains_version,
    truncate,
)

logger = logging.getLogger(__name__)

# OCP docs with the information to manage versions
OCP_DOC_LINK_MANAGING_VERSIONS = (
    "https://docs.openshift.com/container-platform/4.8/operators/operator_sdk/"
    "osdk-working-bundle-images.html#osdk-control-compat_osdk-working-bundle-images"
)


def deprecation_guide_link(kubernetes_version: str) -> str:
    """Link to the upstream deprecation guide section for a release (e.g. 1.22)."""
    anchor = kubernetes_version.replace(".", "-")
    return f"https://kubernetes.io/docs/reference/using-api/deprecation-guide/#v{anchor}"


def removed_apis_notice(kubernetes_version: str) -> str:
    """Opening sentence shared by every removed-API message."""
    return (
        f"this bundle is using APIs which were deprecated and removed in v{kubernetes_version}. "
        f"More info: {deprecation_guide_link(kubernetes_version)}."
    )


def example_label_range(unsupported_ocp_version: str) -> str:
    """A label value ending right before the unsupported version (4.9 -> 4.6-4.8)."""
    major, minor = unsupported_ocp_version.split(".")[:2]
    return f"4.6-{major}.{int(minor) - 1}"


class CompatibilityCheck(BaseModel):
    """State of the compatibility checks for one bundle."""
    bundle_name: str
    annotations: Dict[str, str] = Field(default_factory=dict)  # CSV metadata.annotations
    file_path: Optional[str] = None  # bundle.Dockerfile or annotations.yaml holding the label
    label_range: Optional[str] = None  # Label range informed directly
    range_value: Optional[str] = None  # Label range used for comparisons
    max_value: Optional[str] = None  # olm.maxOpenShiftVersion value
    deprecated_apis_msg: str = ""  # Removed-API detail, empty when none are used
    unsupported_ocp_version: str
    removed_kubernetes_version: str
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def create(
        cls,
        bundle_name: str,
        annotations: Optional[Dict[str, str]] = None,
        optional_values: Optional[OptionalValues] = None,
        config: Optional[CompatibilityConfig] = None,
        deprecated_apis_msg: str = "",
    ) -> "CompatibilityCheck":
        optional_values = optional_values or OptionalValues()
        config = config or CompatibilityConfig()
        return cls(
            bundle_name=bundle_name,
            annotations=dict(annotations or {}),
            file_path=optional_values.file_path,
            label_range=optional_values.label_range,
            range_value=optional_values.label_range,
            deprecated_apis_msg=deprecated_apis_msg,
            unsupported_ocp_version=config.unsupported_ocp_version,
            removed_kubernetes_version=config.removed_kubernetes_version,
        )

    def uses_removed_apis(self) -> bool:
        return bool(self.deprecated_apis_msg)

    def has_label_info(self) -> bool:
        return bool(self.file_path or self.label_range)

    def with_error(self, message: str) -> "CompatibilityCheck":
        return self.model_copy(update={"errors": self.errors + [message]})

    def with_warning(self, message: str) -> "CompatibilityCheck":
        return self.model_copy(update={"warnings": self.warnings + [message]})

    def with_values(self, **values) -> "CompatibilityCheck":
        return self.model_copy(update=values)


Stage = Callable[[CompatibilityCheck], CompatibilityCheck]


def get_max_annotation_value(check: CompatibilityCheck) -> CompatibilityCheck:
    """Read olm.maxOpenShiftVersion from the olm.properties annotation."""
    try:
        max_value = extract_max_ocp_version(check.annotations)
    except AnnotationParseError as e:
        return check.with_error(str(e))
    return check.with_values(max_value=max_value)


def check_max_version_annotation(check: CompatibilityCheck) -> CompatibilityCheck:
    """Verify olm.maxOpenShiftVersion is informed when needed and below the threshold."""
    threshold = check.unsupported_ocp_version
    if check.uses_removed_apis() and not check.max_value:
        return check.with_error(
            f"{OLM_MAX_OCP_VERSION} csv.Annotations not specified with an OCP version lower than "
            f"{threshold}. This annotation is required to prevent the user from upgrading their OCP "
            f"cluster before they have installed a version of their operator which is compatible with "
            f"{threshold}. For further information see {OCP_DOC_LINK_MANAGING_VERSIONS}"
        )

    if not check.max_value:
        return check

    try:
        max_version = parse_tolerant(check.max_value)
    except VersionParseError as e:
        return check.with_error(
            f"csv.Annotations.{OLM_PROPERTIES} has an invalid value. "
            f"Unable to parse ({check.max_value}) using semver : {e}"
        )

    truncated = truncate(max_version)
    if max_version.compare(truncated) != 0:
        return check.with_warning(
            f"csv.Annotations.{OLM_PROPERTIES} has an invalid value. "
            f"{OLM_MAX_OCP_VERSION} must specify only major.minor versions, "
            f"{max_version} will be truncated to {truncated}"
        )

    if check.uses_removed_apis() and max_version >= parse_tolerant(threshold):
        return check.with_error(
            f"invalid value for {OLM_MAX_OCP_VERSION}. The OCP version value {check.max_value} "
            f"is >= of {threshold}. Note that {check.deprecated_apis_msg}"
        )
    return check


def get_ocp_label(check: CompatibilityCheck) -> CompatibilityCheck:
    """Resolve the label range, reading it from the informed file when needed."""
    if not check.has_label_info() or check.label_range:
        return check

    path = Path(check.file_path)
    if not path.exists():
        logger.warning("Label file %s not found", path)
        return check.with_error(
            f"the file path informed ({check.file_path}) was not found. "
            f"Error : no such file or directory"
        )
    if path.is_dir():
        return check.with_error(f"the file path informed ({check.file_path}) is not a file")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Unable to read label file %s: %s", path, e)
        return check.with_error(
            f"unable to read the index image in the path ({check.file_path}). Error : {e}"
        )

    try:
        range_value = extract_label_from_text(content, OCP_LABEL)
    except LabelSyntaxError as e:
        return check.with_error(str(e))

    logger.debug("Label %s in %s resolved to %r", OCP_LABEL, path, range_value)
    return check.with_values(range_value=range_value)


def check_ocp_label(check: CompatibilityCheck) -> CompatibilityCheck:
    """Report a label that was expected but not found."""
    # Not an error on its own: the package format is still valid without the label
    if not check.has_label_info() or check.range_value:
        return check

    if check.uses_removed_apis():
        return check.with_error(
            f"{removed_apis_notice(check.removed_kubernetes_version)} "
            f"Migrate the APIs for {check.deprecated_apis_msg} or provide compatible version(s) "
            f"via the labels. (e.g. LABEL {OCP_LABEL}='{example_label_range(check.unsupported_ocp_version)}')"
        )
    return check.with_warning(f"unable to find {OCP_LABEL} configuration")


def validate_ocp_label_with_max_version(check: CompatibilityCheck) -> CompatibilityCheck:
    """Ensure olm.maxOpenShiftVersion lies within the label range."""
    if not check.max_value or not check.range_value:
        return check

    try:
        is_part_of_target = range_contains_version(
            check.range_value, clean_version_string(check.max_value), tolerant=True
        )
    except RangeParseError as e:
        return check.with_error(f"error invalid label range {e}")

    if not is_part_of_target:
        return check.with_error(
            f"the {OLM_MAX_OCP_VERSION} annotation with the value {check.max_value} to block the "
            f"cluster upgrade is incompatible with the versions where this solutions should be "
            f"distributed ({OCP_LABEL} with the value {check.range_value}). "
            f"For further information see {OCP_DOC_LINK_MANAGING_VERSIONS}"
        )
    return check


def check_ocp_label_for_unsupported_version(check: CompatibilityCheck) -> CompatibilityCheck:
    """Ensure a bundle using removed APIs is not distributed on the unsupported version."""
    if not check.uses_removed_apis() or not check.range_value:
        return check

    try:
        is_part_of_target = range_contains_version(
            check.range_value, check.unsupported_ocp_version, tolerant=False
        )
    except RangeParseError as e:
        return check.with_error(f"error to validate the OpenShift label range: {e}")

    if is_part_of_target:
        return check.with_error(
            f"{removed_apis_notice(check.removed_kubernetes_version)} "
            f"Migrate the API(s) for {check.deprecated_apis_msg} or provide compatible version(s) "
            f"by using the {OCP_LABEL} annotation in `metadata/annotations.yaml` to ensure that the "
            f"index image will be generated with its label. "
            f"(e.g. LABEL {OCP_LABEL}='{example_label_range(check.unsupported_ocp_version)}')"
        )
    return check


PIPELINE_STAGES: Tuple[Stage, ...] = (
    get_max_annotation_value,
    check_max_version_annotation,
    get_ocp_label,
    check_ocp_label,
    validate_ocp_label_with_max_version,
    check_ocp_label_for_unsupported_version,
)


def run_compatibility_checks(
    check: CompatibilityCheck,
    stages: Tuple[Stage, ...] = PIPELINE_STAGES,
) -> CompatibilityCheck:
    """Apply every stage in order and return the final check."""
    for stage in stages:
        check = stage(check)
        logger.debug(
            "%s: %s done (errors=%d, warnings=%d)",
            check.bundle_name, stage.__name__, len(check.errors), len(check.warnings),
        )
    return check

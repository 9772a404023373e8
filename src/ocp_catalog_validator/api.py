"""Public API for ocp_catalog_validator package.

High-level functions that return complete, structured results.
Callers should use these functions instead of importing from _internal.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from ocp_catalog_validator.adapters.deprecated_apis import DeprecatedAPIDetector, RemovedAPIsDetector
from ocp_catalog_validator.codes import Level
from ocp_catalog_validator.config import CompatibilityConfig, OptionalValues
from ocp_catalog_validator.contracts import (
    ManifestResult,
    failed_validation,
    invalid_bundle,
    invalid_csv,
)
from ocp_catalog_validator.kernel.checks import CompatibilityCheck, run_compatibility_checks
from ocp_catalog_validator._internal.io.bundle import Bundle, BundleLoadError, load_bundle_from_dir

logger = logging.getLogger(__name__)


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def _detect_deprecated_apis(
    bundle: Bundle,
    detector: DeprecatedAPIDetector,
    result: ManifestResult,
) -> str:
    """Forward detector findings as warnings and return the detail used by the checks."""
    deprecated_apis_msg = ""
    try:
        details = detector.detect(bundle.objects_to_validate())
    except Exception as e:
        logger.warning("Deprecated API detection failed for %s: %s", bundle.name, e)
        result.add(invalid_bundle(f"Unable to check the bundle for removed APIs: {e}", bundle.name))
        return deprecated_apis_msg

    for detail in details:
        result.add(failed_validation(detail, bundle.csv.name))
        # The last detail wins when the detector reports several
        deprecated_apis_msg = detail
    return deprecated_apis_msg


def validate_openshift_bundle(
    bundle: Optional[Bundle],
    optional_values: Optional[OptionalValues] = None,
    config: Optional[CompatibilityConfig] = None,
    detector: Optional[DeprecatedAPIDetector] = None,
) -> ManifestResult:
    """
    Check a bundle against the criteria to publish it on the OpenShift catalog.

    Args:
        bundle: Loaded bundle (None yields a single "Bundle is nil" error)
        optional_values: Where to find the com.redhat.openshift.versions label
        config: Unsupported OCP version threshold (defaults to 4.9)
        detector: Removed-API detector (defaults to RemovedAPIsDetector for the
                  Kubernetes release matching the threshold)

    Returns:
        ManifestResult with errors and warnings; never raises for bundle content
    """
    result = ManifestResult()
    if bundle is None:
        result.add(invalid_bundle("Bundle is nil"))
        return result
    result.name = bundle.name

    if bundle.csv is None:
        result.add(invalid_bundle("Bundle csv is nil", bundle.name))
        return result

    config = config or CompatibilityConfig()
    detector = detector or RemovedAPIsDetector(config.removed_kubernetes_version)
    deprecated_apis_msg = _detect_deprecated_apis(bundle, detector, result)

    check = CompatibilityCheck.create(
        bundle_name=bundle.name,
        annotations=bundle.csv.annotations,
        optional_values=optional_values,
        config=config,
        deprecated_apis_msg=deprecated_apis_msg,
    )
    check = run_compatibility_checks(check)

    csv_name = bundle.csv.name
    for error in check.errors:
        result.add(invalid_csv(error, csv_name))
    for warning in check.warnings:
        result.add(invalid_csv(warning, csv_name, Level.WARNING))
    return result


def validate_bundles(
    bundles: Iterable[Optional[Bundle]],
    optional_values: Optional[OptionalValues] = None,
    config: Optional[CompatibilityConfig] = None,
    detector: Optional[DeprecatedAPIDetector] = None,
) -> List[ManifestResult]:
    """Validate each bundle independently."""
    return [
        validate_openshift_bundle(bundle, optional_values, config, detector)
        for bundle in bundles
    ]


def validate_bundle_dir(
    bundle_dir: Union[str, os.PathLike, Path],
    optional_values: Optional[Mapping[str, str]] = None,
    detector: Optional[DeprecatedAPIDetector] = None,
) -> ManifestResult:
    """
    Load a bundle directory and validate it.

    Args:
        bundle_dir: Bundle directory (manifests/ and metadata/)
        optional_values: --optional-values pairs: "file", "range", "ocp-version"
        detector: Removed-API detector override

    Raises:
        ValueError: If optional_values holds an invalid "ocp-version"
    """
    bundle_dir = _normalize_path(bundle_dir)
    config = CompatibilityConfig.from_mapping(optional_values)
    label_source = OptionalValues.from_mapping(optional_values)

    try:
        bundle = load_bundle_from_dir(bundle_dir)
    except (FileNotFoundError, BundleLoadError) as e:
        result = ManifestResult(name=bundle_dir.name)
        result.add(invalid_bundle(f"Unable to load the bundle: {e}", bundle_dir.name))
        return result

    return validate_openshift_bundle(bundle, label_source, config, detector)

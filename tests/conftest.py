"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed ocp_catalog_validator package.
"""

from pathlib import Path

import pytest

from ocp_catalog_validator._internal.io.bundle import load_bundle_from_dir

HERE = Path(__file__).resolve().parent
FIXTURES = HERE.parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def load_fixture_bundle():
    """Load a fixture bundle, optionally replacing its CSV annotations."""
    def _load(name, annotations=None):
        bundle = load_bundle_from_dir(FIXTURES / name)
        if annotations is not None:
            bundle.csv.annotations = dict(annotations)
        return bundle
    return _load


@pytest.fixture
def etcd_deprecated_detail() -> str:
    """Detail reported for valid_bundle_v1beta1, which ships v1beta1 CRDs."""
    return (
        "this bundle is using APIs which were deprecated and removed in v1.22. "
        "More info: https://kubernetes.io/docs/reference/using-api/deprecation-guide/#v1-22. "
        "Migrate the API(s) for CRD: ([\"etcdbackups.etcd.database.coreos.com\" "
        "\"etcdclusters.etcd.database.coreos.com\" \"etcdrestores.etcd.database.coreos.com\"])"
    )

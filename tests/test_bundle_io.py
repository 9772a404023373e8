"""Tests for loading bundle directories."""

import pytest

from ocp_catalog_validator._internal.io.bundle import (
    BundleLoadError,
    ClusterServiceVersion,
    load_bundle_from_dir,
)

CSV_YAML = """\
apiVersion: operators.coreos.com/v1alpha1
kind: ClusterServiceVersion
metadata:
  name: {name}
  annotations:
    olm.properties: '[{{"type": "olm.maxOpenShiftVersion", "value": "4.8"}}]'
"""


def test_load_fixture_bundle(fixtures_dir):
    bundle = load_bundle_from_dir(fixtures_dir / "valid_bundle_v1beta1")
    assert bundle.name == "etcdoperator.v0.9.4"
    assert bundle.csv.name == "etcdoperator.v0.9.4"
    assert bundle.csv.annotations["capabilities"] == "Full Lifecycle"
    assert [obj["metadata"]["name"] for obj in bundle.objects] == [
        "etcdbackups.etcd.database.coreos.com",
        "etcdclusters.etcd.database.coreos.com",
        "etcdrestores.etcd.database.coreos.com",
    ]


def test_objects_to_validate_starts_with_csv(fixtures_dir):
    bundle = load_bundle_from_dir(fixtures_dir / "valid_bundle_v1")
    objects = bundle.objects_to_validate()
    assert objects[0]["kind"] == "ClusterServiceVersion"
    assert [obj["kind"] for obj in objects[1:]] == ["CustomResourceDefinition"]


def test_flat_bundle_dir_and_multi_document_files(tmp_path):
    (tmp_path / "csv.yaml").write_text(
        CSV_YAML.format(name="flat.v1") + "---\napiVersion: v1\nkind: Service\nmetadata:\n  name: svc\n",
        encoding="utf-8",
    )
    (tmp_path / "notes.txt").write_text("kind: ClusterServiceVersion\n", encoding="utf-8")
    bundle = load_bundle_from_dir(tmp_path)
    assert bundle.name == "flat.v1"
    assert bundle.csv.annotations["olm.properties"].startswith("[")
    assert [obj["kind"] for obj in bundle.objects] == ["Service"]


def test_json_manifest(tmp_path):
    manifests = tmp_path / "manifests"
    manifests.mkdir()
    (manifests / "csv.json").write_text(
        '{"apiVersion": "operators.coreos.com/v1alpha1", "kind": "ClusterServiceVersion",'
        ' "metadata": {"name": "json.v1"}}',
        encoding="utf-8",
    )
    bundle = load_bundle_from_dir(tmp_path)
    assert bundle.csv.name == "json.v1"
    assert bundle.csv.annotations == {}


def test_bundle_without_csv(tmp_path):
    (tmp_path / "svc.yaml").write_text("apiVersion: v1\nkind: Service\n", encoding="utf-8")
    bundle = load_bundle_from_dir(tmp_path)
    assert bundle.csv is None
    assert bundle.name == tmp_path.name
    assert len(bundle.objects_to_validate()) == 1


def test_missing_dir_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bundle_from_dir(tmp_path / "missing")


def test_file_instead_of_dir_raises(tmp_path):
    path = tmp_path / "csv.yaml"
    path.write_text(CSV_YAML.format(name="x"), encoding="utf-8")
    with pytest.raises(BundleLoadError, match="not a directory"):
        load_bundle_from_dir(path)


def test_two_csvs_raise(tmp_path):
    (tmp_path / "a.yaml").write_text(CSV_YAML.format(name="a.v1"), encoding="utf-8")
    (tmp_path / "b.yaml").write_text(CSV_YAML.format(name="b.v1"), encoding="utf-8")
    with pytest.raises(BundleLoadError, match="More than one ClusterServiceVersion"):
        load_bundle_from_dir(tmp_path)


def test_invalid_yaml_raises(tmp_path):
    (tmp_path / "broken.yaml").write_text("kind: [unclosed\n", encoding="utf-8")
    with pytest.raises(BundleLoadError, match="Unable to parse manifest broken.yaml"):
        load_bundle_from_dir(tmp_path)


def test_csv_requires_name():
    with pytest.raises(BundleLoadError, match="missing metadata.name"):
        ClusterServiceVersion.from_manifest({"kind": "ClusterServiceVersion", "metadata": {}})


def test_csv_annotation_values_are_strings():
    csv = ClusterServiceVersion.from_manifest(
        {"kind": "ClusterServiceVersion", "metadata": {"name": "x", "annotations": {"replicas": 3}}}
    )
    assert csv.annotations == {"replicas": "3"}

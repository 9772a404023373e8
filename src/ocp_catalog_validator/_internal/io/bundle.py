"""Operator bundle loaders and models."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

CSV_KIND = "ClusterServiceVersion"
MANIFEST_SUFFIXES = {".yaml", ".yml", ".json"}


class BundleLoadError(ValueError):
    """Raised when a bundle directory cannot be loaded."""


class ClusterServiceVersion(BaseModel):
    name: str
    annotations: Dict[str, str] = Field(default_factory=dict)
    raw: Dict[str, Any]  # Full manifest as read from disk

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "ClusterServiceVersion":
        metadata = manifest.get("metadata") or {}
        name = metadata.get("name")
        if not isinstance(name, str) or not name:
            raise BundleLoadError("ClusterServiceVersion is missing metadata.name")
        annotations = metadata.get("annotations") or {}
        if not isinstance(annotations, dict):
            raise BundleLoadError(f"ClusterServiceVersion {name} has invalid metadata.annotations")
        return cls(
            name=name,
            annotations={str(k): str(v) for k, v in annotations.items()},
            raw=manifest,
        )


class Bundle(BaseModel):
    name: str
    csv: Optional[ClusterServiceVersion] = None
    objects: List[Dict[str, Any]] = Field(default_factory=list)  # Every manifest except the CSV

    def objects_to_validate(self) -> List[Dict[str, Any]]:
        """CSV manifest followed by the remaining bundle objects."""
        objs = [self.csv.raw] if self.csv is not None else []
        return objs + list(self.objects)


def _manifest_dir(bundle_dir: Path) -> Path:
    manifests = bundle_dir / "manifests"
    return manifests if manifests.is_dir() else bundle_dir


def _read_documents(path: Path) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            documents = list(yaml.safe_load_all(f))
    except yaml.YAMLError as e:
        raise BundleLoadError(f"Unable to parse manifest {path.name}: {e}") from e
    return [doc for doc in documents if isinstance(doc, dict)]


def load_bundle_from_dir(bundle_dir: Path) -> Bundle:
    """
    Load a bundle from <bundle_dir>/manifests (or bundle_dir itself).

    Args:
        bundle_dir: Bundle directory

    Returns:
        Bundle named after its CSV. When no CSV is found, the bundle is
        named after the directory and csv is None.

    Raises:
        FileNotFoundError: If bundle_dir does not exist
        BundleLoadError: If a manifest cannot be parsed or more than one CSV is found
    """
    if not bundle_dir.exists():
        raise FileNotFoundError(f"Bundle directory not found: {bundle_dir}")
    if not bundle_dir.is_dir():
        raise BundleLoadError(f"Bundle path is not a directory: {bundle_dir}")

    csv: Optional[ClusterServiceVersion] = None
    objects: List[Dict[str, Any]] = []
    for path in sorted(_manifest_dir(bundle_dir).iterdir()):
        if not path.is_file() or path.suffix.lower() not in MANIFEST_SUFFIXES:
            continue
        for doc in _read_documents(path):
            if doc.get("kind") != CSV_KIND:
                objects.append(doc)
                continue
            if csv is not None:
                raise BundleLoadError(f"More than one {CSV_KIND} found in {bundle_dir}")
            csv = ClusterServiceVersion.from_manifest(doc)

    name = csv.name if csv is not None else bundle_dir.name
    logger.debug("Loaded bundle %s with %d object(s) from %s", name, len(objects), bundle_dir)
    return Bundle(name=name, csv=csv, objects=objects)

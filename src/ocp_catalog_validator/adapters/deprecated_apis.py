"""Detect bundle objects served by APIs removed in a Kubernetes release.

Static table of removed group/versions, taken from
https://kubernetes.io/docs/reference/using-api/deprecation-guide/
No cluster access is needed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Protocol, Tuple

from ocp_catalog_validator.kernel.checks import removed_apis_notice

logger = logging.getLogger(__name__)

CRD_KIND = "CustomResourceDefinition"

# Kubernetes release -> (apiVersion, kind) pairs no longer served from that release
REMOVED_APIS: Dict[str, FrozenSet[Tuple[str, str]]] = {
    "1.22": frozenset({
        ("admissionregistration.k8s.io/v1beta1", "MutatingWebhookConfiguration"),
        ("admissionregistration.k8s.io/v1beta1", "ValidatingWebhookConfiguration"),
        ("apiextensions.k8s.io/v1beta1", CRD_KIND),
        ("apiregistration.k8s.io/v1beta1", "APIService"),
        ("authentication.k8s.io/v1beta1", "TokenReview"),
        ("authorization.k8s.io/v1beta1", "LocalSubjectAccessReview"),
        ("authorization.k8s.io/v1beta1", "SelfSubjectAccessReview"),
        ("authorization.k8s.io/v1beta1", "SubjectAccessReview"),
        ("certificates.k8s.io/v1beta1", "CertificateSigningRequest"),
        ("coordination.k8s.io/v1beta1", "Lease"),
        ("extensions/v1beta1", "Ingress"),
        ("networking.k8s.io/v1beta1", "Ingress"),
        ("networking.k8s.io/v1beta1", "IngressClass"),
        ("rbac.authorization.k8s.io/v1beta1", "ClusterRole"),
        ("rbac.authorization.k8s.io/v1beta1", "ClusterRoleBinding"),
        ("rbac.authorization.k8s.io/v1beta1", "Role"),
        ("rbac.authorization.k8s.io/v1beta1", "RoleBinding"),
        ("scheduling.k8s.io/v1beta1", "PriorityClass"),
        ("storage.k8s.io/v1beta1", "CSIDriver"),
        ("storage.k8s.io/v1beta1", "CSINode"),
        ("storage.k8s.io/v1beta1", "StorageClass"),
        ("storage.k8s.io/v1beta1", "VolumeAttachment"),
    }),
    "1.25": frozenset({
        ("autoscaling/v2beta1", "HorizontalPodAutoscaler"),
        ("batch/v1beta1", "CronJob"),
        ("discovery.k8s.io/v1beta1", "EndpointSlice"),
        ("events.k8s.io/v1beta1", "Event"),
        ("node.k8s.io/v1beta1", "RuntimeClass"),
        ("policy/v1beta1", "PodDisruptionBudget"),
        ("policy/v1beta1", "PodSecurityPolicy"),
    }),
    "1.26": frozenset({
        ("autoscaling/v2beta2", "HorizontalPodAutoscaler"),
        ("flowcontrol.apiserver.k8s.io/v1beta1", "FlowSchema"),
        ("flowcontrol.apiserver.k8s.io/v1beta1", "PriorityLevelConfiguration"),
    }),
    "1.27": frozenset({
        ("storage.k8s.io/v1beta1", "CSIStorageCapacity"),
    }),
    "1.29": frozenset({
        ("flowcontrol.apiserver.k8s.io/v1beta2", "FlowSchema"),
        ("flowcontrol.apiserver.k8s.io/v1beta2", "PriorityLevelConfiguration"),
    }),
}


class DeprecatedAPIDetector(Protocol):
    """Anything that reports removed-API usage as human readable details."""

    def detect(self, objects: List[Mapping[str, Any]]) -> List[str]:
        ...


def _group_name(kind: str) -> str:
    return "CRD" if kind == CRD_KIND else kind


def _quoted_list(names: List[str]) -> str:
    return "[" + " ".join(json.dumps(name) for name in names) + "]"


class RemovedAPIsDetector:
    """Report objects whose apiVersion/kind is gone in a Kubernetes release."""

    def __init__(self, kubernetes_version: str = "1.22"):
        self.kubernetes_version = kubernetes_version
        self.removed = REMOVED_APIS.get(kubernetes_version, frozenset())
        if not self.removed:
            logger.debug("No removed APIs registered for Kubernetes %s", kubernetes_version)

    def find_removed_apis(self, objects: List[Mapping[str, Any]]) -> Dict[str, List[str]]:
        """Group removed-API object names by kind ("CRD" for CustomResourceDefinitions)."""
        found: Dict[str, List[str]] = {}
        for obj in objects:
            key = (obj.get("apiVersion"), obj.get("kind"))
            if key not in self.removed:
                continue
            name = (obj.get("metadata") or {}).get("name") or ""
            found.setdefault(_group_name(obj["kind"]), []).append(name)
        return {kind: sorted(names) for kind, names in sorted(found.items())}

    def detect(self, objects: List[Mapping[str, Any]]) -> List[str]:
        """Return a single detail message, or nothing when no removed API is used."""
        found = self.find_removed_apis(objects)
        if not found:
            return []
        listing = ",".join(f"{kind}: ({_quoted_list(names)})" for kind, names in found.items())
        logger.debug("Removed APIs for Kubernetes %s: %s", self.kubernetes_version, listing)
        return [f"{removed_apis_notice(self.kubernetes_version)} Migrate the API(s) for {listing}"]

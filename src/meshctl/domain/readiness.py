"""Pure readiness predicates for live cluster objects.

Each predicate receives the object as returned by the cluster API (a plain
mapping) and answers whether the resource is usable.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

Predicate = Callable[[Mapping[str, Any]], bool]


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _generation_observed(obj: Mapping[str, Any]) -> bool:
    generation = _int(obj.get("metadata", {}).get("generation"))
    observed = _int(obj.get("status", {}).get("observedGeneration"))
    return generation == 0 or observed >= generation


def deployment_ready(obj: Mapping[str, Any]) -> bool:
    """Available replicas reached the desired count for the current generation.

    Example:
        >>> deployment_ready({"spec": {"replicas": 2}, "status": {"availableReplicas": 2}})
        True
        >>> deployment_ready({"spec": {"replicas": 2}, "status": {"availableReplicas": 1}})
        False
    """
    desired = _int(obj.get("spec", {}).get("replicas", 1))
    available = _int(obj.get("status", {}).get("availableReplicas"))
    return _generation_observed(obj) and available >= desired


def daemonset_ready(obj: Mapping[str, Any]) -> bool:
    status: Mapping[str, Any] = obj.get("status", {})
    return _generation_observed(obj) and _int(status.get("numberReady")) >= _int(status.get("desiredNumberScheduled"))


def statefulset_ready(obj: Mapping[str, Any]) -> bool:
    desired = _int(obj.get("spec", {}).get("replicas", 1))
    return _generation_observed(obj) and _int(obj.get("status", {}).get("readyReplicas")) >= desired


def pod_ready(obj: Mapping[str, Any]) -> bool:
    status: Mapping[str, Any] = obj.get("status", {})
    if status.get("phase") != "Running":
        return False
    for condition in status.get("conditions") or []:
        if condition.get("type") == "Ready":
            return condition.get("status") == "True"
    return False


def service_ready(obj: Mapping[str, Any]) -> bool:
    """LoadBalancer services need an ingress entry, others a cluster IP.

    Example:
        >>> service_ready({"spec": {"type": "ClusterIP", "clusterIP": "10.0.0.1"}})
        True
        >>> service_ready({"spec": {"type": "LoadBalancer", "clusterIP": "10.0.0.1"}, "status": {}})
        False
    """
    spec: Mapping[str, Any] = obj.get("spec", {})
    if spec.get("type") == "ExternalName":
        return True
    if spec.get("type") == "LoadBalancer":
        ingress = obj.get("status", {}).get("loadBalancer", {}).get("ingress") or []
        return bool(ingress)
    return bool(spec.get("clusterIP"))


def namespace_ready(obj: Mapping[str, Any]) -> bool:
    return obj.get("status", {}).get("phase", "Active") == "Active"


_PREDICATES: dict[str, Predicate] = {
    "Deployment": deployment_ready,
    "DaemonSet": daemonset_ready,
    "StatefulSet": statefulset_ready,
    "Pod": pod_ready,
    "Service": service_ready,
    "Namespace": namespace_ready,
}


def is_ready(obj: Mapping[str, Any] | None) -> bool:
    """Dispatch to the predicate for the object's kind.

    Missing objects are never ready; kinds without a predicate are ready as
    soon as they exist.

    Example:
        >>> is_ready(None)
        False
        >>> is_ready({"kind": "ConfigMap"})
        True
    """
    if obj is None:
        return False
    predicate = _PREDICATES.get(str(obj.get("kind", "")))
    if predicate is None:
        return True
    return predicate(obj)


__all__ = [
    "daemonset_ready",
    "deployment_ready",
    "is_ready",
    "namespace_ready",
    "pod_ready",
    "service_ready",
    "statefulset_ready",
]

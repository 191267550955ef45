"""In-memory cluster for testing the apply pipeline without kubectl.

:class:`InMemoryCluster` satisfies the ``ClusterClient`` protocol and, via
:meth:`InMemoryCluster.connect`, the ``ConnectCluster`` port. Stored objects
get a status that makes them ready, unless listed in ``never_ready``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ...domain.errors import ClusterAPIError, ClusterConnectionError
from ...domain.models import ClusterTarget, ResourceRef

if TYPE_CHECKING:
    from ..config.settings import ApplySettings


def _empty_objects() -> dict[ResourceRef, dict[str, Any]]:
    return {}


def _empty_mutations() -> list[tuple[str, ResourceRef]]:
    return []


def _empty_failures() -> dict[ResourceRef, ClusterAPIError]:
    return {}


def _empty_refs() -> set[ResourceRef]:
    return set()


def _empty_targets() -> list[ClusterTarget]:
    return []


def _ready_status(obj: dict[str, Any]) -> dict[str, Any]:
    spec: dict[str, Any] = obj.get("spec") or {}
    kind = obj.get("kind")
    if kind == "Deployment":
        replicas = spec.get("replicas", 1)
        return {"availableReplicas": replicas, "readyReplicas": replicas, "observedGeneration": 1}
    if kind == "StatefulSet":
        return {"readyReplicas": spec.get("replicas", 1), "observedGeneration": 1}
    if kind == "DaemonSet":
        return {"desiredNumberScheduled": 1, "numberReady": 1, "observedGeneration": 1}
    if kind == "Service":
        spec.setdefault("clusterIP", "10.96.0.10")
        if spec.get("type") == "LoadBalancer":
            return {"loadBalancer": {"ingress": [{"ip": "203.0.113.10"}]}}
        return {}
    if kind == "Namespace":
        return {"phase": "Active"}
    if kind == "Pod":
        return {"phase": "Running", "conditions": [{"type": "Ready", "status": "True"}]}
    return {}


@dataclass
class InMemoryCluster:
    """Dictionary-backed cluster that records every write.

    Attributes:
        objects: Stored objects keyed by their :class:`ResourceRef`.
        mutations: ``(verb, ref)`` for every successful write, in order.
        failures: Errors raised when writing the given resources.
        never_ready: Resources stored without a ready status.
        reachable: When False, :meth:`connect` fails.
        connections: Targets passed to :meth:`connect`.

    Example:
        >>> cluster = InMemoryCluster()
        >>> _ = cluster.apply({"kind": "ConfigMap", "metadata": {"name": "a", "namespace": "ns"}})
        >>> cluster.get("ConfigMap", "a", "ns")["metadata"]["name"]
        'a'
        >>> cluster.mutations
        [('apply', ResourceRef(kind='ConfigMap', name='a', namespace='ns'))]
    """

    objects: dict[ResourceRef, dict[str, Any]] = field(default_factory=_empty_objects)
    mutations: list[tuple[str, ResourceRef]] = field(default_factory=_empty_mutations)
    failures: dict[ResourceRef, ClusterAPIError] = field(default_factory=_empty_failures)
    never_ready: set[ResourceRef] = field(default_factory=_empty_refs)
    reachable: bool = True
    connections: list[ClusterTarget] = field(default_factory=_empty_targets)

    def connect(self, target: ClusterTarget, *, settings: ApplySettings) -> InMemoryCluster:
        """Return this cluster as the client for *target*."""
        self.connections.append(target)
        if not self.reachable:
            raise ClusterConnectionError(f"cannot reach cluster (context {target.context or '<current>'!r})")
        return self

    def fail_on(self, ref: ResourceRef, message: str = "injected failure", reason: str = "InternalError") -> None:
        """Make every write of *ref* raise a :class:`ClusterAPIError`."""
        self.failures[ref] = ClusterAPIError(message, reason=reason)

    def _store(self, verb: str, obj: Mapping[str, Any]) -> dict[str, Any]:
        ref = ResourceRef.from_object(obj)
        if ref in self.failures:
            raise self.failures[ref]
        stored = copy.deepcopy(dict(obj))
        if ref not in self.never_ready:
            stored["status"] = _ready_status(stored)
        self.objects[ref] = stored
        self.mutations.append((verb, ref))
        return copy.deepcopy(stored)

    def get(self, kind: str, name: str, namespace: str = "") -> dict[str, Any] | None:
        stored = self.objects.get(ResourceRef(kind, name, namespace))
        return copy.deepcopy(stored) if stored is not None else None

    def create(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        ref = ResourceRef.from_object(obj)
        if ref in self.objects:
            raise ClusterAPIError(f"{ref} already exists", reason="AlreadyExists")
        return self._store("create", obj)

    def apply(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        return self._store("apply", obj)

    def records(self) -> dict[ResourceRef, dict[str, Any]]:
        """Return the stored installed-state ConfigMaps."""
        return {
            ref: obj
            for ref, obj in self.objects.items()
            if ref.kind == "ConfigMap" and ref.name.startswith("installed-state")
        }


__all__ = ["InMemoryCluster"]

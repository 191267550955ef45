"""Apply the rendered objects of a resolved configuration to the cluster.

Each rendered object is stamped with a digest annotation. An object whose
live copy carries the same digest is left alone; everything else is written
with an upsert. Any per-object failure makes the whole run unhealthy, and
objects already written stay on the cluster.

Contents:
    * :class:`ObjectCache` - Per-run record of objects already handled.
    * :func:`object_digest` - Content digest of one object.
    * :class:`Reconciler` - Render, apply, report health.
"""

from __future__ import annotations

import copy
import hashlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, cast

import orjson

from ..domain.errors import ClusterAPIError
from ..domain.models import ReconcileFailed, ReconcileHealthy, ReconcileResult, ResolvedConfig, ResourceRef
from .ports import ClusterClient, DumpManifest, RenderObjects

logger = logging.getLogger(__name__)

#: Annotation holding the digest of the object as last applied.
DIGEST_ANNOTATION = "meshctl.dev/applied-digest"


def _empty_digests() -> dict[ResourceRef, str]:
    return {}


@dataclass
class ObjectCache:
    """Digests of the objects handled during one reconcile run.

    The orchestrator builds a new cache for every run and hands it to the
    :class:`Reconciler`, so nothing carries over between runs sharing a
    process.

    Example:
        >>> cache = ObjectCache()
        >>> ref = ResourceRef("Service", "a", "ns")
        >>> cache.contains(ref, "abc")
        False
        >>> cache.remember(ref, "abc")
        >>> cache.contains(ref, "abc")
        True
    """

    digests: dict[ResourceRef, str] = field(default_factory=_empty_digests)

    def contains(self, ref: ResourceRef, digest: str) -> bool:
        return self.digests.get(ref) == digest

    def remember(self, ref: ResourceRef, digest: str) -> None:
        self.digests[ref] = digest

    def __len__(self) -> int:
        return len(self.digests)


def _without_digest(obj: Mapping[str, Any]) -> dict[str, Any]:
    stripped = copy.deepcopy(dict(obj))
    annotations = stripped.get("metadata", {}).get("annotations")
    if isinstance(annotations, dict):
        cast("dict[str, Any]", annotations).pop(DIGEST_ANNOTATION, None)
        if not annotations:
            del stripped["metadata"]["annotations"]
    return stripped


def object_digest(obj: Mapping[str, Any]) -> str:
    """Return the sha256 of the object's canonical JSON, ignoring the digest annotation.

    Example:
        >>> a = object_digest({"kind": "Service", "metadata": {"name": "x"}})
        >>> b = object_digest({"metadata": {"name": "x"}, "kind": "Service"})
        >>> a == b and len(a) == 64
        True
    """
    canonical = orjson.dumps(_without_digest(obj), option=orjson.OPT_SORT_KEYS)
    return hashlib.sha256(canonical).hexdigest()


def stamp_digest(obj: Mapping[str, Any]) -> tuple[dict[str, Any], str]:
    """Return a copy of *obj* carrying its digest annotation, and the digest."""
    digest = object_digest(obj)
    stamped = _without_digest(obj)
    metadata = stamped.setdefault("metadata", {})
    metadata.setdefault("annotations", {})[DIGEST_ANNOTATION] = digest
    return stamped, digest


def live_digest(obj: Mapping[str, Any] | None) -> str:
    if obj is None:
        return ""
    annotations = obj.get("metadata", {}).get("annotations") or {}
    return str(annotations.get(DIGEST_ANNOTATION, ""))


class Reconciler:
    """Render a resolved configuration and converge the cluster towards it.

    Args:
        client: Cluster client used for reads and upserts.
        render: Computes the desired objects.
        dump: Serializes the desired objects into manifest text.
        cache: Fresh :class:`ObjectCache` owned by this reconciler.
    """

    def __init__(
        self,
        client: ClusterClient,
        *,
        render: RenderObjects,
        dump: DumpManifest,
        cache: ObjectCache,
    ) -> None:
        self._client = client
        self._render = render
        self._dump = dump
        self._cache = cache

    def reconcile(self, resolved: ResolvedConfig, *, dry_run: bool = False) -> ReconcileResult:
        """Apply every rendered object; report ERROR if any of them failed.

        Under ``dry_run`` live objects are still read to compute what would
        change, but nothing is written.
        """
        stamped = [stamp_digest(obj) for obj in self._render(resolved)]
        manifest = self._dump([obj for obj, _ in stamped])

        applied: list[ResourceRef] = []
        unchanged: list[ResourceRef] = []
        errors: list[str] = []

        for obj, digest in stamped:
            ref = ResourceRef.from_object(obj)
            if self._cache.contains(ref, digest):
                logger.debug("Skipping duplicate object", extra={"resource": str(ref)})
                continue
            self._cache.remember(ref, digest)
            try:
                if live_digest(self._client.get(ref.kind, ref.name, ref.namespace)) == digest:
                    unchanged.append(ref)
                    continue
                if not dry_run:
                    self._client.apply(obj)
            except ClusterAPIError as exc:
                logger.error("Failed to apply object", extra={"resource": str(ref), "error": str(exc)})
                errors.append(f"{ref}: {exc}")
                continue
            applied.append(ref)
            logger.info("Would apply object" if dry_run else "Applied object", extra={"resource": str(ref)})

        if errors:
            return ReconcileFailed(manifest=manifest, errors=tuple(errors), applied=tuple(applied))
        return ReconcileHealthy(manifest=manifest, applied=tuple(applied), unchanged=tuple(unchanged))


__all__ = [
    "DIGEST_ANNOTATION",
    "ObjectCache",
    "Reconciler",
    "live_digest",
    "object_digest",
    "stamp_digest",
]

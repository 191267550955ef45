"""Make sure the install namespace exists before anything is applied into it."""

from __future__ import annotations

import logging

from ..domain.errors import ClusterAPIError, ReconcileError
from .ports import ClusterClient

logger = logging.getLogger(__name__)


def namespace_object(name: str) -> dict[str, object]:
    """Return the manifest of namespace *name*.

    Example:
        >>> namespace_object("mesh-system")
        {'apiVersion': 'v1', 'kind': 'Namespace', 'metadata': {'name': 'mesh-system'}}
    """
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": name}}


class NamespacePreparer:
    """Create the target namespace if it is missing."""

    def __init__(self, client: ClusterClient) -> None:
        self._client = client

    def ensure(self, namespace: str, *, dry_run: bool = False) -> None:
        """Create *namespace* unless it exists; a no-op under dry-run.

        An existing namespace, whether found up front or reported as
        ``AlreadyExists`` by a concurrent create, counts as success.

        Raises:
            ReconcileError: If the namespace cannot be read or created.
        """
        if dry_run:
            logger.info("Dry run: not creating namespace", extra={"namespace": namespace})
            return
        try:
            if self._client.get("Namespace", namespace) is not None:
                logger.debug("Namespace already exists", extra={"namespace": namespace})
                return
            self._client.create(namespace_object(namespace))
        except ClusterAPIError as exc:
            if exc.reason == "AlreadyExists":
                return
            raise ReconcileError([f"Namespace/{namespace}: {exc}"]) from exc
        logger.info("Created namespace", extra={"namespace": namespace})


__all__ = ["NamespacePreparer", "namespace_object"]

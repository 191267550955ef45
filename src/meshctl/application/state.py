"""Persist the configuration of a successful install as a cluster record.

The record is a ConfigMap named ``installed-state`` or
``installed-state-<revision>`` in the install namespace. It is written with
an upsert, so each revision has at most one record and re-applying replaces
its content. The stored document is a ``MeshInstall`` resource, which can
be fed back to ``meshctl apply -f``.
"""

from __future__ import annotations

import logging
from typing import Any

from ..domain.errors import ClusterAPIError, PersistenceError
from ..domain.models import REVISION_LABEL, InstalledStateRecord, ResolvedConfig
from .ports import ClusterClient, DumpDocument

logger = logging.getLogger(__name__)

#: Key of the serialized configuration inside the ConfigMap.
RECORD_DATA_KEY = "spec.yaml"

INSTALL_API_VERSION = "meshctl.dev/v1alpha1"


class StateRecorder:
    """Write installed-state records.

    Args:
        client: Cluster client used for the upsert.
        dump: Serializer for the stored document.
    """

    def __init__(self, client: ClusterClient, *, dump: DumpDocument) -> None:
        self._client = client
        self._dump = dump

    def build_record(self, resolved: ResolvedConfig) -> InstalledStateRecord:
        """Compute the record for *resolved* without touching the cluster."""
        name = resolved.record_name
        document = {
            "apiVersion": INSTALL_API_VERSION,
            "kind": "MeshInstall",
            "metadata": {"name": name, "namespace": resolved.namespace},
            "spec": dict(resolved.spec),
        }
        return InstalledStateRecord(
            name=name,
            namespace=resolved.namespace,
            revision=resolved.revision,
            content=self._dump(document),
        )

    @staticmethod
    def record_object(record: InstalledStateRecord) -> dict[str, Any]:
        """Return the ConfigMap manifest that stores *record*."""
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": record.name,
                "namespace": record.namespace,
                "labels": {REVISION_LABEL: record.revision or "default"},
            },
            "data": {RECORD_DATA_KEY: record.content},
        }

    def persist(self, resolved: ResolvedConfig, *, dry_run: bool = False) -> InstalledStateRecord:
        """Upsert the record of *resolved*; only computed under dry-run.

        Raises:
            PersistenceError: If the cluster rejects the write. The install
                itself is already applied at that point.
        """
        record = self.build_record(resolved)
        if dry_run:
            logger.info("Dry run: not saving installed state", extra={"record": record.name})
            return record
        try:
            self._client.apply(self.record_object(record))
        except ClusterAPIError as exc:
            raise PersistenceError(
                f"install applied but saving {record.namespace}/{record.name} failed: {exc}; "
                "re-run the apply to record the installed state"
            ) from exc
        logger.info("Saved installed state", extra={"record": record.name, "namespace": record.namespace})
        return record


__all__ = [
    "INSTALL_API_VERSION",
    "RECORD_DATA_KEY",
    "StateRecorder",
]

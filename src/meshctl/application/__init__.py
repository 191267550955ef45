"""Application layer - the apply pipeline and its port definitions.

Contains the pipeline stages and the orchestrator that sequences them, plus
the Protocols that adapters implement.

Contents:
    * :mod:`.ports` - Protocol definitions for adapters
    * :mod:`.namespace` - :class:`NamespacePreparer`
    * :mod:`.reconcile` - :class:`Reconciler` and its per-run :class:`ObjectCache`
    * :mod:`.readiness` - :class:`ReadinessWaiter`
    * :mod:`.state` - :class:`StateRecorder`
    * :mod:`.apply` - :class:`ApplyOrchestrator`
"""

from __future__ import annotations

from .apply import ApplyOrchestrator
from .namespace import NamespacePreparer
from .ports import (
    ClusterClient,
    ConnectCluster,
    DisplayConfig,
    DumpDocument,
    DumpManifest,
    GetConfig,
    InitLogging,
    LoadApplySettings,
    ParseManifest,
    RenderObjects,
    ResolveConfig,
)
from .readiness import ReadinessWaiter
from .reconcile import ObjectCache, Reconciler
from .state import StateRecorder

__all__ = [
    "ApplyOrchestrator",
    "ClusterClient",
    "ConnectCluster",
    "DisplayConfig",
    "DumpDocument",
    "DumpManifest",
    "GetConfig",
    "InitLogging",
    "LoadApplySettings",
    "NamespacePreparer",
    "ObjectCache",
    "ParseManifest",
    "ReadinessWaiter",
    "Reconciler",
    "RenderObjects",
    "ResolveConfig",
    "StateRecorder",
]

"""In-memory adapter implementations for testing.

Provides lightweight implementations of the application ports that operate
entirely in memory -- no filesystem, no kubectl, no logging framework.

Contents:
    * :mod:`.cluster` - :class:`InMemoryCluster` client and connector
    * :mod:`.config` - In-memory configuration adapters
    * :mod:`.logging` - In-memory logging adapter
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .cluster import InMemoryCluster
from .config import display_config_in_memory, get_config_in_memory
from .logging import init_logging_in_memory

# Static conformance assertions
if TYPE_CHECKING:
    from meshctl.application.ports import ClusterClient, ConnectCluster, DisplayConfig, GetConfig, InitLogging

    _assert_get_config: GetConfig = get_config_in_memory
    _assert_display_config: DisplayConfig = display_config_in_memory
    _assert_init_logging: InitLogging = init_logging_in_memory
    _assert_cluster_client: ClusterClient = InMemoryCluster()
    _assert_connect_cluster: ConnectCluster = InMemoryCluster().connect

__all__ = [
    "InMemoryCluster",
    "display_config_in_memory",
    "get_config_in_memory",
    "init_logging_in_memory",
]

"""Composition root wiring adapters to application ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

# Configuration services
from ..adapters.config.display import display_config
from ..adapters.config.loader import get_config
from ..adapters.config.settings import ApplySettings, load_apply_settings

# Install configuration services
from ..adapters.install.render import render_objects
from ..adapters.install.resolver import resolve_config

# Cluster services
from ..adapters.kube.client import connect_cluster
from ..adapters.kube.manifest import dump_document, dump_manifest, parse_manifest

# Logging services
from ..adapters.logging.setup import init_logging
from ..application.apply import ApplyOrchestrator, StateListener

# Static conformance assertions: pyright verifies that each adapter function
# structurally satisfies its corresponding Protocol at type-check time.
if TYPE_CHECKING:
    from ..adapters.memory.cluster import InMemoryCluster
    from ..application.ports import (
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

    _assert_get_config: GetConfig = get_config
    _assert_display_config: DisplayConfig = display_config
    _assert_init_logging: InitLogging = init_logging
    _assert_load_apply_settings: LoadApplySettings = load_apply_settings
    _assert_resolve_config: ResolveConfig = resolve_config
    _assert_connect_cluster: ConnectCluster = connect_cluster
    _assert_render_objects: RenderObjects = render_objects
    _assert_dump_manifest: DumpManifest = dump_manifest
    _assert_parse_manifest: ParseManifest = parse_manifest
    _assert_dump_document: DumpDocument = dump_document


@dataclass(frozen=True, slots=True)
class AppServices:
    """Frozen container holding all application port implementations."""

    get_config: GetConfig
    display_config: DisplayConfig
    init_logging: InitLogging
    load_apply_settings: LoadApplySettings
    resolve_config: ResolveConfig
    connect_cluster: ConnectCluster
    render_objects: RenderObjects
    dump_manifest: DumpManifest
    parse_manifest: ParseManifest
    dump_document: DumpDocument

    def orchestrator(self, settings: ApplySettings, *, on_state: StateListener | None = None) -> ApplyOrchestrator:
        """Build an :class:`ApplyOrchestrator` from these services."""
        return ApplyOrchestrator(
            settings=settings,
            resolve_config=self.resolve_config,
            connect_cluster=self.connect_cluster,
            render_objects=self.render_objects,
            dump_manifest=self.dump_manifest,
            parse_manifest=self.parse_manifest,
            dump_document=self.dump_document,
            on_state=on_state,
        )


def build_production() -> AppServices:
    """Wire production adapters into an AppServices container."""
    return AppServices(
        get_config=get_config,
        display_config=display_config,
        init_logging=init_logging,
        load_apply_settings=load_apply_settings,
        resolve_config=resolve_config,
        connect_cluster=connect_cluster,
        render_objects=render_objects,
        dump_manifest=dump_manifest,
        parse_manifest=parse_manifest,
        dump_document=dump_document,
    )


def build_testing(*, cluster: InMemoryCluster | None = None) -> AppServices:
    """Wire in-memory adapters into an AppServices container.

    Args:
        cluster: Cluster the pipeline talks to. When None, a fresh empty
            :class:`InMemoryCluster` is created. Pass your own to assert on
            stored objects and recorded mutations.

    Returns:
        AppServices whose configuration and cluster adapters never touch
        disk or kubectl, with a quiet logging runtime.
    """
    from ..adapters.memory import (
        InMemoryCluster,
        display_config_in_memory,
        get_config_in_memory,
        init_logging_in_memory,
    )

    target_cluster = cluster if cluster is not None else InMemoryCluster()

    return AppServices(
        get_config=get_config_in_memory,
        display_config=display_config_in_memory,
        init_logging=init_logging_in_memory,
        load_apply_settings=load_apply_settings,
        resolve_config=resolve_config,
        connect_cluster=target_cluster.connect,
        render_objects=render_objects,
        dump_manifest=dump_manifest,
        parse_manifest=parse_manifest,
        dump_document=dump_document,
    )


__all__ = [
    # Configuration
    "get_config",
    "display_config",
    "load_apply_settings",
    # Install
    "resolve_config",
    "render_objects",
    # Cluster
    "connect_cluster",
    "dump_manifest",
    "parse_manifest",
    "dump_document",
    # Logging
    "init_logging",
    # Composition
    "AppServices",
    "build_production",
    "build_testing",
]

"""Apply orchestration: the single entry point for installs.

One run walks through a fixed sequence of states::

    START -> CONFIG_RESOLVED -> NAMESPACE_READY -> RECONCILED
          -> [WAITED_READY] -> PERSISTED -> DONE

Each state is a precondition for the next. The first failing stage ends the
run in ``FAILED``; nothing is retried and nothing is rolled back. ``force``
only relaxes configuration validation, never a reconcile error or a
readiness timeout. ``dry_run`` suppresses every cluster write but still
walks all states.

Contents:
    * :class:`ApplyOrchestrator` - Sequences resolver, namespace preparer,
      reconciler, readiness waiter and state recorder.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..domain.enums import ApplyState
from ..domain.errors import ApplyError, ReconcileError
from ..domain.models import ApplyReport, ApplyRequest, ReconcileFailed, ResourceRef
from .namespace import NamespacePreparer
from .ports import (
    ClusterClient,
    ConnectCluster,
    DumpDocument,
    DumpManifest,
    ParseManifest,
    RenderObjects,
    ResolveConfig,
)
from .readiness import ReadinessWaiter
from .reconcile import ObjectCache, Reconciler
from .state import StateRecorder

if TYPE_CHECKING:
    from ..adapters.config.settings import ApplySettings

logger = logging.getLogger(__name__)

StateListener = Callable[[ApplyState], None]


class ApplyOrchestrator:
    """Run the apply pipeline for one :class:`ApplyRequest` at a time.

    Collaborators are injected as port callables. The stage objects are
    built per run by the ``_*`` factory methods, which tests override to
    inject faults.

    Args:
        settings: Validated ``[apply]`` settings.
        resolve_config: Files and overlays to resolved configuration.
        connect_cluster: Cluster client factory.
        render_objects: Desired objects of a resolved configuration.
        dump_manifest: Objects to manifest text.
        parse_manifest: Manifest text to objects.
        dump_document: Serializer of the installed-state document.
        on_state: Called with every state the run enters.
    """

    def __init__(
        self,
        *,
        settings: ApplySettings,
        resolve_config: ResolveConfig,
        connect_cluster: ConnectCluster,
        render_objects: RenderObjects,
        dump_manifest: DumpManifest,
        parse_manifest: ParseManifest,
        dump_document: DumpDocument,
        on_state: StateListener | None = None,
    ) -> None:
        self._settings = settings
        self._resolve_config = resolve_config
        self._connect_cluster = connect_cluster
        self._render_objects = render_objects
        self._dump_manifest = dump_manifest
        self._parse_manifest = parse_manifest
        self._dump_document = dump_document
        self._on_state = on_state

    # Stage factories ------------------------------------------------------

    def _namespace_preparer(self, client: ClusterClient) -> NamespacePreparer:
        return NamespacePreparer(client)

    def _reconciler(self, client: ClusterClient, cache: ObjectCache) -> Reconciler:
        return Reconciler(client, render=self._render_objects, dump=self._dump_manifest, cache=cache)

    def _readiness_waiter(self, client: ClusterClient) -> ReadinessWaiter:
        return ReadinessWaiter(client, poll_interval=self._settings.poll_interval)

    def _state_recorder(self, client: ClusterClient) -> StateRecorder:
        return StateRecorder(client, dump=self._dump_document)

    # Pipeline -------------------------------------------------------------

    def run(self, request: ApplyRequest) -> ApplyReport:
        """Execute the pipeline for *request*.

        Returns:
            Report of the successful run, including the visited states.

        Raises:
            ApplyError: The subclass names the failing stage; its ``states``
                attribute lists the visited states ending in ``FAILED``.
        """
        states: list[ApplyState] = []

        def enter(state: ApplyState) -> None:
            states.append(state)
            logger.debug("Apply state changed", extra={"state": state.value})
            if self._on_state is not None:
                self._on_state(state)

        enter(ApplyState.START)
        try:
            return self._run(request, enter, states)
        except ApplyError as exc:
            enter(ApplyState.FAILED)
            exc.states = tuple(states)
            logger.error(
                "Apply failed",
                extra={"error_type": type(exc).__name__, "states": [state.value for state in states]},
            )
            raise

    def _run(
        self, request: ApplyRequest, enter: Callable[[ApplyState], None], states: list[ApplyState]
    ) -> ApplyReport:
        resolved = self._resolve_config(
            request.filenames,
            request.overlays,
            force=request.force,
            default_namespace=self._settings.default_namespace,
        )
        enter(ApplyState.CONFIG_RESOLVED)
        logger.info(
            "Resolved install configuration",
            extra={"profile": resolved.profile, "revision": resolved.revision or "default", "dry_run": request.dry_run},
        )

        client = self._connect_cluster(request.target, settings=self._settings)

        self._namespace_preparer(client).ensure(resolved.namespace, dry_run=request.dry_run)
        enter(ApplyState.NAMESPACE_READY)

        result = self._reconciler(client, ObjectCache()).reconcile(resolved, dry_run=request.dry_run)
        if isinstance(result, ReconcileFailed):
            raise ReconcileError(result.errors)
        enter(ApplyState.RECONCILED)

        if request.wait:
            try:
                objects = self._parse_manifest(result.manifest)
            except ValueError as exc:
                raise ReconcileError([f"cannot read applied manifest: {exc}"]) from exc
            resources = tuple(ResourceRef.from_object(obj) for obj in objects)
            self._readiness_waiter(client).wait_ready(resources, request.wait_timeout, dry_run=request.dry_run)
            enter(ApplyState.WAITED_READY)

        record = self._state_recorder(client).persist(resolved, dry_run=request.dry_run)
        enter(ApplyState.PERSISTED)
        enter(ApplyState.DONE)

        return ApplyReport(
            states=tuple(states),
            record_name=record.name,
            manifest=result.manifest,
            warnings=resolved.warnings,
            applied=result.applied,
            unchanged=result.unchanged,
            dry_run=request.dry_run,
        )


__all__ = ["ApplyOrchestrator", "StateListener"]

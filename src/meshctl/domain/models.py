"""Value objects passed between the stages of the apply pipeline.

All types are frozen dataclasses: a run builds each of them once and never
mutates them afterwards.

Contents:
    * :class:`ClusterTarget` - kubeconfig path and context name.
    * :class:`Overlay` - one typed ``path=value`` assignment.
    * :class:`ApplyRequest` - immutable input of one orchestration run.
    * :class:`ResolvedConfig` - merged, validated install configuration.
    * :class:`InstalledStateRecord` - persisted snapshot of a resolved config.
    * :class:`ResourceRef` - identity of one cluster resource.
    * :class:`ReconcileHealthy` / :class:`ReconcileFailed` - reconcile outcome.
    * :class:`ApplyReport` - summary of a successful run.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import ApplyState, InstallStatus

#: Name prefix of every installed-state record.
INSTALLED_STATE_PREFIX = "installed-state"

#: Label carrying the revision on rendered resources and state records.
REVISION_LABEL = "meshctl.dev/revision"


def installed_state_name(revision: str) -> str:
    """Return the record name for *revision*.

    Example:
        >>> installed_state_name("")
        'installed-state'
        >>> installed_state_name("canary")
        'installed-state-canary'
    """
    if not revision:
        return INSTALLED_STATE_PREFIX
    return f"{INSTALLED_STATE_PREFIX}-{revision}"


@dataclass(frozen=True, slots=True)
class ClusterTarget:
    """Connection descriptor handed to the cluster client factory.

    Empty strings mean "use the kubectl default".
    """

    kubeconfig: str = ""
    context: str = ""


@dataclass(frozen=True, slots=True)
class Overlay:
    """A single ``path=value`` assignment into the install configuration.

    Example:
        >>> Overlay(("values", "grafana", "enabled"), True).dotted
        'values.grafana.enabled'
    """

    path: tuple[str, ...]
    value: Any

    @property
    def dotted(self) -> str:
        return ".".join(part.replace(".", "\\.") for part in self.path)


@dataclass(frozen=True, slots=True)
class ApplyRequest:
    """Immutable input of one orchestration run.

    Attributes:
        filenames: Install configuration files, merged in order.
        overlays: Assignments applied after the files, later ones win.
        target: Cluster connection descriptor.
        force: Continue past validation problems (logged as warnings).
        dry_run: Compute everything but do not mutate the cluster.
        verbose: Callers may print the full manifest.
        wait: Block until the applied resources are ready.
        wait_timeout: Readiness timeout in seconds; ``0`` checks once.
    """

    filenames: tuple[str, ...] = ()
    overlays: tuple[Overlay, ...] = ()
    target: ClusterTarget = field(default_factory=ClusterTarget)
    force: bool = False
    dry_run: bool = False
    verbose: bool = False
    wait: bool = False
    wait_timeout: float = 300.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.wait_timeout):
            raise ValueError(f"wait_timeout must be finite, got {self.wait_timeout}")
        if self.wait_timeout < 0:
            raise ValueError(f"wait_timeout must not be negative, got {self.wait_timeout}")


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """The merged and validated install configuration of one run.

    Attributes:
        profile: Name of the profile the configuration was built on.
        namespace: Namespace the control plane is installed into.
        revision: Revision label, ``""`` for the default revision.
        spec: Complete install tree (profile, files and overlays merged).
        warnings: Validation problems tolerated because of ``force``.
    """

    profile: str
    namespace: str
    revision: str
    spec: Mapping[str, Any]
    warnings: tuple[str, ...] = ()

    @property
    def record_name(self) -> str:
        return installed_state_name(self.revision)


@dataclass(frozen=True, slots=True)
class InstalledStateRecord:
    """Snapshot of a resolved config as stored in the cluster."""

    name: str
    namespace: str
    revision: str
    content: str


@dataclass(frozen=True, slots=True, order=True)
class ResourceRef:
    """Identity of one cluster resource.

    Example:
        >>> str(ResourceRef("Deployment", "mesh-controller", "mesh-system"))
        'Deployment/mesh-system/mesh-controller'
        >>> str(ResourceRef("Namespace", "mesh-system"))
        'Namespace/mesh-system'
    """

    kind: str
    name: str
    namespace: str = ""

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> ResourceRef:
        metadata: Mapping[str, Any] = obj.get("metadata") or {}
        return cls(
            kind=str(obj.get("kind", "")),
            name=str(metadata.get("name", "")),
            namespace=str(metadata.get("namespace") or ""),
        )


@dataclass(frozen=True, slots=True)
class ReconcileHealthy:
    """Every rendered resource is present on the cluster (or would be, in dry-run).

    Attributes:
        manifest: Multi-document YAML of the rendered resources.
        applied: Resources written during this run; under dry-run, the
            resources that would have been written.
        unchanged: Resources skipped because the live copy already matched.
    """

    manifest: str
    applied: tuple[ResourceRef, ...] = ()
    unchanged: tuple[ResourceRef, ...] = ()

    @property
    def status(self) -> InstallStatus:
        return InstallStatus.HEALTHY


@dataclass(frozen=True, slots=True)
class ReconcileFailed:
    """At least one resource could not be applied.

    Attributes:
        manifest: Multi-document YAML of the rendered resources.
        errors: One line per failed resource, never empty.
        applied: Resources written before or after the failures.
    """

    manifest: str
    errors: tuple[str, ...]
    applied: tuple[ResourceRef, ...] = ()

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError("ReconcileFailed requires at least one error")

    @property
    def status(self) -> InstallStatus:
        return InstallStatus.ERROR


ReconcileResult = ReconcileHealthy | ReconcileFailed


@dataclass(frozen=True, slots=True)
class ApplyReport:
    """Summary of a successful orchestration run."""

    states: tuple[ApplyState, ...]
    record_name: str
    manifest: str
    warnings: tuple[str, ...] = ()
    applied: tuple[ResourceRef, ...] = ()
    unchanged: tuple[ResourceRef, ...] = ()
    dry_run: bool = False


__all__ = [
    "INSTALLED_STATE_PREFIX",
    "REVISION_LABEL",
    "ApplyReport",
    "ApplyRequest",
    "ClusterTarget",
    "InstalledStateRecord",
    "Overlay",
    "ReconcileFailed",
    "ReconcileHealthy",
    "ReconcileResult",
    "ResolvedConfig",
    "ResourceRef",
    "installed_state_name",
]

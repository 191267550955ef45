"""Application ports: Protocol definitions for adapter functions and clients.

Callable protocols define a ``__call__`` whose signature matches the
corresponding adapter function, so module-level functions satisfy them by
structural subtyping (PEP 544). :class:`ClusterClient` is a method protocol
implemented by the kubectl adapter and the in-memory cluster.

System Role:
    Sits between domain and adapters. Infrastructure types (``Config``) are
    imported under ``TYPE_CHECKING`` only so that the layer contracts hold at
    runtime.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from ..domain.enums import OutputFormat
from ..domain.models import ClusterTarget, Overlay, ResolvedConfig

if TYPE_CHECKING:
    from lib_layered_config import Config

    from ..adapters.config.settings import ApplySettings


class ClusterClient(Protocol):
    """Typed access to cluster resources.

    Every method raises :class:`~meshctl.domain.errors.ClusterAPIError` when
    the API call fails.
    """

    def get(self, kind: str, name: str, namespace: str = "") -> dict[str, Any] | None:
        """Return the live object or ``None`` when it does not exist."""
        ...

    def create(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        """Create *obj*; fails with reason ``AlreadyExists`` if present."""
        ...

    def apply(self, obj: Mapping[str, Any]) -> dict[str, Any]:
        """Create or overwrite *obj* (upsert) and return the stored object."""
        ...


class ConnectCluster(Protocol):
    """Build a cluster client for a connection descriptor."""

    def __call__(self, target: ClusterTarget, *, settings: ApplySettings) -> ClusterClient: ...


class ResolveConfig(Protocol):
    """Merge install files and overlays into a validated configuration."""

    def __call__(
        self,
        filenames: Sequence[str],
        overlays: Sequence[Overlay],
        *,
        force: bool = ...,
        default_namespace: str = ...,
    ) -> ResolvedConfig: ...


class RenderObjects(Protocol):
    """Compute the desired cluster objects of a resolved configuration."""

    def __call__(self, resolved: ResolvedConfig) -> list[dict[str, Any]]: ...


class DumpManifest(Protocol):
    """Serialize cluster objects into multi-document manifest text."""

    def __call__(self, objects: Sequence[Mapping[str, Any]]) -> str: ...


class DumpDocument(Protocol):
    """Serialize one object into a stable YAML document."""

    def __call__(self, obj: Mapping[str, Any]) -> str: ...


class ParseManifest(Protocol):
    """Parse manifest text back into cluster objects."""

    def __call__(self, text: str) -> list[dict[str, Any]]: ...


class GetConfig(Protocol):
    """Load layered configuration with application defaults."""

    def __call__(self, *, profile: str | None = ..., start_dir: str | None = ...) -> Config: ...


class LoadApplySettings(Protocol):
    """Parse the ``[apply]`` section of the layered configuration."""

    def __call__(self, config: Config) -> ApplySettings: ...


class DisplayConfig(Protocol):
    """Display the provided configuration in the requested format."""

    def __call__(
        self, config: Config, *, output_format: OutputFormat = ..., section: str | None = ..., profile: str | None = ...
    ) -> None: ...


class InitLogging(Protocol):
    """Initialize lib_log_rich runtime with the provided configuration."""

    def __call__(self, config: Config) -> None: ...


__all__ = [
    "ClusterClient",
    "ConnectCluster",
    "DisplayConfig",
    "DumpDocument",
    "DumpManifest",
    "GetConfig",
    "InitLogging",
    "LoadApplySettings",
    "ParseManifest",
    "RenderObjects",
    "ResolveConfig",
]

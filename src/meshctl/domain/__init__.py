"""Domain layer - pure business logic with no I/O or framework dependencies.

Contains the value objects, enumerations, error types and readiness rules
that the apply pipeline is built from.

Contents:
    * :mod:`.enums` - Domain enumerations (ApplyState, InstallStatus, OutputFormat)
    * :mod:`.errors` - Domain exception types
    * :mod:`.models` - Pipeline value objects
    * :mod:`.readiness` - Readiness predicates for live cluster objects
"""

from __future__ import annotations

from .enums import ApplyState, InstallStatus, OutputFormat
from .errors import (
    ApplyError,
    ClusterAPIError,
    ClusterConnectionError,
    ConfigurationError,
    ConfigValidationError,
    PersistenceError,
    ReadinessTimeoutError,
    ReconcileError,
)
from .models import (
    ApplyReport,
    ApplyRequest,
    ClusterTarget,
    InstalledStateRecord,
    Overlay,
    ReconcileFailed,
    ReconcileHealthy,
    ReconcileResult,
    ResolvedConfig,
    ResourceRef,
    installed_state_name,
)

__all__ = [
    # Enums
    "ApplyState",
    "InstallStatus",
    "OutputFormat",
    # Errors
    "ApplyError",
    "ClusterAPIError",
    "ClusterConnectionError",
    "ConfigValidationError",
    "ConfigurationError",
    "PersistenceError",
    "ReadinessTimeoutError",
    "ReconcileError",
    # Models
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

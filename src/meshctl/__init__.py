"""Public package surface exposing the apply pipeline, metadata, and configuration.

This module provides the stable public API for the package, routing imports
through the proper architectural layers:
- Domain exports: Request, report and error types
- Application exports: The apply orchestrator
- Composition exports: Wired adapter services (configuration, production wiring)
- Metadata: Package information
"""

from __future__ import annotations

# Metadata
from .__init__conf__ import print_info

# Application exports
from .application.apply import ApplyOrchestrator

# Composition exports (wired adapters)
from .composition import build_production, get_config, resolve_config

# Domain exports
from .domain.errors import (
    ApplyError,
    ClusterConnectionError,
    ConfigValidationError,
    PersistenceError,
    ReadinessTimeoutError,
    ReconcileError,
)
from .domain.models import ApplyReport, ApplyRequest, ClusterTarget, Overlay

__all__ = [
    "ApplyError",
    "ApplyOrchestrator",
    "ApplyReport",
    "ApplyRequest",
    "ClusterConnectionError",
    "ClusterTarget",
    "ConfigValidationError",
    "Overlay",
    "PersistenceError",
    "ReadinessTimeoutError",
    "ReconcileError",
    "build_production",
    "get_config",
    "print_info",
    "resolve_config",
]

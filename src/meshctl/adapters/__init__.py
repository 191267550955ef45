"""Adapters layer - infrastructure and framework integrations.

Connects the apply pipeline to kubectl, the filesystem, configuration and
the command line.

Contents:
    * :mod:`.cli` - rich-click command line interface
    * :mod:`.config` - Application configuration, overrides and overlays
    * :mod:`.install` - Install profiles, resolution and rendering
    * :mod:`.kube` - kubectl cluster client and manifest codec
    * :mod:`.logging` - Logging setup with lib_log_rich
    * :mod:`.memory` - In-memory doubles for tests
"""

from __future__ import annotations

__all__: list[str] = []

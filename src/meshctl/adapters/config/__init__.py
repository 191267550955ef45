"""Configuration adapter - application settings, overrides and install overlays.

Provides adapters for application configuration using lib_layered_config.

Contents:
    * :mod:`.loader` - Layered configuration loading with caching
    * :mod:`.display` - Configuration display in human/JSON formats
    * :mod:`.overrides` - Root ``--override`` parsing and application
    * :mod:`.overlays` - ``apply --set`` parsing into typed overlays
    * :mod:`.settings` - Validated ``[apply]`` settings
"""

from __future__ import annotations

from .display import display_config
from .loader import get_config, get_default_config_path
from .overlays import parse_overlay, parse_overlays
from .overrides import apply_overrides
from .settings import ApplySettings, load_apply_settings, parse_duration

__all__ = [
    "ApplySettings",
    "apply_overrides",
    "display_config",
    "get_config",
    "get_default_config_path",
    "load_apply_settings",
    "parse_duration",
    "parse_overlay",
    "parse_overlays",
]

"""CLI command implementations.

Collects all subcommand functions and re-exports them for registration
with the root CLI group.

Contents:
    * Apply and install commands from :mod:`.apply_cmd`
    * Config command from :mod:`.config`
    * Info command from :mod:`.info`
"""

from __future__ import annotations

from .apply_cmd import cli_apply, cli_install
from .config import cli_config
from .info import cli_info

__all__ = [
    "cli_apply",
    "cli_config",
    "cli_info",
    "cli_install",
]

"""Per-invocation CLI state shared between the root group and its commands.

The root group resolves the layered configuration once, applies the
``--override`` values and stores the result here. Commands read the
configuration, validate the ``[apply]`` section, or reload the
configuration for another profile through the stored :class:`CLIContext`.

Contents:
    * :class:`CLIContext` - Typed ``ctx.obj`` of every subcommand.
    * :func:`store_cli_context` / :func:`get_cli_context` - Click glue.
    * :class:`TracebackState` and helpers - Save and restore the
      ``lib_cli_exit_tools`` traceback flags around a run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import lib_cli_exit_tools
import rich_click as click
from lib_layered_config import Config

from meshctl.adapters.config.overrides import apply_overrides
from meshctl.domain.errors import ConfigurationError

from .exit_codes import ExitCode

if TYPE_CHECKING:
    from meshctl.adapters.config.settings import ApplySettings
    from meshctl.composition import AppServices

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CLIContext:
    """Typed CLI context for Click subcommand access.

    Attributes:
        traceback: Whether ``--traceback`` was given.
        config: Configuration after the root ``--override`` values.
        services: Services built by the factory passed to the root group.
        profile: Root ``--profile``, if any.
        overrides: Raw ``--override`` strings, kept so a profile reload can
            reapply them.
    """

    traceback: bool
    config: Config
    services: AppServices
    profile: str | None = None
    overrides: tuple[str, ...] = ()

    def apply_settings(self) -> ApplySettings:
        """Validate the ``[apply]`` section, exiting with ``CONFIG_ERROR`` when it is invalid.

        Example:
            >>> from meshctl.composition import build_testing
            >>> services = build_testing()
            >>> ctx = CLIContext(traceback=False, config=services.get_config(), services=services)
            >>> ctx.apply_settings().kubectl
            'kubectl'
        """
        try:
            return self.services.load_apply_settings(self.config)
        except ConfigurationError as exc:
            logger.error("Invalid application settings", extra={"error": str(exc)})
            click.echo(f"\nError: {exc}", err=True)
            raise SystemExit(ExitCode.CONFIG_ERROR) from exc

    def config_for(self, profile: str | None) -> tuple[Config, str | None]:
        """Return the stored config, or reload it when *profile* differs from the root one.

        A reload reapplies the root ``--override`` values.
        """
        if not profile:
            return self.config, self.profile
        config = self.services.get_config(profile=profile)
        return apply_overrides(config, self.overrides), profile


def store_cli_context(
    ctx: click.Context,
    *,
    traceback: bool,
    config: Config,
    services: AppServices,
    profile: str | None = None,
    overrides: tuple[str, ...] = (),
) -> None:
    """Replace the services factory in ``ctx.obj`` with the populated :class:`CLIContext`.

    Example:
        >>> from unittest.mock import MagicMock
        >>> from meshctl.composition import build_testing
        >>> ctx = MagicMock()
        >>> store_cli_context(ctx, traceback=True, config=MagicMock(), services=build_testing(), profile="test")
        >>> ctx.obj.profile
        'test'
    """
    ctx.obj = CLIContext(
        traceback=traceback,
        config=config,
        services=services,
        profile=profile,
        overrides=overrides,
    )


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Return the :class:`CLIContext` stored by the root group.

    Raises:
        RuntimeError: If the root group did not run first.
    """
    if not isinstance(ctx.obj, CLIContext):
        raise RuntimeError("CLI context not initialized. Call store_cli_context first.")
    return ctx.obj


class TracebackState(NamedTuple):
    """``lib_cli_exit_tools`` traceback flags at one point in time."""

    traceback: bool
    force_color: bool


def apply_traceback_preferences(enabled: bool) -> None:
    """Turn full, coloured tracebacks on or off for error output.

    Example:
        >>> apply_traceback_preferences(True)
        >>> bool(lib_cli_exit_tools.config.traceback)
        True
        >>> apply_traceback_preferences(False)
    """
    lib_cli_exit_tools.config.traceback = bool(enabled)
    lib_cli_exit_tools.config.traceback_force_color = bool(enabled)


def snapshot_traceback_state() -> TracebackState:
    config = lib_cli_exit_tools.config
    return TracebackState(
        traceback=bool(getattr(config, "traceback", False)),
        force_color=bool(getattr(config, "traceback_force_color", False)),
    )


def restore_traceback_state(state: TracebackState) -> None:
    """Put back flags captured by :func:`snapshot_traceback_state`."""
    lib_cli_exit_tools.config.traceback = state.traceback
    lib_cli_exit_tools.config.traceback_force_color = state.force_color


__all__ = [
    "CLIContext",
    "TracebackState",
    "apply_traceback_preferences",
    "get_cli_context",
    "restore_traceback_state",
    "snapshot_traceback_state",
    "store_cli_context",
]

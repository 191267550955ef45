"""Root ``meshctl`` command group and global option handling.

Handles the global ``--traceback``, ``--profile`` and ``--override`` flags,
loads the layered application configuration once and hands it to the
subcommands through :class:`~.context.CLIContext`.

Contents:
    * :func:`cli` - Root command group with global options.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import rich_click as click
from lib_layered_config import Config

from meshctl import __init__conf__
from meshctl.adapters.config.overrides import apply_overrides

from .constants import CLICK_CONTEXT_SETTINGS
from .context import apply_traceback_preferences, store_cli_context

if TYPE_CHECKING:
    from meshctl.composition import AppServices


def _apply_cli_overrides(config: Config, overrides: tuple[str, ...]) -> Config:
    """Apply ``--override`` values to *config*, raising UsageError on failure."""
    try:
        return apply_overrides(config, overrides)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--profile",
    type=str,
    default=None,
    help="Load application configuration from a named profile (e.g., 'staging')",
)
@click.option(
    "--override",
    "overrides",
    multiple=True,
    default=(),
    metavar="SECTION.KEY=VALUE",
    help="Override an application setting for this run (repeatable), e.g. apply.poll_interval=1",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, profile: str | None, overrides: tuple[str, ...]) -> None:
    """Root command storing global flags and syncing shared traceback state.

    ``ctx.obj`` arrives as the services factory (production or testing) and
    leaves as the populated :class:`~.context.CLIContext`.

    Example:
        >>> from click.testing import CliRunner
        >>> from meshctl.composition import build_testing
        >>> result = CliRunner().invoke(cli, ["info"], obj=build_testing)
        >>> result.exit_code
        0
    """
    if not callable(ctx.obj):
        raise RuntimeError("Services factory not provided. This is a bug.")
    services: AppServices = ctx.obj()  # type: ignore[assignment]  # Click's obj is typed as Any
    config = services.get_config(profile=profile)
    config = _apply_cli_overrides(config, overrides)
    services.init_logging(config)
    store_cli_context(
        ctx,
        traceback=traceback,
        config=config,
        services=services,
        profile=profile,
        overrides=overrides,
    )
    apply_traceback_preferences(traceback)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Commands import package ancestors, so registration is deferred until
# ``cli`` exists.
def _register_commands() -> None:
    from .commands import cli_apply, cli_config, cli_info, cli_install

    for cmd in (cli_apply, cli_install, cli_config, cli_info):
        cli.add_command(cmd)


_register_commands()


__all__ = ["cli"]

"""``meshctl apply`` / ``meshctl install`` - resolve, apply and record an install.

Both commands are identical; ``install`` exists for users coming from other
mesh installers.

Contents:
    * :func:`cli_apply` - Apply an install configuration to the cluster.
    * :func:`cli_install` - Alias of :func:`cli_apply`.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any

import lib_log_rich.runtime
import rich_click as click

from meshctl.adapters.config.overlays import parse_overlays
from meshctl.adapters.config.settings import ApplySettings, parse_duration
from meshctl.adapters.install.profiles import DEFAULT_PROFILE
from meshctl.domain.errors import ApplyError
from meshctl.domain.models import ApplyReport, ApplyRequest, ClusterTarget, Overlay

from ..constants import CLICK_CONTEXT_SETTINGS
from ..context import get_cli_context
from ..exit_codes import ExitCode, report_apply_error

logger = logging.getLogger(__name__)

_CHARTS_OVERLAY_PATH = ("installPackagePath",)


def apply_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by ``apply`` and ``install``."""
    options = [
        click.option(
            "-f",
            "--filename",
            "filenames",
            multiple=True,
            type=click.Path(dir_okay=False, path_type=str),
            help="Install configuration file (repeatable; later files win)",
        ),
        click.option("-c", "--kubeconfig", default="", help="Path to the kubeconfig file"),
        click.option("--context", "kube_context", default="", help="Name of the kubeconfig context to use"),
        click.option(
            "-y",
            "--skip-confirmation",
            is_flag=True,
            default=False,
            help="Do not ask for confirmation before installing",
        ),
        click.option(
            "--force",
            is_flag=True,
            default=False,
            help="Proceed even if the install configuration has validation problems",
        ),
        click.option(
            "--readiness-timeout",
            default=None,
            metavar="DURATION",
            help="How long to wait for resources to become ready, e.g. 300s or 5m (default: apply.readiness_timeout)",
        ),
        click.option(
            "-w",
            "--wait",
            is_flag=True,
            default=False,
            help="Wait until the installed resources are ready",
        ),
        click.option(
            "-s",
            "--set",
            "set_values",
            multiple=True,
            metavar="PATH=VALUE",
            help="Override an install configuration value (repeatable), e.g. values.grafana.enabled=true",
        ),
        click.option(
            "-d",
            "--charts",
            default=None,
            type=click.Path(file_okay=False, path_type=str),
            help="Directory holding profiles/<name>.yaml to use instead of the bundled profiles",
        ),
        click.option(
            "--dry-run",
            is_flag=True,
            default=False,
            help="Compute and print the result without changing the cluster",
        ),
        click.option("--verbose", is_flag=True, default=False, help="Print the full rendered manifest"),
    ]
    return functools.reduce(lambda f, opt: opt(f), reversed(options), func)


def _readiness_timeout(raw: str | None, settings: ApplySettings) -> float:
    if raw is None:
        return settings.readiness_timeout
    try:
        return parse_duration(raw)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--readiness-timeout'") from exc


def _overlays(set_values: tuple[str, ...], charts: str | None) -> tuple[Overlay, ...]:
    """Parse ``--set`` values; ``--charts`` becomes a trailing overlay."""
    try:
        overlays = parse_overlays(set_values)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--set'") from exc
    if charts:
        overlays += (Overlay(_CHARTS_OVERLAY_PATH, charts),)
    return overlays


def _confirm_default_install() -> bool:
    """Ask before installing the bare default profile."""
    try:
        return click.confirm(
            f"This will install the {DEFAULT_PROFILE!r} profile into the cluster. Proceed?",
            default=False,
        )
    except click.Abort:
        return False


def _report_success(report: ApplyReport, *, verbose: bool) -> None:
    for warning in report.warnings:
        click.echo(f"! {warning}", err=True)
    if verbose and report.manifest:
        click.echo(report.manifest, nl=False)
    for ref in report.applied:
        click.echo(f"✔ {ref} {'would be applied' if report.dry_run else 'applied'}")
    if report.unchanged:
        click.echo(f"  {len(report.unchanged)} resource(s) unchanged")
    suffix = " (dry run)" if report.dry_run else ""
    click.echo(f"✔ Installation complete{suffix}")
    click.echo(f"  installed state: {report.record_name}")


def _run_apply(ctx: click.Context, command: str, **options: Any) -> None:
    cli_ctx = get_cli_context(ctx)
    filenames: tuple[str, ...] = options["filenames"]
    set_values: tuple[str, ...] = options["set_values"]
    dry_run: bool = options["dry_run"]

    overlays = _overlays(set_values, options["charts"])
    settings = cli_ctx.apply_settings()
    request = ApplyRequest(
        filenames=filenames,
        overlays=overlays,
        target=ClusterTarget(kubeconfig=options["kubeconfig"], context=options["kube_context"]),
        force=options["force"],
        dry_run=dry_run,
        verbose=options["verbose"],
        wait=options["wait"],
        wait_timeout=_readiness_timeout(options["readiness_timeout"], settings),
    )

    if not (filenames or overlays or dry_run or options["skip_confirmation"]) and not _confirm_default_install():
        click.echo("Cancelled.")
        raise SystemExit(ExitCode.GENERAL_ERROR)

    extra = {"command": command, "files": list(filenames), "dry_run": dry_run, "wait": request.wait}
    with lib_log_rich.runtime.bind(job_id=f"cli-{command}", extra=extra):
        logger.info("Starting apply", extra={"overlays": [overlay.dotted for overlay in overlays]})
        try:
            report = cli_ctx.services.orchestrator(settings).run(request)
        except ApplyError as exc:
            raise SystemExit(report_apply_error(exc)) from exc
        _report_success(report, verbose=request.verbose)


@click.command("apply", context_settings=CLICK_CONTEXT_SETTINGS)
@apply_options
@click.pass_context
def cli_apply(ctx: click.Context, **options: Any) -> None:
    r"""Apply an install configuration to the cluster.

    Resolves the configuration from a profile, the given files and ``--set``
    values, ensures the install namespace exists, applies the rendered
    resources, optionally waits until they are ready, and records the
    resolved configuration as the installed state of its revision.

    \b
    Exit codes:
    - 1:   resources could not be applied, or the prompt was declined
    - 69:  the cluster is unreachable
    - 74:  the installed state could not be recorded
    - 78:  the install configuration is invalid
    - 110: resources were not ready in time
    """
    _run_apply(ctx, "apply", **options)


@click.command("install", context_settings=CLICK_CONTEXT_SETTINGS)
@apply_options
@click.pass_context
def cli_install(ctx: click.Context, **options: Any) -> None:
    """Install the mesh control plane (same as ``apply``)."""
    _run_apply(ctx, "install", **options)


__all__ = ["apply_options", "cli_apply", "cli_install"]

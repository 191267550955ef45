"""Process entry point behind the ``meshctl`` script and ``python -m meshctl``.

:func:`main` runs the Click group without standalone mode and turns every
outcome into an exit code: Click exits and usage errors keep their own code,
an apply pipeline error prints ``✘ <reason>`` and maps through
:func:`~.exit_codes.exit_code_for`, and anything else is reported by
``lib_cli_exit_tools``. Traceback flags and the logging runtime are put back
afterwards.

Contents:
    * :func:`main` - Run the CLI and return its exit code.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import click
import lib_cli_exit_tools
import lib_log_rich.runtime

from meshctl import __init__conf__
from meshctl.domain.errors import ApplyError

from .constants import TRACEBACK_SUMMARY_LIMIT, TRACEBACK_VERBOSE_LIMIT
from .context import (
    apply_traceback_preferences,
    restore_traceback_state,
    snapshot_traceback_state,
)
from .exit_codes import report_apply_error

if TYPE_CHECKING:
    from meshctl.composition import AppServices


def _report_unexpected(exc: BaseException) -> int:
    """Print *exc* the ``lib_cli_exit_tools`` way and return its exit code."""
    verbose = bool(getattr(lib_cli_exit_tools.config, "traceback", False))
    apply_traceback_preferences(verbose)
    length_limit = TRACEBACK_VERBOSE_LIMIT if verbose else TRACEBACK_SUMMARY_LIMIT
    lib_cli_exit_tools.print_exception_message(trace_back=verbose, length_limit=length_limit)
    return lib_cli_exit_tools.get_system_exit_code(exc)


def _invoke(args: list[str], services_factory: Callable[[], AppServices]) -> int:
    from .root import cli

    # lib_cli_exit_tools.run_cli cannot pass obj, so click is invoked directly.
    try:
        cli.main(args=args, prog_name=__init__conf__.shell_command, obj=services_factory, standalone_mode=False)
    except click.exceptions.Exit as exc:
        return exc.exit_code
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except ApplyError as exc:
        return int(report_apply_error(exc))
    except BaseException as exc:
        # SystemExit and KeyboardInterrupt included: lib_cli_exit_tools owns the exit code.
        return _report_unexpected(exc)
    return 0


def _shutdown_logging() -> None:
    # Only the main thread owns the logging runtime.
    if threading.current_thread() is threading.main_thread() and lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.shutdown()


def main(
    argv: Sequence[str] | None = None,
    *,
    restore_traceback: bool = True,
    services_factory: Callable[[], AppServices] | None = None,
) -> int:
    """Run ``meshctl`` with *argv* and return the process exit code.

    Args:
        argv: Arguments without the program name. None uses ``sys.argv``.
        restore_traceback: Put the previous traceback flags back afterwards.
        services_factory: Builds the services for this run; the console
            script passes ``build_production``.

    Raises:
        ValueError: If services_factory is not provided.

    Example:
        >>> from meshctl.composition import build_testing
        >>> main(["info"], services_factory=build_testing)  # doctest: +SKIP
        0
    """
    if services_factory is None:
        raise ValueError("services_factory is required. Pass build_production from composition layer.")

    args = list(argv) if argv is not None else sys.argv[1:]
    previous_state = snapshot_traceback_state()
    try:
        return _invoke(args, services_factory)
    finally:
        if restore_traceback:
            restore_traceback_state(previous_state)
        _shutdown_logging()


__all__ = ["main"]

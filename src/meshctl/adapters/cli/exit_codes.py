"""POSIX-conventional exit codes for CLI error paths.

Every ``SystemExit`` raised by a command carries one of these values, so a
failed apply can be told apart by its exit status alone.

Signal codes (130, 141, 143) are informational constants only; the
application never raises ``SystemExit`` with them. ``lib_cli_exit_tools``
handles signal-to-exit-code translation.

Contents:
    * :class:`ExitCode` - IntEnum of all exit codes used by this application.
    * :func:`exit_code_for` - Exit code of an apply pipeline error.
    * :func:`report_apply_error` - Print a failed apply and return its exit code.
"""

from __future__ import annotations

from enum import IntEnum

import rich_click as click

from meshctl.domain.errors import (
    ApplyError,
    ClusterConnectionError,
    ConfigValidationError,
    PersistenceError,
    ReadinessTimeoutError,
)


class ExitCode(IntEnum):
    """POSIX-conventional exit codes for CLI error paths.

    Values follow sysexits.h and errno conventions where applicable:

    * 0–1: generic success / failure
    * 22: EINVAL
    * 69: EX_UNAVAILABLE (sysexits.h)
    * 74: EX_IOERR (sysexits.h)
    * 78: EX_CONFIG (sysexits.h)
    * 110: ETIMEDOUT
    * 128+N: signal N (informational only)

    Example:
        >>> ExitCode.SUCCESS
        <ExitCode.SUCCESS: 0>
        >>> int(ExitCode.UNAVAILABLE)
        69
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_ARGUMENT = 22
    UNAVAILABLE = 69
    IO_ERROR = 74
    CONFIG_ERROR = 78
    TIMEOUT = 110
    SIGNAL_INT = 130
    BROKEN_PIPE = 141
    SIGNAL_TERM = 143


_APPLY_ERROR_CODES: tuple[tuple[type[ApplyError], ExitCode], ...] = (
    (ClusterConnectionError, ExitCode.UNAVAILABLE),
    (ConfigValidationError, ExitCode.CONFIG_ERROR),
    (ReadinessTimeoutError, ExitCode.TIMEOUT),
    (PersistenceError, ExitCode.IO_ERROR),
)


def exit_code_for(exc: ApplyError) -> ExitCode:
    """Map an apply pipeline error onto its exit code.

    Reconcile errors and unknown subclasses map to ``GENERAL_ERROR``.

    Example:
        >>> exit_code_for(ReadinessTimeoutError(["Deployment/a"], 1.0))
        <ExitCode.TIMEOUT: 110>
    """
    for error_type, code in _APPLY_ERROR_CODES:
        if isinstance(exc, error_type):
            return code
    return ExitCode.GENERAL_ERROR


def report_apply_error(exc: ApplyError) -> ExitCode:
    """Print ``✘ <reason>`` to stderr and return the exit code for *exc*."""
    click.echo(f"✘ {exc}", err=True)
    return exit_code_for(exc)


__all__ = ["ExitCode", "exit_code_for", "report_apply_error"]

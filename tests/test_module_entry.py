"""Module entry stories ensuring ``python -m meshctl`` mirrors the console script."""

from __future__ import annotations

import runpy
import subprocess
import sys
from collections.abc import Callable

import lib_cli_exit_tools
import pytest

from meshctl import __init__conf__, entry
from meshctl.adapters import cli as cli_mod


def _fail() -> None:
    raise RuntimeError("I should fail")


@pytest.mark.os_agnostic
def test_module_entry_shows_help(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["meshctl"], raising=False)

    with pytest.raises(SystemExit) as exc:
        runpy.run_module("meshctl.__main__", run_name="__main__")

    captured = capsys.readouterr()
    assert exc.value.code == 0
    assert "Usage:" in captured.out
    assert __init__conf__.shell_command in captured.out


@pytest.mark.os_agnostic
def test_module_entry_traceback_flag_prints_full_traceback(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    strip_ansi: Callable[[str], str],
) -> None:
    monkeypatch.setattr(sys, "argv", ["meshctl", "--traceback", "info"])
    monkeypatch.setattr(__init__conf__, "print_info", _fail)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", False, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", False, raising=False)

    with pytest.raises(SystemExit) as exc:
        runpy.run_module("meshctl.__main__", run_name="__main__")

    plain_err = strip_ansi(capsys.readouterr().err)
    assert exc.value.code != 0
    assert "RuntimeError: I should fail" in plain_err
    assert lib_cli_exit_tools.config.traceback is False


@pytest.mark.os_agnostic
def test_cli_facade_exports_every_command() -> None:
    exported = {name for name in dir(cli_mod) if name.startswith("cli_")}
    assert {"cli_apply", "cli_config", "cli_info", "cli_install"} <= exported


@pytest.mark.os_agnostic
def test_console_script_entry_uses_production_wiring(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(sys, "argv", ["meshctl", "info"])

    assert entry.main() == 0
    assert f"Info for {__init__conf__.name}:" in capsys.readouterr().out


@pytest.mark.os_agnostic
def test_module_entry_subprocess_help() -> None:
    """The real ``python -m meshctl --help`` invocation succeeds."""
    result = subprocess.run(  # noqa: S603
        [sys.executable, "-m", "meshctl", "--help"],
        capture_output=True,
        timeout=30,
        check=False,
        encoding="utf-8",
        errors="replace",
    )
    assert result.returncode == 0
    assert "Usage:" in result.stdout
    assert "apply" in result.stdout


@pytest.mark.os_agnostic
def test_module_entry_subprocess_version() -> None:
    result = subprocess.run(  # noqa: S603
        [sys.executable, "-m", "meshctl", "--version"],
        capture_output=True,
        timeout=30,
        check=False,
        encoding="utf-8",
        errors="replace",
    )
    assert result.returncode == 0
    assert __init__conf__.version in result.stdout

"""Package metadata and PEP 561 marker tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import pytest
import rtoml

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PYPROJECT_PATH = PROJECT_ROOT / "pyproject.toml"


def _wheel_table() -> dict[str, Any]:
    pyproject = rtoml.load(PYPROJECT_PATH)
    targets = cast(dict[str, Any], pyproject["tool"]["hatch"]["build"]["targets"])
    return cast(dict[str, Any], targets["wheel"])


@pytest.mark.os_agnostic
def test_print_info_outputs_metadata(capsys: pytest.CaptureFixture[str]) -> None:
    from meshctl import print_info

    print_info()

    captured = capsys.readouterr().out
    assert "Info for meshctl:" in captured
    assert "version" in captured


@pytest.mark.os_agnostic
def test_metadata_constants_are_set() -> None:
    from meshctl import __init__conf__

    assert __init__conf__.name == "meshctl"
    assert __init__conf__.shell_command == "meshctl"
    assert __init__conf__.version


@pytest.mark.os_agnostic
def test_py_typed_marker_exists() -> None:
    assert (PROJECT_ROOT / "src" / "meshctl" / "py.typed").is_file()


@pytest.mark.os_agnostic
@pytest.mark.parametrize("needle", ["py.typed", "defaultconfig.toml", "profiles/*.yaml"])
def test_data_files_are_included_in_the_wheel(needle: str) -> None:
    """Non-Python files the package reads at runtime must ship in the wheel."""
    includes = cast(list[str], _wheel_table().get("include", []))
    assert any(entry.endswith(needle) for entry in includes)


@pytest.mark.os_agnostic
def test_bundled_profiles_exist_on_disk() -> None:
    profiles = PROJECT_ROOT / "src" / "meshctl" / "adapters" / "install" / "profiles"
    assert sorted(path.stem for path in profiles.glob("*.yaml")) == ["default", "demo", "empty", "minimal"]

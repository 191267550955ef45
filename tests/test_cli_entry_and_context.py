"""Behaviour tests for CLI entry point, context helpers, and edge cases."""

from __future__ import annotations

import lib_cli_exit_tools
import pytest
import rich_click as click
from click.testing import CliRunner, Result
from lib_layered_config import Config

from meshctl.adapters import cli as cli_mod
from meshctl.adapters.cli.context import (
    CLIContext,
    apply_traceback_preferences,
    get_cli_context,
    restore_traceback_state,
    snapshot_traceback_state,
    store_cli_context,
)
from meshctl.adapters.cli.main import main
from meshctl.composition import build_testing
from meshctl.domain.errors import ReadinessTimeoutError

# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_main_raises_when_services_factory_is_none() -> None:
    with pytest.raises(ValueError, match="services_factory is required"):
        main(["--help"], services_factory=None)


@pytest.mark.os_agnostic
def test_main_returns_the_usage_error_code(managed_traceback_state: None) -> None:
    """A malformed ``--override`` surfaces as Click's usage error code."""
    exit_code = main(["--override", "invalid_no_dot=value", "info"], services_factory=build_testing)

    assert exit_code == 2


@pytest.mark.os_agnostic
def test_main_returns_the_apply_exit_code(managed_traceback_state: None) -> None:
    """``SystemExit`` raised by a command becomes the return value of main()."""
    exit_code = main(["apply", "-s", "revision=Bad_Rev"], services_factory=build_testing)

    assert exit_code == 78


@pytest.mark.os_agnostic
def test_main_returns_zero_for_info(managed_traceback_state: None) -> None:
    assert main(["info"], services_factory=build_testing) == 0


@pytest.mark.os_agnostic
def test_main_maps_an_escaping_apply_error_to_its_exit_code(
    managed_traceback_state: None,
    capsys: pytest.CaptureFixture[str],
) -> None:
    @click.command("stuck")
    def stuck() -> None:
        raise ReadinessTimeoutError(["Deployment/mesh-system/mesh-controller"], 1.0)

    cli_mod.cli.add_command(stuck)
    try:
        exit_code = main(["stuck"], services_factory=build_testing)
    finally:
        cli_mod.cli.commands.pop("stuck")

    assert exit_code == 110
    assert "✘ " in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_get_cli_context_raises_when_not_initialized() -> None:
    ctx = click.Context(click.Command("test"))
    ctx.obj = "not a CLIContext"

    with pytest.raises(RuntimeError, match="CLI context not initialized"):
        get_cli_context(ctx)


@pytest.mark.os_agnostic
def test_cli_root_fails_when_obj_not_callable(cli_runner: CliRunner) -> None:
    result: Result = cli_runner.invoke(cli_mod.cli, ["info"], obj="not_callable")

    assert result.exit_code != 0
    assert isinstance(result.exception, RuntimeError)


@pytest.mark.os_agnostic
def test_traceback_snapshot_restore_round_trip(managed_traceback_state: None) -> None:
    original = snapshot_traceback_state()

    apply_traceback_preferences(True)
    assert lib_cli_exit_tools.config.traceback is True

    restore_traceback_state(original)
    assert lib_cli_exit_tools.config.traceback == original[0]
    assert lib_cli_exit_tools.config.traceback_force_color == original[1]


@pytest.mark.os_agnostic
def test_store_and_get_cli_context_round_trip() -> None:
    ctx = click.Context(click.Command("test"))
    services = build_testing()

    store_cli_context(
        ctx,
        traceback=True,
        config=Config({}, {}),
        services=services,
        profile="staging",
        overrides=("apply.kubectl=oc",),
    )
    result = get_cli_context(ctx)

    assert isinstance(result, CLIContext)
    assert result.traceback is True
    assert result.profile == "staging"
    assert result.overrides == ("apply.kubectl=oc",)
    assert result.services is services


@pytest.mark.os_agnostic
def test_cli_context_defaults_to_no_profile_and_no_overrides() -> None:
    context = CLIContext(traceback=False, config=Config({}, {}), services=build_testing())

    assert context.profile is None
    assert context.overrides == ()


@pytest.mark.os_agnostic
def test_root_command_stores_overrides_for_subcommands(cli_runner: CliRunner) -> None:
    captured: list[CLIContext] = []

    @click.command("capture")
    @click.pass_context
    def capture(ctx: click.Context) -> None:
        captured.append(get_cli_context(ctx))

    cli_mod.cli.add_command(capture)
    try:
        result: Result = cli_runner.invoke(
            cli_mod.cli, ["--profile", "staging", "--override", "apply.kubectl=oc", "capture"], obj=build_testing
        )
    finally:
        cli_mod.cli.commands.pop("capture")

    assert result.exit_code == 0
    assert captured[0].overrides == ("apply.kubectl=oc",)
    assert captured[0].profile == "staging"
    assert captured[0].config["apply"]["kubectl"] == "oc"


@pytest.mark.os_agnostic
def test_snapshot_traceback_state_names_its_flags(managed_traceback_state: None) -> None:
    apply_traceback_preferences(True)

    state = snapshot_traceback_state()

    assert state.traceback is True
    assert state.force_color is True


@pytest.mark.os_agnostic
def test_cli_context_apply_settings_reads_the_apply_section() -> None:
    context = CLIContext(traceback=False, config=Config({"apply": {"kubectl": "oc"}}, {}), services=build_testing())

    assert context.apply_settings().kubectl == "oc"


@pytest.mark.os_agnostic
def test_cli_context_apply_settings_exits_with_config_error(capsys: pytest.CaptureFixture[str]) -> None:
    context = CLIContext(
        traceback=False,
        config=Config({"apply": {"poll_interval": -1}}, {}),
        services=build_testing(),
    )

    with pytest.raises(SystemExit) as excinfo:
        context.apply_settings()

    assert excinfo.value.code == 78
    assert "invalid [apply] settings" in capsys.readouterr().err


@pytest.mark.os_agnostic
def test_cli_context_config_for_keeps_the_root_config_without_a_profile() -> None:
    config = Config({"apply": {"kubectl": "oc"}}, {})
    context = CLIContext(traceback=False, config=config, services=build_testing(), profile="staging")

    assert context.config_for(None) == (config, "staging")


@pytest.mark.os_agnostic
def test_cli_context_config_for_reapplies_overrides_on_reload() -> None:
    context = CLIContext(
        traceback=False,
        config=Config({}, {}),
        services=build_testing(),
        overrides=("apply.kubectl=oc",),
    )

    config, profile = context.config_for("production")

    assert profile == "production"
    assert config["apply"]["kubectl"] == "oc"

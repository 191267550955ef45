"""Shared pytest fixtures for CLI, pipeline and module-entry tests.

Centralizes test infrastructure following clean architecture principles:
- All shared fixtures live here
- Tests import fixtures implicitly via pytest's conftest discovery
- Fixtures use descriptive names that read as plain English
"""

from __future__ import annotations

import contextlib
import dataclasses
import os
import re
import tempfile
from collections.abc import Callable, Iterator
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

import lib_cli_exit_tools
import lib_log_rich.runtime
import pytest
import yaml
from click.testing import CliRunner
from lib_layered_config import Config
from lib_layered_config.domain.config import SourceInfo

if TYPE_CHECKING:
    from meshctl.adapters.config.settings import ApplySettings
    from meshctl.adapters.memory import InMemoryCluster
    from meshctl.application.apply import ApplyOrchestrator
    from meshctl.composition import AppServices

_COVERAGE_BASENAME = ".coverage.meshctl"


def _purge_stale_coverage_files(cov_path: Path) -> None:
    """Delete leftover SQLite database and journal files from crashed runs."""
    for suffix in ("", "-journal", "-wal", "-shm"):
        with contextlib.suppress(FileNotFoundError):
            Path(str(cov_path) + suffix).unlink()


def pytest_configure(config: pytest.Config) -> None:
    """Redirect the coverage database to a local temp directory.

    Runs before ``pytest-cov`` creates its ``Coverage()`` object, so the
    ``COVERAGE_FILE`` value applies however pytest is invoked.
    """
    if "COVERAGE_FILE" not in os.environ:
        cov_path = Path(tempfile.gettempdir()) / _COVERAGE_BASENAME
        _purge_stale_coverage_files(cov_path)
        os.environ["COVERAGE_FILE"] = str(cov_path)


def _load_dotenv() -> None:
    """Load .env file when it exists for integration test configuration."""
    from dotenv import load_dotenv

    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)


_load_dotenv()

ANSI_ESCAPE_PATTERN = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
CONFIG_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(type(lib_cli_exit_tools.config)))


def _remove_ansi_codes(text: str) -> str:
    """Return *text* stripped of ANSI escape sequences."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def _snapshot_cli_config() -> dict[str, object]:
    """Capture every attribute from ``lib_cli_exit_tools.config``."""
    return {name: getattr(lib_cli_exit_tools.config, name) for name in CONFIG_FIELDS}


def _restore_cli_config(snapshot: dict[str, object]) -> None:
    """Reapply a configuration snapshot captured by ``_snapshot_cli_config``."""
    for name, value in snapshot.items():
        setattr(lib_cli_exit_tools.config, name, value)


@pytest.fixture(scope="session", autouse=True)
def _shutdown_logging_runtime() -> Iterator[None]:
    """Flush and stop the lib_log_rich runtime once the session ends."""
    yield
    if lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.shutdown()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a fresh CliRunner per test.

    Use ``result.stdout`` for clean output and ``result.stderr`` for the
    ``✘`` error lines of failed applies.
    """
    return CliRunner()


@pytest.fixture
def production_factory() -> Callable[[], AppServices]:
    """Provide the production services factory for tests.

    Use this for commands that never reach the cluster (``info``, ``config``).
    """
    from meshctl.composition import build_production

    return build_production


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    """Return a helper that strips ANSI escape sequences from a string."""

    def _strip(value: str) -> str:
        return _remove_ansi_codes(value)

    return _strip


@pytest.fixture
def managed_traceback_state() -> Iterator[None]:
    """Reset traceback flags to a known baseline and restore after the test."""
    lib_cli_exit_tools.reset_config()
    lib_cli_exit_tools.config.traceback = False
    lib_cli_exit_tools.config.traceback_force_color = False
    snapshot = _snapshot_cli_config()
    try:
        yield
    finally:
        _restore_cli_config(snapshot)


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    """Clear the get_config lru_cache before each test.

    Only clears before, not after, because a test may have monkeypatched
    ``get_config`` away.
    """
    from meshctl.adapters.config import loader as config_mod

    config_mod.get_config.cache_clear()
    yield


@pytest.fixture
def config_factory() -> Callable[[dict[str, Any]], Config]:
    """Create real Config instances from test data dicts.

    Example:
        def test_apply_section(config_factory: Callable[[dict[str, Any]], Config]) -> None:
            config = config_factory({"apply": {"poll_interval": 0.5}})
            assert config["apply"]["poll_interval"] == 0.5
    """

    def _factory(data: dict[str, Any]) -> Config:
        return Config(data, {})

    return _factory


@pytest.fixture
def source_info_factory() -> Callable[[str, str, str | None], SourceInfo]:
    """Create SourceInfo dicts for provenance-tracking tests."""

    def _factory(key: str, layer: str, path: str | None = None) -> SourceInfo:
        return {"layer": layer, "path": path, "key": key}

    return _factory


@pytest.fixture
def in_memory_cluster() -> InMemoryCluster:
    """Provide an empty, reachable in-memory cluster."""
    from meshctl.adapters.memory import InMemoryCluster

    return InMemoryCluster()


@pytest.fixture
def fast_settings() -> ApplySettings:
    """Apply settings with a short poll interval for readiness tests."""
    from meshctl.adapters.config.settings import ApplySettings

    return ApplySettings(readiness_timeout=1.0, poll_interval=0.02)


@pytest.fixture
def orchestrator_factory(
    in_memory_cluster: InMemoryCluster,
    fast_settings: ApplySettings,
) -> Callable[..., ApplyOrchestrator]:
    """Return a builder of orchestrators wired to ``in_memory_cluster``.

    Keyword arguments are forwarded to :meth:`AppServices.orchestrator`.
    """
    from meshctl.composition import build_testing

    def _build(**kwargs: Any) -> ApplyOrchestrator:
        return build_testing(cluster=in_memory_cluster).orchestrator(fast_settings, **kwargs)

    return _build


@pytest.fixture
def install_file(tmp_path: Path) -> Callable[[dict[str, Any]], str]:
    """Write an install tree to a YAML file and return its path.

    Example:
        def test_profile(install_file: Callable[[dict[str, Any]], str]) -> None:
            path = install_file({"profile": "demo"})
    """
    counter = iter(range(1_000))

    def _write(tree: dict[str, Any]) -> str:
        path = tmp_path / f"install-{next(counter)}.yaml"
        path.write_text(yaml.safe_dump(tree), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def cluster_cli_context(
    in_memory_cluster: InMemoryCluster,
    clear_config_cache: None,
) -> Callable[[dict[str, Any] | None], Callable[[], AppServices]]:
    """Return a services factory wired to ``in_memory_cluster``.

    The optional dict becomes the application configuration; ``None`` keeps
    the in-memory defaults.

    Example:
        def test_apply(
            cli_runner: CliRunner,
            cluster_cli_context: Callable[..., Callable[[], AppServices]],
        ) -> None:
            result = cli_runner.invoke(cli, ["apply", "-y"], obj=cluster_cli_context(None))
    """
    from meshctl.composition import AppServices, build_testing

    def _create(config_data: dict[str, Any] | None = None) -> Callable[[], AppServices]:
        services = build_testing(cluster=in_memory_cluster)
        if config_data is not None:
            config = Config(config_data, {})

            def _fake_get_config(**_kwargs: Any) -> Config:
                return config

            services = dataclasses.replace(services, get_config=_fake_get_config)
        return lambda: services

    return _create


@pytest.fixture
def config_cli_context(
    clear_config_cache: None,
) -> Callable[[dict[str, Any]], Callable[[], AppServices]]:
    """Create a production services factory with injected application config.

    Only the I/O boundary (``get_config``) is replaced; display and the
    cluster adapters stay real.

    Example:
        def test_config_display(
            cli_runner: CliRunner,
            config_cli_context: Callable[[dict[str, Any]], Callable[[], AppServices]],
        ) -> None:
            factory = config_cli_context({"apply": {"kubectl": "kubectl-1.30"}})
            result = cli_runner.invoke(cli, ["config"], obj=factory)
            assert "kubectl-1.30" in result.output
    """
    from meshctl.adapters.memory import init_logging_in_memory
    from meshctl.composition import AppServices, build_production

    def _create(config_data: dict[str, Any]) -> Callable[[], AppServices]:
        config = Config(config_data, {})

        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        test_services = dataclasses.replace(
            build_production(),
            get_config=_fake_get_config,
            init_logging=init_logging_in_memory,
        )
        return lambda: test_services

    return _create


@pytest.fixture
def inject_config_with_profile_capture(
    clear_config_cache: None,
) -> Callable[[Config, list[str | None]], Callable[[], AppServices]]:
    """Return a factory whose get_config records the profiles it is called with."""
    from meshctl.adapters.memory import init_logging_in_memory
    from meshctl.composition import AppServices, build_production

    def _inject(config: Config, captured_profiles: list[str | None]) -> Callable[[], AppServices]:
        def _capturing_get_config(*, profile: str | None = None, **_kwargs: Any) -> Config:
            captured_profiles.append(profile)
            return config

        test_services = dataclasses.replace(
            build_production(),
            get_config=_capturing_get_config,
            init_logging=init_logging_in_memory,
        )
        return lambda: test_services

    return _inject

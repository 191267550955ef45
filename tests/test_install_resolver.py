"""Resolution of install files, overlays and profiles into a ResolvedConfig."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from meshctl.adapters.install.profiles import list_profiles, load_profile, unwrap_install_document
from meshctl.adapters.install.resolver import deep_merge, drop_path, resolve_config, set_path
from meshctl.domain.errors import ConfigValidationError
from meshctl.domain.models import Overlay

InstallFile = Callable[[dict[str, Any]], str]

# ======================== tree helpers ========================


@pytest.mark.os_agnostic
def test_deep_merge_merges_nested_mappings_and_replaces_lists() -> None:
    base = {"values": {"global": {"hub": "a", "tag": "1"}}, "list": [1, 2]}

    merged = deep_merge(base, {"values": {"global": {"tag": "2"}}, "list": [3]})

    assert merged == {"values": {"global": {"hub": "a", "tag": "2"}}, "list": [3]}
    assert base["values"]["global"]["tag"] == "1"


@pytest.mark.os_agnostic
def test_set_path_refuses_to_descend_into_a_scalar() -> None:
    tree: dict[str, Any] = {"values": {"grafana": True}}

    with pytest.raises(ValueError, match="values.grafana is a bool"):
        set_path(tree, ("values", "grafana", "enabled"), True)


@pytest.mark.os_agnostic
def test_drop_path_handles_list_indexes() -> None:
    tree: dict[str, Any] = {"values": {"items": ["a", "b"]}}

    assert drop_path(tree, ("values", "items", 0))
    assert tree == {"values": {"items": ["b"]}}
    assert not drop_path(tree, ("values", "missing", "x"))


# ======================== profiles ========================


@pytest.mark.os_agnostic
def test_bundled_profiles_are_listed() -> None:
    assert list_profiles() == ["default", "demo", "empty", "minimal"]


@pytest.mark.os_agnostic
@pytest.mark.parametrize("name", ["nope", "../default", "sub/default"])
def test_unknown_profiles_are_rejected(name: str) -> None:
    with pytest.raises(ConfigValidationError, match="unknown profile"):
        load_profile(name)


@pytest.mark.os_agnostic
def test_mesh_install_documents_are_unwrapped() -> None:
    document = {"apiVersion": "meshctl.dev/v1", "kind": "MeshInstall", "spec": {"profile": "demo"}}
    assert unwrap_install_document(document, "x.yaml") == {"profile": "demo"}


@pytest.mark.os_agnostic
def test_non_mapping_documents_are_rejected() -> None:
    with pytest.raises(ConfigValidationError, match="expected a mapping"):
        unwrap_install_document(["a"], "x.yaml")


# ======================== resolve_config ========================


@pytest.mark.os_agnostic
def test_no_input_resolves_the_default_profile() -> None:
    resolved = resolve_config([], [])

    assert resolved.profile == "default"
    assert resolved.namespace == "mesh-system"
    assert resolved.revision == ""
    assert resolved.record_name == "installed-state"
    assert resolved.warnings == ()
    assert resolved.spec["components"]["ingressGateway"]["enabled"] is True


@pytest.mark.os_agnostic
def test_default_namespace_applies_when_the_tree_sets_none() -> None:
    assert resolve_config([], [], default_namespace="mesh").namespace == "mesh"


@pytest.mark.os_agnostic
def test_profile_is_taken_from_the_install_file(install_file: InstallFile) -> None:
    resolved = resolve_config([install_file({"profile": "demo"})], [])

    assert resolved.profile == "demo"
    assert resolved.spec["components"]["egressGateway"]["enabled"] is True


@pytest.mark.os_agnostic
def test_overlay_profile_wins_over_file_profile(install_file: InstallFile) -> None:
    resolved = resolve_config([install_file({"profile": "demo"})], [Overlay(("profile",), "minimal")])

    assert resolved.profile == "minimal"


@pytest.mark.os_agnostic
def test_later_files_win(install_file: InstallFile) -> None:
    first = install_file({"revision": "blue", "namespace": "mesh-a"})
    second = install_file({"revision": "green"})

    resolved = resolve_config([first, second], [])

    assert resolved.revision == "green"
    assert resolved.namespace == "mesh-a"


@pytest.mark.os_agnostic
def test_later_overlays_win() -> None:
    overlays = [Overlay(("revision",), "blue"), Overlay(("revision",), "green")]
    assert resolve_config([], overlays).revision == "green"


@pytest.mark.os_agnostic
def test_overlays_win_over_files(install_file: InstallFile) -> None:
    path = install_file({"values": {"grafana": {"enabled": False}}})

    resolved = resolve_config([path], [Overlay(("values", "grafana", "enabled"), True)])

    assert resolved.spec["values"]["grafana"]["enabled"] is True


@pytest.mark.os_agnostic
def test_file_values_merge_over_the_profile(install_file: InstallFile) -> None:
    """Keys the file does not mention keep their profile value."""
    resolved = resolve_config([install_file({"values": {"global": {"logLevel": "warn"}}})], [])

    assert resolved.spec["values"]["global"]["logLevel"] == "warn"
    assert resolved.spec["values"]["global"]["proxy"]["concurrency"] == 2


@pytest.mark.os_agnostic
def test_resolution_is_deterministic(install_file: InstallFile) -> None:
    path = install_file({"profile": "demo", "revision": "canary"})
    overlays = [Overlay(("values", "grafana", "enabled"), True)]

    assert resolve_config([path], overlays) == resolve_config([path], overlays)


@pytest.mark.os_agnostic
def test_mesh_install_file_is_accepted(install_file: InstallFile) -> None:
    path = install_file({"apiVersion": "meshctl.dev/v1", "kind": "MeshInstall", "spec": {"revision": "r1"}})
    assert resolve_config([path], []).revision == "r1"


@pytest.mark.os_agnostic
def test_missing_file_is_a_validation_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="cannot read file"):
        resolve_config([str(tmp_path / "missing.yaml")], [])


@pytest.mark.os_agnostic
def test_malformed_yaml_is_a_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("components: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="invalid YAML"):
        resolve_config([str(path)], [])


@pytest.mark.os_agnostic
def test_invalid_values_are_reported_by_path(install_file: InstallFile) -> None:
    path = install_file({"revision": "Not_A_Label", "components": {"sidecar": {"enabled": True}}})

    with pytest.raises(ConfigValidationError) as exc_info:
        resolve_config([path], [])

    problems = exc_info.value.problems
    assert any(problem.startswith("revision: ") for problem in problems)
    assert any(problem.startswith("components.sidecar: ") for problem in problems)


@pytest.mark.os_agnostic
def test_force_drops_invalid_paths_and_reports_warnings(install_file: InstallFile) -> None:
    """With force, offending keys fall back to defaults and are listed as warnings."""
    path = install_file({"revision": "Not_A_Label", "components": {"sidecar": {"enabled": True}}})

    resolved = resolve_config([path], [], force=True)

    assert resolved.revision == ""
    assert "sidecar" not in resolved.spec["components"]
    assert len(resolved.warnings) == 2


@pytest.mark.os_agnostic
def test_forced_invalid_namespace_falls_back_to_the_configured_default() -> None:
    resolved = resolve_config([], [Overlay(("namespace",), "Bad_NS")], force=True, default_namespace="custom-ns")

    assert resolved.namespace == "custom-ns"
    assert any(warning.startswith("namespace: ") for warning in resolved.warnings)


@pytest.mark.os_agnostic
def test_forced_invalid_default_namespace_falls_back_to_the_model_default() -> None:
    resolved = resolve_config([], [], force=True, default_namespace="Bad_NS")

    assert resolved.namespace == "mesh-system"


@pytest.mark.os_agnostic
def test_force_never_suppresses_an_unknown_profile() -> None:
    with pytest.raises(ConfigValidationError, match="unknown profile 'nope'"):
        resolve_config([], [Overlay(("profile",), "nope")], force=True)


@pytest.mark.os_agnostic
def test_conflicting_overlay_is_a_validation_error() -> None:
    overlays = [Overlay(("values", "grafana"), True), Overlay(("values", "grafana", "enabled"), True)]

    with pytest.raises(ConfigValidationError, match="--set values.grafana.enabled"):
        resolve_config([], overlays)


@pytest.mark.os_agnostic
def test_charts_directory_replaces_bundled_profiles(tmp_path: Path) -> None:
    profiles = tmp_path / "profiles"
    profiles.mkdir()
    tree = {"components": {"controller": {"enabled": True, "replicas": 3}}}
    (profiles / "custom.yaml").write_text(yaml.safe_dump(tree), encoding="utf-8")
    overlays = [Overlay(("profile",), "custom"), Overlay(("installPackagePath",), str(tmp_path))]

    resolved = resolve_config([], overlays)

    assert resolved.profile == "custom"
    assert resolved.spec["components"]["controller"]["replicas"] == 3
    assert resolved.spec["installPackagePath"] == str(tmp_path)


@pytest.mark.os_agnostic
def test_charts_directory_without_the_profile_lists_what_exists(tmp_path: Path) -> None:
    (tmp_path / "profiles").mkdir()
    (tmp_path / "profiles" / "only.yaml").write_text("{}\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError, match=r"available: only"):
        resolve_config([], [Overlay(("installPackagePath",), str(tmp_path))])

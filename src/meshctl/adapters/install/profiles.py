"""Bundled and user-supplied install profiles.

A profile is a YAML install tree that the resolver starts from before files
and overlays are merged on top. Profiles ship in the ``profiles`` directory
next to this module; ``installPackagePath`` points the lookup at another
directory with the same ``profiles/<name>.yaml`` layout.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, cast

import yaml

from meshctl.domain.errors import ConfigValidationError

#: Profile used when neither files nor overlays select one.
DEFAULT_PROFILE = "default"


@lru_cache(maxsize=1)
def get_bundled_profiles_dir() -> Path:
    """Return the directory holding the bundled profiles.

    Example:
        >>> (get_bundled_profiles_dir() / "default.yaml").is_file()
        True
    """
    return Path(__file__).parent / "profiles"


def profiles_dir(install_package_path: str = "") -> Path:
    """Return the profile directory for an optional install package path."""
    if install_package_path:
        return Path(install_package_path).expanduser() / "profiles"
    return get_bundled_profiles_dir()


def list_profiles(install_package_path: str = "") -> list[str]:
    """Return the sorted names of the available profiles.

    Example:
        >>> list_profiles()
        ['default', 'demo', 'empty', 'minimal']
    """
    directory = profiles_dir(install_package_path)
    if not directory.is_dir():
        return []
    return sorted(path.stem for path in directory.glob("*.yaml"))


def unwrap_install_document(document: object, source: str) -> dict[str, Any]:
    """Return the install tree of a parsed YAML document.

    Accepts either a bare install mapping or a ``kind: MeshInstall`` document
    whose ``spec`` holds the tree. An empty document is an empty tree.

    Raises:
        ConfigValidationError: If the document is not a mapping.

    Examples:
        >>> unwrap_install_document({"kind": "MeshInstall", "spec": {"revision": "a"}}, "x.yaml")
        {'revision': 'a'}
        >>> unwrap_install_document(None, "x.yaml")
        {}
    """
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigValidationError([f"{source}: expected a mapping, got {type(document).__name__}"])
    mapping = cast("dict[str, Any]", document)
    if mapping.get("kind") == "MeshInstall":
        spec: object = mapping.get("spec") or {}
        if not isinstance(spec, dict):
            raise ConfigValidationError([f"{source}: spec must be a mapping"])
        return cast("dict[str, Any]", spec)
    return mapping


def read_install_file(path: Path) -> dict[str, Any]:
    """Parse one YAML install file.

    Raises:
        ConfigValidationError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigValidationError([f"{path}: cannot read file: {exc.strerror or exc}"]) from exc
    try:
        document: object = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigValidationError([f"{path}: invalid YAML: {exc}"]) from exc
    return unwrap_install_document(document, str(path))


def load_profile(name: str, install_package_path: str = "") -> dict[str, Any]:
    """Return the install tree of profile *name*.

    Raises:
        ConfigValidationError: If the profile does not exist.

    Example:
        >>> load_profile("minimal")["components"]["controller"]["enabled"]
        True
    """
    path = profiles_dir(install_package_path) / f"{name}.yaml"
    if "/" in name or "\\" in name or not path.is_file():
        available = ", ".join(list_profiles(install_package_path)) or "none"
        raise ConfigValidationError([f"profile: unknown profile {name!r} (available: {available})"])
    return read_install_file(path)


__all__ = [
    "DEFAULT_PROFILE",
    "get_bundled_profiles_dir",
    "list_profiles",
    "load_profile",
    "profiles_dir",
    "read_install_file",
    "unwrap_install_document",
]

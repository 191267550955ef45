"""Resolve install files and overlays into a :class:`ResolvedConfig`.

Resolution order:

1. Install files are parsed and deep-merged in the order given.
2. Overlays are assigned on top, later overlays winning.
3. The selected profile (``profile`` key, default ``default``) is loaded and
   the user tree is deep-merged over it.
4. The merged tree is validated against :class:`InstallSpec`.

With ``force`` set, validation problems are logged as warnings, the
offending paths are dropped and validation is retried. Problems that leave
nothing to fall back to (unreadable files, unknown profiles) always fail.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from meshctl.domain.errors import ConfigValidationError
from meshctl.domain.models import Overlay, ResolvedConfig

from .model import InstallSpec, error_paths, format_problems
from .profiles import DEFAULT_PROFILE, load_profile, read_install_file

logger = logging.getLogger(__name__)


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new tree with *overlay* merged over *base*.

    Nested mappings merge recursively; any other value in *overlay*
    replaces the value in *base*. Inputs are not modified.

    Example:
        >>> deep_merge({"a": {"x": 1, "y": 2}, "b": [1]}, {"a": {"y": 3}, "b": [2]})
        {'a': {'x': 1, 'y': 3}, 'b': [2]}
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = deep_merge(cast("dict[str, Any]", current), cast("Mapping[str, Any]", value))
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def set_path(tree: dict[str, Any], path: Sequence[str], value: Any) -> None:
    """Assign *value* at *path*, creating intermediate mappings.

    Raises:
        ValueError: If an intermediate node exists and is not a mapping.

    Example:
        >>> tree = {"values": {"grafana": {"enabled": False}}}
        >>> set_path(tree, ("values", "grafana", "enabled"), True)
        >>> tree
        {'values': {'grafana': {'enabled': True}}}
    """
    node = tree
    for depth, part in enumerate(path[:-1]):
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            prefix = ".".join(path[: depth + 1])
            raise ValueError(f"{prefix} is a {type(child).__name__}, not a mapping")
        node = cast("dict[str, Any]", child)
    node[path[-1]] = copy.deepcopy(value)


def drop_path(tree: dict[str, Any], path: Sequence[str | int]) -> bool:
    """Remove the node at *path*; return False when there is nothing to remove.

    Example:
        >>> tree = {"components": {"foo": {}, "cni": {}}}
        >>> drop_path(tree, ("components", "foo"))
        True
        >>> tree
        {'components': {'cni': {}}}
        >>> drop_path(tree, ())
        False
    """
    if not path:
        return False
    node: Any = tree
    for part in path[:-1]:
        if not isinstance(node, dict) or part not in node:
            return False
        node = cast("dict[Any, Any]", node)[part]
    if isinstance(node, dict) and path[-1] in node:
        del cast("dict[Any, Any]", node)[path[-1]]
        return True
    if isinstance(node, list) and isinstance(path[-1], int) and 0 <= path[-1] < len(node):
        del cast("list[Any]", node)[path[-1]]
        return True
    return False


def _merge_files(filenames: Sequence[str]) -> dict[str, Any]:
    tree: dict[str, Any] = {}
    for filename in filenames:
        logger.debug("Reading install file", extra={"file": filename})
        tree = deep_merge(tree, read_install_file(Path(filename)))
    return tree


def _apply_overlays(tree: dict[str, Any], overlays: Sequence[Overlay], *, force: bool) -> list[str]:
    problems: list[str] = []
    for overlay in overlays:
        try:
            set_path(tree, overlay.path, overlay.value)
        except ValueError as exc:
            problems.append(f"--set {overlay.dotted}: {exc}")
    if problems and not force:
        raise ConfigValidationError(problems)
    return problems


def _validate(
    tree: dict[str, Any], *, force: bool, fallbacks: Mapping[str, Any] | None = None
) -> tuple[InstallSpec, list[str]]:
    """Validate *tree*, dropping offending paths when *force* is set.

    Mutates *tree* in place when paths are dropped. A dropped top-level key
    listed in *fallbacks* is set to its fallback value once before the next
    attempt; after that the model default applies.
    """
    warnings: list[str] = []
    pending_fallbacks = dict(fallbacks or {})
    while True:
        try:
            return InstallSpec.model_validate(tree), warnings
        except ValidationError as exc:
            problems = format_problems(exc)
            if not force:
                raise ConfigValidationError(problems) from exc
            dropped = [drop_path(tree, loc) for loc in error_paths(exc)]
            if not any(dropped):
                raise ConfigValidationError(problems) from exc
            warnings.extend(problems)
            for key in [key for key in pending_fallbacks if key not in tree]:
                tree[key] = pending_fallbacks.pop(key)


def resolve_config(
    filenames: Sequence[str],
    overlays: Sequence[Overlay],
    *,
    force: bool = False,
    default_namespace: str = "mesh-system",
) -> ResolvedConfig:
    """Merge install files and overlays into a validated configuration.

    Args:
        filenames: YAML install files, merged in order.
        overlays: Typed ``path=value`` assignments, applied after the files.
        force: Downgrade validation problems to warnings.
        default_namespace: Namespace used when the tree sets none.

    Returns:
        The resolved configuration; tolerated problems are listed in
        ``warnings``.

    Raises:
        ConfigValidationError: On invalid input, unless ``force`` absorbs it.

    Example:
        >>> resolved = resolve_config([], [Overlay(("revision",), "canary")])
        >>> resolved.profile, resolved.revision, resolved.namespace
        ('default', 'canary', 'mesh-system')
        >>> resolved.record_name
        'installed-state-canary'
    """
    user_tree = _merge_files(filenames)
    warnings = _apply_overlays(user_tree, overlays, force=force)

    profile_name = user_tree.get("profile") or DEFAULT_PROFILE
    if not isinstance(profile_name, str):
        raise ConfigValidationError([f"profile: expected a name, got {profile_name!r}"])
    package_path = user_tree.get("installPackagePath") or ""
    if not isinstance(package_path, str):
        raise ConfigValidationError([f"installPackagePath: expected a path, got {package_path!r}"])

    tree = deep_merge(load_profile(profile_name, package_path), user_tree)
    tree["profile"] = profile_name
    tree.setdefault("namespace", default_namespace)

    spec, validation_warnings = _validate(tree, force=force, fallbacks={"namespace": default_namespace})
    warnings.extend(validation_warnings)
    for warning in warnings:
        logger.warning("Ignoring invalid install setting: %s", warning)

    return ResolvedConfig(
        profile=spec.profile,
        namespace=spec.namespace,
        revision=spec.revision,
        spec=spec.model_dump(by_alias=True, mode="json"),
        warnings=tuple(warnings),
    )


__all__ = [
    "deep_merge",
    "drop_path",
    "resolve_config",
    "set_path",
]

"""Parse and apply root ``--override SECTION.KEY=VALUE`` options to Config.

``--override`` targets the application configuration (``[apply]``,
``[lib_log_rich]``). Install settings use ``apply --set`` instead, see
:mod:`.overlays`. Both share :func:`coerce_value`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import orjson
from lib_layered_config import Config

CoercedValue = str | int | float | bool | None | list[object] | dict[str, object]
"""Union of types that :func:`coerce_value` can produce."""


@dataclass(frozen=True, slots=True)
class ConfigOverride:
    """A single parsed configuration override."""

    section: str
    key_path: tuple[str, ...]
    value: CoercedValue


def coerce_value(raw: str) -> CoercedValue:
    """Coerce a raw string using JSON parsing with string fallback.

    Examples:
        >>> coerce_value("true")
        True
        >>> coerce_value("2.5")
        2.5
        >>> coerce_value("null")
        >>> coerce_value('{"a": 1}')
        {'a': 1}
        >>> coerce_value("300s")
        '300s'
        >>> coerce_value("")
        ''
    """
    if raw == "":
        return ""
    try:
        return orjson.loads(raw)
    except (orjson.JSONDecodeError, ValueError):
        return raw


def parse_override(raw: str) -> ConfigOverride:
    """Split ``SECTION.KEY[.SUBKEY...]=VALUE`` into a :class:`ConfigOverride`.

    The first ``=`` ends the path; the first dot ends the section.

    Raises:
        ValueError: If ``=`` is missing, the key has no dot, or a component
            is empty.

    Examples:
        >>> override = parse_override("apply.poll_interval=0.5")
        >>> override.section, override.key_path, override.value
        ('apply', ('poll_interval',), 0.5)
        >>> parse_override("lib_log_rich.payload_limits.max_chars=8192").key_path
        ('payload_limits', 'max_chars')
    """
    if "=" not in raw:
        raise ValueError(f"Invalid override {raw!r}: must contain '='")

    path_part, value_str = raw.split("=", maxsplit=1)

    if "." not in path_part:
        raise ValueError(f"Invalid override {raw!r}: key must contain at least one dot (SECTION.KEY)")

    section, *key_parts = path_part.split(".")
    if not section:
        raise ValueError(f"Invalid override {raw!r}: section name is empty")
    if not all(key_parts):
        raise ValueError(f"Invalid override {raw!r}: key path contains empty component")

    return ConfigOverride(section=section, key_path=tuple(key_parts), value=coerce_value(value_str))


def _nest_override(target: dict[str, dict[str, object]], override: ConfigOverride) -> None:
    """Insert *override* into the nested dict handed to ``Config.with_overrides``.

    Examples:
        >>> d: dict[str, dict[str, object]] = {}
        >>> _nest_override(d, ConfigOverride(section="apply", key_path=("kubectl",), value="oc"))
        >>> d
        {'apply': {'kubectl': 'oc'}}
    """
    node: dict[str, object] = target.setdefault(override.section, {})
    for part in override.key_path[:-1]:
        existing = node.setdefault(part, {})
        if not isinstance(existing, dict):
            dotted = ".".join((override.section, *override.key_path))
            raise ValueError(f"Invalid override {dotted!r}: {part!r} is already set to a {type(existing).__name__}")
        node = cast("dict[str, object]", existing)
    node[override.key_path[-1]] = override.value


def apply_overrides(config: Config, raw_overrides: tuple[str, ...]) -> Config:
    """Deep-merge ``--override`` strings into *config*.

    Returns the original object when there is nothing to apply.

    Raises:
        ValueError: If any override string is malformed or two overrides
            conflict (a value and a nested key under it).

    Examples:
        >>> cfg = Config({"apply": {"kubectl": "kubectl"}}, {})
        >>> apply_overrides(cfg, ("apply.kubectl=oc",))["apply"]["kubectl"]
        'oc'
        >>> apply_overrides(cfg, ()) is cfg
        True
    """
    if not raw_overrides:
        return config

    overrides: dict[str, dict[str, object]] = {}
    for raw in raw_overrides:
        _nest_override(overrides, parse_override(raw))

    return config.with_overrides(overrides)


__all__ = [
    "CoercedValue",
    "ConfigOverride",
    "apply_overrides",
    "coerce_value",
    "parse_override",
]

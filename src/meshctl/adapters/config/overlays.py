"""Parse install overlays (``--set path=value``) into typed :class:`Overlay` values.

Unlike the root ``--override`` option, overlay paths address the install
configuration and may have a single segment (``profile=demo``). A backslash
escapes a dot that belongs to a key, e.g.
``values.annotations.container\\.apparmor=runtime/default``.
"""

from __future__ import annotations

from collections.abc import Iterable

from meshctl.domain.models import Overlay

from .overrides import coerce_value


def split_path(raw_path: str) -> tuple[str, ...]:
    r"""Split a dotted path on unescaped dots.

    Raises:
        ValueError: If the path is empty or contains an empty segment.

    Examples:
        >>> split_path("values.grafana.enabled")
        ('values', 'grafana', 'enabled')
        >>> split_path(r"values.annotations.container\.apparmor")
        ('values', 'annotations', 'container.apparmor')
    """
    parts: list[str] = []
    current: list[str] = []
    chars = iter(raw_path)
    for char in chars:
        if char == "\\":
            escaped = next(chars, "")
            if escaped == ".":
                current.append(".")
            else:
                current.append(char + escaped)
        elif char == ".":
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))

    if not all(part.strip() for part in parts):
        raise ValueError(f"Invalid overlay path {raw_path!r}: empty path segment")
    return tuple(part.strip() for part in parts)


def parse_overlay(raw: str) -> Overlay:
    """Split a ``path=value`` string into an :class:`Overlay`.

    The first ``=`` separates the path from the value; values are coerced
    with :func:`~meshctl.adapters.config.overrides.coerce_value`.

    Raises:
        ValueError: If the string lacks ``=`` or the path is malformed.

    Examples:
        >>> parse_overlay("values.grafana.enabled=true")
        Overlay(path=('values', 'grafana', 'enabled'), value=True)
        >>> parse_overlay("profile=demo")
        Overlay(path=('profile',), value='demo')
    """
    if "=" not in raw:
        raise ValueError(f"Invalid overlay {raw!r}: must have the form PATH=VALUE")
    path_part, value_str = raw.split("=", maxsplit=1)
    return Overlay(path=split_path(path_part), value=coerce_value(value_str))


def parse_overlays(raws: Iterable[str]) -> tuple[Overlay, ...]:
    """Parse every raw overlay, preserving order."""
    return tuple(parse_overlay(raw) for raw in raws)


__all__ = [
    "parse_overlay",
    "parse_overlays",
    "split_path",
]

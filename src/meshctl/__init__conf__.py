"""Static package metadata surfaced to CLI commands and documentation.

The values are kept in sync with ``pyproject.toml``; ``version`` is the only
field that changes between releases.

Contents:
    * Project metadata constants (``name``, ``title``, ``version`` ...).
    * ``LAYEREDCONF_*`` identifiers used by lib_layered_config path discovery.
    * :func:`print_info` - Render the metadata block for ``meshctl info``.
"""

from __future__ import annotations

name = "meshctl"
title = "Install and apply orchestrator for cluster-based control planes"
version = "1.0.0"
homepage = "https://github.com/meshctl/meshctl"
author = "meshctl maintainers"
author_email = "maintainers@meshctl.dev"
shell_command = "meshctl"

#: Vendor and app names used for macOS/Windows configuration directories.
LAYEREDCONF_VENDOR = "meshctl"
LAYEREDCONF_APP = "meshctl"
#: Slug used for Linux XDG configuration directories (``~/.config/<slug>``).
LAYEREDCONF_SLUG = "meshctl"


def print_info() -> None:
    """Print the summarised metadata block used by the CLI ``info`` command.

    Example:
        >>> print_info()  # doctest: +ELLIPSIS
        Info for meshctl:
        ...
    """
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    print("\n".join(lines))


__all__ = [
    "LAYEREDCONF_APP",
    "LAYEREDCONF_SLUG",
    "LAYEREDCONF_VENDOR",
    "author",
    "author_email",
    "homepage",
    "name",
    "print_info",
    "shell_command",
    "title",
    "version",
]

"""Install configuration adapter - profiles, resolution and rendering.

Contents:
    * :mod:`.model` - Pydantic model of the install tree
    * :mod:`.profiles` - Bundled profile lookup and install file parsing
    * :mod:`.resolver` - Files + overlays to :class:`ResolvedConfig`
    * :mod:`.render` - Desired cluster objects of a resolved config
"""

from __future__ import annotations

from .profiles import list_profiles, load_profile
from .render import render_objects
from .resolver import resolve_config

__all__ = [
    "list_profiles",
    "load_profile",
    "render_objects",
    "resolve_config",
]

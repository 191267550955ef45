"""Validated ``[apply]`` settings and Go-style duration parsing.

Contents:
    * :func:`parse_duration` - Convert ``300s`` / ``5m`` / ``1h30m`` / ``45`` to seconds.
    * :class:`ApplySettings` - Pydantic model of the ``[apply]`` config section.
    * :func:`load_apply_settings` - Parse the section from a layered Config.
"""

from __future__ import annotations

import math
import re
from typing import Any, cast

from lib_layered_config import Config
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from meshctl.domain.errors import ConfigurationError

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str | float) -> float:
    """Convert a duration to seconds.

    Accepts Go duration strings (a sequence of number+unit pairs) as used by
    the ``--readiness-timeout`` flag, and bare numbers meaning seconds.

    Raises:
        ValueError: If the value is negative, not finite or not a valid duration.

    Examples:
        >>> parse_duration("300s")
        300.0
        >>> parse_duration("1m30s")
        90.0
        >>> parse_duration("250ms")
        0.25
        >>> parse_duration("45")
        45.0
        >>> parse_duration(0)
        0.0
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            seconds = _parse_go_duration(text)
    if not math.isfinite(seconds):
        raise ValueError(f"duration must be finite: {value!r}")
    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")
    return seconds


def _parse_go_duration(text: str) -> float:
    if not text:
        raise ValueError("empty duration")
    position = 0
    total = 0.0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    return total


class ApplySettings(BaseModel):
    """Pydantic model for the ``[apply]`` config section.

    Example:
        >>> settings = ApplySettings.model_validate({"readiness_timeout": "2m"})
        >>> settings.readiness_timeout
        120.0
        >>> ApplySettings().kubectl
        'kubectl'
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    readiness_timeout: float = 300.0
    poll_interval: float = Field(default=2.0, gt=0, allow_inf_nan=False)
    request_timeout: float = 30.0
    kubectl: str = "kubectl"
    default_namespace: str = "mesh-system"

    @field_validator("readiness_timeout", "request_timeout", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> float:
        if isinstance(v, (str, int, float)):
            return parse_duration(v)
        return cast(float, v)


def load_apply_settings(config: Config) -> ApplySettings:
    """Parse the ``[apply]`` section, falling back to defaults when absent.

    Raises:
        ConfigurationError: If the section holds invalid values.

    Example:
        >>> load_apply_settings(Config({"apply": {"poll_interval": 0.5}}, {})).poll_interval
        0.5
    """
    raw: object = config.get("apply", default={})
    try:
        return ApplySettings.model_validate(cast("dict[str, object]", raw) if raw else {})
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"invalid [apply] settings: {exc}") from exc


__all__ = [
    "ApplySettings",
    "load_apply_settings",
    "parse_duration",
]

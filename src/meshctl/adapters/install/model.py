"""Pydantic model of the install configuration tree.

The tree uses the camelCase keys users write in install files and ``--set``
paths (``installPackagePath``, ``ingressGateway``). Validation error
locations therefore name the same paths, which lets the resolver drop an
offending path when ``force`` is set.

Contents:
    * :class:`ComponentSpec` - Settings shared by every component.
    * :class:`Components` - The fixed set of installable components.
    * :class:`InstallSpec` - Root of the install configuration.
    * :func:`format_problems` - Render pydantic errors as ``path: message`` lines.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

#: Component keys accepted under ``components``.
COMPONENT_NAMES: tuple[str, ...] = ("controller", "ingressGateway", "egressGateway", "cni")

_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def is_dns_label(value: str) -> bool:
    """Return True when *value* is a valid RFC 1123 label.

    Examples:
        >>> is_dns_label("mesh-system")
        True
        >>> is_dns_label("Canary_1")
        False
        >>> is_dns_label("a" * 64)
        False
    """
    return len(value) <= 63 and _DNS_LABEL.match(value) is not None


def _check_label(value: str, what: str) -> str:
    if not is_dns_label(value):
        raise ValueError(f"{what} {value!r} must be a lowercase RFC 1123 label")
    return value


class ComponentSpec(BaseModel):
    """One installable component.

    Example:
        >>> ComponentSpec.model_validate({"replicas": 2}).replicas
        2
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = False
    replicas: int = Field(default=1, ge=0)
    namespace: str | None = None

    @field_validator("namespace")
    @classmethod
    def _namespace_is_label(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_label(v, "namespace")


class Components(BaseModel):
    """Fixed set of components; unknown names are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    controller: ComponentSpec = ComponentSpec()
    ingress_gateway: ComponentSpec = Field(default=ComponentSpec(), alias="ingressGateway")
    egress_gateway: ComponentSpec = Field(default=ComponentSpec(), alias="egressGateway")
    cni: ComponentSpec = ComponentSpec()

    def by_name(self) -> dict[str, ComponentSpec]:
        """Return the components keyed by their configuration name."""
        return {
            "controller": self.controller,
            "ingressGateway": self.ingress_gateway,
            "egressGateway": self.egress_gateway,
            "cni": self.cni,
        }


class InstallSpec(BaseModel):
    """Root of the install configuration.

    Example:
        >>> spec = InstallSpec.model_validate({"revision": "canary", "components": {"controller": {"enabled": True}}})
        >>> spec.revision, spec.components.controller.enabled
        ('canary', True)
        >>> spec.namespace
        'mesh-system'
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    profile: str = "default"
    revision: str = ""
    namespace: str = "mesh-system"
    hub: str = "docker.io/meshctl"
    tag: str = "1.0.0"
    install_package_path: str = Field(default="", alias="installPackagePath")
    components: Components = Components()
    values: dict[str, Any] = Field(default_factory=dict)

    @field_validator("revision")
    @classmethod
    def _revision_is_label(cls, v: str) -> str:
        if v == "":
            return v
        return _check_label(v, "revision")

    @field_validator("namespace")
    @classmethod
    def _namespace_is_label(cls, v: str) -> str:
        return _check_label(v, "namespace")

    @field_validator("hub", "tag")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


def error_paths(exc: ValidationError) -> list[tuple[str | int, ...]]:
    """Return the location of every error in *exc*."""
    return [tuple(error["loc"]) for error in exc.errors()]


def format_problems(exc: ValidationError) -> list[str]:
    """Render pydantic errors as ``dotted.path: message`` lines.

    Example:
        >>> try:
        ...     InstallSpec.model_validate({"revision": "Bad"})
        ... except ValidationError as exc:
        ...     format_problems(exc)[0].startswith("revision: ")
        True
    """
    problems: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{path}: {error['msg']}")
    return problems


__all__ = [
    "COMPONENT_NAMES",
    "ComponentSpec",
    "Components",
    "InstallSpec",
    "error_paths",
    "format_problems",
    "is_dns_label",
]

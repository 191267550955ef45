"""Domain-specific exceptions for typed error handling at boundaries.

Every failure of the apply pipeline is an :class:`ApplyError`. The CLI maps
each subclass to its own exit code; library callers can catch the base class
and inspect :attr:`ApplyError.states` to see how far the run got.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import ApplyState


class ConfigurationError(Exception):
    """Missing, invalid, or incomplete application settings.

    Raised when the ``[apply]`` section of the layered configuration cannot
    be parsed. Unrelated to the install configuration, which raises
    :class:`ConfigValidationError`.

    Example:
        >>> str(ConfigurationError("apply.poll_interval must be positive"))
        'apply.poll_interval must be positive'
    """


class ApplyError(Exception):
    """Base class for every apply pipeline failure.

    Attributes:
        states: Pipeline states visited before the failure, ending with
            ``ApplyState.FAILED``. Filled in by the orchestrator; empty when
            a component is used on its own.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.states: tuple[ApplyState, ...] = ()


class ClusterConnectionError(ApplyError):
    """The cluster cannot be reached or no client could be built.

    Example:
        >>> str(ClusterConnectionError("kubectl not found on PATH"))
        'kubectl not found on PATH'
    """


class ClusterAPIError(Exception):
    """A single cluster API call failed.

    Raised by cluster clients; pipeline components translate it into the
    matching :class:`ApplyError` subclass.

    Attributes:
        reason: Machine-readable failure reason such as ``AlreadyExists``
            or ``NotFound``; empty when unknown.

    Example:
        >>> err = ClusterAPIError("namespaces 'x' already exists", reason="AlreadyExists")
        >>> err.reason
        'AlreadyExists'
    """

    def __init__(self, message: str, *, reason: str = "") -> None:
        super().__init__(message)
        self.reason = reason


class ConfigValidationError(ApplyError):
    """The install configuration is invalid.

    Attributes:
        problems: One human-readable line per validation problem.

    Example:
        >>> err = ConfigValidationError(["revision: not a DNS label"])
        >>> str(err)
        'invalid install configuration:\\n  - revision: not a DNS label'
    """

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems = tuple(problems)
        lines = "\n".join(f"  - {problem}" for problem in self.problems)
        super().__init__(f"invalid install configuration:\n{lines}")


class ReconcileError(ApplyError):
    """Applying the rendered resources failed; never suppressed by ``force``.

    Attributes:
        errors: One line per resource that could not be applied.
    """

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        lines = "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(f"errors occurred during apply:\n{lines}")


class ReadinessTimeoutError(ApplyError):
    """Resources did not become ready before the readiness timeout.

    Attributes:
        unready: Display names (``Kind/namespace/name``) of resources that
            were still not ready.
        timeout: The timeout that elapsed, in seconds.

    Example:
        >>> err = ReadinessTimeoutError(["Deployment/mesh-system/mesh-controller"], 5.0)
        >>> "Deployment/mesh-system/mesh-controller" in str(err)
        True
    """

    def __init__(self, unready: Sequence[str], timeout: float) -> None:
        self.unready = tuple(unready)
        self.timeout = timeout
        names = ", ".join(self.unready)
        super().__init__(f"resources not ready after {timeout:g}s: {names}")


class PersistenceError(ApplyError):
    """The installed-state record could not be written.

    Raised after an otherwise successful install: the resources are applied
    but the record is missing. Re-running the apply retries the write.
    """


__all__ = [
    "ApplyError",
    "ClusterAPIError",
    "ClusterConnectionError",
    "ConfigValidationError",
    "ConfigurationError",
    "PersistenceError",
    "ReadinessTimeoutError",
    "ReconcileError",
]

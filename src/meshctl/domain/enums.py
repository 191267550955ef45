"""Type-safe domain enums for pipeline states, install health and output formats."""

from __future__ import annotations

from enum import Enum


class ApplyState(str, Enum):
    """States of one apply orchestration run, in pipeline order.

    Every state is a precondition for the next. ``WAITED_READY`` is only
    visited when the caller asked to wait for readiness. ``FAILED`` is
    terminal and may follow any other state.

    Example:
        >>> ApplyState.CONFIG_RESOLVED.value
        'config_resolved'
        >>> ApplyState.DONE == "done"
        True
    """

    START = "start"
    CONFIG_RESOLVED = "config_resolved"
    NAMESPACE_READY = "namespace_ready"
    RECONCILED = "reconciled"
    WAITED_READY = "waited_ready"
    PERSISTED = "persisted"
    DONE = "done"
    FAILED = "failed"


class InstallStatus(str, Enum):
    """Aggregate health reported by reconciliation.

    Only ``HEALTHY`` lets the pipeline continue to persistence.

    Example:
        >>> InstallStatus.HEALTHY.value
        'HEALTHY'
    """

    HEALTHY = "HEALTHY"
    ERROR = "ERROR"


class OutputFormat(str, Enum):
    """Output format options for configuration display.

    Inherits from str to allow direct string comparison and Click integration.

    Example:
        >>> OutputFormat.HUMAN.value
        'human'
        >>> OutputFormat.JSON == "json"
        True
    """

    HUMAN = "human"
    JSON = "json"


__all__ = [
    "ApplyState",
    "InstallStatus",
    "OutputFormat",
]

"""In-memory logging adapter for testing.

Commands bind log context through ``lib_log_rich.runtime.bind``, which
requires a running runtime. This adapter starts a quiet one that reads no
``.env`` files and ignores the ``[lib_log_rich]`` section.
"""

from __future__ import annotations

import lib_log_rich.runtime
from lib_layered_config import Config

from meshctl import __init__conf__


def init_logging_in_memory(config: Config) -> None:
    """Start a runtime that only prints critical records, once per process.

    Example:
        >>> init_logging_in_memory(Config({}, {}))
        >>> lib_log_rich.runtime.is_initialised()
        True
    """
    if lib_log_rich.runtime.is_initialised():
        return
    lib_log_rich.runtime.init(
        lib_log_rich.runtime.RuntimeConfig(
            service=__init__conf__.name,
            environment="test",
            console_level="CRITICAL",
            backend_level="CRITICAL",
        )
    )


__all__ = ["init_logging_in_memory"]

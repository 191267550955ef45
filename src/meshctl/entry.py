"""Console script entry point for ``meshctl`` with production wiring.

Lives at package level, outside ``adapters``, so that wiring the composition
root into the CLI does not make the adapters layer import composition.
"""

from __future__ import annotations

from .adapters.cli.main import main as cli_main
from .composition import build_production


def main() -> int:
    """Run the ``meshctl`` CLI against the real cluster adapters.

    Returns:
        Exit code of the CLI run.
    """
    return cli_main(services_factory=build_production)


__all__ = ["main"]

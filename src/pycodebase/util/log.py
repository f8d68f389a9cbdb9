from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

_configured = False


def configure_logging(level: str | int = "WARNING") -> None:
    """Route pycodebase loggers through rich. Safe to call more than once."""
    global _configured
    root = logging.getLogger("pycodebase")
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING
    root.setLevel(level)
    if _configured:
        return
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False, markup=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.propagate = False
    _configured = True

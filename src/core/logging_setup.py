"""Logging configuration.

Goals:
- One place that wires stdlib `logging` to Rich, so log lines and Rich tables
  share the same stderr console.
- Safe to call more than once (tests, nested CLI invocations).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "fastlane-desk"


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach a single RichHandler to the root logger and set its level."""

    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    root.setLevel(level)

    if not any(getattr(h, "name", None) == _HANDLER_NAME for h in root.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    return root

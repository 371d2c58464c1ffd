"""Logging setup shared by the CLI entrypoints."""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route ``ce_translator`` loggers through a rich console handler."""
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s %(message)s"))

    root = logging.getLogger("ce_translator")
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
    root.propagate = False

"""Rich console logging for the extractor and its CLI."""

from __future__ import annotations

import logging
from typing import Iterable

from rich.console import Console
from rich.logging import RichHandler

QUIET_LOGGERS = ("rdflib",)


def configure_logging(level: str = "INFO", *, rich_tracebacks: bool = True) -> None:
    """Send log records to stderr through rich so stdout stays free for serialized quads.

    Resolution failures are logged at DEBUG by the processor; the CLI
    defaults to WARNING so dropped statements stay silent unless asked for.
    """
    console = Console(stderr=True)
    handler = RichHandler(console=console, rich_tracebacks=rich_tracebacks, markup=False, show_path=False)
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True, format="%(message)s")
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, *extra_names: Iterable[str]) -> logging.Logger:
    """Logger under ``name``; ``extra_names`` are appended as dotted children (``rdfastream.processor.copy``)."""
    namespace = ".".join([name, *extra_names]) if extra_names else name
    return logging.getLogger(namespace)


__all__ = ["configure_logging", "get_logger"]

"""Structured logging configuration using structlog.

Loggers are obtained per module with ``get_logger(__name__)`` and write
through the standard library ``logging`` tree under ``sequencer``, so a host
application decides where output goes. ``setup_logging`` attaches a stderr
handler with JSON or console rendering, for the CLI and for development.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

ROOT_LOGGER = "sequencer"

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def setup_logging(level: str = "INFO", format: str = "json") -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: "json" for production, "console" for development
    """
    level_num = LEVELS.get(level.upper(), 20)
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level_num)
    root.propagate = False


def reset_logging() -> None:
    """Undo ``setup_logging``: drop the stderr handler and structlog config."""
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True
    structlog.reset_defaults()


def get_logger(name: str) -> Any:
    """Get a structlog logger writing to the stdlib logger ``name``."""
    return structlog.wrap_logger(logging.getLogger(name))

"""
Structured logging for the capacity package, structlog over stdlib logging.

Environment:
    CAPACITY_LOG_LEVEL   stdlib level name, WARNING when unset
    CAPACITY_LOG_FORMAT  "json" for one JSON object per line, console otherwise

Logs always go to stderr. The CLI prints its JSON results on stdout, so the
two never mix.

Usage:
    from capacity.logging_config import bind_context, get_logger, setup_logging
    setup_logging()
    bind_context(command="results")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

DEFAULT_LEVEL = "WARNING"


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Route structlog through a single root handler.

    Safe to call more than once; each call replaces the root handlers.
    """
    level = level or os.environ.get("CAPACITY_LOG_LEVEL", DEFAULT_LEVEL)
    if json_output is None:
        json_output = os.environ.get("CAPACITY_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def bind_context(**values: Any) -> None:
    """Attach key/value pairs to every log line until clear_context()."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["bind_context", "clear_context", "get_logger", "setup_logging"]

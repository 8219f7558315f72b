"""Structured logging configuration.

Logs are written to stderr; stdout carries record output only. Each
operator run binds its name and input to the context, so every event
emitted underneath it (domain services included) carries both.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from structlog.types import Processor


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    cache_loggers: bool = True,
) -> None:
    """Route structlog and stdlib logging to stderr at ``level``.

    ``log_format`` is ``json`` for machine-readable lines or ``console`` for
    the development renderer. Pass ``cache_loggers=False`` when the process
    reconfigures logging or replaces stderr later.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=cache_loggers,
    )


def ensure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Configure logging unless the host application already has."""
    if not structlog.is_configured():
        setup_logging(level, log_format)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Module logger, optionally pre-bound with ``initial_context``."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


@contextmanager
def operator_context(operator: str, **fields: Any) -> Iterator[None]:
    """Bind an operator run's identity to every log event inside the block."""
    with structlog.contextvars.bound_contextvars(operator=operator, **fields):
        yield

"""Structured logging configuration.

Every module logs through ``get_logger(__name__)`` with snake_case event
names and keyword context. Values bound with ``bind_session_context`` (the
session owner, the active discovery source) are merged into every event
emitted afterwards on the same context.
"""

import logging
import sys
from typing import Any

import structlog

from replay_studio.config import settings

NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        level: Overrides ``LOG_LEVEL`` (the CLI passes DEBUG for --verbose)
        log_format: Overrides ``LOG_FORMAT`` ("json" or "console")
    """
    log_format = log_format or settings.log_format
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    # Replace rather than append so repeated setup (CLI, app import) logs once
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel((level or settings.log_level).upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_session_context(**values: Any) -> None:
    """Attach session-wide fields (e.g. ``user_id``) to subsequent log events."""
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_session_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance for a module."""
    return structlog.get_logger(name)

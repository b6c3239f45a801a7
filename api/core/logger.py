"""Structured logging for the Branch Office API (structlog over stdlib).

Both structlog loggers and plain stdlib loggers (uvicorn, sqlalchemy, alembic)
are rendered by the same processor chain:

- ``LOG_FORMAT=json``: one JSON object per line, for log aggregation
- anything else: colored key=value console output
- ``LOG_LEVEL``: root level, INFO by default

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("branch_office.created", branch_office_id="b1")
"""

import logging
import os
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

__all__ = ["configure_logging", "get_logger"]

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncio")


def _drop_color_message(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """uvicorn duplicates every message as an ANSI-colored ``color_message``."""
    event_dict.pop("color_message", None)
    return event_dict


def _log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return logging.getLevelNamesMapping().get(level_name, logging.INFO)


def _renderer() -> Processor:
    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _shared_processors() -> list[Processor]:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        # stdlib ``extra={...}`` fields become event keys
        structlog.stdlib.ExtraAdder(),
        _drop_color_message,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging() -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Safe to call more than once; the root handlers are replaced each time.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _renderer(),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_log_level())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Example:
        logger = get_logger(__name__)
        logger.warning("branch_office.name_check.failed", name="North")
    """
    return structlog.stdlib.get_logger(name)

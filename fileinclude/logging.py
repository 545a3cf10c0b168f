"""Structured logging configuration for fileinclude.

This module provides structlog-based logging with:
- JSON output (when env var FILEINCLUDE_LOG_FORMAT=json)
- Pretty console output (default)

Usage:
    from fileinclude.logging import get_logger, configure_logging

    configure_logging()

    log = get_logger(__name__)
    log.warning("include_failed", path="partials/header.html")
"""

from __future__ import annotations

import logging
import os
import sys

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
]

# Environment variable for log format
LOG_FORMAT_ENV_VAR = "FILEINCLUDE_LOG_FORMAT"

# Environment variable for log level
LOG_LEVEL_ENV_VAR = "FILEINCLUDE_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"


def _get_log_level() -> int:
    """Get the log level from environment or default."""
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def _is_json_output() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _get_shared_processors() -> list[Processor]:
    """Get processors shared between stdlib and structlog."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Call once from the host application. Subsequent calls reconfigure
    logging. Loggers are not cached on first use so that
    ``structlog.testing.capture_logs`` keeps working after configuration.

    Args:
        force_json: Force JSON output regardless of environment variable.
        level: Override log level. If None, reads FILEINCLUDE_LOG_LEVEL.
    """
    use_json = force_json or _is_json_output()
    log_level = level if level is not None else _get_log_level()

    renderer: Processor
    if use_json:
        renderer = structlog.processors.JSONRenderer()
        exc_processor: Processor = structlog.processors.dict_tracebacks
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        exc_processor = structlog.processors.format_exc_info

    # Rendering happens once, in the stdlib handler's formatter
    structlog.configure(
        processors=[
            *_get_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                exc_processor,
                renderer,
            ],
            foreign_pre_chain=_get_shared_processors(),
        )
    )
    root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, usually the caller's ``__name__``.

    Returns:
        A bound structlog logger.
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log

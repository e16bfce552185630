"""
Structured logging for hosts that embed proofchain and for the CLI.

Log lines are written to stderr, keeping stdout free for machine-readable
command output. Development gets a console renderer; staging and production
get one JSON object per line with structured tracebacks.
"""

import logging
import sys
from typing import cast

import structlog
from structlog.types import Processor

from proofchain.core.config import get_settings

# Loggers of third-party clients that are chatty at INFO (one line per request).
_QUIET_LOGGERS = ("httpx", "httpcore")


def _renderers(environment: str) -> list[Processor]:
    if environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]
    return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog over the standard library.

    ``level`` overrides ``Settings.log_level`` (the CLI's ``--log-level``).
    """
    settings = get_settings()
    numeric_level: int = getattr(logging, (level or settings.log_level).upper())

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderers(settings.environment),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger("proofchain").setLevel(numeric_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, numeric_level))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to ``name``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))

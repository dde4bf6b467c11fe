"""
Structured logging configuration using structlog.
Human-readable console output in development, JSON lines everywhere else.
"""

import logging
import sys
from typing import cast

import structlog
from structlog.types import Processor

from untamper.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structured logging for the verification client.

    Library users that already configure structlog can skip this; loggers
    obtained through :func:`get_logger` then follow the host configuration.
    """
    settings = settings or get_settings()

    # Processors shared by the console and JSON renderers
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "development":
        # Development: readable colored output on the terminal
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        # Staging/production: one JSON object per line for log shippers
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging through the same handler; stderr keeps stdout free
    # for the JSON report printed by tools/verify_log_export.py
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance with the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))

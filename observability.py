"""Structured logging setup.

Call `init_observability` once at process start, before the app logs anything.
"""
from __future__ import annotations

import logging
from typing import Optional

import structlog

from settings import Settings, get_settings

__all__ = [
    "init_observability",
]


def _setup_logging(log_format: str, log_level: str) -> None:
    """Configure structlog for structured logging (JSON or console)."""

    # Define shared processors
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format.lower() == "json":
        final_processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [final_processor],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # structlog renders the message; the stdlib handler just writes it out
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler())
    root_logger.setLevel(log_level.upper())

    # Requests are logged by RequestIdMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def init_observability(settings: Optional[Settings] = None) -> None:
    """Setup logging. Call once at process start."""

    settings = settings or get_settings()
    _setup_logging(settings.log_format, settings.log_level)

    structlog.get_logger(__name__).info(
        "Observability initialized", log_format=settings.log_format, log_level=settings.log_level
    )

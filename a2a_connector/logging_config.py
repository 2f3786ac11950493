# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Structured logging for the connector.

structlog events and stdlib records (uvicorn, httpx) go through one
``ProcessorFormatter`` on stdout: one JSON object per line by default,
the console renderer when ``LOG_FORMAT=text``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from .config import Settings

# Third-party loggers that only matter at WARNING and above
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


class ConnectorContext:
    """Stamps every entry with the service identity from settings."""

    def __init__(self, settings: Settings) -> None:
        self._context = {
            "service": "a2a-connector",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in self._context.items():
            event_dict.setdefault(key, value)
        return event_dict


def _renderers(log_format: str) -> list[Processor]:
    if log_format == "json":
        # Exceptions become a structured "exception" list instead of a text blob
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging through one stdout handler."""
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.UnicodeDecoder(),
        ConnectorContext(settings),
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderers(settings.log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

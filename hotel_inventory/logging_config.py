"""
structlog setup shared by the API process, the one-shot sync job and scripts.

Every event carries ``service`` and ``environment``; values bound through
structlog.contextvars (``request_id`` from RequestIDMiddleware, ``booking_id``
inside background PMS pushes) are merged on the thread or task that bound them.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping

import structlog

from hotel_inventory import config

EventDict = MutableMapping[str, Any]
Processor = Callable[[Any, str, EventDict], Any]

SERVICE_NAME = "hotel-inventory"

# Third-party loggers that drown out booking events at INFO
QUIET_LOGGERS = ("urllib3", "requests", "apscheduler", "uvicorn.access", "alembic.runtime")


def add_service_context(_: Any, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", config.ENVIRONMENT)
    return event_dict


def select_renderer(log_format: str) -> Processor:
    """JSON for ``json``; anything else gets the coloured dev console."""
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure stdlib logging and structlog for the whole process.

    Args:
        level: Overrides LOG_LEVEL (e.g. "DEBUG")
        log_format: Overrides LOG_FORMAT; "json" or "console"
    """
    level = (level or config.LOG_LEVEL).upper()
    log_format = (log_format or config.LOG_FORMAT).lower()
    numeric_level = logging.getLevelName(level)

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if log_format == "json":
        # The console renderer prints tracebacks itself
        processors.append(structlog.processors.format_exc_info)
    processors.append(select_renderer(log_format))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

"""structlog setup shared by the HTTP service and the pick CLI."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from .settings import settings

SERVICE_NAME = "youpick"
SERVICE_VERSION = "0.1.0"

# Loggers whose lines duplicate what the request middleware records.
NOISY_LOGGERS = ("uvicorn.access", "httpx")


def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", SERVICE_VERSION)
    event_dict.setdefault("environment", settings.SENTRY_ENVIRONMENT)
    return event_dict


def bind_pick_context(intent: Any, filters: Iterable[str] = ()) -> None:
    """Tag every later log line in the current context with the pick's intent and filters."""
    structlog.contextvars.bind_contextvars(
        intent=str(getattr(intent, "value", intent)),
        filters=sorted({token.strip().lower() for token in filters if token and token.strip()}),
    )


def shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]


def configure_structlog(json_logs: bool = False, stream: Any = None) -> None:
    """
    Configure structlog for the service or the CLI.

    Args:
        json_logs: Emit one JSON object per line. Console rendering is only used
                   when this is off and DEBUG is on.
        stream: Where stdlib log records go. The CLI passes stderr so its stdout
                stays machine-readable. Defaults to stdout.
    """
    if json_logs or not settings.DEBUG:
        renderers: list[Processor] = [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=shared_processors() + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["bind_pick_context", "configure_structlog", "get_logger"]

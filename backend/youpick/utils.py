from __future__ import annotations

import time
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger
from .settings import settings

REQUEST_ID_HEADER = "X-Request-ID"
# health checks and metric scrapes log nothing
QUIET_PATHS = frozenset({"/health", "/metrics"})

logger = get_logger(__name__)


def add_cors(app: FastAPI) -> None:
    origins = settings.allow_origins
    if not origins:
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Start each request with a clean structlog context.

    The request ID is taken from X-Request-ID or generated, bound for every log
    line the request produces, and echoed on the response. Requests outside
    QUIET_PATHS end with one ``request_complete`` line.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        if request.url.path not in QUIET_PATHS:
            logger.info(
                "request_complete",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        return response


def add_request_context(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)

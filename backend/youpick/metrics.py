"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from functools import lru_cache

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# ==============================================================================
# APPLICATION INFO
# ==============================================================================

app_info = Info("youpick", "YouPick place-matching API information")
app_info.info({"version": "0.1.0", "service": "youpick-api"})

# ==============================================================================
# HTTP METRICS
# ==============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"],
)

# ==============================================================================
# PIPELINE METRICS
# ==============================================================================

pipeline_runs_total = Counter(
    "pipeline_runs_total",
    "Total filter pipeline invocations",
    ["intent"],
)

pipeline_tier_runs_total = Counter(
    "pipeline_tier_runs_total",
    "Total widening tiers executed",
    ["tier"],
)

pipeline_rejections_total = Counter(
    "pipeline_rejections_total",
    "Candidates rejected by the filter pipeline",
    ["reason"],
)

pipeline_results = Histogram(
    "pipeline_results",
    "Number of candidates returned per pipeline run",
    buckets=(0, 1, 3, 5, 8, 12, 20, 40),
)

guardrail_applied_total = Counter(
    "guardrail_applied_total",
    "Guardrail post-processor applications",
    ["guardrail"],
)

guardrail_fallback_injections_total = Counter(
    "guardrail_fallback_injections_total",
    "Curated fallback entries injected by the free+outdoor guardrail",
)

# ==============================================================================
# CACHE METRICS
# ==============================================================================

cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_name"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_name"],
)

cache_size = Gauge(
    "cache_size",
    "Current cache size (number of entries)",
    ["cache_name"],
)


def rejection_family(reason: str) -> str:
    """Collapse ``excluded_type:plumber`` style reasons to a bounded label."""
    return reason.split(":", 1)[0]


@lru_cache(maxsize=2048)
def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path to reduce cardinality.

    Examples:
        /v1/picks/123 -> /v1/picks/{id}
    """
    path = re.sub(r"/\d+", "/{id}", path)
    path = re.sub(r"/[a-zA-Z0-9_-]{20,}", "/{id}", path)
    return path


# ==============================================================================
# PROMETHEUS MIDDLEWARE
# ==============================================================================


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = normalize_endpoint(request.url.path)
        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            http_requests_total.labels(method=method, endpoint=endpoint, status="500").inc()
            raise
        finally:
            duration = time.time() - start_time
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        http_requests_total.labels(
            method=method, endpoint=endpoint, status=str(response.status_code)
        ).inc()
        return response


def get_metrics() -> Response:
    """Generate Prometheus metrics response."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "PrometheusMiddleware",
    "get_metrics",
    "normalize_endpoint",
    "rejection_family",
    "pipeline_runs_total",
    "pipeline_tier_runs_total",
    "pipeline_rejections_total",
    "pipeline_results",
    "guardrail_applied_total",
    "guardrail_fallback_injections_total",
    "cache_hits_total",
    "cache_misses_total",
    "cache_size",
]

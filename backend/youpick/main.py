from __future__ import annotations

import sentry_sdk
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration

from .api.routes import picks as picks_routes
from .health import health_checker
from .logging_config import SERVICE_NAME, SERVICE_VERSION, configure_structlog, get_logger
from .metrics import PrometheusMiddleware, get_metrics
from .schemas import HealthResponse
from .settings import settings
from .utils import add_cors, add_request_context

# Configure structured logging (must be done before any logging calls)
configure_structlog(json_logs=not settings.DEBUG)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.SENTRY_RELEASE or f"{SERVICE_NAME}@dev",
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

app = FastAPI(
    title="YouPick API",
    version=SERVICE_VERSION,
    description="Place matching and ranking for spin-the-wheel picks",
)
add_cors(app)
add_request_context(app)
app.add_middleware(PrometheusMiddleware)

API_PREFIX = "/v1"

app.include_router(picks_routes.router, prefix=API_PREFIX)

logger = get_logger(__name__)


@app.get("/health", response_model=HealthResponse)
def health():
    """Report whether the rule table and curated pool are usable."""
    status = health_checker.check_all()
    body = HealthResponse(
        status=status["status"],
        checks=status["checks"],
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
    )
    code = 200 if status["status"] == "healthy" else 503
    if code != 200:
        logger.warning("health_degraded", checks=status["checks"])
    return JSONResponse(body.model_dump(), status_code=code)


@app.get("/metrics", include_in_schema=False)
def metrics():
    return get_metrics()

"""Health check module for the rule table and curated fallback pool."""

from __future__ import annotations

from typing import Any

from .matching.guardrails import FALLBACK_POOL_PATH, load_fallback_pool
from .matching.rules import CATEGORY_RULES
from .matching.types import Intent
from .settings import settings


def _is_configured(value: str | None) -> bool:
    """Return True when a config string is non-empty after trimming."""
    if value is None:
        return False
    return bool(value.strip())


class HealthChecker:
    """Checks the static inputs the pipeline cannot run without."""

    def check_all(self) -> dict[str, Any]:
        checks = {
            "rules": self._check_rules(),
            "fallback_pool": self._check_fallback_pool(),
            "sentry": {"status": "ok"} if _is_configured(settings.SENTRY_DSN) else {"status": "disabled"},
        }
        all_ok = all(check.get("status") in {"ok", "disabled"} for check in checks.values())
        return {"status": "healthy" if all_ok else "degraded", "checks": checks}

    def _check_rules(self) -> dict[str, Any]:
        missing = [intent.value for intent in Intent if intent not in CATEGORY_RULES]
        if missing:
            return {"status": "error", "missing_intents": missing}
        return {"status": "ok", "intents": len(CATEGORY_RULES)}

    def _check_fallback_pool(self) -> dict[str, Any]:
        try:
            pool = load_fallback_pool()
        except (OSError, ValueError) as exc:
            return {
                "status": "error",
                "error": str(exc),
                "error_type": type(exc).__name__,
                "path": str(FALLBACK_POOL_PATH),
            }
        if len(pool) < settings.GUARDRAIL_TARGET:
            return {"status": "degraded", "entries": len(pool)}
        return {"status": "ok", "entries": len(pool)}


health_checker = HealthChecker()

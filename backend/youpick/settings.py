from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    # human-readable console logs instead of JSON
    DEBUG: bool = False

    # CORS allow origins (comma-separated). Default empty (no cross-origin).
    CORS_ALLOW_ORIGINS: str = ""

    # Filter pipeline
    PIPELINE_MIN_RESULTS: int = 8
    PIPELINE_SHUFFLE_WEIGHT: float = 0.0
    # Tier 3 keeps price/setting as rank adjustments instead of ignoring them
    TIER3_ADVISORY_PREFERENCES: bool = True
    SCORE_WEIGHTS: str = "type=5,keyword=2,rating=1,popular=2,known=1"

    # Free+outdoor guardrail curated top-up
    GUARDRAIL_FLOOR: int = 3
    GUARDRAIL_TARGET: int = 6

    # Candidate acquisition
    PLACES_CACHE_TTL_SECONDS: int = 600
    PLACES_CACHE_MAX_ENTRIES: int = 512
    DEFAULT_RADIUS_METERS: int = 5000
    NEAR_ME_RADIUS_METERS: int = 1500
    ANY_DISTANCE_RADIUS_METERS: int = 15000
    MAX_CANDIDATES: int = 60

    # Observability
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_RELEASE: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    @property
    def allow_origins(self) -> list[str]:
        s = (self.CORS_ALLOW_ORIGINS or "").strip()
        if s == "*":
            return ["*"]
        if s == "":
            return []
        return [part.strip() for part in s.split(",") if part.strip()]

    @property
    def parsed_score_weights(self) -> ScoreWeights:
        return ScoreWeights.from_string(self.SCORE_WEIGHTS)


@dataclass(slots=True, frozen=True)
class ScoreWeights:
    type: float = 5.0
    keyword: float = 2.0
    rating: float = 1.0
    popular: float = 2.0
    known: float = 1.0

    @classmethod
    def from_string(cls, payload: str | None) -> ScoreWeights:
        base = cls()
        if not payload:
            return base
        mapping: dict[str, float] = {}
        for part in payload.split(","):
            if "=" not in part:
                continue
            key, value = part.split("=", 1)
            key = key.strip().lower()
            try:
                mapping[key] = float(value.strip())
            except ValueError:
                continue
        return cls(
            type=mapping.get("type", base.type),
            keyword=mapping.get("keyword", base.keyword),
            rating=mapping.get("rating", base.rating),
            popular=mapping.get("popular", base.popular),
            known=mapping.get("known", base.known),
        )


settings = Settings()

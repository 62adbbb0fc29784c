from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .matching.types import Intent


class PickRequest(BaseModel):
    intent: str | None = Field(default=None, max_length=32)
    filters: list[str] = Field(default_factory=list, max_length=12)
    vibe: str | None = Field(default=None, max_length=48)
    min_results: int | None = Field(default=None, ge=0, le=50)
    shuffle_weight: float | None = Field(default=None, ge=0.0, le=10.0)
    exclude_ids: list[str] = Field(default_factory=list)
    # raw POI records; malformed ones are skipped by the pipeline, not rejected here
    candidates: list[dict[str, Any]] = Field(default_factory=list, max_length=500)

    @field_validator("filters", mode="before")
    @classmethod
    def _filters(cls, value):  # type: ignore[override]
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def resolved_intent(self) -> Intent:
        return Intent.parse(self.intent)


class PickedPlace(BaseModel):
    id: str | None
    name: str
    types: list[str]
    price_level: int | None
    rating: float
    rating_count: int
    vicinity: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    photos: list[str] = Field(default_factory=list)
    score: float
    rank: int
    tier: int
    curated: bool = False


class PickResponse(BaseModel):
    intent: Intent
    results: list[PickedPlace]
    guardrails: list[str] = Field(default_factory=list)
    injected: int = 0
    skipped: int = 0
    tiers_run: list[int] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    checks: dict[str, dict[str, Any]]
    service: str
    version: str

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CandidateError(ValueError):
    """Raised when a raw POI record cannot be turned into a Candidate."""


class Intent(str, Enum):
    FOOD = "food"
    DRINKS = "drinks"
    ACTIVITY = "activity"
    SHOPPING = "shopping"
    EVENTS = "events"
    WELLNESS = "wellness"
    SURPRISE = "surprise"

    @classmethod
    def parse(cls, value: Intent | str | None) -> Intent:
        """Resolve a raw intent; blank or unknown values mean ``surprise``."""
        if isinstance(value, Intent):
            return value
        token = (value or "").strip().lower()
        if token == "services":
            # older clients send the internal name for wellness
            return cls.WELLNESS
        try:
            return cls(token)
        except ValueError:
            return cls.SURPRISE


class PriceToken(str, Enum):
    CHEAP = "cheap"
    MID = "mid"
    TREAT = "treat"


class Setting(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


DISTANCE_TOKENS = frozenset({"near-me", "any-distance"})


@dataclass(frozen=True, slots=True)
class PreferenceVector:
    price: PriceToken | None = None
    setting: frozenset[Setting] = frozenset()
    vibe: str | None = None
    distance: str | None = None

    @classmethod
    def from_filters(
        cls, filters: Iterable[str] | None, vibe: str | None = None
    ) -> PreferenceVector:
        price: PriceToken | None = None
        setting: set[Setting] = set()
        distance: str | None = None
        for raw in filters or ():
            token = str(raw).strip().lower()
            if price is None and token in PriceToken._value2member_map_:
                price = PriceToken(token)
            elif token in Setting._value2member_map_:
                setting.add(Setting(token))
            elif token in DISTANCE_TOKENS and distance is None:
                distance = token
        vibe_token = (vibe or "").strip().lower() or None
        return cls(price=price, setting=frozenset(setting), vibe=vibe_token, distance=distance)

    @property
    def tokens(self) -> list[str]:
        out: list[str] = []
        if self.price:
            out.append(self.price.value)
        out.extend(sorted(s.value for s in self.setting))
        if self.distance:
            out.append(self.distance)
        return out


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_set(value: Any, label: str) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise CandidateError(f"{label} must be a list of strings")
    return frozenset(str(item).strip().lower() for item in value if str(item).strip())


def _number(value: Any, label: str, low: float, high: float) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise CandidateError(f"{label} must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise CandidateError(f"{label} must be numeric") from exc
    if not math.isfinite(number):
        raise CandidateError(f"{label} must be finite")
    if not low <= number <= high:
        raise CandidateError(f"{label} {number} outside [{low}, {high}]")
    return number


def _photo_refs(value: Any) -> tuple[str, ...]:
    refs: list[str] = []
    for item in value or ():
        if isinstance(item, Mapping):
            ref = item.get("photo_reference") or item.get("name")
        else:
            ref = item
        if ref:
            refs.append(str(ref))
    return tuple(refs)


@dataclass(frozen=True, slots=True)
class Candidate:
    """A single raw point-of-interest record. Never mutated by the pipeline."""

    name: str
    id: str | None = None
    types: frozenset[str] = frozenset()
    price_level: int | None = None
    rating: float = 0.0
    rating_count: int = 0
    vicinity: str | None = None
    formatted_address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    photos: tuple[str, ...] = ()
    description: str | None = None
    tags: frozenset[str] = frozenset()

    @property
    def identity(self) -> str:
        return self.id or self.name

    @property
    def ranking_text(self) -> str:
        """Name and vicinity, lowercased. Ranking keywords match against this only."""
        return f"{self.name} {self.vicinity or ''}".lower()

    @property
    def searchable_text(self) -> str:
        parts = [self.name, self.vicinity or "", self.formatted_address or ""]
        return " ".join(parts).lower()

    @property
    def descriptive_text(self) -> str:
        parts = [self.searchable_text, (self.description or "").lower(), " ".join(sorted(self.tags))]
        return " ".join(part for part in parts if part)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Candidate:
        """Build a Candidate from a Places-style or snake_case payload."""
        if not isinstance(raw, Mapping):
            raise CandidateError(f"expected a mapping, got {type(raw).__name__}")

        name = _text(raw.get("name"))
        if not name:
            raise CandidateError("candidate is missing a name")

        price = _number(raw.get("price_level", raw.get("priceLevel")), "price_level", 0, 4)
        rating = _number(raw.get("rating"), "rating", 0, 5)
        count = _number(
            raw.get("rating_count", raw.get("user_ratings_total")), "rating_count", 0, float("inf")
        )

        geometry = raw.get("geometry") or {}
        location = geometry.get("location") if isinstance(geometry, Mapping) else None
        if not isinstance(location, Mapping):
            location = {}
        latitude = raw.get("latitude", location.get("lat"))
        longitude = raw.get("longitude", location.get("lng"))

        return cls(
            name=name,
            id=_text(raw.get("id") or raw.get("place_id")),
            types=_string_set(raw.get("types"), "types"),
            price_level=int(price) if price is not None else None,
            rating=rating or 0.0,
            rating_count=int(count or 0),
            vicinity=_text(raw.get("vicinity")),
            formatted_address=_text(raw.get("formatted_address")),
            latitude=_number(latitude, "latitude", -90, 90),
            longitude=_number(longitude, "longitude", -180, 180),
            photos=_photo_refs(raw.get("photos")),
            description=_text(raw.get("description")),
            tags=_string_set(raw.get("tags"), "tags"),
        )


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    reason: str


@dataclass(frozen=True, slots=True)
class ConstraintResult:
    passes: bool
    rank_boost: float = 0.0
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ResultEntry:
    candidate: Candidate
    score: float
    rank: int
    tier: int
    curated: bool = False


@dataclass(slots=True)
class PipelineResult:
    entries: list[ResultEntry] = field(default_factory=list)
    rejections: dict[str, str] = field(default_factory=dict)
    tiers_run: tuple[int, ...] = ()
    skipped: int = 0

    @property
    def candidates(self) -> list[Candidate]:
        return [entry.candidate for entry in self.entries]

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .cache import PlacesCache, make_cache_key
from .matching.types import Candidate, Intent, PreferenceVector
from .settings import settings

logger = logging.getLogger(__name__)

# Upstream place types queried per intent; sources usually take the first two.
INTENT_PLACE_TYPES: dict[Intent, tuple[str, ...]] = {
    Intent.FOOD: ("restaurant", "meal_delivery", "meal_takeaway"),
    Intent.DRINKS: ("bar", "night_club", "cafe"),
    Intent.ACTIVITY: (
        "amusement_park",
        "bowling_alley",
        "gym",
        "movie_theater",
        "museum",
        "park",
        "tourist_attraction",
    ),
    Intent.SHOPPING: ("shopping_mall", "store", "clothing_store"),
    Intent.EVENTS: ("night_club", "stadium", "movie_theater"),
    Intent.WELLNESS: ("spa", "beauty_salon", "hair_care"),
    Intent.SURPRISE: ("restaurant", "bar", "cafe", "tourist_attraction"),
}


class AcquisitionError(RuntimeError):
    """The upstream POI source failed."""


@dataclass(frozen=True, slots=True)
class SearchArea:
    latitude: float
    longitude: float
    radius_m: int


class CandidateSource(Protocol):
    def fetch(
        self, area: SearchArea, intent: Intent
    ) -> Iterable[Candidate | Mapping[str, Any]]: ...


def place_types_for(intent: Intent | str | None) -> tuple[str, ...]:
    return INTENT_PLACE_TYPES[Intent.parse(intent)]


def radius_for(prefs: PreferenceVector) -> int:
    if prefs.distance == "near-me":
        return settings.NEAR_ME_RADIUS_METERS
    if prefs.distance == "any-distance":
        return settings.ANY_DISTANCE_RADIUS_METERS
    return settings.DEFAULT_RADIUS_METERS


def _identity_of(item: Candidate | Mapping[str, Any]) -> str | None:
    if isinstance(item, Candidate):
        return item.identity
    if isinstance(item, Mapping):
        key = item.get("place_id") or item.get("id") or item.get("name")
        return str(key) if key else None
    return None


def _dedupe(items: Iterable[Candidate | Mapping[str, Any]]) -> list[Candidate | Mapping[str, Any]]:
    seen: set[str] = set()
    out: list[Candidate | Mapping[str, Any]] = []
    for item in items:
        key = _identity_of(item)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        out.append(item)
    return out


def acquire_candidates(
    source: CandidateSource,
    area: SearchArea,
    intent: Intent | str | None,
    *,
    exclude_ids: Iterable[str] = (),
    cache: PlacesCache | None = None,
    limit: int | None = None,
) -> list[Candidate | Mapping[str, Any]]:
    """
    Gather raw candidates for one search.

    Session exclusions (places the user already dismissed) are passed in
    explicitly and filtered after the cache, so one cached response serves
    every session. Raw records are returned untouched; shape problems are the
    pipeline's to skip.
    """
    intent = Intent.parse(intent)
    limit = settings.MAX_CANDIDATES if limit is None else limit
    key = make_cache_key(area.latitude, area.longitude, intent)

    raw = cache.get(key) if cache is not None else None
    if raw is None:
        try:
            raw = _dedupe(source.fetch(area, intent))
        except AcquisitionError:
            raise
        except Exception as exc:
            logger.warning("Candidate source failed for %s: %s", key, exc)
            raise AcquisitionError(f"candidate source failed: {exc}") from exc
        if cache is not None:
            cache.set(key, raw)
    else:
        logger.debug("Candidate cache hit for %s", key)

    return drop_excluded(raw, exclude_ids)[:limit]


def drop_excluded(
    items: Iterable[Candidate | Mapping[str, Any]], exclude_ids: Iterable[str]
) -> list[Candidate | Mapping[str, Any]]:
    excluded = {str(item) for item in exclude_ids}
    return [item for item in items if _identity_of(item) not in excluded]

"""
Post-pipeline overlays for "genuinely free" and "free and outdoor" searches.

These run after the general pipeline, are independently callable, and keep
their own veto lists separate from the category rule table.
"""

from __future__ import annotations

import json
import random
import re
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from ..logging_config import get_logger
from ..metrics import guardrail_applied_total, guardrail_fallback_injections_total
from ..settings import settings
from .types import Candidate, Intent, PreferenceVector, PriceToken

logger = get_logger(__name__)

FALLBACK_POOL_PATH = Path(__file__).resolve().parents[1] / "data" / "free_outdoor_pool.json"

FREE_TAG = "free"
# Price level metadata alone is an unreliable proxy for "no money at the door".
PAID_SIGNAL_KEYWORDS = (
    "admission",
    "ticket",
    "cover charge",
    "entry fee",
    "entrance fee",
    "day pass",
    "paid parking",
    "reservation required",
)

WILD_VIBES = frozenset({"free-beautiful", "wild"})

FREE_OUTDOOR_ALLOWED_TYPES = frozenset(
    {
        "park",
        "hiking_area",
        "garden",
        "botanical_garden",
        "natural_feature",
        "campground",
        "beach",
        "national_park",
        "state_park",
        "museum",
        "art_gallery",
    }
)
FREE_OUTDOOR_NAME_HINTS = (
    "park",
    "trail",
    "garden",
    "preserve",
    "greenway",
    "nature",
    "beach",
    "lake",
    "overlook",
    "museum",
    "gallery",
)
FOOD_DRINK_TYPES = frozenset(
    {
        "restaurant",
        "cafe",
        "bakery",
        "bar",
        "night_club",
        "meal_takeaway",
        "meal_delivery",
        "brewery",
        "wine_bar",
        "cocktail_bar",
        "liquor_store",
        "food",
        "fast_food_restaurant",
        "coffee_shop",
    }
)
# Chains are often typed as a generic point_of_interest, so names are checked too.
FOOD_DRINK_NAME_FRAGMENTS = (
    "mcdonald",
    "starbucks",
    "burger king",
    "wendy's",
    "taco bell",
    "chick-fil-a",
    "subway",
    "dunkin",
    "domino's",
    "pizza hut",
    "kfc",
    "chipotle",
    "applebee's",
    "chili's",
    "buffalo wild wings",
    "olive garden",
    "hooters",
)
# Generic establishment words only count as the trailing word of a name.
FOOD_DRINK_NAME_SUFFIXES = (
    "bar",
    "pub",
    "tavern",
    "saloon",
    "brewery",
    "taproom",
    "grill",
    "cantina",
    "pizzeria",
    "diner",
    "cafe",
    "coffee",
)
_FOOD_DRINK_NAME_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(fragment) for fragment in FOOD_DRINK_NAME_FRAGMENTS) + r")s?\b",
    re.IGNORECASE,
)
_FOOD_DRINK_SUFFIX_RE = re.compile(
    r"\b(?:"
    + "|".join(re.escape(suffix) for suffix in FOOD_DRINK_NAME_SUFFIXES)
    + r")s?\s*(?:&.*)?$",
    re.IGNORECASE,
)
_NAME_HINT_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(hint) for hint in FREE_OUTDOOR_NAME_HINTS) + r")s?\b",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def load_fallback_pool(path: Path = FALLBACK_POOL_PATH) -> tuple[Candidate, ...]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    return tuple(Candidate.from_mapping(item) for item in payload)


def free_only_active(prefs: PreferenceVector) -> bool:
    return prefs.price is PriceToken.CHEAP


def free_outdoor_active(prefs: PreferenceVector, intent: Intent | str | None) -> bool:
    if not free_only_active(prefs):
        return False
    if prefs.vibe in WILD_VIBES:
        return True
    return intent is None or Intent.parse(intent) is Intent.SURPRISE


def paid_signal(candidate: Candidate) -> str | None:
    text = candidate.descriptive_text
    return next((kw for kw in PAID_SIGNAL_KEYWORDS if kw in text), None)


def is_genuinely_free(candidate: Candidate) -> bool:
    if paid_signal(candidate):
        return False
    if candidate.price_level == 0:
        return True
    return candidate.price_level is None and FREE_TAG in candidate.tags


def apply_free_only_guardrail(candidates: Sequence[Candidate]) -> list[Candidate]:
    """Keep candidates that are free by price level or explicit tag, with no paid signal."""
    kept = [candidate for candidate in candidates if is_genuinely_free(candidate)]
    guardrail_applied_total.labels(guardrail="free_only").inc()
    logger.info(
        "guardrail_applied",
        guardrail="free_only",
        before=len(candidates),
        after=len(kept),
    )
    return kept


def is_food_or_drink(candidate: Candidate) -> bool:
    if not candidate.types.isdisjoint(FOOD_DRINK_TYPES):
        return True
    name = candidate.name.strip()
    return bool(_FOOD_DRINK_NAME_RE.search(name) or _FOOD_DRINK_SUFFIX_RE.search(name))


def is_free_outdoor_place(candidate: Candidate) -> bool:
    if is_food_or_drink(candidate):
        return False
    if not candidate.types.isdisjoint(FREE_OUTDOOR_ALLOWED_TYPES):
        return True
    return bool(_NAME_HINT_RE.search(candidate.name))


def apply_free_outdoor_guardrail(
    candidates: Sequence[Candidate],
    *,
    rng: random.Random | None = None,
    floor: int | None = None,
    target: int | None = None,
    pool: Sequence[Candidate] | None = None,
) -> list[Candidate]:
    """
    Narrow to parks, trails, gardens, natural features and museums.

    When fewer than ``floor`` places survive, shuffled entries from the curated
    pool are appended until ``target`` is reached. Identities already present
    are never injected twice.
    """
    floor = settings.GUARDRAIL_FLOOR if floor is None else floor
    target = settings.GUARDRAIL_TARGET if target is None else target
    rng = rng or random

    kept = [candidate for candidate in candidates if is_free_outdoor_place(candidate)]
    guardrail_applied_total.labels(guardrail="free_outdoor").inc()
    logger.info(
        "guardrail_applied",
        guardrail="free_outdoor",
        before=len(candidates),
        after=len(kept),
    )
    if len(kept) >= floor:
        return kept

    seen = {candidate.identity for candidate in kept}
    seen.update(candidate.name.lower() for candidate in kept)
    extras = list(load_fallback_pool() if pool is None else pool)
    rng.shuffle(extras)

    injected = 0
    for extra in extras:
        if len(kept) >= target:
            break
        if extra.identity in seen or extra.name.lower() in seen:
            continue
        kept.append(extra)
        seen.add(extra.identity)
        seen.add(extra.name.lower())
        injected += 1

    if injected:
        guardrail_fallback_injections_total.inc(injected)
        logger.info("guardrail_fallback_injected", injected=injected, total=len(kept))
    return kept

from __future__ import annotations

from ..settings import ScoreWeights
from .rules import rules_for
from .types import Candidate, Intent
from .validator import has_type_match

POPULAR_REVIEW_COUNT = 100
KNOWN_REVIEW_COUNT = 50

DEFAULT_WEIGHTS = ScoreWeights()


def score_type_match(
    candidate: Candidate, intent: Intent, weights: ScoreWeights
) -> tuple[float, list[str]]:
    rules = rules_for(intent)
    if not has_type_match(candidate, rules):
        return 0.0, []
    return weights.type, sorted(candidate.types & rules.allowed_types)[:2]


def score_keyword_match(
    candidate: Candidate, intent: Intent, weights: ScoreWeights
) -> tuple[float, list[str]]:
    text = candidate.ranking_text
    hit = next((kw for kw in rules_for(intent).required_keywords if kw in text), None)
    if hit is None:
        return 0.0, []
    return weights.keyword, [f"keyword:{hit}"]


def score_rating(candidate: Candidate, weights: ScoreWeights) -> float:
    return candidate.rating * weights.rating


def score_popularity(candidate: Candidate, weights: ScoreWeights) -> tuple[float, list[str]]:
    if candidate.rating_count > POPULAR_REVIEW_COUNT:
        return weights.popular, ["popular"]
    if candidate.rating_count > KNOWN_REVIEW_COUNT:
        return weights.known, ["well_known"]
    return 0.0, []


def explain_score(
    candidate: Candidate,
    intent: Intent | str | None,
    preference_boost: float = 0.0,
    weights: ScoreWeights | None = None,
) -> tuple[float, list[str]]:
    """Rank score with the signals that produced it."""
    intent = Intent.parse(intent)
    weights = weights or DEFAULT_WEIGHTS
    reasons: list[str] = []

    # type tags and free-text hits are scored independently
    total, type_reasons = score_type_match(candidate, intent, weights)
    reasons.extend(type_reasons)

    keyword_score, keyword_reasons = score_keyword_match(candidate, intent, weights)
    total += keyword_score
    reasons.extend(keyword_reasons)

    total += score_rating(candidate, weights)

    popularity, popularity_reasons = score_popularity(candidate, weights)
    total += popularity
    reasons.extend(popularity_reasons)

    if preference_boost:
        total += preference_boost
        reasons.append(f"preferences:{preference_boost:+g}")

    return total, reasons


def score_candidate(
    candidate: Candidate,
    intent: Intent | str | None,
    preference_boost: float = 0.0,
    weights: ScoreWeights | None = None,
) -> float:
    score, _ = explain_score(candidate, intent, preference_boost, weights)
    return score

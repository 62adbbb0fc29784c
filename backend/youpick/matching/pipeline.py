"""Validation → constraints → scoring across three widening tiers."""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..logging_config import get_logger
from ..metrics import (
    pipeline_rejections_total,
    pipeline_results,
    pipeline_runs_total,
    pipeline_tier_runs_total,
    rejection_family,
)
from ..settings import ScoreWeights, settings
from .constraints import apply_constraints
from .rules import rules_for
from .scoring import score_candidate
from .types import (
    Candidate,
    CandidateError,
    Intent,
    PipelineResult,
    PreferenceVector,
    ResultEntry,
)
from .validator import check_vetoes, validate

logger = get_logger(__name__)

STRICT_TIER = 1
FALLBACK_TIER = 2
RELAXED_TIER = 3
TIER_PENALTIES = {STRICT_TIER: 0.0, FALLBACK_TIER: -2.0, RELAXED_TIER: -4.0}


@dataclass(slots=True)
class _Scored:
    candidate: Candidate
    score: float
    tier: int


def _raw_identity(raw: Any, index: int) -> str:
    if isinstance(raw, Mapping):
        key = raw.get("place_id") or raw.get("id") or raw.get("name")
        if key:
            return str(key)
    return f"#{index}"


def _coerce_all(
    raw_candidates: Iterable[Candidate | Mapping[str, Any]], result: PipelineResult
) -> list[Candidate]:
    parsed: list[Candidate] = []
    for index, raw in enumerate(raw_candidates):
        if isinstance(raw, Candidate):
            parsed.append(raw)
            continue
        try:
            parsed.append(Candidate.from_mapping(raw))
        except CandidateError as exc:
            key = _raw_identity(raw, index)
            result.rejections[key] = "malformed"
            result.skipped += 1
            logger.warning("candidate_skipped", candidate=key, error=str(exc))
    return parsed


def _as_preferences(preferences: PreferenceVector | Iterable[str] | None) -> PreferenceVector:
    if isinstance(preferences, PreferenceVector):
        return preferences
    return PreferenceVector.from_filters(preferences)


def _strict_tier(
    candidate: Candidate, intent: Intent, prefs: PreferenceVector, weights: ScoreWeights
) -> tuple[float | None, str]:
    verdict = validate(candidate, intent)
    if not verdict.valid:
        return None, verdict.reason
    constraint = apply_constraints(candidate, prefs, intent)
    if not constraint.passes:
        return None, constraint.reason or "preference_mismatch"
    return score_candidate(candidate, intent, constraint.rank_boost, weights), verdict.reason


def _fallback_tier(
    candidate: Candidate, intent: Intent, prefs: PreferenceVector, weights: ScoreWeights
) -> tuple[float | None, str]:
    veto = check_vetoes(candidate, intent)
    if not veto.valid:
        return None, veto.reason
    if candidate.types.isdisjoint(rules_for(intent).fallback_allowed_types):
        return None, "no_fallback_type_match"
    constraint = apply_constraints(candidate, prefs, intent)
    if not constraint.passes:
        return None, constraint.reason or "preference_mismatch"
    score = score_candidate(candidate, intent, constraint.rank_boost, weights)
    return score + TIER_PENALTIES[FALLBACK_TIER], "fallback_type"


def _relaxed_tier(
    candidate: Candidate,
    intent: Intent,
    prefs: PreferenceVector,
    weights: ScoreWeights,
    advisory: bool,
) -> tuple[float | None, str]:
    veto = check_vetoes(candidate, intent)
    if not veto.valid:
        return None, veto.reason
    if candidate.types.isdisjoint(rules_for(intent).widened_types):
        return None, "no_type_match"
    boost = 0.0
    if advisory:
        boost = apply_constraints(candidate, prefs, intent, strict=False).rank_boost
    score = score_candidate(candidate, intent, boost, weights)
    return score + TIER_PENALTIES[RELAXED_TIER], "relaxed_type"


def _collapse_duplicates(accepted: list[_Scored]) -> list[_Scored]:
    """Keep the best-scored occurrence per identity, in first-seen order."""
    best: dict[str, _Scored] = {}
    for item in accepted:
        key = item.candidate.identity
        current = best.get(key)
        if current is None or item.score > current.score:
            best[key] = item
    return list(best.values())


def _rank(accepted: list[_Scored], shuffle_weight: float, rng: random.Random | Any) -> list[_Scored]:
    if shuffle_weight <= 0:
        return sorted(accepted, key=lambda item: item.score, reverse=True)
    # bounded jitter so equal scores vary between searches; never stored
    keyed = [
        (item.score + (rng.random() - 0.5) * shuffle_weight, item) for item in accepted
    ]
    keyed.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in keyed]


def run_detailed(
    candidates: Iterable[Candidate | Mapping[str, Any]],
    intent: Intent | str | None,
    preferences: PreferenceVector | Iterable[str] | None = None,
    min_results: int | None = None,
    shuffle_weight: float | None = None,
    *,
    rng: random.Random | None = None,
    weights: ScoreWeights | None = None,
    advisory_relaxed_tier: bool | None = None,
) -> PipelineResult:
    """
    Filter, widen, rank and dedupe ``candidates`` for one search.

    Tiers 2 and 3 only run while fewer than ``min_results`` distinct
    candidates have been accepted. Excluded types and keywords are enforced at
    every tier. Returns an empty result rather than raising when nothing fits.
    """
    intent = Intent.parse(intent)
    prefs = _as_preferences(preferences)
    if min_results is None:
        min_results = settings.PIPELINE_MIN_RESULTS
    if shuffle_weight is None:
        shuffle_weight = settings.PIPELINE_SHUFFLE_WEIGHT
    if advisory_relaxed_tier is None:
        advisory_relaxed_tier = settings.TIER3_ADVISORY_PREFERENCES
    weights = weights or settings.parsed_score_weights
    rng = rng or random

    result = PipelineResult()
    pool = _coerce_all(candidates, result)
    accepted: list[_Scored] = []
    accepted_ids: set[str] = set()
    tiers_run: list[int] = []

    def run_tier(tier: int, evaluate) -> None:
        tiers_run.append(tier)
        pipeline_tier_runs_total.labels(tier=str(tier)).inc()
        for candidate in pool:
            key = candidate.identity
            if tier != STRICT_TIER and key in accepted_ids:
                continue
            score, reason = evaluate(candidate)
            if score is None:
                # the strictest tier's reason is the one worth reporting
                if key not in accepted_ids:
                    result.rejections.setdefault(key, reason)
                continue
            accepted.append(_Scored(candidate=candidate, score=score, tier=tier))
            accepted_ids.add(key)
            result.rejections.pop(key, None)

    run_tier(STRICT_TIER, lambda c: _strict_tier(c, intent, prefs, weights))
    if len(accepted_ids) < min_results:
        run_tier(FALLBACK_TIER, lambda c: _fallback_tier(c, intent, prefs, weights))
    if len(accepted_ids) < min_results:
        run_tier(
            RELAXED_TIER,
            lambda c: _relaxed_tier(c, intent, prefs, weights, advisory_relaxed_tier),
        )

    ranked = _rank(_collapse_duplicates(accepted), shuffle_weight, rng)
    result.entries = [
        ResultEntry(candidate=item.candidate, score=item.score, rank=position, tier=item.tier)
        for position, item in enumerate(ranked, start=1)
    ]
    result.tiers_run = tuple(tiers_run)

    pipeline_runs_total.labels(intent=intent.value).inc()
    pipeline_results.observe(len(result.entries))
    for reason in result.rejections.values():
        pipeline_rejections_total.labels(reason=rejection_family(reason)).inc()

    logger.info(
        "pipeline_complete",
        intent=intent.value,
        filters=prefs.tokens,
        tiers_run=list(result.tiers_run),
        accepted=len(result.entries),
        rejected=len(result.rejections),
        skipped=result.skipped,
    )
    return result


def run(
    candidates: Iterable[Candidate | Mapping[str, Any]],
    intent: Intent | str | None,
    preferences: PreferenceVector | Iterable[str] | None = None,
    min_results: int | None = None,
    shuffle_weight: float | None = None,
    *,
    rng: random.Random | None = None,
) -> list[Candidate]:
    """Ordered, deduplicated candidates for ``intent``; see ``run_detailed``."""
    return run_detailed(
        candidates, intent, preferences, min_results, shuffle_weight, rng=rng
    ).candidates

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .acquisition import CandidateSource, SearchArea, acquire_candidates, radius_for
from .cache import PlacesCache
from .logging_config import get_logger
from .matching.guardrails import (
    apply_free_only_guardrail,
    apply_free_outdoor_guardrail,
    free_only_active,
    free_outdoor_active,
)
from .matching.pipeline import run_detailed
from .matching.types import Candidate, Intent, PreferenceVector, ResultEntry
from .settings import Settings, settings as default_settings

logger = get_logger(__name__)

CURATED_TIER = 0


@dataclass(slots=True)
class PickOutcome:
    intent: Intent
    entries: list[ResultEntry] = field(default_factory=list)
    guardrails: list[str] = field(default_factory=list)
    injected: int = 0
    rejections: dict[str, str] = field(default_factory=dict)
    tiers_run: tuple[int, ...] = ()
    skipped: int = 0

    @property
    def candidates(self) -> list[Candidate]:
        return [entry.candidate for entry in self.entries]


def _rerank(survivors: Sequence[Candidate], entries: Sequence[ResultEntry]) -> tuple[list[ResultEntry], int]:
    by_identity = {entry.candidate.identity: entry for entry in entries}
    out: list[ResultEntry] = []
    injected = 0
    for position, candidate in enumerate(survivors, start=1):
        previous = by_identity.get(candidate.identity)
        if previous is not None and previous.candidate is candidate:
            out.append(
                ResultEntry(
                    candidate=candidate,
                    score=previous.score,
                    rank=position,
                    tier=previous.tier,
                )
            )
            continue
        injected += 1
        out.append(
            ResultEntry(
                candidate=candidate,
                score=0.0,
                rank=position,
                tier=CURATED_TIER,
                curated=True,
            )
        )
    return out, injected


class PickService:
    """Runs the filter pipeline and layers guardrails on top when they trigger."""

    def __init__(
        self,
        config: Settings | None = None,
        *,
        rng: random.Random | None = None,
        pool: Sequence[Candidate] | None = None,
    ) -> None:
        self.config = config or default_settings
        self.rng = rng
        self.pool = pool

    def pick(
        self,
        candidates: Iterable[Candidate | Mapping[str, Any]],
        intent: Intent | str | None,
        preferences: PreferenceVector | Iterable[str] | None = None,
        *,
        vibe: str | None = None,
        min_results: int | None = None,
        shuffle_weight: float | None = None,
        guardrails: bool = True,
    ) -> PickOutcome:
        raw_intent = intent
        intent = Intent.parse(intent)
        if isinstance(preferences, PreferenceVector):
            prefs = preferences
        else:
            prefs = PreferenceVector.from_filters(preferences, vibe=vibe)

        result = run_detailed(
            candidates,
            intent,
            prefs,
            self.config.PIPELINE_MIN_RESULTS if min_results is None else min_results,
            self.config.PIPELINE_SHUFFLE_WEIGHT if shuffle_weight is None else shuffle_weight,
            rng=self.rng,
            weights=self.config.parsed_score_weights,
            advisory_relaxed_tier=self.config.TIER3_ADVISORY_PREFERENCES,
        )
        outcome = PickOutcome(
            intent=intent,
            entries=result.entries,
            rejections=result.rejections,
            tiers_run=result.tiers_run,
            skipped=result.skipped,
        )
        if not guardrails or not free_only_active(prefs):
            return outcome

        survivors = apply_free_only_guardrail(result.candidates)
        outcome.guardrails.append("free_only")
        if free_outdoor_active(prefs, raw_intent):
            survivors = apply_free_outdoor_guardrail(
                survivors,
                rng=self.rng,
                floor=self.config.GUARDRAIL_FLOOR,
                target=self.config.GUARDRAIL_TARGET,
                pool=self.pool,
            )
            outcome.guardrails.append("free_outdoor")

        outcome.entries, outcome.injected = _rerank(survivors, result.entries)
        logger.info(
            "pick_guardrails_applied",
            intent=intent.value,
            guardrails=outcome.guardrails,
            before=len(result.entries),
            after=len(outcome.entries),
            injected=outcome.injected,
        )
        return outcome

    def search(
        self,
        source: CandidateSource,
        latitude: float,
        longitude: float,
        intent: Intent | str | None,
        filters: Iterable[str] | None = None,
        *,
        vibe: str | None = None,
        exclude_ids: Iterable[str] = (),
        cache: PlacesCache | None = None,
    ) -> PickOutcome:
        """Acquire candidates around a point, then ``pick`` from them."""
        prefs = PreferenceVector.from_filters(filters, vibe=vibe)
        area = SearchArea(latitude=latitude, longitude=longitude, radius_m=radius_for(prefs))
        raw = acquire_candidates(
            source,
            area,
            intent,
            exclude_ids=exclude_ids,
            cache=cache,
            limit=self.config.MAX_CANDIDATES,
        )
        return self.pick(raw, intent, prefs)

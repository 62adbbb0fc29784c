from __future__ import annotations

from fastapi import APIRouter

from ...acquisition import drop_excluded
from ...logging_config import bind_pick_context, get_logger
from ...matching.types import ResultEntry
from ...schemas import PickedPlace, PickRequest, PickResponse
from ...service import PickService

router = APIRouter(tags=["picks"])
service = PickService()
logger = get_logger(__name__)


def entry_to_place(entry: ResultEntry) -> PickedPlace:
    candidate = entry.candidate
    return PickedPlace(
        id=candidate.id,
        name=candidate.name,
        types=sorted(candidate.types),
        price_level=candidate.price_level,
        rating=candidate.rating,
        rating_count=candidate.rating_count,
        vicinity=candidate.vicinity,
        latitude=candidate.latitude,
        longitude=candidate.longitude,
        photos=list(candidate.photos),
        score=round(entry.score, 4),
        rank=entry.rank,
        tier=entry.tier,
        curated=entry.curated,
    )


@router.post("/picks", response_model=PickResponse)
def create_picks(payload: PickRequest) -> PickResponse:
    intent = payload.resolved_intent
    bind_pick_context(intent, payload.filters)
    candidates = drop_excluded(payload.candidates, payload.exclude_ids)
    outcome = service.pick(
        candidates,
        intent,
        payload.filters,
        vibe=payload.vibe,
        min_results=payload.min_results,
        shuffle_weight=payload.shuffle_weight,
    )
    logger.info(
        "picks_served",
        received=len(payload.candidates),
        excluded=len(payload.candidates) - len(candidates),
        returned=len(outcome.entries),
        tiers_run=list(outcome.tiers_run),
        guardrails=outcome.guardrails,
    )
    return PickResponse(
        intent=outcome.intent,
        results=[entry_to_place(entry) for entry in outcome.entries],
        guardrails=outcome.guardrails,
        injected=outcome.injected,
        skipped=outcome.skipped,
        tiers_run=list(outcome.tiers_run),
    )

from __future__ import annotations

from .rules import INDOOR_TYPES, OUTDOOR_KEYWORDS, OUTDOOR_TYPES, PRICE_BANDS
from .types import Candidate, ConstraintResult, Intent, PreferenceVector, Setting

PRICE_MATCH_BOOST = 2.0
PRICE_UNKNOWN_PENALTY = -1.0
OUTDOOR_MATCH_BOOST = 3.0
OUTDOOR_MISS_PENALTY = -2.0
INDOOR_MATCH_BOOST = 2.0
INDOOR_MISS_PENALTY = -1.0
# Applied in advisory mode wherever strict mode would have rejected.
ADVISORY_MISMATCH_PENALTY = -2.0

# Setting is load-bearing only for these intents; elsewhere it is a nudge.
HARD_SETTING_INTENTS = frozenset({Intent.ACTIVITY})


def is_outdoor(candidate: Candidate) -> bool:
    if not candidate.types.isdisjoint(OUTDOOR_TYPES):
        return True
    text = f"{candidate.name} {candidate.vicinity or ''}".lower()
    return any(keyword in text for keyword in OUTDOOR_KEYWORDS)


def is_indoor(candidate: Candidate) -> bool:
    if not candidate.types.isdisjoint(INDOOR_TYPES):
        return True
    return candidate.types.isdisjoint(OUTDOOR_TYPES)


def _price_adjustment(candidate: Candidate, prefs: PreferenceVector) -> tuple[float, str | None]:
    if prefs.price is None:
        return 0.0, None
    band = PRICE_BANDS[prefs.price]
    if candidate.price_level is not None:
        if not band.contains(candidate.price_level):
            return 0.0, "price_out_of_band"
        return PRICE_MATCH_BOOST, None
    if not band.allow_missing:
        # unknown price might not be cheap
        return 0.0, "price_unknown"
    return PRICE_UNKNOWN_PENALTY, None


def apply_constraints(
    candidate: Candidate,
    prefs: PreferenceVector,
    intent: Intent | str | None,
    *,
    strict: bool = True,
) -> ConstraintResult:
    """
    Evaluate price and indoor/outdoor preferences for one candidate.

    In strict mode a violated hard constraint rejects the candidate. With
    ``strict=False`` nothing is rejected and each violation costs
    ``ADVISORY_MISMATCH_PENALTY`` instead.
    """
    intent = Intent.parse(intent)
    boost = 0.0
    violations: list[str] = []

    price_boost, price_violation = _price_adjustment(candidate, prefs)
    if price_violation:
        violations.append(price_violation)
    boost += price_boost

    if Setting.OUTDOOR in prefs.setting:
        outdoor = is_outdoor(candidate)
        if not outdoor and intent in HARD_SETTING_INTENTS:
            violations.append("setting_mismatch:outdoor")
        else:
            boost += OUTDOOR_MATCH_BOOST if outdoor else OUTDOOR_MISS_PENALTY

    if Setting.INDOOR in prefs.setting:
        indoor = is_indoor(candidate)
        if not indoor and intent in HARD_SETTING_INTENTS:
            violations.append("setting_mismatch:indoor")
        else:
            boost += INDOOR_MATCH_BOOST if indoor else INDOOR_MISS_PENALTY

    if violations and strict:
        return ConstraintResult(passes=False, rank_boost=0.0, reason=violations[0])
    boost += ADVISORY_MISMATCH_PENALTY * len(violations)
    return ConstraintResult(passes=True, rank_boost=boost)

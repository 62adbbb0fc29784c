"""Place matching: category rules, widening pipeline and guardrails."""

from .constraints import apply_constraints
from .guardrails import (
    apply_free_only_guardrail,
    apply_free_outdoor_guardrail,
    free_only_active,
    free_outdoor_active,
)
from .pipeline import run, run_detailed
from .rules import CATEGORY_RULES, RuleSet, rules_for
from .scoring import explain_score, score_candidate
from .types import (
    Candidate,
    CandidateError,
    Intent,
    PipelineResult,
    PreferenceVector,
    PriceToken,
    ResultEntry,
    Setting,
)
from .validator import check_vetoes, validate

__all__ = [
    "CATEGORY_RULES",
    "Candidate",
    "CandidateError",
    "Intent",
    "PipelineResult",
    "PreferenceVector",
    "PriceToken",
    "ResultEntry",
    "RuleSet",
    "Setting",
    "apply_constraints",
    "apply_free_only_guardrail",
    "apply_free_outdoor_guardrail",
    "check_vetoes",
    "explain_score",
    "free_only_active",
    "free_outdoor_active",
    "rules_for",
    "run",
    "run_detailed",
    "score_candidate",
    "validate",
]

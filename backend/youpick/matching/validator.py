from __future__ import annotations

from .rules import BAR_LIKE_TYPES, CAFE_LIKE_TYPES, RuleSet, rules_for
from .types import Candidate, Intent, ValidationResult

PASSED = ValidationResult(valid=True, reason="passed")


def check_vetoes(candidate: Candidate, intent: Intent | str | None) -> ValidationResult:
    """Excluded types, then excluded keywords. Applied identically at every tier."""
    rules = rules_for(intent)
    for type_ in sorted(candidate.types):
        if type_ in rules.excluded_types:
            return ValidationResult(valid=False, reason=f"excluded_type:{type_}")

    text = candidate.searchable_text
    for keyword in rules.excluded_keywords:
        if keyword in text:
            return ValidationResult(valid=False, reason=f"excluded_keyword:{keyword}")
    return PASSED


def has_type_match(candidate: Candidate, rules: RuleSet) -> bool:
    return not candidate.types.isdisjoint(rules.allowed_types)


def has_keyword_match(candidate: Candidate, rules: RuleSet) -> bool:
    text = candidate.searchable_text
    return any(keyword in text for keyword in rules.required_keywords)


def validate(candidate: Candidate, intent: Intent | str | None) -> ValidationResult:
    """Decide whether ``candidate`` belongs under ``intent``."""
    intent = Intent.parse(intent)
    rules = rules_for(intent)

    veto = check_vetoes(candidate, intent)
    if not veto.valid:
        return veto

    type_match = has_type_match(candidate, rules)
    keyword_match = not rules.required_keywords or has_keyword_match(candidate, rules)
    if not type_match and not keyword_match:
        return ValidationResult(valid=False, reason="no_type_or_keyword_match")

    # Gastropubs carry both bar and restaurant tags; only the bare bar is rejected.
    if intent is Intent.FOOD:
        if not candidate.types.isdisjoint(BAR_LIKE_TYPES) and not type_match:
            return ValidationResult(valid=False, reason="pure_bar_in_food")

    if intent is Intent.DRINKS:
        if not candidate.types.isdisjoint(CAFE_LIKE_TYPES) and not type_match:
            return ValidationResult(valid=False, reason="pure_cafe_in_drinks")

    return PASSED

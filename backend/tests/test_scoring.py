import pytest
from backend.youpick.matching.scoring import explain_score, score_candidate
from backend.youpick.matching.types import Intent
from backend.youpick.settings import ScoreWeights


def test_score_rewards_type_keyword_rating_and_popularity(make_candidate):
    candidate = make_candidate(
        "Franklin Barbecue Kitchen",
        types={"restaurant"},
        rating=4.5,
        rating_count=1200,
    )
    score, reasons = explain_score(candidate, Intent.FOOD)

    assert score == pytest.approx(5 + 2 + 4.5 + 2)
    assert "restaurant" in reasons
    assert "keyword:kitchen" in reasons
    assert "popular" in reasons


def test_moderate_review_count_gets_smaller_bonus(make_candidate):
    candidate = make_candidate("Quiet Spot", types={"restaurant"}, rating=4.0, rating_count=75)
    score, reasons = explain_score(candidate, Intent.FOOD)
    assert score == pytest.approx(5 + 4.0 + 1)
    assert "well_known" in reasons


def test_review_count_thresholds_are_exclusive(make_candidate):
    at_hundred = make_candidate("Spot", types={"restaurant"}, rating_count=100)
    at_fifty = make_candidate("Spot", types={"restaurant"}, rating_count=50)
    assert score_candidate(at_hundred, Intent.FOOD) == pytest.approx(5 + 1)
    assert score_candidate(at_fifty, Intent.FOOD) == pytest.approx(5)


def test_preference_boost_is_added(make_candidate):
    candidate = make_candidate("Spot", types={"restaurant"})
    base = score_candidate(candidate, Intent.FOOD)
    boosted, reasons = explain_score(candidate, Intent.FOOD, preference_boost=3.0)
    assert boosted == pytest.approx(base + 3.0)
    assert "preferences:+3" in reasons


def test_custom_weights(make_candidate):
    candidate = make_candidate("Spot", types={"restaurant"}, rating=4.0)
    weights = ScoreWeights.from_string("type=10, rating=0")
    assert score_candidate(candidate, Intent.FOOD, weights=weights) == pytest.approx(10)


def test_score_weights_ignore_garbage():
    weights = ScoreWeights.from_string("type=abc,nonsense,keyword=3")
    assert weights.type == 5.0
    assert weights.keyword == 3.0


def test_keyword_bonus_ignores_formatted_address(make_candidate):
    on_market_st = make_candidate(
        "Corner Spot", types={"clothing_store"}, formatted_address="12 Market St, Austin"
    )
    score, reasons = explain_score(on_market_st, Intent.SHOPPING)
    assert score == pytest.approx(5)
    assert not any(reason.startswith("keyword:") for reason in reasons)


def test_keyword_bonus_reads_vicinity(make_candidate):
    candidate = make_candidate("Corner Spot", types={"park"}, vicinity="Riverside Trail")
    score, reasons = explain_score(candidate, Intent.ACTIVITY)
    assert score == pytest.approx(5 + 2)
    assert "keyword:trail" in reasons

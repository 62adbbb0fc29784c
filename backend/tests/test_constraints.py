from backend.youpick.matching.constraints import (
    ADVISORY_MISMATCH_PENALTY,
    apply_constraints,
    is_indoor,
    is_outdoor,
)
from backend.youpick.matching.types import Intent, PreferenceVector


def prefs(*filters):
    return PreferenceVector.from_filters(filters)


def test_no_preferences_is_neutral(make_candidate):
    result = apply_constraints(make_candidate("Any", price_level=3), prefs(), Intent.FOOD)
    assert result.passes
    assert result.rank_boost == 0.0


def test_cheap_in_band_gets_boost(make_candidate):
    result = apply_constraints(make_candidate("Taqueria", price_level=1), prefs("cheap"), "food")
    assert result.passes
    assert result.rank_boost == 2.0


def test_cheap_out_of_band_rejected(make_candidate):
    result = apply_constraints(make_candidate("Steakhouse", price_level=3), prefs("cheap"), "food")
    assert not result.passes
    assert result.reason == "price_out_of_band"


def test_cheap_rejects_unknown_price(make_candidate):
    result = apply_constraints(make_candidate("Mystery"), prefs("cheap"), "food")
    assert not result.passes
    assert result.reason == "price_unknown"


def test_treat_allows_unknown_price_with_penalty(make_candidate):
    result = apply_constraints(make_candidate("Mystery"), prefs("treat"), "food")
    assert result.passes
    assert result.rank_boost == -1.0


def test_outdoor_is_hard_for_activity(make_candidate):
    museum = make_candidate("City Museum", types={"museum"})
    result = apply_constraints(museum, prefs("outdoor"), Intent.ACTIVITY)
    assert not result.passes
    assert result.reason == "setting_mismatch:outdoor"


def test_outdoor_is_soft_for_food(make_candidate):
    indoor = make_candidate("Noodle Bar", types={"restaurant"})
    patio = make_candidate("Rooftop Tacos", types={"restaurant"})
    assert apply_constraints(indoor, prefs("outdoor"), "food").rank_boost == -2.0
    assert apply_constraints(patio, prefs("outdoor"), "food").rank_boost == 3.0


def test_indoor_asymmetry(make_candidate):
    trail = make_candidate("Ridge Trail", types={"hiking_area"})
    assert not apply_constraints(trail, prefs("indoor"), Intent.ACTIVITY).passes
    result = apply_constraints(trail, prefs("indoor"), Intent.SURPRISE)
    assert result.passes
    assert result.rank_boost == -1.0


def test_boosts_accumulate(make_candidate):
    park = make_candidate("Zilker Park", types={"park"}, price_level=0)
    result = apply_constraints(park, prefs("cheap", "outdoor"), Intent.ACTIVITY)
    assert result.rank_boost == 5.0


def test_advisory_mode_never_rejects(make_candidate):
    museum = make_candidate("City Museum", types={"museum"}, price_level=3)
    result = apply_constraints(museum, prefs("cheap", "outdoor"), Intent.ACTIVITY, strict=False)
    assert result.passes
    assert result.rank_boost == 2 * ADVISORY_MISMATCH_PENALTY


def test_outdoor_and_indoor_detection(make_candidate):
    assert is_outdoor(make_candidate("Deck 9", types={"bar"}))
    assert is_indoor(make_candidate("Deck 9", types={"bar"}))
    assert is_indoor(make_candidate("Quiet Place", types={"point_of_interest"}))
    assert not is_indoor(make_candidate("Lake Overlook", types={"natural_feature"}))

from backend.youpick.cache import PlacesCache
from backend.youpick.matching.types import Intent
from backend.youpick.service import CURATED_TIER, PickService
from backend.youpick.settings import Settings


def build_service(rng, **overrides):
    return PickService(Settings(**overrides), rng=rng)


def test_pick_without_guardrails(make_candidate, rng):
    service = build_service(rng)
    outcome = service.pick(
        [make_candidate("Taco Spot", types={"restaurant"}, rating=4.0)], "food", ["mid"]
    )
    assert outcome.intent is Intent.FOOD
    assert outcome.guardrails == []
    assert [c.name for c in outcome.candidates] == ["Taco Spot"]


def test_cheap_food_only_applies_free_guardrail(make_candidate, rng):
    service = build_service(rng)
    pool = [
        make_candidate("Free Tacos", types={"restaurant"}, price_level=0, rating=3.0),
        make_candidate("Cheap Pizza", types={"restaurant"}, price_level=1, rating=5.0),
    ]
    outcome = service.pick(pool, "food", ["cheap"])

    assert outcome.guardrails == ["free_only"]
    assert [entry.candidate.name for entry in outcome.entries] == ["Free Tacos"]
    assert outcome.entries[0].rank == 1
    assert outcome.injected == 0


def test_cheap_surprise_with_only_restaurants_gets_curated_pool(make_candidate, rng):
    service = build_service(rng)
    pool = [
        make_candidate(f"Diner {index}", types={"restaurant"}, price_level=0) for index in range(10)
    ]
    outcome = service.pick(pool, None, ["cheap"])

    assert outcome.intent is Intent.SURPRISE
    assert outcome.guardrails == ["free_only", "free_outdoor"]
    assert outcome.injected == len(outcome.entries) == 6
    assert all(entry.curated and entry.tier == CURATED_TIER for entry in outcome.entries)
    assert [entry.rank for entry in outcome.entries] == [1, 2, 3, 4, 5, 6]


def test_wild_vibe_triggers_outdoor_guardrail_for_any_intent(make_candidate, rng):
    service = build_service(rng)
    pool = [
        make_candidate("Zilker Park", types={"park"}, price_level=0, rating=4.8),
        make_candidate("Mount Bonnell Trail", types={"hiking_area"}, price_level=0),
        make_candidate("Blanton Museum", types={"museum"}, price_level=0),
    ]
    outcome = service.pick(pool, "activity", ["cheap"], vibe="free-beautiful")

    assert outcome.guardrails == ["free_only", "free_outdoor"]
    assert outcome.injected == 0
    assert outcome.entries[0].candidate.name == "Zilker Park"
    assert not any(entry.curated for entry in outcome.entries)


def test_guardrails_can_be_disabled(make_candidate, rng):
    service = build_service(rng)
    pool = [make_candidate("Cheap Pizza", types={"restaurant"}, price_level=1)]
    outcome = service.pick(pool, None, ["cheap"], guardrails=False)
    assert outcome.guardrails == []
    assert len(outcome.entries) == 1


def test_service_uses_its_settings(make_candidate, rng):
    service = build_service(rng, PIPELINE_MIN_RESULTS=1, TIER3_ADVISORY_PREFERENCES=False)
    pool = [
        make_candidate("Taco Spot", types={"restaurant"}),
        make_candidate("Pricey", types={"restaurant"}, price_level=4),
    ]
    outcome = service.pick(pool, "food", ["mid"])
    assert outcome.tiers_run == (1,)
    assert [c.name for c in outcome.candidates] == ["Taco Spot"]


def test_search_acquires_then_picks(make_raw, rng):
    class Source:
        calls = 0

        def fetch(self, area, intent):
            Source.calls += 1
            assert area.radius_m == 1500
            return [
                make_raw("Calm Day Spa", ["spa"], rating=4.9),
                make_raw("Iron Gym", ["gym"], rating=4.1),
            ]

    cache = PlacesCache()
    service = build_service(rng)
    outcome = service.search(
        Source(), 30.2672, -97.7431, "services", ["near-me"], exclude_ids=["iron-gym"], cache=cache
    )
    again = service.search(Source(), 30.2672, -97.7431, "services", ["near-me"], cache=cache)

    assert outcome.intent is Intent.WELLNESS
    assert [c.name for c in outcome.candidates] == ["Calm Day Spa"]
    assert len(again.candidates) == 2
    assert Source.calls == 1

import pytest
from backend.youpick.acquisition import (
    AcquisitionError,
    SearchArea,
    acquire_candidates,
    drop_excluded,
    place_types_for,
    radius_for,
)
from backend.youpick.cache import PlacesCache
from backend.youpick.matching.types import Intent, PreferenceVector

AREA = SearchArea(latitude=30.2672, longitude=-97.7431, radius_m=5000)


class FakeSource:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.calls = []

    def fetch(self, area, intent):
        self.calls.append((area, intent))
        if self.error:
            raise self.error
        return list(self.records)


def test_radius_follows_distance_filter():
    assert radius_for(PreferenceVector.from_filters(["near-me"])) == 1500
    assert radius_for(PreferenceVector.from_filters(["any-distance"])) == 15000
    assert radius_for(PreferenceVector.from_filters([])) == 5000


def test_place_types_for_intent():
    assert place_types_for("food")[0] == "restaurant"
    assert place_types_for("services") == place_types_for(Intent.WELLNESS)
    assert place_types_for(None) == place_types_for(Intent.SURPRISE)


def test_acquire_dedupes_and_drops_excluded(make_raw):
    source = FakeSource(
        [
            make_raw("Taco Spot", ["restaurant"]),
            make_raw("Taco Spot", ["restaurant"]),
            make_raw("Burger Barn", ["restaurant"]),
            make_raw("Pho House", ["restaurant"]),
        ]
    )
    items = acquire_candidates(source, AREA, "food", exclude_ids={"burger-barn"})
    assert [item["name"] for item in items] == ["Taco Spot", "Pho House"]
    assert source.calls[0][1] is Intent.FOOD


def test_acquire_respects_limit(make_raw):
    source = FakeSource([make_raw(f"Place {index}", ["restaurant"]) for index in range(10)])
    assert len(acquire_candidates(source, AREA, "food", limit=4)) == 4


def test_cache_hit_skips_source_and_exclusions_apply_after(make_raw):
    cache = PlacesCache()
    source = FakeSource([make_raw("Taco Spot", ["restaurant"]), make_raw("Pho House", ["restaurant"])])

    first = acquire_candidates(source, AREA, "food", cache=cache)
    second = acquire_candidates(source, AREA, "food", cache=cache, exclude_ids=["taco-spot"])

    assert len(source.calls) == 1
    assert len(first) == 2
    assert [item["name"] for item in second] == ["Pho House"]


def test_source_errors_are_wrapped():
    source = FakeSource(error=TimeoutError("upstream timed out"))
    with pytest.raises(AcquisitionError) as excinfo:
        acquire_candidates(source, AREA, "food")
    assert isinstance(excinfo.value.__cause__, TimeoutError)


def test_acquisition_errors_pass_through():
    source = FakeSource(error=AcquisitionError("quota exceeded"))
    with pytest.raises(AcquisitionError, match="quota exceeded"):
        acquire_candidates(source, AREA, "food")


def test_drop_excluded_handles_candidates(make_candidate):
    items = [make_candidate("Keep"), make_candidate("Drop")]
    assert [c.name for c in drop_excluded(items, ["drop"])] == ["Keep"]

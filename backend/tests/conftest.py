import os
import random
import sys
from pathlib import Path

import pytest
import sentry_sdk
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Disable outbound Sentry calls during tests
sentry_sdk.init = lambda *args, **kwargs: None  # type: ignore[assignment]
os.environ["SENTRY_DSN"] = ""

from backend.youpick.main import app  # noqa: E402
from backend.youpick.matching.types import Candidate  # noqa: E402
from backend.youpick.settings import settings  # noqa: E402


@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(app, base_url="http://api.testserver")


@pytest.fixture(autouse=True)
def reset_settings():
    snapshot = settings.model_dump()
    settings.SENTRY_DSN = None
    yield
    for key, value in snapshot.items():
        setattr(settings, key, value)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


def build_candidate(name: str = "Demo", **overrides) -> Candidate:
    base = dict(
        name=name,
        id=overrides.pop("id", name.lower().replace(" ", "-")),
        types=frozenset(overrides.pop("types", ())),
        tags=frozenset(overrides.pop("tags", ())),
    )
    base.update(overrides)
    return Candidate(**base)


@pytest.fixture
def make_candidate():
    return build_candidate


def raw_place(name: str, types, **extra) -> dict:
    payload = {
        "place_id": extra.pop("place_id", name.lower().replace(" ", "-")),
        "name": name,
        "types": list(types),
        "rating": extra.pop("rating", 4.2),
        "user_ratings_total": extra.pop("user_ratings_total", 40),
    }
    payload.update(extra)
    return payload


@pytest.fixture
def make_raw():
    return raw_place

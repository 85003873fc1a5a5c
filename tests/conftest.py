import sys
from pathlib import Path

import pytest

# Ensure the `roteiro` package is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roteiro.core import cache  # noqa: E402

COLUMN_NAMES = ["Tipo", "Cidade", "Google Maps", "User", "Rank", "Notas"]


def maps_url(place_id):
    return f"https://www.google.com/maps/place/Bar+X/@-23.55,-46.63,17z/data=!3m1!4b1!4m6!3m5!1s{place_id}"


@pytest.fixture(autouse=True)
def clear_caches():
    cache.structure_cache.clear()
    cache.place_cache.clear()
    yield
    cache.structure_cache.clear()
    cache.place_cache.clear()


@pytest.fixture
def columns():
    return [{"columnIndex": i, "columnName": name} for i, name in enumerate(COLUMN_NAMES)]


@pytest.fixture
def make_row():
    def _make_row(place_id="abc123", types="Bar", city="Lisboa", name="Bar X", user="x", rank=4, notes="Good"):
        link = {"formattedValue": name}
        if place_id is not None:
            link["chipRuns"] = [{"chip": {"richLinkProperties": {"uri": maps_url(place_id)}}}]
        rank_cell = {} if rank is None else {"formattedValue": str(rank), "effectiveValue": {"numberValue": rank}}
        return [
            {} if types is None else {"formattedValue": types},
            {"formattedValue": city},
            link,
            {"formattedValue": user},
            rank_cell,
            {} if notes is None else {"formattedValue": notes},
        ]

    return _make_row


@pytest.fixture
def fake_lookup():
    calls = []

    def _lookup(place_id, api_key):
        calls.append(place_id)
        return {"location": {"latitude": 38.7, "longitude": -9.1}, "displayName": {"text": f"Place {place_id}"}}

    _lookup.calls = calls
    return _lookup

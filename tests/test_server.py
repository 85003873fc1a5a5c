import pytest

from roteiro.core.config import ConfigError, Settings
from roteiro.jobs import server
from roteiro.models import Dataset, RowError
from roteiro.vendors.google_sheets import TableNotFoundError


@pytest.fixture(autouse=True)
def fake_pipeline(monkeypatch):
    calls = []

    def fake_build(settings):
        calls.append(settings)
        return Dataset(errors=(RowError(error="Missing Google Maps link", meta={"row": len(calls)}),))

    server._response_cache.clear()
    monkeypatch.setattr(server, "require_settings", lambda: Settings(google_api_key="key", sheet_id="sheet"))
    monkeypatch.setattr(server, "build_dataset", fake_build)
    yield calls
    server._response_cache.clear()


def test_health_endpoint():
    client = server.app.test_client()
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_data_endpoint_serves_cached_snapshot(fake_pipeline):
    client = server.app.test_client()

    first = client.get("/api/data")
    second = client.get("/api/data")

    assert first.status_code == 200
    assert first.get_json()["places"] == []
    assert first.get_json()["errors"][0]["meta"]["row"] == 1
    assert second.get_json() == first.get_json()
    assert len(fake_pipeline) == 1


def test_data_endpoint_refresh_bypasses_cache(fake_pipeline):
    client = server.app.test_client()

    client.get("/api/data")
    refreshed = client.get("/api/data?refresh=1")

    assert refreshed.get_json()["errors"][0]["meta"]["row"] == 2
    assert len(fake_pipeline) == 2
    assert client.get("/api/data").get_json()["errors"][0]["meta"]["row"] == 2


def test_data_endpoint_reports_fatal_errors(monkeypatch):
    def failing_build(settings):
        raise TableNotFoundError("Table 0 not found in sheet 0")

    monkeypatch.setattr(server, "build_dataset", failing_build)
    client = server.app.test_client()

    response = client.get("/api/data")

    assert response.status_code == 502
    assert "Table 0 not found" in response.get_json()["error"]
    assert server._response_cache.get(server.CACHE_KEY) is None


def test_data_endpoint_reports_config_errors(monkeypatch):
    def missing_settings():
        raise ConfigError("SHEET_ID must be set to locate the source spreadsheet.")

    monkeypatch.setattr(server, "require_settings", missing_settings)
    client = server.app.test_client()

    assert client.get("/api/data").status_code == 500

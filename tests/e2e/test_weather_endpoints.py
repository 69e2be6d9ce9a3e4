from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from weather_aggregator.domain.entities.errors import RemoteTransientError
from weather_aggregator.domain.entities.weather import Condition
from weather_aggregator.main.app import create_app
from weather_aggregator.main.container import get_container

LISBON = {"city": "Lisbon", "country": "PT"}


@pytest.fixture()
def client(clean_env, make_reading, scripted_source, scripted_forecast_source):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    tomorrow = now + timedelta(days=1)

    alpha = scripted_forecast_source(
        "alpha",
        periods=[
            make_reading("alpha", temperature_c=18.0, timestamp=now),
            make_reading("alpha", temperature_c=22.0, timestamp=tomorrow),
        ],
        script=[make_reading("alpha", temperature_c=10.0, condition=Condition.RAIN, timestamp=now)],
    )
    beta = scripted_source(
        "beta",
        [make_reading("beta", temperature_c=20.0, condition=Condition.RAIN, timestamp=now)],
    )
    broken = scripted_source("gamma", [RemoteTransientError("gamma", "server error 503")])

    app = create_app()
    container = get_container()
    container.weather_sources.override(providers.Object([alpha, beta, broken]))

    with TestClient(app) as test_client:
        yield test_client


def test_refresh_then_query_current_and_history(client):
    assert client.get("/api/v1/weather/current", params=LISBON).status_code == 404

    refreshed = client.post("/api/v1/weather/refresh", params=LISBON)
    assert refreshed.status_code == 200
    report = refreshed.json()
    assert report["outcome"] == "success"
    assert report["sources_succeeded"] == 2

    current = client.get(
        "/api/v1/weather/current", params={"city": " lisbon", "country": "pt"}
    )
    assert current.status_code == 200
    body = current.json()
    assert body["location"] == "lisbon:pt"
    assert body["temperature_c"] == 15.0
    assert body["condition"] == "rain"
    assert sorted(s["source"] for s in body["sources"]) == ["alpha", "beta"]

    window = {
        **LISBON,
        "from": "0",
        "to": (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat(),
    }
    history = client.get("/api/v1/weather/history", params=window)
    assert history.status_code == 200
    assert history.json()["count"] == 1


def test_history_validation(client):
    inverted = {**LISBON, "from": "2024-09-10T00:00:00Z", "to": "2024-09-09T00:00:00Z"}
    assert client.get("/api/v1/weather/history", params=inverted).status_code == 400

    garbage = {**LISBON, "from": "last tuesday", "to": "2024-09-09T00:00:00Z"}
    assert client.get("/api/v1/weather/history", params=garbage).status_code == 400

    missing = {**LISBON, "from": "2024-09-09T00:00:00Z", "to": "2024-09-09T01:00:00Z"}
    assert client.get("/api/v1/weather/history", params=missing).status_code == 404


def test_location_is_required(client):
    response = client.get("/api/v1/weather/current")

    assert response.status_code == 400


def test_forecast(client):
    response = client.get("/api/v1/weather/forecast", params={**LISBON, "days": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["days"] == 2
    assert [r["temperature_c"] for r in body["records"]] == [18.0, 22.0]
    assert all(r["timestamp"].endswith("T00:00:00Z") for r in body["records"])

    too_many = client.get("/api/v1/weather/forecast", params={**LISBON, "days": 30})
    assert too_many.status_code == 400


def test_health_reflects_sources(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    names = {dep["name"]: dep["status"] for dep in body["dependencies"]}
    assert names == {
        "alpha": "unknown",
        "beta": "unknown",
        "gamma": "unknown",
        "scheduler": "unknown",
    }
    assert body["status"] == "unknown"

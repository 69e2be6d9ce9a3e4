from __future__ import annotations

from datetime import datetime, timezone

import pytest

from weather_aggregator.domain.entities.errors import RemoteRejectedError
from weather_aggregator.domain.entities.weather import Condition, Location
from weather_aggregator.infrastructure.gateways.openmeteo_gateway import (
    OPENMETEO_SOURCE,
    OpenMeteoGateway,
    map_wmo_code,
)

GEOCODING = {
    "results": [
        {"name": "Lisbon", "country_code": "US", "country": "United States",
         "latitude": 44.7, "longitude": -93.2},
        {"name": "Lisbon", "country_code": "PT", "country": "Portugal",
         "latitude": 38.72, "longitude": -9.14},
    ]
}

CURRENT = {
    "current": {
        "time": "2024-09-09T12:00",
        "temperature_2m": 23.4,
        "relative_humidity_2m": 55,
        "wind_speed_10m": 4.2,
        "surface_pressure": 1009.8,
        "precipitation": 0.0,
        "weather_code": 2,
    }
}


@pytest.fixture()
def gateway(make_executor) -> OpenMeteoGateway:
    return OpenMeteoGateway(
        executor=make_executor(OPENMETEO_SOURCE),
        base_url="https://meteo.test",
        geocoding_url="https://geo.test",
    )


@pytest.mark.parametrize(
    "code, expected",
    [
        (0, Condition.CLEAR),
        (3, Condition.CLOUDY),
        (48, Condition.MIST),
        (61, Condition.RAIN),
        (81, Condition.RAIN),
        (75, Condition.SNOW),
        (86, Condition.SNOW),
        (99, Condition.STORM),
        (None, Condition.UNKNOWN),
    ],
)
def test_wmo_code_mapping(code, expected) -> None:
    assert map_wmo_code(code) is expected


@pytest.mark.asyncio
async def test_fetch_geocodes_by_country_and_caches(gateway, http_stub) -> None:
    http_stub.add("/v1/search", GEOCODING)
    http_stub.add("/v1/forecast", CURRENT)
    location = Location(city="Lisbon", country="pt")

    reading = await gateway.fetch(location)
    await gateway.fetch(Location(city=" LISBON ", country="PT"))

    assert reading.timestamp == datetime(2024, 9, 9, 12, tzinfo=timezone.utc)
    assert reading.temperature_c == 23.4
    assert reading.condition is Condition.CLOUDY
    assert len(http_stub.params_for("/v1/search")) == 1
    forecast_params = http_stub.params_for("/v1/forecast")[0]
    assert (forecast_params["latitude"], forecast_params["longitude"]) == (38.72, -9.14)
    assert forecast_params["wind_speed_unit"] == "ms"


@pytest.mark.asyncio
async def test_country_name_also_matches(gateway, http_stub) -> None:
    http_stub.add("/v1/search", GEOCODING)

    coordinates = await gateway.resolve_coordinates(
        Location(city="Lisbon", country="United States")
    )

    assert coordinates == (44.7, -93.2)


@pytest.mark.asyncio
async def test_unknown_place_is_rejected(gateway, http_stub) -> None:
    http_stub.add("/v1/search", GEOCODING)

    with pytest.raises(RemoteRejectedError):
        await gateway.resolve_coordinates(Location(city="Lisbon", country="BR"))


@pytest.mark.asyncio
async def test_coordinates_skip_geocoding(gateway, http_stub) -> None:
    http_stub.add("/v1/forecast", CURRENT)

    await gateway.fetch(Location(lat=1.5, lon=2.5))

    assert http_stub.params_for("/v1/search") == []


@pytest.mark.asyncio
async def test_fetch_periods_builds_midday_readings(gateway, http_stub) -> None:
    http_stub.add(
        "/v1/forecast",
        {
            "daily": {
                "time": ["2024-09-09", "2024-09-10"],
                "weather_code": [61, 0],
                "temperature_2m_max": [24.0, 28.0],
                "temperature_2m_min": [16.0, None],
                "relative_humidity_2m_mean": [70, 50],
                "surface_pressure_mean": [1010.0, 1015.0],
                "precipitation_sum": [3.2, 0.0],
                "wind_speed_10m_max": [6.0],
            }
        },
    )

    readings = await gateway.fetch_periods(Location(lat=38.72, lon=-9.14), 2)

    assert [r.timestamp for r in readings] == [
        datetime(2024, 9, 9, 12, tzinfo=timezone.utc),
        datetime(2024, 9, 10, 12, tzinfo=timezone.utc),
    ]
    assert readings[0].temperature_c == 20.0
    assert readings[0].condition is Condition.RAIN
    assert readings[1].temperature_c == 28.0
    assert readings[1].wind_speed_ms is None
    assert http_stub.params_for("/v1/forecast")[0]["forecast_days"] == 2


@pytest.mark.asyncio
async def test_geocoding_cache_evicts_least_recently_used(make_executor, http_stub) -> None:
    gateway = OpenMeteoGateway(
        executor=make_executor(OPENMETEO_SOURCE),
        base_url="https://meteo.test",
        geocoding_url="https://geo.test",
        geocoding_cache_size=2,
    )
    brazil = {"name": "Lisbon", "country_code": "BR", "country": "Brazil",
              "latitude": -10.0, "longitude": -40.0}
    http_stub.add("/v1/search", {"results": [*GEOCODING["results"], brazil]})
    portugal = Location(city="Lisbon", country="PT")
    united_states = Location(city="Lisbon", country="US")

    await gateway.resolve_coordinates(portugal)
    await gateway.resolve_coordinates(united_states)
    await gateway.resolve_coordinates(portugal)
    await gateway.resolve_coordinates(Location(city="Lisbon", country="BR"))
    assert len(http_stub.params_for("/v1/search")) == 3

    assert await gateway.resolve_coordinates(portugal) == (38.72, -9.14)
    assert len(http_stub.params_for("/v1/search")) == 3

    await gateway.resolve_coordinates(united_states)
    assert len(http_stub.params_for("/v1/search")) == 4

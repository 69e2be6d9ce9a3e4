"""
Infrastructure Gateway - OpenWeatherMap

Current conditions from ``/data/2.5/weather`` and a daily forecast derived
from the 5-day / 3-hour ``/data/2.5/forecast`` endpoint.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import structlog

from weather_aggregator.domain.entities.errors import (
    InvalidArgumentError,
    MisconfiguredError,
)
from weather_aggregator.domain.entities.weather import (
    Condition,
    Location,
    SourceReading,
)
from weather_aggregator.domain.gateways.weather_source import IForecastSource
from weather_aggregator.infrastructure.gateways.base import (
    HttpWeatherSource,
    from_unix,
    to_float,
)
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor

logger = structlog.get_logger(__name__)

OPENWEATHER_SOURCE = "openweathermap"

# The free forecast endpoint only covers five days.
MAX_FORECAST_DAYS = 5

_CONDITIONS = {
    "Clear": Condition.CLEAR,
    "Clouds": Condition.CLOUDY,
    "Rain": Condition.RAIN,
    "Drizzle": Condition.RAIN,
    "Snow": Condition.SNOW,
    "Thunderstorm": Condition.STORM,
    "Mist": Condition.MIST,
    "Fog": Condition.MIST,
    "Haze": Condition.MIST,
}


def map_openweather_condition(weather: Any) -> Condition:
    """Map the first entry of OpenWeatherMap's ``weather`` list."""
    if not isinstance(weather, list) or not weather:
        return Condition.UNKNOWN
    first = weather[0] if isinstance(weather[0], dict) else {}
    return _CONDITIONS.get(first.get("main", ""), Condition.UNKNOWN)


class OpenWeatherGateway(HttpWeatherSource, IForecastSource):
    """OpenWeatherMap adapter with forecast support."""

    def __init__(
        self,
        api_key: str,
        executor: ResilienceExecutor,
        base_url: str = "https://api.openweathermap.org",
        request_timeout: float = 10.0,
    ):
        if not api_key:
            raise MisconfiguredError("OpenWeatherMap API key is not configured")
        super().__init__(OPENWEATHER_SOURCE, base_url, executor, request_timeout)
        self._api_key = api_key

    def _params(self, location: Location) -> Dict[str, Any]:
        params: Dict[str, Any] = {"appid": self._api_key, "units": "metric"}
        if location.has_coordinates:
            params["lat"] = location.lat
            params["lon"] = location.lon
        else:
            params["q"] = location.query()
        return params

    def _parse_entry(self, entry: Dict[str, Any]) -> SourceReading:
        main = entry.get("main") or {}
        wind = entry.get("wind") or {}
        rain = entry.get("rain") or {}
        snow = entry.get("snow") or {}

        precipitation = to_float(rain.get("1h"))
        if precipitation is None:
            precipitation = to_float(rain.get("3h"))
        if precipitation is None:
            precipitation = to_float(snow.get("1h")) or to_float(snow.get("3h"))

        return SourceReading(
            source=self.name,
            timestamp=from_unix(entry.get("dt")),
            temperature_c=to_float(main.get("temp")),
            humidity_pct=to_float(main.get("humidity")),
            wind_speed_ms=to_float(wind.get("speed")),
            pressure_hpa=to_float(main.get("pressure")),
            precipitation_mm=precipitation,
            condition=map_openweather_condition(entry.get("weather")),
        )

    async def fetch(
        self, location: Location, timeout: Optional[float] = None
    ) -> SourceReading:
        payload = await self._get_json(
            f"{self.base_url}/data/2.5/weather", self._params(location), timeout
        )
        reading = self._parse_entry(payload)
        logger.debug(
            "openweathermap.reading_parsed",
            location=location.key(),
            temperature_c=reading.temperature_c,
        )
        return reading

    async def fetch_periods(
        self, location: Location, count: int, timeout: Optional[float] = None
    ) -> List[SourceReading]:
        """
        One representative reading per UTC day, preferring the 12:00 slot.

        Requests beyond five days are clamped to five.
        """
        if count <= 0:
            raise InvalidArgumentError("count must be greater than zero")
        count = min(count, MAX_FORECAST_DAYS)

        payload = await self._get_json(
            f"{self.base_url}/data/2.5/forecast", self._params(location), timeout
        )

        per_day: Dict[date, SourceReading] = {}
        midday_seen: Dict[date, bool] = {}
        for entry in payload.get("list") or []:
            if not isinstance(entry, dict):
                continue
            reading = self._parse_entry(entry)
            if reading.timestamp is None:
                continue
            day = reading.timestamp.date()
            is_midday = reading.timestamp.hour == 12
            if day not in per_day:
                per_day[day] = reading
                midday_seen[day] = is_midday
            elif is_midday and not midday_seen[day]:
                per_day[day] = reading
                midday_seen[day] = True

        return [per_day[day] for day in sorted(per_day)][:count]

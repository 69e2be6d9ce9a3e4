"""Infrastructure Gateway - WeatherAPI.com current conditions."""

from typing import Any, Dict, Optional

import structlog

from weather_aggregator.domain.entities.errors import MisconfiguredError
from weather_aggregator.domain.entities.weather import (
    Condition,
    Location,
    SourceReading,
)
from weather_aggregator.infrastructure.gateways.base import (
    HttpWeatherSource,
    from_unix,
    to_float,
)
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor

logger = structlog.get_logger(__name__)

WEATHERAPI_SOURCE = "weatherapi"

KPH_PER_MS = 3.6

# Checked in order; the first keyword found in the condition text wins.
_KEYWORDS = (
    (("thunder", "storm"), Condition.STORM),
    (("snow", "sleet", "blizzard", "ice pellets"), Condition.SNOW),
    (("rain", "shower", "drizzle"), Condition.RAIN),
    (("mist", "fog"), Condition.MIST),
    (("cloud", "overcast"), Condition.CLOUDY),
    (("sunny", "clear"), Condition.CLEAR),
)


def map_weatherapi_condition(text: Any) -> Condition:
    """Map WeatherAPI's free-text condition by keyword."""
    if not isinstance(text, str) or not text:
        return Condition.UNKNOWN
    lowered = text.lower()
    for keywords, condition in _KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return condition
    return Condition.UNKNOWN


class WeatherAPIGateway(HttpWeatherSource):
    """WeatherAPI.com adapter (current conditions only)."""

    def __init__(
        self,
        api_key: str,
        executor: ResilienceExecutor,
        base_url: str = "https://api.weatherapi.com",
        request_timeout: float = 10.0,
    ):
        if not api_key:
            raise MisconfiguredError("WeatherAPI API key is not configured")
        super().__init__(WEATHERAPI_SOURCE, base_url, executor, request_timeout)
        self._api_key = api_key

    async def fetch(
        self, location: Location, timeout: Optional[float] = None
    ) -> SourceReading:
        if location.has_coordinates:
            query = f"{location.lat},{location.lon}"
        else:
            query = location.query()
        params: Dict[str, Any] = {"key": self._api_key, "q": query, "aqi": "no"}

        payload = await self._get_json(
            f"{self.base_url}/v1/current.json", params, timeout
        )
        current = payload.get("current") or {}
        place = payload.get("location") or {}

        timestamp = from_unix(current.get("last_updated_epoch")) or from_unix(
            place.get("localtime_epoch")
        )
        wind_kph = to_float(current.get("wind_kph"))

        return SourceReading(
            source=self.name,
            timestamp=timestamp,
            temperature_c=to_float(current.get("temp_c")),
            humidity_pct=to_float(current.get("humidity")),
            wind_speed_ms=wind_kph / KPH_PER_MS if wind_kph is not None else None,
            pressure_hpa=to_float(current.get("pressure_mb")),
            precipitation_mm=to_float(current.get("precip_mm")),
            condition=map_weatherapi_condition(
                (current.get("condition") or {}).get("text")
            ),
        )

"""
Infrastructure Gateway - Open-Meteo

Keyless source. City/country locations are resolved to coordinates through
the Open-Meteo geocoding API; resolved coordinates are cached per location
key for the lifetime of the process.
"""

from collections import OrderedDict
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional, Tuple

import structlog

from weather_aggregator.domain.entities.errors import (
    InvalidArgumentError,
    RemoteRejectedError,
)
from weather_aggregator.domain.entities.weather import (
    Condition,
    Location,
    SourceReading,
)
from weather_aggregator.domain.gateways.weather_source import IForecastSource
from weather_aggregator.infrastructure.gateways.base import (
    HttpWeatherSource,
    from_iso,
    to_float,
)
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor

logger = structlog.get_logger(__name__)

OPENMETEO_SOURCE = "openmeteo"

MAX_FORECAST_DAYS = 16

GEOCODING_CACHE_SIZE = 128

_CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "surface_pressure",
    "precipitation",
    "weather_code",
)

_DAILY_FIELDS = (
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "relative_humidity_2m_mean",
    "surface_pressure_mean",
    "precipitation_sum",
    "wind_speed_10m_max",
)


def map_wmo_code(code: Any) -> Condition:
    """Map a WMO weather interpretation code to a condition."""
    value = to_float(code)
    if value is None:
        return Condition.UNKNOWN
    value = int(value)
    if value == 0:
        return Condition.CLEAR
    if 1 <= value <= 3:
        return Condition.CLOUDY
    if value in (45, 48):
        return Condition.MIST
    if 51 <= value <= 67 or 80 <= value <= 82:
        return Condition.RAIN
    if 71 <= value <= 77 or value in (85, 86):
        return Condition.SNOW
    if value >= 95:
        return Condition.STORM
    return Condition.UNKNOWN


class OpenMeteoGateway(HttpWeatherSource, IForecastSource):
    """Open-Meteo adapter with daily forecast support."""

    def __init__(
        self,
        executor: ResilienceExecutor,
        base_url: str = "https://api.open-meteo.com",
        geocoding_url: str = "https://geocoding-api.open-meteo.com",
        request_timeout: float = 10.0,
        geocoding_cache_size: int = GEOCODING_CACHE_SIZE,
    ):
        super().__init__(OPENMETEO_SOURCE, base_url, executor, request_timeout)
        self.geocoding_url = geocoding_url.rstrip("/")
        # LRU of geocoded places, keyed by location key.
        self._cache_size = geocoding_cache_size
        self._coordinates: "OrderedDict[str, Tuple[float, float]]" = OrderedDict()

    async def resolve_coordinates(
        self, location: Location, timeout: Optional[float] = None
    ) -> Tuple[float, float]:
        """
        Return ``(lat, lon)`` for a location, geocoding city/country if needed.

        Raises:
            RemoteRejectedError: When geocoding finds no match
        """
        if location.has_coordinates:
            return location.lat, location.lon

        key = location.key()
        cached = self._coordinates.get(key)
        if cached is not None:
            self._coordinates.move_to_end(key)
            return cached

        payload = await self._get_json(
            f"{self.geocoding_url}/v1/search",
            {"name": location.city.strip(), "count": 10, "format": "json"},
            timeout,
        )
        match = self._pick_match(payload.get("results") or [], location.country)
        if match is None:
            raise RemoteRejectedError(
                self.name,
                f"geocoding found no match for {location.query()}",
                details={"location": key},
            )

        lat, lon = to_float(match.get("latitude")), to_float(match.get("longitude"))
        if lat is None or lon is None:
            raise RemoteRejectedError(
                self.name, f"geocoding returned no coordinates for {location.query()}"
            )

        self._remember(key, (lat, lon))
        logger.info(
            "openmeteo.location_geocoded", location=key, lat=lat, lon=lon
        )
        return lat, lon

    def _remember(self, key: str, coordinates: Tuple[float, float]) -> None:
        if self._cache_size <= 0:
            return
        self._coordinates[key] = coordinates
        self._coordinates.move_to_end(key)
        while len(self._coordinates) > self._cache_size:
            self._coordinates.popitem(last=False)

    @staticmethod
    def _pick_match(results: List[Any], country: str) -> Optional[Dict[str, Any]]:
        candidates = [r for r in results if isinstance(r, dict)]
        if not candidates:
            return None
        wanted = country.strip().casefold()
        if not wanted:
            return candidates[0]
        for result in candidates:
            code = str(result.get("country_code", "")).casefold()
            name = str(result.get("country", "")).casefold()
            if wanted in (code, name):
                return result
        return None

    async def fetch(
        self, location: Location, timeout: Optional[float] = None
    ) -> SourceReading:
        lat, lon = await self.resolve_coordinates(location, timeout)
        payload = await self._get_json(
            f"{self.base_url}/v1/forecast",
            {
                "latitude": lat,
                "longitude": lon,
                "current": ",".join(_CURRENT_FIELDS),
                "wind_speed_unit": "ms",
                "timezone": "UTC",
            },
            timeout,
        )
        current = payload.get("current") or {}

        return SourceReading(
            source=self.name,
            timestamp=from_iso(current.get("time")),
            temperature_c=to_float(current.get("temperature_2m")),
            humidity_pct=to_float(current.get("relative_humidity_2m")),
            wind_speed_ms=to_float(current.get("wind_speed_10m")),
            pressure_hpa=to_float(current.get("surface_pressure")),
            precipitation_mm=to_float(current.get("precipitation")),
            condition=map_wmo_code(current.get("weather_code")),
        )

    async def fetch_periods(
        self, location: Location, count: int, timeout: Optional[float] = None
    ) -> List[SourceReading]:
        if count <= 0:
            raise InvalidArgumentError("count must be greater than zero")
        count = min(count, MAX_FORECAST_DAYS)

        lat, lon = await self.resolve_coordinates(location, timeout)
        payload = await self._get_json(
            f"{self.base_url}/v1/forecast",
            {
                "latitude": lat,
                "longitude": lon,
                "daily": ",".join(_DAILY_FIELDS),
                "forecast_days": count,
                "wind_speed_unit": "ms",
                "timezone": "UTC",
            },
            timeout,
        )
        daily = payload.get("daily") or {}
        days = daily.get("time") or []

        def _column(field: str, index: int) -> Any:
            values = daily.get(field) or []
            return values[index] if index < len(values) else None

        readings: List[SourceReading] = []
        for index, day in enumerate(days):
            try:
                day_date = datetime.strptime(str(day), "%Y-%m-%d").date()
            except ValueError:
                continue
            t_max = to_float(_column("temperature_2m_max", index))
            t_min = to_float(_column("temperature_2m_min", index))
            if t_max is not None and t_min is not None:
                temperature: Optional[float] = (t_max + t_min) / 2
            else:
                temperature = t_max if t_max is not None else t_min

            readings.append(
                SourceReading(
                    source=self.name,
                    timestamp=datetime.combine(day_date, time(12), tzinfo=timezone.utc),
                    temperature_c=temperature,
                    humidity_pct=to_float(_column("relative_humidity_2m_mean", index)),
                    wind_speed_ms=to_float(_column("wind_speed_10m_max", index)),
                    pressure_hpa=to_float(_column("surface_pressure_mean", index)),
                    precipitation_mm=to_float(_column("precipitation_sum", index)),
                    condition=map_wmo_code(_column("weather_code", index)),
                )
            )

        readings.sort(key=lambda reading: reading.timestamp)
        return readings[:count]

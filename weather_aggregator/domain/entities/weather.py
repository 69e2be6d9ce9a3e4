"""
Weather domain entities.

Readings produced by individual sources, the aggregated record kept in
history, and the location identity used to key that history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .errors import InvalidArgumentError


class Condition(str, Enum):
    """Normalized high-level weather condition."""

    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"
    SNOW = "snow"
    STORM = "storm"
    MIST = "mist"
    UNKNOWN = "unknown"


class CycleOutcome(str, Enum):
    """Result of one fetch-aggregate-store pass for a location."""

    SUCCESS = "success"
    NO_DATA = "no_data"


@dataclass(frozen=True, slots=True)
class Location:
    """
    A tracked place.

    Either ``city`` (optionally with ``country``) or both ``lat`` and ``lon``
    must be provided. Coordinates take precedence for the key.
    """

    city: str = ""
    country: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None

    def __post_init__(self) -> None:
        has_coords = self.lat is not None and self.lon is not None
        if not has_coords and not self.city.strip():
            raise InvalidArgumentError(
                "Location requires a city or a latitude/longitude pair",
                details={"city": self.city, "lat": self.lat, "lon": self.lon},
            )
        if has_coords:
            if not -90.0 <= self.lat <= 90.0 or not -180.0 <= self.lon <= 180.0:
                raise InvalidArgumentError(
                    "Coordinates out of range",
                    details={"lat": self.lat, "lon": self.lon},
                )

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def key(self) -> str:
        """Canonical history key; identical for any spelling of the same place."""
        if self.has_coordinates:
            return f"lat={self.lat:.4f},lon={self.lon:.4f}"
        return f"{self.city.strip().casefold()}:{self.country.strip().casefold()}"

    def query(self) -> str:
        """``city,country`` form accepted by most provider APIs."""
        if self.country.strip():
            return f"{self.city.strip()},{self.country.strip()}"
        return self.city.strip()


@dataclass(frozen=True, slots=True)
class SourceReading:
    """One source's normalized observation. Numerics are ``None`` when unknown."""

    source: str
    timestamp: Optional[datetime]
    temperature_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    pressure_hpa: Optional[float] = None
    precipitation_mm: Optional[float] = None
    condition: Condition = Condition.UNKNOWN


@dataclass(frozen=True, slots=True)
class SourceContribution:
    """Traceability entry: which source contributed and when it observed."""

    source: str
    timestamp: Optional[datetime]


@dataclass(frozen=True, slots=True)
class AggregatedRecord:
    """Merged observation for one location at one effective timestamp."""

    location_key: str
    timestamp: datetime
    temperature_c: float = 0.0
    humidity_pct: float = 0.0
    wind_speed_ms: float = 0.0
    pressure_hpa: float = 0.0
    precipitation_mm: float = 0.0
    condition: Condition = Condition.UNKNOWN
    contributions: Tuple[SourceContribution, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class CycleReport:
    """Summary of one FetchAndStore pass."""

    location_key: str
    outcome: CycleOutcome
    sources_succeeded: int
    record: Optional[AggregatedRecord] = None

"""
Domain Gateway - Weather Sources

This module defines the capability interfaces every external weather
source implements. Concrete HTTP implementations live in the
infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from weather_aggregator.domain.entities.resilience import BreakerState
from weather_aggregator.domain.entities.weather import Location, SourceReading


class IWeatherSource(ABC):
    """A source of current observations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier used in logs and contributor lists."""
        pass

    @abstractmethod
    async def fetch(
        self, location: Location, timeout: Optional[float] = None
    ) -> SourceReading:
        """
        Fetch the current observation for a location.

        Args:
            location: Place to observe
            timeout: Seconds allowed for the whole call including retries

        Returns:
            The normalized reading

        Raises:
            SourceError: When the source cannot produce a reading
        """
        pass

    def breaker_state(self) -> Optional[BreakerState]:
        """State of the source's circuit breaker, if it has one."""
        return None


class IForecastSource(IWeatherSource):
    """A source that can also return multi-day data in one call."""

    @abstractmethod
    async def fetch_periods(
        self, location: Location, count: int, timeout: Optional[float] = None
    ) -> List[SourceReading]:
        """
        Fetch up to ``count`` daily readings, ascending by date.

        Raises:
            SourceError: When the source cannot produce a forecast
        """
        pass

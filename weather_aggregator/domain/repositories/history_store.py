"""
History Store Interface

Defines the contract of the per-location, retention-bounded time series
that holds aggregated records.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from weather_aggregator.domain.entities.weather import AggregatedRecord, Location


class IHistoryStore(ABC):
    """Interface for history store implementations."""

    @abstractmethod
    def write(self, location: Location, record: AggregatedRecord) -> None:
        """
        Append a record and apply retention for that location.

        Args:
            location: Location the record belongs to
            record: Aggregated record to append
        """
        pass

    @abstractmethod
    def latest(self, location: Location) -> AggregatedRecord:
        """
        Return the most recently written record.

        Raises:
            WeatherDataNotFoundError: If the location has no history
        """
        pass

    @abstractmethod
    def range(
        self, location: Location, start: datetime, end: datetime
    ) -> List[AggregatedRecord]:
        """
        Return records with ``start <= timestamp <= end`` in stored order.

        Raises:
            WeatherDataNotFoundError: If the location is unknown or nothing matches
        """
        pass

    @abstractmethod
    def locations(self) -> List[str]:
        """Keys of locations currently holding history."""
        pass

    @abstractmethod
    def size(self, location_key: str) -> int:
        """Number of records held for a location key (0 when unknown)."""
        pass

"""
In-memory History Store

Per-location time series of aggregated records bounded by a count cap and
an age cap, guarded by a single readers-writer lock. Nothing survives a
restart.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta
from typing import Deque, Dict, List

import structlog

from weather_aggregator.domain.entities.errors import WeatherDataNotFoundError
from weather_aggregator.domain.entities.resilience import RetentionPolicy
from weather_aggregator.domain.entities.weather import AggregatedRecord, Location
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.domain.repositories.history_store import IHistoryStore
from weather_aggregator.shared.rwlock import ReadWriteLock

logger = structlog.get_logger(__name__)


class InMemoryHistoryStore(IHistoryStore):
    """Retention-bounded history kept in process memory."""

    def __init__(self, retention: RetentionPolicy, clock: IClock):
        self._retention = retention
        self._clock = clock
        self._lock = ReadWriteLock()
        self._series: Dict[str, Deque[AggregatedRecord]] = {}

    def write(self, location: Location, record: AggregatedRecord) -> None:
        key = location.key()
        with self._lock.write_locked():
            series = self._series.setdefault(key, deque())
            series.append(record)

            evicted = 0
            if self._retention.max_entries > 0:
                while len(series) > self._retention.max_entries:
                    series.popleft()
                    evicted += 1

            if self._retention.max_age_seconds > 0:
                cutoff = self._clock.now() - timedelta(
                    seconds=self._retention.max_age_seconds
                )
                while series and series[0].timestamp < cutoff:
                    series.popleft()
                    evicted += 1

            if not series:
                del self._series[key]
            size = len(series)

        logger.debug(
            "history.record_written",
            location=key,
            timestamp=record.timestamp.isoformat(),
            size=size,
            evicted=evicted,
        )

    def latest(self, location: Location) -> AggregatedRecord:
        key = location.key()
        with self._lock.read_locked():
            series = self._series.get(key)
            if not series:
                raise WeatherDataNotFoundError(key)
            return series[-1]

    def range(
        self, location: Location, start: datetime, end: datetime
    ) -> List[AggregatedRecord]:
        key = location.key()
        with self._lock.read_locked():
            series = self._series.get(key)
            if not series:
                raise WeatherDataNotFoundError(key)
            matches = [r for r in series if start <= r.timestamp <= end]

        if not matches:
            raise WeatherDataNotFoundError(
                key, details={"from": start.isoformat(), "to": end.isoformat()}
            )
        return matches

    def locations(self) -> List[str]:
        with self._lock.read_locked():
            return sorted(self._series)

    def size(self, location_key: str) -> int:
        with self._lock.read_locked():
            series = self._series.get(location_key)
            return len(series) if series else 0

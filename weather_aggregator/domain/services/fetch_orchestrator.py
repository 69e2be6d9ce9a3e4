"""
Fetch Orchestrator - Domain Service

Fans one location out to every configured weather source concurrently,
keeps the readings of the sources that succeeded and reports the rest to
the cycle observer. Source failures never cross this boundary.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Awaitable, Callable, Dict, List, Sequence, Tuple, TypeVar

from weather_aggregator.domain.entities.errors import (
    FailureKind,
    InvalidArgumentError,
    MisconfiguredError,
    SourceError,
    WeatherDataNotFoundError,
)
from weather_aggregator.domain.entities.weather import (
    AggregatedRecord,
    Location,
    SourceReading,
)
from weather_aggregator.domain.gateways.weather_source import (
    IForecastSource,
    IWeatherSource,
)
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.domain.ports.cycle_observer import ICycleObserver
from weather_aggregator.domain.services.aggregation import aggregate_readings
from weather_aggregator.shared import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

PeriodBucket = Tuple[date, List[SourceReading]]


class FetchOrchestrator:
    """Concurrent fan-out/fan-in over the configured weather sources."""

    def __init__(
        self,
        sources: Sequence[IWeatherSource],
        clock: IClock,
        observer: ICycleObserver,
        fetch_timeout: float = 10.0,
        forecast_timeout: float = 10.0,
    ) -> None:
        self._sources = list(sources)
        self._clock = clock
        self._observer = observer
        self._fetch_timeout = fetch_timeout
        self._forecast_timeout = forecast_timeout

    @property
    def sources(self) -> List[IWeatherSource]:
        return list(self._sources)

    @property
    def forecast_sources(self) -> List[IForecastSource]:
        return [s for s in self._sources if isinstance(s, IForecastSource)]

    async def collect(self, location: Location) -> List[SourceReading]:
        """
        Fetch from every source and return the readings that succeeded.

        Readings appear in completion order. An empty list means no source
        succeeded this time.

        Raises:
            MisconfiguredError: If no sources are configured
        """
        if not self._sources:
            raise MisconfiguredError("No weather sources configured")

        readings: List[SourceReading] = []
        lock = asyncio.Lock()

        async def _fetch_one(source: IWeatherSource) -> None:
            reading = await self._guarded(
                source,
                location,
                lambda: source.fetch(location, timeout=self._fetch_timeout),
                self._fetch_timeout,
            )
            if reading is None:
                return
            async with lock:
                readings.append(reading)

        await asyncio.gather(*(_fetch_one(source) for source in self._sources))

        logger.debug(
            "fetch.collect.completed",
            location=location.key(),
            sources=len(self._sources),
            succeeded=len(readings),
        )
        return readings

    async def collect_periods(self, location: Location, count: int) -> List[PeriodBucket]:
        """
        Fetch multi-day readings and bucket them by UTC calendar day.

        Returns at most ``count`` buckets, in chronological order.

        Raises:
            InvalidArgumentError: If ``count`` is not positive
            MisconfiguredError: If no forecast-capable sources are configured
        """
        if count <= 0:
            raise InvalidArgumentError(
                "Period count must be greater than zero", details={"count": count}
            )
        if not self._sources:
            raise MisconfiguredError("No weather sources configured")
        forecast_sources = self.forecast_sources
        if not forecast_sources:
            raise MisconfiguredError("No forecast-capable weather sources configured")

        buckets: Dict[date, List[SourceReading]] = {}
        lock = asyncio.Lock()

        async def _fetch_one(source: IForecastSource) -> None:
            period_readings = await self._guarded(
                source,
                location,
                lambda: source.fetch_periods(
                    location, count, timeout=self._forecast_timeout
                ),
                self._forecast_timeout,
            )
            if not period_readings:
                return
            async with lock:
                for reading in period_readings:
                    if reading.timestamp is None:
                        logger.warning(
                            "fetch.periods.reading_without_timestamp",
                            source=source.name,
                            location=location.key(),
                        )
                        continue
                    day = reading.timestamp.astimezone(timezone.utc).date()
                    buckets.setdefault(day, []).append(reading)

        await asyncio.gather(*(_fetch_one(source) for source in forecast_sources))

        return [(day, buckets[day]) for day in sorted(buckets)[:count]]

    async def forecast(self, location: Location, count: int) -> List[AggregatedRecord]:
        """
        Aggregate each period bucket into one record stamped at midnight UTC.

        Raises:
            InvalidArgumentError: If ``count`` is not positive
            MisconfiguredError: If no forecast-capable sources are configured
            WeatherDataNotFoundError: If no source returned any period
        """
        buckets = await self.collect_periods(location, count)
        if not buckets:
            logger.info("fetch.forecast.no_data", location=location.key())
            raise WeatherDataNotFoundError(location.key())

        records: List[AggregatedRecord] = []
        for day, readings in buckets:
            record = aggregate_readings(location, readings, now=self._clock.now())
            day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            records.append(replace(record, timestamp=day_start))
        return records

    async def _guarded(
        self,
        source: IWeatherSource,
        location: Location,
        call: Callable[[], Awaitable[T]],
        timeout: float,
    ) -> T | None:
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except SourceError as exc:
            self._report_failure(source, location, exc.kind, str(exc))
        except asyncio.TimeoutError:
            self._report_failure(
                source, location, FailureKind.CANCELLED, f"timed out after {timeout}s"
            )
        except Exception as exc:
            logger.error(
                "fetch.source.unexpected_error",
                source=source.name,
                location=location.key(),
                error=str(exc),
                exc_info=exc,
            )
            self._observer.source_failed(
                source.name, location.key(), FailureKind.REMOTE_REJECTED
            )
        return None

    def _report_failure(
        self, source: IWeatherSource, location: Location, kind: FailureKind, error: str
    ) -> None:
        logger.warning(
            "fetch.source.failed",
            source=source.name,
            location=location.key(),
            kind=kind.value,
            error=error,
        )
        self._observer.source_failed(source.name, location.key(), kind)

"""
Weather Use Cases - Application Layer

Entry points of the fetch-aggregate-store pipeline and of the read path
over stored history.
"""

from datetime import datetime

from weather_aggregator.application.dtos.weather_dto import (
    AggregatedRecordDTO,
    CycleReportDTO,
    ForecastDTO,
    WeatherHistoryDTO,
)
from weather_aggregator.domain.entities.errors import InvalidArgumentError
from weather_aggregator.domain.entities.weather import (
    CycleOutcome,
    CycleReport,
    Location,
)
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.domain.ports.cycle_observer import ICycleObserver
from weather_aggregator.domain.repositories.history_store import IHistoryStore
from weather_aggregator.domain.services.aggregation import aggregate_readings
from weather_aggregator.domain.services.fetch_orchestrator import FetchOrchestrator
from weather_aggregator.shared import get_logger

logger = get_logger(__name__)


class FetchAndStoreUseCase:
    """Fetch from every source, aggregate and store one record."""

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        history_store: IHistoryStore,
        observer: ICycleObserver,
        clock: IClock,
    ):
        self.orchestrator = orchestrator
        self.history_store = history_store
        self.observer = observer
        self.clock = clock

    async def execute(self, location: Location) -> CycleReportDTO:
        """
        Run one pass for a location.

        When no source succeeds nothing is written and the last stored record
        stays current.

        Raises:
            MisconfiguredError: If no sources are configured
        """
        key = location.key()
        readings = await self.orchestrator.collect(location)

        if not readings:
            logger.warning("weather.cycle.no_data", location=key)
            self.observer.cycle_completed(key, CycleOutcome.NO_DATA)
            return CycleReportDTO.from_domain(
                CycleReport(
                    location_key=key,
                    outcome=CycleOutcome.NO_DATA,
                    sources_succeeded=0,
                )
            )

        record = aggregate_readings(location, readings, now=self.clock.now())
        self.history_store.write(location, record)
        self.observer.cycle_completed(key, CycleOutcome.SUCCESS)

        logger.info(
            "weather.cycle.stored",
            location=key,
            sources=[c.source for c in record.contributions],
            temperature_c=round(record.temperature_c, 2),
            condition=record.condition.value,
        )
        return CycleReportDTO.from_domain(
            CycleReport(
                location_key=key,
                outcome=CycleOutcome.SUCCESS,
                sources_succeeded=len(readings),
                record=record,
            )
        )


class GetLatestWeatherUseCase:
    """Use case returning the most recent stored record."""

    def __init__(self, history_store: IHistoryStore):
        self.history_store = history_store

    async def execute(self, location: Location) -> AggregatedRecordDTO:
        return AggregatedRecordDTO.from_domain(self.history_store.latest(location))


class GetWeatherHistoryUseCase:
    """Use case returning stored records inside an inclusive time window."""

    def __init__(self, history_store: IHistoryStore):
        self.history_store = history_store

    async def execute(
        self, location: Location, start: datetime, end: datetime
    ) -> WeatherHistoryDTO:
        """
        Raises:
            WeatherDataNotFoundError: If nothing is stored in the window,
                which includes ``start > end``
        """
        records = self.history_store.range(location, start, end)
        return WeatherHistoryDTO.from_domain(location.key(), start, end, records)


class GetForecastUseCase:
    """Use case aggregating per-day forecasts from forecast-capable sources."""

    def __init__(self, orchestrator: FetchOrchestrator, max_days: int = 7):
        self.orchestrator = orchestrator
        self.max_days = max_days

    async def execute(self, location: Location, days: int) -> ForecastDTO:
        """
        Raises:
            InvalidArgumentError: If ``days`` is outside ``1..max_days``
            MisconfiguredError: If no forecast-capable source is configured
            WeatherDataNotFoundError: If no source returned forecast data
        """
        if not 1 <= days <= self.max_days:
            raise InvalidArgumentError(
                f"days must be between 1 and {self.max_days}",
                details={"days": days},
            )

        records = await self.orchestrator.forecast(location, days)
        logger.info("weather.forecast.built", location=location.key(), days=len(records))
        return ForecastDTO.from_domain(location.key(), records)

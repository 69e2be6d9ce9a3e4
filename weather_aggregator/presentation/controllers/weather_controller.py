"""
Weather Router - Presentation Layer

Current conditions, stored history, aggregated forecasts and manual
refresh for a location given as ``city``/``country`` or ``lat``/``lon``.
"""

from datetime import datetime, timezone
from typing import NoReturn, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, status

from weather_aggregator.application.dtos.weather_dto import (
    AggregatedRecordDTO,
    CycleReportDTO,
    ForecastDTO,
    WeatherHistoryDTO,
)
from weather_aggregator.application.use_cases.weather_use_cases import (
    FetchAndStoreUseCase,
    GetForecastUseCase,
    GetLatestWeatherUseCase,
    GetWeatherHistoryUseCase,
)
from weather_aggregator.domain.entities.errors import (
    InvalidArgumentError,
    MisconfiguredError,
    WeatherDataNotFoundError,
)
from weather_aggregator.domain.entities.weather import Location
from weather_aggregator.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/weather", tags=["Weather"])


def location_from_query(
    city: Optional[str] = Query(default=None, description="City name"),
    country: str = Query(default="", description="Country name or ISO code"),
    lat: Optional[float] = Query(default=None, description="Latitude in degrees"),
    lon: Optional[float] = Query(default=None, description="Longitude in degrees"),
) -> Location:
    """Build the requested location; coordinates win over city/country."""
    try:
        return Location(city=city or "", country=country, lat=lat, lon=lon)
    except InvalidArgumentError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc


def parse_time(value: str, name: str) -> datetime:
    """Parse ISO-8601 or unix seconds into an aware UTC datetime."""
    text = value.strip()
    try:
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid '{name}' time; use ISO-8601 or unix seconds",
        ) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _raise_for_domain_error(exc: Exception, event: str, location: Location) -> NoReturn:
    if isinstance(exc, WeatherDataNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    if isinstance(exc, InvalidArgumentError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    if isinstance(exc, MisconfiguredError):
        logger.error(f"{event}.misconfigured", location=location.key(), error=exc.message)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message
        ) from exc

    logger.error(f"{event}.failed", location=location.key(), error=str(exc), exc_info=exc)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    ) from exc


@router.get("/current", response_model=AggregatedRecordDTO)
@inject
async def get_current_weather(
    location: Location = Depends(location_from_query),
    get_latest_weather_use_case: GetLatestWeatherUseCase = Depends(
        Provide["get_latest_weather_use_case"]
    ),
) -> AggregatedRecordDTO:
    """Return the most recent aggregated record for a location."""
    try:
        return await get_latest_weather_use_case.execute(location)
    except Exception as exc:
        _raise_for_domain_error(exc, "weather.current", location)


@router.get("/history", response_model=WeatherHistoryDTO)
@inject
async def get_weather_history(
    start: str = Query(
        ..., alias="from", description="Window start, ISO-8601 or unix seconds"
    ),
    end: str = Query(..., alias="to", description="Window end, ISO-8601 or unix seconds"),
    location: Location = Depends(location_from_query),
    get_weather_history_use_case: GetWeatherHistoryUseCase = Depends(
        Provide["get_weather_history_use_case"]
    ),
) -> WeatherHistoryDTO:
    """Return stored records with ``from <= timestamp <= to``, oldest first."""
    start_at = parse_time(start, "from")
    end_at = parse_time(end, "to")
    if start_at > end_at:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'from' must not be later than 'to'",
        )

    try:
        return await get_weather_history_use_case.execute(location, start_at, end_at)
    except Exception as exc:
        _raise_for_domain_error(exc, "weather.history", location)


@router.get("/forecast", response_model=ForecastDTO)
@inject
async def get_weather_forecast(
    days: int = Query(default=3, description="Number of days, starting today"),
    location: Location = Depends(location_from_query),
    get_forecast_use_case: GetForecastUseCase = Depends(
        Provide["get_forecast_use_case"]
    ),
) -> ForecastDTO:
    """
    Aggregate daily forecasts from every forecast-capable source.

    Each returned record covers one UTC day and is stamped at midnight UTC.
    Forecasts are computed on demand and never stored.
    """
    logger.info("weather.forecast.requested", location=location.key(), days=days)
    try:
        return await get_forecast_use_case.execute(location, days)
    except Exception as exc:
        _raise_for_domain_error(exc, "weather.forecast", location)


@router.post("/refresh", response_model=CycleReportDTO)
@inject
async def refresh_weather(
    location: Location = Depends(location_from_query),
    fetch_and_store_use_case: FetchAndStoreUseCase = Depends(
        Provide["fetch_and_store_use_case"]
    ),
) -> CycleReportDTO:
    """Run one fetch-aggregate-store pass for a location right now."""
    logger.info("weather.refresh.requested", location=location.key())
    try:
        return await fetch_and_store_use_case.execute(location)
    except Exception as exc:
        _raise_for_domain_error(exc, "weather.refresh", location)

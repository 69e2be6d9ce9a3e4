"""Builds the configured set of weather sources, one breaker per source."""

from typing import List, Optional

import structlog

from weather_aggregator.domain.entities.errors import MisconfiguredError
from weather_aggregator.domain.entities.resilience import BreakerSettings, RetryPolicy
from weather_aggregator.domain.gateways.weather_source import IWeatherSource
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.infrastructure.gateways.openmeteo_gateway import (
    OPENMETEO_SOURCE,
    OpenMeteoGateway,
)
from weather_aggregator.infrastructure.gateways.openweather_gateway import (
    OPENWEATHER_SOURCE,
    OpenWeatherGateway,
)
from weather_aggregator.infrastructure.gateways.weatherapi_gateway import (
    WEATHERAPI_SOURCE,
    WeatherAPIGateway,
)
from weather_aggregator.infrastructure.resilience.circuit_breaker import CircuitBreaker
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor

logger = structlog.get_logger(__name__)


def build_weather_sources(
    clock: IClock,
    retry_policy: RetryPolicy,
    breaker_settings: BreakerSettings,
    openweather_api_key: Optional[str] = None,
    openweather_base_url: str = "https://api.openweathermap.org",
    weatherapi_api_key: Optional[str] = None,
    weatherapi_base_url: str = "https://api.weatherapi.com",
    openmeteo_enabled: bool = True,
    openmeteo_base_url: str = "https://api.open-meteo.com",
    openmeteo_geocoding_url: str = "https://geocoding-api.open-meteo.com",
    request_timeout: float = 10.0,
) -> List[IWeatherSource]:
    """
    Create every source that is usable with the given configuration.

    Sources whose configuration is incomplete (a missing API key) are left
    out and logged instead of failing on every cycle.
    """

    def _executor(name: str) -> ResilienceExecutor:
        breaker = CircuitBreaker(name, breaker_settings, clock)
        return ResilienceExecutor(name, retry_policy, breaker, clock)

    sources: List[IWeatherSource] = []

    try:
        sources.append(
            OpenWeatherGateway(
                api_key=openweather_api_key or "",
                executor=_executor(OPENWEATHER_SOURCE),
                base_url=openweather_base_url,
                request_timeout=request_timeout,
            )
        )
    except MisconfiguredError as exc:
        logger.warning("sources.skipped", source=OPENWEATHER_SOURCE, reason=exc.message)

    try:
        sources.append(
            WeatherAPIGateway(
                api_key=weatherapi_api_key or "",
                executor=_executor(WEATHERAPI_SOURCE),
                base_url=weatherapi_base_url,
                request_timeout=request_timeout,
            )
        )
    except MisconfiguredError as exc:
        logger.warning("sources.skipped", source=WEATHERAPI_SOURCE, reason=exc.message)

    if openmeteo_enabled:
        sources.append(
            OpenMeteoGateway(
                executor=_executor(OPENMETEO_SOURCE),
                base_url=openmeteo_base_url,
                geocoding_url=openmeteo_geocoding_url,
                request_timeout=request_timeout,
            )
        )
    else:
        logger.info("sources.skipped", source=OPENMETEO_SOURCE, reason="disabled")

    logger.info("sources.configured", sources=[source.name for source in sources])
    return sources

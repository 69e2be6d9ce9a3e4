"""
Dependency container injection module - Main Layer

This module implements the dependency injection container
to simplify the management and lifecycle of dependencies
in the application.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from weather_aggregator.application.models import SystemInfo
from weather_aggregator.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from weather_aggregator.application.use_cases.weather_use_cases import (
    FetchAndStoreUseCase,
    GetForecastUseCase,
    GetLatestWeatherUseCase,
    GetWeatherHistoryUseCase,
)
from weather_aggregator.domain.entities.resilience import (
    BreakerSettings,
    RetentionPolicy,
    RetryPolicy,
)
from weather_aggregator.domain.services.fetch_orchestrator import FetchOrchestrator
from weather_aggregator.infrastructure.gateways.factory import build_weather_sources
from weather_aggregator.infrastructure.repositories.memory_history_store import (
    InMemoryHistoryStore,
)
from weather_aggregator.infrastructure.services.clock import SystemClock
from weather_aggregator.infrastructure.services.cycle_coordinator import (
    CycleCoordinator,
)
from weather_aggregator.infrastructure.services.cycle_observer import (
    LoggingCycleObserver,
)
from weather_aggregator.infrastructure.services.health_check_service import (
    HealthCheckService,
)
from weather_aggregator.shared import get_logger

from .config import AppSettings, parse_tracked_locations

logger = get_logger(__name__)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependecy-injector."""

    wiring_config = containers.WiringConfiguration(packages=["..presentation"])

    # Settings
    config = providers.Configuration()

    # Infrastructure
    clock = providers.Singleton(SystemClock)

    cycle_observer = providers.Singleton(LoggingCycleObserver)

    retry_policy = providers.Singleton(
        RetryPolicy,
        max_retries=config.resilience.max_retries,
        initial_delay=config.resilience.initial_delay_seconds,
        max_delay=config.resilience.max_delay_seconds,
    )

    breaker_settings = providers.Singleton(
        BreakerSettings,
        failure_threshold=config.resilience.breaker_failure_threshold,
        window=config.resilience.breaker_window_seconds,
        cooldown=config.resilience.breaker_cooldown_seconds,
        half_open_max_calls=config.resilience.breaker_half_open_max_calls,
    )

    history_store = providers.Singleton(
        InMemoryHistoryStore,
        retention=providers.Singleton(
            RetentionPolicy,
            max_entries=config.store.max_history,
            max_age_seconds=config.store.max_age_seconds,
        ),
        clock=clock,
    )

    # Gateways
    weather_sources = providers.Singleton(
        build_weather_sources,
        clock=clock,
        retry_policy=retry_policy,
        breaker_settings=breaker_settings,
        openweather_api_key=config.providers.openweather_api_key,
        openweather_base_url=config.providers.openweather_base_url,
        weatherapi_api_key=config.providers.weatherapi_api_key,
        weatherapi_base_url=config.providers.weatherapi_base_url,
        openmeteo_enabled=config.providers.openmeteo_enabled,
        openmeteo_base_url=config.providers.openmeteo_base_url,
        openmeteo_geocoding_url=config.providers.openmeteo_geocoding_url,
        request_timeout=config.providers.request_timeout_seconds,
    )

    # Domain services
    fetch_orchestrator = providers.Singleton(
        FetchOrchestrator,
        sources=weather_sources,
        clock=clock,
        observer=cycle_observer,
        fetch_timeout=config.providers.fetch_timeout_seconds,
        forecast_timeout=config.providers.forecast_timeout_seconds,
    )

    # Application (use cases)
    fetch_and_store_use_case = providers.Factory(
        FetchAndStoreUseCase,
        orchestrator=fetch_orchestrator,
        history_store=history_store,
        observer=cycle_observer,
        clock=clock,
    )

    get_latest_weather_use_case = providers.Factory(
        GetLatestWeatherUseCase,
        history_store=history_store,
    )

    get_weather_history_use_case = providers.Factory(
        GetWeatherHistoryUseCase,
        history_store=history_store,
    )

    get_forecast_use_case = providers.Factory(
        GetForecastUseCase,
        orchestrator=fetch_orchestrator,
        max_days=config.providers.max_forecast_days,
    )

    # Scheduler
    tracked_locations = providers.Singleton(
        parse_tracked_locations,
        cities=config.scheduler.location_city,
        countries=config.scheduler.location_country,
    )

    cycle_coordinator = providers.Singleton(
        CycleCoordinator,
        locations=tracked_locations,
        run_location=fetch_and_store_use_case.provided.execute,
        clock=clock,
        interval_seconds=config.scheduler.fetch_interval_seconds,
        cycle_timeout_seconds=config.scheduler.cycle_timeout_seconds,
        enabled=config.scheduler.enabled,
    )

    # System
    health_check_service = providers.Singleton(
        HealthCheckService,
        sources=weather_sources,
        coordinator=cycle_coordinator,
        clock=clock,
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.service.title,
        description=config.service.description,
        version=config.service.version,
        environment=providers.Callable(
            lambda env: env.value if hasattr(env, "value") else str(env),
            config.environment,
        ),
        git_commit=config.service.git_commit,
        build_time=config.service.build_time,
        fetch_interval_seconds=config.scheduler.fetch_interval_seconds,
        max_history=config.store.max_history,
        max_age_seconds=config.store.max_age_seconds,
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
    )

    get_application_info_use_case = providers.Factory(
        GetApplicationInfoUseCase,
        health_check_service=health_check_service,
        system_info=system_info,
        history_store=history_store,
        counters=cycle_observer.provided.snapshot,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Start the fetch scheduler on startup and stop it on shutdown.

    Tracked locations are parsed here, so a misconfigured location list
    fails application startup instead of the first cycle.
    """
    container = get_container()
    coordinator = container.cycle_coordinator()

    try:
        coordinator.start()
        logger.info(
            "container.resources.initialized",
            sources=[source.name for source in container.weather_sources()],
        )
        yield container

    finally:
        await coordinator.stop()
        logger.info("container.resources.shutdown")

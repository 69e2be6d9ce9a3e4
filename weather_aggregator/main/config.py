"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from weather_aggregator.domain.entities.errors import (
    InvalidArgumentError,
    MisconfiguredError,
)
from weather_aggregator.domain.entities.weather import Location
from weather_aggregator.shared import EnumEnvironment, EnumLogFormat, EnumLogLevel
from weather_aggregator.shared.env import load_secret_file_variables


def parse_tracked_locations(cities: str, countries: str) -> List[Location]:
    """
    Pair comma separated city and country lists positionally.

    Raises:
        MisconfiguredError: If the lists differ in length or an entry is empty
    """
    if not (cities or "").strip():
        return []

    city_items = cities.split(",")
    country_items = (countries or "").split(",")
    if len(city_items) != len(country_items):
        raise MisconfiguredError(
            "Number of cities and countries must be the same",
            details={"cities": len(city_items), "countries": len(country_items)},
        )

    locations: List[Location] = []
    for city, country in zip(city_items, country_items):
        try:
            locations.append(Location(city=city.strip(), country=country.strip()))
        except InvalidArgumentError as exc:
            raise MisconfiguredError(
                f"Invalid tracked location: {exc.message}", details=exc.details
            ) from exc
    return locations


class ServiceSettings(BaseSettings):
    """HTTP service metadata and server options."""

    title: str = Field(default="Weather Aggregator", description="Service title")
    description: str = Field(
        default="Aggregates current weather from several providers into one "
        "normalized, queryable history",
        description="Service description",
    )
    version: str = Field(default="1.0.0", description="Service version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("SERVICE_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("SERVICE_BUILD_TIME", "BUILD_TIME"),
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Interface to bind the server")
    port: int = Field(
        default=8080,
        description="Port to bind the server",
        validation_alias=AliasChoices("SERVICE_PORT", "PORT"),
    )
    reload: bool = Field(default=False, description="Enable auto-reload for development")

    model_config = SettingsConfigDict(
        env_prefix="SERVICE_", case_sensitive=False, extra="ignore"
    )


class SchedulerSettings(BaseSettings):
    """Fetch cycle scheduling and tracked locations."""

    enabled: bool = Field(default=True, description="Run the background fetch loop")
    fetch_interval_seconds: float = Field(
        default=900.0, gt=0, description="Seconds between fetch cycles"
    )
    cycle_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Deadline for one location's pass"
    )
    location_city: str = Field(
        default="",
        description="Comma separated cities to track",
        validation_alias=AliasChoices("WEATHER_LOCATION_CITY", "SCHEDULER_LOCATION_CITY"),
    )
    location_country: str = Field(
        default="",
        description="Comma separated countries, one per city",
        validation_alias=AliasChoices(
            "WEATHER_LOCATION_COUNTRY", "SCHEDULER_LOCATION_COUNTRY"
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_", case_sensitive=False, extra="ignore"
    )

    def tracked_locations(self) -> List[Location]:
        return parse_tracked_locations(self.location_city, self.location_country)


class StoreSettings(BaseSettings):
    """History retention."""

    max_history: int = Field(
        default=96, ge=0, description="Records kept per location (0 = unbounded)"
    )
    max_age_seconds: float = Field(
        default=86400.0, ge=0, description="Maximum record age (0 = unbounded)"
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_", case_sensitive=False, extra="ignore"
    )


class ProviderSettings(BaseSettings):
    """Weather provider credentials, endpoints and timeouts."""

    openweather_api_key: Optional[str] = Field(
        default=None,
        description="OpenWeatherMap API key",
        validation_alias=AliasChoices(
            "PROVIDER_OPENWEATHER_API_KEY", "OPENWEATHER_API_KEY"
        ),
    )
    openweather_base_url: str = Field(default="https://api.openweathermap.org")
    weatherapi_api_key: Optional[str] = Field(
        default=None,
        description="WeatherAPI.com API key",
        validation_alias=AliasChoices("PROVIDER_WEATHERAPI_API_KEY", "WEATHERAPI_API_KEY"),
    )
    weatherapi_base_url: str = Field(default="https://api.weatherapi.com")
    openmeteo_enabled: bool = Field(default=True, description="Use Open-Meteo")
    openmeteo_base_url: str = Field(default="https://api.open-meteo.com")
    openmeteo_geocoding_url: str = Field(
        default="https://geocoding-api.open-meteo.com"
    )
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout of a single HTTP request"
    )
    fetch_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Deadline for one source's current fetch"
    )
    forecast_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Deadline for one source's forecast fetch"
    )
    max_forecast_days: int = Field(
        default=7, ge=1, description="Largest accepted forecast request"
    )

    model_config = SettingsConfigDict(
        env_prefix="PROVIDER_", case_sensitive=False, extra="ignore"
    )


class ResilienceSettings(BaseSettings):
    """Retry and circuit breaker thresholds shared by every source."""

    max_retries: int = Field(default=3, description="Retries after the first attempt")
    initial_delay_seconds: float = Field(default=0.5, description="First backoff delay")
    max_delay_seconds: float = Field(default=5.0, description="Backoff cap (0 = none)")
    breaker_failure_threshold: int = Field(
        default=5, description="Consecutive failures that open a breaker"
    )
    breaker_window_seconds: float = Field(
        default=60.0, description="Closed-state failure counting window"
    )
    breaker_cooldown_seconds: float = Field(
        default=120.0, description="Time a breaker stays open"
    )
    breaker_half_open_max_calls: int = Field(
        default=5, description="Trial calls admitted while half-open"
    )

    model_config = SettingsConfigDict(
        env_prefix="RESILIENCE_", case_sensitive=False, extra="ignore"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    format: EnumLogFormat = Field(
        default=EnumLogFormat.AUTO,
        description="Renderer: json, console, or auto (json in production)",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    resilience: ResilienceSettings = Field(default_factory=ResilienceSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Secret files (``*_FILE``) are resolved first so API keys can be mounted
    as Docker secrets. Mocked in tests.
    """
    load_secret_file_variables()
    return AppSettings()


settings = get_settings()

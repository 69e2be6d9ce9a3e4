"""
Use Cases Package - Application Layer

Use cases orchestrate the flow of data between the presentation layer,
the domain services and the history store.
"""

from .health_use_cases import GetApplicationInfoUseCase, GetHealthStatusUseCase
from .weather_use_cases import (
    FetchAndStoreUseCase,
    GetForecastUseCase,
    GetLatestWeatherUseCase,
    GetWeatherHistoryUseCase,
)

__all__ = [
    "FetchAndStoreUseCase",
    "GetApplicationInfoUseCase",
    "GetForecastUseCase",
    "GetHealthStatusUseCase",
    "GetLatestWeatherUseCase",
    "GetWeatherHistoryUseCase",
]

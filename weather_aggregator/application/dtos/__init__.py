"""
DTOs Package - Application Layer

Data Transfer Objects exchanged between the application layer and the
presentation layer.
"""

from .health_dto import ApplicationInfoDTO, DependencyStatusDTO, SystemHealthDTO
from .weather_dto import (
    AggregatedRecordDTO,
    ContributionDTO,
    CycleReportDTO,
    ForecastDTO,
    WeatherHistoryDTO,
)

__all__ = [
    "AggregatedRecordDTO",
    "ApplicationInfoDTO",
    "ContributionDTO",
    "CycleReportDTO",
    "DependencyStatusDTO",
    "ForecastDTO",
    "SystemHealthDTO",
    "WeatherHistoryDTO",
]

"""
Weather DTOs - Application Layer

Serializable views of aggregated records, history windows, forecasts and
cycle reports returned by the weather use cases.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from weather_aggregator.domain.entities.weather import (
    AggregatedRecord,
    Condition,
    CycleOutcome,
    CycleReport,
    SourceContribution,
)

_RECORD_EXAMPLE = {
    "location": "lisbon:pt",
    "timestamp": "2024-09-09T12:00:00Z",
    "temperature_c": 21.4,
    "humidity_pct": 63.0,
    "wind_speed_ms": 4.1,
    "pressure_hpa": 1016.0,
    "precipitation_mm": 0.0,
    "condition": "clear",
    "sources": [
        {"source": "openweathermap", "timestamp": "2024-09-09T11:58:00Z"},
        {"source": "openmeteo", "timestamp": "2024-09-09T12:00:00Z"},
    ],
}


class ContributionDTO(BaseModel):
    """Source that contributed to an aggregated record."""

    source: str = Field(description="Source identifier")
    timestamp: Optional[datetime] = Field(
        default=None, description="Observation time reported by the source"
    )

    @classmethod
    def from_domain(cls, contribution: SourceContribution) -> "ContributionDTO":
        return cls(source=contribution.source, timestamp=contribution.timestamp)


class AggregatedRecordDTO(BaseModel):
    """Merged observation for one location."""

    location: str = Field(description="Canonical location key")
    timestamp: datetime = Field(description="Effective observation time (UTC)")
    temperature_c: float = Field(description="Mean temperature in Celsius")
    humidity_pct: float = Field(description="Mean relative humidity in percent")
    wind_speed_ms: float = Field(description="Mean wind speed in m/s")
    pressure_hpa: float = Field(description="Mean pressure in hPa")
    precipitation_mm: float = Field(description="Mean precipitation in mm")
    condition: Condition = Field(description="Majority weather condition")
    sources: List[ContributionDTO] = Field(
        default_factory=list, description="Contributing sources in completion order"
    )

    @classmethod
    def from_domain(cls, record: AggregatedRecord) -> "AggregatedRecordDTO":
        return cls(
            location=record.location_key,
            timestamp=record.timestamp,
            temperature_c=record.temperature_c,
            humidity_pct=record.humidity_pct,
            wind_speed_ms=record.wind_speed_ms,
            pressure_hpa=record.pressure_hpa,
            precipitation_mm=record.precipitation_mm,
            condition=record.condition,
            sources=[ContributionDTO.from_domain(c) for c in record.contributions],
        )

    model_config = {"json_schema_extra": {"example": _RECORD_EXAMPLE}}


class WeatherHistoryDTO(BaseModel):
    """Stored records for a location within a time window."""

    location: str = Field(description="Canonical location key")
    start: datetime = Field(description="Inclusive window start")
    end: datetime = Field(description="Inclusive window end")
    count: int = Field(description="Number of records returned")
    records: List[AggregatedRecordDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls,
        location_key: str,
        start: datetime,
        end: datetime,
        records: Sequence[AggregatedRecord],
    ) -> "WeatherHistoryDTO":
        return cls(
            location=location_key,
            start=start,
            end=end,
            count=len(records),
            records=[AggregatedRecordDTO.from_domain(r) for r in records],
        )


class ForecastDTO(BaseModel):
    """Daily aggregated forecast, one record per UTC day."""

    location: str = Field(description="Canonical location key")
    days: int = Field(description="Number of days returned")
    records: List[AggregatedRecordDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls, location_key: str, records: Sequence[AggregatedRecord]
    ) -> "ForecastDTO":
        return cls(
            location=location_key,
            days=len(records),
            records=[AggregatedRecordDTO.from_domain(r) for r in records],
        )


class CycleReportDTO(BaseModel):
    """Outcome of one fetch-and-store pass."""

    location: str = Field(description="Canonical location key")
    outcome: CycleOutcome = Field(description="success or no_data")
    sources_succeeded: int = Field(description="Sources that returned a reading")
    record: Optional[AggregatedRecordDTO] = Field(
        default=None, description="Stored record, absent when no source succeeded"
    )

    @classmethod
    def from_domain(cls, report: CycleReport) -> "CycleReportDTO":
        return cls(
            location=report.location_key,
            outcome=report.outcome,
            sources_succeeded=report.sources_succeeded,
            record=(
                AggregatedRecordDTO.from_domain(report.record)
                if report.record
                else None
            ),
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "location": "lisbon:pt",
                "outcome": "success",
                "sources_succeeded": 2,
                "record": _RECORD_EXAMPLE,
            }
        }
    }

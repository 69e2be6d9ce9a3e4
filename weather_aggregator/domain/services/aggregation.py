"""Domain service merging source readings into one aggregated record."""

from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from weather_aggregator.domain.entities.weather import (
    AggregatedRecord,
    Condition,
    Location,
    SourceContribution,
    SourceReading,
)


def _mean(values: Sequence[Optional[float]]) -> float:
    # Unknown values count as 0.0 but still count towards the denominator.
    return sum(value or 0.0 for value in values) / len(values)


def majority_condition(readings: Sequence[SourceReading]) -> Condition:
    """
    Most frequent condition; on a tie the first one seen in input order wins.
    """
    counts: Dict[Condition, int] = {}
    for reading in readings:
        counts[reading.condition] = counts.get(reading.condition, 0) + 1

    best = Condition.UNKNOWN
    best_count = 0
    for condition, count in counts.items():
        if count > best_count:
            best, best_count = condition, count
    return best


def aggregate_readings(
    location: Location,
    readings: Sequence[SourceReading],
    now: Optional[datetime] = None,
) -> AggregatedRecord:
    """Merge readings for one location into a single record.

    Numeric fields are averaged independently, the condition is chosen by
    majority vote and the effective timestamp is the newest reading's.
    ``now`` is used when no reading carries a timestamp and for the
    placeholder returned on empty input.
    """

    def _now() -> datetime:
        return now or datetime.now(timezone.utc)

    if not readings:
        return AggregatedRecord(
            location_key=location.key(),
            timestamp=_now(),
            condition=Condition.UNKNOWN,
        )

    timestamps = [r.timestamp for r in readings if r.timestamp is not None]

    return AggregatedRecord(
        location_key=location.key(),
        timestamp=max(timestamps) if timestamps else _now(),
        temperature_c=_mean([r.temperature_c for r in readings]),
        humidity_pct=_mean([r.humidity_pct for r in readings]),
        wind_speed_ms=_mean([r.wind_speed_ms for r in readings]),
        pressure_hpa=_mean([r.pressure_hpa for r in readings]),
        precipitation_mm=_mean([r.precipitation_mm for r in readings]),
        condition=majority_condition(readings),
        contributions=tuple(
            SourceContribution(source=r.source, timestamp=r.timestamp)
            for r in readings
        ),
    )

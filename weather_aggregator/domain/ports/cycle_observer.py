"""Observer port notified by the fetch pipeline."""

from __future__ import annotations

from typing import Protocol

from weather_aggregator.domain.entities.errors import FailureKind
from weather_aggregator.domain.entities.weather import CycleOutcome


class ICycleObserver(Protocol):
    """Receives per-source failures and per-location cycle outcomes."""

    def source_failed(self, source: str, location_key: str, kind: FailureKind) -> None:
        ...

    def cycle_completed(self, location_key: str, outcome: CycleOutcome) -> None:
        ...

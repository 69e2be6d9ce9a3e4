"""Cycle observer that logs outcomes and keeps counters for /info."""

from __future__ import annotations

import threading
from collections import Counter
from typing import Any, Dict

import structlog

from weather_aggregator.domain.entities.errors import FailureKind
from weather_aggregator.domain.entities.weather import CycleOutcome

logger = structlog.get_logger(__name__)


class LoggingCycleObserver:
    """Counts source failures by source and kind, and cycle outcomes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._failures: Counter = Counter()
        self._outcomes: Counter = Counter()

    def source_failed(self, source: str, location_key: str, kind: FailureKind) -> None:
        with self._lock:
            self._failures[(source, kind.value)] += 1
        logger.debug(
            "observer.source_failed",
            source=source,
            location=location_key,
            kind=kind.value,
        )

    def cycle_completed(self, location_key: str, outcome: CycleOutcome) -> None:
        with self._lock:
            self._outcomes[outcome.value] += 1
        log = logger.info if outcome is CycleOutcome.SUCCESS else logger.warning
        log("observer.cycle_completed", location=location_key, outcome=outcome.value)

    def snapshot(self) -> Dict[str, Any]:
        """Counters as plain dicts, e.g. ``{"failures": {"openmeteo": {"cancelled": 2}}}``."""
        with self._lock:
            failures: Dict[str, Dict[str, int]] = {}
            for (source, kind), count in self._failures.items():
                failures.setdefault(source, {})[kind] = count
            return {"failures": failures, "outcomes": dict(self._outcomes)}

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from weather_aggregator.domain.entities.weather import (  # noqa: E402
    Condition,
    Location,
    SourceReading,
)
from weather_aggregator.domain.gateways.weather_source import (  # noqa: E402
    IForecastSource,
    IWeatherSource,
)

BASE_TIME = datetime(2024, 9, 9, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; ``sleep`` advances time instead of waiting."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self._now = start
        self._monotonic = 1000.0
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._monotonic

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)
        self._monotonic += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


class ScriptedSource(IWeatherSource):
    """
    Source replaying a script of outcomes.

    Each script item is a ``SourceReading`` to return or an exception to
    raise; the last item repeats once the script is exhausted. ``delay``
    makes every call wait on the real event loop first.
    """

    def __init__(self, name: str, script: Sequence[Any], delay: float = 0.0) -> None:
        self._name = name
        self._script = list(script)
        self.delay = delay
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def _next(self) -> Any:
        index = min(self.calls, len(self._script) - 1)
        self.calls += 1
        return self._script[index]

    async def fetch(
        self, location: Location, timeout: Optional[float] = None
    ) -> SourceReading:
        outcome = self._next()
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class ScriptedForecastSource(ScriptedSource, IForecastSource):
    """Scripted source whose forecast returns a fixed list of readings."""

    def __init__(
        self,
        name: str,
        periods: Any,
        script: Sequence[Any] = (),
        delay: float = 0.0,
    ) -> None:
        super().__init__(name, list(script) or [RuntimeError("no current")], delay)
        self._periods = periods
        self.period_calls: List[int] = []

    async def fetch_periods(
        self, location: Location, count: int, timeout: Optional[float] = None
    ) -> List[SourceReading]:
        self.period_calls.append(count)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self._periods, BaseException):
            raise self._periods
        return list(self._periods)


class RecordingObserver:
    def __init__(self) -> None:
        self.failures: List[tuple] = []
        self.cycles: List[tuple] = []

    def source_failed(self, source, location_key, kind) -> None:
        self.failures.append((source, location_key, kind))

    def cycle_completed(self, location_key, outcome) -> None:
        self.cycles.append((location_key, outcome))


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture()
def lisbon() -> Location:
    return Location(city="Lisbon", country="PT")


@pytest.fixture()
def make_reading() -> Callable[..., SourceReading]:
    def _make(
        source: str = "stub",
        temperature_c: Optional[float] = 20.0,
        condition: Condition = Condition.CLEAR,
        timestamp: Optional[datetime] = BASE_TIME,
        **fields: Any,
    ) -> SourceReading:
        return SourceReading(
            source=source,
            timestamp=timestamp,
            temperature_c=temperature_c,
            condition=condition,
            **fields,
        )

    return _make


@pytest.fixture()
def scripted_source() -> type:
    return ScriptedSource


@pytest.fixture()
def scripted_forecast_source() -> type:
    return ScriptedForecastSource


_SERVICE_ENV = (
    "OPENWEATHER_API_KEY",
    "PROVIDER_OPENWEATHER_API_KEY",
    "WEATHERAPI_API_KEY",
    "PROVIDER_WEATHERAPI_API_KEY",
    "WEATHER_LOCATION_CITY",
    "WEATHER_LOCATION_COUNTRY",
    "SCHEDULER_LOCATION_CITY",
    "SCHEDULER_LOCATION_COUNTRY",
    "SCHEDULER_ENABLED",
    "LOG_FORMAT",
)


@pytest.fixture()
def clean_env(monkeypatch) -> pytest.MonkeyPatch:
    """Remove provider keys and tracked locations inherited from the shell."""
    for key in _SERVICE_ENV:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch

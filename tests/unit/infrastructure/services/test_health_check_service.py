from __future__ import annotations

from datetime import timedelta
from typing import Optional

import pytest

from weather_aggregator.domain.entities.health import ServiceStatus
from weather_aggregator.domain.entities.resilience import BreakerState
from weather_aggregator.domain.entities.weather import Location
from weather_aggregator.domain.gateways.weather_source import IWeatherSource
from weather_aggregator.infrastructure.services import HealthCheckService


class _BreakerSource(IWeatherSource):
    def __init__(self, name: str, state: Optional[BreakerState]) -> None:
        self._name = name
        self._state = state

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self, location, timeout=None):
        raise NotImplementedError

    def breaker_state(self) -> Optional[BreakerState]:
        return self._state


class _Coordinator:
    def __init__(self, running: bool = True, finished_at=None, enabled: bool = True,
                 locations=None) -> None:
        self.enabled = enabled
        self.is_running = running
        self.last_cycle_finished_at = finished_at
        self.interval_seconds = 900.0
        self.cycle_timeout_seconds = 30.0
        self.locations = (
            [Location(city="Lisbon", country="PT")] if locations is None else locations
        )

    def status(self):
        return {"running": self.is_running}


def _statuses(health):
    return {d.name: d.status for d in health.dependencies}


@pytest.mark.asyncio
async def test_all_closed_and_fresh_scheduler_is_up(fake_clock) -> None:
    service = HealthCheckService(
        [_BreakerSource("a", BreakerState.CLOSED), _BreakerSource("b", BreakerState.CLOSED)],
        _Coordinator(finished_at=fake_clock.now()),
        fake_clock,
    )

    health = await service.evaluate()

    assert health.status is ServiceStatus.UP
    assert _statuses(health) == {
        "a": ServiceStatus.UP,
        "b": ServiceStatus.UP,
        "scheduler": ServiceStatus.UP,
    }


@pytest.mark.asyncio
async def test_breaker_states_map_to_statuses(fake_clock) -> None:
    service = HealthCheckService(
        [
            _BreakerSource("closed", BreakerState.CLOSED),
            _BreakerSource("half", BreakerState.HALF_OPEN),
            _BreakerSource("open", BreakerState.OPEN),
            _BreakerSource("plain", None),
        ],
        _Coordinator(finished_at=fake_clock.now()),
        fake_clock,
    )

    health = await service.evaluate()

    assert health.status is ServiceStatus.DEGRADED
    statuses = _statuses(health)
    assert statuses["half"] is ServiceStatus.DEGRADED
    assert statuses["open"] is ServiceStatus.DOWN
    assert statuses["plain"] is ServiceStatus.UNKNOWN


@pytest.mark.asyncio
async def test_every_source_open_is_down(fake_clock) -> None:
    service = HealthCheckService(
        [_BreakerSource("a", BreakerState.OPEN), _BreakerSource("b", BreakerState.OPEN)],
        _Coordinator(finished_at=fake_clock.now()),
        fake_clock,
    )

    assert (await service.evaluate()).status is ServiceStatus.DOWN


@pytest.mark.asyncio
async def test_no_sources_is_down(fake_clock) -> None:
    service = HealthCheckService([], _Coordinator(), fake_clock)

    health = await service.evaluate()

    assert health.status is ServiceStatus.DOWN
    assert _statuses(health)["sources"] is ServiceStatus.DOWN


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "coordinator_kwargs, age, expected",
    [
        ({"enabled": False}, None, ServiceStatus.UNKNOWN),
        ({"locations": []}, None, ServiceStatus.UNKNOWN),
        ({"running": False}, None, ServiceStatus.DOWN),
        ({}, None, ServiceStatus.UP),
        ({}, timedelta(minutes=10), ServiceStatus.UP),
        ({}, timedelta(minutes=31), ServiceStatus.DEGRADED),
    ],
)
async def test_scheduler_liveness(fake_clock, coordinator_kwargs, age, expected) -> None:
    finished_at = fake_clock.now() - age if age is not None else None
    coordinator = _Coordinator(finished_at=finished_at, **coordinator_kwargs)
    service = HealthCheckService(
        [_BreakerSource("a", BreakerState.CLOSED)], coordinator, fake_clock
    )

    health = await service.evaluate()

    assert _statuses(health)["scheduler"] is expected


@pytest.mark.asyncio
async def test_unknown_scheduler_makes_overall_unknown(fake_clock) -> None:
    service = HealthCheckService(
        [_BreakerSource("a", BreakerState.CLOSED)], None, fake_clock
    )

    assert (await service.evaluate()).status is ServiceStatus.UNKNOWN

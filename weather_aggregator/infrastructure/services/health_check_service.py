"""Infrastructure implementation for system health checks."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, List, Optional, Sequence

from weather_aggregator.domain.entities.health import (
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)
from weather_aggregator.domain.entities.resilience import BreakerState
from weather_aggregator.domain.gateways.weather_source import IWeatherSource
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.domain.ports.health_check import IHealthCheckService
from weather_aggregator.infrastructure.services.cycle_coordinator import (
    CycleCoordinator,
)

_BREAKER_STATUS = {
    BreakerState.CLOSED: ServiceStatus.UP,
    BreakerState.HALF_OPEN: ServiceStatus.DEGRADED,
    BreakerState.OPEN: ServiceStatus.DOWN,
}


class HealthCheckService(IHealthCheckService):
    """Derive health from source breakers and scheduler liveness."""

    def __init__(
        self,
        sources: Sequence[IWeatherSource],
        coordinator: Optional[CycleCoordinator],
        clock: IClock,
    ) -> None:
        self._sources = list(sources)
        self._coordinator = coordinator
        self._clock = clock

    async def evaluate(self) -> SystemHealth:
        source_statuses = [self._check_source(source) for source in self._sources]
        if not source_statuses:
            source_statuses.append(
                DependencyStatus(
                    name="sources",
                    status=ServiceStatus.DOWN,
                    message="No weather sources configured.",
                )
            )

        dependency_statuses = [*source_statuses, self._check_scheduler()]
        overall_status = self._aggregate_status(source_statuses, dependency_statuses)
        return SystemHealth(status=overall_status, dependencies=dependency_statuses)

    def _aggregate_status(
        self,
        source_statuses: Iterable[DependencyStatus],
        statuses: Iterable[DependencyStatus],
    ) -> ServiceStatus:
        # Aggregation still works with one healthy source, so only a total
        # outage is DOWN.
        if all(s.status == ServiceStatus.DOWN for s in source_statuses):
            return ServiceStatus.DOWN

        has_unknown = False
        has_degraded = False
        for status in statuses:
            if status.status in (ServiceStatus.DOWN, ServiceStatus.DEGRADED):
                has_degraded = True
            if status.status == ServiceStatus.UNKNOWN:
                has_unknown = True

        if has_degraded:
            return ServiceStatus.DEGRADED
        if has_unknown:
            return ServiceStatus.UNKNOWN
        return ServiceStatus.UP

    def _check_source(self, source: IWeatherSource) -> DependencyStatus:
        state = source.breaker_state()
        if state is None:
            return DependencyStatus(
                name=source.name,
                status=ServiceStatus.UNKNOWN,
                message="Source has no circuit breaker.",
            )
        return DependencyStatus(
            name=source.name,
            status=_BREAKER_STATUS[state],
            message=f"Circuit breaker {state.value}",
            checked_at=self._clock.now(),
            details={"breaker_state": state.value},
        )

    def _check_scheduler(self) -> DependencyStatus:
        coordinator = self._coordinator
        if coordinator is None or not coordinator.enabled:
            return DependencyStatus(
                name="scheduler",
                status=ServiceStatus.UNKNOWN,
                message="Scheduler disabled.",
            )

        details = coordinator.status()
        if not coordinator.locations:
            return DependencyStatus(
                name="scheduler",
                status=ServiceStatus.UNKNOWN,
                message="No tracked locations configured.",
                details=details,
            )
        if not coordinator.is_running:
            return DependencyStatus(
                name="scheduler",
                status=ServiceStatus.DOWN,
                message="Scheduler is not running.",
                details=details,
            )

        finished = coordinator.last_cycle_finished_at
        if finished is None:
            return DependencyStatus(
                name="scheduler",
                status=ServiceStatus.UP,
                message="First cycle in progress.",
                details=details,
            )

        # A healthy loop finishes a cycle at least once per interval plus timeout.
        stale_after = timedelta(
            seconds=2 * coordinator.interval_seconds
            + coordinator.cycle_timeout_seconds
        )
        if self._clock.now() - finished > stale_after:
            return DependencyStatus(
                name="scheduler",
                status=ServiceStatus.DEGRADED,
                message="Last cycle finished too long ago.",
                details=details,
            )
        return DependencyStatus(
            name="scheduler",
            status=ServiceStatus.UP,
            message="Scheduler running.",
            details=details,
        )

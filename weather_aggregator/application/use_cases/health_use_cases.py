"""Use cases for health and application info endpoints."""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from weather_aggregator.application.dtos.health_dto import (
    ApplicationInfoDTO,
    SystemHealthDTO,
)
from weather_aggregator.application.models import SystemInfo
from weather_aggregator.domain.entities.health import ApplicationInfo
from weather_aggregator.domain.ports.health_check import IHealthCheckService
from weather_aggregator.domain.repositories.history_store import IHistoryStore


class GetHealthStatusUseCase:
    """Use case responsible for returning health status."""

    def __init__(self, health_check_service: IHealthCheckService) -> None:
        self._health_check_service = health_check_service

    async def execute(self) -> SystemHealthDTO:
        system_health = await self._health_check_service.evaluate()
        return SystemHealthDTO.from_domain(system_health)


class GetApplicationInfoUseCase:
    """Use case responsible for returning application info."""

    def __init__(
        self,
        health_check_service: IHealthCheckService,
        system_info: SystemInfo,
        history_store: IHistoryStore,
        counters: Optional[Callable[[], Dict[str, Any]]] = None,
    ) -> None:
        self._health_check_service = health_check_service
        self._info = system_info
        self._history_store = history_store
        self._counters = counters

    async def execute(self, started_at: Optional[datetime]) -> ApplicationInfoDTO:
        system_health = await self._health_check_service.evaluate()

        now = datetime.now(timezone.utc)
        started = started_at or now
        uptime_seconds = max(0.0, (now - started).total_seconds())

        extras: Dict[str, Any] = {
            "environment": self._info.environment,
            "scheduler": {"fetch_interval_seconds": self._info.fetch_interval_seconds},
            "history": {
                "max_entries": self._info.max_history,
                "max_age_seconds": self._info.max_age_seconds,
                "sizes": {
                    key: self._history_store.size(key)
                    for key in self._history_store.locations()
                },
            },
        }
        if self._counters is not None:
            extras["counters"] = self._counters()

        info = ApplicationInfo(
            name=self._info.title,
            description=self._info.description,
            version=self._info.version,
            environment=self._info.environment,
            git_commit=self._info.git_commit,
            build_time=self._info.build_time,
            started_at=started,
            uptime_seconds=uptime_seconds,
            status=system_health.status,
            dependencies=system_health.dependencies,
            extras=extras,
        )

        return ApplicationInfoDTO.from_domain(info)

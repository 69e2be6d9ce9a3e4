from __future__ import annotations

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from weather_aggregator.application.models import SystemInfo
from weather_aggregator.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from weather_aggregator.domain.entities.health import (
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)
from weather_aggregator.main.app import create_app
from weather_aggregator.main.container import get_container


class _HealthCheckService:
    def __init__(self, status: ServiceStatus):
        self._health = SystemHealth(
            status=status,
            dependencies=[DependencyStatus(name="openmeteo", status=status)],
        )

    async def evaluate(self) -> SystemHealth:
        return self._health


@pytest.fixture()
def client(clean_env):
    app = create_app()
    container = get_container()

    health_provider = _HealthCheckService(ServiceStatus.UP)
    health_use_case = GetHealthStatusUseCase(health_provider)
    system_info = SystemInfo(
        title="Weather Aggregator",
        description="desc",
        version="1.0",
        environment="dev",
        git_commit="abc",
        build_time="now",
        fetch_interval_seconds=900,
        max_history=96,
        max_age_seconds=86400,
    )

    container.get_health_status_use_case.override(providers.Object(health_use_case))
    container.get_application_info_use_case.override(
        providers.Factory(
            GetApplicationInfoUseCase,
            health_check_service=health_provider,
            system_info=system_info,
            history_store=container.history_store,
            counters=container.cycle_observer.provided.snapshot,
        )
    )

    with TestClient(app) as test_client:
        yield test_client


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "up"


def test_info_endpoint(client):
    response = client.get("/info")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Weather Aggregator"
    assert body["extras"]["history"]["sizes"] == {}
    assert body["extras"]["counters"] == {"failures": {}, "outcomes": {}}
    assert body["uptime_seconds"] >= 0

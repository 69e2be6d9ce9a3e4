"""Infrastructure services."""

from .clock import SystemClock
from .cycle_coordinator import CycleCoordinator
from .cycle_observer import LoggingCycleObserver
from .health_check_service import HealthCheckService

__all__ = [
    "CycleCoordinator",
    "HealthCheckService",
    "LoggingCycleObserver",
    "SystemClock",
]

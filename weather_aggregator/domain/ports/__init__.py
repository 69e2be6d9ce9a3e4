"""Domain ports package."""

from .clock import IClock
from .cycle_observer import ICycleObserver
from .health_check import IHealthCheckService

__all__ = ["IClock", "ICycleObserver", "IHealthCheckService"]

"""
Domain Entities Package

This package contains the core domain entities and value objects.
"""

from .errors import (
    CircuitOpenError,
    DomainError,
    FailureKind,
    FetchCancelledError,
    InvalidArgumentError,
    MisconfiguredError,
    RemoteRejectedError,
    RemoteTransientError,
    SourceError,
    WeatherDataNotFoundError,
)
from .health import ApplicationInfo, DependencyStatus, ServiceStatus, SystemHealth
from .resilience import BreakerSettings, BreakerState, RetentionPolicy, RetryPolicy
from .weather import (
    AggregatedRecord,
    Condition,
    CycleOutcome,
    CycleReport,
    Location,
    SourceContribution,
    SourceReading,
)

__all__ = [
    "AggregatedRecord",
    "Condition",
    "CycleOutcome",
    "CycleReport",
    "Location",
    "SourceContribution",
    "SourceReading",
    "BreakerSettings",
    "BreakerState",
    "RetentionPolicy",
    "RetryPolicy",
    "SystemHealth",
    "DependencyStatus",
    "ServiceStatus",
    "ApplicationInfo",
    "DomainError",
    "FailureKind",
    "SourceError",
    "RemoteTransientError",
    "RemoteRejectedError",
    "CircuitOpenError",
    "FetchCancelledError",
    "WeatherDataNotFoundError",
    "InvalidArgumentError",
    "MisconfiguredError",
]

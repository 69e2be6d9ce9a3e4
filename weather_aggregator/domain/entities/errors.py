"""
Domain Errors

This module defines the error taxonomy shared by the fetch pipeline,
the history store and the use cases.
"""

from enum import Enum
from typing import Any, Dict, Optional


class FailureKind(str, Enum):
    """Classification of a single source failure."""

    REMOTE_TRANSIENT = "remote_transient"
    REMOTE_REJECTED = "remote_rejected"
    CIRCUIT_OPEN = "circuit_open"
    CANCELLED = "cancelled"


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class SourceError(DomainError):
    """Raised when one weather source fails to produce a reading."""

    kind: FailureKind = FailureKind.REMOTE_REJECTED

    def __init__(
        self,
        source: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.source = source
        super().__init__(f"{source}: {message}", details)


class RemoteTransientError(SourceError):
    """Network error, rate limiting or a 5xx response. Retryable."""

    kind = FailureKind.REMOTE_TRANSIENT


class RemoteRejectedError(SourceError):
    """Any other remote failure. Never retried."""

    kind = FailureKind.REMOTE_REJECTED


class CircuitOpenError(SourceError):
    """Raised without touching the network while a source's breaker is open."""

    kind = FailureKind.CIRCUIT_OPEN


class FetchCancelledError(SourceError):
    """Raised when the deadline for a fetch expires."""

    kind = FailureKind.CANCELLED


class WeatherDataNotFoundError(DomainError):
    """Raised when no stored or fetched data matches a query."""

    def __init__(self, location_key: str, details: Optional[Dict[str, Any]] = None):
        self.location_key = location_key
        super().__init__(f"No weather data for location {location_key}", details)


class InvalidArgumentError(DomainError):
    """Raised when a request carries an invalid argument."""


class MisconfiguredError(DomainError):
    """Raised when the service is configured in a way that cannot work."""

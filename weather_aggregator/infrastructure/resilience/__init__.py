"""Infrastructure resilience - retries and circuit breakers."""

from .circuit_breaker import BreakerSnapshot, CircuitBreaker
from .executor import ResilienceExecutor

__all__ = ["BreakerSnapshot", "CircuitBreaker", "ResilienceExecutor"]

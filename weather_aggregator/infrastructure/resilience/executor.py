"""
Resilience Executor - Infrastructure Layer

Runs an outbound call under bounded retry with exponential backoff, a
per-source circuit breaker and an optional deadline, and turns whatever
happens into either a result or one ``SourceError``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from weather_aggregator.domain.entities.errors import (
    FetchCancelledError,
    RemoteRejectedError,
    RemoteTransientError,
    SourceError,
)
from weather_aggregator.domain.entities.resilience import RetryPolicy
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.infrastructure.resilience.circuit_breaker import CircuitBreaker
from weather_aggregator.shared import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

CallFactory = Callable[[], Awaitable[T]]


class ResilienceExecutor:
    """Retry + circuit breaker wrapper for one source."""

    def __init__(
        self,
        source: str,
        policy: RetryPolicy,
        breaker: CircuitBreaker,
        clock: IClock,
    ) -> None:
        self.source = source
        self.policy = policy
        self.breaker = breaker
        self._clock = clock

    async def execute(self, call_factory: CallFactory[T], timeout: Optional[float] = None) -> T:
        """
        Run ``call_factory()`` until it succeeds, fails terminally or the
        deadline passes.

        Args:
            call_factory: Builds and performs one attempt; called once per attempt
            timeout: Seconds allowed for all attempts and backoff delays

        Returns:
            The value returned by the first successful attempt

        Raises:
            CircuitOpenError: If the breaker rejected the call
            RemoteRejectedError: On a non-retryable failure
            RemoteTransientError: When retries are exhausted
            FetchCancelledError: When the deadline expires
        """
        if timeout is None:
            return await self._run(call_factory)
        try:
            return await asyncio.wait_for(self._run(call_factory), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.info("resilience.deadline_exceeded", source=self.source, timeout=timeout)
            raise FetchCancelledError(
                self.source, f"deadline of {timeout}s exceeded"
            ) from exc

    async def _run(self, call_factory: CallFactory[T]) -> T:
        attempt = 0
        while True:
            generation = self.breaker.allow()
            try:
                result = await call_factory()
            except asyncio.CancelledError:
                self.breaker.record_abandoned(generation)
                raise
            except FetchCancelledError:
                self.breaker.record_abandoned(generation)
                raise
            except Exception as exc:
                failure = self.classify_exception(exc)
            else:
                failure = self.classify_result(result)
                if failure is None:
                    self.breaker.record_success(generation)
                    return result

            self.breaker.record_failure(generation)

            if not isinstance(failure, RemoteTransientError):
                raise failure
            if attempt >= self.policy.max_retries:
                logger.warning(
                    "resilience.retries_exhausted",
                    source=self.source,
                    attempts=attempt + 1,
                    error=str(failure),
                )
                raise failure

            delay = self.policy.delay_for(attempt)
            logger.debug(
                "resilience.retry_scheduled",
                source=self.source,
                attempt=attempt + 1,
                delay=delay,
                error=str(failure),
            )
            await self._clock.sleep(delay)
            attempt += 1

    def classify_result(self, result: Any) -> Optional[SourceError]:
        """Return the failure an HTTP response represents, or None on success."""
        if isinstance(result, httpx.Response):
            return self._classify_status(result.status_code, result.text)
        return None

    def classify_exception(self, exc: Exception) -> SourceError:
        if isinstance(exc, SourceError):
            return exc
        if isinstance(exc, httpx.HTTPStatusError):
            failure = self._classify_status(
                exc.response.status_code, exc.response.text
            ) or RemoteRejectedError(self.source, str(exc))
        elif isinstance(exc, httpx.TransportError):
            failure = RemoteTransientError(
                self.source, f"network error: {exc.__class__.__name__}: {exc}"
            )
        else:
            failure = RemoteRejectedError(
                self.source, f"unexpected error: {exc.__class__.__name__}: {exc}"
            )
        failure.__cause__ = exc
        return failure

    def _classify_status(self, status_code: int, body: str) -> Optional[SourceError]:
        details = {"status_code": status_code, "body": body[:200]}
        if status_code == 429:
            return RemoteTransientError(self.source, "rate limited", details)
        if status_code >= 500:
            return RemoteTransientError(
                self.source, f"server error {status_code}", details
            )
        if not 200 <= status_code < 300:
            return RemoteRejectedError(
                self.source, f"unexpected status {status_code}", details
            )
        return None

from __future__ import annotations

import asyncio
import time

import httpx
import pytest

from weather_aggregator.domain.entities.errors import (
    CircuitOpenError,
    FetchCancelledError,
    RemoteRejectedError,
    RemoteTransientError,
)
from weather_aggregator.domain.entities.resilience import (
    BreakerSettings,
    BreakerState,
    RetryPolicy,
)
from weather_aggregator.infrastructure.resilience.circuit_breaker import CircuitBreaker
from weather_aggregator.infrastructure.resilience.executor import ResilienceExecutor
from weather_aggregator.infrastructure.services.clock import SystemClock


def _response(status_code: int) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"ok": status_code < 400},
        request=httpx.Request("GET", "http://provider"),
    )


class _Script:
    """Call factory returning (or raising) scripted outcomes in order."""

    def __init__(self, *outcomes) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        outcome = self._outcomes[min(self.calls, len(self._outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _executor(fake_clock, max_retries: int = 3, threshold: int = 10) -> ResilienceExecutor:
    breaker = CircuitBreaker(
        "provider", BreakerSettings(failure_threshold=threshold), fake_clock
    )
    policy = RetryPolicy(max_retries=max_retries, initial_delay=0.5, max_delay=5.0)
    return ResilienceExecutor("provider", policy, breaker, fake_clock)


@pytest.mark.asyncio
async def test_returns_first_success(fake_clock) -> None:
    executor = _executor(fake_clock)
    script = _Script(_response(200))

    response = await executor.execute(script)

    assert response.status_code == 200
    assert script.calls == 1
    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_retries_transient_failures_with_backoff(fake_clock) -> None:
    executor = _executor(fake_clock)
    script = _Script(
        _response(503),
        httpx.ConnectError("refused"),
        _response(429),
        _response(200),
    )

    response = await executor.execute(script)

    assert response.status_code == 200
    assert script.calls == 4
    assert fake_clock.sleeps == [0.5, 1.0, 2.0]


@pytest.mark.asyncio
async def test_exhausted_retries_raise_last_transient_failure(fake_clock) -> None:
    executor = _executor(fake_clock, max_retries=2)
    script = _Script(_response(500), _response(500), _response(502))

    with pytest.raises(RemoteTransientError) as exc_info:
        await executor.execute(script)

    assert "502" in str(exc_info.value)
    assert script.calls == 3


@pytest.mark.asyncio
async def test_rejected_status_is_not_retried(fake_clock) -> None:
    executor = _executor(fake_clock)
    script = _Script(_response(401), _response(200))

    with pytest.raises(RemoteRejectedError) as exc_info:
        await executor.execute(script)

    assert exc_info.value.details["status_code"] == 401
    assert script.calls == 1


@pytest.mark.asyncio
async def test_raised_transient_error_is_retried(fake_clock) -> None:
    executor = _executor(fake_clock, max_retries=1)
    script = _Script(RemoteTransientError("provider", "flaky"), "payload")

    assert await executor.execute(script) == "payload"
    assert script.calls == 2


@pytest.mark.asyncio
async def test_open_breaker_fails_fast_without_calling(fake_clock) -> None:
    executor = _executor(fake_clock, max_retries=0, threshold=1)
    failing = _Script(_response(500))

    with pytest.raises(RemoteTransientError):
        await executor.execute(failing)
    assert executor.breaker.state is BreakerState.OPEN

    never_called = _Script(_response(200))
    with pytest.raises(CircuitOpenError):
        await executor.execute(never_called)
    assert never_called.calls == 0


@pytest.mark.asyncio
async def test_breaker_opening_mid_retry_stops_retries(fake_clock) -> None:
    executor = _executor(fake_clock, max_retries=5, threshold=2)
    script = _Script(_response(500))

    with pytest.raises(CircuitOpenError):
        await executor.execute(script)

    assert script.calls == 2


@pytest.mark.asyncio
async def test_deadline_raises_fetch_cancelled(fake_clock) -> None:
    executor = _executor(fake_clock)

    async def _hang():
        await asyncio.sleep(5)

    with pytest.raises(FetchCancelledError):
        await executor.execute(_hang, timeout=0.05)

    assert executor.breaker.snapshot().consecutive_failures == 0


@pytest.mark.asyncio
async def test_deadline_interrupts_backoff_sleep() -> None:
    clock = SystemClock()
    breaker = CircuitBreaker("provider", BreakerSettings(failure_threshold=10), clock)
    policy = RetryPolicy(max_retries=3, initial_delay=30.0, max_delay=0)
    executor = ResilienceExecutor("provider", policy, breaker, clock)
    script = _Script(_response(503))

    started = time.monotonic()
    with pytest.raises(FetchCancelledError):
        await executor.execute(script, timeout=0.2)
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert script.calls == 1
    assert breaker.snapshot().consecutive_failures == 1


@pytest.mark.asyncio
async def test_unexpected_exception_is_rejected(fake_clock) -> None:
    executor = _executor(fake_clock)

    with pytest.raises(RemoteRejectedError) as exc_info:
        await executor.execute(_Script(KeyError("temp")))

    assert isinstance(exc_info.value.__cause__, KeyError)

"""Per-source circuit breaker."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from weather_aggregator.domain.entities.errors import CircuitOpenError
from weather_aggregator.domain.entities.resilience import BreakerSettings, BreakerState
from weather_aggregator.domain.ports.clock import IClock
from weather_aggregator.shared import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BreakerSnapshot:
    """Point-in-time view of a breaker, for health reporting."""

    name: str
    state: BreakerState
    consecutive_failures: int
    seconds_until_half_open: Optional[float] = None


class CircuitBreaker:
    """
    Fail-fast guard for one source.

    Closed: calls pass; consecutive failures are counted and the count is
    reset every ``window`` seconds. Reaching ``failure_threshold`` opens the
    breaker. Open: every call is rejected with ``CircuitOpenError`` until
    ``cooldown`` elapses. Half-open: up to ``half_open_max_calls`` trial
    calls may be in flight; the first success closes the breaker and any
    failure re-opens it.

    Each state change starts a new generation; outcomes reported for an
    older generation are ignored so slow calls from before a transition
    cannot flip the new state.
    """

    def __init__(self, name: str, settings: BreakerSettings, clock: IClock) -> None:
        self.name = name
        self._settings = settings
        self._clock = clock
        self._lock = threading.Lock()

        self._state = BreakerState.CLOSED
        self._generation = 0
        self._consecutive_failures = 0
        self._half_open_in_flight = 0
        self._opened_at = 0.0
        self._window_expires_at = clock.monotonic() + settings.window

    @property
    def state(self) -> BreakerState:
        with self._lock:
            return self._refresh(self._clock.monotonic())

    def snapshot(self) -> BreakerSnapshot:
        with self._lock:
            now = self._clock.monotonic()
            state = self._refresh(now)
            remaining = None
            if state is BreakerState.OPEN:
                remaining = max(0.0, self._opened_at + self._settings.cooldown - now)
            return BreakerSnapshot(
                name=self.name,
                state=state,
                consecutive_failures=self._consecutive_failures,
                seconds_until_half_open=remaining,
            )

    def allow(self) -> int:
        """
        Admit one call or raise.

        Returns:
            The generation token to pass back with the call's outcome

        Raises:
            CircuitOpenError: If the breaker is open or out of trial slots
        """
        with self._lock:
            now = self._clock.monotonic()
            state = self._refresh(now)
            if state is BreakerState.OPEN:
                raise CircuitOpenError(
                    self.name,
                    "circuit breaker open",
                    details={
                        "retry_in_seconds": round(
                            self._opened_at + self._settings.cooldown - now, 3
                        )
                    },
                )
            if state is BreakerState.HALF_OPEN:
                if self._half_open_in_flight >= self._settings.half_open_max_calls:
                    raise CircuitOpenError(
                        self.name, "circuit breaker half-open, trial calls exhausted"
                    )
                self._half_open_in_flight += 1
            return self._generation

    def record_success(self, generation: int) -> None:
        with self._lock:
            now = self._clock.monotonic()
            state = self._refresh(now)
            if generation != self._generation:
                return
            if state is BreakerState.HALF_OPEN:
                self._transition(BreakerState.CLOSED, now)
            else:
                self._consecutive_failures = 0

    def record_failure(self, generation: int) -> None:
        with self._lock:
            now = self._clock.monotonic()
            state = self._refresh(now)
            if generation != self._generation:
                return
            if state is BreakerState.HALF_OPEN:
                self._transition(BreakerState.OPEN, now)
                return
            self._consecutive_failures += 1
            if self._consecutive_failures >= self._settings.failure_threshold:
                self._transition(BreakerState.OPEN, now)

    def record_abandoned(self, generation: int) -> None:
        """Release a trial slot for a call that was cancelled mid-flight."""
        with self._lock:
            state = self._refresh(self._clock.monotonic())
            if generation == self._generation and state is BreakerState.HALF_OPEN:
                self._half_open_in_flight = max(0, self._half_open_in_flight - 1)

    def _refresh(self, now: float) -> BreakerState:
        # Caller holds the lock.
        if self._state is BreakerState.OPEN:
            if now >= self._opened_at + self._settings.cooldown:
                self._transition(BreakerState.HALF_OPEN, now)
        elif self._state is BreakerState.CLOSED:
            if self._settings.window > 0 and now >= self._window_expires_at:
                self._generation += 1
                self._consecutive_failures = 0
                self._window_expires_at = now + self._settings.window
        return self._state

    def _transition(self, new_state: BreakerState, now: float) -> None:
        previous = self._state
        self._state = new_state
        self._generation += 1
        self._consecutive_failures = 0
        self._half_open_in_flight = 0
        if new_state is BreakerState.OPEN:
            self._opened_at = now
        elif new_state is BreakerState.CLOSED:
            self._window_expires_at = now + self._settings.window

        log = logger.warning if new_state is BreakerState.OPEN else logger.info
        log(
            "circuit_breaker.state_changed",
            source=self.name,
            previous=previous.value,
            current=new_state.value,
        )

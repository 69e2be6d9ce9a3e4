"""
Cycle Coordinator - Infrastructure Service

Background asyncio task that runs one fetch-and-store pass for every tracked
location on a fixed period. A cycle waits for all of its locations before
the coordinator sleeps, so cycles never overlap.
"""

from __future__ import annotations

import asyncio
import contextlib
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from weather_aggregator.domain.entities.weather import Location
from weather_aggregator.domain.ports.clock import IClock

logger = structlog.get_logger(__name__)

LocationRunner = Callable[[Location], Awaitable[Any]]


class CycleCoordinator:
    """Periodic scheduler for the fetch-aggregate-store pipeline."""

    def __init__(
        self,
        locations: Sequence[Location],
        run_location: LocationRunner,
        clock: IClock,
        interval_seconds: float = 900.0,
        cycle_timeout_seconds: float = 30.0,
        enabled: bool = True,
    ) -> None:
        self._locations = list(locations)
        self._run_location = run_location
        self._clock = clock
        self._interval = interval_seconds
        self._cycle_timeout = cycle_timeout_seconds
        self.enabled = enabled

        self._task: Optional[asyncio.Task] = None
        self.last_cycle_started_at: Optional[datetime] = None
        self.last_cycle_finished_at: Optional[datetime] = None
        self.cycles_completed = 0

    @property
    def locations(self) -> List[Location]:
        return list(self._locations)

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def cycle_timeout_seconds(self) -> float:
        return self._cycle_timeout

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_cycle(self) -> int:
        """
        Run every tracked location once, concurrently.

        Returns:
            Number of locations whose pass completed without error
        """
        self.last_cycle_started_at = self._clock.now()
        logger.info("scheduler.cycle.started", locations=len(self._locations))

        results = await asyncio.gather(
            *(self._run_one(location) for location in self._locations)
        )

        self.last_cycle_finished_at = self._clock.now()
        self.cycles_completed += 1
        succeeded = sum(1 for ok in results if ok)
        logger.info(
            "scheduler.cycle.completed",
            locations=len(self._locations),
            succeeded=succeeded,
            cycles_completed=self.cycles_completed,
        )
        return succeeded

    async def _run_one(self, location: Location) -> bool:
        try:
            await asyncio.wait_for(
                self._run_location(location), timeout=self._cycle_timeout
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(
                "scheduler.location.timed_out",
                location=location.key(),
                timeout=self._cycle_timeout,
            )
        except Exception as exc:
            logger.error(
                "scheduler.location.failed",
                location=location.key(),
                error=str(exc),
                exc_info=exc,
            )
        return False

    async def _loop(self) -> None:
        while True:
            started = self._clock.monotonic()
            await self.run_cycle()
            elapsed = self._clock.monotonic() - started
            await self._clock.sleep(max(0.0, self._interval - elapsed))

    def start(self) -> bool:
        """
        Schedule the background loop on the running event loop.

        Returns:
            True when a loop was started
        """
        if not self.enabled:
            logger.info("scheduler.disabled")
            return False
        if not self._locations:
            logger.warning("scheduler.no_locations")
            return False
        if self.is_running:
            return False

        self._task = asyncio.create_task(self._loop(), name="weather-cycle-coordinator")
        logger.info(
            "scheduler.started",
            locations=[location.key() for location in self._locations],
            interval_seconds=self._interval,
        )
        return True

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to unwind."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("scheduler.stopped", cycles_completed=self.cycles_completed)

    def status(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "running": self.is_running,
            "locations": [location.key() for location in self._locations],
            "interval_seconds": self._interval,
            "cycles_completed": self.cycles_completed,
            "last_cycle_started_at": (
                self.last_cycle_started_at.isoformat()
                if self.last_cycle_started_at
                else None
            ),
            "last_cycle_finished_at": (
                self.last_cycle_finished_at.isoformat()
                if self.last_cycle_finished_at
                else None
            ),
        }

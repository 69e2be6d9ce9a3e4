"""System clock backed by the event loop and the OS clocks."""

import asyncio
import time
from datetime import datetime, timezone


class SystemClock:
    """Real time source used outside of tests."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))

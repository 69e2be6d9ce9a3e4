"""Clock port: wall time, monotonic time and awaitable delays."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class IClock(Protocol):
    """Time source injected wherever behavior depends on "now"."""

    def now(self) -> datetime:
        """Current wall-clock time, timezone-aware UTC."""
        ...

    def monotonic(self) -> float:
        """Monotonic seconds, used for breaker windows and cool-downs."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the current task; must be cancellable."""
        ...

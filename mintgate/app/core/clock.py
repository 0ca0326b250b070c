"""Wall clock and sleep primitive used by the wait loop.

Kept behind a small interface so tests can substitute a clock whose
sleep advances time instantly.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    """Source of the current time and a way to suspend."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for the given number of seconds."""
        ...


class SystemClock:
    """Clock backed by the system wall clock and asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


_system_clock = SystemClock()


def get_clock(clock: Optional[Clock] = None) -> Clock:
    """Return the given clock, or the shared system clock."""
    return clock if clock is not None else _system_clock


def millis_between(start: datetime, end: datetime) -> float:
    """Milliseconds from start to end (negative if end is earlier)."""
    return (end - start).total_seconds() * 1000

"""Shared fixtures for mint throttle tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from mintgate.app.services.mint_throttle import LastOperation, PolicySnapshot

REFERENCE_TIME = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock whose sleep advances time instantly.

    With hold_sleeps=True, sleeps never finish on their own so tests can
    cancel them mid-flight.
    """

    def __init__(self, start: datetime = REFERENCE_TIME, hold_sleeps: bool = False):
        self.current = start
        self.hold_sleeps = hold_sleeps
        self.sleeps: list[float] = []
        self.interrupted_sleeps = 0

    def now(self) -> datetime:
        return self.current

    def advance(self, ms: float) -> None:
        self.current += timedelta(milliseconds=ms)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if self.hold_sleeps:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.interrupted_sleeps += 1
                raise
        self.advance(seconds * 1000)
        await asyncio.sleep(0)


def limited_policy(max_tps="100", count=100, ms_ago=0, now=REFERENCE_TIME, operator="alice::1234"):
    """Policy whose last mint happened ms_ago milliseconds before now."""
    last_mint_at = now - timedelta(milliseconds=ms_ago)
    return PolicySnapshot(
        max_rate_per_second=max_tps,
        last_operation=LastOperation(
            timestamp=last_mint_at.isoformat().replace("+00:00", "Z"),
            count=count,
        ),
        operator=operator,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def held_clock():
    return FakeClock(hold_sleeps=True)

"""Admission check for the mint rate limit.

The ledger enforces a minimum interval between mints that scales with
the size of the previous mint:

    min_interval_us = last_mint.count * 1_000_000 / max_tps

Checking the same formula client-side lets callers hold back a mint
instead of having the ledger reject it.
"""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from mintgate.app.exceptions import InvalidPolicyError, InvalidTimestampError
from mintgate.app.services.mint_throttle.models import (
    ALLOWED,
    AdmissionDecision,
    Denied,
    PolicySnapshot,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def parse_rate(raw: Any) -> float:
    """Parse the ledger's max TPS value into a positive finite float.

    Raises:
        InvalidPolicyError: If the value is not a finite number above zero
    """
    if isinstance(raw, bool):
        raise InvalidPolicyError("maxTps", raw)
    try:
        if isinstance(raw, str):
            rate = float(raw.strip())
        elif isinstance(raw, (int, float, Decimal)):
            rate = float(raw)
        else:
            raise InvalidPolicyError("maxTps", raw)
    except ValueError:
        raise InvalidPolicyError("maxTps", raw) from None
    if not math.isfinite(rate) or rate <= 0:
        raise InvalidPolicyError("maxTps", raw)
    return rate


def _as_utc(value: datetime) -> datetime:
    # Ledger timestamps without an offset are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw: Any) -> datetime:
    """Parse a ledger timestamp into an aware UTC datetime.

    Raises:
        InvalidTimestampError: If the value is not an ISO 8601 timestamp
    """
    if isinstance(raw, datetime):
        return _as_utc(raw)
    if not isinstance(raw, str):
        raise InvalidTimestampError(raw)
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidTimestampError(raw) from None
    return _as_utc(parsed)


def _epoch_ms(value: datetime) -> int:
    return (value - _EPOCH) // _ONE_MS


def evaluate(policy: PolicySnapshot, now: Optional[datetime] = None) -> AdmissionDecision:
    """Decide whether a mint may run at ``now``.

    Args:
        policy: Snapshot of the minter's throttle state
        now: Instant to evaluate at, defaults to the current UTC time

    Returns:
        ALLOWED, or Denied with the whole milliseconds still to wait

    Raises:
        InvalidPolicyError: If max TPS is not a positive finite number
        InvalidTimestampError: If the last mint time does not parse

    Example:
        >>> decision = evaluate(policy)
        >>> if not decision.allowed:
        ...     await asyncio.sleep(decision.wait_seconds)
    """
    if policy.max_rate_per_second is None:
        return ALLOWED

    last = policy.last_operation
    if last is None:
        return ALLOWED

    rate = parse_rate(policy.max_rate_per_second)

    if isinstance(last.count, bool) or not isinstance(last.count, int):
        raise InvalidPolicyError("lastMint.count", last.count, "Expected an integer.")

    # Nothing minted last time, nothing to space out
    if last.count <= 0:
        return ALLOWED

    min_interval_us = last.count * 1_000_000 / rate

    last_at = parse_timestamp(last.timestamp)
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)

    # Millisecond resolution on both ends, matching the ledger client clocks
    elapsed_us = (_epoch_ms(current) - _epoch_ms(last_at)) * 1000

    if elapsed_us >= min_interval_us:
        return ALLOWED

    return Denied(wait_ms=math.ceil((min_interval_us - elapsed_us) / 1000))

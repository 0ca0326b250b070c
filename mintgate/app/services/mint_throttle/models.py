"""Data models for mint rate limiting."""

import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from mintgate.app.exceptions import InvalidPolicyError
from mintgate.app.services.mint_throttle.cancellation import CancellationToken

T = TypeVar("T")

DEFAULT_MAX_WAIT_MS = 5 * 60 * 1000
DEFAULT_MIN_POLL_INTERVAL_MS = 100


@dataclass(frozen=True)
class LastOperation:
    """The most recent gated operation recorded on the ledger.

    Attributes:
        timestamp: ISO 8601 string as stored on the ledger
            (e.g. "2026-01-13T12:00:00.000000Z") or a parsed datetime
        count: Number of items minted by that operation
    """
    timestamp: Union[str, datetime]
    count: int


@dataclass(frozen=True)
class PolicySnapshot:
    """Immutable read of the minter's throttle state.

    Attributes:
        max_rate_per_second: Raw rate limit value, None when throttling is disabled
        last_operation: Most recent mint, None when nothing has been minted yet
        operator: Party controlling the minter, used only for log context
    """
    max_rate_per_second: Any = None
    last_operation: Optional[LastOperation] = None
    operator: Optional[str] = None

    @property
    def is_rate_limit_enabled(self) -> bool:
        return self.max_rate_per_second is not None

    @classmethod
    def from_payload(cls, payload: dict) -> "PolicySnapshot":
        """Create from a minter contract payload.

        The payload uses the ledger's field names: ``operator``, ``maxTps``
        and ``lastMint`` with ``time`` and ``count``.

        Raises:
            InvalidPolicyError: If lastMint.count is not an integer
        """
        last_mint = payload.get("lastMint")
        last_operation = None
        if last_mint is not None:
            raw_count = last_mint.get("count")
            if isinstance(raw_count, bool):
                raise InvalidPolicyError("lastMint.count", raw_count, "Expected an integer.")
            try:
                count = int(raw_count)
            except (TypeError, ValueError):
                raise InvalidPolicyError("lastMint.count", raw_count, "Expected an integer.") from None
            last_operation = LastOperation(timestamp=last_mint.get("time"), count=count)
        return cls(
            max_rate_per_second=payload.get("maxTps"),
            last_operation=last_operation,
            operator=payload.get("operator"),
        )

    def to_payload(self) -> dict:
        """Convert back to the ledger payload shape."""
        last_mint = None
        if self.last_operation is not None:
            timestamp = self.last_operation.timestamp
            if isinstance(timestamp, datetime):
                timestamp = timestamp.isoformat()
            last_mint = {"time": timestamp, "count": self.last_operation.count}
        return {
            "operator": self.operator,
            "maxTps": self.max_rate_per_second,
            "lastMint": last_mint,
        }


@dataclass(frozen=True)
class Allowed:
    """Admission granted: the mint may run now."""

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    """Admission refused until wait_ms milliseconds have passed.

    wait_ms is rounded up, so sleeping exactly that long always
    passes re-evaluation.
    """
    wait_ms: int

    @property
    def allowed(self) -> bool:
        return False

    @property
    def wait_seconds(self) -> float:
        return self.wait_ms / 1000


AdmissionDecision = Union[Allowed, Denied]

ALLOWED = Allowed()


@dataclass
class WaitConfig:
    """Per-call configuration for waiting on the rate limit.

    Attributes:
        max_wait_ms: Give up with WaitTimeoutError after this long
        min_poll_interval_ms: Never re-evaluate more often than this
        cancellation: Token that aborts the wait when cancelled
        on_wait_start: Called with the milliseconds about to be slept
        on_before_action: Called once right before the gated action runs
    """
    max_wait_ms: float = DEFAULT_MAX_WAIT_MS
    min_poll_interval_ms: float = DEFAULT_MIN_POLL_INTERVAL_MS
    cancellation: Optional[CancellationToken] = None
    on_wait_start: Optional[Callable[[float], None]] = None
    on_before_action: Optional[Callable[[], None]] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.max_wait_ms) or self.max_wait_ms <= 0:
            raise ValueError("max_wait_ms must be a positive finite number")
        if not math.isfinite(self.min_poll_interval_ms) or self.min_poll_interval_ms <= 0:
            raise ValueError("min_poll_interval_ms must be a positive finite number")

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "WaitConfig":
        """Build a config from application settings.

        Overrides use the field names of this class; unknown names raise
        TypeError and None values fall back to the settings.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown wait options: {', '.join(sorted(unknown))}")
        values = {
            "max_wait_ms": settings.throttle_max_wait_ms,
            "min_poll_interval_ms": settings.throttle_min_poll_interval_ms,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class MintOutcome(Generic[T]):
    """Result of running an action behind the rate limit.

    Attributes:
        was_rate_limited: True if the first check, before any waiting, was denied
        waited_ms: Wall-clock milliseconds spent waiting (0 if not rate limited)
        result: Whatever the action returned
    """
    was_rate_limited: bool
    waited_ms: float
    result: T


@dataclass(frozen=True)
class RateLimitStatus:
    """Admission decision enriched for display and logging."""
    allowed: bool
    is_rate_limit_enabled: bool
    wait_ms: Optional[int] = field(default=None)
    wait_seconds: Optional[float] = field(default=None)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data: dict = {
            "allowed": self.allowed,
            "is_rate_limit_enabled": self.is_rate_limit_enabled,
        }
        if not self.allowed:
            data["wait_ms"] = self.wait_ms
            data["wait_seconds"] = self.wait_seconds
        return data

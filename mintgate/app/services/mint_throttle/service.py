"""Mint throttle service bundling the rate limit helpers.

Binds a clock and the application settings so callers only pass the
minter payload and, optionally, per-call overrides.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from mintgate.app.core.clock import Clock, get_clock
from mintgate.app.core.config import Settings, settings as default_settings
from mintgate.app.core.logging import get_log_context, get_logger
from mintgate.app.exceptions import WaitAbortedError, WaitTimeoutError
from mintgate.app.services.mint_throttle.evaluator import evaluate
from mintgate.app.services.mint_throttle.models import (
    AdmissionDecision,
    MintOutcome,
    PolicySnapshot,
    RateLimitStatus,
    WaitConfig,
)
from mintgate.app.services.mint_throttle.runner import run_gated
from mintgate.app.services.mint_throttle.status import status
from mintgate.app.services.mint_throttle.waiter import wait_until_allowed

logger = get_logger(__name__)

T = TypeVar("T")

PolicyInput = Union[PolicySnapshot, dict]


def _to_snapshot(policy: PolicyInput) -> PolicySnapshot:
    if isinstance(policy, PolicySnapshot):
        return policy
    return PolicySnapshot.from_payload(policy)


def _log_context(snapshot: PolicySnapshot, **extra: Any) -> dict[str, Any]:
    return get_log_context(
        operator=snapshot.operator,
        max_tps=snapshot.max_rate_per_second,
        **extra,
    )


class MintThrottle:
    """Rate limit helpers for a coupon minter.

    Usage:
        throttle = MintThrottle()

        status = throttle.get_status(minter_payload)
        if not status.allowed:
            print(f"Can mint in {status.wait_seconds:.1f}s")

        outcome = await throttle.mint_with_rate_limit(
            minter_payload,
            lambda: ledger.exercise(minter_cid, "MintCoupons", params),
            max_wait_ms=60_000,
        )
    """

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        """Initialize the throttle.

        Args:
            settings: Source of wait defaults. Uses global settings if None.
            clock: Time source. Uses the system clock if None.
        """
        self._settings = settings or default_settings
        self._clock = get_clock(clock)

    def _wait_config(self, snapshot: PolicySnapshot, overrides: dict[str, Any]) -> WaitConfig:
        config = WaitConfig.from_settings(self._settings, **overrides)
        on_wait_start = config.on_wait_start

        def log_wait(ms: float) -> None:
            logger.debug(
                f"Waiting {ms:.0f}ms for mint rate limit",
                extra=_log_context(snapshot, wait_ms=ms),
            )
            if on_wait_start is not None:
                on_wait_start(ms)

        config.on_wait_start = log_wait
        return config

    def can_mint_now(self, policy: PolicyInput, now: Optional[datetime] = None) -> AdmissionDecision:
        """Check whether a mint is allowed at ``now`` (default: the clock's now)."""
        return evaluate(_to_snapshot(policy), now or self._clock.now())

    def get_status(self, policy: PolicyInput, now: Optional[datetime] = None) -> RateLimitStatus:
        """Describe the rate limit state at ``now`` (default: the clock's now)."""
        return status(_to_snapshot(policy), now or self._clock.now())

    async def wait_until_can_mint(self, policy: PolicyInput, **overrides: Any) -> None:
        """Wait until a mint is allowed.

        Keyword overrides use WaitConfig field names (max_wait_ms,
        min_poll_interval_ms, cancellation, on_wait_start).
        """
        snapshot = _to_snapshot(policy)
        config = self._wait_config(snapshot, overrides)
        try:
            await wait_until_allowed(snapshot, config, self._clock)
        except (WaitAbortedError, WaitTimeoutError) as e:
            logger.info(
                f"Stopped waiting for mint rate limit: {e}",
                extra=_log_context(snapshot),
            )
            raise

    async def mint_with_rate_limit(
        self,
        policy: PolicyInput,
        mint: Callable[[], Union[T, Awaitable[T]]],
        **overrides: Any,
    ) -> MintOutcome[T]:
        """Wait until a mint is allowed, then run ``mint`` once.

        Keyword overrides use WaitConfig field names, including
        on_before_action.
        """
        snapshot = _to_snapshot(policy)
        config = self._wait_config(snapshot, overrides)
        try:
            outcome = await run_gated(snapshot, mint, config, self._clock)
        except (WaitAbortedError, WaitTimeoutError) as e:
            logger.info(
                f"Mint not attempted: {e}",
                extra=_log_context(snapshot),
            )
            raise

        if outcome.was_rate_limited:
            logger.debug(
                f"Mint ran after waiting {outcome.waited_ms:.0f}ms for rate limit",
                extra=_log_context(
                    snapshot,
                    was_rate_limited=True,
                    waited_ms=outcome.waited_ms,
                ),
            )
        return outcome


# Global throttle instance
_mint_throttle: Optional[MintThrottle] = None


def get_mint_throttle() -> MintThrottle:
    """Get the global mint throttle instance.

    Returns:
        MintThrottle bound to the global settings and system clock
    """
    global _mint_throttle
    if _mint_throttle is None:
        _mint_throttle = MintThrottle()
    return _mint_throttle


def reset_mint_throttle() -> None:
    """Reset the global mint throttle instance.

    Useful for testing.
    """
    global _mint_throttle
    _mint_throttle = None

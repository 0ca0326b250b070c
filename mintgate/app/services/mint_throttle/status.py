"""Read-only view of the mint rate limit for display and logging."""

from datetime import datetime
from typing import Optional

from mintgate.app.services.mint_throttle.evaluator import evaluate
from mintgate.app.services.mint_throttle.models import PolicySnapshot, RateLimitStatus


def status(policy: PolicySnapshot, now: Optional[datetime] = None) -> RateLimitStatus:
    """Describe the current rate limit state of a minter.

    Same decision as evaluate(), plus whether rate limiting is configured
    at all and the wait expressed in seconds.
    """
    decision = evaluate(policy, now)
    if decision.allowed:
        return RateLimitStatus(
            allowed=True,
            is_rate_limit_enabled=policy.is_rate_limit_enabled,
        )
    return RateLimitStatus(
        allowed=False,
        is_rate_limit_enabled=policy.is_rate_limit_enabled,
        wait_ms=decision.wait_ms,
        wait_seconds=decision.wait_seconds,
    )

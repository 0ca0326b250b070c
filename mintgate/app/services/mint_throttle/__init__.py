"""Client-side rate limiting for coupon minting.

Checks the minter's TPS limit before submitting a mint, waits until the
limit allows it, and runs the mint once admitted.
"""

from mintgate.app.services.mint_throttle.cancellation import CancellationToken
from mintgate.app.services.mint_throttle.evaluator import (
    evaluate,
    parse_rate,
    parse_timestamp,
)
from mintgate.app.services.mint_throttle.models import (
    ALLOWED,
    AdmissionDecision,
    Allowed,
    Denied,
    LastOperation,
    MintOutcome,
    PolicySnapshot,
    RateLimitStatus,
    WaitConfig,
)
from mintgate.app.services.mint_throttle.runner import run_gated
from mintgate.app.services.mint_throttle.service import (
    MintThrottle,
    get_mint_throttle,
    reset_mint_throttle,
)
from mintgate.app.services.mint_throttle.status import status
from mintgate.app.services.mint_throttle.waiter import wait_until_allowed

__all__ = [
    # Models
    "ALLOWED",
    "AdmissionDecision",
    "Allowed",
    "Denied",
    "LastOperation",
    "MintOutcome",
    "PolicySnapshot",
    "RateLimitStatus",
    "WaitConfig",
    "CancellationToken",
    # Operations
    "evaluate",
    "parse_rate",
    "parse_timestamp",
    "wait_until_allowed",
    "run_gated",
    "status",
    # Service
    "MintThrottle",
    "get_mint_throttle",
    "reset_mint_throttle",
]

"""Run an action once the mint rate limit admits it."""

import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from mintgate.app.core.clock import Clock, get_clock, millis_between
from mintgate.app.services.mint_throttle.evaluator import evaluate
from mintgate.app.services.mint_throttle.models import MintOutcome, PolicySnapshot, WaitConfig
from mintgate.app.services.mint_throttle.waiter import wait_until_allowed

T = TypeVar("T")


async def run_gated(
    policy: PolicySnapshot,
    action: Callable[[], Union[T, Awaitable[T]]],
    config: Optional[WaitConfig] = None,
    clock: Optional[Clock] = None,
) -> MintOutcome[T]:
    """Wait for the rate limit if needed, then call ``action`` exactly once.

    ``action`` may be a plain callable or return an awaitable; either way
    its result ends up in the outcome and its exceptions propagate as-is.
    If waiting fails, ``action`` is never called.

    Args:
        policy: Snapshot of the minter's throttle state
        action: The mint to perform, typically a ledger submission
        config: Wait configuration, including on_before_action
        clock: Time source, defaults to the system clock

    Returns:
        MintOutcome with the action's result and how long we waited

    Raises:
        WaitAbortedError: If the wait was cancelled
        WaitTimeoutError: If the wait deadline passed
        InvalidPolicyError: If the policy rate is malformed
        InvalidTimestampError: If the last mint time is malformed

    Example:
        >>> outcome = await run_gated(
        ...     policy,
        ...     lambda: ledger.exercise(minter_cid, "MintCoupons", params),
        ...     WaitConfig(on_wait_start=lambda ms: print(f"waiting {ms}ms")),
        ... )
        >>> outcome.result
    """
    config = config or WaitConfig()
    clock = get_clock(clock)

    started = clock.now()
    was_rate_limited = not evaluate(policy, started).allowed

    waited_ms: float = 0
    if was_rate_limited:
        await wait_until_allowed(policy, config, clock)
        waited_ms = millis_between(started, clock.now())

    if config.on_before_action is not None:
        config.on_before_action()

    result: Any = action()
    if inspect.isawaitable(result):
        result = await result

    return MintOutcome(
        was_rate_limited=was_rate_limited,
        waited_ms=waited_ms,
        result=result,
    )

"""Wait loop that holds a mint back until the rate limit allows it.

The loop re-checks the same policy snapshot as time passes. If another
process may mint against the same minter meanwhile, fetch a fresh
snapshot after waiting and check again before minting.
"""

import asyncio
from typing import Optional

from mintgate.app.core.clock import Clock, get_clock, millis_between
from mintgate.app.exceptions import WaitAbortedError, WaitTimeoutError
from mintgate.app.services.mint_throttle.cancellation import CancellationToken
from mintgate.app.services.mint_throttle.evaluator import evaluate
from mintgate.app.services.mint_throttle.models import PolicySnapshot, WaitConfig


async def _sleep(clock: Clock, ms: float, token: Optional[CancellationToken]) -> None:
    """Sleep for ms milliseconds, waking early if the token is tripped.

    Raises:
        WaitAbortedError: If the token fires before the sleep finishes
    """
    if token is None:
        await clock.sleep(ms / 1000)
        return

    sleep_task = asyncio.ensure_future(clock.sleep(ms / 1000))
    cancel_task = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait(
            {sleep_task, cancel_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (sleep_task, cancel_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(sleep_task, cancel_task, return_exceptions=True)

    # Cancellation wins a tie with the sleep
    if token.is_cancelled:
        raise WaitAbortedError()
    sleep_task.result()


async def wait_until_allowed(
    policy: PolicySnapshot,
    config: Optional[WaitConfig] = None,
    clock: Optional[Clock] = None,
) -> None:
    """Wait until the policy admits a mint.

    Sleeps for the larger of the required wait and the minimum poll
    interval, never past the deadline, then re-evaluates.

    Args:
        policy: Snapshot of the minter's throttle state
        config: Deadline, poll interval, cancellation and callback
        clock: Time source, defaults to the system clock

    Raises:
        WaitAbortedError: If the cancellation token is tripped
        WaitTimeoutError: If config.max_wait_ms passes before admission
        InvalidPolicyError: If the policy rate is malformed
        InvalidTimestampError: If the last mint time is malformed

    Example:
        >>> token = CancellationToken()
        >>> await wait_until_allowed(
        ...     policy,
        ...     WaitConfig(max_wait_ms=30_000, cancellation=token),
        ... )
    """
    config = config or WaitConfig()
    clock = get_clock(clock)
    token = config.cancellation

    if token is not None and token.is_cancelled:
        raise WaitAbortedError()

    started = clock.now()

    while True:
        decision = evaluate(policy, clock.now())
        if decision.allowed:
            return

        elapsed_ms = millis_between(started, clock.now())
        if elapsed_ms >= config.max_wait_ms:
            raise WaitTimeoutError(config.max_wait_ms)

        sleep_ms = max(decision.wait_ms, config.min_poll_interval_ms)
        sleep_ms = min(sleep_ms, config.max_wait_ms - elapsed_ms)

        if config.on_wait_start is not None:
            config.on_wait_start(sleep_ms)

        await _sleep(clock, sleep_ms, token)

"""Cancellation signal for the mint wait loop."""

import asyncio
import threading
from typing import Optional


class CancellationToken:
    """Externally triggered signal that aborts a pending wait.

    The token may be tripped from the event loop that waits on it or
    from any other thread. Cancels from another thread are handed to the
    waiting loop with call_soon_threadsafe, so a sleeping waiter wakes
    right away.

    Usage:
        token = CancellationToken()
        task = asyncio.create_task(
            wait_until_allowed(policy, WaitConfig(cancellation=token))
        )
        ...
        token.cancel()  # task raises WaitAbortedError
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._lock = threading.Lock()
        self._cancelled = False
        self._reason: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Trip the token. Later calls keep the first reason.

        Safe to call from any thread.
        """
        with self._lock:
            if self._cancelled:
                return
            self._reason = reason
            self._cancelled = True
            loop = self._loop

        if loop is None or loop.is_closed() or loop is _running_loop():
            self._trip()
        else:
            loop.call_soon_threadsafe(self._trip)

    def _trip(self) -> None:
        # Runs on the waiting loop, or with no loop attached yet
        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait(self) -> None:
        """Suspend until the token is tripped."""
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.get_running_loop()
            if self._cancelled:
                return
        await self._event.wait()

    @classmethod
    def after(cls, seconds: float, reason: Optional[str] = "timeout") -> "CancellationToken":
        """Create a token that trips itself after the given delay.

        Must be called with a running event loop.
        """
        token = cls()
        loop = asyncio.get_running_loop()
        token._loop = loop
        token._timer = loop.call_later(seconds, token.cancel, reason)
        return token


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None

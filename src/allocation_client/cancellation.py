"""Cooperative request cancellation.

An AbortController owns an AbortSignal. The client arms a controller with a
timer for every request; callers may pass their own signal instead. Only the
transport wait observes the signal, nothing else polls it.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")

TIMEOUT_REASON = "timeout"


class RequestAborted(Exception):
    """The effective signal fired while the request was in flight."""

    def __init__(self, reason: str | None = None):
        super().__init__(f"Request aborted ({reason or 'no reason given'})")
        self.reason = reason


class AbortSignal:
    """Read-only view of an abort request."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def _fire(self, reason: str | None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()


class AbortController:
    def __init__(self):
        self.signal = AbortSignal()

    def abort(self, reason: str | None = None) -> None:
        """Fire the signal. Later calls keep the first reason."""
        self.signal._fire(reason)


async def run_with_signal(awaitable: Awaitable[T], signal: AbortSignal) -> T:
    """Await ``awaitable`` unless ``signal`` fires first.

    Raises:
        RequestAborted: If the signal was already fired or fires before the
            awaitable completes. The awaitable is cancelled in that case.
    """
    task = asyncio.ensure_future(awaitable)
    if signal.aborted:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise RequestAborted(signal.reason)

    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
            # let the transport unwind before surfacing the abort
            await asyncio.gather(task, return_exceptions=True)

    if not task.cancelled():
        return task.result()
    raise RequestAborted(signal.reason)

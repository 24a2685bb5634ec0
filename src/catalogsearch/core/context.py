"""Request context — Caller-controlled cancellation and deadline for engine calls.

A ``RequestContext`` can be shared by several calls (e.g. every batch of a
bulk load).  Cancelling it abandons whichever call is in flight and makes
every later call fail fast with ``SearchCancelledError``.

Usage::

    ctx = RequestContext(timeout=2.0)
    result = await executor.execute(query, ctx)

    # elsewhere, e.g. a UI "stop" button
    ctx.cancel("user aborted")
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

from catalogsearch.exceptions import SearchCancelledError

_T = TypeVar("_T")


class RequestContext:
    """Cancellation signal with an optional deadline.

    Args:
        timeout: Seconds from construction after which calls are abandoned.
            ``None`` means no deadline.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = asyncio.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._reason = reason
        self._cancelled.set()

    def check(self) -> None:
        """Raise ``SearchCancelledError`` if the context is no longer live."""
        if self.cancelled:
            raise SearchCancelledError(self._reason)
        if self.expired:
            raise SearchCancelledError("deadline exceeded")

    async def run(self, aw: Awaitable[_T]) -> _T:
        """Await *aw* unless the context is cancelled or expires first.

        The caller's own task cancellation propagates unchanged.

        Raises:
            SearchCancelledError: If the context ends before *aw* completes.
        """
        try:
            self.check()
        except SearchCancelledError:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise

        call = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {call, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
            if call in done:
                return call.result()
        finally:
            waiter.cancel()
            if not call.done():
                call.cancel()
                await asyncio.gather(call, return_exceptions=True)

        self.check()
        raise SearchCancelledError("deadline exceeded")

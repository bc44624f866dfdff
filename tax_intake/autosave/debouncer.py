"""
Debouncer

An explicit timer object instead of an implicit debounced closure.
Each wizard page owns one; when the page is left the owner flushes or
cancels it, so nothing fires against a torn-down page.

Runs on the asyncio event loop: the quiet window is a loop.call_later
handle, and the callback is a coroutine function started as a task
when the window closes.
"""

import asyncio
from typing import Awaitable, Callable, Optional


AsyncCallback = Callable[[], Awaitable[None]]


class Debouncer:
    """
    Collapse bursts of schedule() calls into one callback run.

    Every schedule() restarts the quiet window and replaces the callback;
    only the last one runs, `delay` seconds after the last call.
    """

    def __init__(self, delay: float):
        if delay < 0:
            raise ValueError("Debounce delay cannot be negative")
        self._delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._callback: Optional[AsyncCallback] = None
        self._running: set[asyncio.Task] = set()
        self._closed = False

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """A callback is waiting for its quiet window to close."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        """A fired callback has not finished yet."""
        return bool(self._running)

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, callback: AsyncCallback) -> None:
        """
        (Re)start the quiet window with callback as the action to run.

        Must be called from inside a running event loop.
        """
        if self._closed:
            raise RuntimeError("Debouncer is closed")

        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._callback = callback
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> bool:
        """
        Drop the pending callback without running it.

        Returns True if something was pending. Callbacks that already
        started are not interrupted.
        """
        was_pending = self.pending
        self._cancel_timer()
        self._callback = None
        return was_pending

    async def flush(self) -> None:
        """Run the pending callback now, then wait for running ones."""
        if self.pending:
            self._cancel_timer()
            callback, self._callback = self._callback, None
            if callback is not None:
                await callback()
        await self.wait()

    async def wait(self) -> None:
        """Wait until every fired callback has finished."""
        while self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def close(self, flush: bool = True) -> None:
        """
        Tear the debouncer down.

        With flush, the pending callback runs first; otherwise it is
        dropped. Either way, running callbacks are awaited.
        """
        if self._closed:
            return
        if flush:
            await self.flush()
        else:
            self.cancel()
            await self.wait()
        self._closed = True

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        callback, self._callback = self._callback, None
        if callback is None:
            return
        task = asyncio.ensure_future(callback())
        self._running.add(task)
        task.add_done_callback(self._running.discard)

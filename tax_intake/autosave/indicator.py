"""
Saving indicator state.

The "saving..." badge stays up for a minimum time even when the write
finishes faster, so the user does not see it flicker.
"""

import asyncio
import time
from typing import Callable, Optional


Listener = Callable[[bool], None]


class SavingIndicator:
    """Visible/hidden flag with a minimum visible duration."""

    def __init__(
        self,
        min_visible_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._min_visible = min_visible_seconds
        self._clock = clock
        self._visible = False
        self._shown_at: Optional[float] = None
        self._hide_handle: Optional[asyncio.TimerHandle] = None
        self._listeners: list[Listener] = []

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def hide_pending(self) -> bool:
        return self._hide_handle is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(visible) on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def show(self) -> None:
        self._cancel_hide()
        if not self._visible:
            self._visible = True
            self._shown_at = self._clock()
            self._notify()

    def hide(self) -> None:
        """Hide once the minimum visible time has passed."""
        if not self._visible or self._hide_handle is not None:
            return

        elapsed = self._clock() - (self._shown_at or 0.0)
        remaining = self._min_visible - elapsed
        if remaining <= 0:
            self._hide_now()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._hide_now()
            return
        self._hide_handle = loop.call_later(remaining, self._hide_now)

    def close(self) -> None:
        """Hide immediately and drop any delayed hide."""
        self._cancel_hide()
        if self._visible:
            self._hide_now()

    def _cancel_hide(self) -> None:
        if self._hide_handle is not None:
            self._hide_handle.cancel()
            self._hide_handle = None

    def _hide_now(self) -> None:
        self._hide_handle = None
        if self._visible:
            self._visible = False
            self._shown_at = None
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._visible)

"""Keystroke debouncing on the running event loop."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from .constants import DEBOUNCE_MS

Trigger = Callable[[str], None]


class InputDebouncer:
    """Coalesce a burst of keystrokes into one trigger.

    Every keystroke restarts the quiet-interval timer. When the timer
    fires, ``on_trigger`` is called once with the latest text.
    """

    def __init__(
        self,
        on_trigger: Trigger,
        interval: float = DEBOUNCE_MS / 1000,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.on_trigger = on_trigger
        self.interval = interval
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._text = ""
        self.last_keystroke_time: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def text(self) -> str:
        return self._text

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def on_keystroke(self, text: str) -> None:
        """Record the latest text and restart the quiet interval."""
        loop = self._get_loop()
        self._text = text
        self.last_keystroke_time = loop.time()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.interval, self.on_timer_fire)

    def on_timer_fire(self) -> None:
        if self._handle is None:
            return
        self._handle = None
        self.on_trigger(self._text)

    def cancel(self) -> None:
        """Drop a pending trigger without firing it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

"""Cancellation token checked by the controller between events."""

import asyncio
from typing import Optional


class CancellationToken:
    """Cooperative stop signal for a playback run.

    ``cancel`` may be called from a signal handler or another task; the
    controller observes it before each event and during inter-event waits.
    An in-flight browser action is never interrupted.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True when woken by cancellation."""
        if self.cancelled:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(0.0, seconds))
            return True
        except asyncio.TimeoutError:
            return False

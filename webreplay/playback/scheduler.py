"""Timing Scheduler - reconstructs pacing between recorded events.

The delay before an event is the recorded interval divided by the playback
speed, never less than a small floor so the live page is not raced:

    delay = max((current - previous) / speed, floor)

Clock skew can make the recorded interval zero or negative; those clamp to
the floor. No delay is applied before the first event.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from .cancellation import CancellationToken

logger = structlog.get_logger()

DEFAULT_MIN_DELAY_MS = 50


def compute_delay(
    previous_timestamp: int,
    current_timestamp: int,
    speed: float = 1.0,
    floor_ms: float = DEFAULT_MIN_DELAY_MS,
) -> float:
    """Delay in milliseconds between two recorded timestamps.

    Raises:
        ValueError: speed is not positive
    """
    if speed <= 0:
        raise ValueError(f"Playback speed must be positive, got {speed}")
    scaled = (current_timestamp - previous_timestamp) / speed
    return max(scaled, floor_ms)


class TimingScheduler:
    """Applies speed-adjusted delays between consecutive events.

    Example:
        scheduler = TimingScheduler(speed=2.0)
        scheduler.delay(1000, 1500)  # 250.0
        await scheduler.wait(1000, 1500, cancel_token)
    """

    def __init__(
        self,
        speed: float = 1.0,
        min_delay_ms: float = DEFAULT_MIN_DELAY_MS,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize the scheduler.

        Args:
            speed: Playback speed multiplier (> 0)
            min_delay_ms: Floor for every delay, also the threshold above
                which a wait is reported
            sleep: Replacement for the wait itself (seconds); by default the
                wait is an interruptible sleep on the cancellation token
        """
        self.speed = speed
        self.min_delay_ms = min_delay_ms
        self._sleep = sleep
        self.log = logger.bind(component="timing_scheduler")

    @property
    def speed(self) -> float:
        return self._speed

    @speed.setter
    def speed(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"Playback speed must be positive, got {value}")
        self._speed = float(value)

    def delay(self, previous_timestamp: int, current_timestamp: int) -> float:
        """Delay in milliseconds before the event at ``current_timestamp``."""
        return compute_delay(previous_timestamp, current_timestamp, self.speed, self.min_delay_ms)

    def is_significant(self, delay_ms: float) -> bool:
        return delay_ms > self.min_delay_ms

    async def wait(
        self,
        previous_timestamp: int,
        current_timestamp: int,
        cancel_token: Optional[CancellationToken] = None,
    ) -> float:
        """Wait the computed delay; returns the delay in milliseconds.

        Returns early if ``cancel_token`` is cancelled during the wait.
        """
        delay_ms = self.delay(previous_timestamp, current_timestamp)
        if self.is_significant(delay_ms):
            self.log.info("Waiting", delay_ms=round(delay_ms))

        seconds = delay_ms / 1000
        if self._sleep is not None:
            await self._sleep(seconds)
        elif cancel_token is not None:
            await cancel_token.sleep(seconds)
        else:
            await asyncio.sleep(seconds)
        return delay_ms

"""Playback Controller - drive a whole recording through the engine.

Flow per run:

    validate preconditions ──▶ for each event in order:
                                  check cancellation
                                  wait (timing scheduler)      [skipped for the first]
                                  check cancellation
                                  dispatch (action dispatcher)
                                  record EventResult
                               ──▶ PlaybackReport (completed | stopped)

A failure while replaying one event is logged with that event's index and
kind and never aborts the run. Only missing preconditions are raised.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from webreplay.browser import BrowserSession
from webreplay.config import PlaybackSettings
from webreplay.recording import InteractionRecord, Recording
from webreplay.utils.logging import LogContext, PlaybackLogger

from .cancellation import CancellationToken
from .dispatcher import ActionDispatcher
from .errors import FatalPreconditionError, PlaybackError
from .models import EventOutcome, EventResult, PlaybackReport, PlaybackStatus
from .scheduler import TimingScheduler

logger = structlog.get_logger()


@dataclass
class PlaybackSession:
    """The browser, speed and recording for one run.

    The cursor is the index of the next event to replay. Every run resets
    it to its first index; nothing else carries over between runs.
    """

    browser: Optional[BrowserSession]
    speed: float = 1.0
    recording: Optional[Recording] = None
    cursor: int = 0

    async def close(self) -> None:
        """Release the browser; safe to call more than once."""
        browser, self.browser = self.browser, None
        if browser is not None:
            await browser.close()

    async def __aenter__(self) -> "PlaybackSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class PlaybackController:
    """Replays recordings event by event.

    The controller holds no run state, so one instance can run any number
    of recordings, sequentially or on different sessions.

    Example:
        controller = PlaybackController(settings)
        async with PlaybackSession(browser, speed=2.0) as session:
            report = await controller.run(recording, session)
    """

    def __init__(
        self,
        settings: Optional[PlaybackSettings] = None,
        scheduler_factory: Optional[Callable[[float], TimingScheduler]] = None,
        dispatcher_factory: Optional[Callable[[BrowserSession], ActionDispatcher]] = None,
    ):
        """Initialize the controller.

        Args:
            settings: Playback settings (timeouts, delay floor)
            scheduler_factory: Builds the scheduler for a run from its speed
            dispatcher_factory: Builds the dispatcher for a run from its browser
        """
        self.settings = settings or PlaybackSettings()
        self._scheduler_factory = scheduler_factory or (
            lambda speed: TimingScheduler(speed=speed, min_delay_ms=self.settings.min_delay_ms)
        )
        self._dispatcher_factory = dispatcher_factory or (
            lambda browser: ActionDispatcher(browser, settings=self.settings)
        )
        self.log = logger.bind(component="playback_controller")

    async def run(
        self,
        recording: Optional[Recording],
        session: Optional[PlaybackSession],
        cancel_token: Optional[CancellationToken] = None,
        start_index: int = 0,
        limit: Optional[int] = None,
    ) -> PlaybackReport:
        """Replay ``recording`` in the session's browser.

        Args:
            recording: The recording to replay, in order
            session: Browser and speed for this run
            cancel_token: Observed between events to stop early
            start_index: Index of the first event to replay
            limit: Replay at most this many events

        Returns:
            PlaybackReport with one EventResult per attempted event

        Raises:
            FatalPreconditionError: No recording, or no browser attached
        """
        if recording is None:
            raise FatalPreconditionError("No interactions loaded")
        if session is None or session.browser is None:
            raise FatalPreconditionError("Browser not initialized")
        if start_index < 0 or (limit is not None and limit < 0):
            raise ValueError("start_index and limit must be >= 0")

        cancel_token = cancel_token or CancellationToken()
        scheduler = self._scheduler_factory(session.speed)
        dispatcher = self._dispatcher_factory(session.browser)

        interactions = recording.interactions
        end_index = len(interactions) if limit is None else min(len(interactions), start_index + limit)
        self.log.debug("Playback window", start_index=start_index, end_index=end_index, speed=session.speed)

        session.recording = recording
        session.cursor = start_index

        # A mismatched totalInteractions was already reported as a warning
        total_in_log = len(interactions)
        progress = PlaybackLogger(recording.session_id, total=total_in_log)
        report = PlaybackReport(
            session_id=recording.session_id,
            status=PlaybackStatus.COMPLETED,
            total_in_log=total_in_log,
            speed=scheduler.speed,
            warnings=[str(w) for w in recording.warnings],
        )
        start = time.time()

        with LogContext(session_id=recording.session_id):
            progress.playback_started(scheduler.speed, max(0, end_index - start_index))

            for index in range(start_index, end_index):
                record = interactions[index]
                if cancel_token.cancelled:
                    report.status = PlaybackStatus.STOPPED
                    break

                if index > start_index:
                    await scheduler.wait(interactions[index - 1].timestamp, record.timestamp, cancel_token)
                    if cancel_token.cancelled:
                        report.status = PlaybackStatus.STOPPED
                        break

                progress.event_started(index, record.kind, record.url)
                result = await self._play_one(dispatcher, record, index, progress)
                report.results.append(result)
                session.cursor = index + 1

            report.duration_ms = int((time.time() - start) * 1000)

            if report.status == PlaybackStatus.STOPPED:
                progress.playback_stopped(report.attempted)
            else:
                progress.playback_completed(
                    report.attempted,
                    fallbacks=report.fallbacks,
                    skipped=report.skipped,
                    failed=report.failed,
                )

        return report

    async def _play_one(
        self,
        dispatcher: ActionDispatcher,
        record: InteractionRecord,
        index: int,
        progress: PlaybackLogger,
    ) -> EventResult:
        try:
            return await dispatcher.dispatch(record, index)
        except PlaybackError as e:
            progress.event_failed(index, record.kind, str(e))
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.FAILED,
                reason=str(e),
                data={"error_type": type(e).__name__},
            )
        except Exception as e:
            # Anything unexpected is still attributed to this event only
            progress.event_failed(index, record.kind, str(e))
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.FAILED,
                reason=f"{type(e).__name__}: {e}",
                data={"error_type": type(e).__name__},
            )

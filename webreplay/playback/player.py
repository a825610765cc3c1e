"""InteractionPlayer - command surface over the playback engine.

Wraps the recording store and the controller into the four operations a
caller needs: load a recording, set the speed, start and stop.
"""

import asyncio
from pathlib import Path
from typing import Optional

import structlog

from webreplay.browser import BrowserSession
from webreplay.config import PlaybackSettings
from webreplay.recording import Recording, RecordingStore

from .cancellation import CancellationToken
from .controller import PlaybackController, PlaybackSession
from .errors import FatalPreconditionError
from .models import PlaybackReport

logger = structlog.get_logger()


class InteractionPlayer:
    """Loads a recording and replays it in a browser.

    Example:
        player = InteractionPlayer()
        player.load_recording("interactions_1700000000000.json")
        player.set_speed(2.0)
        async with PlaywrightBrowserSession(config) as browser:
            report = await player.start(browser)
    """

    def __init__(
        self,
        settings: Optional[PlaybackSettings] = None,
        store: Optional[RecordingStore] = None,
        controller: Optional[PlaybackController] = None,
    ):
        self.settings = settings or PlaybackSettings()
        self.store = store or RecordingStore()
        self.controller = controller or PlaybackController(self.settings)
        self.recording: Optional[Recording] = None
        self.speed = self.settings.speed
        self.session: Optional[PlaybackSession] = None
        self._cancel_token: Optional[CancellationToken] = None
        self._idle = asyncio.Event()
        self._idle.set()
        self.log = logger.bind(component="interaction_player")

    @property
    def is_playing(self) -> bool:
        return not self._idle.is_set()

    def load_recording(self, path: str | Path) -> Recording:
        """Load and validate a recording file.

        Raises:
            RecordingNotFoundError: The file does not exist
            RecordingFormatError: The file is not a valid recording
        """
        self.recording = self.store.load(path)
        return self.recording

    def set_speed(self, speed: float) -> None:
        """Set the playback speed multiplier.

        Raises:
            ValueError: speed is not positive
        """
        if speed <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed}")
        self.speed = float(speed)
        self.log.info("Playback speed set", speed=self.speed)

    async def start(
        self,
        browser: Optional[BrowserSession],
        limit: Optional[int] = None,
        start_index: int = 0,
    ) -> PlaybackReport:
        """Replay the loaded recording in ``browser``.

        Args:
            browser: Live browser session to replay in
            limit: Replay at most this many events
            start_index: Index of the first event to replay

        Returns:
            PlaybackReport for the run

        Raises:
            FatalPreconditionError: No recording loaded or no browser given
        """
        if self.recording is None:
            raise FatalPreconditionError("No interactions loaded")
        if browser is None:
            raise FatalPreconditionError("Browser not initialized")
        if self.is_playing:
            raise FatalPreconditionError("Playback already in progress")

        self.session = PlaybackSession(browser=browser, speed=self.speed)
        self._cancel_token = CancellationToken()
        self._idle.clear()
        try:
            return await self.controller.run(
                self.recording,
                self.session,
                self._cancel_token,
                start_index=start_index,
                limit=limit,
            )
        finally:
            self._idle.set()

    async def stop(self) -> None:
        """Stop playback after the current event and release the browser."""
        if self._cancel_token is not None:
            self._cancel_token.cancel("stop requested")

        # An in-flight action finishes before the browser goes away
        await self._idle.wait()

        if self.session is not None:
            await self.session.close()
            self.log.info("Browser closed")

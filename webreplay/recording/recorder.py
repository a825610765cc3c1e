"""Live interaction recorder.

Installs the capture listeners on a Playwright page, records main frame
navigations and drains the page buffer periodically. The buffer is emptied
by the same script call that returns it, so a drain that fails leaves the
records in the page for the next drain.
"""

import asyncio
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Optional

import structlog

from .capture_script import CaptureConfig, CaptureScriptGenerator
from .models import Recording
from .store import RecordingStore

logger = structlog.get_logger()


def _now_ms() -> int:
    return int(time.time() * 1000)


class InteractionRecorder:
    """Records user interactions on a live page into a Recording.

    Example:
        recorder = InteractionRecorder(browser.page)
        await recorder.start("https://example.com")
        ...  # user interacts with the page
        recording = await recorder.stop()
        RecordingStore().save(recording, recorder.default_path("./recordings"))
    """

    def __init__(
        self,
        page: Any,
        config: Optional[CaptureConfig] = None,
        drain_interval_ms: int = 1000,
        clock: Callable[[], int] = _now_ms,
    ):
        self.page = page
        self.generator = CaptureScriptGenerator(config)
        self.drain_interval_ms = drain_interval_ms
        self._clock = clock
        self.session_id = str(clock())
        self.interactions: list[dict] = []
        self._drain_task: Optional[asyncio.Task] = None
        self._recording = False
        self.log = logger.bind(component="recorder", session_id=self.session_id)

    @property
    def is_recording(self) -> bool:
        return self._recording

    async def start(self, url: Optional[str] = None) -> None:
        """Install the listeners, start draining and optionally open ``url``."""
        if self._recording:
            return

        script = self.generator.generate()
        await self.page.add_init_script(script)
        # The current document predates the init script
        await self.page.evaluate(script)

        self.page.on("framenavigated", self._on_frame_navigated)
        self._recording = True
        self._drain_task = asyncio.create_task(self._drain_loop())

        if url:
            self.log.info("Navigating", url=url)
            await self.page.goto(url)

        self.log.info("Recording started")

    def _on_frame_navigated(self, frame: Any) -> None:
        if frame != self.page.main_frame:
            return
        self.interactions.append({
            "type": "navigation",
            "timestamp": self._clock(),
            "url": frame.url,
            "title": None,
            "sessionId": self.session_id,
        })

    async def _drain_loop(self) -> None:
        while self._recording:
            await asyncio.sleep(self.drain_interval_ms / 1000)
            await self.drain()

    async def drain(self) -> int:
        """Move buffered page records into the recorder; returns how many."""
        try:
            drained = await self.page.evaluate(self.generator.drain_expression())
        except Exception as e:
            self.log.warning("Error collecting interactions", error=str(e))
            return 0

        if not drained:
            return 0

        title = None
        try:
            title = await self.page.title()
        except Exception as e:
            self.log.debug("Page title unavailable", error=str(e))

        for record in drained:
            record["pageTitle"] = title
        self.interactions.extend(drained)
        self.log.debug("Drained interactions", count=len(drained), total=len(self.interactions))
        return len(drained)

    async def stop(self) -> Recording:
        """Stop recording, drain what is left and build the Recording."""
        self._recording = False
        if self._drain_task:
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
            self._drain_task = None

        await self.drain()
        self.page.remove_listener("framenavigated", self._on_frame_navigated)

        self.log.info("Recording stopped", total_interactions=len(self.interactions))
        return self.finalize()

    def finalize(self) -> Recording:
        """Build a Recording from everything captured so far.

        Navigations are observed outside the page while DOM events wait in
        the page buffer, so records are stably ordered by timestamp to
        restore capture sequence.
        """
        ordered = sorted(self.interactions, key=lambda r: r.get("timestamp", 0))
        start = datetime.fromtimestamp(int(self.session_id) / 1000, tz=UTC)
        end = datetime.fromtimestamp(self._clock() / 1000, tz=UTC)
        document = {
            "sessionId": self.session_id,
            "startTime": start.isoformat(),
            "endTime": end.isoformat(),
            "totalInteractions": len(ordered),
            "interactions": ordered,
        }
        return RecordingStore().from_dict(document)

    def default_path(self, directory: str | Path) -> Path:
        """Conventional file name for this session inside ``directory``."""
        return Path(directory) / f"interactions_{self.session_id}.json"

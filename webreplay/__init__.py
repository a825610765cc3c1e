"""Record user interactions on a web page and replay them in a live browser.

The playback engine takes a persisted interaction log and re-executes every
recorded event, in order, against a browser session:

    Recording Store → Playback Controller → Timing Scheduler
                                         → Action Dispatcher → Element Resolver

Usage:
    from webreplay import InteractionPlayer, RecordingStore
    from webreplay.browser import PlaywrightBrowserSession

    player = InteractionPlayer()
    player.load_recording("recordings/interactions_1750718332829.json")
    player.set_speed(2.0)

    async with PlaywrightBrowserSession() as browser:
        report = await player.start(browser)
        print(report.to_dict())
"""

from .playback import InteractionPlayer, PlaybackController, PlaybackReport
from .recording import Recording, RecordingStore

__version__ = "0.3.0"

__all__ = [
    "InteractionPlayer",
    "PlaybackController",
    "PlaybackReport",
    "Recording",
    "RecordingStore",
    "__version__",
]

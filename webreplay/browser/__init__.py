"""Browser capability for playback and recording.

The playback engine only depends on the abstract BrowserSession and
ElementHandle interfaces; PlaywrightBrowserSession is the concrete
implementation used by the CLI.
"""

from .base import BrowserConfig, BrowserError, BrowserSession, BrowserTimeoutError, ElementHandle
from .playwright_session import PlaywrightBrowserSession, PlaywrightElement, create_browser_session

__all__ = [
    # Interface
    "BrowserConfig",
    "BrowserError",
    "BrowserTimeoutError",
    "BrowserSession",
    "ElementHandle",
    # Playwright
    "PlaywrightBrowserSession",
    "PlaywrightElement",
    "create_browser_session",
]

"""Browser capability interface used by the playback engine.

The engine never creates or destroys browsers. It talks to a live page
through this interface, which keeps element resolution and dispatch
independent of the automation library underneath:

                      ┌─────────────────────────────┐
                      │       BrowserSession        │
                      │  (navigation, query, pages) │
                      └─────────────┬───────────────┘
                                    │ query(selector)
                                    ▼
                      ┌─────────────────────────────┐
                      │        ElementHandle        │
                      │ (click, type, select, eval) │
                      └─────────────────────────────┘
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

logger = structlog.get_logger()


class BrowserError(Exception):
    """Base exception for browser capability errors."""
    pass


class BrowserTimeoutError(BrowserError):
    """A browser operation did not finish within its timeout."""
    pass


@dataclass
class BrowserConfig:
    """Configuration for launching a browser."""

    headless: bool = False
    browser_type: str = "chromium"  # chromium, firefox, webkit
    viewport_width: Optional[int] = None  # None uses the window size
    viewport_height: Optional[int] = None
    user_agent: Optional[str] = None
    timeout_ms: int = 30000
    args: list[str] = field(default_factory=lambda: [
        "--start-maximized",
        "--disable-blink-features=AutomationControlled",
    ])


class ElementHandle(ABC):
    """A live element of the current page.

    Implementations wrap whatever the automation library returns for a DOM
    node; callers only rely on these operations.
    """

    @abstractmethod
    async def click(self, timeout_ms: Optional[int] = None) -> None:
        """Click the element."""
        pass

    @abstractmethod
    async def focus(self) -> None:
        """Give the element keyboard focus."""
        pass

    @abstractmethod
    async def press(self, key: str) -> None:
        """Press a key or key chord (e.g. ``Control+A``) on the element."""
        pass

    @abstractmethod
    async def type_text(self, text: str, delay_ms: int = 0) -> None:
        """Type text character by character."""
        pass

    @abstractmethod
    async def select_option(self, value: str) -> None:
        """Select the option with ``value`` in a <select>."""
        pass

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run ``script`` (a function taking the element and ``arg``)."""
        pass

    @abstractmethod
    async def tag_name(self) -> str:
        """Upper-case tag name of the element."""
        pass

    @abstractmethod
    async def is_checked(self) -> bool:
        """Checked state of a checkbox or radio."""
        pass


class BrowserSession(ABC):
    """A live browser with one current page.

    The current page may be replaced by ``use_latest_page`` when the old
    handle went stale; callers keep holding the session, not the page.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.log = logger.bind(component="browser", browser_type=self.config.browser_type)

    @abstractmethod
    async def current_url(self) -> str:
        """URL of the current page."""
        pass

    @abstractmethod
    async def goto(
        self,
        url: str,
        wait_until: str = "domcontentloaded",
        timeout_ms: Optional[int] = None,
    ) -> None:
        """Navigate the current page and wait for ``wait_until``.

        Raises:
            BrowserError: Navigation failed or timed out
        """
        pass

    @abstractmethod
    async def query(self, selector: str) -> Optional[ElementHandle]:
        """First element matching ``selector``, None when absent.

        Raises:
            BrowserError: The selector is invalid or the page is gone
        """
        pass

    @abstractmethod
    async def wait_for_selector(
        self,
        selector: str,
        timeout_ms: Optional[int] = None,
        visible: bool = True,
    ) -> bool:
        """Wait for ``selector`` to appear; False on timeout."""
        pass

    @abstractmethod
    async def click_at(self, x: float, y: float) -> None:
        """Mouse click at viewport coordinates."""
        pass

    @abstractmethod
    async def pages(self) -> list[Any]:
        """Currently open pages, oldest first."""
        pass

    @abstractmethod
    async def is_responsive(self) -> bool:
        """Liveness probe for the current page."""
        pass

    @abstractmethod
    async def use_latest_page(self) -> None:
        """Make the most recently opened page the current page."""
        pass

    @abstractmethod
    async def pause(self, ms: float) -> None:
        """Let the page settle for ``ms`` milliseconds."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the browser."""
        pass

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

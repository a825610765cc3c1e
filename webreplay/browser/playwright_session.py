"""Playwright implementation of the browser capability."""

from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webreplay.config import PlaybackSettings

from .base import BrowserConfig, BrowserError, BrowserSession, BrowserTimeoutError, ElementHandle


class PlaywrightElement(ElementHandle):
    """ElementHandle backed by a Playwright element handle."""

    def __init__(self, handle: Any):
        self._handle = handle

    async def click(self, timeout_ms: Optional[int] = None) -> None:
        try:
            await self._handle.click(timeout=timeout_ms)
        except PlaywrightError as e:
            raise BrowserError(f"click failed: {e}") from e

    async def focus(self) -> None:
        try:
            await self._handle.focus()
        except PlaywrightError as e:
            raise BrowserError(f"focus failed: {e}") from e

    async def press(self, key: str) -> None:
        try:
            await self._handle.press(key)
        except PlaywrightError as e:
            raise BrowserError(f"key press {key} failed: {e}") from e

    async def type_text(self, text: str, delay_ms: int = 0) -> None:
        try:
            await self._handle.type(text, delay=delay_ms)
        except PlaywrightError as e:
            raise BrowserError(f"typing failed: {e}") from e

    async def select_option(self, value: str) -> None:
        try:
            await self._handle.select_option(value)
        except PlaywrightError as e:
            raise BrowserError(f"select failed: {e}") from e

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._handle.evaluate(script, arg)
        except PlaywrightError as e:
            raise BrowserError(f"evaluate failed: {e}") from e

    async def tag_name(self) -> str:
        name = await self.evaluate("(el) => el.tagName")
        return str(name or "").upper()

    async def is_checked(self) -> bool:
        try:
            return await self._handle.is_checked()
        except PlaywrightError as e:
            raise BrowserError(f"checked state unavailable: {e}") from e


class PlaywrightBrowserSession(BrowserSession):
    """Playwright-based browser session.

    Usage:
        async with PlaywrightBrowserSession(BrowserConfig(headless=True)) as browser:
            await browser.goto("https://example.com")
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        super().__init__(config)
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def page(self) -> Any:
        """The current Playwright page."""
        if self._page is None:
            raise BrowserError("Browser not started")
        return self._page

    async def start(self) -> None:
        """Launch the browser and open the first page."""
        from playwright.async_api import async_playwright

        self.log.info("Launching browser", headless=self.config.headless)

        self._playwright = await async_playwright().start()
        browser_type = getattr(self._playwright, self.config.browser_type)
        try:
            self._browser = await browser_type.launch(
                headless=self.config.headless,
                args=self.config.args if self.config.browser_type == "chromium" else [],
            )
        except PlaywrightError as e:
            await self._playwright.stop()
            self._playwright = None
            raise BrowserError(f"could not launch {self.config.browser_type}: {e}") from e

        context_options: dict[str, Any] = {"user_agent": self.config.user_agent}
        if self.config.viewport_width and self.config.viewport_height:
            context_options["viewport"] = {
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            }
        else:
            context_options["no_viewport"] = True

        self._context = await self._browser.new_context(**context_options)
        self._context.set_default_timeout(self.config.timeout_ms)
        self._page = await self._context.new_page()
        self.log.info("Browser started")

    async def close(self) -> None:
        if self._browser:
            try:
                await self._browser.close()
            finally:
                self._browser = None
                self._context = None
                self._page = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.log.info("Browser closed")

    async def __aenter__(self) -> "PlaywrightBrowserSession":
        await self.start()
        return self

    async def current_url(self) -> str:
        return self.page.url

    async def goto(
        self,
        url: str,
        wait_until: str = "domcontentloaded",
        timeout_ms: Optional[int] = None,
    ) -> None:
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms or self.config.timeout_ms)
        except PlaywrightTimeoutError as e:
            raise BrowserTimeoutError(f"navigation to {url} timed out: {e}") from e
        except PlaywrightError as e:
            raise BrowserError(f"navigation to {url} failed: {e}") from e

    async def query(self, selector: str) -> Optional[ElementHandle]:
        try:
            handle = await self.page.query_selector(selector)
        except PlaywrightError as e:
            raise BrowserError(f"query {selector!r} failed: {e}") from e
        return PlaywrightElement(handle) if handle else None

    async def wait_for_selector(
        self,
        selector: str,
        timeout_ms: Optional[int] = None,
        visible: bool = True,
    ) -> bool:
        try:
            await self.page.wait_for_selector(
                selector,
                timeout=timeout_ms or self.config.timeout_ms,
                state="visible" if visible else "attached",
            )
            return True
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            self.log.debug("wait_for_selector failed", selector=selector, error=str(e))
            return False

    async def click_at(self, x: float, y: float) -> None:
        try:
            await self.page.mouse.click(x, y)
        except PlaywrightError as e:
            raise BrowserError(f"click at ({x}, {y}) failed: {e}") from e

    async def pages(self) -> list[Any]:
        if self._context is None:
            return []
        return list(self._context.pages)

    async def is_responsive(self) -> bool:
        if self._page is None or self._page.is_closed():
            return False
        try:
            await self._page.evaluate("() => document.readyState")
            return True
        except PlaywrightError:
            return False

    async def use_latest_page(self) -> None:
        pages = [p for p in await self.pages() if not p.is_closed()]
        if pages:
            self._page = pages[-1]
        elif self._context is not None:
            try:
                self._page = await self._context.new_page()
            except PlaywrightError as e:
                raise BrowserError(f"could not open a page: {e}") from e
        else:
            raise BrowserError("No browser context to acquire a page from")

    async def pause(self, ms: float) -> None:
        try:
            await self.page.wait_for_timeout(ms)
        except PlaywrightError as e:
            raise BrowserError(f"page closed while waiting: {e}") from e


def create_browser_session(settings: PlaybackSettings, headless: Optional[bool] = None) -> PlaywrightBrowserSession:
    """Build an unstarted Playwright session from settings."""
    config = BrowserConfig(
        headless=settings.headless if headless is None else headless,
        browser_type=settings.browser_type,
        viewport_width=settings.viewport_width,
        viewport_height=settings.viewport_height,
        user_agent=settings.user_agent,
    )
    return PlaywrightBrowserSession(config)

"""Element Resolver - map a recorded interaction to a live element.

Candidate selectors are tried in priority order and the first one that
matches an element in the current page wins:

    1. the recorded ``selector``
    2. ``#<id>``
    3. ``.<class>.<class>`` built from ``className``
    4. the bare tag name

Candidates that cannot be built (missing id, class or tag) or that repeat an
earlier selector are skipped. When no candidate matches, a click record
falls back to its recorded coordinates; every other kind is reported as
Unresolved.
"""

from typing import Optional, Union

import structlog

from webreplay.browser import BrowserError, BrowserSession, ElementHandle
from webreplay.recording import ClickRecord, ElementRecord

from .models import CoordinateTarget, ResolutionStrategy, ResolvedTarget, Unresolved

logger = structlog.get_logger()

DEFAULT_WAIT_TIMEOUT_MS = 5000


def candidate_selectors(record: ElementRecord) -> list[tuple[ResolutionStrategy, str]]:
    """Selectors for ``record`` in resolution priority order."""
    candidates: list[tuple[ResolutionStrategy, str]] = []

    if record.selector and record.selector.strip():
        candidates.append((ResolutionStrategy.SELECTOR, record.selector.strip()))

    if record.element_id and record.element_id.strip():
        candidates.append((ResolutionStrategy.ID, f"#{record.element_id.strip()}"))

    if record.class_name:
        classes = record.class_name.split()
        if classes:
            candidates.append((ResolutionStrategy.CLASS, "." + ".".join(classes)))

    if record.tag_name and record.tag_name.strip():
        candidates.append((ResolutionStrategy.TAG, record.tag_name.strip().lower()))

    # A selector equal to an earlier candidate would only repeat the same query
    unique: list[tuple[ResolutionStrategy, str]] = []
    for strategy, selector in candidates:
        if all(selector != seen for _, seen in unique):
            unique.append((strategy, selector))
    return unique


class ElementResolver:
    """Resolves recorded interactions against the current page.

    The resolver only reads the page. It holds the browser session rather
    than a page so that a page re-acquired after going stale is picked up.

    Example:
        resolver = ElementResolver(browser)
        target = await resolver.resolve(record)
        if isinstance(target, Unresolved):
            print(target.description)
    """

    def __init__(self, browser: BrowserSession, wait_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS):
        """Initialize the resolver.

        Args:
            browser: Live browser session to query
            wait_timeout_ms: Bounded wait for the primary selector to appear
        """
        self.browser = browser
        self.wait_timeout_ms = wait_timeout_ms
        self.log = logger.bind(component="element_resolver")

    async def resolve(
        self,
        record: ElementRecord,
        allow_coordinates: bool = True,
    ) -> Union[ResolvedTarget, CoordinateTarget, Unresolved]:
        """Resolve ``record`` to an element, a coordinate target or Unresolved.

        Args:
            record: The interaction to resolve
            allow_coordinates: Permit the coordinate fallback for click records
        """
        candidates = candidate_selectors(record)

        if candidates and candidates[0][0] == ResolutionStrategy.SELECTOR:
            await self._wait_for_primary(candidates[0][1])

        tried: list[str] = []
        for strategy, selector in candidates:
            tried.append(selector)
            element = await self._query(selector)
            if element is not None:
                self.log.debug("Resolved element", selector=selector, strategy=strategy.value)
                return ResolvedTarget(element=element, selector=selector, strategy=strategy)

        coordinates = record.coordinates if isinstance(record, ClickRecord) else None
        if allow_coordinates and coordinates is not None:
            self.log.debug(
                "Falling back to coordinates",
                selector=record.selector,
                x=coordinates.x,
                y=coordinates.y,
            )
            return CoordinateTarget(coordinates=coordinates)

        return Unresolved(selector=record.selector, tried=tried)

    async def _wait_for_primary(self, selector: str) -> None:
        # A timeout here is not fatal; the fallback candidates are still tried
        found = await self.browser.wait_for_selector(selector, timeout_ms=self.wait_timeout_ms)
        if not found:
            self.log.warning(
                "Element not found within timeout",
                selector=selector,
                timeout_ms=self.wait_timeout_ms,
            )

    async def _query(self, selector: str) -> Optional[ElementHandle]:
        try:
            return await self.browser.query(selector)
        except BrowserError as e:
            self.log.debug("Selector query failed", selector=selector, error=str(e))
            return None

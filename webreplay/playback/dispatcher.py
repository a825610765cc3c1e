"""Action Dispatcher - perform the browser effect of one recorded interaction.

Dispatch per interaction kind:

    navigation               navigate when the page is elsewhere
    click                    click element, or recorded coordinates
    input / text / search    focus, clear, type value key by key
    change / select-one      select option, or set value + change event
    submit                   form.submit() on a <form>
    checkbox                 click only when the state differs
    range                    set value + input and change events
    anything else            logged skip

Before every known kind the page handle is checked for liveness and
re-acquired when stale. Element-targeted kinds first navigate to the page
the event was recorded on when the browser is elsewhere.
"""

import time
from typing import Any, Awaitable, Callable, Optional

import structlog

from webreplay.browser import BrowserError, BrowserSession
from webreplay.config import PlaybackSettings
from webreplay.recording import (
    ChangeRecord,
    CheckboxRecord,
    ClickRecord,
    ElementRecord,
    InputRecord,
    InteractionRecord,
    InteractionType,
    NavigationRecord,
    RangeRecord,
    SubmitRecord,
)

from .errors import ActionFailureError, NavigationFailureError, UnresolvedTargetError
from .models import CoordinateTarget, EventOutcome, EventResult, ResolvedTarget, Unresolved
from .resolver import ElementResolver

logger = structlog.get_logger()

SET_VALUE_SCRIPT = """(el, args) => {
  el.value = args.value;
  for (const name of args.events) {
    el.dispatchEvent(new Event(name, { bubbles: true }));
  }
}"""

SUBMIT_SCRIPT = "(form) => form.submit()"

SELECT_TAG = "SELECT"
FORM_TAG = "FORM"


class ActionDispatcher:
    """Executes recorded interactions against a live browser session.

    Handlers return an EventResult for outcomes that are part of normal
    replay (performed, coordinate fallback, logged skip) and raise a
    PlaybackError subclass for recoverable failures; the controller folds
    those into the run report.

    Example:
        dispatcher = ActionDispatcher(browser, settings=get_settings())
        result = await dispatcher.dispatch(record, index=3)
    """

    def __init__(
        self,
        browser: BrowserSession,
        resolver: Optional[ElementResolver] = None,
        settings: Optional[PlaybackSettings] = None,
    ):
        """Initialize the dispatcher.

        Args:
            browser: Live browser session to act on
            resolver: Element resolver (built from settings when omitted)
            settings: Timeouts, pauses and typing delay
        """
        self.browser = browser
        self.settings = settings or PlaybackSettings()
        self.resolver = resolver or ElementResolver(
            browser,
            wait_timeout_ms=self.settings.selector_wait_timeout_ms,
        )
        self.log = logger.bind(component="action_dispatcher")

        self._handlers: dict[InteractionType, Callable[[Any, int], Awaitable[EventResult]]] = {
            InteractionType.NAVIGATION: self._play_navigation,
            InteractionType.CLICK: self._play_click,
            InteractionType.INPUT: self._play_input,
            InteractionType.TEXT: self._play_input,
            InteractionType.SEARCH: self._play_input,
            InteractionType.CHANGE: self._play_change,
            InteractionType.SELECT_ONE: self._play_change,
            InteractionType.SUBMIT: self._play_submit,
            InteractionType.CHECKBOX: self._play_checkbox,
            InteractionType.RANGE: self._play_range,
        }

    async def dispatch(self, record: InteractionRecord, index: int) -> EventResult:
        """Replay one interaction.

        Args:
            record: The interaction to replay
            index: Position of the interaction in the recording

        Returns:
            EventResult describing what was done

        Raises:
            UnresolvedTargetError: change/submit/checkbox/range target not found
            ActionFailureError: The browser action raised
        """
        start = time.time()
        kind = record.interaction_type
        if kind is None:
            self.log.info("Skipping unsupported interaction type", index=index + 1, kind=record.kind)
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.SKIPPED,
                reason=f"unsupported interaction type: {record.kind}",
            )

        await self.ensure_page_live(index, record.kind)

        navigated = False
        navigation_error = None
        if record.is_element_targeted and record.url:
            try:
                navigated = await self._navigate_if_needed(
                    record.url, self.settings.implicit_navigation_pause_ms, index, record.kind
                )
            except NavigationFailureError as e:
                navigation_error = str(e)
                self.log.warning("Navigation failed, continuing with current page", index=index + 1, error=str(e))

        result = await self._handlers[kind](record, index)
        result.navigated = navigated
        if navigation_error:
            result.data["navigation_error"] = navigation_error
        result.duration_ms = int((time.time() - start) * 1000)
        return result

    async def ensure_page_live(self, index: int, kind: str) -> None:
        """Re-acquire the most recent page when the current one went stale."""
        if await self.browser.is_responsive():
            return

        self.log.info("Refreshing page reference", index=index + 1)
        try:
            await self.browser.use_latest_page()
        except BrowserError as e:
            raise ActionFailureError(f"no live page available: {e}", index=index, kind=kind) from e

    async def _navigate_if_needed(self, url: str, pause_ms: int, index: int, kind: str) -> bool:
        current = await self.browser.current_url()
        if current == url:
            return False

        self.log.info("Navigating", index=index + 1, url=url, current_url=current)
        try:
            await self.browser.goto(
                url,
                wait_until="domcontentloaded",
                timeout_ms=self.settings.navigation_timeout_ms,
            )
        except BrowserError as e:
            raise NavigationFailureError(f"navigation to {url} failed: {e}", index=index, kind=kind) from e

        # Let dynamic content settle
        await self.browser.pause(pause_ms)
        return True

    async def _perform(self, description: str, action: Awaitable[Any], index: int, kind: str) -> Any:
        try:
            return await action
        except BrowserError as e:
            raise ActionFailureError(f"{description} failed: {e}", index=index, kind=kind) from e

    async def _require_element(self, record: ElementRecord, index: int) -> ResolvedTarget:
        target = await self.resolver.resolve(record, allow_coordinates=False)
        if isinstance(target, ResolvedTarget):
            return target
        description = target.description if isinstance(target, Unresolved) else "no element target"
        raise UnresolvedTargetError(description, selector=record.selector, index=index, kind=record.kind)

    async def _tag_of(self, target: ResolvedTarget, record: ElementRecord) -> str:
        try:
            return (await target.element.tag_name()).upper()
        except BrowserError:
            return (record.tag_name or "").upper()

    # ------------------------------------------------------------------
    # Per-kind handlers
    # ------------------------------------------------------------------

    async def _play_navigation(self, record: NavigationRecord, index: int) -> EventResult:
        if not record.url:
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.SKIPPED,
                reason="navigation without url",
            )

        try:
            navigated = await self._navigate_if_needed(
                record.url, self.settings.explicit_navigation_pause_ms, index, record.kind
            )
        except NavigationFailureError as e:
            self.log.warning("Navigation failed", index=index + 1, url=record.url, error=str(e))
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.FAILED,
                target=record.url,
                reason=str(e),
            )

        if navigated:
            self.log.info("Navigated", index=index + 1, url=record.url)
        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.APPLIED,
            target=record.url,
            reason=None if navigated else "already on page",
            data={"navigated": navigated},
        )

    async def _play_click(self, record: ClickRecord, index: int) -> EventResult:
        target = await self.resolver.resolve(record)

        if isinstance(target, ResolvedTarget):
            await self._perform(
                f"click on {target.selector}",
                target.element.click(timeout_ms=self.settings.click_timeout_ms),
                index,
                record.kind,
            )
            self.log.info("Clicked", index=index + 1, selector=target.selector, strategy=target.strategy.value)
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.APPLIED,
                target=target.selector,
                strategy=target.strategy,
            )

        if isinstance(target, CoordinateTarget):
            x, y = target.coordinates.x, target.coordinates.y
            await self._perform(f"click at ({x}, {y})", self.browser.click_at(x, y), index, record.kind)
            self.log.info("Clicked at coordinates", index=index + 1, x=x, y=y)
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.FALLBACK,
                target=f"({x:g}, {y:g})",
                strategy=target.strategy,
            )

        self.log.info(
            "Could not click element",
            index=index + 1,
            selector=record.selector,
            reason=target.description,
        )
        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.SKIPPED,
            reason=target.description,
        )

    async def _play_input(self, record: InputRecord, index: int) -> EventResult:
        target = await self.resolver.resolve(record, allow_coordinates=False)
        if not isinstance(target, ResolvedTarget):
            reason = target.description if isinstance(target, Unresolved) else "no element target"
            self.log.info(
                "Could not type in element", index=index + 1, selector=record.selector, reason=reason
            )
            return EventResult(index=index, kind=record.kind, outcome=EventOutcome.SKIPPED, reason=reason)

        element = target.element
        value = "" if record.value is None else str(record.value)
        try:
            await element.focus()
            await element.press(self.settings.select_all_shortcut)
            await element.press("Backspace")
            if value:
                await element.type_text(value, delay_ms=self.settings.type_delay_ms)
        except BrowserError as e:
            self.log.info("Could not type in element", index=index + 1, selector=target.selector, error=str(e))
            return EventResult(
                index=index,
                kind=record.kind,
                outcome=EventOutcome.SKIPPED,
                target=target.selector,
                strategy=target.strategy,
                reason=f"typing failed: {e}",
            )

        self.log.info("Typed", index=index + 1, selector=target.selector, length=len(value))
        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.APPLIED,
            target=target.selector,
            strategy=target.strategy,
            data={"value": value},
        )

    async def _play_change(self, record: ChangeRecord, index: int) -> EventResult:
        target = await self._require_element(record, index)
        value = "" if record.value is None else str(record.value)

        if await self._tag_of(target, record) == SELECT_TAG:
            method = "select_option"
            await self._perform(
                f"select {value!r} in {target.selector}",
                target.element.select_option(value),
                index,
                record.kind,
            )
            self.log.info("Selected", index=index + 1, selector=target.selector, value=value)
        else:
            method = "set_value"
            await self._perform(
                f"set value of {target.selector}",
                target.element.evaluate(SET_VALUE_SCRIPT, {"value": value, "events": ["change"]}),
                index,
                record.kind,
            )
            self.log.info("Changed value", index=index + 1, selector=target.selector, value=value)

        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.APPLIED,
            target=target.selector,
            strategy=target.strategy,
            data={"method": method, "value": value},
        )

    async def _play_submit(self, record: SubmitRecord, index: int) -> EventResult:
        target = await self._require_element(record, index)

        tag = await self._tag_of(target, record)
        if tag != FORM_TAG:
            raise ActionFailureError(
                f"cannot submit {target.selector}: element is <{tag.lower() or '?'}>, not a form",
                index=index,
                kind=record.kind,
            )

        await self._perform(
            f"submit of {target.selector}",
            target.element.evaluate(SUBMIT_SCRIPT),
            index,
            record.kind,
        )
        self.log.info("Submitted form", index=index + 1, selector=target.selector)
        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.APPLIED,
            target=target.selector,
            strategy=target.strategy,
        )

    async def _play_checkbox(self, record: CheckboxRecord, index: int) -> EventResult:
        target = await self._require_element(record, index)

        current = await self._perform(
            f"read checked state of {target.selector}",
            target.element.is_checked(),
            index,
            record.kind,
        )
        desired = record.desired_state
        toggled = bool(current) != desired

        if toggled:
            await self._perform(
                f"toggle of {target.selector}",
                target.element.click(timeout_ms=self.settings.click_timeout_ms),
                index,
                record.kind,
            )
            self.log.info(
                "Checked" if desired else "Unchecked",
                index=index + 1,
                selector=target.selector,
            )

        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.APPLIED,
            target=target.selector,
            strategy=target.strategy,
            reason=None if toggled else "already in recorded state",
            data={"checked": desired, "toggled": toggled},
        )

    async def _play_range(self, record: RangeRecord, index: int) -> EventResult:
        target = await self._require_element(record, index)
        value = "" if record.value is None else str(record.value)

        # Sliders need both events to update bound state
        await self._perform(
            f"set range {target.selector}",
            target.element.evaluate(SET_VALUE_SCRIPT, {"value": value, "events": ["input", "change"]}),
            index,
            record.kind,
        )
        self.log.info("Set range", index=index + 1, selector=target.selector, value=value)
        return EventResult(
            index=index,
            kind=record.kind,
            outcome=EventOutcome.APPLIED,
            target=target.selector,
            strategy=target.strategy,
            data={"value": value},
        )

# ================================================================================
# Element Actions Module
# ================================================================================
#
# This module provides the element interaction facade used by page objects and
# tests: every operation is "locate -> wait for state -> act" over the current
# BrowserSession, with Allure step reporting and loguru logging.
#
# Key Features:
#   - Visibility / clickability / presence / invisibility waits
#   - Click with scripted fallback, retrying click
#   - Typing, dropdown selection, pointer gestures
#   - Frame, window and native dialog handling
#   - Page-load polling, script execution, screenshots
#
# Timeouts are in seconds. Playwright timeouts surface as WaitTimeoutError,
# other Playwright failures as DriverError.
#
# ================================================================================

import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar, Union

import allure
from loguru import logger
from playwright.sync_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from webqa_tools.common import (
    ActionResult,
    DriverError,
    WaitTimeoutError,
    ensure_directory,
    get_config,
)

from .driver_factory import BrowserSession, DialogRecord
from .locators import By, LocatorLike, to_selector


T = TypeVar("T")

# Interval for custom polling loops (window switching, page load, dialogs)
POLL_INTERVAL = 0.2

JS_CLICK = "el => el.click()"
JS_SCROLL_INTO_VIEW = "el => el.scrollIntoView(true)"
JS_IS_SELECTED = "el => Boolean(el.checked || el.selected)"
JS_READY_STATE = "() => document.readyState"
JS_RUN_SCRIPT = "([body, args]) => new Function(body).apply(null, args)"
JS_READ_PROPERTY = """(el, name) => {
    const value = el[name];
    if (typeof value === 'boolean') return value ? 'true' : null;
    if (value !== undefined && value !== null
            && typeof value !== 'object' && typeof value !== 'function') {
        return String(value);
    }
    return el.getAttribute(name);
}"""
JS_SUBMIT = """el => {
    const form = el.tagName === 'FORM' ? el : el.form;
    if (!form) throw new Error('Element is not inside a form');
    if (form.requestSubmit) form.requestSubmit(); else form.submit();
}"""


def _first_line(error: PlaywrightError) -> str:
    lines = (error.message or str(error)).strip().splitlines()
    return lines[0] if lines else repr(error)


def driver_action(action: str):
    """
    Decorator translating Playwright failures into the toolkit's errors.

    The first positional argument after ``self`` (if any) is reported as the
    locator.
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            locator = args[0] if args else kwargs.get("locator")
            try:
                return func(self, *args, **kwargs)
            except PlaywrightTimeoutError as e:
                raise WaitTimeoutError(
                    _first_line(e), action=action, locator=locator, cause=e
                ) from e
            except PlaywrightError as e:
                raise DriverError(
                    _first_line(e), action=action, locator=locator, cause=e
                ) from e

        return wrapper
    return decorator


class ElementActions:
    """
    Element interaction facade over a BrowserSession.

    Example:
        actions = ElementActions(session)
        actions.open("https://example.com")
        actions.type(By.id("username"), "testuser")
        actions.safe_click(By.css("button[type='submit']"))
    """

    def __init__(self, session: BrowserSession, default_timeout: Optional[float] = None):
        """
        Initialize ElementActions over a browser session.

        Args:
            session: Live browser session
            default_timeout: Default wait in seconds (config ui.default_timeout, 10)
        """
        self.session = session
        self.default_timeout = float(
            default_timeout if default_timeout is not None
            else get_config("ui.default_timeout", 10)
        )

    @property
    def page(self) -> Page:
        """Current window."""
        return self.session.page

    def _timeout(self, timeout: Optional[float]) -> float:
        return self.default_timeout if timeout is None else timeout

    def _ms(self, timeout: Optional[float]) -> float:
        return self._timeout(timeout) * 1000

    def _locate(self, locator: LocatorLike) -> Locator:
        """Resolve a locator against the current scope (first match)."""
        if isinstance(locator, (By, str)):
            return self.session.locate(to_selector(locator)).first
        return locator

    # =========================================================================
    # Navigation
    # =========================================================================

    @driver_action("open")
    @allure.step("Open {url}")
    def open(self, url: str) -> None:
        logger.info(f"Opening: {url}")
        self.page.goto(url)

    @driver_action("navigate")
    @allure.step("Navigate to {url}")
    def navigate_to(self, url: str) -> None:
        logger.info(f"Navigating to: {url}")
        self.page.goto(url)

    def get_current_url(self) -> str:
        return self.page.url

    @driver_action("title")
    def get_title(self) -> str:
        return self.page.title()

    # =========================================================================
    # Waits
    # =========================================================================

    @driver_action("wait_for_visibility")
    def wait_for_visibility(self, locator: LocatorLike, timeout: Optional[float] = None) -> Locator:
        """
        Wait until the element is visible.

        Returns:
            The located element

        Raises:
            WaitTimeoutError: the element did not become visible in time
        """
        element = self._locate(locator)
        element.wait_for(state="visible", timeout=self._ms(timeout))
        return element

    @driver_action("wait_for_clickable")
    def wait_for_clickable(self, locator: LocatorLike, timeout: Optional[float] = None) -> Locator:
        """Wait until the element is visible and enabled."""
        timeout = self._timeout(timeout)
        deadline = time.monotonic() + timeout
        element = self.wait_for_visibility(locator, timeout)
        self.fluent_wait(
            element.is_enabled,
            max(deadline - time.monotonic(), 0),
            message=f"{locator} is not clickable after {timeout}s",
        )
        return element

    @driver_action("wait_for_presence")
    def wait_for_presence(self, locator: LocatorLike, timeout: Optional[float] = None) -> Locator:
        """Wait until the element is attached to the DOM (visible or not)."""
        element = self._locate(locator)
        element.wait_for(state="attached", timeout=self._ms(timeout))
        return element

    @driver_action("wait_for_invisibility")
    def wait_for_invisibility(self, locator: LocatorLike, timeout: Optional[float] = None) -> bool:
        """Wait until the element is hidden or gone."""
        self._locate(locator).wait_for(state="hidden", timeout=self._ms(timeout))
        return True

    @driver_action("fluent_wait")
    def fluent_wait(
        self,
        condition: Callable[[], T],
        timeout: Optional[float] = None,
        poll: float = POLL_INTERVAL,
        message: Optional[str] = None,
    ) -> T:
        """
        Poll ``condition`` until it returns a truthy value.

        Args:
            condition: Zero-argument callable
            timeout: Seconds to keep polling
            poll: Seconds between polls (capped at the remaining time)
            message: Error message on timeout

        Returns:
            The first truthy value

        Raises:
            WaitTimeoutError: no truthy value before the timeout
        """
        timeout = self._timeout(timeout)
        deadline = time.monotonic() + timeout
        while True:
            value = condition()
            if value:
                return value
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise WaitTimeoutError(
                    message or f"Condition not met within {timeout}s", action="fluent_wait"
                )
            self.session.pause(min(poll, remaining))

    @allure.step("Wait for page load")
    def wait_for_page_load(self, timeout: Optional[float] = None) -> bool:
        """
        Poll document.readyState until it is "complete".

        Returns:
            True if the page finished loading before the timeout
        """
        def ready() -> bool:
            try:
                return self.session.evaluation_target().evaluate(JS_READY_STATE) == "complete"
            except PlaywrightError:
                # context replaced mid-navigation
                return False

        try:
            self.fluent_wait(ready, timeout, POLL_INTERVAL)
            return True
        except WaitTimeoutError:
            logger.warning(f"Page not loaded after {self._timeout(timeout)}s")
            return False

    # =========================================================================
    # Clicks
    # =========================================================================

    @driver_action("click")
    @allure.step("Click {locator}")
    def click(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        logger.info(f"Clicking element: {locator}")
        self.wait_for_clickable(locator, timeout).click(timeout=self._ms(timeout))
        logger.debug(f"Successfully clicked: {locator}")

    @driver_action("safe_click")
    @allure.step("Safe click {locator}")
    def safe_click(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        """
        Native click, falling back once to a scripted DOM click.

        The scripted click only runs after the native click failed.
        """
        try:
            self.click(locator, timeout)
        except (DriverError, WaitTimeoutError) as e:
            logger.warning(f"Native click on {locator} failed ({e.message}); using scripted click")
            self.wait_for_visibility(locator, timeout).evaluate(JS_CLICK)

    @allure.step("Retrying click {locator}")
    def retrying_click(
        self,
        locator: LocatorLike,
        attempts: int = 3,
        interval: float = 0.5,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Click up to ``attempts`` times, pausing ``interval`` seconds between failures.

        Returns:
            True as soon as one attempt succeeds, False when all failed
        """
        for attempt in range(1, attempts + 1):
            try:
                self.click(locator, timeout)
                return True
            except (DriverError, WaitTimeoutError) as e:
                logger.warning(f"Click attempt {attempt}/{attempts} on {locator} failed: {e.message}")
                if attempt < attempts:
                    self.session.pause(interval)

        logger.error(f"All {attempts} click attempts failed for {locator}")
        return False

    @driver_action("double_click")
    @allure.step("Double click {locator}")
    def double_click(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).dblclick(timeout=self._ms(timeout))

    @driver_action("right_click")
    @allure.step("Right click {locator}")
    def right_click(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).click(button="right", timeout=self._ms(timeout))

    @driver_action("hover")
    @allure.step("Hover {locator}")
    def hover(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        logger.info(f"Hovering over: {locator}")
        self.wait_for_visibility(locator, timeout).hover(timeout=self._ms(timeout))

    @driver_action("drag_and_drop")
    @allure.step("Drag {source} onto {target}")
    def drag_and_drop(
        self,
        source: LocatorLike,
        target: LocatorLike,
        timeout: Optional[float] = None,
    ) -> None:
        logger.info(f"Dragging from {source} to {target}")
        source_element = self.wait_for_visibility(source, timeout)
        target_element = self.wait_for_visibility(target, timeout)
        source_element.drag_to(target_element, timeout=self._ms(timeout))

    # =========================================================================
    # Input
    # =========================================================================

    @driver_action("type")
    @allure.step("Type into {locator}")
    def type(self, locator: LocatorLike, text: str, timeout: Optional[float] = None) -> None:
        """Replace the field's content with ``text``."""
        logger.info(f"Typing into: {locator} '{text[:50]}'")
        element = self.wait_for_visibility(locator, timeout)
        element.clear(timeout=self._ms(timeout))
        element.fill(text, timeout=self._ms(timeout))

    @driver_action("clear")
    @allure.step("Clear {locator}")
    def clear(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).clear(timeout=self._ms(timeout))

    @driver_action("submit")
    @allure.step("Submit form of {locator}")
    def submit(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).evaluate(JS_SUBMIT)

    @driver_action("select")
    @allure.step("Select '{text}' in {locator}")
    def select_by_visible_text(self, locator: LocatorLike, text: str, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).select_option(label=text, timeout=self._ms(timeout))

    @driver_action("select")
    @allure.step("Select value '{value}' in {locator}")
    def select_by_value(self, locator: LocatorLike, value: str, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).select_option(value=value, timeout=self._ms(timeout))

    @driver_action("select")
    @allure.step("Select index {index} in {locator}")
    def select_by_index(self, locator: LocatorLike, index: int, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).select_option(index=index, timeout=self._ms(timeout))

    # =========================================================================
    # Reads
    # =========================================================================

    @driver_action("get_text")
    def get_text(self, locator: LocatorLike, timeout: Optional[float] = None) -> str:
        """Visible text of the element."""
        text = self.wait_for_visibility(locator, timeout).inner_text(timeout=self._ms(timeout))
        logger.debug(f"Got text from {locator}: '{text}'")
        return text

    @driver_action("get_attribute")
    def get_attribute(
        self,
        locator: LocatorLike,
        attribute: str,
        timeout: Optional[float] = None,
    ) -> Optional[str]:
        """
        Current value of a property, else of the HTML attribute.

        ``value`` therefore reflects what was typed, and boolean properties
        read as "true" or None.
        """
        return self.wait_for_visibility(locator, timeout).evaluate(JS_READ_PROPERTY, attribute)

    def is_displayed(self, locator: LocatorLike, timeout: Optional[float] = None) -> bool:
        try:
            return self.wait_for_visibility(locator, timeout).is_visible()
        except (DriverError, WaitTimeoutError):
            return False

    def is_enabled(self, locator: LocatorLike, timeout: Optional[float] = None) -> bool:
        try:
            return self.wait_for_visibility(locator, timeout).is_enabled()
        except (DriverError, WaitTimeoutError):
            return False

    def is_selected(self, locator: LocatorLike, timeout: Optional[float] = None) -> bool:
        """Checked checkbox/radio or selected option."""
        try:
            return bool(self.wait_for_visibility(locator, timeout).evaluate(JS_IS_SELECTED))
        except (DriverError, WaitTimeoutError):
            return False

    def is_element_present(self, locator: LocatorLike) -> bool:
        """Non-waiting existence check. Never raises."""
        try:
            return self._locate(locator).count() > 0
        except PlaywrightError:
            return False

    # =========================================================================
    # Frames and Windows
    # =========================================================================

    @driver_action("switch_to_frame")
    @allure.step("Switch to frame {frame}")
    def switch_to_frame(self, frame: Union[By, str, int], timeout: Optional[float] = None) -> None:
        """
        Scope subsequent lookups into a frame.

        Args:
            frame: Frame element locator, or index among the current scope's frames
        """
        if isinstance(frame, int):
            self.session.enter_frame(frame)
        else:
            self.wait_for_presence(frame, timeout)
            self.session.enter_frame(to_selector(frame))

    def switch_to_default_content(self) -> None:
        self.session.leave_frames()

    def get_window_handles(self) -> List[Page]:
        """All open windows of the session."""
        return list(self.session.context.pages)

    @driver_action("switch_to_window")
    @allure.step("Switch to window titled '{title}'")
    def switch_to_window_by_title(self, title: str, timeout: Optional[float] = None) -> bool:
        """
        Poll every 200ms, visiting each open window, until one has ``title``.

        Returns:
            True with the session switched into the matching window. False on
            timeout, with the session left in the last window visited.
        """
        timeout = self._timeout(timeout)
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            for page in list(self.session.context.pages):
                self.session.switch_to_page(page)
                if page.title() == title:
                    logger.debug(f"Switched to window '{title}'")
                    return True
            remaining = deadline - time.monotonic()
            if remaining > 0:
                self.session.pause(min(POLL_INTERVAL, remaining))

        logger.debug(f"No window titled '{title}' after {timeout}s")
        return False

    # =========================================================================
    # Dialogs
    # =========================================================================

    def _wait_for_dialog(self, timeout: Optional[float], action: Optional[str] = None) -> DialogRecord:
        timeout = self._timeout(timeout)
        if action and not self.session.dialogs:
            self.session.arm_dialog(action)
        deadline = time.monotonic() + timeout
        try:
            while not self.session.dialogs:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise WaitTimeoutError(f"No alert present after {timeout}s", action="alert")
                self.session.pause(min(POLL_INTERVAL, remaining))
        except Exception:
            self.session.arm_dialog(None)
            raise
        return self.session.dialogs[0]

    def _resolve_dialog(self, action: str, timeout: Optional[float]) -> str:
        record = self._wait_for_dialog(timeout, action)
        self.session.dialogs.pop(0)
        if record.action != action:
            raise DriverError(
                f"{record.type} '{record.message}' was already resolved with {record.action} "
                f"before {action}_alert was called; use expect_dialog('{action}') before the trigger",
                action="alert",
            )
        return record.message

    def expect_dialog(self, action: str = "accept") -> None:
        """
        Choose how the next dialog is resolved, before the action that opens it.

        Dialogs that open synchronously (``alert()`` in a click handler) are
        resolved as soon as they appear, so a caller that wants to dismiss one
        arms the session first:

            actions.expect_dialog("dismiss")
            actions.click(DELETE_BUTTON)
            actions.dismiss_alert()
        """
        if action not in ("accept", "dismiss"):
            raise ValueError(f"Unknown dialog action: {action}")
        self.session.arm_dialog(action)

    @allure.step("Accept alert")
    def accept_alert(self, timeout: Optional[float] = None) -> str:
        """
        Wait for a native dialog and accept it.

        Returns:
            The dialog message
        """
        return self._resolve_dialog("accept", timeout)

    @allure.step("Dismiss alert")
    def dismiss_alert(self, timeout: Optional[float] = None) -> str:
        return self._resolve_dialog("dismiss", timeout)

    def get_alert_text(self, timeout: Optional[float] = None) -> str:
        """Message of the pending dialog; the dialog stays queued."""
        return self._wait_for_dialog(timeout).message

    # =========================================================================
    # Scripts, Scrolling, Screenshots
    # =========================================================================

    @driver_action("scroll_into_view")
    def scroll_into_view(self, locator: LocatorLike, timeout: Optional[float] = None) -> None:
        self.wait_for_visibility(locator, timeout).evaluate(JS_SCROLL_INTO_VIEW)

    @driver_action("execute_script")
    def execute_script(self, script: str, *args: Any) -> Any:
        """
        Run a script body in the current scope.

        The body sees its arguments as ``arguments[0..n]`` and uses
        ``return`` to hand back a value. Locators are passed as elements.
        """
        prepared = [arg.element_handle() if isinstance(arg, Locator) else arg for arg in args]
        return self.session.evaluation_target().evaluate(JS_RUN_SCRIPT, [script, prepared])

    @allure.step("Take screenshot: {path}")
    def take_screenshot(self, path: Union[str, Path]) -> ActionResult:
        """
        Capture the viewport to ``path``, creating parent directories.

        Never raises; a failed capture or write is returned and logged.
        """
        target = Path(path)
        try:
            ensure_directory(target.parent)
            self.page.screenshot(path=str(target))
        except (PlaywrightError, OSError) as e:
            logger.warning(f"Screenshot to {target} skipped: {e}")
            return ActionResult.failure(e)

        logger.debug(f"Screenshot saved: {target}")
        return ActionResult.success(target)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @driver_action("close")
    def close(self) -> None:
        """Close the current window."""
        self.session.close_window()

    def quit(self) -> None:
        """Terminate the whole browser session."""
        self.session.quit()


__all__ = [
    "ElementActions",
    "POLL_INTERVAL",
    "driver_action",
]

"""
================================================================================
Driver Factory
================================================================================

Browser session lifecycle management for UI automation.

Features:
    - One browser session per factory, created on first use or explicit init
    - Idempotent init / quit guarded by a lock
    - Browser selection from pytest options, environment or config
    - Fixed window geometry, implicit element wait, best-effort maximize
    - Native dialog bookkeeping for alert handling

Usage:
    session = driver_factory.init("chromium", headless=True)
    actions = ElementActions(session)
    ...
    driver_factory.quit()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Dialog,
    Error as PlaywrightError,
    FrameLocator,
    Page,
    Playwright,
    sync_playwright,
)

from webqa_tools.common import (
    ActionResult,
    DriverError,
    InterruptedWait,
    get_config,
    parse_bool,
    resolve_setting,
)


class BrowserKind(str, Enum):
    """Supported browser engines."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"

    @classmethod
    def parse(cls, value: Union["BrowserKind", str, None]) -> "BrowserKind":
        """
        Map a user-supplied browser name to an engine.

        ``firefox`` / ``ff`` select Firefox; anything else, including blank,
        selects Chromium.
        """
        if isinstance(value, BrowserKind):
            return value
        name = (value or "").strip().lower()
        if name in ("firefox", "ff"):
            return cls.FIREFOX
        return cls.CHROMIUM


@dataclass
class DialogRecord:
    """A native dialog observed by the session and how it was resolved."""
    type: str
    message: str
    action: str


class BrowserSession:
    """
    One live browser: driver, browser, context, current window and scope.

    The *scope* is where element lookups happen: the current page, or a
    frame inside it after ``enter_frame``.

    Dialogs: Playwright stalls the triggering action until a dialog is
    resolved, so every dialog is resolved as soon as it opens. A dialog that
    opens while a resolver is armed (see ``arm_dialog``) gets the armed
    action; otherwise the session default action applies. Either way the
    dialog is queued in ``dialogs`` until a caller claims it.
    """

    DEFAULT_LAUNCH_ARGS: List[str] = [
        "--disable-gpu",
        "--window-size=1920,1080",
        "--ignore-certificate-errors",
    ]

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        kind: BrowserKind,
        headless: bool,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        implicit_wait: Optional[float] = None,
        dialog_action: Optional[str] = None,
    ):
        """
        Wrap already-launched Playwright objects.

        Args:
            kind: Browser engine
            headless: Whether the browser runs headless
            playwright: Running Playwright driver
            browser: Launched browser
            context: Browser context holding the windows
            page: Initial window
            implicit_wait: Default element wait in seconds (config ui.implicit_wait)
            dialog_action: "accept" or "dismiss" for unclaimed dialogs
        """
        self.kind = kind
        self.headless = headless
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self.scope: Union[Page, FrameLocator] = page
        self.implicit_wait = float(
            implicit_wait if implicit_wait is not None else get_config("ui.implicit_wait", 5)
        )
        self.default_dialog_action = dialog_action or get_config("ui.dialog_action", "accept")
        self.dialogs: List[DialogRecord] = []
        self._armed_dialog_action: Optional[str] = None
        self._closed = False

        self.context.set_default_timeout(self.implicit_wait * 1000)
        self.context.on("dialog", self._on_dialog)

    @classmethod
    def launch(cls, kind: BrowserKind, headless: bool) -> "BrowserSession":
        """Start Playwright and launch a browser with a single window."""
        playwright = sync_playwright().start()
        try:
            if kind is BrowserKind.FIREFOX:
                browser = playwright.firefox.launch(headless=headless)
            else:
                browser = playwright.chromium.launch(
                    headless=headless,
                    args=list(cls.DEFAULT_LAUNCH_ARGS),
                )
            context = browser.new_context(**cls.DEFAULT_CONTEXT_OPTIONS)
            page = context.new_page()
        except Exception:
            playwright.stop()
            raise

        logger.debug(f"Browser started: {kind.value} (headless={headless})")
        return cls(kind, headless, playwright, browser, context, page)

    @property
    def is_closed(self) -> bool:
        return self._closed

    # =========================================================================
    # Windows and Frames
    # =========================================================================

    def switch_to_page(self, page: Page) -> None:
        """Make ``page`` the current window; lookups restart at its top document."""
        self.page = page
        self.scope = page

    def close_window(self) -> None:
        """Close the current window and fall back to the first remaining one."""
        closing = self.page
        closing.close()
        remaining = [p for p in self.context.pages if p is not closing]
        if remaining:
            self.switch_to_page(remaining[0])

    def enter_frame(self, frame: Union[str, int]) -> None:
        """Scope lookups into a child frame, by selector or by index."""
        if isinstance(frame, int):
            self.scope = self.scope.frame_locator("iframe, frame").nth(frame)
        else:
            self.scope = self.scope.frame_locator(frame).first

    def leave_frames(self) -> None:
        self.scope = self.page

    def locate(self, selector: str):
        """Locator for ``selector`` inside the current scope."""
        return self.scope.locator(selector)

    def evaluation_target(self):
        """Page or Frame on which scripts run for the current scope."""
        if isinstance(self.scope, FrameLocator):
            frame = self.scope.owner.element_handle().content_frame()
            if frame is None:
                raise DriverError("Current frame is not attached", action="evaluate")
            return frame
        return self.page

    # =========================================================================
    # Dialogs
    # =========================================================================

    def arm_dialog(self, action: Optional[str]) -> None:
        """Resolve the next dialog with ``action`` instead of the default."""
        self._armed_dialog_action = action

    def _on_dialog(self, dialog: Dialog) -> None:
        action = self._armed_dialog_action or self.default_dialog_action
        self._armed_dialog_action = None
        record = DialogRecord(type=dialog.type, message=dialog.message, action=action)
        try:
            if action == "dismiss":
                dialog.dismiss()
            else:
                dialog.accept()
        except PlaywrightError as e:
            logger.warning(f"Could not {action} {dialog.type} dialog: {e}")
        self.dialogs.append(record)
        logger.debug(f"Dialog {record.type} '{record.message}' resolved with {action}")

    # =========================================================================
    # Misc
    # =========================================================================

    def pause(self, seconds: float) -> None:
        """
        Sleep while letting the driver dispatch events (dialogs, popups).

        Raises:
            InterruptedWait: the window went away during the pause
        """
        if seconds <= 0:
            return
        try:
            self.page.wait_for_timeout(seconds * 1000)
        except PlaywrightError as e:
            raise InterruptedWait(
                f"Pause of {seconds:.2f}s interrupted: {e}", action="pause", cause=e
            ) from e

    def maximize(self) -> ActionResult:
        """
        Resize the viewport to the screen's available area.

        Some headless environments cannot report a screen; the failure is
        returned, not raised.
        """
        try:
            size = self.page.evaluate(
                "() => ({width: window.screen.availWidth, height: window.screen.availHeight})"
            )
            if not size or not size.get("width") or not size.get("height"):
                raise DriverError("Screen size unavailable", action="maximize")
            self.page.set_viewport_size(size)
        except (PlaywrightError, DriverError) as e:
            return ActionResult.failure(e)
        return ActionResult.success(size)

    def quit(self) -> None:
        """Close context and browser, then stop the driver. Safe to repeat."""
        if self._closed:
            return
        self._closed = True
        try:
            self.context.close()
            self.browser.close()
        finally:
            self.playwright.stop()
        logger.debug("Browser closed")


SessionBuilder = Callable[[BrowserKind, bool], BrowserSession]


class DriverFactory:
    """
    Owns at most one BrowserSession.

    ``init`` is idempotent, ``get`` creates lazily, ``quit`` always ends in
    the "no session" state. All three share one lock so concurrent callers
    cannot create two sessions or close one twice.

    Usage:
        factory = DriverFactory()
        session = factory.get()
        ...
        factory.quit()
    """

    def __init__(self, session_builder: Optional[SessionBuilder] = None):
        """
        Args:
            session_builder: Callable creating a session for (kind, headless).
                Defaults to launching a real browser.
        """
        self._builder = session_builder or BrowserSession.launch
        self._session: Optional[BrowserSession] = None
        self._lock = threading.RLock()

    @property
    def current(self) -> Optional[BrowserSession]:
        """The live session, without creating one."""
        session = self._session
        if session is None or session.is_closed:
            return None
        return session

    def init(
        self,
        browser: Union[BrowserKind, str, None] = None,
        headless: Optional[bool] = None,
    ) -> BrowserSession:
        """
        Create the session unless one already exists.

        Args:
            browser: Engine name; resolved from property/env/config when None
            headless: Headless flag; resolved from property/env/config when None

        Returns:
            The (existing or new) session

        Raises:
            DriverError: the browser could not be launched
        """
        with self._lock:
            if self.current is not None:
                return self._session

            if browser is None:
                browser = resolve_setting("browser", "BROWSER", "chromium")
            kind = BrowserKind.parse(browser)
            if headless is None:
                headless = parse_bool(resolve_setting("headless", "HEADLESS", False))

            logger.info(f"Starting {kind.value} browser (headless={headless})")
            try:
                session = self._builder(kind, headless)
            except PlaywrightError as e:
                raise DriverError(
                    f"Failed to launch {kind.value}: {e}", action="init", cause=e
                ) from e

            maximized = session.maximize()
            if not maximized:
                logger.debug(f"Window not maximized: {maximized.error}")

            self._session = session
            return session

    def get(self) -> BrowserSession:
        """Return the session, starting one with the configured browser if needed."""
        with self._lock:
            if self.current is None:
                return self.init()
            return self._session

    def quit(self) -> None:
        """Close and forget the session. No-op when there is none."""
        with self._lock:
            session, self._session = self._session, None
            if session is None:
                return
            try:
                session.quit()
            except Exception as e:
                logger.warning(f"Error while closing browser session: {e}")


# =============================================================================
# Process-wide Default Factory
# =============================================================================

driver_factory = DriverFactory()


def init_driver(
    browser: Union[BrowserKind, str, None] = None,
    headless: Optional[bool] = None,
) -> BrowserSession:
    return driver_factory.init(browser, headless)


def get_driver() -> BrowserSession:
    return driver_factory.get()


def quit_driver() -> None:
    driver_factory.quit()


__all__ = [
    "BrowserKind",
    "BrowserSession",
    "DialogRecord",
    "DriverFactory",
    "driver_factory",
    "init_driver",
    "get_driver",
    "quit_driver",
]

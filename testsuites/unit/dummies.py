"""
In-memory stand-ins for the Playwright objects a BrowserSession wraps.

Elements live in ``DummyPage.elements`` keyed by selector string; locators
resolve them on every call so a test can change the page between actions.
"""

import time
from typing import Any, Callable, Dict, List, Optional

from playwright.sync_api import (
    Error as PlaywrightError,
    Locator,
    TimeoutError as PlaywrightTimeoutError,
)

from testsuites.ui_testing.framework import element_actions as ea
from testsuites.ui_testing.framework.driver_factory import BrowserKind, BrowserSession


class DummyElement:
    def __init__(
        self,
        visible: bool = True,
        enabled: bool = True,
        text: str = "",
        value: str = "",
        attributes: Optional[Dict[str, str]] = None,
        properties: Optional[Dict[str, Any]] = None,
        selected: bool = False,
        click_error: Optional[Exception] = None,
        failing_clicks: int = 0,
    ):
        self.visible = visible
        self.enabled = enabled
        self.text = text
        self.value = value
        self.attributes = attributes or {}
        self.properties = properties or {}
        self.selected = selected
        self.click_error = click_error
        self.failing_clicks = failing_clicks

        self.clicks = 0
        self.js_clicks = 0
        self.right_clicks = 0
        self.double_clicks = 0
        self.hovers = 0
        self.cleared = 0
        self.submitted = 0
        self.scrolled = False
        self.selection: Optional[Dict[str, Any]] = None
        self.dragged_to: Optional[str] = None


class DummyLocator(Locator):
    """Locator over one selector of a DummyPage (or dummy frame)."""

    def __init__(self, page: "DummyPage", selector: str):
        # Playwright's implementation object is never touched
        self._page = page
        self.selector = selector

    def __repr__(self) -> str:
        return f"<DummyLocator {self.selector}>"

    def _element(self) -> Optional[DummyElement]:
        if self._page.lookup_error:
            raise PlaywrightError(self._page.lookup_error)
        return self._page.elements.get(self.selector)

    def _require(self, timeout=None) -> DummyElement:
        element = self._element()
        if element is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")
        return element

    @property
    def first(self) -> "DummyLocator":
        return self

    def count(self) -> int:
        return 0 if self._element() is None else 1

    def wait_for(self, state: str = "visible", timeout=None) -> None:
        self._page.wait_timeouts.append(timeout)
        element = self._element()
        if state == "attached":
            ok = element is not None
        elif state == "hidden":
            ok = element is None or not element.visible
        else:
            ok = element is not None and element.visible
        if not ok:
            raise PlaywrightTimeoutError(
                f"Timeout {timeout}ms exceeded.\nwaiting for {self.selector} to be {state}"
            )

    def is_visible(self, timeout=None) -> bool:
        element = self._element()
        return element is not None and element.visible

    def is_enabled(self, timeout=None) -> bool:
        return self._require(timeout).enabled

    def click(self, button: str = "left", timeout=None, **kwargs) -> None:
        element = self._require(timeout)
        if element.failing_clicks > 0:
            element.failing_clicks -= 1
            raise PlaywrightError("Element is not clickable at point (10, 10)")
        if element.click_error is not None:
            raise element.click_error
        if button == "right":
            element.right_clicks += 1
        else:
            element.clicks += 1

    def dblclick(self, timeout=None, **kwargs) -> None:
        self._require(timeout).double_clicks += 1

    def hover(self, timeout=None, **kwargs) -> None:
        self._require(timeout).hovers += 1

    def clear(self, timeout=None, **kwargs) -> None:
        element = self._require(timeout)
        element.value = ""
        element.cleared += 1

    def fill(self, value: str, timeout=None, **kwargs) -> None:
        self._require(timeout).value = value

    def inner_text(self, timeout=None) -> str:
        return self._require(timeout).text

    def select_option(self, value=None, index=None, label=None, timeout=None, **kwargs) -> List[str]:
        element = self._require(timeout)
        element.selection = {"value": value, "index": index, "label": label}
        return [value or label or str(index)]

    def drag_to(self, target: "DummyLocator", timeout=None, **kwargs) -> None:
        self._require(timeout).dragged_to = target.selector

    def element_handle(self, timeout=None):
        return ("handle", self.selector)

    def evaluate(self, expression: str, arg: Any = None, timeout=None) -> Any:
        element = self._require(timeout)
        if expression == ea.JS_CLICK:
            element.js_clicks += 1
            return None
        if expression == ea.JS_SCROLL_INTO_VIEW:
            element.scrolled = True
            return None
        if expression == ea.JS_IS_SELECTED:
            return element.selected
        if expression == ea.JS_SUBMIT:
            element.submitted += 1
            return None
        if expression == ea.JS_READ_PROPERTY:
            if arg in element.properties:
                return element.properties[arg]
            return element.attributes.get(arg)
        raise AssertionError(f"Unexpected script: {expression}")


class DummyFrameLocator:
    def __init__(self, frame: "DummyPage"):
        self._frame = frame

    @property
    def first(self) -> "DummyFrameLocator":
        return self

    def nth(self, index: int) -> "DummyFrameLocator":
        return DummyFrameLocator(self._frame.frames[f"nth={index}"])

    def locator(self, selector: str) -> DummyLocator:
        return DummyLocator(self._frame, selector)

    def frame_locator(self, selector: str) -> "DummyFrameLocator":
        return self._frame.frame_locator(selector)


class DummyPage:
    def __init__(self, context: Optional["DummyContext"] = None, title: str = "", url: str = "about:blank"):
        self.context = context
        self.title_text = title
        self.url = url
        self.elements: Dict[str, DummyElement] = {}
        self.frames: Dict[str, "DummyPage"] = {}
        self.lookup_error: Optional[str] = None
        self.closed = False

        self.ready_states: List[str] = ["complete"]
        self.screen: Optional[Dict[str, int]] = {"width": 2560, "height": 1440}
        self.screenshot_error: Optional[Exception] = None
        self.script_result: Any = None
        self.scripts: List[Any] = []
        self.viewport: Optional[Dict[str, int]] = None

        self.waits: List[float] = []
        self.wait_timeouts: List[Any] = []
        self.on_wait: Optional[Callable[["DummyPage"], None]] = None

    def __repr__(self) -> str:
        return f"<DummyPage {self.title_text!r}>"

    def locator(self, selector: str) -> DummyLocator:
        return DummyLocator(self, selector)

    def frame_locator(self, selector: str) -> DummyFrameLocator:
        if selector == "iframe, frame":
            return DummyFrameLocator(self)
        return DummyFrameLocator(self.frames[selector])

    def goto(self, url: str, **kwargs) -> None:
        self.url = url

    def title(self) -> str:
        if self.closed:
            raise PlaywrightError("Target page, context or browser has been closed")
        return self.title_text

    def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)
        if self.on_wait is not None:
            self.on_wait(self)
        if self.closed:
            raise PlaywrightError("Target page, context or browser has been closed")
        time.sleep(timeout / 1000)

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        if expression == ea.JS_READY_STATE:
            if len(self.ready_states) > 1:
                return self.ready_states.pop(0)
            return self.ready_states[0]
        if expression == ea.JS_RUN_SCRIPT:
            self.scripts.append(arg)
            return self.script_result
        if "availWidth" in expression:
            if self.screen is None:
                raise PlaywrightError("screen is not available")
            return self.screen
        raise AssertionError(f"Unexpected script: {expression}")

    def screenshot(self, path: str = None, **kwargs) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        data = b"\x89PNG\r\n\x1a\n"
        if path:
            with open(path, "wb") as f:
                f.write(data)
        return data

    def set_viewport_size(self, size: Dict[str, int]) -> None:
        self.viewport = size

    def close(self) -> None:
        self.closed = True
        if self.context is not None and self in self.context.pages:
            self.context.pages.remove(self)


class DummyDialog:
    def __init__(self, message: str = "", type: str = "alert"):
        self.message = message
        self.type = type
        self.accepted = False
        self.dismissed = False

    def accept(self, prompt_text: str = None) -> None:
        self.accepted = True

    def dismiss(self) -> None:
        self.dismissed = True


class DummyContext:
    def __init__(self):
        self.pages: List[DummyPage] = []
        self.handlers: Dict[str, List[Callable]] = {}
        self.default_timeout: Optional[float] = None
        self.closed = False

    def new_page(self, title: str = "") -> DummyPage:
        page = DummyPage(self, title=title)
        self.pages.append(page)
        return page

    def on(self, event: str, handler: Callable) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    def emit_dialog(self, dialog: DummyDialog) -> None:
        for handler in self.handlers.get("dialog", []):
            handler(dialog)

    def close(self) -> None:
        self.closed = True


class DummyBrowser:
    def __init__(self, close_error: Optional[Exception] = None):
        self.closed = False
        self.close_error = close_error

    def close(self) -> None:
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


class DummyPlaywright:
    def __init__(self):
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


def build_session(
    kind: BrowserKind = BrowserKind.CHROMIUM,
    headless: bool = True,
    titles: tuple = ("Main",),
    dialog_action: str = "accept",
) -> BrowserSession:
    """BrowserSession over dummy objects with one page per title."""
    context = DummyContext()
    for title in titles:
        context.new_page(title=title)
    return BrowserSession(
        kind,
        headless,
        DummyPlaywright(),
        DummyBrowser(),
        context,
        context.pages[0],
        implicit_wait=5,
        dialog_action=dialog_action,
    )



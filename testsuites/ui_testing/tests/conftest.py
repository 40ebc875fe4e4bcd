"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page content, and test setup/teardown.

Key Features:
- One browser session for the whole run (skipped when no browser launches)
- Per-test reset of windows, frames, dialogs and routes
- Offline pages served through Playwright routing
- Screenshot capture on failure

================================================================================
"""

import re
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest
from loguru import logger

from testsuites.ui_testing.framework.driver_factory import (
    BrowserSession,
    driver_factory,
    init_driver,
)
from testsuites.ui_testing.framework.element_actions import ElementActions
from webqa_tools.common import AutomationError, get_config
from webqa_tools.report_tools.allure_utils import attach_png, attach_text


# Origin of pages served by the `serve_pages` fixture
TEST_ORIGIN = "http://webqa.test"


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def browser_session() -> BrowserSession:
    """
    Session-scoped browser fixture.

    Starts the shared browser once; the root conftest closes it when the run
    finishes. UI tests are skipped when no browser can be launched here.
    """
    try:
        return init_driver()
    except Exception as e:
        pytest.skip(f"Browser unavailable: {e}")


@pytest.fixture
def session(browser_session: BrowserSession) -> Generator[BrowserSession, None, None]:
    """
    Function-scoped view of the shared session.

    After each test: extra windows are closed, lookups go back to the top
    document, dialog bookkeeping and routes are cleared.
    """
    yield browser_session

    if browser_session.is_closed:
        return
    pages = list(browser_session.context.pages)
    for extra in pages[1:]:
        extra.close()
    if pages:
        browser_session.switch_to_page(pages[0])
    else:
        browser_session.switch_to_page(browser_session.context.new_page())
    browser_session.dialogs.clear()
    browser_session.arm_dialog(None)
    browser_session.context.unroute("**/*")


@pytest.fixture
def actions(session: BrowserSession) -> ElementActions:
    """ElementActions with a short default timeout for local pages."""
    return ElementActions(session, default_timeout=2)


@pytest.fixture
def serve_pages(session: BrowserSession) -> Callable[[Dict[str, str]], None]:
    """
    Serve HTML bodies for absolute URLs without touching the network.

    Usage:
        serve_pages({"http://webqa.test/form": "<form>...</form>"})

    Unknown URLs get a 404.
    """
    pages: Dict[str, str] = {}

    def handler(route):
        url = route.request.url.split("#")[0]
        body = pages.get(url) or pages.get(url.split("?")[0])
        if body is None:
            route.fulfill(status=404, body="not found")
        else:
            route.fulfill(status=200, content_type="text/html", body=body)

    def register(new_pages: Dict[str, str]) -> None:
        if not pages:
            session.context.route("**/*", handler)
        pages.update(new_pages)

    return register


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Hook to capture screenshots on test failure.

    Automatically takes a screenshot when a UI test fails and attaches
    it to the Allure report together with the current URL.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        session = driver_factory.current
        if session is None:
            return

        name = re.sub(r"[^\w.-]+", "_", item.name)
        target = Path(get_config("ui.screenshot_dir", "reports/screenshots")) / f"{name}.png"
        try:
            shot = ElementActions(session).take_screenshot(target)
            if shot:
                attach_png(shot.value, name="failure_screenshot")
            attach_text(session.page.url, name="Current URL")
        except (AutomationError, OSError) as e:
            # Log but don't fail if evidence capture fails
            logger.warning(f"Failed to capture failure evidence: {e}")

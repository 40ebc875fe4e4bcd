"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - A fixed page URL with open / is_at checks
    - Every ElementActions operation (waits, clicks, frames, dialogs, ...)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger

from .driver_factory import BrowserSession
from .element_actions import ElementActions


class BasePage(ElementActions):
    """
    Base class for all page objects.

    Usage:
        class SearchPage(BasePage):
            URL = "https://example.com/search"

            SEARCH_INPUT = By.test_id("search-bar")

            def search(self, term: str) -> None:
                self.type(self.SEARCH_INPUT, term)
    """

    # Override in subclasses
    URL: str = ""

    def __init__(
        self,
        session: BrowserSession,
        url: Optional[str] = None,
        default_timeout: Optional[float] = None,
    ):
        """
        Initialize page object.

        Args:
            session: Live browser session
            url: Page URL; defaults to the class-level URL
            default_timeout: Default wait in seconds
        """
        super().__init__(session, default_timeout)
        self.url = url or self.URL

    @allure.step("Open page")
    def open(self, url: Optional[str] = None) -> "BasePage":
        """Navigate to the page URL (or ``url`` when given)."""
        super().open(url or self.url)
        return self

    def is_at(self) -> bool:
        """True when the current URL starts with the page URL."""
        current = self.get_current_url()
        at_page = bool(self.url) and current.startswith(self.url)
        logger.debug(f"is_at({self.url}) -> {at_page} (current: {current})")
        return at_page


# Backward-compatible alias used by page objects
PageBase = BasePage


__all__ = ["BasePage", "PageBase"]

"""
================================================================================
Welcome Page Object
================================================================================

Landing page of the GitHub users search application.

The URL comes from the constructor, else config ``ui.welcome_url``.

================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure

from testsuites.ui_testing.framework.driver_factory import BrowserSession
from testsuites.ui_testing.framework.locators import By
from testsuites.ui_testing.framework.page_base import PageBase
from webqa_tools.common import get_config


DEFAULT_WELCOME_URL = "https://gh-users-search.netlify.app/"


class WelcomePage(PageBase):
    """Welcome (search) page."""

    URL = DEFAULT_WELCOME_URL

    SEARCH_INPUT = By.css("input[data-testid='search-bar'], form input")
    SEARCH_BUTTON = By.css("form button[type='submit']")

    def __init__(
        self,
        session: BrowserSession,
        url: Optional[str] = None,
        default_timeout: Optional[float] = None,
    ):
        super().__init__(
            session,
            url or get_config("ui.welcome_url", DEFAULT_WELCOME_URL),
            default_timeout,
        )

    @allure.step("Search for user '{username}'")
    def search(self, username: str) -> None:
        self.type(self.SEARCH_INPUT, username)
        self.click(self.SEARCH_BUTTON)


__all__ = ["WelcomePage"]

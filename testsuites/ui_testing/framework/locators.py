"""
================================================================================
Locators
================================================================================

Strategy + value pairs identifying page elements.

A ``By`` is immutable and renders to a Playwright selector string, so page
objects can declare their elements as class attributes:

    class SearchPage(BasePage):
        SEARCH_INPUT = By.test_id("search-bar")
        SUBMIT = By.css("form button[type='submit']")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Union

from playwright.sync_api import Locator


@dataclass(frozen=True)
class By:
    """
    Immutable element locator.

    Attributes:
        strategy: One of id, css, xpath, name, text, link_text, tag, test_id
        value: Strategy-specific value
    """
    strategy: str
    value: str

    STRATEGIES = ("id", "css", "xpath", "name", "text", "link_text", "tag", "test_id")

    def __post_init__(self) -> None:
        if self.strategy not in self.STRATEGIES:
            raise ValueError(f"Unknown locator strategy: {self.strategy}")

    @classmethod
    def id(cls, value: str) -> "By":
        return cls("id", value)

    @classmethod
    def css(cls, value: str) -> "By":
        return cls("css", value)

    @classmethod
    def xpath(cls, value: str) -> "By":
        return cls("xpath", value)

    @classmethod
    def name(cls, value: str) -> "By":
        return cls("name", value)

    @classmethod
    def text(cls, value: str) -> "By":
        return cls("text", value)

    @classmethod
    def link_text(cls, value: str) -> "By":
        return cls("link_text", value)

    @classmethod
    def tag(cls, value: str) -> "By":
        return cls("tag", value)

    @classmethod
    def test_id(cls, value: str) -> "By":
        return cls("test_id", value)

    @property
    def selector(self) -> str:
        """Playwright selector string for this locator."""
        quoted = json.dumps(self.value, ensure_ascii=False)
        if self.strategy == "id":
            return f"[id={quoted}]"
        if self.strategy == "name":
            return f"[name={quoted}]"
        if self.strategy == "test_id":
            return f"[data-testid={quoted}]"
        if self.strategy == "xpath":
            return f"xpath={self.value}"
        if self.strategy == "text":
            return f"text={quoted}"
        if self.strategy == "link_text":
            return f"a:text-is({quoted})"
        return f"css={self.value}"

    def __str__(self) -> str:
        return f"By.{self.strategy}({self.value!r})"


LocatorLike = Union[By, str, Locator]


def to_selector(locator: Union[By, str]) -> str:
    """Render a By (or pass through a raw selector string)."""
    if isinstance(locator, By):
        return locator.selector
    return locator


def describe(locator: LocatorLike) -> str:
    """Human-readable form used in logs and Allure step titles."""
    return str(locator)


__all__ = [
    "By",
    "LocatorLike",
    "to_selector",
    "describe",
]

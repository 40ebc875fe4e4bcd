"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based (sync API) UI automation framework.

Components:
    - locators: immutable strategy + value element locators
    - driver_factory: browser session lifecycle management
    - element_actions: wait / click / type / frame / dialog facade
    - page_base: base page object

Author: Automation Team
License: MIT
================================================================================
"""

from .driver_factory import (
    BrowserKind,
    BrowserSession,
    DialogRecord,
    DriverFactory,
    driver_factory,
    get_driver,
    init_driver,
    quit_driver,
)
from .element_actions import ElementActions
from .locators import By
from .page_base import BasePage, PageBase

__all__ = [
    "BasePage",
    "BrowserKind",
    "BrowserSession",
    "By",
    "DialogRecord",
    "DriverFactory",
    "ElementActions",
    "PageBase",
    "driver_factory",
    "get_driver",
    "init_driver",
    "quit_driver",
]

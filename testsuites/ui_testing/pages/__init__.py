"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for application pages.

Each page class encapsulates:
    - Its URL
    - Element locators
    - Page-specific actions

Author: Automation Team
License: MIT
================================================================================
"""

from .welcome_page import WelcomePage

__all__ = [
    "WelcomePage",
]

"""
================================================================================
Error Taxonomy
================================================================================

Project-wide exception types shared by the UI framework and the SQL tools.

    - AutomationError: base class, carries action/locator context
    - WaitTimeoutError: a waited-for condition never became true
    - InvalidConfiguration: a required configuration value is missing
    - DriverError: underlying browser automation failure
    - DatabaseError: underlying database driver failure
    - InterruptedWait: a sleep/poll was interrupted

================================================================================
"""

from __future__ import annotations

from typing import Any, Optional


class AutomationError(Exception):
    """Base class for all errors raised by the toolkit."""

    def __init__(
        self,
        message: str,
        *,
        action: Optional[str] = None,
        locator: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.action = action
        self.locator = locator
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.action:
            parts.insert(0, f"[{self.action}]")
        if self.locator is not None:
            parts.append(f"locator={self.locator}")
        return " ".join(parts)


class WaitTimeoutError(AutomationError):
    """Raised when a wait operation times out."""


class InvalidConfiguration(AutomationError):
    """Raised when a required configuration value is missing or blank."""


class DriverError(AutomationError):
    """Raised when the browser automation driver fails."""


class DatabaseError(DriverError):
    """Raised when the database driver fails."""


class InterruptedWait(AutomationError):
    """Raised when a sleep or poll is cut short, e.g. the browser went away."""


__all__ = [
    "AutomationError",
    "WaitTimeoutError",
    "InvalidConfiguration",
    "DriverError",
    "DatabaseError",
    "InterruptedWait",
]

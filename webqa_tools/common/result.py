"""
Outcome of best-effort operations.

Screenshots, window maximizing and quiet closes never raise; they hand back
an ActionResult so the caller can still see (and log) what went wrong.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ActionResult:
    """
    Result of a best-effort action.

    Attributes:
        ok: Whether the action succeeded
        value: Value produced by the action (path, size, ...)
        error: The suppressed exception when ok is False
    """
    ok: bool = True
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any = None) -> "ActionResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "ActionResult":
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok

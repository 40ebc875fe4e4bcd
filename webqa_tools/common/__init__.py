"""
================================================================================
Common Utilities
================================================================================

Shared configuration, logging, error types and result objects used by the
UI framework and the database tools.

Exports:
    - get_config / set_config: YAML + environment configuration
    - resolve_setting: property -> environment -> config -> default lookup
    - init_logger: initialize the loguru logger with standard settings
    - AutomationError and subclasses: the error taxonomy
    - ActionResult: outcome of best-effort operations

Usage:
    from webqa_tools.common import get_config, init_logger

    init_logger()
    timeout = get_config("ui.default_timeout", 10)

================================================================================
"""

from datetime import date, datetime
from typing import Any

from .exceptions import (
    AutomationError,
    DatabaseError,
    DriverError,
    InterruptedWait,
    InvalidConfiguration,
    WaitTimeoutError,
)
from .global_config import (
    ensure_directory,
    get_config,
    get_property,
    init_logger,
    parse_bool,
    reload_config,
    resolve_setting,
    set_config,
    set_property,
)
from .result import ActionResult


def safe_json_serialize(obj: Any) -> Any:
    """
    Safely serializes an object to JSON-compatible format.

    Handles common non-serializable types like datetime, bytes, Decimal.
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    else:
        return str(obj)


__all__ = [
    "ActionResult",
    "AutomationError",
    "DatabaseError",
    "DriverError",
    "InterruptedWait",
    "InvalidConfiguration",
    "WaitTimeoutError",
    "ensure_directory",
    "get_config",
    "get_property",
    "init_logger",
    "parse_bool",
    "reload_config",
    "resolve_setting",
    "safe_json_serialize",
    "set_config",
    "set_property",
]

"""
================================================================================
Configuration, Runtime Properties and Logging
================================================================================

Single place where the UI and database helpers read their settings.

Configuration layers (later wins):
    1. Built-in defaults (``_get_defaults``)
    2. ``config/config.yaml``
    3. ``config/{ENVIRONMENT}.yaml``
    4. ``SECTION__KEY`` environment variables

Runtime options such as ``browser`` and ``headless`` go through
``resolve_setting``: property (``set_property`` / pytest ``--ui-*``), then
environment variable (``BROWSER``, ``HEADLESS``), then ``ui.<name>``, then
the hardcoded default.

Author: Automation Team
License: MIT
================================================================================
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

_config: Dict[str, Any] = {}
_properties: Dict[str, Any] = {}
_logger_initialized: bool = False

_TRUE_VALUES = {"true", "1", "yes", "on"}

DEFAULT_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def init_logger(level: str = None, format_str: str = None) -> None:
    """
    Configures the shared Loguru logger once per process.

    A stderr sink is always installed; a rotating file sink is added when
    ``logging.file`` is configured.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to ``logging.level``.
        format_str: Loguru format string. Defaults to ``logging.format``.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    log_level = str(level or get_config("logging.level", "INFO")).upper()
    log_format = format_str or get_config("logging.format", DEFAULT_LOG_FORMAT)

    logger.remove()
    logger.add(sys.stderr, level=log_level, format=log_format, colorize=True, backtrace=True, diagnose=False)

    log_file = get_config("logging.file")
    if log_file:
        ensure_directory(Path(log_file).parent)
        logger.add(
            log_file,
            level=log_level,
            format=log_format,
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            encoding="utf-8",
        )

    _logger_initialized = True
    logger.debug(f"Logger ready (level={log_level}, file={log_file or '-'})")


def ensure_directory(path) -> Path:
    """Create ``path`` (and parents) if missing and return it as a Path."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _ensure_config_loaded() -> None:
    if not _config:
        _load_config()


def _find_config_dir() -> Optional[Path]:
    """First existing ``config`` directory: CWD, then the project root."""
    for candidate in (Path("config"), Path(__file__).resolve().parents[2] / "config"):
        if candidate.is_dir():
            return candidate
    return None


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    logger.debug(f"Loaded configuration from {path}")
    return data


def _load_config() -> None:
    """
    Builds the configuration: defaults, then ``config/config.yaml``, then
    ``config/{ENVIRONMENT}.yaml`` and finally ``SECTION__KEY`` environment
    variables.
    """
    global _config

    merged = _get_defaults()
    config_dir = _find_config_dir()
    if config_dir is not None:
        env_name = os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
        for name in ("config.yaml", f"{env_name}.yaml"):
            merged = _deep_merge(merged, _read_yaml(config_dir / name))

    _config = merged
    _apply_env_overrides()


def _get_defaults() -> Dict[str, Any]:
    return {
        "logging": {
            "level": "INFO",
            "format": DEFAULT_LOG_FORMAT,
        },
        "ui": {
            "browser": "chromium",
            "headless": False,
            "implicit_wait": 5,
            "default_timeout": 10,
            "dialog_action": "accept",
            "welcome_url": "https://gh-users-search.netlify.app/",
            "screenshot_dir": "reports/screenshots",
        },
    }


def _deep_merge(base: Dict, override: Dict) -> Dict:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides() -> None:
    """``UI__DEFAULT_TIMEOUT=20`` overrides ``ui.default_timeout`` (values stay strings)."""
    for key, value in os.environ.items():
        if key.startswith("__") or "__" not in key:
            continue
        _set_nested(_config, key.lower().split("__"), value)


def _set_nested(d: Dict, keys: list, value: Any) -> None:
    *parents, leaf = keys
    for key in parents:
        d = d.setdefault(key, {})
    d[leaf] = value


def get_config(key: str, default: Any = None) -> Any:
    """
    Looks up a dot-separated key, e.g. ``get_config("ui.default_timeout", 10)``.

    Returns ``default`` when any segment of the path is missing.
    """
    _ensure_config_loaded()

    node: Any = _config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value at runtime."""
    _ensure_config_loaded()
    _set_nested(_config, key.split("."), value)


def reload_config() -> None:
    """
    Reloads the configuration from files.
    """
    global _config, _logger_initialized
    _config = {}
    _logger_initialized = False
    _load_config()
    init_logger()
    logger.info("Configuration reloaded.")


# =============================================================================
# Runtime Properties
# =============================================================================

def set_property(name: str, value: Any) -> None:
    """
    Sets a runtime property. Properties win over environment variables.

    ``None`` removes the property.
    """
    if value is None:
        _properties.pop(name, None)
    else:
        _properties[name] = value


def get_property(name: str, default: Any = None) -> Any:
    return _properties.get(name, default)


def resolve_setting(name: str, env_var: str, default: Any = None) -> Any:
    """
    Resolves a runtime option: property, then environment, then config, then default.

    Args:
        name: Property name; the config key is ``ui.<name>``
        env_var: Environment variable consulted after the property
        default: Value used when nothing else is set

    Returns:
        The resolved value

    Examples:
        >>> resolve_setting("browser", "BROWSER", "chromium")
        "firefox"
    """
    if name in _properties:
        return _properties[name]
    env_value = os.environ.get(env_var)
    if env_value is not None and env_value.strip():
        return env_value
    return get_config(f"ui.{name}", default)


def parse_bool(value: Any) -> bool:
    """Lenient boolean parsing for env/config values ("true", "1", "yes", "on")."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


__all__ = [
    "init_logger",
    "ensure_directory",
    "get_config",
    "set_config",
    "reload_config",
    "set_property",
    "get_property",
    "resolve_setting",
    "parse_bool",
]

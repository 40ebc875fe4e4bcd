"""
Repository-level pytest configuration.

  - Command-line options selecting the browser for UI tests
  - Demo-safe environment defaults (headless browser unless told otherwise)
  - Logger initialization
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from webqa_tools.common import init_logger, set_property


def pytest_addoption(parser):
    group = parser.getgroup("webqa", "UI test browser selection")
    group.addoption(
        "--ui-browser",
        action="store",
        default=None,
        help="Browser engine for UI tests: chromium (default) or firefox",
    )
    group.addoption(
        "--ui-headless",
        action="store",
        default=None,
        help="Run the UI browser headless: true/false",
    )


def pytest_configure(config):
    # Properties win over BROWSER / HEADLESS and config/ui.*
    set_property("browser", config.getoption("--ui-browser"))
    set_property("headless", config.getoption("--ui-headless"))

    # Keep local and CI runs from popping up windows unless asked to
    os.environ.setdefault("HEADLESS", "true")

    init_logger()


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent

"""
================================================================================
Suite-wide Pytest Configuration
================================================================================

Registers the markers used across the suites, tags tests by location and
releases the shared browser session once the whole run is over.

================================================================================
"""

import pytest

from testsuites.ui_testing.framework.driver_factory import quit_driver


MARKERS = {
    # Priority
    "P0": "Critical priority tests - must pass for deployment",
    "P1": "High priority tests - important functionality",
    "P2": "Medium priority tests - edge cases and minor features",
    # Type
    "smoke": "Quick verification tests",
    "regression": "Full regression test suite",
    "e2e": "End-to-end tests driving a real browser",
    # Domain
    "ui": "UI-specific tests",
    "unit": "Tests with no browser or database server",
    "db": "Tests touching the SQL helpers",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


def pytest_collection_modifyitems(config, items):
    """Add domain markers from the test location."""
    for item in items:
        parts = item.path.parts
        if "ui_testing" in parts:
            item.add_marker(pytest.mark.ui)
        if "unit" in parts:
            item.add_marker(pytest.mark.unit)
        if "sql" in item.path.stem:
            item.add_marker(pytest.mark.db)


def pytest_sessionfinish(session, exitstatus):
    """Close the shared browser session, if any test started one."""
    quit_driver()


def pytest_report_header(config):
    return ["", "=" * 60, "WebQA UI + SQL Automation Toolkit", "=" * 60, ""]

"""
Unit-test fixtures: sessions over dummy Playwright objects.
"""

from typing import Callable

import pytest

from testsuites.ui_testing.framework.driver_factory import BrowserSession
from testsuites.unit.dummies import DummyPage, build_session
from webqa_tools.common import get_property, set_property


@pytest.fixture
def make_session() -> Callable[..., BrowserSession]:
    return build_session


@pytest.fixture
def session(make_session) -> BrowserSession:
    return make_session()


@pytest.fixture
def page(session) -> DummyPage:
    return session.page


@pytest.fixture
def properties():
    """``set_property`` with the previous values restored after the test."""
    saved = {}

    def setter(name, value):
        if name not in saved:
            saved[name] = get_property(name)
        set_property(name, value)

    yield setter

    for name, value in saved.items():
        set_property(name, value)

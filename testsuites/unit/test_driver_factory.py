import threading

import pytest
from playwright.sync_api import Error as PlaywrightError

from testsuites.ui_testing.framework.driver_factory import BrowserKind, DriverFactory
from testsuites.unit.dummies import DummyBrowser, DummyDialog, build_session
from webqa_tools.common import DriverError


class RecordingBuilder:
    def __init__(self, **session_kwargs):
        self.calls = []
        self.session_kwargs = session_kwargs

    def __call__(self, kind, headless):
        self.calls.append((kind, headless))
        return build_session(kind=kind, headless=headless, **self.session_kwargs)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("firefox", BrowserKind.FIREFOX),
        ("FF", BrowserKind.FIREFOX),
        (" Firefox ", BrowserKind.FIREFOX),
        ("chrome", BrowserKind.CHROMIUM),
        ("edge", BrowserKind.CHROMIUM),
        ("", BrowserKind.CHROMIUM),
        (None, BrowserKind.CHROMIUM),
    ],
)
def test_browser_kind_parse(name, expected):
    assert BrowserKind.parse(name) is expected


def test_init_is_idempotent():
    builder = RecordingBuilder()
    factory = DriverFactory(builder)

    first = factory.init("chromium", headless=True)
    second = factory.init("firefox", headless=False)

    assert first is second
    assert builder.calls == [(BrowserKind.CHROMIUM, True)]


def test_init_applies_implicit_wait_and_maximizes():
    factory = DriverFactory(RecordingBuilder())

    session = factory.init("chromium", headless=True)

    assert session.context.default_timeout == 5000
    assert session.page.viewport == {"width": 2560, "height": 1440}


def test_maximize_failure_is_swallowed():
    def builder(kind, headless):
        session = build_session(kind=kind, headless=headless)
        session.page.screen = None
        return session

    session = DriverFactory(builder).init("chromium", headless=True)

    assert session.page.viewport is None
    assert not session.maximize()


def test_launch_failure_raises_driver_error():
    def builder(kind, headless):
        raise PlaywrightError("Executable doesn't exist")

    factory = DriverFactory(builder)

    with pytest.raises(DriverError, match="Executable doesn't exist"):
        factory.init("firefox", headless=True)
    assert factory.current is None


def test_browser_and_headless_resolved_from_property_then_env(monkeypatch, properties):
    builder = RecordingBuilder()
    monkeypatch.setenv("BROWSER", "chromium")
    monkeypatch.setenv("HEADLESS", "false")
    properties("browser", "ff")
    properties("headless", None)

    DriverFactory(builder).init()

    assert builder.calls == [(BrowserKind.FIREFOX, False)]


def test_browser_defaults_to_chromium_headed(monkeypatch, properties):
    builder = RecordingBuilder()
    monkeypatch.delenv("BROWSER", raising=False)
    monkeypatch.delenv("HEADLESS", raising=False)
    properties("browser", None)
    properties("headless", None)

    DriverFactory(builder).init()

    assert builder.calls == [(BrowserKind.CHROMIUM, False)]


def test_get_creates_lazily_and_reuses():
    builder = RecordingBuilder()
    factory = DriverFactory(builder)
    assert factory.current is None

    session = factory.get()

    assert factory.get() is session
    assert factory.current is session
    assert len(builder.calls) == 1


def test_get_replaces_session_closed_behind_factory():
    builder = RecordingBuilder()
    factory = DriverFactory(builder)
    old = factory.get()

    old.quit()
    new = factory.get()

    assert new is not old
    assert len(builder.calls) == 2


def test_quit_is_idempotent():
    factory = DriverFactory(RecordingBuilder())
    factory.quit()

    session = factory.init("chromium", headless=True)
    factory.quit()
    factory.quit()

    assert factory.current is None
    assert session.is_closed
    assert session.playwright.stopped


def test_quit_swallows_close_errors():
    def builder(kind, headless):
        session = build_session(kind=kind, headless=headless)
        session.browser = DummyBrowser(close_error=PlaywrightError("Browser has been closed"))
        return session

    factory = DriverFactory(builder)
    session = factory.init("chromium", headless=True)

    factory.quit()

    assert factory.current is None
    # driver stopped even though browser.close failed
    assert session.playwright.stopped


def test_concurrent_get_creates_one_session():
    builder = RecordingBuilder()
    factory = DriverFactory(builder)
    sessions = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        sessions.append(factory.get())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(builder.calls) == 1
    assert all(s is sessions[0] for s in sessions)


def test_unclaimed_dialog_uses_configured_default():
    session = build_session(dialog_action="dismiss")
    dialog = DummyDialog("Leave site?", type="beforeunload")

    session.context.emit_dialog(dialog)

    assert dialog.dismissed
    assert session.dialogs[0].action == "dismiss"
    assert session.dialogs[0].type == "beforeunload"


def test_armed_dialog_action_applies_once():
    session = build_session()
    session.arm_dialog("dismiss")
    first, second = DummyDialog("one"), DummyDialog("two")

    session.context.emit_dialog(first)
    session.context.emit_dialog(second)

    assert first.dismissed
    assert second.accepted
    assert [d.message for d in session.dialogs] == ["one", "two"]

"""
ElementActions against a real browser with offline pages.
"""

import time

import allure
import pytest

from testsuites.ui_testing.framework.locators import By
from webqa_tools.common import WaitTimeoutError


ORIGIN = "http://webqa.test"

FORM_HTML = """
<html>
  <head><title>Form</title></head>
  <body>
    <input id="q" value="previous">
    <input id="agree" type="checkbox" checked>
    <input id="later" type="checkbox">
    <select id="lang">
      <option value="js">JavaScript</option>
      <option value="py">Python</option>
      <option value="go">Go</option>
    </select>
    <button id="disabled" disabled>Nope</button>
    <p id="hidden" style="display:none">secret</p>
  </body>
</html>
"""

OVERLAY_HTML = """
<html>
  <head><title>Overlay</title></head>
  <body>
    <button id="target" onclick="window.clicks = (window.clicks || 0) + 1">Click me</button>
    <div id="overlay" style="position:fixed; top:0; left:0; width:100%; height:100%; z-index:10"></div>
  </body>
</html>
"""

DIALOG_HTML = """
<html>
  <head><title>Dialogs</title></head>
  <body>
    <button id="alert" onclick="alert('Hello from alert')">alert</button>
    <button id="confirm-later"
      onclick="setTimeout(() => {
        document.getElementById('answer').textContent = confirm('Sure?') ? 'yes' : 'no';
      }, 300)">confirm</button>
    <button id="confirm-now"
      onclick="document.getElementById('answer').textContent = confirm('Now?') ? 'yes' : 'no'">now</button>
    <p id="answer"></p>
  </body>
</html>
"""

FRAME_HTML = """
<html>
  <head><title>Frames</title></head>
  <body>
    <p id="outer">outside</p>
    <iframe id="child" srcdoc="<p id='inner'>inside</p>"></iframe>
  </body>
</html>
"""

WINDOWS_HTML = """
<html>
  <head><title>Main Window</title></head>
  <body><a id="open" href="http://webqa.test/popup" target="_blank">open</a></body>
</html>
"""


@pytest.fixture
def pages(serve_pages):
    serve_pages({
        f"{ORIGIN}/form": FORM_HTML,
        f"{ORIGIN}/overlay": OVERLAY_HTML,
        f"{ORIGIN}/dialogs": DIALOG_HTML,
        f"{ORIGIN}/frames": FRAME_HTML,
        f"{ORIGIN}/windows": WINDOWS_HTML,
        f"{ORIGIN}/popup": "<html><head><title>Popup</title></head><body>popup</body></html>",
    })


@allure.feature("Element Actions")
@pytest.mark.e2e
@pytest.mark.usefixtures("pages")
class TestElementActionsInBrowser:

    @allure.title("type replaces the previous field value")
    def test_type_replaces_value(self, actions):
        actions.open(f"{ORIGIN}/form")

        actions.type(By.id("q"), "hello")

        assert actions.get_attribute(By.id("q"), "value") == "hello"

    @allure.title("safe_click falls back to a scripted click under an overlay")
    def test_safe_click_fallback(self, actions):
        actions.open(f"{ORIGIN}/overlay")

        actions.safe_click("#target", timeout=1)

        assert actions.execute_script("return window.clicks || 0;") == 1

    @allure.title("Boolean accessors and presence")
    def test_state_queries(self, actions):
        actions.open(f"{ORIGIN}/form")

        assert actions.is_selected("#agree")
        assert not actions.is_selected("#later")
        assert actions.get_attribute("#agree", "checked") == "true"
        assert actions.get_attribute("#later", "checked") is None
        assert not actions.is_enabled("#disabled")
        assert not actions.is_displayed("#hidden", timeout=0.5)
        assert actions.is_element_present("#hidden")
        assert not actions.is_element_present("#never-there")

    @allure.title("Dropdown selection")
    def test_select(self, actions):
        actions.open(f"{ORIGIN}/form")

        actions.select_by_visible_text("#lang", "Python")
        assert actions.get_attribute("#lang", "value") == "py"

        actions.select_by_index("#lang", 2)
        assert actions.get_attribute("#lang", "value") == "go"

        actions.select_by_value("#lang", "js")
        assert actions.get_attribute("#lang", "value") == "js"

    @allure.title("Waiting for a disabled button times out")
    def test_wait_for_clickable_timeout(self, actions):
        actions.open(f"{ORIGIN}/form")

        with pytest.raises(WaitTimeoutError):
            actions.wait_for_clickable("#disabled", timeout=0.5)

    @allure.title("Alerts are accepted and their text returned")
    def test_accept_alert(self, actions):
        actions.open(f"{ORIGIN}/dialogs")

        actions.click("#alert")

        assert actions.get_alert_text() == "Hello from alert"
        assert actions.accept_alert() == "Hello from alert"

    @allure.title("A confirm opening while waiting is dismissed")
    def test_dismiss_delayed_confirm(self, actions):
        actions.open(f"{ORIGIN}/dialogs")

        actions.click("#confirm-later")

        assert actions.dismiss_alert(timeout=3) == "Sure?"
        assert actions.fluent_wait(lambda: actions.get_text("#answer") == "no", timeout=2)

    @allure.title("A confirm opened by a click is dismissed when expected beforehand")
    def test_expect_dialog_before_click(self, actions):
        actions.open(f"{ORIGIN}/dialogs")

        actions.expect_dialog("dismiss")
        actions.click("#confirm-now")

        assert actions.dismiss_alert() == "Now?"
        assert actions.fluent_wait(lambda: actions.get_text("#answer") == "no", timeout=2)

    @allure.title("Frame switching scopes lookups and scripts")
    def test_frames(self, actions):
        actions.open(f"{ORIGIN}/frames")

        actions.switch_to_frame("#child")
        assert actions.get_text("#inner") == "inside"
        assert actions.execute_script("return document.querySelector('#inner').textContent;") == "inside"
        assert not actions.is_element_present("#outer")

        actions.switch_to_default_content()
        assert actions.get_text("#outer") == "outside"
        assert not actions.is_element_present("#inner")

        actions.switch_to_frame(0)
        assert actions.get_text("#inner") == "inside"

    @allure.title("Window switching by title")
    def test_windows(self, actions, session):
        actions.open(f"{ORIGIN}/windows")

        actions.click("#open")

        assert actions.switch_to_window_by_title("Popup", timeout=5)
        assert actions.get_title() == "Popup"
        assert len(actions.get_window_handles()) == 2

        started = time.monotonic()
        assert actions.switch_to_window_by_title("No Such Window", timeout=0.6) is False
        assert time.monotonic() - started < 0.6 + 0.2 + 1.0
        assert session.page is session.context.pages[-1]

        actions.close()
        assert actions.get_title() == "Main Window"

    @allure.title("Page load and screenshots")
    def test_page_load_and_screenshot(self, actions, tmp_path):
        actions.open(f"{ORIGIN}/form")

        assert actions.wait_for_page_load()
        shot = actions.take_screenshot(tmp_path / "shots" / "form.png")

        assert shot.ok
        assert shot.value.stat().st_size > 0

    @allure.title("execute_script receives element arguments")
    def test_execute_script_with_element(self, actions):
        actions.open(f"{ORIGIN}/form")

        field = actions.wait_for_visibility("#q")

        assert actions.execute_script("return arguments[0].value + arguments[1];", field, "!") == "previous!"

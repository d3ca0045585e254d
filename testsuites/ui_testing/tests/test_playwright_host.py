"""
================================================================================
Playwright Host UI Tests
================================================================================

Drives uimap through Chromium against small documents loaded with
page.set_content(). The documents mimic the browser chrome the UI maps
expect (#nav-bar, #TabsToolbar) and open modal popups the way a web app
opens dialogs.

================================================================================
"""

import allure
import pytest

from uimap.framework.assertions import Expect
from uimap.framework.driver import filter_window_by_title, get_most_recent_window
from uimap.framework.errors import AmbiguousLocatorError, UnexpectedDialogError
from uimap.framework.widgets import Button, Element, TextBox
from uimap.hosts import BROWSER_WINDOW_TYPE, create_host
from uimap.hosts.playwright_host import to_key_combo
from uimap.ui.browser import get_browser_window


BROWSER_CHROME = """
<html id="main-window">
<head><title>Browser</title></head>
<body>
  <div id="nav-bar">
    <button id="home-button" onclick="document.title = 'Home'">Home</button>
    <input id="urlbar" name="location">
  </div>
  <div id="TabsToolbar">
    <div id="tabbrowser-tabs">
      <div class="tabbrowser-tab">One</div>
      <div class="tabbrowser-tab">Two</div>
    </div>
  </div>
  <a href="#help">Help</a>
  <div class="dup">a</div><div class="dup">b</div>
  <x-panel id="panel"></x-panel>
  <iframe id="content" srcdoc="<button id='inner'>Inner</button>"></iframe>
  <button id="open-dialog" onclick="openDialog('Confirm')">Open</button>
  <script>
    customElements.define('x-panel', class extends HTMLElement {
      constructor() {
        super();
        this.attachShadow({mode: 'open'}).innerHTML = '<span anonid="label">Panel</span>';
      }
    });
    function openDialog(title) {
      const dialog = window.open('', title, 'popup,width=300,height=200');
      dialog.document.write(
        '<html aria-modal="true"><head><title>' + title + '</title></head>' +
        '<body><button id="ok" onclick="window.close()">OK</button></body></html>');
      dialog.document.close();
    }
  </script>
</body>
</html>
"""


@pytest.fixture
def chrome_window(harness):
    harness.browser.inner_window.set_content(BROWSER_CHROME)
    return harness.browser


@allure.feature("Playwright Host")
@allure.story("Locators")
@pytest.mark.P0
@pytest.mark.smoke
def test_locators_resolve_in_chromium(chrome_window):
    expect = Expect()
    document = chrome_window.document

    expect.equal(chrome_window.find_element("id", "urlbar").node.get_attribute("name"), "location")
    expect.ok(chrome_window.find_element("name", "location").exists(0), "name lookup")
    expect.ok(chrome_window.find_element("xpath", "//input[@id='urlbar']").exists(0), "xpath lookup")
    expect.ok(chrome_window.find_element("link", "Help").exists(0), "link lookup")
    expect.ok(chrome_window.find_element("lookup", "#nav-bar >> #home-button").exists(0), "selector chain")

    panel = Element("id", "panel", document, host=chrome_window.host)
    label = Element("anon", {"anonid": "label"}, panel)
    expect.equal(label.node.text_content(), "Panel")

    assert expect.failures == []


@allure.feature("Playwright Host")
@allure.story("Locators")
@pytest.mark.P1
def test_tag_locator_ambiguity(chrome_window):
    with pytest.raises(AmbiguousLocatorError):
        chrome_window.find_element("tag", ".dup").exists(0)
    assert not chrome_window.find_element("tag", ".missing").exists(0)


@allure.feature("Playwright Host")
@allure.story("UI Map")
@pytest.mark.P0
def test_browser_ui_map(chrome_window):
    ui = chrome_window.ui

    ui.nav_bar.location_bar.type("example.org")
    ui.nav_bar.home.click()

    assert ui.nav_bar.location_bar.get_text() == "example.org"
    assert chrome_window.title == "Home"
    assert ui.tab_bar.tabs.length == 2
    assert ui.tab_bar.tabs.at(1).node.text_content() == "Two"


@allure.feature("Playwright Host")
@allure.story("Surfaces")
@pytest.mark.P1
def test_content_frame_uses_browser_surface(chrome_window):
    frame = chrome_window.inner_window.query_selector("#content").content_frame()
    inner = Button("id", "inner", frame, host=chrome_window.host)

    assert inner.surface is None
    assert inner.controller.window is chrome_window.inner_window
    assert inner.click()


@allure.feature("Playwright Host")
@allure.story("Keyboard")
@pytest.mark.P2
def test_accel_key_follows_platform(context, page):
    page.set_content("<input id='field'>")
    host = create_host(context)
    field = TextBox("id", "field", page, host=host)
    assert field.controller.platform == page.evaluate("() => navigator.platform")

    field.type("abc")
    field.keypress("a", {"accelKey": True})
    field.keypress("VK_BACK_SPACE")

    assert field.get_text() == ""
    assert to_key_combo("t", {"ctrlKey": True, "shiftKey": True}) == "Control+Shift+t"


@allure.feature("Playwright Host")
@allure.story("Modal Dialogs")
@pytest.mark.P0
def test_modal_dialog_handler(chrome_window):
    seen = []

    def handle(dialog):
        seen.append(dialog.title)
        assert dialog.find_element("id", "ok", Button).exists()

    chrome_window.set_modal_dialog_handler(handle)
    chrome_window.find_element("id", "open-dialog").click()
    chrome_window.wait_for_modal_dialog()

    assert seen == ["Confirm"]
    assert get_most_recent_window(chrome_window.host, filter_window_by_title, "Confirm") is None


@allure.feature("Playwright Host")
@allure.story("Modal Dialogs")
@pytest.mark.P1
def test_unexpected_modal_dialog(chrome_window):
    chrome_window.find_element("id", "open-dialog").click()
    chrome_window.host.scheduler.sleep(1000)

    with pytest.raises(UnexpectedDialogError, match="'Confirm'"):
        chrome_window.find_element("id", "urlbar")


@allure.feature("Playwright Host")
@allure.story("Windows")
@pytest.mark.P1
def test_open_url_and_window_lookup(host, harness):
    browser = get_browser_window(host)

    assert browser.type == BROWSER_WINDOW_TYPE
    browser.open_url("data:text/html,<title>Loaded</title><p>ok</p>")
    assert browser.title == "Loaded"
    assert host.windows.is_page_loaded(browser.inner_window)
    browser.destroy()

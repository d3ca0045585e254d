import pytest

from uimap.framework.errors import UnexpectedDialogError, WaitTimeoutError
from uimap.framework.head import TestHarness, setup, teardown
from uimap.framework.driver import sleep
from uimap.framework.assertions import Assert, Expect
from uimap.ui.browser import BrowserWindow

from testsuites.unit.fakes import FakeNode, FakeWindow


@pytest.fixture
def browser(host, browser_window):
    browser_window.document.append(
        FakeNode("toolbar", id="TabsToolbar").append(
            FakeNode("tabs", id="tabbrowser-tabs").append(
                FakeNode("tab", id="tab-1", classes=("tabbrowser-tab",)),
                FakeNode("tab", id="tab-2", classes=("tabbrowser-tab",)),
            )
        )
    )
    wrapper = BrowserWindow(browser_window, host)
    yield wrapper
    wrapper.destroy()


def test_ui_map(browser, browser_window):
    ui = browser.ui

    assert ui.nav_bar.home.node.attrs["id"] == "home-button"
    assert ui.nav_bar.location_bar.owner is ui.nav_bar
    assert ui.nav_bar.home.surface is ui.nav_bar.surface

    tabs = ui.tab_bar.tabs
    assert tabs.length == 2
    assert tabs.at(1).node.attrs["id"] == "tab-2"
    assert [row.node.attrs["id"] for row in tabs.rows] == ["tab-1", "tab-2"]


def test_location_bar_typing(browser):
    location_bar = browser.ui.nav_bar.location_bar

    location_bar.type("example.org")
    location_bar.keypress("VK_RETURN")

    assert location_bar.get_text() == "example.org"


def test_open_url_waits_for_page_load(host_and_clock, browser, browser_window):
    host, clock = host_and_clock
    browser_window.page_loaded = False
    host.scheduler.call_later(150, lambda: setattr(browser_window, "page_loaded", True))

    browser.open_url("https://example.org/")

    assert browser_window.url == "https://example.org/"
    assert clock.time == 200


def test_open_url_without_waiting(host_and_clock, browser, browser_window):
    host, clock = host_and_clock
    browser_window.page_loaded = False

    browser.open_url("https://example.org/", timeout=0)

    assert clock.time == 0


def test_wait_for_page_load_timeout(browser, browser_window):
    browser_window.page_loaded = False

    with pytest.raises(WaitTimeoutError, match="Page has been loaded"):
        browser.wait_for_page_load(300)


def test_open_url_reports_unexpected_dialog(host, browser, browser_window):
    host.windows.open_modal(opener=browser_window, title="Alert")
    sleep(200, scheduler=host.scheduler)

    with pytest.raises(UnexpectedDialogError):
        browser.open_url("https://example.org/")


def test_reset_tabs_closes_other_browser_windows(host, browser, browser_window):
    other = host.windows.add(FakeWindow(title="Other"))
    dialog = host.windows.add(FakeWindow(title="Prefs", window_type="Browser:Preferences"))

    browser.reset_tabs()

    assert other.closed
    assert not dialog.closed
    assert host.windows.loaded_urls[-1] == "about:blank"


def test_setup_and_teardown(host, browser_window):
    harness = setup(host)

    assert isinstance(harness, TestHarness)
    assert isinstance(harness.assert_, Assert)
    assert isinstance(harness.expect, Expect)
    assert harness.browser.inner_window is browser_window
    assert harness.driver.wait_for(lambda: True)
    assert host.windows.loaded_urls == ["about:blank"]

    teardown(harness)

    assert harness.browser.inner_window is None
    assert host.windows.loaded_urls == ["about:blank", "about:blank"]
    assert host.scheduler.pending == 0


def test_setup_without_tab_reset(host, browser_window):
    harness = setup(host, reset_tabs=False)

    assert host.windows.loaded_urls == []
    teardown(harness)


def test_wait_for_page_load_with_zero_timeout(host_and_clock, browser, browser_window):
    host, clock = host_and_clock
    browser_window.page_loaded = False

    with pytest.raises(WaitTimeoutError, match="Page has been loaded"):
        browser.wait_for_page_load(0)
    assert clock.time == 0

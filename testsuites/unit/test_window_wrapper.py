import pytest

from uimap.framework.driver import filter_window_by_title, filter_window_by_type
from uimap.framework.errors import InvalidParameterError, WaitTimeoutError
from uimap.framework.widgets import Button, TextBox, Widget
from uimap.framework.windows import ChromeWindowWrapper, ContentWindowWrapper, WindowWrapper

from testsuites.unit.fakes import FakeDocument, FakeWindow


@pytest.fixture
def browser(host, browser_window):
    wrapper = ChromeWindowWrapper(browser_window, host)
    yield wrapper
    wrapper.destroy()


def test_window_is_required(host):
    with pytest.raises(InvalidParameterError):
        WindowWrapper(None, host)
    with pytest.raises(InvalidParameterError):
        ChromeWindowWrapper(None, host)


def test_chrome_wrapper_waits_for_load(host_and_clock):
    host, clock = host_and_clock
    window = host.windows.add(FakeWindow(title="Loading", loaded=False))
    host.scheduler.call_later(300, lambda: setattr(window, "loaded", True))

    wrapper = ChromeWindowWrapper(window, host)

    assert wrapper.is_loaded
    assert clock.time == 300
    wrapper.destroy()


def test_chrome_wrapper_times_out_on_unloaded_window(host):
    window = host.windows.add(FakeWindow(title="Stuck", loaded=False))

    with pytest.raises(WaitTimeoutError, match="has been loaded"):
        ChromeWindowWrapper(window, host)


def test_properties(browser, browser_window):
    browser_window.id = "main-window"

    assert browser.title == "Browser"
    assert browser.type == "navigator:browser"
    assert browser.id == "main-window"
    assert browser.inner_window is browser_window
    assert browser.document is browser_window.document
    assert not browser.closed


def test_find_element_defaults_to_widget(browser):
    element = browser.find_element("id", "urlbar")
    assert type(element) is Widget

    textbox = browser.find_element("id", "urlbar", "TextBox")
    assert isinstance(textbox, TextBox)

    nav_bar = browser.find_element("id", "nav-bar")
    home = browser.find_element("id", "home-button", Button, owner=nav_bar)
    assert home.owner is nav_bar
    assert home.exists(0)


def test_close_waits_until_closed(host, browser_window):
    wrapper = WindowWrapper(browser_window, host)

    wrapper.close()

    assert wrapper.closed
    assert browser_window.closed


def test_chrome_close_releases_observer(host, browser, browser_window):
    browser.close()

    assert browser.closed
    assert browser.inner_window is None
    assert host.scheduler.pending == 0
    browser.destroy()


def test_keypress_goes_to_window_surface(host, browser, browser_window):
    browser.keypress("w", {"accelKey": True})

    assert host.surface_for(browser_window).calls[-1] == (
        "keypress", None, "w",
        {"ctrlKey": True, "altKey": False, "shiftKey": False, "metaKey": False},
    )


def test_get_content_window(host, browser):
    content = FakeWindow(title="Content")
    content.document = FakeDocument(content, chrome=False)

    wrapper = browser.get_content_window(content)

    assert isinstance(wrapper, ContentWindowWrapper)
    assert wrapper.document is content.document
    assert isinstance(browser.get_content_window(content, WindowWrapper), WindowWrapper)


def test_find_window_skips_itself(host, browser):
    other = host.windows.add(FakeWindow(title="Second"))

    found = browser.find_window(filter_window_by_type, "navigator:browser")

    assert found.inner_window is other
    found.destroy()


def test_find_window_waits_for_window(host_and_clock, browser_window):
    host, clock = host_and_clock
    browser = ChromeWindowWrapper(browser_window, host)
    host.scheduler.call_later(
        250, lambda: host.windows.add(FakeWindow(title="Library", window_type="Places:Organizer"))
    )

    found = browser.find_window(filter_window_by_title, "Library")

    assert found.title == "Library"
    assert clock.time == 300
    found.destroy()
    browser.destroy()


def test_find_window_times_out(browser):
    with pytest.raises(WaitTimeoutError, match="Window has been found"):
        browser.find_window(filter_window_by_title, "Nope", timeout=300)


def test_handle_window_closes_after_callback(host, browser):
    other = host.windows.add(FakeWindow(title="Downloads", window_type="Download:Manager"))
    seen = []

    browser.handle_window(filter_window_by_type, lambda win: seen.append(win.title), value="Download:Manager")

    assert seen == ["Downloads"]
    assert other.closed


def test_handle_window_keeps_window_open_on_request(host, browser):
    other = host.windows.add(FakeWindow(title="Downloads", window_type="Download:Manager"))

    win = browser.handle_window(filter_window_by_type, lambda win: None, close=False, value="Download:Manager")

    assert not other.closed
    win.destroy()


def test_handle_window_closes_on_error(host, browser):
    other = host.windows.add(FakeWindow(title="Downloads", window_type="Download:Manager"))

    def callback(win):
        raise ValueError("bad window")

    with pytest.raises(ValueError):
        browser.handle_window(filter_window_by_type, callback, value="Download:Manager")
    assert other.closed


def test_handle_window_without_callback_returns_open_window(host, browser):
    other = host.windows.add(FakeWindow(title="Downloads", window_type="Download:Manager"))

    win = browser.handle_window(filter_window_by_type, value="Download:Manager")

    assert win.inner_window is other
    assert not other.closed
    win.destroy()


def test_destroyed_wrapper_rejects_modal_dialog_calls(host, browser_window):
    wrapper = ChromeWindowWrapper(browser_window, host)
    wrapper.destroy()

    with pytest.raises(InvalidParameterError, match="Window has been destroyed"):
        wrapper.set_modal_dialog_handler(lambda dialog: None)
    with pytest.raises(InvalidParameterError, match="Window has been destroyed"):
        wrapper.wait_for_modal_dialog()


def test_zero_timeout_is_not_replaced_by_default(host_and_clock, browser_window):
    host, clock = host_and_clock
    browser = ChromeWindowWrapper(browser_window, host)

    with pytest.raises(WaitTimeoutError):
        browser.find_window(filter_window_by_title, "Nope", timeout=0)
    with pytest.raises(WaitTimeoutError):
        browser.wait_for_modal_dialog(0)

    assert clock.time == 0
    browser.destroy()

"""
================================================================================
Browser UI Map
================================================================================

UI map of a browser window, plus helpers to get hold of one.

Structure:
    BrowserWindow (ChromeWindowWrapper)
    └── ui: BrowserMap
        ├── nav_bar: NavBar (#nav-bar)
        │   ├── home (#home-button)
        │   └── location_bar (#urlbar)
        └── tab_bar: TabBar (#TabsToolbar)
            └── tabs: Tabs (#tabbrowser-tabs) -> rows / length / at()

Usage:
    browser = get_browser_window(host)
    browser.open_url("https://example.org")
    browser.ui.nav_bar.location_bar.type("uimap")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import List, Optional

import allure
from loguru import logger

from ..framework.dom import NodeCollector
from ..framework.driver import filter_window_by_type, get_most_recent_window, wait_for
from ..framework.host import Document, HostServices, Window
from ..framework.widgets import Button, Element, Region, TextBox
from ..framework.windows import ChromeWindowWrapper


BLANK_PAGE = "about:blank"


# ================================================================================
# UI Map
# ================================================================================

class NavBar(Region):
    """Navigation toolbar."""

    def __init__(self, locator_type, locator, owner, host=None):
        super().__init__(locator_type, locator, owner, host)
        self.home = Button("tag", "#home-button", self)
        self.location_bar = TextBox("tag", "#urlbar", self)


class Tabs(Region):
    """Tab strip."""

    @property
    def rows(self) -> List[Element]:
        """One element per tab, left to right."""
        collector = NodeCollector(self.host, self.node)
        return collector.query_nodes(".tabbrowser-tab").elements

    @property
    def length(self) -> int:
        return len(self.rows)

    def at(self, index: int) -> Element:
        return self.rows[index]


class TabBar(Region):
    """Toolbar holding the tab strip."""

    def __init__(self, locator_type, locator, owner, host=None):
        super().__init__(locator_type, locator, owner, host)
        self.tabs = Tabs("tag", "#tabbrowser-tabs", self)


class BrowserMap:
    """Top-level widgets of a browser document."""

    def __init__(self, document: Document, host: HostServices):
        self.nav_bar = NavBar("tag", "#nav-bar", document, host=host)
        self.tab_bar = TabBar("tag", "#TabsToolbar", document, host=host)


# ================================================================================
# Browser Window
# ================================================================================

class BrowserWindow(ChromeWindowWrapper):
    """Browser window with its UI map and page loading helpers."""

    @property
    def ui(self) -> BrowserMap:
        """Fresh UI map of the current document (no stale node caches after navigation)."""
        return BrowserMap(self.document, self._host)

    @allure.step("Open URL")
    def open_url(self, url: str, timeout: Optional[float] = None) -> "BrowserWindow":
        """
        Load a URL in this window.

        Args:
            url: URL to load
            timeout: Page load timeout in milliseconds. 0 skips waiting.
        """
        self._raise_unexpected_dialog()
        logger.info(f"Opening {url}")
        self._host.windows.load_url(self._window, url)
        if timeout is None or timeout > 0:
            self.wait_for_page_load(timeout)
        return self

    def wait_for_page_load(self, timeout: Optional[float] = None) -> "BrowserWindow":
        """
        Wait until the current page has finished loading.

        Raises:
            WaitTimeoutError: The page did not load in time
        """
        settings = self._host.settings
        wait_for(
            lambda: self._host.windows.is_page_loaded(self._window),
            "Page has been loaded",
            settings.page_load_timeout if timeout is None else timeout,
            settings.interval,
            scheduler=self._host.scheduler,
        )
        return self

    @allure.step("Reset tabs")
    def reset_tabs(self) -> "BrowserWindow":
        """Close every other browser window and load a blank page."""
        self._raise_unexpected_dialog()
        windows = self._host.windows
        for window in windows.windows_by_age():
            if window != self._window and windows.type_of(window) == windows.browser_window_type:
                logger.debug(f"Closing window '{windows.title_of(window)}'")
                windows.close_window(window)
        return self.open_url(BLANK_PAGE)


def get_browser_window(host: HostServices) -> BrowserWindow:
    """Return the top-most browser window, opening one if none exists."""
    window = get_most_recent_window(
        host, filter_window_by_type, host.windows.browser_window_type
    )
    if window is None:
        return open_browser_window(host)
    return BrowserWindow(window, host)


@allure.step("Open browser window")
def open_browser_window(host: HostServices, url: Optional[str] = None) -> BrowserWindow:
    """Open a new browser window and wait until it has been loaded."""
    window: Window = host.windows.open_window(url)
    logger.info(f"Opened browser window {url or BLANK_PAGE}")
    return BrowserWindow(window, host)


__all__ = [
    "BLANK_PAGE",
    "NavBar",
    "Tabs",
    "TabBar",
    "BrowserMap",
    "BrowserWindow",
    "get_browser_window",
    "open_browser_window",
]

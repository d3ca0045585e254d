"""
Setup and teardown shared by UI tests.

    harness = setup(host)
    harness.browser.open_url("https://example.org")
    harness.expect.equal(harness.browser.title, "Example Domain")
    teardown(harness)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType

from loguru import logger

from . import driver as driver_module
from .assertions import Assert, Expect
from .host import HostServices
from ..ui.browser import BrowserWindow, get_browser_window


@dataclass
class TestHarness:
    """What a test gets from setup()."""
    __test__ = False

    host: HostServices
    browser: BrowserWindow
    assert_: Assert = field(default_factory=Assert)
    expect: Expect = field(default_factory=Expect)
    driver: ModuleType = driver_module


def setup(host: HostServices, reset_tabs: bool = True) -> TestHarness:
    """
    Prepare a test.

    Args:
        host: Host services
        reset_tabs: Bring the browser into a known state. Disable for tests
                    that depend on the pages the browser started with.
    """
    browser = get_browser_window(host)
    if reset_tabs:
        browser.reset_tabs()
    logger.debug(f"Test harness ready on {browser}")
    return TestHarness(host=host, browser=browser)


def teardown(harness: TestHarness) -> None:
    """Reset the browser and release its modal dialog observer."""
    try:
        harness.browser.reset_tabs()
    finally:
        harness.browser.destroy()


__all__ = [
    "TestHarness",
    "setup",
    "teardown",
]

"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures that run uimap against a real browser through the Playwright host.

Key Features:
- Session-scoped Playwright browser (skipped when no browser is installed)
- Per-test browser context, page and HostServices
- Test harness (setup/teardown of the browser window wrapper)
- Screenshot capture on failure

================================================================================
"""

import os
from typing import Generator

import allure
import pytest
from loguru import logger
from playwright.sync_api import Browser, BrowserContext, Error, Page, Playwright, sync_playwright

from uimap.framework.head import TestHarness, setup, teardown
from uimap.framework.host import HostServices
from uimap.hosts import create_host


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def playwright_instance() -> Generator[Playwright, None, None]:
    """Session-scoped Playwright driver."""
    with sync_playwright() as playwright:
        yield playwright


@pytest.fixture(scope="session")
def browser(playwright_instance: Playwright) -> Generator[Browser, None, None]:
    """
    Session-scoped browser.

    Browser type and headless mode come from UI_BROWSER / UI_HEADLESS.
    """
    browser_type = os.environ.get("UI_BROWSER", "chromium")
    headless = os.environ.get("UI_HEADLESS", "true").lower() in ("true", "1", "yes")

    try:
        browser = getattr(playwright_instance, browser_type).launch(headless=headless)
    except Error as e:
        pytest.skip(f"Cannot launch {browser_type}: {e.message}")

    logger.debug(f"Browser started: {browser_type} (headless={headless})")
    yield browser
    browser.close()


@pytest.fixture(scope="function")
def context(browser: Browser) -> Generator[BrowserContext, None, None]:
    """Function-scoped browser context for test isolation."""
    context = browser.new_context(viewport={"width": 1280, "height": 800})
    yield context
    context.close()


@pytest.fixture(scope="function")
def page(context: BrowserContext) -> Page:
    """First page of the context; the browser window uimap automates."""
    return context.new_page()


@pytest.fixture(scope="function")
def host(context: BrowserContext, page: Page) -> HostServices:
    return create_host(context)


@pytest.fixture(scope="function")
def harness(host: HostServices) -> Generator[TestHarness, None, None]:
    harness = setup(host)
    yield harness
    teardown(harness)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Hook to capture screenshots on test failure.

    Takes a screenshot of the page when a UI test fails and attaches it to
    the Allure report.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        page = getattr(item, "funcargs", {}).get("page")
        if page is None or page.is_closed():
            return
        try:
            allure.attach(
                page.screenshot(full_page=True),
                name="failure_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
        except Error as e:
            # Log but don't fail if screenshot capture fails
            logger.warning(f"Failed to capture screenshot on failure: {e.message}")

"""
Concrete hosts for uimap.

Currently only Playwright (sync API) is provided.
"""

from .playwright_host import (
    BROWSER_WINDOW_TYPE,
    MODAL_WINDOW_TYPE,
    PlaywrightDom,
    PlaywrightSurface,
    PlaywrightSurfaces,
    PlaywrightWindows,
    create_host,
)

__all__ = [
    "BROWSER_WINDOW_TYPE",
    "MODAL_WINDOW_TYPE",
    "PlaywrightDom",
    "PlaywrightSurface",
    "PlaywrightSurfaces",
    "PlaywrightWindows",
    "create_host",
]

from .browser import (
    BrowserMap,
    BrowserWindow,
    NavBar,
    TabBar,
    Tabs,
    get_browser_window,
    open_browser_window,
)

__all__ = [
    "BrowserMap",
    "BrowserWindow",
    "NavBar",
    "TabBar",
    "Tabs",
    "get_browser_window",
    "open_browser_window",
]

# ================================================================================
# Playwright Host
# ================================================================================
#
# Host automation surface backed by Playwright's synchronous API.
#
# Mapping:
#   - windows    Playwright pages of one BrowserContext
#   - documents  frames; the main frame is chrome-like, child frames are content
#   - nodes      ElementHandles
#   - anonymous  nodes inside an element's shadow root
#   - modal      a popup page whose root element carries aria-modal="true"
#   - delay      page.wait_for_timeout(), so Playwright keeps dispatching its
#                events (new pages, closes) while uimap waits
#
# Usage:
#   with sync_playwright() as p:
#       context = p.chromium.launch().new_context()
#       host = create_host(context)
#       browser = get_browser_window(host)
#
# ================================================================================

from __future__ import annotations

import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from loguru import logger
from playwright.sync_api import BrowserContext, ElementHandle, Error, Frame, Page

from ..common.config_loader import WaitSettings
from ..framework.host import HostServices
from ..framework.scheduler import Scheduler


BROWSER_WINDOW_TYPE = "navigator:browser"
MODAL_WINDOW_TYPE = "modal:dialog"

MOUSE_BUTTONS = {0: "left", 1: "middle", 2: "right"}

# Legacy virtual key names used by UI maps, mapped to Playwright key names
VIRTUAL_KEYS = {
    "VK_RETURN": "Enter",
    "VK_ENTER": "Enter",
    "VK_ESCAPE": "Escape",
    "VK_TAB": "Tab",
    "VK_BACK_SPACE": "Backspace",
    "VK_DELETE": "Delete",
    "VK_SPACE": " ",
    "VK_UP": "ArrowUp",
    "VK_DOWN": "ArrowDown",
    "VK_LEFT": "ArrowLeft",
    "VK_RIGHT": "ArrowRight",
    "VK_HOME": "Home",
    "VK_END": "End",
    "VK_PAGE_UP": "PageUp",
    "VK_PAGE_DOWN": "PageDown",
    "VK_F5": "F5",
}

MODIFIER_KEYS = (
    ("ctrlKey", "Control"),
    ("altKey", "Alt"),
    ("shiftKey", "Shift"),
    ("metaKey", "Meta"),
)

_FIND_LINK_JS = """
text => Array.from(document.getElementsByTagName('a'))
    .find(a => a.textContent.trim() === text) || null
"""

_FIND_ANONYMOUS_JS = """
(node, [attribute, value]) => {
    const scope = node.shadowRoot;
    if (!scope) return null;
    return Array.from(scope.querySelectorAll('*'))
        .find(n => n.getAttribute(attribute) === value) || null;
}
"""


def to_key_combo(key: str, modifiers: Mapping[str, bool]) -> str:
    """Build a Playwright key combination such as 'Control+Shift+T'."""
    parts = [name for flag, name in MODIFIER_KEYS if modifiers.get(flag)]
    parts.append(VIRTUAL_KEYS.get(key, key))
    return "+".join(parts)


def _position(left: Optional[float], top: Optional[float]) -> Optional[Dict[str, float]]:
    if left is None and top is None:
        return None
    return {"x": left or 0, "y": top or 0}


# ================================================================================
# Document Access
# ================================================================================

class PlaywrightDom:
    """DomAccess over Playwright frames and element handles."""

    def document_of(self, root: Any) -> Frame:
        if isinstance(root, Page):
            return root.main_frame
        if isinstance(root, ElementHandle):
            return root.owner_frame()
        return root

    def is_window(self, obj: Any) -> bool:
        return isinstance(obj, Page)

    def window_of(self, document: Frame) -> Page:
        return document.page

    def is_chrome_document(self, document: Frame) -> bool:
        return document.parent_frame is None

    def find_by_id(self, document: Frame, value: str) -> Optional[ElementHandle]:
        return document.query_selector(f"id={value}")

    def find_by_xpath(self, document: Frame, value: str) -> Optional[ElementHandle]:
        return document.query_selector(f"xpath={value}")

    def find_by_name(self, document: Frame, value: str) -> Optional[ElementHandle]:
        return document.evaluate_handle(
            "name => document.getElementsByName(name)[0] || null", value
        ).as_element()

    def find_by_link(self, document: Frame, value: str) -> Optional[ElementHandle]:
        return document.evaluate_handle(_FIND_LINK_JS, value).as_element()

    def lookup(self, document: Frame, value: str) -> Optional[ElementHandle]:
        """Resolve a raw Playwright selector chain ('#nav >> .tab')."""
        return document.query_selector(value)

    def query_selector_all(self, root: Any, selector: str) -> Sequence[ElementHandle]:
        return root.query_selector_all(selector)

    def find_anonymous(self, root: Any, attribute: str, value: str) -> Optional[ElementHandle]:
        if isinstance(root, Frame):
            root = root.evaluate_handle("() => document.documentElement").as_element()
        return root.evaluate_handle(_FIND_ANONYMOUS_JS, [attribute, value]).as_element()

    def get_attribute(self, node: ElementHandle, name: str) -> Optional[str]:
        return node.get_attribute(name)

    def has_attribute(self, node: ElementHandle, name: str) -> bool:
        return node.evaluate("(n, name) => n.hasAttribute(name)", name)

    def get_property(self, node: ElementHandle, name: str) -> Any:
        return node.get_property(name).json_value()

    def has_property(self, node: ElementHandle, name: str) -> bool:
        return node.evaluate("(n, name) => name in n", name)

    def computed_style(self, node: ElementHandle, name: str) -> str:
        return node.evaluate(
            "(n, name) => getComputedStyle(n).getPropertyValue(name)", name
        )


# ================================================================================
# Window Management
# ================================================================================

class PlaywrightWindows:
    """
    WindowManager over the pages of a BrowserContext.

    Age order is the context's page order. Z-order is tracked here: a new
    page goes on top, bring_to_front() moves a page on top, closed pages
    drop out.
    """

    browser_window_type = BROWSER_WINDOW_TYPE

    def __init__(self, context: BrowserContext):
        self._context = context
        self._z_order: List[Page] = []
        for page in context.pages:
            self._track(page)
        context.on("page", self._track)

    def _track(self, page: Page) -> None:
        logger.debug(f"Tracking page {page.url or 'about:blank'}")
        self._z_order.append(page)
        page.on("close", self._untrack)

    def _untrack(self, page: Page) -> None:
        if page in self._z_order:
            self._z_order.remove(page)

    def bring_to_front(self, page: Page) -> None:
        page.bring_to_front()
        self._untrack(page)
        self._z_order.append(page)

    def windows_by_age(self) -> List[Page]:
        return [page for page in self._context.pages if not page.is_closed()]

    def windows_by_z_order(self) -> List[Page]:
        return [page for page in self._z_order if not page.is_closed()]

    def _root_attribute(self, page: Page, name: str) -> Optional[str]:
        try:
            return page.evaluate(
                "name => document.documentElement && document.documentElement.getAttribute(name)",
                name,
            )
        except Error as e:
            # The execution context goes away while the page navigates
            logger.debug(f"Cannot read '{name}' of {page.url}: {e.message}")
            return None

    def _ready_state(self, page: Page) -> Optional[str]:
        if page.is_closed():
            return None
        try:
            return page.evaluate("() => document.readyState")
        except Error as e:
            logger.debug(f"Cannot read ready state of {page.url}: {e.message}")
            return None

    def is_modal(self, window: Page) -> bool:
        if window.is_closed() or window.opener() is None:
            return False
        return self._root_attribute(window, "aria-modal") == "true"

    def opener_of(self, window: Page) -> Optional[Page]:
        return window.opener()

    def top_window_of(self, window: Page) -> Page:
        # Pages are always top-level
        return window

    def is_loaded(self, window: Page) -> bool:
        return self._ready_state(window) in ("interactive", "complete")

    def is_page_loaded(self, window: Page) -> bool:
        return self._ready_state(window) == "complete"

    def is_closed(self, window: Page) -> bool:
        return window.is_closed()

    def close_window(self, window: Page) -> None:
        logger.debug(f"Closing page {window.url}")
        window.close()

    def title_of(self, window: Page) -> str:
        if window.is_closed():
            return ""
        return window.title()

    def type_of(self, window: Page) -> Optional[str]:
        window_type = self._root_attribute(window, "windowtype")
        if window_type:
            return window_type
        return MODAL_WINDOW_TYPE if self.is_modal(window) else BROWSER_WINDOW_TYPE

    def id_of(self, window: Page) -> Optional[str]:
        return self._root_attribute(window, "id") or None

    def document_of_window(self, window: Page) -> Frame:
        return window.main_frame

    def has_method(self, window: Page, name: str) -> bool:
        return window.evaluate("name => typeof window[name] === 'function'", name)

    def open_window(self, url: Optional[str] = None) -> Page:
        page = self._context.new_page()
        if url:
            page.goto(url)
        return page

    def load_url(self, window: Page, url: str) -> None:
        # Only wait for the navigation to commit; callers decide whether to
        # wait for the load through is_page_loaded()
        window.goto(url, wait_until="commit")


# ================================================================================
# Automation Surface
# ================================================================================

class PlaywrightSurface:
    """AutomationSurface that synthesizes input through one page."""

    def __init__(self, page: Page, platform: Optional[str] = None):
        self.window = page
        self._platform = platform

    @property
    def platform(self) -> str:
        if self._platform is None:
            self._platform = self.window.evaluate("() => navigator.platform")
        return self._platform

    def click(self, node: ElementHandle, left=None, top=None) -> bool:
        node.click(position=_position(left, top))
        return True

    def double_click(self, node: ElementHandle, left=None, top=None) -> bool:
        node.dblclick(position=_position(left, top))
        return True

    def right_click(self, node: ElementHandle, left=None, top=None) -> bool:
        node.click(button="right", position=_position(left, top))
        return True

    def _move_to(self, node: ElementHandle, left: Optional[float], top: Optional[float]) -> None:
        box = node.bounding_box()
        if box is None:
            node.scroll_into_view_if_needed()
            box = node.bounding_box()
        x = box["x"] + (box["width"] / 2 if left is None else left)
        y = box["y"] + (box["height"] / 2 if top is None else top)
        self.window.mouse.move(x, y)

    def mouse_down(self, node: ElementHandle, button: int = 0, left=None, top=None) -> bool:
        self._move_to(node, left, top)
        self.window.mouse.down(button=MOUSE_BUTTONS.get(button, "left"))
        return True

    def mouse_up(self, node: ElementHandle, button: int = 0, left=None, top=None) -> bool:
        self._move_to(node, left, top)
        self.window.mouse.up(button=MOUSE_BUTTONS.get(button, "left"))
        return True

    def mouse_event(self, node: ElementHandle, offset_x, offset_y, event: Mapping[str, Any]) -> bool:
        options = dict(event)
        event_type = options.pop("type", "click")
        click_count = options.pop("clickCount", 1)

        box = node.bounding_box() or {"x": 0, "y": 0, "width": 0, "height": 0}
        init = {
            "bubbles": True,
            "cancelable": True,
            "detail": click_count,
            "clientX": box["x"] + (box["width"] / 2 if offset_x is None else offset_x),
            "clientY": box["y"] + (box["height"] / 2 if offset_y is None else offset_y),
        }
        init.update(options)
        node.dispatch_event(event_type, init)
        return True

    def keypress(self, node: Optional[ElementHandle], key: str, modifiers: Mapping[str, bool]) -> bool:
        combo = to_key_combo(key, modifiers)
        if node is None:
            self.window.keyboard.press(combo)
        else:
            node.press(combo)
        return True

    def type(self, node: ElementHandle, text: str) -> bool:
        node.focus()
        self.window.keyboard.type(text)
        return True


class PlaywrightSurfaces:
    """
    One PlaywrightSurface per open page.

    Entries are dropped when their page closes, so closed pages are not
    kept alive by the cache.
    """

    def __init__(self, platform: Optional[str] = None):
        self._platform = platform
        self._surfaces: Dict[Page, PlaywrightSurface] = {}

    def __len__(self) -> int:
        return len(self._surfaces)

    def __call__(self, page: Page) -> PlaywrightSurface:
        surface = self._surfaces.get(page)
        if surface is None:
            surface = self._surfaces[page] = PlaywrightSurface(page, self._platform)
            page.on("close", self._forget)
        return surface

    def _forget(self, page: Page) -> None:
        self._surfaces.pop(page, None)


# ================================================================================
# Host Factory
# ================================================================================

def create_host(
    context: BrowserContext,
    settings: Optional[WaitSettings] = None,
    platform: Optional[str] = None,
) -> HostServices:
    """
    Build HostServices for a Playwright browser context.

    Args:
        context: Browser context whose pages are the windows
        settings: Wait settings (default: from configuration)
        platform: Override of navigator.platform, e.g. for accel key tests

    Returns:
        HostServices wired to Playwright
    """
    def delay(milliseconds: float) -> None:
        pages = [page for page in context.pages if not page.is_closed()]
        if pages:
            pages[0].wait_for_timeout(milliseconds)
        else:
            time.sleep(milliseconds / 1000.0)

    return HostServices(
        dom=PlaywrightDom(),
        windows=PlaywrightWindows(context),
        surface_for=PlaywrightSurfaces(platform),
        scheduler=Scheduler(delay=delay),
        settings=settings or WaitSettings.from_config(),
    )


__all__ = [
    "BROWSER_WINDOW_TYPE",
    "MODAL_WINDOW_TYPE",
    "to_key_combo",
    "PlaywrightDom",
    "PlaywrightWindows",
    "PlaywrightSurface",
    "PlaywrightSurfaces",
    "create_host",
]

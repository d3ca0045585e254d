"""
================================================================================
Host Automation Surface
================================================================================

Protocols describing what uimap needs from the application under test, and
the HostServices value object that carries a concrete host through the
element and window layers.

A host supplies:
    - DomAccess:          node lookups and property reads on a document
    - AutomationSurface:  synthetic input bound to one top-level window
    - WindowManager:      window enumeration, load state and lifecycle
    - a delay primitive, wrapped by the cooperative Scheduler

Nothing in the core looks a host up from a global; every Element and window
wrapper receives HostServices explicitly.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from .errors import WindowNotFoundError
from .scheduler import Scheduler
from ..common.config_loader import WaitSettings


# Nodes, documents and windows are opaque host handles
Node = Any
Document = Any
Window = Any


DEFAULT_MODIFIERS: Dict[str, bool] = {
    "ctrlKey": False,
    "altKey": False,
    "shiftKey": False,
    "metaKey": False,
    "accelKey": False,
}


def is_mac_platform(platform: str) -> bool:
    """Return True for macOS platform identifiers (darwin, MacIntel, ...)."""
    return (platform or "").lower().startswith(("darwin", "mac"))


def normalize_modifiers(
    modifiers: Optional[Mapping[str, bool]],
    platform: str,
) -> Dict[str, bool]:
    """
    Merge caller modifiers over the defaults and resolve the accel key.

    accelKey is Ctrl on Windows/Linux and Cmd (meta) on macOS. The returned
    mapping never contains accelKey.

    Args:
        modifiers: Caller supplied overrides, may be None
        platform: Host platform identifier

    Returns:
        Dict with ctrlKey, altKey, shiftKey and metaKey
    """
    merged = dict(DEFAULT_MODIFIERS)
    merged.update(modifiers or {})

    accel = bool(merged.pop("accelKey"))
    if accel:
        if is_mac_platform(platform):
            merged["metaKey"] = True
        else:
            merged["ctrlKey"] = True

    return {key: bool(value) for key, value in merged.items()}


class DomAccess(Protocol):
    """Document queries provided by the host."""

    def find_by_id(self, document: Document, value: str) -> Optional[Node]: ...

    def find_by_xpath(self, document: Document, value: str) -> Optional[Node]: ...

    def find_by_name(self, document: Document, value: str) -> Optional[Node]: ...

    def find_by_link(self, document: Document, value: str) -> Optional[Node]: ...

    def lookup(self, document: Document, value: str) -> Optional[Node]: ...

    def query_selector_all(self, root: Any, selector: str) -> Sequence[Node]: ...

    def find_anonymous(self, root: Any, attribute: str, value: str) -> Optional[Node]: ...

    def get_attribute(self, node: Node, name: str) -> Optional[str]: ...

    def has_attribute(self, node: Node, name: str) -> bool: ...

    def get_property(self, node: Node, name: str) -> Any: ...

    def has_property(self, node: Node, name: str) -> bool: ...

    def computed_style(self, node: Node, name: str) -> str: ...

    def document_of(self, root: Any) -> Document:
        """Document owning a node, a document (itself) or a window."""
        ...

    def is_window(self, obj: Any) -> bool: ...

    def window_of(self, document: Document) -> Window: ...

    def is_chrome_document(self, document: Document) -> bool: ...


class AutomationSurface(Protocol):
    """Input synthesis bound to one top-level window."""

    platform: str
    window: Window

    def click(self, node: Node, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def double_click(self, node: Node, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def right_click(self, node: Node, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def mouse_down(self, node: Node, button: int = 0, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def mouse_up(self, node: Node, button: int = 0, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def mouse_event(self, node: Node, offset_x: Optional[float], offset_y: Optional[float], event: Mapping[str, Any]) -> bool: ...

    def keypress(self, node: Optional[Node], key: str, modifiers: Mapping[str, bool]) -> bool: ...

    def type(self, node: Node, text: str) -> bool: ...


class WindowManager(Protocol):
    """Window enumeration and lifecycle provided by the host."""

    browser_window_type: Optional[str]

    def windows_by_age(self) -> List[Window]:
        """All open top-level windows, oldest first."""
        ...

    def windows_by_z_order(self) -> List[Window]:
        """All open top-level windows, bottom-most first."""
        ...

    def is_modal(self, window: Window) -> bool: ...

    def opener_of(self, window: Window) -> Optional[Window]: ...

    def top_window_of(self, window: Window) -> Window: ...

    def is_loaded(self, window: Window) -> bool: ...

    def is_closed(self, window: Window) -> bool: ...

    def close_window(self, window: Window) -> None: ...

    def title_of(self, window: Window) -> str: ...

    def type_of(self, window: Window) -> Optional[str]: ...

    def id_of(self, window: Window) -> Optional[str]: ...

    def document_of_window(self, window: Window) -> Document: ...

    def has_method(self, window: Window, name: str) -> bool: ...

    def open_window(self, url: Optional[str] = None) -> Window: ...

    def load_url(self, window: Window, url: str) -> None: ...

    def is_page_loaded(self, window: Window) -> bool: ...


@dataclass
class HostServices:
    """
    Everything the core needs from a host, bundled into one value.

    Attributes:
        dom: Document queries
        windows: Window enumeration and lifecycle
        surface_for: Factory returning the automation surface of a window
        scheduler: Cooperative timer queue driven by the host delay primitive
        settings: Timeouts and intervals
    """
    dom: DomAccess
    windows: WindowManager
    surface_for: Callable[[Window], AutomationSurface]
    scheduler: Scheduler = field(default_factory=Scheduler)
    settings: WaitSettings = field(default_factory=WaitSettings)

    def browser_surface(self) -> AutomationSurface:
        """
        Return the surface of the current top browser window.

        Content documents have no surface of their own; their elements route
        input through whatever browser window is on top at call time.
        """
        window_type = self.windows.browser_window_type
        candidates = [
            window for window in reversed(self.windows.windows_by_z_order())
            if not window_type or self.windows.type_of(window) == window_type
        ]
        if not candidates:
            raise WindowNotFoundError("No browser window is open")
        return self.surface_for(candidates[0])


__all__ = [
    "Node",
    "Document",
    "Window",
    "DEFAULT_MODIFIERS",
    "is_mac_platform",
    "normalize_modifiers",
    "DomAccess",
    "AutomationSurface",
    "WindowManager",
    "HostServices",
]

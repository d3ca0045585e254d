"""
In-memory host used by the unit tests.

Selectors understood by FakeDom.query_selector_all: "#id", ".class" and
plain tag names.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from uimap.common.config_loader import WaitSettings
from uimap.framework.host import HostServices
from uimap.framework.scheduler import Scheduler

BROWSER = "navigator:browser"


class FakeNode:
    def __init__(self, tag="div", id=None, classes=(), text="", attrs=None, props=None, style=None):
        self.tag = tag
        self.attrs: Dict[str, str] = dict(attrs or {})
        if id:
            self.attrs["id"] = id
        if classes:
            self.attrs["class"] = " ".join(classes)
        self.props: Dict[str, Any] = dict(props or {})
        self.style: Dict[str, str] = dict(style or {})
        self.text = text
        self.children: List[FakeNode] = []
        self.anonymous: List[FakeNode] = []
        self.document: Optional[FakeDocument] = None

    def __repr__(self):
        return f"<{self.tag} {self.attrs}>"

    def append(self, *nodes: "FakeNode") -> "FakeNode":
        for node in nodes:
            node._adopt(self.document)
            self.children.append(node)
        return self

    def _adopt(self, document):
        self.document = document
        for child in self.children + self.anonymous:
            child._adopt(document)

    def descendants(self):
        for child in self.children:
            yield child
            yield from child.descendants()

    def matches(self, selector: str) -> bool:
        if selector.startswith("#"):
            return self.attrs.get("id") == selector[1:]
        if selector.startswith("."):
            return selector[1:] in self.attrs.get("class", "").split()
        return self.tag == selector


class FakeDocument:
    def __init__(self, window=None, chrome=True):
        self.window = window
        self.chrome = chrome
        self.root = FakeNode("html")
        self.root._adopt(self)
        self.xpaths: Dict[str, FakeNode] = {}
        self.lookups: Dict[str, FakeNode] = {}

    def append(self, *nodes):
        self.root.append(*nodes)
        return self


class FakeWindow:
    def __init__(self, title="Browser", window_type=BROWSER, id=None, modal=False, opener=None, loaded=True):
        self.title = title
        self.window_type = window_type
        self.id = id
        self.modal = modal
        self.opener = opener
        self.loaded = loaded
        self.page_loaded = True
        self.closed = False
        self.url = "about:blank"
        self.methods = set()
        self.document = FakeDocument(self, chrome=True)

    def __repr__(self):
        return f"FakeWindow({self.title!r})"


class FakeDom:
    """DomAccess over FakeDocument/FakeNode with per-method query counters."""

    def __init__(self):
        self.queries: Dict[str, int] = {}

    def _count(self, name):
        self.queries[name] = self.queries.get(name, 0) + 1

    @staticmethod
    def _all(document):
        return list(document.root.descendants())

    def find_by_id(self, document, value):
        self._count("id")
        return next((n for n in self._all(document) if n.attrs.get("id") == value), None)

    def find_by_xpath(self, document, value):
        self._count("xpath")
        return document.xpaths.get(value)

    def find_by_name(self, document, value):
        self._count("name")
        return next((n for n in self._all(document) if n.attrs.get("name") == value), None)

    def find_by_link(self, document, value):
        self._count("link")
        return next((n for n in self._all(document) if n.tag == "a" and n.text == value), None)

    def lookup(self, document, value):
        self._count("lookup")
        return document.lookups.get(value)

    def query_selector_all(self, root, selector):
        self._count("tag")
        scope = root.root if isinstance(root, FakeDocument) else root
        return [n for n in scope.descendants() if n.matches(selector)]

    def find_anonymous(self, root, attribute, value):
        self._count("anon")
        scope = root.root if isinstance(root, FakeDocument) else root
        return next((n for n in scope.anonymous if n.attrs.get(attribute) == value), None)

    def get_attribute(self, node, name):
        return node.attrs.get(name)

    def has_attribute(self, node, name):
        return name in node.attrs

    def get_property(self, node, name):
        return node.props.get(name)

    def has_property(self, node, name):
        return name in node.props

    def computed_style(self, node, name):
        return node.style.get(name, "")

    def document_of(self, root):
        if isinstance(root, FakeWindow):
            return root.document
        if isinstance(root, FakeDocument):
            return root
        return root.document

    def is_window(self, obj):
        return isinstance(obj, FakeWindow)

    def window_of(self, document):
        return document.window

    def is_chrome_document(self, document):
        return document.chrome


class FakeWindowManager:
    browser_window_type = BROWSER

    def __init__(self):
        self.by_age: List[FakeWindow] = []
        self.by_z: List[FakeWindow] = []
        self.loaded_urls: List[str] = []

    def add(self, window: FakeWindow) -> FakeWindow:
        self.by_age.append(window)
        self.by_z.append(window)
        return window

    def open_modal(self, opener=None, title="Dialog", **kwargs) -> FakeWindow:
        return self.add(FakeWindow(title=title, window_type="dialog", modal=True, opener=opener, **kwargs))

    def raise_window(self, window):
        self.by_z.remove(window)
        self.by_z.append(window)

    def windows_by_age(self):
        return list(self.by_age)

    def windows_by_z_order(self):
        return list(self.by_z)

    def is_modal(self, window):
        return window.modal

    def opener_of(self, window):
        return window.opener

    def top_window_of(self, window):
        return window

    def is_loaded(self, window):
        return window.loaded and not window.closed

    def is_closed(self, window):
        return window.closed

    def close_window(self, window):
        window.closed = True
        if window in self.by_age:
            self.by_age.remove(window)
            self.by_z.remove(window)

    def title_of(self, window):
        return window.title

    def type_of(self, window):
        return window.window_type

    def id_of(self, window):
        return window.id

    def document_of_window(self, window):
        return window.document

    def has_method(self, window, name):
        return name in window.methods

    def open_window(self, url=None):
        window = self.add(FakeWindow())
        if url:
            window.url = url
        return window

    def load_url(self, window, url):
        window.url = url
        self.loaded_urls.append(url)

    def is_page_loaded(self, window):
        return window.page_loaded


class FakeSurface:
    """Records every call as (method, *args)."""

    def __init__(self, window, platform="Linux x86_64"):
        self.window = window
        self.platform = platform
        self.calls: List[tuple] = []

    def _record(self, *call):
        self.calls.append(call)
        return True

    def click(self, node, left=None, top=None):
        return self._record("click", node, left, top)

    def double_click(self, node, left=None, top=None):
        return self._record("double_click", node, left, top)

    def right_click(self, node, left=None, top=None):
        return self._record("right_click", node, left, top)

    def mouse_down(self, node, button=0, left=None, top=None):
        return self._record("mouse_down", node, button, left, top)

    def mouse_up(self, node, button=0, left=None, top=None):
        return self._record("mouse_up", node, button, left, top)

    def mouse_event(self, node, offset_x, offset_y, event):
        return self._record("mouse_event", node, offset_x, offset_y, dict(event))

    def keypress(self, node, key, modifiers):
        return self._record("keypress", node, key, dict(modifiers))

    def type(self, node, text):
        node.props["value"] = node.props.get("value", "") + text
        return self._record("type", node, text)


class ManualClock:
    """Millisecond clock that only moves when something sleeps."""

    def __init__(self):
        self.time = 0.0
        self.sleeps: List[float] = []

    def now(self):
        return self.time

    def delay(self, milliseconds):
        self.sleeps.append(milliseconds)
        self.time += milliseconds


def make_host(platform="Linux x86_64", settings=None):
    """Build HostServices over the fakes. Returns (host, clock)."""
    clock = ManualClock()
    surfaces = {}

    def surface_for(window):
        if id(window) not in surfaces:
            surfaces[id(window)] = FakeSurface(window, platform)
        return surfaces[id(window)]

    host = HostServices(
        dom=FakeDom(),
        windows=FakeWindowManager(),
        surface_for=surface_for,
        scheduler=Scheduler(delay=clock.delay, clock=clock.now),
        settings=settings or WaitSettings(),
    )
    return host, clock

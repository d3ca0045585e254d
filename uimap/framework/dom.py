"""
================================================================================
Node Collector
================================================================================

Collects DOM nodes below a root (document or element) and narrows the
collection with chainable filters.

Usage:
    collector = NodeCollector(host, document)
    buttons = collector.query_nodes("toolbarbutton") \\
                       .filter_by_dom_property("disabled") \\
                       .nodes

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional

from .errors import InvalidParameterError

if TYPE_CHECKING:
    from .host import HostServices, Node
    from .widgets import Element


class NodeCollector:
    """
    Query and filter nodes below a root.

    A window passed as root is replaced by its document, since windows
    cannot be queried directly.

    Args:
        host: Host services providing DOM access
        root: Document, window or node to query below
    """

    def __init__(self, host: "HostServices", root: Any):
        self._host = host
        self._dom = host.dom
        self._nodes: List["Node"] = []
        self._root = None
        self._document = None
        self.root = root

    @property
    def root(self) -> Any:
        """Root used for queries."""
        return self._root

    @root.setter
    def root(self, root: Any) -> None:
        if root is None:
            raise InvalidParameterError("The root element has to be specified.")

        if self._dom.is_window(root):
            root = self._dom.document_of(root)

        self._root = root
        self._document = self._dom.document_of(root)
        self._nodes = []

    @property
    def document(self) -> Any:
        """Document owning the root."""
        return self._document

    @property
    def nodes(self) -> List["Node"]:
        """Current list of nodes."""
        return self._nodes

    @nodes.setter
    def nodes(self, nodes: Optional[Iterable["Node"]]) -> None:
        if nodes is not None:
            self._nodes = list(nodes)

    @property
    def elements(self) -> List["Element"]:
        """Current nodes wrapped as node-locator elements."""
        from .widgets import Element

        return [
            Element("node", node, self._document, host=self._host)
            for node in self._nodes
        ]

    def filter(self, callback: Callable[["Node"], Any]) -> "NodeCollector":
        """
        Keep the nodes for which `callback(node)` is truthy.

        Raises:
            InvalidParameterError: No callback given
        """
        if callback is None:
            raise InvalidParameterError("filter: No callback specified")
        self.nodes = [node for node in self._nodes if callback(node)]
        return self

    def filter_by_css_property(self, name: str, value: str) -> "NodeCollector":
        """Keep nodes whose computed style `name` equals `value`."""
        def matches(node):
            if name and value:
                return self._dom.computed_style(node, name) == value
            return True

        return self.filter(matches)

    def filter_by_dom_property(self, name: str, value: Optional[str] = None) -> "NodeCollector":
        """Keep nodes whose attribute equals `value`, or that carry it at all."""
        def matches(node):
            if name and value:
                return self._dom.get_attribute(node, name) == value
            if name:
                return self._dom.has_attribute(node, name)
            return True

        return self.filter(matches)

    def filter_by_js_property(self, name: str, value: Any = None) -> "NodeCollector":
        """Keep nodes whose JS property equals `value`, or that expose it at all."""
        def matches(node):
            if name and value:
                return self._dom.get_property(node, name) == value
            if name:
                return self._dom.has_property(node, name)
            return True

        return self.filter(matches)

    def query_anonymous_node(self, attribute: str, value: str) -> "NodeCollector":
        """Find the implementation-internal node of the root with attribute == value."""
        node = self._dom.find_anonymous(self._root, attribute, value)
        self.nodes = [node] if node is not None else []
        return self

    def query_nodes(self, selector: str) -> "NodeCollector":
        """Find all nodes below the root matching a CSS selector."""
        self.nodes = self._dom.query_selector_all(self._root, selector)
        return self


__all__ = [
    "NodeCollector",
]

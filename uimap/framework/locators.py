"""
================================================================================
Locators
================================================================================

A locator says how to find a UI node: a kind plus a value.

    node    raw node handle
    id      element id
    xpath   XPath expression
    name    name attribute
    link    link text
    lookup  host specific attribute path
    tag     CSS selector below the owner (must match exactly one node)
    anon    {attribute: value} lookup of an implementation-internal node

Locators are validated when they are created, so a typo in a UI map fails
where the map is defined rather than on first use.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from loguru import logger

from .dom import NodeCollector
from .errors import AmbiguousLocatorError, InvalidLocatorError, MissingLocatorError

if TYPE_CHECKING:
    from .host import Document, HostServices, Node


class LocatorKind(str, Enum):
    """Supported locator kinds."""
    NODE = "node"
    ID = "id"
    XPATH = "xpath"
    NAME = "name"
    LINK = "link"
    LOOKUP = "lookup"
    TAG = "tag"
    ANON = "anon"


@dataclass(frozen=True)
class Locator:
    """Validated (kind, value) pair."""
    kind: LocatorKind
    value: Any

    @classmethod
    def create(cls, kind: Union[str, LocatorKind], value: Any) -> "Locator":
        """
        Validate and build a locator.

        Args:
            kind: One of the LocatorKind values
            value: String, raw node handle or single-key mapping (anon)

        Raises:
            InvalidLocatorError: Unknown kind, or malformed anon mapping
            MissingLocatorError: Empty value
        """
        try:
            kind = LocatorKind(kind)
        except ValueError:
            raise InvalidLocatorError(f"Invalid locator type: {kind}") from None

        if value is None or (isinstance(value, (str, Mapping)) and not value):
            raise MissingLocatorError(f"Missing locator for type: {kind.value}")

        if kind is LocatorKind.ANON:
            if not isinstance(value, Mapping) or len(value) != 1:
                raise InvalidLocatorError(
                    f"Anonymous locators need exactly one attribute, got: {value!r}"
                )

        return cls(kind, value)

    def __str__(self) -> str:
        return f"{self.kind.value}={self.value!r}"


class LocatorResolver:
    """
    Turns a locator into at most one node.

    "Not found" is returned as None so that implicit waits can retry; only
    ambiguity is reported as an error since waiting cannot fix it.
    """

    def __init__(self, host: "HostServices"):
        self._host = host
        self._dom = host.dom

    def resolve(
        self,
        locator: Locator,
        document: "Document",
        owner_node: Optional["Node"] = None,
    ) -> Optional["Node"]:
        """
        Resolve a locator.

        Args:
            locator: Locator to resolve
            document: Document the lookup is scoped to
            owner_node: Node of the owning element for tag/anon lookups

        Returns:
            The node, or None if it does not exist (yet)

        Raises:
            AmbiguousLocatorError: A tag locator matched more than one node
        """
        kind, value = locator.kind, locator.value

        if kind is LocatorKind.NODE:
            return value
        if kind is LocatorKind.ID:
            return self._dom.find_by_id(document, value)
        if kind is LocatorKind.XPATH:
            return self._dom.find_by_xpath(document, value)
        if kind is LocatorKind.NAME:
            return self._dom.find_by_name(document, value)
        if kind is LocatorKind.LINK:
            return self._dom.find_by_link(document, value)
        if kind is LocatorKind.LOOKUP:
            return self._dom.lookup(document, value)

        root = owner_node if owner_node is not None else document
        collector = NodeCollector(self._host, root)

        if kind is LocatorKind.TAG:
            nodes = collector.query_nodes(value).nodes
            if len(nodes) > 1:
                raise AmbiguousLocatorError(
                    f"Found {len(nodes)} nodes for tag: {value}"
                )
            if not nodes:
                logger.debug(f"No node found yet for tag: {value}")
                return None
            return nodes[0]

        # LocatorKind.ANON
        attribute, attribute_value = next(iter(value.items()))
        nodes = collector.query_anonymous_node(attribute, attribute_value).nodes
        return nodes[0] if nodes else None


__all__ = [
    "LocatorKind",
    "Locator",
    "LocatorResolver",
]

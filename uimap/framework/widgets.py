"""
================================================================================
Elements and Widgets
================================================================================

Lazily resolved handles to UI nodes, organised as an ownership tree.

Every element has an owner: either another element (its node becomes the
scope of `tag`/`anon` lookups) or a root scope (a document or window). The
automation surface used for input synthesis is decided once at the root:

    - chrome documents bind a surface to their own window
    - content documents bind nothing; their elements use the surface of
      whatever browser window is on top when the action runs

Children always share the surface of their owner.

Class tree:
    Element               resolution only
    └── Widget            + mouse and keyboard interaction
        ├── Region        grouping container
        ├── Button, ButtonMenu, ButtonMenuButton
        └── TextBox       + type() / get_text()
            └── TextBoxMulti, TextBoxNumber, TextBoxPassword, TextBoxAuto

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol, Type, Union, runtime_checkable

import allure
from loguru import logger

from .driver import wait_for
from .errors import ElementNotFoundError, InvalidParameterError, WaitTimeoutError
from .host import (
    DEFAULT_MODIFIERS,
    AutomationSurface,
    Document,
    HostServices,
    Node,
    normalize_modifiers,
)
from .locators import Locator, LocatorKind, LocatorResolver


# ================================================================================
# Capabilities
# ================================================================================

@runtime_checkable
class Resolvable(Protocol):
    """Something that can be looked up in a document."""

    @property
    def node(self) -> Node: ...

    def exists(self, timeout: Optional[float] = None) -> bool: ...


@runtime_checkable
class Clickable(Protocol):
    """Something that accepts mouse and keyboard input."""

    def click(self, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def double_click(self, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def right_click(self, left: Optional[float] = None, top: Optional[float] = None) -> bool: ...

    def keypress(self, key: str, modifiers: Optional[Mapping[str, bool]] = None) -> bool: ...


@runtime_checkable
class Typable(Protocol):
    """Something that accepts text."""

    def type(self, text: str) -> bool: ...

    def get_text(self) -> Any: ...


# ================================================================================
# Element
# ================================================================================

class Element:
    """
    A potential UI node, resolved on first use and then cached.

    Args:
        locator_type: Locator kind (see LocatorKind)
        locator: Locator value
        owner: Owning Element, or a document/window for top-level elements
        host: Host services. Required for top-level elements, inherited otherwise.

    Raises:
        InvalidLocatorError: Unknown locator kind
        MissingLocatorError: Empty locator value
        InvalidParameterError: No owner, or a top-level element without host
    """

    def __init__(
        self,
        locator_type: Union[str, LocatorKind],
        locator: Any,
        owner: Any,
        host: Optional[HostServices] = None,
    ):
        self._locator = Locator.create(locator_type, locator)

        if owner is None:
            raise InvalidParameterError(f"No owner specified for {self._locator}")

        if isinstance(owner, Element):
            self._owner: Optional[Element] = owner
            self._host = owner._host
            self._document = owner._document
            self._surface = owner._surface
        else:
            if host is None:
                raise InvalidParameterError(
                    f"Top-level element {self._locator} needs host services"
                )
            self._owner = None
            self._host = host
            self._document = host.dom.document_of(owner)
            if host.dom.is_chrome_document(self._document):
                self._surface = host.surface_for(host.dom.window_of(self._document))
            else:
                self._surface = None

        self._resolver = LocatorResolver(self._host)
        self._node: Optional[Node] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._locator})"

    @property
    def locator(self) -> Locator:
        return self._locator

    @property
    def owner(self) -> Optional["Element"]:
        """Owning element, None for top-level elements."""
        return self._owner

    @property
    def host(self) -> HostServices:
        return self._host

    @property
    def document(self) -> Document:
        return self._document

    @property
    def surface(self) -> Optional[AutomationSurface]:
        """Surface bound at construction. None for content elements."""
        return self._surface

    @property
    def controller(self) -> AutomationSurface:
        """Surface used for the next interaction."""
        if self._surface is not None:
            return self._surface
        return self._host.browser_surface()

    @property
    def window(self) -> Any:
        return self.controller.window

    def _locate(self) -> Optional[Node]:
        """Single non-blocking resolution attempt. Caches on success."""
        if self._node is not None:
            return self._node

        owner_node = None
        if self._owner is not None:
            owner_node = self._owner._locate()
            if owner_node is None:
                return None

        node = self._resolver.resolve(self._locator, self._document, owner_node)
        if node is not None:
            logger.debug(f"Resolved {self}")
            self._node = node
        return node

    def _wait_for_node(self, timeout: Optional[float]) -> Node:
        settings = self._host.settings
        return wait_for(
            self._locate,
            f"Element {self} has been found",
            settings.element_timeout if timeout is None else timeout,
            settings.interval,
            scheduler=self._host.scheduler,
        )

    def exists(self, timeout: Optional[float] = None) -> bool:
        """
        Check whether the element can be resolved.

        Args:
            timeout: Milliseconds to keep retrying (default: element timeout)

        Returns:
            False if the element did not show up in time

        Raises:
            AmbiguousLocatorError: The locator matches several nodes
        """
        if self._node is not None:
            return True
        try:
            self._wait_for_node(timeout)
        except WaitTimeoutError:
            return False
        return True

    @property
    def node(self) -> Node:
        """
        The resolved node, waiting for it if needed.

        Raises:
            ElementNotFoundError: The element did not show up in time
        """
        if self._node is None:
            try:
                self._wait_for_node(None)
            except WaitTimeoutError as e:
                raise ElementNotFoundError(
                    e.message, e.file_name, e.line_number, e.function
                ) from e
        return self._node

    @property
    def elem(self) -> Node:
        """Alias of `node`."""
        return self.node

    def invalidate(self) -> None:
        """Forget the cached node so the next access performs a fresh lookup."""
        self._node = None


# ================================================================================
# Widgets
# ================================================================================

class Widget(Element):
    """Element that accepts mouse and keyboard input."""

    def click(self, left: Optional[float] = None, top: Optional[float] = None) -> bool:
        node = self.node
        with allure.step(f"Click {self}"):
            logger.debug(f"Clicking {self}")
            return self.controller.click(node, left, top)

    def double_click(self, left: Optional[float] = None, top: Optional[float] = None) -> bool:
        node = self.node
        with allure.step(f"Double click {self}"):
            logger.debug(f"Double clicking {self}")
            return self.controller.double_click(node, left, top)

    def right_click(self, left: Optional[float] = None, top: Optional[float] = None) -> bool:
        node = self.node
        with allure.step(f"Right click {self}"):
            logger.debug(f"Right clicking {self}")
            return self.controller.right_click(node, left, top)

    def mouse_down(self, button: int = 0, left: Optional[float] = None, top: Optional[float] = None) -> bool:
        node = self.node
        logger.debug(f"Mouse down ({button}) on {self}")
        return self.controller.mouse_down(node, button, left, top)

    def mouse_up(self, button: int = 0, left: Optional[float] = None, top: Optional[float] = None) -> bool:
        node = self.node
        logger.debug(f"Mouse up ({button}) on {self}")
        return self.controller.mouse_up(node, button, left, top)

    def mouse_event(
        self,
        offset_x: Optional[float] = None,
        offset_y: Optional[float] = None,
        event: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Send a generic mouse event.

        Args:
            offset_x: Horizontal offset inside the node
            offset_y: Vertical offset inside the node
            event: Options such as type, clickCount, button and modifier keys
        """
        node = self.node
        controller = self.controller

        options = dict(event or {})
        modifiers = {key: options.pop(key) for key in DEFAULT_MODIFIERS if key in options}
        options.update(normalize_modifiers(modifiers, controller.platform))

        logger.debug(f"Mouse event {options.get('type', 'click')} on {self}")
        return controller.mouse_event(node, offset_x, offset_y, options)

    def keypress(self, key: str, modifiers: Optional[Mapping[str, bool]] = None) -> bool:
        """
        Press a key while the node has focus.

        Args:
            key: Key name or character
            modifiers: ctrlKey, altKey, shiftKey, metaKey and accelKey flags
        """
        node = self.node
        controller = self.controller
        resolved = normalize_modifiers(modifiers, controller.platform)

        with allure.step(f"Press '{key}' on {self}"):
            logger.debug(f"Pressing '{key}' {resolved} on {self}")
            return controller.keypress(node, key, resolved)


class Region(Widget):
    """Container grouping other widgets."""


class Button(Widget):
    pass


class ButtonMenu(Widget):
    pass


class ButtonMenuButton(Widget):
    pass


class TextBox(Widget):
    """Text input."""

    def get_text(self) -> Any:
        """Current value of the input."""
        return self._host.dom.get_property(self.node, "value")

    def type(self, text: str) -> bool:
        node = self.node
        with allure.step(f"Type into {self}"):
            logger.debug(f"Typing {len(text)} characters into {self}")
            return self.controller.type(node, text)


class TextBoxMulti(TextBox):
    pass


class TextBoxNumber(TextBox):
    pass


class TextBoxPassword(TextBox):
    pass


class TextBoxAuto(TextBox):
    pass


ELEMENT_CLASSES: Dict[str, Type[Element]] = {
    cls.__name__: cls
    for cls in (
        Element, Widget, Region,
        Button, ButtonMenu, ButtonMenuButton,
        TextBox, TextBoxMulti, TextBoxNumber, TextBoxPassword, TextBoxAuto,
    )
}


def element_class(name_or_class: Union[str, Type[Element]]) -> Type[Element]:
    """
    Look up an element class by name, or pass a class through.

    Raises:
        InvalidParameterError: Unknown class name
    """
    if isinstance(name_or_class, type) and issubclass(name_or_class, Element):
        return name_or_class
    try:
        return ELEMENT_CLASSES[name_or_class]
    except KeyError:
        raise InvalidParameterError(f"Unknown element class: {name_or_class}") from None


__all__ = [
    "Resolvable",
    "Clickable",
    "Typable",
    "Element",
    "Widget",
    "Region",
    "Button",
    "ButtonMenu",
    "ButtonMenuButton",
    "TextBox",
    "TextBoxMulti",
    "TextBoxNumber",
    "TextBoxPassword",
    "TextBoxAuto",
    "ELEMENT_CLASSES",
    "element_class",
]

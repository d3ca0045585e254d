"""
================================================================================
Automation Errors
================================================================================

Typed exception hierarchy raised by the element, wait, window and assertion
layers. Every error remembers where in the *calling* code it was triggered,
so a failing lookup points at the test line that asked for the element.

Hierarchy:
    AutomationError
    ├── InvalidLocatorError
    ├── MissingLocatorError
    ├── AmbiguousLocatorError
    ├── InvalidParameterError      (also ValueError)
    ├── WaitTimeoutError           (also TimeoutError)
    │   └── ElementNotFoundError
    ├── WaitCancelledError
    ├── WindowNotFoundError
    ├── UnexpectedDialogError
    └── AssertionFailedError       (also AssertionError)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional

from .stack import find_caller_frame


class AutomationError(Exception):
    """
    Base class for all errors raised by uimap.

    Attributes:
        message: Human readable description
        file_name: File of the calling code
        line_number: Line in the calling code
        function: Function name in the calling code
    """

    def __init__(
        self,
        message: str = "",
        file_name: Optional[str] = None,
        line_number: Optional[int] = None,
        function: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message

        if file_name is None:
            frame = find_caller_frame()
            file_name = frame.file_name
            line_number = frame.line_number if line_number is None else line_number
            function = frame.function if function is None else function

        self.file_name = file_name
        self.line_number = line_number
        self.function = function

    def __str__(self) -> str:
        return self.message

    @property
    def location(self) -> str:
        """Return 'file:line' of the calling code."""
        return f"{self.file_name}:{self.line_number}"


class InvalidLocatorError(AutomationError):
    """Raised when a locator kind is not recognized."""
    pass


class MissingLocatorError(AutomationError):
    """Raised when a locator value is empty or missing."""
    pass


class AmbiguousLocatorError(AutomationError):
    """Raised when a tag locator matches more than one node."""
    pass


class InvalidParameterError(AutomationError, ValueError):
    """Raised when a required argument is missing or malformed."""
    pass


class WaitTimeoutError(AutomationError, TimeoutError):
    """Raised when an implicit wait runs out of time."""
    pass


class ElementNotFoundError(WaitTimeoutError):
    """Raised when an element could not be resolved before the timeout."""
    pass


class WaitCancelledError(AutomationError):
    """Raised when a wait is aborted through its cancellation token."""
    pass


class WindowNotFoundError(AutomationError):
    """Raised by strict window lookups that find nothing."""
    pass


class UnexpectedDialogError(AutomationError):
    """Raised by the default handler when a modal dialog opens unexpectedly."""
    pass


class AssertionFailedError(AutomationError, AssertionError):
    """Raised by fatal assertions."""
    pass


__all__ = [
    "AutomationError",
    "InvalidLocatorError",
    "MissingLocatorError",
    "AmbiguousLocatorError",
    "InvalidParameterError",
    "WaitTimeoutError",
    "ElementNotFoundError",
    "WaitCancelledError",
    "WindowNotFoundError",
    "UnexpectedDialogError",
    "AssertionFailedError",
]

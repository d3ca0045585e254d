"""
================================================================================
uimap Framework
================================================================================

Core of the UI automation library:

    - locators / dom:  finding nodes
    - widgets:         Element / Widget ownership tree
    - driver:          implicit waits and window lookups
    - windows:         window wrappers and modal dialog supervision
    - assertions:      Expect / Assert
    - errors:          typed exceptions

================================================================================
"""

from .assertions import Assert, AssertionResult, Expect
from .dom import NodeCollector
from .driver import (
    AsyncWaiter,
    CancellationToken,
    filter_window_by_method,
    filter_window_by_title,
    filter_window_by_type,
    get_last_opened_window,
    get_last_opened_windows,
    get_most_recent_window,
    get_most_recent_windows,
    get_newest_window,
    sleep,
    wait_for,
)
from .errors import (
    AmbiguousLocatorError,
    AssertionFailedError,
    AutomationError,
    ElementNotFoundError,
    InvalidLocatorError,
    InvalidParameterError,
    MissingLocatorError,
    UnexpectedDialogError,
    WaitCancelledError,
    WaitTimeoutError,
    WindowNotFoundError,
)
from .host import AutomationSurface, DomAccess, HostServices, WindowManager, normalize_modifiers
from .locators import Locator, LocatorKind, LocatorResolver
from .scheduler import RepeatingTask, Scheduler
from .widgets import (
    Button,
    ButtonMenu,
    ButtonMenuButton,
    Element,
    Region,
    TextBox,
    TextBoxAuto,
    TextBoxMulti,
    TextBoxNumber,
    TextBoxPassword,
    Widget,
)
from .windows import ChromeWindowWrapper, ContentWindowWrapper, ModalDialog, WindowWrapper

__all__ = [
    "Assert",
    "AssertionResult",
    "Expect",
    "NodeCollector",
    "AsyncWaiter",
    "CancellationToken",
    "filter_window_by_method",
    "filter_window_by_title",
    "filter_window_by_type",
    "get_last_opened_window",
    "get_last_opened_windows",
    "get_most_recent_window",
    "get_most_recent_windows",
    "get_newest_window",
    "sleep",
    "wait_for",
    "AmbiguousLocatorError",
    "AssertionFailedError",
    "AutomationError",
    "ElementNotFoundError",
    "InvalidLocatorError",
    "InvalidParameterError",
    "MissingLocatorError",
    "UnexpectedDialogError",
    "WaitCancelledError",
    "WaitTimeoutError",
    "WindowNotFoundError",
    "AutomationSurface",
    "DomAccess",
    "HostServices",
    "WindowManager",
    "normalize_modifiers",
    "Locator",
    "LocatorKind",
    "LocatorResolver",
    "RepeatingTask",
    "Scheduler",
    "Button",
    "ButtonMenu",
    "ButtonMenuButton",
    "Element",
    "Region",
    "TextBox",
    "TextBoxAuto",
    "TextBoxMulti",
    "TextBoxNumber",
    "TextBoxPassword",
    "Widget",
    "ChromeWindowWrapper",
    "ContentWindowWrapper",
    "ModalDialog",
    "WindowWrapper",
]

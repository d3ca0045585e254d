# ================================================================================
# Driver Module
# ================================================================================
#
# Implicit waits and window enumeration helpers shared by widgets, window
# wrappers and tests.
#
# Key Features:
#   - wait_for(): bounded polling with timeout, interval and cancellation
#   - AsyncWaiter: awaitable variant for asyncio based hosts
#   - sleep() that keeps the host scheduler running
#   - Window lookups by age and by z-order, with filter callbacks
#
# Usage:
#   wait_for(lambda: panel.exists(0), "Panel has been opened", timeout=2000)
#   win = get_most_recent_window(host, filter_window_by_type, "navigator:browser")
#
# Filter callbacks are called as filter_callback(host, window, value).
#
# ================================================================================

from __future__ import annotations

import asyncio
import inspect
import time
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from loguru import logger

from .errors import (
    InvalidParameterError,
    WaitCancelledError,
    WaitTimeoutError,
    WindowNotFoundError,
)
from .scheduler import Scheduler
from ..common.config_loader import WaitSettings

if TYPE_CHECKING:
    from .host import HostServices, Window


DEFAULT_TIMEOUT = WaitSettings.element_timeout
DEFAULT_INTERVAL = WaitSettings.interval

WindowFilter = Callable[["HostServices", Any, Any], bool]


class CancellationToken:
    """
    Lets another part of the test abort a running wait.

    Example:
        token = CancellationToken()
        dialog.set_modal_dialog_handler(lambda win: token.cancel("dialog closed"))
        wait_for(lambda: done, "done", cancel_token=token)
    """

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "Wait has been cancelled") -> None:
        self._cancelled = True
        self.reason = reason


def _describe(predicate: Callable) -> str:
    return getattr(predicate, "__qualname__", repr(predicate))


def _call(predicate: Callable, this_object: Any) -> Any:
    if this_object is not None:
        return predicate(this_object)
    return predicate()


def _check_cancelled(cancel_token: Optional[CancellationToken], message: Optional[str]) -> None:
    if cancel_token is not None and cancel_token.cancelled:
        text = f"{message}: {cancel_token.reason}" if message else cancel_token.reason
        raise WaitCancelledError(text)


def wait_for(
    predicate: Callable[..., Any],
    message: Optional[str] = None,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    this_object: Any = None,
    *,
    scheduler: Optional[Scheduler] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Any:
    """
    Poll a predicate until it returns a truthy value.

    Exceptions raised by the predicate are not retried; they propagate to
    the caller immediately.

    Args:
        predicate: Condition to check. Called with `this_object` when given.
        message: Message of the timeout error
        timeout: Maximum time in milliseconds (default 5000)
        interval: Delay between polls in milliseconds (default 100)
        this_object: Optional object passed to the predicate
        scheduler: Host scheduler. Pending timers keep running while waiting.
        cancel_token: Token that aborts the wait when cancelled

    Returns:
        The truthy value returned by the predicate

    Raises:
        WaitTimeoutError: Timeout reached; carries the caller's file and line
        WaitCancelledError: The cancel token was cancelled
    """
    if not callable(predicate):
        raise InvalidParameterError("wait_for: predicate has to be callable")

    timeout = DEFAULT_TIMEOUT if timeout is None else timeout
    interval = DEFAULT_INTERVAL if interval is None else interval

    if scheduler is not None:
        now, delay = scheduler.now, scheduler.sleep
    else:
        now, delay = (lambda: time.monotonic() * 1000.0), (lambda ms: time.sleep(ms / 1000.0))

    deadline = now() + timeout
    polls = 0

    while True:
        _check_cancelled(cancel_token, message)

        polls += 1
        result = _call(predicate, this_object)
        if result:
            return result

        remaining = deadline - now()
        if remaining <= 0:
            message = message or f"Timeout exceeded for wait_for({_describe(predicate)})"
            logger.warning(f"⏱️ Timed out after {timeout}ms ({polls} polls): {message}")
            raise WaitTimeoutError(message)

        delay(min(interval, remaining))


def sleep(milliseconds: float, scheduler: Optional[Scheduler] = None) -> None:
    """
    Pause for the given time.

    With a scheduler, pending host timers (modal dialog observers) keep
    running while sleeping.
    """
    if scheduler is not None:
        scheduler.sleep(milliseconds)
    else:
        time.sleep(milliseconds / 1000.0)


class AsyncWaiter:
    """
    Async-compatible waiter for hosts driven by asyncio.

    Same contract as wait_for(): the predicate may be sync or async, its
    exceptions propagate, and a timeout raises WaitTimeoutError.
    """

    def __init__(self, settings: WaitSettings = None):
        """
        Initialize async waiter.

        Args:
            settings: Default timeouts
        """
        self.settings = settings or WaitSettings()

    async def wait_for(
        self,
        predicate: Callable[[], Any],
        message: Optional[str] = None,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Await a predicate until it returns a truthy value.

        Args:
            predicate: Sync or async callable
            message: Message of the timeout error
            timeout: Maximum time in milliseconds
            interval: Delay between polls in milliseconds
            cancel_token: Token that aborts the wait when cancelled

        Returns:
            The truthy value returned by the predicate
        """
        timeout = self.settings.element_timeout if timeout is None else timeout
        interval = self.settings.interval if interval is None else interval

        loop = asyncio.get_running_loop()
        deadline = loop.time() * 1000.0 + timeout

        while True:
            _check_cancelled(cancel_token, message)

            result = predicate()
            if inspect.isawaitable(result):
                result = await result
            if result:
                return result

            remaining = deadline - loop.time() * 1000.0
            if remaining <= 0:
                message = message or f"Timeout exceeded for wait_for({_describe(predicate)})"
                logger.warning(f"⏱️ Timed out after {timeout}ms: {message}")
                raise WaitTimeoutError(message)

            await asyncio.sleep(min(interval, remaining) / 1000.0)


# ================================================================================
# Window Filters
# ================================================================================

def filter_window_by_method(host: "HostServices", window: "Window", name: str) -> bool:
    """Window exposes a method or attribute with the given name."""
    return host.windows.has_method(window, name)


def filter_window_by_title(host: "HostServices", window: "Window", title: str) -> bool:
    """Window document title equals `title`."""
    return host.windows.title_of(window) == title


def filter_window_by_type(host: "HostServices", window: "Window", window_type: str) -> bool:
    """Window type (windowtype attribute of the root element) equals `window_type`."""
    return host.windows.type_of(window) == window_type


# ================================================================================
# Window Enumeration
# ================================================================================

def _get_windows(
    host: "HostServices",
    windows: List["Window"],
    filter_callback: Optional[WindowFilter],
    value: Any,
) -> List["Window"]:
    # Host enumerations are oldest/bottom first; callers want newest first
    result = [
        window for window in windows
        if filter_callback is None or filter_callback(host, window, value)
    ]
    result.reverse()
    return result


def get_last_opened_windows(
    host: "HostServices",
    filter_callback: Optional[WindowFilter] = None,
    value: Any = None,
) -> List["Window"]:
    """All windows sorted by age, most recently opened first."""
    return _get_windows(host, host.windows.windows_by_age(), filter_callback, value)


def get_most_recent_windows(
    host: "HostServices",
    filter_callback: Optional[WindowFilter] = None,
    value: Any = None,
) -> List["Window"]:
    """All windows sorted by z-order, top-most first."""
    return _get_windows(host, host.windows.windows_by_z_order(), filter_callback, value)


def get_last_opened_window(
    host: "HostServices",
    filter_callback: Optional[WindowFilter] = None,
    value: Any = None,
) -> Optional["Window"]:
    """The most recently opened window matching the filter, or None."""
    windows = get_last_opened_windows(host, filter_callback, value)
    return windows[0] if windows else None


def get_most_recent_window(
    host: "HostServices",
    filter_callback: Optional[WindowFilter] = None,
    value: Any = None,
) -> Optional["Window"]:
    """The top-most window matching the filter, or None."""
    windows = get_most_recent_windows(host, filter_callback, value)
    return windows[0] if windows else None


def get_newest_window(
    host: "HostServices",
    filter_callback: Optional[WindowFilter] = None,
    value: Any = None,
    strict: bool = True,
) -> Optional["Window"]:
    """
    The most recently opened window matching the filter.

    Args:
        host: Host services
        filter_callback: Optional filter
        value: Value passed to the filter
        strict: Raise instead of returning None when nothing matches

    Raises:
        WindowNotFoundError: strict lookup found no window
    """
    window = get_last_opened_window(host, filter_callback, value)
    if window is None and strict:
        raise WindowNotFoundError("No window has been found")
    return window


__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_INTERVAL",
    "CancellationToken",
    "wait_for",
    "sleep",
    "AsyncWaiter",
    "filter_window_by_method",
    "filter_window_by_title",
    "filter_window_by_type",
    "get_last_opened_windows",
    "get_most_recent_windows",
    "get_last_opened_window",
    "get_most_recent_window",
    "get_newest_window",
]

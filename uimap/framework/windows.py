"""
================================================================================
Window Wrappers and Modal Dialog Handling
================================================================================

Wrappers around host windows, and the observer that watches for modal
dialogs spawned by a wrapped window.

Modal dialog observer states:

    Polling ──(newest window is a loaded modal dialog of our opener)──▶
    Found-Executing ──(callback done, dialog closed)──▶ Finished

Every ChromeWindowWrapper installs a default handler that treats any modal
dialog as a failure. Tests that expect a dialog install their own handler,
trigger the action, then call wait_for_modal_dialog(), which restores the
default handler afterwards:

    browser.set_modal_dialog_handler(lambda dialog: dialog.keypress("VK_RETURN"))
    button.click()
    browser.wait_for_modal_dialog()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Type, Union

import allure
from loguru import logger

from .driver import WindowFilter, get_newest_window, wait_for
from .errors import InvalidParameterError, UnexpectedDialogError
from .host import Document, HostServices, Window, normalize_modifiers
from .scheduler import RepeatingTask
from .widgets import Element, element_class


def is_window_loaded(host: HostServices, window: Optional[Window]) -> bool:
    """True if the window exists and its document finished loading."""
    return window is not None and host.windows.is_loaded(window)


# ================================================================================
# Modal Dialog Observer
# ================================================================================

class ModalDialogObserver:
    """
    Polls for a modal dialog opened by `opener` and hands it to `callback`.

    Any exception raised by the callback is stored in `exception` and
    forwarded by ModalDialog.stop().
    """

    def __init__(
        self,
        host: HostServices,
        opener: Optional[Window],
        callback: Callable[["ChromeWindowWrapper"], Any],
    ):
        self._host = host
        self._opener = opener
        self._callback = callback
        self.exception: Optional[BaseException] = None
        self.finished = False
        self._task = RepeatingTask(
            host.scheduler,
            host.settings.modal_dialog_delay,
            self.observe,
            name="modal dialog observer",
        )

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    @property
    def polling(self) -> bool:
        return self._task.active

    def find_window(self) -> Optional[Window]:
        """Return the newest window if it is a modal dialog of our opener."""
        windows = self._host.windows
        win = get_newest_window(self._host, strict=False)
        if win is None or not windows.is_modal(win):
            return None

        # A dialog opened by another dialog has that dialog as its opener,
        # so compare against the top-level window of the opener chain.
        opener = windows.opener_of(win)
        if opener is not None:
            found = windows.top_window_of(opener) == self._opener
        else:
            # Some dialogs have no opener at all
            found = win != self._opener

        return win if found else None

    def observe(self) -> bool:
        """
        One polling tick.

        Returns:
            True once a dialog has been handled
        """
        windows = self._host.windows
        win = self.find_window()
        if not is_window_loaded(self._host, win):
            return False

        logger.info(f"Modal dialog '{windows.title_of(win)}' has been opened")
        dialog = None
        try:
            dialog = ChromeWindowWrapper(win, self._host)
            self._callback(dialog)
        except Exception as e:
            self.exception = e

        if dialog is not None:
            # Destroying forwards failures of dialogs opened by this dialog
            try:
                dialog.destroy()
            except Exception as e:
                if self.exception is None:
                    self.exception = e

        if not windows.is_closed(win):
            windows.close_window(win)

        self.finished = True
        return True


class ModalDialog:
    """
    Owns at most one ModalDialogObserver for a window.

    Args:
        window: Wrapper of the window expected to open dialogs (may be None)
        host: Host services
    """

    def __init__(self, window: Optional["WindowWrapper"], host: HostServices):
        self._window = window
        self._host = host
        self._observer: Optional[ModalDialogObserver] = None

    @property
    def finished(self) -> bool:
        return self._observer is None or self._observer.finished

    @property
    def exception(self) -> Optional[BaseException]:
        return self._observer.exception if self._observer is not None else None

    def start(self, callback: Callable[["ChromeWindowWrapper"], Any]) -> None:
        """
        Start watching for a dialog.

        Raises:
            InvalidParameterError: No callback given
        """
        if not callback:
            raise InvalidParameterError("start: Callback not specified.")

        opener = self._window.inner_window if self._window is not None else None
        self._observer = ModalDialogObserver(self._host, opener, callback)
        self._observer.start()

    def stop(self) -> None:
        """
        Stop watching. Re-raises the exception of the handler, if any.

        Calling stop() without an active observer does nothing.
        """
        observer, self._observer = self._observer, None
        if observer is None:
            return

        observer.stop()
        if observer.exception is not None:
            raise observer.exception

    def wait_for_dialog(self, timeout: Optional[float] = None) -> None:
        """
        Wait until the dialog has been handled, then stop.

        Raises:
            WaitTimeoutError: No dialog has been handled in time
        """
        settings = self._host.settings
        try:
            wait_for(
                lambda: self.finished,
                "Modal dialog has been processed.",
                settings.modal_dialog_timeout if timeout is None else timeout,
                settings.interval,
                scheduler=self._host.scheduler,
            )
        finally:
            self.stop()


# ================================================================================
# Window Wrappers
# ================================================================================

class WindowWrapper:
    """
    Wraps a host window.

    Args:
        window: Host window handle
        host: Host services

    Raises:
        InvalidParameterError: No window given
    """

    def __init__(self, window: Window, host: HostServices):
        if window is None:
            raise InvalidParameterError("A window has to be specified")
        self._window = window
        self._host = host

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._window!r})"

    @property
    def host(self) -> HostServices:
        return self._host

    @property
    def inner_window(self) -> Optional[Window]:
        return self._window

    @property
    def closed(self) -> bool:
        return self._window is None or self._host.windows.is_closed(self._window)

    @property
    def is_loaded(self) -> bool:
        return is_window_loaded(self._host, self._window)

    @property
    def document(self) -> Document:
        return self._host.windows.document_of_window(self._window)

    @allure.step("Close window")
    def close(self, timeout: Optional[float] = None) -> None:
        """Close the window and wait until it is gone."""
        if self.closed:
            return

        logger.info(f"Closing {self}")
        self._host.windows.close_window(self._window)
        wait_for(
            lambda: self.closed,
            "Window has been closed.",
            self._host.settings.window_timeout if timeout is None else timeout,
            self._host.settings.interval,
            scheduler=self._host.scheduler,
        )

    def destroy(self) -> None:
        """Release the window handle."""
        self._window = None

    def find_element(
        self,
        locator_type: str,
        locator: Any,
        element_cls: Union[str, Type[Element]] = "Widget",
        owner: Any = None,
    ) -> Element:
        """
        Create an element owned by this window's document (or `owner`).

        Args:
            locator_type: Locator kind
            locator: Locator value
            element_cls: Element class or its name (default: Widget)
            owner: Owning element or document
        """
        cls = element_class(element_cls)
        if owner is None:
            owner = self.document
        return cls(locator_type, locator, owner, host=self._host)

    def get_content_window(
        self,
        window: Window,
        window_class: Optional[Type["WindowWrapper"]] = None,
    ) -> "WindowWrapper":
        """Wrap a content window (defaults to ContentWindowWrapper)."""
        window_class = window_class or ContentWindowWrapper
        return window_class(window, self._host)

    def keypress(self, key: str, modifiers: Optional[Mapping[str, bool]] = None) -> bool:
        """Send a key press to the window itself."""
        surface = self._host.surface_for(self._window)
        resolved = normalize_modifiers(modifiers, surface.platform)
        logger.debug(f"Pressing '{key}' {resolved} in {self}")
        return surface.keypress(None, key, resolved)


class ChromeWindowWrapper(WindowWrapper):
    """
    Top-level window with modal dialog supervision.

    Construction waits until the window has been loaded, then installs the
    default modal dialog handler.
    """

    def __init__(self, window: Window, host: HostServices):
        if window is None:
            raise InvalidParameterError("A window has to be specified")

        wait_for(
            lambda: is_window_loaded(host, window),
            f"Window '{window}' has been loaded",
            host.settings.window_timeout,
            host.settings.interval,
            scheduler=host.scheduler,
        )

        super().__init__(window, host)
        self._modal_dialog: Optional[ModalDialog] = ModalDialog(self, host)
        self._default_handler_active = False
        self._set_default_modal_dialog_handler()

    @property
    def title(self) -> str:
        return self._host.windows.title_of(self._window)

    @property
    def type(self) -> Optional[str]:
        return self._host.windows.type_of(self._window)

    @property
    def id(self) -> Optional[str]:
        return self._host.windows.id_of(self._window)

    def close(self, timeout: Optional[float] = None) -> None:
        """Close the window, then release the observer."""
        super().close(timeout)
        self.destroy()

    def destroy(self) -> None:
        """Stop the modal dialog observer and release the window handle."""
        modal_dialog, self._modal_dialog = self._modal_dialog, None
        try:
            if modal_dialog is not None:
                modal_dialog.stop()
        finally:
            super().destroy()

    def find_element(self, locator_type, locator, element_cls="Widget", owner=None) -> Element:
        self._raise_unexpected_dialog()
        return super().find_element(locator_type, locator, element_cls, owner)

    def keypress(self, key: str, modifiers: Optional[Mapping[str, bool]] = None) -> bool:
        self._raise_unexpected_dialog()
        return super().keypress(key, modifiers)

    @allure.step("Find window")
    def find_window(
        self,
        filter_callback: WindowFilter,
        value: Any = None,
        timeout: Optional[float] = None,
    ) -> "ChromeWindowWrapper":
        """
        Wait for a window other than this one that matches the filter.

        Args:
            filter_callback: Called as filter_callback(host, window, value)
            value: Value for the filter
            timeout: Milliseconds to wait (default: window timeout)

        Returns:
            The newest matching window, wrapped

        Raises:
            WaitTimeoutError: No such window appeared in time
        """
        self._raise_unexpected_dialog()
        own = self._window

        def matches(host, window, filter_value):
            return window != own and filter_callback(host, window, filter_value)

        win = wait_for(
            lambda: get_newest_window(self._host, matches, value, strict=False),
            "Window has been found",
            self._host.settings.window_timeout if timeout is None else timeout,
            self._host.settings.interval,
            scheduler=self._host.scheduler,
        )
        logger.info(f"Found window '{self._host.windows.title_of(win)}'")
        return ChromeWindowWrapper(win, self._host)

    def handle_window(
        self,
        filter_callback: WindowFilter,
        callback: Optional[Callable[["ChromeWindowWrapper"], Any]] = None,
        close: bool = True,
        value: Any = None,
    ) -> "ChromeWindowWrapper":
        """
        Find a window, run `callback` with it and close it.

        Without a callback the window is returned open. The window is
        always closed when the callback raises.
        """
        win = self.find_window(filter_callback, value)
        if callback is None:
            return win

        try:
            callback(win)
        except Exception:
            win.close()
            raise

        if close:
            win.close()
        return win

    def _default_modal_dialog_handler(self, dialog: "ChromeWindowWrapper") -> None:
        ident = dialog.title or dialog.type or dialog.id or "unknown"
        message = f"A modal '{ident}' dialog has been opened unexpectedly."
        logger.error(f"❌ {message}")
        raise UnexpectedDialogError(message)

    def _active_modal_dialog(self) -> ModalDialog:
        if self._modal_dialog is None:
            raise InvalidParameterError("Window has been destroyed")
        return self._modal_dialog

    def _set_default_modal_dialog_handler(self) -> None:
        self.set_modal_dialog_handler(self._default_modal_dialog_handler)

    def set_modal_dialog_handler(self, callback: Callable[["ChromeWindowWrapper"], Any]) -> None:
        """
        Replace the modal dialog handler.

        The previous observer is always stopped first; an exception it had
        stored is raised after the new handler has been installed.
        """
        modal_dialog = self._active_modal_dialog()
        try:
            modal_dialog.stop()
        finally:
            modal_dialog.start(callback)
            self._default_handler_active = callback == self._default_modal_dialog_handler

    @allure.step("Wait for modal dialog")
    def wait_for_modal_dialog(self, timeout: Optional[float] = None) -> None:
        """Wait until the installed handler has processed a dialog, then restore the default."""
        modal_dialog = self._active_modal_dialog()
        try:
            modal_dialog.wait_for_dialog(timeout)
        finally:
            self._set_default_modal_dialog_handler()

    def _raise_unexpected_dialog(self) -> None:
        """Surface a dialog caught by the default handler since the last operation."""
        modal_dialog = self._modal_dialog
        if (
            modal_dialog is None
            or not self._default_handler_active
            or modal_dialog.exception is None
        ):
            return
        try:
            modal_dialog.stop()
        finally:
            self._set_default_modal_dialog_handler()


class ContentWindowWrapper(WindowWrapper):
    """Wrapper for content windows. No modal dialog supervision."""


__all__ = [
    "is_window_loaded",
    "ModalDialogObserver",
    "ModalDialog",
    "WindowWrapper",
    "ChromeWindowWrapper",
    "ContentWindowWrapper",
]

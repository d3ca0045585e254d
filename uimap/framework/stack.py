"""
Caller frame lookup.

Errors and assertion results report the location of the test or page-map
code that triggered them, not the location inside this package where the
failure was detected. Frames of the Allure step decorators wrapping the
public operations are skipped as well.
"""

from __future__ import annotations

import inspect
import os
from dataclasses import dataclass
from typing import Tuple

import allure
import allure_commons


PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Frames in these directories and files never count as the caller
INTERNAL_DIRS: Tuple[str, ...] = (
    PACKAGE_DIR,
    os.path.dirname(os.path.abspath(allure_commons.__file__)),
)
INTERNAL_FILES: Tuple[str, ...] = (
    os.path.abspath(allure.__file__),
)


@dataclass(frozen=True)
class CallerFrame:
    """Source location of a caller."""
    file_name: str
    line_number: int
    function: str


UNKNOWN_FRAME = CallerFrame(file_name="<unknown>", line_number=0, function="<unknown>")


def _is_internal(file_name: str) -> bool:
    path = os.path.abspath(file_name)
    if path in INTERNAL_FILES:
        return True
    return any(path.startswith(directory + os.sep) for directory in INTERNAL_DIRS)


def find_caller_frame() -> CallerFrame:
    """
    Walk up the call stack and return the first frame outside the package.

    Returns:
        CallerFrame of the nearest external caller, or UNKNOWN_FRAME when
        the whole stack lives inside the package.
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            code = frame.f_code
            if not _is_internal(code.co_filename):
                return CallerFrame(
                    file_name=code.co_filename,
                    line_number=frame.f_lineno,
                    function=code.co_name,
                )
            frame = frame.f_back
    finally:
        # Break the reference cycle between this frame and the locals
        del frame
    return UNKNOWN_FRAME


__all__ = [
    "CallerFrame",
    "UNKNOWN_FRAME",
    "find_caller_frame",
]

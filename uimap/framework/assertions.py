"""
================================================================================
Expect / Assert
================================================================================

Two assertion sinks sharing the same checks:

    Expect  non-fatal: records the result and returns a bool, so a single
            test can collect several independent failures
    Assert  fatal: raises AssertionFailedError on the first failure

Every result carries the caller's file and line and is forwarded to a
reporter (Allure by default).

Usage:
    expect = Expect()
    expect.equal(tab_count, 2, "Two tabs are open")
    assert_ = Assert()
    assert_.match(url, r"^https://", "Secure URL")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Callable, List, Optional, Pattern, Protocol, Union

from .errors import AssertionFailedError
from .stack import find_caller_frame
from ..report_tools.allure_utils import AllureResultReporter


@dataclass
class AssertionResult:
    """Result of a single check."""
    passed: bool
    message: str
    file_name: str
    line_number: int
    function: str

    def to_dict(self):
        return asdict(self)


class ResultReporter(Protocol):
    def report(self, result: AssertionResult) -> None: ...


ExpectedError = Union[type, Pattern, Callable[[BaseException], bool], None]


class Expect:
    """
    Non-fatal assertions.

    Args:
        reporter: Receives every result. Defaults to AllureResultReporter.
    """

    def __init__(self, reporter: Optional[ResultReporter] = None):
        self.reporter = reporter or AllureResultReporter()
        self.results: List[AssertionResult] = []

    @property
    def passes(self) -> List[AssertionResult]:
        return [r for r in self.results if r.passed]

    @property
    def failures(self) -> List[AssertionResult]:
        return [r for r in self.results if not r.passed]

    def _log_pass(self, result: AssertionResult) -> None:
        self.results.append(result)
        self.reporter.report(result)

    def _log_fail(self, result: AssertionResult) -> None:
        self.results.append(result)
        self.reporter.report(result)

    def _test(self, condition: Any, message: Optional[str] = None, diagnosis: Optional[str] = None) -> bool:
        """
        Record the outcome of a check.

        Args:
            condition: Outcome of the check
            message: Message of the caller
            diagnosis: What was actually observed

        Returns:
            bool(condition)
        """
        message = message or ""
        if diagnosis:
            message = f"{message} - {diagnosis}" if message else diagnosis

        frame = find_caller_frame()
        result = AssertionResult(
            passed=bool(condition),
            message=message,
            file_name=frame.file_name,
            line_number=frame.line_number,
            function=frame.function,
        )

        if result.passed:
            self._log_pass(result)
        else:
            self._log_fail(result)
        return result.passed

    def pass_(self, message: Optional[str] = None) -> bool:
        """Always passes."""
        return self._test(True, message)

    def fail(self, message: Optional[str] = None) -> bool:
        """Always fails."""
        return self._test(False, message)

    def ok(self, value: Any, message: Optional[str] = None) -> bool:
        """Value is truthy."""
        return self._test(bool(value), message, f"got '{value}'")

    def equal(self, value: Any, expected: Any, message: Optional[str] = None) -> bool:
        """Both values are equal."""
        return self._test(value == expected, message, f"got '{value}', expected '{expected}'")

    def not_equal(self, value: Any, expected: Any, message: Optional[str] = None) -> bool:
        """Both values differ."""
        return self._test(value != expected, message, f"got '{value}', not expected '{expected}'")

    def match(self, string: str, regex: Union[str, Pattern], message: Optional[str] = None) -> bool:
        """The regular expression matches somewhere in `string`."""
        pattern = re.compile(regex)
        condition = pattern.search(string) is not None
        return self._test(condition, message, f"'{pattern.pattern}' matches for '{string}'")

    def not_match(self, string: str, regex: Union[str, Pattern], message: Optional[str] = None) -> bool:
        """The regular expression matches nowhere in `string`."""
        pattern = re.compile(regex)
        condition = pattern.search(string) is None
        return self._test(condition, message, f"'{pattern.pattern}' doesn't match for '{string}'")

    def throws(
        self,
        callback: Callable[[], Any],
        expected: Union[ExpectedError, str] = None,
        message: Optional[str] = None,
    ) -> bool:
        """
        The callback raises an exception.

        Args:
            callback: Code to run
            expected: Exception class, regex tested against the error text,
                      or a predicate. A string here is taken as the message.
            message: Message for the result

        Raises:
            The callback's exception, if it does not match `expected`
        """
        return self._throws(True, callback, expected, message)

    def does_not_throw(
        self,
        callback: Callable[[], Any],
        expected: Union[ExpectedError, str] = None,
        message: Optional[str] = None,
    ) -> bool:
        """
        The callback does not raise (the `expected` exception).

        Raises:
            The callback's exception, if it is not the one checked for
        """
        return self._throws(False, callback, expected, message)

    @staticmethod
    def _expected_exception(actual: Optional[BaseException], expected: ExpectedError) -> bool:
        if actual is None or expected is None:
            return False
        if isinstance(expected, re.Pattern):
            return expected.search(str(actual)) is not None
        if isinstance(expected, type) and issubclass(expected, BaseException):
            return isinstance(actual, expected)
        return expected(actual) is True

    def _throws(
        self,
        should_throw: bool,
        callback: Callable[[], Any],
        expected: Union[ExpectedError, str],
        message: Optional[str],
    ) -> bool:
        if isinstance(expected, str):
            message, expected = expected, None

        actual: Optional[Exception] = None
        try:
            callback()
        except Exception as e:
            actual = e

        if isinstance(expected, type):
            message = f"({expected.__name__}) {message}" if message else f"({expected.__name__})"

        if should_throw and actual is None:
            return self._test(False, message, "Missing expected exception")

        if not should_throw and self._expected_exception(actual, expected):
            return self._test(False, message, "Got unwanted exception")

        if (should_throw and actual is not None and expected is not None
                and not self._expected_exception(actual, expected)) or \
                (not should_throw and actual is not None):
            raise actual

        return self._test(True, message)


class Assert(Expect):
    """Fatal assertions: a failure raises AssertionFailedError."""

    def _log_fail(self, result: AssertionResult) -> None:
        super()._log_fail(result)
        raise AssertionFailedError(
            result.message,
            result.file_name,
            result.line_number,
            result.function,
        )


__all__ = [
    "AssertionResult",
    "ResultReporter",
    "Expect",
    "Assert",
]

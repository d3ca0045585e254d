"""
================================================================================
Allure Report Utilities
================================================================================

Helpers that push assertion results and diagnostic data into Allure reports.

Features:
- JSON / text attachment helpers
- AllureResultReporter: forwards Expect/Assert results to loguru and Allure

================================================================================
"""

import json
from typing import TYPE_CHECKING, Any

import allure
from loguru import logger

if TYPE_CHECKING:
    from uimap.framework.assertions import AssertionResult


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


# ================================================================================
# Result Reporting
# ================================================================================

class AllureResultReporter:
    """
    Reports assertion results.

    Passes are logged at DEBUG level; failures at ERROR level and attached
    to the running Allure test as JSON, including the caller location.
    """

    def __init__(self, attach_passes: bool = False):
        """
        Args:
            attach_passes: Also attach passing results to the report
        """
        self.attach_passes = attach_passes

    def report(self, result: "AssertionResult") -> None:
        location = f"{result.file_name}:{result.line_number}"
        if result.passed:
            logger.debug(f"✅ PASS {result.message} ({location})")
            if not self.attach_passes:
                return
        else:
            logger.error(f"❌ FAIL {result.message} ({location})")

        status = "PASS" if result.passed else "FAIL"
        attach_json(result.to_dict(), name=f"{status}: {result.message or location}")


__all__ = [
    "attach_json",
    "attach_text",
    "AllureResultReporter",
]

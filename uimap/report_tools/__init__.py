from .allure_utils import AllureResultReporter, attach_json, attach_text

__all__ = [
    "AllureResultReporter",
    "attach_json",
    "attach_text",
]

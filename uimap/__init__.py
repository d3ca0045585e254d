"""
================================================================================
uimap
================================================================================

Locator based UI automation: element/widget maps, implicit waits, window and
modal dialog handling, and Allure-reported assertions.

Modules:
    - common: configuration and logging
    - framework: core element, wait, window and assertion layers
    - hosts: concrete automation hosts (Playwright)
    - ui: UI maps of the browser
    - report_tools: Allure integration

================================================================================
"""

__version__ = "1.0.0"

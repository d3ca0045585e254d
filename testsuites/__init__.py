"""
uimap test suites.

    unit/         in-memory fake host and manual clock, no browser needed
    ui_testing/   Playwright host against a real browser

The package is importable so that unit tests can share `testsuites.unit.fakes`.
"""

"""
Test suites package.

Keeps `testsuites` importable so that the UI framework
(`testsuites.ui_testing.framework`), its page objects and the unit-test
dummies can be imported by `run_tests.py`, IDEs and the tests themselves.

Layout:
  - ui_testing/framework  driver lifecycle, element actions, base page
  - ui_testing/pages      page objects
  - ui_testing/tests      browser tests (pages served through routing)
  - unit                  tests against dummy Playwright objects and SQLite
"""

"""
================================================================================
WebQA Tools
================================================================================

Shared infrastructure for the UI and database test suites.

Modules:
    - common: Configuration, logging, error types and result objects
    - db_tools: SQL helpers for checking persisted state
    - report_tools: Allure attachments and report generation

Example:
    from webqa_tools.common import init_logger
    from webqa_tools.db_tools import SqlClient

    init_logger()
    with SqlClient.from_env() as db:
        rows = db.query("SELECT * FROM users WHERE login = ?", "octocat")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "db_tools",
    "report_tools",
]

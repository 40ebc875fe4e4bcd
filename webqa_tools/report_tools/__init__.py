"""
Allure reporting helpers.
"""

from .allure_utils import (
    attach_json,
    attach_png,
    attach_query_result,
    attach_text,
    generate_allure_report,
)

__all__ = [
    "attach_json",
    "attach_png",
    "attach_query_result",
    "attach_text",
    "generate_allure_report",
]

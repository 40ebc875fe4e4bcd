"""
================================================================================
Allure Report Utilities
================================================================================

This module provides helpers for attaching evidence to Allure test reports
and for turning allure-results into an HTML report.

Features:
- Text / JSON / PNG attachment helpers
- Query result attachment for database assertions
- Report generation through the Allure CLI

================================================================================
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Union

import allure
from loguru import logger

from webqa_tools.common import safe_json_serialize


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
    json_str = json.dumps(data, indent=2, default=safe_json_serialize)
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


def attach_png(source: Union[bytes, str, Path], name: str = "Screenshot"):
    """
    Attach a PNG image, given as raw bytes or as a file path.
    """
    if isinstance(source, (str, Path)):
        allure.attach.file(
            str(source),
            name=name,
            attachment_type=allure.attachment_type.PNG
        )
    else:
        allure.attach(
            source,
            name=name,
            attachment_type=allure.attachment_type.PNG
        )


def attach_query_result(sql: str, rows: List[Dict[str, Any]], name: str = "Query Result"):
    """
    Attach a SQL statement together with the rows it produced.

    Args:
        sql: The executed statement
        rows: Materialized rows (column label -> value)
        name: Attachment name
    """
    attach_json({"sql": sql, "row_count": len(rows), "rows": rows}, name=name)


# ================================================================================
# Report Generation
# ================================================================================

def generate_allure_report(results_dir: Union[str, Path], output_dir: Union[str, Path]) -> bool:
    """
    Generate Allure HTML report from results.

    Args:
        results_dir: Path to allure-results directory
        output_dir: Directory to write the HTML report to

    Returns:
        True if successful
    """
    logger.info("Generating Allure report...")
    try:
        subprocess.run([
            "allure", "generate",
            str(results_dir),
            "-o", str(output_dir),
            "--clean"
        ], check=True)
    except FileNotFoundError:
        logger.warning("Allure CLI not found. Please install Allure to generate reports.")
        return False
    except subprocess.CalledProcessError as e:
        logger.error(f"Failed to generate Allure report: {e}")
        return False

    logger.info(f"Report generated: {output_dir}")
    return True


__all__ = [
    "attach_json",
    "attach_text",
    "attach_png",
    "attach_query_result",
    "generate_allure_report",
]

"""Output reporters for the third-party license report.

This module provides the CSV codec used for the persisted report, a
Markdown renderer, and the projection of resolved records onto rows.
"""

from license_tool.reporters.base import BaseReporter
from license_tool.reporters.csvfile import (
    DEFAULT_REPORT_FILENAME,
    CsvReporter,
    decode,
    encode,
)
from license_tool.reporters.markdown import MarkdownReporter
from license_tool.reporters.rows import build_rows, canonical_order

__all__ = [
    "DEFAULT_REPORT_FILENAME",
    "BaseReporter",
    "CsvReporter",
    "MarkdownReporter",
    "build_rows",
    "canonical_order",
    "decode",
    "encode",
]

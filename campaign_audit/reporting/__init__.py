"""Presentation of audit results as tables and text."""

from .table_store import CsvTableStore
from .text_report import (
    significance_verdict,
    format_classification,
    format_age_test,
    format_group_test,
    generate_report,
)

__all__ = [
    "CsvTableStore",
    "significance_verdict",
    "format_classification",
    "format_age_test",
    "format_group_test",
    "generate_report",
]

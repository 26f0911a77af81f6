"""Loading of ad performance records."""

from .loader import (
    CANONICAL_COLUMNS,
    COLUMN_ALIASES,
    CsvRecordSource,
    normalize_columns,
    records_from_frame,
    load_records,
)

__all__ = [
    "CANONICAL_COLUMNS",
    "COLUMN_ALIASES",
    "CsvRecordSource",
    "normalize_columns",
    "records_from_frame",
    "load_records",
]

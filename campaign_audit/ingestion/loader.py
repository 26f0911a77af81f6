"""CSV loader for the ads performance export.

Reads every column as text with polars, maps the export's column names onto
canonical names, coerces types and turns each row into an ``AdRecord``.
Spend is parsed straight from its text into Decimal.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging
from pathlib import Path
from typing import Literal

import polars as pl

from campaign_audit.domain.entities import AdRecord
from campaign_audit.domain.errors import SchemaError, ValidationError
from campaign_audit.metrics.metrics import validate_counts


logger = logging.getLogger(__name__)


# Canonical column name -> AdRecord field
CANONICAL_COLUMNS = {
    "ad_id": "ad_id",
    "campaign_id": "campaign_id",
    "platform_campaign_id": "platform_campaign_id",
    "age_bracket": "age_bracket",
    "gender": "gender",
    "interest_code": "interest_code",
    "impressions": "impressions",
    "clicks": "clicks",
    "spent": "spent",
    "total_conversion": "total_conversions",
    "approved_conversion": "approved_conversions",
}

# Column names used by the Kaggle Facebook ads export
COLUMN_ALIASES = {
    "xyz_campaign_id": "campaign_id",
    "fb_campaign_id": "platform_campaign_id",
    "age": "age_bracket",
    "interest": "interest_code",
    "Impressions": "impressions",
    "Clicks": "clicks",
    "Spent": "spent",
    "Total_Conversion": "total_conversion",
    "Approved_Conversion": "approved_conversion",
}

INTEGER_COLUMNS = [
    "ad_id",
    "campaign_id",
    "platform_campaign_id",
    "interest_code",
    "impressions",
    "clicks",
    "total_conversion",
    "approved_conversion",
]

TEXT_COLUMNS = ["age_bracket", "gender"]

OnInvalid = Literal["raise", "skip"]


def normalize_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Rename export column names to canonical names and check all are present.

    Raises:
        SchemaError: If a required column is missing
    """
    renames = {
        name: COLUMN_ALIASES[name]
        for name in df.columns
        if name in COLUMN_ALIASES and COLUMN_ALIASES[name] not in df.columns
    }
    df = df.rename(renames)

    missing = [name for name in CANONICAL_COLUMNS if name not in df.columns]
    if missing:
        raise SchemaError(f"Missing required columns: {missing}", columns=missing)

    return df.select(list(CANONICAL_COLUMNS))


def _coerce_types(df: pl.DataFrame) -> pl.DataFrame:
    """Cast integer and text columns, failing on unparseable or empty values."""
    casts = []
    for name in INTEGER_COLUMNS:
        if df.schema[name].is_integer():
            casts.append(pl.col(name).cast(pl.Int64))
        else:
            casts.append(pl.col(name).cast(pl.String).str.strip_chars().cast(pl.Int64, strict=True))
    casts.extend(pl.col(name).cast(pl.String).str.strip_chars() for name in TEXT_COLUMNS)
    casts.append(pl.col("spent").cast(pl.String).str.strip_chars())

    try:
        df = df.with_columns(casts)
    except pl.exceptions.PolarsError as exc:
        raise SchemaError(f"Could not coerce column types: {exc}") from exc

    null_columns = [name for name in df.columns if df[name].null_count() > 0]
    if null_columns:
        raise SchemaError(f"Columns with missing values: {null_columns}", columns=null_columns)

    return df


def _parse_spent(value: str, ad_id: int) -> Decimal:
    try:
        spent = Decimal(value)
    except InvalidOperation as exc:
        raise SchemaError(f"Column 'spent' is not numeric for ad {ad_id}: {value!r}", columns=["spent"]) from exc
    if not spent.is_finite():
        raise SchemaError(f"Column 'spent' is not finite for ad {ad_id}: {value!r}", columns=["spent"])
    return spent


def records_from_frame(df: pl.DataFrame, on_invalid: OnInvalid = "raise") -> list[AdRecord]:
    """Convert a frame with canonical or export column names into records.

    Args:
        df: Input table
        on_invalid: ``raise`` aborts on the first invalid record, ``skip``
            logs a warning and drops it

    Returns:
        List of validated AdRecords in input order

    Raises:
        SchemaError: If columns are missing or mistyped
        ValidationError: If a record is invalid and on_invalid is ``raise``
    """
    if on_invalid not in ("raise", "skip"):
        raise ValueError(f"on_invalid must be 'raise' or 'skip', got {on_invalid!r}")

    df = _coerce_types(normalize_columns(df))

    records = []
    skipped = 0
    for row in df.iter_rows(named=True):
        values = {CANONICAL_COLUMNS[name]: value for name, value in row.items()}
        values["spent"] = _parse_spent(values["spent"], values["ad_id"])
        record = AdRecord(**values)
        try:
            validate_counts(
                record.impressions,
                record.clicks,
                record.spent,
                record.approved_conversions,
                record.total_conversions,
                ad_id=record.ad_id,
            )
        except ValidationError as exc:
            if on_invalid == "raise":
                raise
            logger.warning("Skipping invalid record: %s", exc)
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.warning("Skipped %d invalid records out of %d", skipped, len(df))
    return records


@dataclass
class CsvRecordSource:
    """Record source backed by a delimited text file."""

    path: Path
    on_invalid: OnInvalid = "raise"
    separator: str = ","

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def read_frame(self) -> pl.DataFrame:
        """Read the raw table with every column as text."""
        if not self.path.exists():
            raise FileNotFoundError(f"Data file not found: {self.path}")
        return pl.read_csv(self.path, separator=self.separator, infer_schema_length=0)

    def load(self) -> list[AdRecord]:
        df = self.read_frame()
        records = records_from_frame(df, on_invalid=self.on_invalid)
        logger.info("Loaded %d records from %s", len(records), self.path)
        return records


def load_records(path: Path | str, on_invalid: OnInvalid = "raise") -> list[AdRecord]:
    """Load and validate records from a CSV file."""
    return CsvRecordSource(Path(path), on_invalid=on_invalid).load()

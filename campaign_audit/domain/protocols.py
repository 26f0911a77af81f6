"""Protocol interfaces for campaign audit components."""

from typing import Protocol, runtime_checkable
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path

import polars as pl

from .entities import (
    AdRecord,
    AdStatus,
    AggregateRow,
    ClassifiedAd,
)


@runtime_checkable
class IRecordSource(Protocol):
    """Interface for anything that yields typed ad records.

    Implementations own parsing and type coercion; the core only ever sees
    ``AdRecord`` values.
    """

    def load(self) -> list[AdRecord]:
        """Load and validate all records."""
        ...


@runtime_checkable
class IClassifier(Protocol):
    """Interface for ad cost-efficiency classifiers."""

    def classify(
        self,
        sales: int,
        spent: Decimal | float | None,
        cpa: Decimal | float | None,
    ) -> AdStatus:
        """Label a single ad from its aggregated sales, spend and CPA."""
        ...

    def classify_row(self, row: AggregateRow) -> AdStatus:
        """Label an ad-level aggregate."""
        ...

    def classify_ads(self, records: Iterable[AdRecord]) -> list[ClassifiedAd]:
        """Aggregate records per ad and label every ad."""
        ...


@runtime_checkable
class ITableStore(Protocol):
    """Interface for persisting result tables."""

    def save_table(self, table: pl.DataFrame, name: str) -> Path:
        """Write a table and return its path."""
        ...

    def list_tables(self) -> list[str]:
        """List the names of saved tables."""
        ...

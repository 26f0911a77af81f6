"""Domain layer: entities, errors and protocols."""

from .entities import (
    AGE_BRACKETS,
    AdRecord,
    DerivedMetrics,
    AggregateRow,
    AdStatus,
    ClassificationThresholds,
    ClassifiedAd,
    PairwiseProportionResult,
    GroupComparisonResult,
    is_undefined,
    to_decimal,
)

from .errors import (
    SchemaError,
    ValidationError,
    InsufficientDataError,
)

from .protocols import (
    IRecordSource,
    IClassifier,
    ITableStore,
)

__all__ = [
    "AGE_BRACKETS",
    "AdRecord",
    "DerivedMetrics",
    "AggregateRow",
    "AdStatus",
    "ClassificationThresholds",
    "ClassifiedAd",
    "PairwiseProportionResult",
    "GroupComparisonResult",
    "is_undefined",
    "to_decimal",
    "SchemaError",
    "ValidationError",
    "InsufficientDataError",
    "IRecordSource",
    "IClassifier",
    "ITableStore",
]

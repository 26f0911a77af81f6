"""Metrics module for derived ad performance ratios."""

from .metrics import (
    safe_ratio,
    compute_ctr,
    compute_cpc,
    compute_cpa,
    validate_counts,
    derive_metrics,
    derive_record_metrics,
)

__all__ = [
    "safe_ratio",
    "compute_ctr",
    "compute_cpc",
    "compute_cpa",
    "validate_counts",
    "derive_metrics",
    "derive_record_metrics",
]

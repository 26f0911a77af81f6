"""Ad classification by cost efficiency."""

from .classifier import (
    AD_KEY,
    AdClassifier,
    StatusRecord,
    StatusSummary,
    classify_ad,
    filter_status,
    summarize_by_status,
    top_ads_by_spend,
    waste_share,
    join_status,
)

__all__ = [
    "AD_KEY",
    "AdClassifier",
    "StatusRecord",
    "StatusSummary",
    "classify_ad",
    "filter_status",
    "summarize_by_status",
    "top_ads_by_spend",
    "waste_share",
    "join_status",
]

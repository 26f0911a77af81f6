"""Aggregation of ad records by grouping keys."""

from .aggregator import (
    GroupKey,
    ShareRow,
    as_group_key,
    group_records,
    aggregate,
    count_by,
    share_within,
    top_n,
    campaign_summary,
)

__all__ = [
    "GroupKey",
    "ShareRow",
    "as_group_key",
    "group_records",
    "aggregate",
    "count_by",
    "share_within",
    "top_n",
    "campaign_summary",
]

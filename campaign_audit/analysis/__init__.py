"""Segment analysis over classified ads."""

from .segments import (
    InterestShare,
    CommonInterest,
    CommonInterestMatrix,
    interest_campaign_matrix,
    top_interests_by_spend,
    saturation_cells,
    profile_counts,
    interest_shares,
    common_interests,
)

__all__ = [
    "InterestShare",
    "CommonInterest",
    "CommonInterestMatrix",
    "interest_campaign_matrix",
    "top_interests_by_spend",
    "saturation_cells",
    "profile_counts",
    "interest_shares",
    "common_interests",
]

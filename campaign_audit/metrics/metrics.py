"""Derived performance metrics for ads and ad groups.

CTR, CPC and CPA are guarded ratios: each is ``None`` when its denominator is
zero. A missing CPA must never read as zero, which would rank a non-selling
ad as the cheapest one.
"""

from decimal import Decimal

from campaign_audit.domain.entities import AdRecord, DerivedMetrics, is_undefined, to_decimal
from campaign_audit.domain.errors import ValidationError


def safe_ratio(
    numerator: int | float | Decimal,
    denominator: int | float | Decimal,
    scale: int | float = 1,
) -> float | None:
    """Return ``numerator / denominator * scale`` or None for a zero denominator."""
    if denominator == 0:
        return None
    return float(numerator) / float(denominator) * scale


def compute_ctr(impressions: int, clicks: int) -> float | None:
    """Click-through rate in percent."""
    return safe_ratio(clicks, impressions, scale=100)


def compute_cpc(spent: Decimal, clicks: int) -> Decimal | None:
    """Cost per click."""
    if clicks == 0 or is_undefined(spent):
        return None
    return to_decimal(spent) / clicks


def compute_cpa(spent: Decimal, approved_conversions: int) -> Decimal | None:
    """Cost per approved conversion (sale)."""
    if approved_conversions == 0 or is_undefined(spent):
        return None
    return to_decimal(spent) / approved_conversions


def validate_counts(
    impressions: int,
    clicks: int,
    spent: Decimal,
    approved_conversions: int,
    total_conversions: int = 0,
    ad_id: int | None = None,
) -> None:
    """Raise ValidationError if any count or the spend is negative.

    A NaN spend is unknown rather than invalid and passes through.
    """
    values = {
        "impressions": impressions,
        "clicks": clicks,
        "spent": spent,
        "approved_conversions": approved_conversions,
        "total_conversions": total_conversions,
    }
    negative = [name for name, value in values.items() if not is_undefined(value) and value < 0]
    if negative:
        label = f"ad {ad_id}" if ad_id is not None else "record"
        raise ValidationError(
            f"Negative values for {label}: "
            + ", ".join(f"{name}={values[name]}" for name in negative),
            ad_id=ad_id,
        )


def derive_metrics(
    impressions: int,
    clicks: int,
    spent: Decimal | float,
    approved_conversions: int,
) -> DerivedMetrics:
    """Compute CTR, CPC and CPA from raw or summed counts.

    Args:
        impressions: Number of times the ad was shown
        clicks: Number of clicks
        spent: Amount spent, as currency
        approved_conversions: Number of sales

    Returns:
        DerivedMetrics with None for every metric whose denominator is zero,
        and for CPC and CPA when the spend is NaN

    Raises:
        ValidationError: If any input is negative
    """
    spent = to_decimal(spent)
    validate_counts(impressions, clicks, spent, approved_conversions)

    return DerivedMetrics(
        ctr=compute_ctr(impressions, clicks),
        cpc=compute_cpc(spent, clicks),
        cpa=compute_cpa(spent, approved_conversions),
    )


def derive_record_metrics(record: AdRecord) -> DerivedMetrics:
    """Derive metrics for a single record."""
    return derive_metrics(
        record.impressions,
        record.clicks,
        record.spent,
        record.approved_conversions,
    )

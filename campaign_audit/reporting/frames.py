"""Conversion of audit results into polars DataFrames."""

from collections.abc import Iterable
from decimal import Decimal

import polars as pl

from campaign_audit.aggregation.aggregator import ShareRow
from campaign_audit.analysis.segments import CommonInterestMatrix, InterestShare
from campaign_audit.classification.classifier import StatusSummary
from campaign_audit.domain.entities import (
    AggregateRow,
    ClassifiedAd,
    GroupComparisonResult,
    PairwiseProportionResult,
)


def _money(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def aggregate_frame(rows: Iterable[AggregateRow], key_names: tuple[str, ...] | None = None) -> pl.DataFrame:
    """One row per aggregate: key columns, sums and derived metrics."""
    rows = list(rows)
    if key_names is None:
        key_names = rows[0].key_names if rows else ()

    data = []
    for row in rows:
        data.append({
            **row.key_dict(),
            "records": row.record_count,
            "ads": row.distinct_ads,
            "spent": _money(row.spent),
            "impressions": row.impressions,
            "clicks": row.clicks,
            "leads": row.leads,
            "sales": row.sales,
            "ctr": row.ctr,
            "cpc": _money(row.cpc),
            "lead_to_sale_rate": row.lead_to_sale_rate,
            "cpa": _money(row.cpa),
        })

    columns = list(key_names) + [
        "records", "ads", "spent", "impressions", "clicks", "leads",
        "sales", "ctr", "cpc", "lead_to_sale_rate", "cpa",
    ]
    schema_overrides = {
        name: pl.Float64 for name in ("spent", "ctr", "cpc", "lead_to_sale_rate", "cpa")
    }
    if not data:
        return pl.DataFrame(schema={name: schema_overrides.get(name, pl.Int64) for name in columns})
    return pl.DataFrame(data, schema_overrides=schema_overrides).select(columns)


def classified_frame(ads: Iterable[ClassifiedAd]) -> pl.DataFrame:
    """Ad-level classification table."""
    ads = list(ads)
    return pl.DataFrame(
        {
            "ad_id": [ad.ad_id for ad in ads],
            "campaign_id": [ad.campaign_id for ad in ads],
            "spent": [_money(ad.spent) for ad in ads],
            "impressions": [ad.row.impressions for ad in ads],
            "clicks": [ad.row.clicks for ad in ads],
            "sales": [ad.sales for ad in ads],
            "ctr": [ad.row.ctr for ad in ads],
            "cpa": [_money(ad.cpa) for ad in ads],
            "status": [ad.status.value for ad in ads],
        },
        schema_overrides={"ctr": pl.Float64, "cpa": pl.Float64, "spent": pl.Float64},
    )


def share_frame(shares: Iterable[ShareRow]) -> pl.DataFrame:
    """Distribution table with the percentage rounded for display."""
    shares = list(shares)
    key_names = shares[0].key_names if shares else ()
    data = [
        {
            **dict(zip(key_names, share.key)),
            "total": int(share.count),
            "percentage": float(share.display_percentage),
        }
        for share in shares
    ]
    return pl.DataFrame(data) if data else pl.DataFrame()


def counts_frame(counts: dict[tuple, int], key_names: tuple[str, ...]) -> pl.DataFrame:
    data = [{**dict(zip(key_names, key)), "total": total} for key, total in counts.items()]
    return pl.DataFrame(data) if data else pl.DataFrame()


def status_summary_frame(summaries: Iterable[StatusSummary]) -> pl.DataFrame:
    summaries = list(summaries)
    return pl.DataFrame(
        {
            "campaign_id": [s.campaign_id for s in summaries],
            "status": [s.status.value for s in summaries],
            "ads": [s.ad_count for s in summaries],
            "total_spent": [_money(s.total_spent) for s in summaries],
        },
        schema_overrides={"campaign_id": pl.Int64, "ads": pl.Int64, "total_spent": pl.Float64},
    )


def interest_share_frame(shares: Iterable[InterestShare]) -> pl.DataFrame:
    shares = list(shares)
    return pl.DataFrame(
        {
            "interest_code": [s.interest_code for s in shares],
            "status": [s.status.value for s in shares],
            "value": [_money(s.value) for s in shares],
            "share": [_money(s.share) for s in shares],
        },
        schema_overrides={"interest_code": pl.Int64, "value": pl.Float64, "share": pl.Float64},
    )


def common_interest_frame(matrix: CommonInterestMatrix) -> pl.DataFrame:
    interests = list(matrix.interests)
    return pl.DataFrame(
        {
            "interest_code": [i.interest_code for i in interests],
            "star_sales": [i.star_sales for i in interests],
            "zombie_spent": [_money(i.zombie_spent) for i in interests],
            "quadrant": [matrix.quadrant(i) for i in interests],
        },
        schema_overrides={
            "interest_code": pl.Int64,
            "star_sales": pl.Int64,
            "zombie_spent": pl.Float64,
            "quadrant": pl.String,
        },
    )


def pairwise_frame(result: PairwiseProportionResult) -> pl.DataFrame:
    """Long-format table of pairwise comparisons."""
    pairs = list(result.p_values)
    return pl.DataFrame(
        {
            "group_a": [a for a, _ in pairs],
            "group_b": [b for _, b in pairs],
            "rate_a": [result.rate(a) for a, _ in pairs],
            "rate_b": [result.rate(b) for _, b in pairs],
            "p_value_raw": [result.raw_p_values[pair] for pair in pairs],
            "p_value": [result.p_values[pair] for pair in pairs],
        },
        schema_overrides={"group_a": pl.String, "group_b": pl.String},
    )


def group_comparison_frame(result: GroupComparisonResult) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "group": list(result.groups),
            "n": [result.group_sizes[g] for g in result.groups],
            "median_cpa": [result.group_medians[g] for g in result.groups],
        }
    )

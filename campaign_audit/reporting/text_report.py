"""Fixed-width text report of an audit run."""

from datetime import datetime
from decimal import Decimal

from campaign_audit.domain.entities import (
    AdStatus,
    ClassifiedAd,
    GroupComparisonResult,
    PairwiseProportionResult,
)
from campaign_audit.pipelines.audit import AuditResult


def _fmt(value: float | Decimal | None, spec: str = ".2f") -> str:
    if value is None:
        return "n/a"
    return format(float(value), spec)


def significance_verdict(p_value: float, alpha: float) -> str:
    if p_value < alpha:
        return f"significant (p={p_value:.4g} < {alpha})"
    return f"not significant (p={p_value:.4g} >= {alpha})"


def format_classification(ads: list[ClassifiedAd]) -> str:
    """Table of classified ads, one line per ad."""
    lines = [
        f"{'Ad':>8} {'Campaign':>9} {'Spent':>10} {'Sales':>6} {'CPA':>9}  Status",
        "-" * 70,
    ]
    for ad in ads:
        lines.append(
            f"{ad.ad_id:>8} {ad.campaign_id:>9} {_fmt(ad.spent):>10} {ad.sales:>6} "
            f"{_fmt(ad.cpa):>9}  {ad.status.description}"
        )
    return "\n".join(lines)


def format_age_test(result: PairwiseProportionResult, alpha: float) -> str:
    lines = [f"{'Group':<8} {'Sales':>7} {'Clicks':>8} {'Rate':>8}"]
    for group in result.groups:
        lines.append(
            f"{group:<8} {result.successes[group]:>7,} {result.trials[group]:>8,} "
            f"{result.rate(group) * 100:>7.2f}%"
        )
    if result.excluded:
        lines.append(f"Excluded (no clicks): {', '.join(result.excluded)}")

    lines.append("")
    lines.append(f"Bonferroni-corrected p-values ({result.n_comparisons} comparisons):")
    lines.append(" " * 8 + "".join(f"{group:>10}" for group in result.groups[:-1]))
    for i, row_group in enumerate(result.groups[1:], 1):
        cells = "".join(
            f"{result.p_value(row_group, col_group):>10.4g}" for col_group in result.groups[:i]
        )
        lines.append(f"{row_group:<8}{cells}")

    lines.append("")
    for (a, b), p_value in result.p_values.items():
        lines.append(f"{a} vs {b}: {significance_verdict(p_value, alpha)}")
    return "\n".join(lines)


def format_group_test(result: GroupComparisonResult, alpha: float) -> str:
    lines = [f"{'Group':<8} {'N':>6} {'Median CPA':>12}"]
    for group in result.groups:
        lines.append(f"{group:<8} {result.group_sizes[group]:>6} {result.group_medians[group]:>12.2f}")
    lines.append(
        f"{result.test_name}: H={result.statistic:.4f}, "
        f"{significance_verdict(result.p_value, alpha)}"
    )
    return "\n".join(lines)


def generate_report(result: AuditResult) -> str:
    """Generate the full audit report.

    Args:
        result: Output of AuditPipeline.run

    Returns:
        Formatted report string
    """
    lines = [
        "=" * 70,
        "CAMPAIGN AUDIT REPORT",
        f"Records: {result.n_records:,}",
        f"Timestamp: {datetime.now().isoformat()}",
        "=" * 70,
        "",
        "## Campaign Performance",
        "-" * 50,
        f"{'Campaign':>9} {'Ads':>5} {'Spent':>11} {'Impr.':>11} {'Clicks':>8} "
        f"{'Leads':>6} {'Sales':>6} {'CTR%':>7} {'CPC':>6} {'L->S%':>7} {'CPA':>8}",
    ]
    for row in result.campaigns:
        lines.append(
            f"{row.key_value('campaign_id'):>9} {row.distinct_ads:>5} {_fmt(row.spent):>11} "
            f"{row.impressions:>11,} {row.clicks:>8,} {row.leads:>6} {row.sales:>6} "
            f"{_fmt(row.ctr, '.4f'):>7} {_fmt(row.cpc):>6} {_fmt(row.lead_to_sale_rate):>7} "
            f"{_fmt(row.cpa):>8}"
        )

    lines.extend(["", "## Age Share by Campaign", "-" * 50])
    for share in result.age_share_by_campaign:
        campaign_id, age = share.key
        lines.append(f"{campaign_id:>9} {age:<6} {share.count:>6} {share.display_percentage:>7}%")

    lines.extend(["", "## Gender Share by Campaign", "-" * 50])
    for share in result.gender_share_by_campaign:
        campaign_id, gender = share.key
        lines.append(f"{campaign_id:>9} {gender:<6} {share.count:>6} {share.display_percentage:>7}%")

    lines.extend([
        "",
        "## Interests",
        "-" * 50,
        f"Top {len(result.top_interests)} interests by spend: "
        + ", ".join(str(code) for code in result.top_interests),
    ])

    counts = result.status_counts()
    lines.extend([
        "",
        "## Ad Classification",
        "-" * 50,
        f"Zombie spend > {result.thresholds.zombie_spend}, target CPA {result.thresholds.target_cpa}",
    ])
    for status in AdStatus:
        lines.append(f"{status.description:<36} {counts[status]:>6}")

    lines.extend(["", "## Zombie Ads by Campaign", "-" * 50])
    for summary in result.zombie_summary:
        lines.append(
            f"Campaign {summary.campaign_id}: {summary.ad_count} ads, spent {_fmt(summary.total_spent)}"
        )
    lines.append(f"Total zombie spend: {_fmt(result.zombie_spend)}")
    lines.append(
        f"Top {len(result.top_zombies)} share of zombie spend: "
        f"{_fmt(result.top_zombie_waste_share)}%"
    )

    lines.extend(["", f"## Top {len(result.top_zombies)} Zombie Ads", "-" * 50])
    lines.append(format_classification(result.top_zombies))

    lines.extend(["", "## Common Interests (Star Sales vs Zombie Spend)", "-" * 50])
    matrix = result.common_interests
    for interest in matrix.interests:
        quadrant = matrix.quadrant(interest) or "-"
        lines.append(
            f"{interest.interest_code:>6} {interest.star_sales:>6} "
            f"{_fmt(interest.zombie_spent):>10}  {quadrant}"
        )

    lines.extend(["", "## Conversion Rate by Age", "-" * 50])
    lines.append(format_age_test(result.age_test, result.alpha))

    lines.extend(["", "## CPA by Gender", "-" * 50])
    lines.append(format_group_test(result.gender_cpa_test, result.alpha))

    lines.append("=" * 70)
    return "\n".join(lines)

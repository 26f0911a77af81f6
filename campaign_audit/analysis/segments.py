"""Segment analysis: interests, ages and demographic profiles.

Builds the cross tabulations used to explain where cheap and wasteful ads
differ: interest x campaign performance, the most funded interests, their
saturation by age, and how star and zombie ads split by audience.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

import numpy as np

from campaign_audit.aggregation.aggregator import aggregate, count_by, top_n
from campaign_audit.classification.classifier import StatusRecord
from campaign_audit.domain.entities import AdRecord, AdStatus, AggregateRow, is_undefined


@dataclass(frozen=True)
class InterestShare:
    """Total of a value for one interest within a status cluster."""
    interest_code: int
    status: AdStatus
    value: Decimal
    share: Decimal


@dataclass(frozen=True)
class CommonInterest:
    """An interest that both sells in star ads and wastes spend in zombie ads."""
    interest_code: int
    star_sales: int
    zombie_spent: Decimal


@dataclass(frozen=True)
class CommonInterestMatrix:
    """Common interests with the medians that split them into quadrants."""
    interests: tuple[CommonInterest, ...]
    median_sales: float
    median_spent: float

    def quadrant(self, interest: CommonInterest) -> str | None:
        """``Scale`` or ``Adjust Segmentation`` for high-potential interests.

        Interests with star sales below the median get no label.
        """
        if interest.star_sales < self.median_sales:
            return None
        if float(interest.zombie_spent) >= self.median_spent:
            return "Adjust Segmentation"
        return "Scale"


def interest_campaign_matrix(records: Iterable[AdRecord]) -> list[AggregateRow]:
    """Sales and CPA per (interest, campaign), keeping cells that sold."""
    return [
        row for row in aggregate(records, ("interest_code", "campaign_id"))
        if row.sales > 0
    ]


def top_interests_by_spend(records: Iterable[AdRecord], n: int = 5) -> list[int]:
    """Interest codes with the highest total spend, ties by code."""
    rows = top_n(
        aggregate(records, ("interest_code",)),
        n,
        metric=lambda row: row.spent,
        tie_key=lambda row: row.key_value("interest_code"),
    )
    return [row.key_value("interest_code") for row in rows]


def saturation_cells(
    records: Iterable[AdRecord],
    interest_codes: Sequence[int],
) -> list[AggregateRow]:
    """CPA and sales per (campaign, interest, age) for the given interests."""
    wanted = set(interest_codes)
    return aggregate(
        (record for record in records if record.interest_code in wanted),
        ("campaign_id", "interest_code", "age_bracket"),
    )


def profile_counts(
    joined: Iterable[StatusRecord],
    statuses: Sequence[AdStatus] = (AdStatus.STAR, AdStatus.ZOMBIE),
) -> dict[tuple[AdStatus, str, str], int]:
    """Number of records per (status, age bracket, gender)."""
    joined = list(joined)
    counts: dict[tuple[AdStatus, str, str], int] = {}
    for status in statuses:
        records = [item.record for item in joined if item.status == status]
        for (age, gender), count in count_by(records, ("age_bracket", "gender")).items():
            counts[(status, age, gender)] = count
    return counts


def interest_shares(
    joined: Iterable[StatusRecord],
    status: AdStatus,
    value: Literal["sales", "spent"],
    n: int = 10,
) -> list[InterestShare]:
    """Top n interests of a status cluster by their share of ``value``.

    Stars are usually ranked by sales and zombies by spend. Records whose
    value is unknown are left out.
    """
    if value not in ("sales", "spent"):
        raise ValueError(f"value must be 'sales' or 'spent', got {value!r}")

    rows = aggregate(
        (
            item.record for item in joined
            if item.status == status and not is_undefined(getattr(item.record, value))
        ),
        ("interest_code",),
    )
    totals = {row.key_value("interest_code"): Decimal(getattr(row, value)) for row in rows}
    cluster_total = sum(totals.values(), Decimal("0"))

    shares = [
        InterestShare(
            interest_code=code,
            status=status,
            value=total,
            share=total / cluster_total if cluster_total else Decimal("0"),
        )
        for code, total in totals.items()
    ]
    return top_n(shares, n, metric=lambda s: s.share, tie_key=lambda s: s.interest_code)


def common_interests(joined: Iterable[StatusRecord]) -> CommonInterestMatrix:
    """Interests with star sales and zombie spend, split at the medians."""
    star_sales: dict[int, int] = {}
    zombie_spent: dict[int, Decimal] = {}
    for item in joined:
        code = item.record.interest_code
        star_sales.setdefault(code, 0)
        zombie_spent.setdefault(code, Decimal("0"))
        if item.status == AdStatus.STAR:
            star_sales[code] += item.record.approved_conversions
        elif item.status == AdStatus.ZOMBIE and not is_undefined(item.record.spent):
            zombie_spent[code] += item.record.spent

    interests = tuple(
        CommonInterest(interest_code=code, star_sales=star_sales[code], zombie_spent=zombie_spent[code])
        for code in sorted(star_sales)
        if star_sales[code] > 0 and zombie_spent[code] > 0
    )
    if not interests:
        return CommonInterestMatrix(interests=(), median_sales=float("nan"), median_spent=float("nan"))

    return CommonInterestMatrix(
        interests=interests,
        median_sales=float(np.median([i.star_sales for i in interests])),
        median_spent=float(np.median([float(i.zombie_spent) for i in interests])),
    )

"""Ad cost-efficiency classification.

Rules are evaluated in order and the first match wins:

1. Zombie: no sales and spend above the zombie threshold (or spend unknown)
2. Star: CPA strictly below the target CPA
3. Expensive: CPA at or above the target CPA
4. InTest: no sales yet, spend still too low for a verdict

Spend and CPA are compared as Decimal, so a CPA of exactly 40 is always
Expensive and a spend of exactly 50 with no sales is always InTest.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from campaign_audit.aggregation.aggregator import aggregate, top_n
from campaign_audit.domain.entities import (
    AdRecord,
    AdStatus,
    AggregateRow,
    ClassificationThresholds,
    ClassifiedAd,
    is_undefined,
    to_decimal,
)
from campaign_audit.domain.errors import ValidationError


AD_KEY = ("ad_id", "campaign_id")


@dataclass(frozen=True)
class StatusRecord:
    """A raw record joined with the status and CPA of its ad."""
    record: AdRecord
    status: AdStatus
    ad_cpa: Decimal | None


@dataclass(frozen=True)
class StatusSummary:
    """Number of ads with a status and their total spend, per campaign."""
    campaign_id: int
    status: AdStatus
    ad_count: int
    total_spent: Decimal


@dataclass(frozen=True)
class AdClassifier:
    """Threshold classifier for ad-level aggregates."""

    thresholds: ClassificationThresholds = field(default_factory=ClassificationThresholds)

    def classify(
        self,
        sales: int,
        spent: Decimal | float | None,
        cpa: Decimal | float | None,
    ) -> AdStatus:
        """Label one ad from its aggregated sales, spend and CPA.

        Raises:
            ValidationError: If sales or spend is negative
        """
        if sales < 0:
            raise ValidationError(f"sales must be non-negative, got {sales}")

        spent_known = not is_undefined(spent)
        if spent_known:
            spent = to_decimal(spent)
            if spent < 0:
                raise ValidationError(f"spent must be non-negative, got {spent}")

        if sales == 0 and (not spent_known or spent > self.thresholds.zombie_spend):
            return AdStatus.ZOMBIE

        if not is_undefined(cpa):
            cpa = to_decimal(cpa)
            if cpa < self.thresholds.target_cpa:
                return AdStatus.STAR
            return AdStatus.EXPENSIVE

        return AdStatus.IN_TEST

    def classify_row(self, row: AggregateRow) -> AdStatus:
        return self.classify(row.sales, row.spent, row.cpa)

    def classify_ads(self, records: Iterable[AdRecord]) -> list[ClassifiedAd]:
        """Aggregate records per (ad_id, campaign_id) and label each ad.

        Labels come from the summed spend and sales of the ad, never from
        labelling rows one by one.
        """
        return [
            ClassifiedAd(row=row, status=self.classify_row(row))
            for row in aggregate(records, AD_KEY)
        ]


def classify_ad(
    sales: int,
    spent: Decimal | float | None,
    cpa: Decimal | float | None,
    thresholds: ClassificationThresholds | None = None,
) -> AdStatus:
    """Functional shortcut for ``AdClassifier(thresholds).classify``."""
    return AdClassifier(thresholds or ClassificationThresholds()).classify(sales, spent, cpa)


def filter_status(classified: Iterable[ClassifiedAd], status: AdStatus) -> list[ClassifiedAd]:
    return [ad for ad in classified if ad.status == status]


def summarize_by_status(
    classified: Iterable[ClassifiedAd],
    status: AdStatus = AdStatus.ZOMBIE,
) -> list[StatusSummary]:
    """Count the ads with ``status`` and sum their spend per campaign."""
    totals: dict[int, tuple[int, Decimal]] = {}
    for ad in filter_status(classified, status):
        count, spent = totals.get(ad.campaign_id, (0, Decimal("0")))
        totals[ad.campaign_id] = (count + 1, spent + ad.spent)

    return [
        StatusSummary(
            campaign_id=campaign_id,
            status=status,
            ad_count=totals[campaign_id][0],
            total_spent=totals[campaign_id][1],
        )
        for campaign_id in sorted(totals)
    ]


def top_ads_by_spend(
    classified: Iterable[ClassifiedAd],
    status: AdStatus = AdStatus.ZOMBIE,
    n: int = 10,
) -> list[ClassifiedAd]:
    """The n ads with ``status`` that spent the most, ties by ad id.

    Ads whose spend is unknown are not ranked.
    """
    return top_n(
        filter_status(classified, status),
        n,
        metric=lambda ad: ad.spent,
        tie_key=lambda ad: ad.ad_id,
    )


def waste_share(
    classified: Iterable[ClassifiedAd],
    n: int = 10,
    status: AdStatus = AdStatus.ZOMBIE,
) -> Decimal | None:
    """Share (in percent) of the status' known spend held by its top n ads."""
    classified = list(classified)
    total = sum(
        (ad.spent for ad in filter_status(classified, status) if not is_undefined(ad.spent)),
        Decimal("0"),
    )
    if total == 0:
        return None
    top = sum((ad.spent for ad in top_ads_by_spend(classified, status, n)), Decimal("0"))
    return top * 100 / total


def join_status(
    records: Iterable[AdRecord],
    classified: Iterable[ClassifiedAd],
) -> list[StatusRecord]:
    """Attach the status and CPA of each record's ad.

    Records whose ad was not classified are dropped (inner join on
    ad_id and campaign_id).
    """
    by_ad = {(ad.ad_id, ad.campaign_id): ad for ad in classified}
    joined = []
    for record in records:
        ad = by_ad.get((record.ad_id, record.campaign_id))
        if ad is not None:
            joined.append(StatusRecord(record=record, status=ad.status, ad_cpa=ad.cpa))
    return joined

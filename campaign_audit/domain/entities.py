"""Domain entities for the campaign audit pipeline."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
import math
from typing import Any


AGE_BRACKETS = ("30-34", "35-39", "40-44", "45-49")


@dataclass(frozen=True)
class AdRecord:
    """A single row of the ads performance export."""
    ad_id: int
    campaign_id: int
    platform_campaign_id: int
    age_bracket: str
    gender: str
    interest_code: int
    impressions: int
    clicks: int
    spent: Decimal
    total_conversions: int
    approved_conversions: int

    @property
    def sales(self) -> int:
        return self.approved_conversions

    @property
    def leads(self) -> int:
        return self.total_conversions


@dataclass(frozen=True)
class DerivedMetrics:
    """CTR, CPC and CPA. ``None`` marks a metric whose denominator is zero."""
    ctr: float | None
    cpc: Decimal | None
    cpa: Decimal | None


@dataclass(frozen=True)
class AggregateRow:
    """Summed counts for one group of records.

    Ratios are computed from the sums, so the CPA of a group is total spend
    over total sales and not the mean of the members' CPAs.
    """
    key: tuple
    key_names: tuple[str, ...]
    record_count: int
    impressions: int
    clicks: int
    spent: Decimal
    total_conversions: int
    approved_conversions: int
    metrics: DerivedMetrics
    members: tuple[AdRecord, ...] = field(default=(), repr=False, compare=False)

    @property
    def sales(self) -> int:
        return self.approved_conversions

    @property
    def leads(self) -> int:
        return self.total_conversions

    @property
    def ctr(self) -> float | None:
        return self.metrics.ctr

    @property
    def cpc(self) -> Decimal | None:
        return self.metrics.cpc

    @property
    def cpa(self) -> Decimal | None:
        return self.metrics.cpa

    @property
    def distinct_ads(self) -> int:
        return len({member.ad_id for member in self.members})

    @property
    def lead_to_sale_rate(self) -> float | None:
        if self.total_conversions <= 0:
            return None
        return self.approved_conversions / self.total_conversions * 100

    @property
    def conversion_rate(self) -> float | None:
        if self.clicks <= 0:
            return None
        return self.approved_conversions / self.clicks

    def key_value(self, name: str) -> Any:
        """Look up one component of the key by its name."""
        try:
            return self.key[self.key_names.index(name)]
        except ValueError:
            raise KeyError(f"'{name}' is not part of key {self.key_names}") from None

    def key_dict(self) -> dict[str, Any]:
        return dict(zip(self.key_names, self.key))


class AdStatus(str, Enum):
    """Cost-efficiency label of an ad."""
    ZOMBIE = "Zombie"
    STAR = "Star"
    EXPENSIVE = "Expensive"
    IN_TEST = "InTest"

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    AdStatus.ZOMBIE: "Zombie (Spends and doesn't sell)",
    AdStatus.STAR: "Star (Cheap)",
    AdStatus.EXPENSIVE: "Expensive (Needs Optimization)",
    AdStatus.IN_TEST: "In Test (Low Relative Spending)",
}


@dataclass(frozen=True)
class ClassificationThresholds:
    """Thresholds for ad classification.

    ``zombie_spend`` is the spend above which an ad with no sales is a zombie;
    ``target_cpa`` splits stars (strictly below) from expensive ads.
    """
    zombie_spend: Decimal = Decimal("50")
    target_cpa: Decimal = Decimal("40")

    def __post_init__(self) -> None:
        object.__setattr__(self, "zombie_spend", to_decimal(self.zombie_spend))
        object.__setattr__(self, "target_cpa", to_decimal(self.target_cpa))
        if self.zombie_spend < 0:
            raise ValueError(f"zombie_spend must be non-negative, got {self.zombie_spend}")
        if self.target_cpa <= 0:
            raise ValueError(f"target_cpa must be positive, got {self.target_cpa}")


@dataclass(frozen=True)
class ClassifiedAd:
    """Ad-level aggregate with its status label."""
    row: AggregateRow
    status: AdStatus

    @property
    def ad_id(self) -> int:
        return self.row.key_value("ad_id")

    @property
    def campaign_id(self) -> int:
        return self.row.key_value("campaign_id")

    @property
    def spent(self) -> Decimal:
        return self.row.spent

    @property
    def sales(self) -> int:
        return self.row.sales

    @property
    def cpa(self) -> Decimal | None:
        return self.row.cpa


@dataclass(frozen=True)
class PairwiseProportionResult:
    """Pairwise two-proportion comparisons with Bonferroni correction.

    ``p_values`` and ``raw_p_values`` are keyed by ``(group_a, group_b)``
    following the order of ``groups``; use ``p_value`` for symmetric lookup.
    """
    groups: tuple[str, ...]
    successes: dict[str, int]
    trials: dict[str, int]
    raw_p_values: dict[tuple[str, str], float]
    p_values: dict[tuple[str, str], float]
    excluded: tuple[str, ...] = ()
    method: str = "bonferroni"

    @property
    def n_comparisons(self) -> int:
        return len(self.p_values)

    def rate(self, group: str) -> float:
        return self.successes[group] / self.trials[group]

    def p_value(self, group_a: str, group_b: str) -> float:
        if group_a == group_b:
            return 1.0
        if (group_a, group_b) in self.p_values:
            return self.p_values[(group_a, group_b)]
        return self.p_values[(group_b, group_a)]

    def as_matrix(self) -> list[list[float]]:
        """Symmetric matrix of corrected p-values in ``groups`` order."""
        return [[self.p_value(a, b) for b in self.groups] for a in self.groups]


@dataclass(frozen=True)
class GroupComparisonResult:
    """Rank-based comparison of a metric across groups."""
    statistic: float
    p_value: float
    groups: tuple[str, ...]
    group_sizes: dict[str, int]
    group_medians: dict[str, float]
    metric: str = "cpa"
    test_name: str = "kruskal-wallis"


def to_decimal(value: Any) -> Decimal:
    """Convert a numeric value to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def is_undefined(value: Any) -> bool:
    """True for None and for float or Decimal NaN."""
    if value is None:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, Decimal):
        return value.is_nan()
    return False

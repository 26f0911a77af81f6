"""Group-by aggregation over ad records.

Records are grouped through an explicit key-tuple -> accumulator mapping.
Counts are summed as integers and spend as Decimal, so every aggregate is
exact and independent of input order. Derived metrics are computed from the
sums of each group.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any

from campaign_audit.domain.entities import AdRecord, AggregateRow, is_undefined
from campaign_audit.metrics.metrics import derive_metrics


@dataclass(frozen=True)
class GroupKey:
    """A named grouping key.

    By default the key reads the named attributes of each record; ``fn`` can
    compute the key tuple from something else.
    """
    names: tuple[str, ...]
    fn: Callable[[AdRecord], tuple] | None = None

    def __call__(self, record: AdRecord) -> tuple:
        if self.fn is not None:
            return tuple(self.fn(record))
        return tuple(getattr(record, name) for name in self.names)


KeySpec = GroupKey | Sequence[str] | str


@dataclass
class _Accumulator:
    record_count: int = 0
    impressions: int = 0
    clicks: int = 0
    spent: Decimal = Decimal("0")
    total_conversions: int = 0
    approved_conversions: int = 0
    members: list[AdRecord] = field(default_factory=list)

    def add(self, record: AdRecord) -> None:
        self.record_count += 1
        self.impressions += record.impressions
        self.clicks += record.clicks
        self.spent += record.spent
        self.total_conversions += record.total_conversions
        self.approved_conversions += record.approved_conversions
        self.members.append(record)

    def to_row(self, key: tuple, key_names: tuple[str, ...]) -> AggregateRow:
        return AggregateRow(
            key=key,
            key_names=key_names,
            record_count=self.record_count,
            impressions=self.impressions,
            clicks=self.clicks,
            spent=self.spent,
            total_conversions=self.total_conversions,
            approved_conversions=self.approved_conversions,
            metrics=derive_metrics(
                self.impressions, self.clicks, self.spent, self.approved_conversions
            ),
            members=tuple(self.members),
        )


@dataclass(frozen=True)
class ShareRow:
    """Count of one group and its percentage within the outer group."""
    key: tuple
    key_names: tuple[str, ...]
    count: int | Decimal
    percentage: Decimal

    @property
    def display_percentage(self) -> Decimal:
        return self.percentage.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)


def as_group_key(key: KeySpec) -> GroupKey:
    """Normalize an attribute name, a tuple of names or a GroupKey."""
    if isinstance(key, GroupKey):
        return key
    if isinstance(key, str):
        return GroupKey(names=(key,))
    return GroupKey(names=tuple(key))


def group_records(records: Iterable[AdRecord], key: KeySpec) -> dict[tuple, list[AdRecord]]:
    """Map each distinct key to its member records, in input order."""
    group_key = as_group_key(key)
    groups: dict[tuple, list[AdRecord]] = {}
    for record in records:
        groups.setdefault(group_key(record), []).append(record)
    return groups


def aggregate(records: Iterable[AdRecord], key: KeySpec) -> list[AggregateRow]:
    """Aggregate records into one row per distinct key.

    Args:
        records: Records to aggregate
        key: Attribute name(s) or a GroupKey

    Returns:
        AggregateRows sorted by key ascending
    """
    group_key = as_group_key(key)
    accumulators: dict[tuple, _Accumulator] = {}
    for record in records:
        accumulators.setdefault(group_key(record), _Accumulator()).add(record)

    return [
        accumulators[k].to_row(k, group_key.names)
        for k in sorted(accumulators)
    ]


def count_by(records: Iterable[AdRecord], key: KeySpec) -> dict[tuple, int]:
    """Number of records per key, sorted by key."""
    group_key = as_group_key(key)
    counts: dict[tuple, int] = {}
    for record in records:
        k = group_key(record)
        counts[k] = counts.get(k, 0) + 1
    return {k: counts[k] for k in sorted(counts)}


def share_within(
    counts: dict[tuple, int | Decimal] | Iterable[AggregateRow],
    outer_len: int,
    key_names: tuple[str, ...] = (),
    value: Callable[[AggregateRow], int | Decimal] | None = None,
) -> list[ShareRow]:
    """Percentage of each group within the groups sharing its outer key.

    The outer key is the first ``outer_len`` components of the key, so with
    keys ``(campaign_id, age_bracket)`` and ``outer_len=1`` each row holds the
    share of that age bracket within its campaign.

    Args:
        counts: Mapping of key -> count, or AggregateRows
        outer_len: Number of leading key components forming the outer group
        key_names: Names of the key components (taken from rows if omitted)
        value: Value to share out when rows are given (defaults to record count)

    Returns:
        ShareRows in key order, with exact Decimal percentages
    """
    if isinstance(counts, dict):
        items = list(counts.items())
    else:
        rows = list(counts)
        if rows and not key_names:
            key_names = rows[0].key_names
        getter = value or (lambda row: row.record_count)
        items = [(row.key, getter(row)) for row in rows]

    if outer_len < 0 or any(len(k) < outer_len for k, _ in items):
        raise ValueError(f"outer_len {outer_len} is longer than the group keys")

    totals: dict[tuple, Decimal] = {}
    for k, count in items:
        outer = k[:outer_len]
        totals[outer] = totals.get(outer, Decimal("0")) + Decimal(count)

    shares = []
    for k, count in sorted(items, key=lambda item: item[0]):
        total = totals[k[:outer_len]]
        percentage = Decimal(count) * 100 / total if total else Decimal("0")
        shares.append(ShareRow(key=k, key_names=key_names, count=count, percentage=percentage))
    return shares


def top_n(
    rows: Iterable[Any],
    n: int,
    metric: Callable[[Any], Any],
    tie_key: Callable[[Any], Any],
) -> list[Any]:
    """Select the n rows with the largest metric.

    Ties are broken by ``tie_key`` ascending. Rows whose metric is None or
    NaN are left out.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    ranked = [row for row in rows if not is_undefined(metric(row))]
    ranked.sort(key=tie_key)
    ranked.sort(key=metric, reverse=True)
    return ranked[:n]


def campaign_summary(records: Iterable[AdRecord]) -> list[AggregateRow]:
    """Campaign-level totals: ads run, investment, funnel counts and ratios."""
    return aggregate(records, ("campaign_id",))

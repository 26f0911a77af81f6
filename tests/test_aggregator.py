import random
from decimal import Decimal

import pytest

from campaign_audit.aggregation import (
    GroupKey,
    aggregate,
    campaign_summary,
    count_by,
    group_records,
    share_within,
    top_n,
)


def test_aggregate_sums_and_derives_from_sums(make_record):
    records = [
        make_record(ad_id=1, campaign_id=1, impressions=100, clicks=10, spent="30", approved_conversions=1),
        make_record(ad_id=2, campaign_id=1, impressions=300, clicks=30, spent="10", approved_conversions=3),
    ]
    (row,) = aggregate(records, ("campaign_id",))

    assert row.key == (1,)
    assert row.record_count == 2
    assert row.impressions == 400
    assert row.clicks == 40
    assert row.spent == Decimal("40")
    assert row.sales == 4
    # Total spend over total sales, not the mean of 30 and 3.33
    assert row.cpa == Decimal("10")
    assert row.ctr == pytest.approx(10.0)


def test_aggregate_is_order_independent(sample_records):
    shuffled = list(sample_records)
    random.Random(7).shuffle(shuffled)

    original = aggregate(sample_records, ("campaign_id", "age_bracket"))
    permuted = aggregate(shuffled, ("campaign_id", "age_bracket"))

    assert original == permuted


def test_aggregate_keeps_members(sample_records):
    rows = aggregate(sample_records, "gender")
    members = {row.key_value("gender"): {r.ad_id for r in row.members} for row in rows}

    assert members == {"F": {2, 4, 6, 8, 9}, "M": {1, 3, 5, 7}}


def test_aggregate_with_callable_key(sample_records):
    key = GroupKey(names=("converted",), fn=lambda r: (r.approved_conversions > 0,))
    rows = aggregate(sample_records, key)

    assert [row.key for row in rows] == [(False,), (True,)]
    assert rows[0].cpa is None


def test_undefined_group_cpa_stays_none(make_record):
    (row,) = aggregate([make_record(spent="75", approved_conversions=0)], "ad_id")
    assert row.cpa is None


def test_group_records(sample_records):
    groups = group_records(sample_records, "campaign_id")
    assert sorted(groups) == [(916,), (936,), (1178,)]
    assert [r.ad_id for r in groups[(1178,)]] == [5, 6, 7, 8, 9]


def test_count_by(sample_records):
    counts = count_by(sample_records, ("age_bracket",))
    assert counts == {("30-34",): 3, ("35-39",): 2, ("40-44",): 2, ("45-49",): 2}


def test_share_within_outer_key(sample_records):
    counts = count_by(sample_records, ("campaign_id", "gender"))
    shares = {s.key: s for s in share_within(counts, 1, ("campaign_id", "gender"))}

    assert shares[(916, "F")].percentage == Decimal("50")
    assert shares[(1178, "F")].percentage == Decimal("60")
    assert shares[(1178, "M")].percentage == Decimal("40")

    for campaign in (916, 936, 1178):
        total = sum(s.percentage for k, s in shares.items() if k[0] == campaign)
        assert total == Decimal("100")


def test_share_display_rounds_to_two_places():
    shares = share_within({("a", "x"): 1, ("a", "y"): 2}, 1)
    by_key = {s.key: s for s in shares}

    assert by_key[("a", "x")].display_percentage == Decimal("33.33")
    assert by_key[("a", "y")].display_percentage == Decimal("66.67")


def test_share_within_rows_uses_record_count(sample_records):
    rows = aggregate(sample_records, ("campaign_id", "age_bracket"))
    shares = share_within(rows, 1)

    assert shares[0].key_names == ("campaign_id", "age_bracket")
    assert {s.key: s.count for s in shares}[(916, "30-34")] == 2


def test_share_within_rejects_long_outer_key():
    with pytest.raises(ValueError):
        share_within({("a",): 1}, 2)


def test_top_n_breaks_ties_by_identifier():
    rows = [("b", 5), ("a", 5), ("c", 9), ("d", None), ("e", 1)]
    top = top_n(rows, 3, metric=lambda r: r[1], tie_key=lambda r: r[0])

    assert top == [("c", 9), ("a", 5), ("b", 5)]


def test_top_n_is_independent_of_input_order():
    rows = [("b", 5), ("a", 5), ("c", 5)]
    expected = top_n(rows, 2, metric=lambda r: r[1], tie_key=lambda r: r[0])
    for _ in range(5):
        random.shuffle(rows)
        assert top_n(rows, 2, metric=lambda r: r[1], tie_key=lambda r: r[0]) == expected


def test_campaign_summary(sample_records):
    rows = {row.key_value("campaign_id"): row for row in campaign_summary(sample_records)}

    big = rows[1178]
    assert big.distinct_ads == 5
    assert big.spent == Decimal("595.50")
    assert big.sales == 14
    assert big.leads == 20
    assert big.lead_to_sale_rate == pytest.approx(70.0)
    assert big.cpa == Decimal("595.50") / 14


def test_ad_level_spend_round_trips_to_raw_spend(sample_records):
    ad_rows = aggregate(sample_records, ("ad_id", "campaign_id"))
    for campaign in (916, 936, 1178):
        ad_total = sum(
            (row.spent for row in ad_rows if row.key_value("campaign_id") == campaign),
            Decimal("0"),
        )
        raw_total = sum(
            (r.spent for r in sample_records if r.campaign_id == campaign),
            Decimal("0"),
        )
        assert ad_total == raw_total


def test_key_value_unknown_name(sample_records):
    (row, *_) = aggregate(sample_records, "campaign_id")
    with pytest.raises(KeyError):
        row.key_value("gender")

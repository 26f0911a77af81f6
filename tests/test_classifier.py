import random
from decimal import Decimal

import pytest

from campaign_audit.classification import (
    AdClassifier,
    classify_ad,
    join_status,
    summarize_by_status,
    top_ads_by_spend,
    waste_share,
)
from campaign_audit.domain import (
    AdStatus,
    ClassificationThresholds,
    IClassifier,
    ValidationError,
)


@pytest.fixture
def classifier() -> AdClassifier:
    return AdClassifier()


class TestRules:

    def test_zombie(self, classifier):
        assert classifier.classify(0, Decimal("60"), None) == AdStatus.ZOMBIE

    def test_star(self, classifier):
        assert classifier.classify(5, Decimal("100"), Decimal("20")) == AdStatus.STAR

    def test_expensive(self, classifier):
        assert classifier.classify(4, Decimal("200"), Decimal("50")) == AdStatus.EXPENSIVE

    def test_in_test(self, classifier):
        assert classifier.classify(0, Decimal("30"), None) == AdStatus.IN_TEST

    def test_cpa_exactly_at_target_is_expensive(self, classifier):
        assert classifier.classify(3, Decimal("120"), Decimal("40")) == AdStatus.EXPENSIVE

    def test_float_cpa_at_target_is_expensive(self, classifier):
        assert classifier.classify(3, 120.0, 40.0) == AdStatus.EXPENSIVE

    def test_spend_exactly_at_zombie_threshold_is_in_test(self, classifier):
        assert classifier.classify(0, Decimal("50"), None) == AdStatus.IN_TEST

    def test_spend_just_above_threshold_is_zombie(self, classifier):
        assert classifier.classify(0, Decimal("50.01"), None) == AdStatus.ZOMBIE

    @pytest.mark.parametrize("spent", [None, float("nan"), Decimal("NaN")])
    def test_unknown_spend_without_sales_is_zombie(self, classifier, spent):
        assert classifier.classify(0, spent, None) == AdStatus.ZOMBIE

    def test_zero_spend_without_sales_is_in_test(self, classifier):
        assert classifier.classify(0, Decimal("0"), None) == AdStatus.IN_TEST

    @pytest.mark.parametrize("sales, spent", [(-1, Decimal("10")), (0, Decimal("-1")), (2, -5.0)])
    def test_negative_inputs_raise(self, classifier, sales, spent):
        with pytest.raises(ValidationError):
            classifier.classify(sales, spent, None)


def test_thresholds_are_configurable():
    strict = AdClassifier(ClassificationThresholds(zombie_spend=Decimal("20"), target_cpa=Decimal("25")))

    assert strict.classify(0, Decimal("30"), None) == AdStatus.ZOMBIE
    assert strict.classify(5, Decimal("150"), Decimal("30")) == AdStatus.EXPENSIVE
    assert classify_ad(5, Decimal("150"), Decimal("30")) == AdStatus.STAR


def test_thresholds_accept_numbers():
    thresholds = ClassificationThresholds(zombie_spend=50, target_cpa=40.5)
    assert thresholds.target_cpa == Decimal("40.5")

    with pytest.raises(ValueError):
        ClassificationThresholds(target_cpa=0)


def test_classifier_satisfies_protocol(classifier):
    assert isinstance(classifier, IClassifier)


@pytest.mark.parametrize(
    "spent, sales, expected",
    [
        ("60", 0, AdStatus.ZOMBIE),
        ("100", 5, AdStatus.STAR),
        ("200", 4, AdStatus.EXPENSIVE),
        ("30", 0, AdStatus.IN_TEST),
    ],
)
def test_classify_ads_examples(classifier, make_record, spent, sales, expected):
    (ad,) = classifier.classify_ads([make_record(spent=spent, approved_conversions=sales)])
    assert ad.status == expected


def test_classify_ads_uses_summed_spend(classifier, make_record):
    records = [
        make_record(ad_id=7, spent="40", approved_conversions=0),
        make_record(ad_id=7, spent="20", approved_conversions=0),
    ]
    # Each row alone would be InTest
    assert all(classifier.classify(0, r.spent, None) == AdStatus.IN_TEST for r in records)

    (ad,) = classifier.classify_ads(records)
    assert ad.spent == Decimal("60")
    assert ad.status == AdStatus.ZOMBIE


def test_every_ad_gets_exactly_one_label(classifier, sample_records):
    classified = classifier.classify_ads(sample_records)

    assert [ad.ad_id for ad in classified] == list(range(1, 10))
    assert {ad.ad_id: ad.status for ad in classified} == {
        1: AdStatus.STAR,
        2: AdStatus.IN_TEST,
        3: AdStatus.ZOMBIE,
        4: AdStatus.ZOMBIE,
        5: AdStatus.STAR,
        6: AdStatus.EXPENSIVE,
        7: AdStatus.EXPENSIVE,
        8: AdStatus.ZOMBIE,
        9: AdStatus.STAR,
    }


def test_labels_do_not_depend_on_record_order(classifier, make_record):
    records = [
        make_record(ad_id=1, spent="10.10", approved_conversions=0),
        make_record(ad_id=1, spent="29.90", approved_conversions=1),
        make_record(ad_id=2, spent="25", approved_conversions=0),
        make_record(ad_id=2, spent="26", approved_conversions=0),
    ]
    expected = {ad.ad_id: ad.status for ad in classifier.classify_ads(records)}
    for seed in range(5):
        shuffled = list(records)
        random.Random(seed).shuffle(shuffled)
        assert {ad.ad_id: ad.status for ad in classifier.classify_ads(shuffled)} == expected
    assert expected == {1: AdStatus.EXPENSIVE, 2: AdStatus.ZOMBIE}


def test_summarize_by_status(classifier, sample_records):
    summary = summarize_by_status(classifier.classify_ads(sample_records))

    assert [(s.campaign_id, s.ad_count, s.total_spent) for s in summary] == [
        (936, 2, Decimal("180.00")),
        (1178, 1, Decimal("80.50")),
    ]


def test_top_ads_by_spend(classifier, sample_records):
    top = top_ads_by_spend(classifier.classify_ads(sample_records), AdStatus.ZOMBIE, 2)
    assert [ad.ad_id for ad in top] == [4, 8]


def test_top_ads_by_spend_ties_by_ad_id(classifier, make_record):
    records = [make_record(ad_id=i, spent="80", approved_conversions=0) for i in (9, 3, 5)]
    top = top_ads_by_spend(classifier.classify_ads(records), AdStatus.ZOMBIE, 2)
    assert [ad.ad_id for ad in top] == [3, 5]


def test_waste_share(classifier, sample_records):
    classified = classifier.classify_ads(sample_records)

    assert waste_share(classified, 1) == Decimal("120.00") * 100 / Decimal("260.50")
    assert waste_share(classified, 10) == Decimal("100")
    assert waste_share([], 10) is None


def test_join_status(classifier, sample_records):
    classified = classifier.classify_ads(sample_records[:3])
    joined = join_status(sample_records, classified)

    assert [item.record.ad_id for item in joined] == [1, 2, 3]
    assert joined[0].status == AdStatus.STAR
    assert joined[0].ad_cpa == Decimal("1.43")
    assert joined[1].ad_cpa is None


def test_status_descriptions():
    assert AdStatus.ZOMBIE.description == "Zombie (Spends and doesn't sell)"
    assert AdStatus("InTest") is AdStatus.IN_TEST


def test_unknown_spend_flows_through_classify_ads(classifier, make_record):
    records = [
        make_record(ad_id=1, spent="NaN", approved_conversions=0),
        make_record(ad_id=2, spent="NaN", approved_conversions=3),
    ]
    zombie, sold = classifier.classify_ads(records)

    assert zombie.status == AdStatus.ZOMBIE
    assert zombie.spent.is_nan()
    assert sold.cpa is None
    assert sold.status == AdStatus.IN_TEST


def test_unknown_spend_is_not_ranked(classifier, make_record):
    classified = classifier.classify_ads([
        make_record(ad_id=1, spent="60", approved_conversions=0),
        make_record(ad_id=2, spent="NaN", approved_conversions=0),
    ])

    assert [ad.ad_id for ad in top_ads_by_spend(classified)] == [1]
    assert waste_share(classified) == Decimal("100")


def test_join_status_keeps_ads_apart_across_campaigns(classifier, make_record):
    records = [
        make_record(ad_id=1, campaign_id=916, spent="100", approved_conversions=5),
        make_record(ad_id=1, campaign_id=936, spent="60", approved_conversions=0),
    ]
    joined = join_status(records, classifier.classify_ads(records))

    assert [(item.record.campaign_id, item.status) for item in joined] == [
        (916, AdStatus.STAR),
        (936, AdStatus.ZOMBIE),
    ]
    assert joined[0].ad_cpa == Decimal("20")

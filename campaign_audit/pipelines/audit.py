"""Audit pipeline for ad campaign performance.

Runs every audit stage over records that are already loaded and validated:
1. Campaign summary and audience distributions
2. Interest analysis
3. Ad classification and star vs zombie segment comparison
4. Hypothesis tests

Loading from CSV happens in run_audit, outside the pipeline.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from campaign_audit.aggregation.aggregator import (
    ShareRow,
    campaign_summary,
    count_by,
    share_within,
)
from campaign_audit.analysis.segments import (
    CommonInterestMatrix,
    InterestShare,
    common_interests,
    interest_campaign_matrix,
    interest_shares,
    profile_counts,
    saturation_cells,
    top_interests_by_spend,
)
from campaign_audit.classification.classifier import (
    AdClassifier,
    StatusRecord,
    StatusSummary,
    join_status,
    summarize_by_status,
    top_ads_by_spend,
    waste_share,
)
from campaign_audit.domain.entities import (
    AdRecord,
    AdStatus,
    AggregateRow,
    ClassificationThresholds,
    ClassifiedAd,
    GroupComparisonResult,
    PairwiseProportionResult,
)
from campaign_audit.ingestion.loader import CsvRecordSource
from campaign_audit.pipelines.config import (
    AuditConfig,
    ReportConfig,
    StatisticsConfig,
    get_default_config,
    load_config,
)
from campaign_audit.significance.hypothesis_tests import age_conversion_test, cpa_group_test


@dataclass
class AuditResult:
    """All tables and statistics produced by one audit run."""
    n_records: int
    campaigns: list[AggregateRow]
    age_distribution: dict[tuple, int]
    age_share_by_campaign: list[ShareRow]
    gender_distribution: dict[tuple, int]
    gender_share_by_campaign: list[ShareRow]
    gender_share_by_campaign_age: list[ShareRow]
    interest_matrix: list[AggregateRow]
    top_interests: list[int]
    saturation: list[AggregateRow]
    classified_ads: list[ClassifiedAd]
    zombie_summary: list[StatusSummary]
    top_zombies: list[ClassifiedAd]
    top_zombie_waste_share: Decimal | None
    profiles: dict[tuple[AdStatus, str, str], int]
    star_interests: list[InterestShare]
    zombie_interests: list[InterestShare]
    common_interests: CommonInterestMatrix
    age_test: PairwiseProportionResult
    gender_cpa_test: GroupComparisonResult
    thresholds: ClassificationThresholds
    alpha: float

    def status_counts(self) -> dict[AdStatus, int]:
        counts = {status: 0 for status in AdStatus}
        for ad in self.classified_ads:
            counts[ad.status] += 1
        return counts

    @property
    def zombie_spend(self) -> Decimal:
        return sum((s.total_spent for s in self.zombie_summary), Decimal("0"))


@dataclass
class AuditPipeline:
    """Pipeline running every audit stage over an in-memory record set.

    Each stage consumes the output of the previous ones; nothing is written
    back to the records.
    """

    thresholds: ClassificationThresholds = field(default_factory=ClassificationThresholds)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    _classifier: AdClassifier | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._classifier = AdClassifier(self.thresholds)

    @classmethod
    def from_config(cls, config: AuditConfig) -> "AuditPipeline":
        return cls(
            thresholds=config.to_domain_thresholds(),
            statistics=config.statistics,
            report=config.report,
        )

    def classify(self, records: list[AdRecord]) -> list[ClassifiedAd]:
        """Run only the ad classification stage."""
        return self._classifier.classify_ads(records)

    def run_tests(self, records: list[AdRecord]) -> tuple[PairwiseProportionResult, GroupComparisonResult]:
        """Run only the hypothesis tests."""
        return (
            age_conversion_test(records),
            cpa_group_test(records, group_attr=self.statistics.cpa_group_attr),
        )

    def run(self, records: list[AdRecord]) -> AuditResult:
        """Execute the complete audit.

        Args:
            records: Validated input records

        Returns:
            AuditResult with every table and test result
        """
        records = list(records)

        # Step 1: Campaign summary and audience distributions
        campaigns = campaign_summary(records)
        age_by_campaign = count_by(records, ("campaign_id", "age_bracket"))
        gender_by_campaign = count_by(records, ("campaign_id", "gender"))
        gender_by_campaign_age = count_by(records, ("campaign_id", "age_bracket", "gender"))

        # Step 2: Interest analysis
        top_interests = top_interests_by_spend(records, self.report.top_interests)

        # Step 3: Classification and segment comparison
        classified = self.classify(records)
        joined: list[StatusRecord] = join_status(records, classified)

        # Step 4: Hypothesis tests
        age_test, gender_test = self.run_tests(records)

        return AuditResult(
            n_records=len(records),
            campaigns=campaigns,
            age_distribution=count_by(records, ("age_bracket",)),
            age_share_by_campaign=share_within(
                age_by_campaign, 1, ("campaign_id", "age_bracket")
            ),
            gender_distribution=count_by(records, ("gender",)),
            gender_share_by_campaign=share_within(
                gender_by_campaign, 1, ("campaign_id", "gender")
            ),
            gender_share_by_campaign_age=share_within(
                gender_by_campaign_age, 2, ("campaign_id", "age_bracket", "gender")
            ),
            interest_matrix=interest_campaign_matrix(records),
            top_interests=top_interests,
            saturation=saturation_cells(records, top_interests),
            classified_ads=classified,
            zombie_summary=summarize_by_status(classified, AdStatus.ZOMBIE),
            top_zombies=top_ads_by_spend(classified, AdStatus.ZOMBIE, self.report.top_zombies),
            top_zombie_waste_share=waste_share(classified, self.report.top_zombies),
            profiles=profile_counts(joined),
            star_interests=interest_shares(
                joined, AdStatus.STAR, "sales", self.report.top_cluster_interests
            ),
            zombie_interests=interest_shares(
                joined, AdStatus.ZOMBIE, "spent", self.report.top_cluster_interests
            ),
            common_interests=common_interests(joined),
            age_test=age_test,
            gender_cpa_test=gender_test,
            thresholds=self.thresholds,
            alpha=self.statistics.alpha,
        )


def run_audit(
    data_path: Path | None = None,
    config_path: Path | str | None = None,
) -> AuditResult:
    """Convenience function to load data and run the complete audit.

    Args:
        data_path: Path to the CSV file (overrides config if provided)
        config_path: Path to YAML configuration file

    Returns:
        AuditResult
    """
    config = load_config(config_path) if config_path is not None else get_default_config()
    source = CsvRecordSource(
        data_path if data_path is not None else config.paths.data_path,
        on_invalid=config.validation.on_invalid,
    )
    return AuditPipeline.from_config(config).run(source.load())


def run_audit_from_config(config_path: Path | str = "audit_config.yml") -> AuditResult:
    """Run the audit using configuration from a YAML file."""
    return run_audit(config_path=config_path)

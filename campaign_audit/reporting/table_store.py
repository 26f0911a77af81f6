"""CSV-based store for audit result tables.

Organizes tables in a flat directory:
    storage_path/
        table_name.csv
        metadata.json
"""

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any

import polars as pl

from campaign_audit.pipelines.audit import AuditResult
from campaign_audit.reporting import frames


@dataclass
class CsvTableStore:
    """Table store writing one CSV file per table."""

    storage_path: Path
    _metadata: dict[str, Any] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.storage_path = Path(self.storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def save_table(self, table: pl.DataFrame, name: str) -> Path:
        """Write a table and record its shape in the metadata.

        Args:
            table: DataFrame to write
            name: Identifier of the table, used as file stem

        Returns:
            Path to the written CSV file
        """
        path = self.storage_path / f"{name}.csv"
        table.write_csv(path)
        self._metadata.setdefault("tables", {})[name] = {
            "n_rows": len(table),
            "columns": table.columns,
        }
        self._write_metadata()
        return path

    def load_table(self, name: str) -> pl.DataFrame:
        """Read a previously saved table.

        Raises:
            FileNotFoundError: If the table doesn't exist
        """
        path = self.storage_path / f"{name}.csv"
        if not path.exists():
            raise FileNotFoundError(f"Table '{name}' not found at {path}")
        return pl.read_csv(path)

    def list_tables(self) -> list[str]:
        return sorted(p.stem for p in self.storage_path.glob("*.csv"))

    def save_result(self, result: AuditResult) -> list[Path]:
        """Write every table of an audit result."""
        self._metadata["run"] = {
            "n_records": result.n_records,
            "zombie_spend_threshold": str(result.thresholds.zombie_spend),
            "target_cpa": str(result.thresholds.target_cpa),
            "alpha": result.alpha,
            "age_test": {
                "groups": list(result.age_test.groups),
                "excluded": list(result.age_test.excluded),
                "n_comparisons": result.age_test.n_comparisons,
            },
            "gender_cpa_test": {
                "test": result.gender_cpa_test.test_name,
                "statistic": result.gender_cpa_test.statistic,
                "p_value": result.gender_cpa_test.p_value,
            },
        }

        profiles = {
            (status.value, age, gender): total
            for (status, age, gender), total in result.profiles.items()
        }
        tables = {
            "campaign_summary": frames.aggregate_frame(result.campaigns),
            "age_distribution": frames.counts_frame(result.age_distribution, ("age_bracket",)),
            "gender_distribution": frames.counts_frame(result.gender_distribution, ("gender",)),
            "age_share_by_campaign": frames.share_frame(result.age_share_by_campaign),
            "gender_share_by_campaign": frames.share_frame(result.gender_share_by_campaign),
            "gender_share_by_campaign_age": frames.share_frame(result.gender_share_by_campaign_age),
            "interest_matrix": frames.aggregate_frame(result.interest_matrix),
            "saturation": frames.aggregate_frame(result.saturation),
            "ad_classification": frames.classified_frame(result.classified_ads),
            "zombie_summary": frames.status_summary_frame(result.zombie_summary),
            "top_zombies": frames.classified_frame(result.top_zombies),
            "star_zombie_profiles": frames.counts_frame(profiles, ("status", "age_bracket", "gender")),
            "star_interests": frames.interest_share_frame(result.star_interests),
            "zombie_interests": frames.interest_share_frame(result.zombie_interests),
            "common_interests": frames.common_interest_frame(result.common_interests),
            "age_pairwise_test": frames.pairwise_frame(result.age_test),
            "gender_cpa_groups": frames.group_comparison_frame(result.gender_cpa_test),
        }
        return [self.save_table(table, name) for name, table in tables.items()]

    def _write_metadata(self) -> None:
        with open(self.storage_path / "metadata.json", "w") as f:
            json.dump(self._metadata, f, indent=2)

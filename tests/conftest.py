"""Shared fixtures for the campaign audit tests."""

from decimal import Decimal
from pathlib import Path

import pytest

from campaign_audit.domain.entities import AdRecord


KAGGLE_HEADER = (
    "ad_id,xyz_campaign_id,fb_campaign_id,age,gender,interest,"
    "Impressions,Clicks,Spent,Total_Conversion,Approved_Conversion"
)


def build_record(
    ad_id: int = 1,
    campaign_id: int = 916,
    age_bracket: str = "30-34",
    gender: str = "M",
    interest_code: int = 15,
    impressions: int = 1000,
    clicks: int = 10,
    spent: str | int | Decimal = "10",
    total_conversions: int = 1,
    approved_conversions: int = 0,
    platform_campaign_id: int | None = None,
) -> AdRecord:
    return AdRecord(
        ad_id=ad_id,
        campaign_id=campaign_id,
        platform_campaign_id=platform_campaign_id if platform_campaign_id is not None else 100000 + ad_id,
        age_bracket=age_bracket,
        gender=gender,
        interest_code=interest_code,
        impressions=impressions,
        clicks=clicks,
        spent=Decimal(str(spent)),
        total_conversions=total_conversions,
        approved_conversions=approved_conversions,
    )


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def sample_records() -> list[AdRecord]:
    """Nine ads over three campaigns covering every status."""
    return [
        build_record(1, 916, "30-34", "M", 15, 7350, 1, "1.43", 2, 1),           # Star, CPA 1.43
        build_record(2, 916, "30-34", "F", 16, 17861, 2, "1.82", 2, 0),          # InTest
        build_record(3, 936, "35-39", "M", 15, 60000, 20, "60.00", 1, 0),        # Zombie
        build_record(4, 936, "40-44", "F", 16, 90000, 30, "120.00", 2, 0),       # Zombie
        build_record(5, 1178, "30-34", "M", 10, 500000, 100, "150.00", 8, 5),    # Star, CPA 30
        build_record(6, 1178, "45-49", "F", 10, 400000, 80, "200.00", 5, 4),     # Expensive, CPA 50
        build_record(7, 1178, "40-44", "M", 29, 300000, 70, "120.00", 3, 3),     # Expensive, CPA 40
        build_record(8, 1178, "45-49", "F", 29, 250000, 60, "80.50", 1, 0),      # Zombie
        build_record(9, 1178, "35-39", "F", 15, 100000, 25, "45.00", 3, 2),      # Star, CPA 22.5
    ]


def record_to_csv_line(record: AdRecord) -> str:
    return ",".join(str(v) for v in (
        record.ad_id,
        record.campaign_id,
        record.platform_campaign_id,
        record.age_bracket,
        record.gender,
        record.interest_code,
        record.impressions,
        record.clicks,
        record.spent,
        record.total_conversions,
        record.approved_conversions,
    ))


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write records (or raw lines) to a CSV file in the export's format."""
    def _write(rows, name: str = "ads.csv", header: str = KAGGLE_HEADER) -> Path:
        lines = [header]
        for row in rows:
            lines.append(row if isinstance(row, str) else record_to_csv_line(row))
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write


@pytest.fixture
def sample_csv(write_csv, sample_records) -> Path:
    return write_csv(sample_records)

"""Main entry point for the campaign audit.

Provides CLI interface for running the full audit, the ad classification or
the hypothesis tests alone.

Usage:
    # Full audit with config file
    python -m campaign_audit.main audit --config audit_config.yml

    # Full audit with explicit data path, exporting result tables
    python -m campaign_audit.main audit --data data/KAG_conversion_data.csv --output-dir artifacts

    # Classification with custom thresholds
    python -m campaign_audit.main classify --config audit_config.yml --zombie-spend 75 --target-cpa 35

    # Hypothesis tests
    python -m campaign_audit.main stats --config audit_config.yml --alpha 0.01
"""

import argparse
import logging
from pathlib import Path
import sys

import pydantic

from campaign_audit.classification.classifier import filter_status
from campaign_audit.domain.entities import AdRecord, AdStatus
from campaign_audit.domain.errors import InsufficientDataError, SchemaError, ValidationError
from campaign_audit.ingestion.loader import CsvRecordSource
from campaign_audit.pipelines.audit import AuditPipeline
from campaign_audit.pipelines.config import AuditConfig, get_default_config, load_config
from campaign_audit.reporting.table_store import CsvTableStore
from campaign_audit.reporting.text_report import (
    format_age_test,
    format_classification,
    format_group_test,
    generate_report,
)


def _load_audit_config(args: argparse.Namespace) -> AuditConfig:
    """Load config from file or defaults and apply CLI overrides."""
    config = load_config(args.config) if args.config else get_default_config()
    data = config.model_dump()

    if args.data:
        data["paths"]["data_path"] = Path(args.data)
    if getattr(args, "output_dir", None):
        data["paths"]["output_dir"] = Path(args.output_dir)
    if args.zombie_spend is not None:
        data["classification"]["zombie_spend_threshold"] = args.zombie_spend
    if args.target_cpa is not None:
        data["classification"]["target_cpa"] = args.target_cpa
    if args.alpha is not None:
        data["statistics"]["alpha"] = args.alpha
    if args.skip_invalid:
        data["validation"]["on_invalid"] = "skip"

    return AuditConfig.model_validate(data)


def _load_records(config: AuditConfig) -> list[AdRecord]:
    print(f"Loading data from {config.paths.data_path}")
    source = CsvRecordSource(config.paths.data_path, on_invalid=config.validation.on_invalid)
    records = source.load()
    print(f"Records: {len(records):,}")
    return records


def audit(args: argparse.Namespace) -> None:
    """Run the full audit and optionally export result tables."""
    config = _load_audit_config(args)
    records = _load_records(config)

    result = AuditPipeline.from_config(config).run(records)
    print(generate_report(result))

    if args.output_dir:
        store = CsvTableStore(config.paths.output_dir)
        paths = store.save_result(result)
        print(f"\n{len(paths)} tables saved to: {config.paths.output_dir}")


def classify(args: argparse.Namespace) -> None:
    """Classify ads and print the classification table."""
    config = _load_audit_config(args)
    records = _load_records(config)

    classified = AuditPipeline.from_config(config).classify(records)
    if args.status:
        classified = filter_status(classified, AdStatus(args.status))

    print("\n" + "=" * 70)
    print("AD CLASSIFICATION")
    print("=" * 70)
    print(format_classification(classified))
    print(f"\nAds: {len(classified)}")


def stats(args: argparse.Namespace) -> None:
    """Run the hypothesis tests and print their results."""
    config = _load_audit_config(args)
    records = _load_records(config)

    age_test, group_test = AuditPipeline.from_config(config).run_tests(records)
    alpha = config.statistics.alpha

    print("\n" + "=" * 70)
    print("CONVERSION RATE BY AGE")
    print("=" * 70)
    print(format_age_test(age_test, alpha))
    print("\n" + "=" * 70)
    print(f"CPA BY {config.statistics.cpa_group_attr.upper()}")
    print("=" * 70)
    print(format_group_test(group_test, alpha))


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=str, help="Path to YAML config file")
    parser.add_argument("--data", type=str, help="Path to CSV data file (overrides config)")
    parser.add_argument("--zombie-spend", type=str, help="Zombie spend threshold (overrides config)")
    parser.add_argument("--target-cpa", type=str, help="Target CPA splitting stars from expensive ads (overrides config)")
    parser.add_argument("--alpha", type=float, help="Significance level (overrides config)")
    parser.add_argument("--skip-invalid", action="store_true", help="Skip invalid records instead of aborting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ad Campaign Audit")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Audit subcommand
    audit_parser = subparsers.add_parser("audit", help="Run the full audit")
    _add_common_arguments(audit_parser)
    audit_parser.add_argument("--output-dir", type=str, help="Directory to export result tables (overrides config)")

    # Classification subcommand
    classify_parser = subparsers.add_parser("classify", help="Classify ads by cost efficiency")
    _add_common_arguments(classify_parser)
    classify_parser.add_argument(
        "--status",
        choices=[status.value for status in AdStatus],
        help="Only list ads with this status",
    )

    # Statistics subcommand
    stats_parser = subparsers.add_parser("stats", help="Run hypothesis tests")
    _add_common_arguments(stats_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"audit": audit, "classify": classify, "stats": stats}
    try:
        commands[args.command](args)
    except (SchemaError, ValidationError, InsufficientDataError, FileNotFoundError, pydantic.ValidationError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

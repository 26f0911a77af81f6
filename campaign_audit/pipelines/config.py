"""Configuration loader for the campaign audit pipeline.

Provides typed configuration loading from YAML files with
sensible defaults and validation using Pydantic.
"""

from decimal import Decimal
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from campaign_audit.domain.entities import ClassificationThresholds


class PathsConfig(BaseModel):
    """Configuration for file system paths."""

    model_config = {"frozen": True}

    data_path: Path = Field(default=Path("data/KAG_conversion_data.csv"))
    output_dir: Path = Field(default=Path("artifacts"))


class ClassificationConfig(BaseModel):
    """Thresholds for ad classification."""

    model_config = {"frozen": True}

    zombie_spend_threshold: Decimal = Field(default=Decimal("50"), ge=0)
    target_cpa: Decimal = Field(default=Decimal("40"), gt=0)


class ValidationConfig(BaseModel):
    """How invalid input records are handled."""

    model_config = {"frozen": True}

    on_invalid: Literal["raise", "skip"] = Field(default="raise")


class StatisticsConfig(BaseModel):
    """Configuration for hypothesis tests."""

    model_config = {"frozen": True}

    alpha: float = Field(default=0.05, gt=0, lt=1)
    cpa_group_attr: Literal["gender", "age_bracket"] = Field(default="gender")


class ReportConfig(BaseModel):
    """Sizes of the top-N tables in the report."""

    model_config = {"frozen": True}

    top_interests: int = Field(default=5, ge=1)
    top_zombies: int = Field(default=10, ge=1)
    top_cluster_interests: int = Field(default=10, ge=1)


class AuditConfig(BaseModel):
    """Complete audit configuration."""

    model_config = {"frozen": True}

    paths: PathsConfig = Field(default_factory=PathsConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    statistics: StatisticsConfig = Field(default_factory=StatisticsConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    def with_base_path(self, base_path: Path) -> "AuditConfig":
        """Return a new config with paths resolved against base_path."""
        def resolve(p: Path) -> Path:
            if not p.is_absolute():
                return base_path / p
            return p

        resolved_paths = PathsConfig(
            data_path=resolve(self.paths.data_path),
            output_dir=resolve(self.paths.output_dir),
        )
        return self.model_copy(update={"paths": resolved_paths})

    def to_domain_thresholds(self) -> ClassificationThresholds:
        """Convert to domain ClassificationThresholds entity."""
        return ClassificationThresholds(
            zombie_spend=self.classification.zombie_spend_threshold,
            target_cpa=self.classification.target_cpa,
        )


def load_config(config_path: Path | str, base_path: Path | None = None) -> AuditConfig:
    """Load audit configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file
        base_path: Optional base path for resolving relative paths.
                   Defaults to the parent directory of the config file.

    Returns:
        AuditConfig with all settings loaded

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if base_path is None:
        base_path = config_path.parent

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    config = AuditConfig.model_validate(data)
    return config.with_base_path(base_path)


def get_default_config(base_path: Path | None = None) -> AuditConfig:
    """Get default configuration without loading from file."""
    config = AuditConfig()
    if base_path:
        return config.with_base_path(base_path)
    return config

"""Pipeline implementations for the campaign audit."""

from .config import (
    AuditConfig,
    PathsConfig,
    ClassificationConfig,
    ValidationConfig,
    StatisticsConfig,
    ReportConfig,
    load_config,
    get_default_config,
)
from .audit import (
    AuditPipeline,
    AuditResult,
    run_audit,
    run_audit_from_config,
)

__all__ = [
    # Config
    "AuditConfig",
    "PathsConfig",
    "ClassificationConfig",
    "ValidationConfig",
    "StatisticsConfig",
    "ReportConfig",
    "load_config",
    "get_default_config",
    # Audit
    "AuditPipeline",
    "AuditResult",
    "run_audit",
    "run_audit_from_config",
]

# paramigrate migration core - atomic wallet-provider migration
# Scan -> Plan (strategy) -> Execute (with rollback) -> Validate

from .analysis import analyze_project, check_compatibility, check_project_compatibility
from .engine import MigrationEngine, ProjectScanner
from .models import (
    EngineState,
    MigrationPlan,
    MigrationResult,
    ProjectState,
    ReplacementOperation,
    ValidationIssue,
    ValidationResult,
)
from .strategies import StrategyRegistry, detect_strategy
from .validator import AtomicValidator

__all__ = [
    "AtomicValidator",
    "EngineState",
    "MigrationEngine",
    "MigrationPlan",
    "MigrationResult",
    "ProjectScanner",
    "ProjectState",
    "ReplacementOperation",
    "StrategyRegistry",
    "ValidationIssue",
    "ValidationResult",
    "analyze_project",
    "check_compatibility",
    "check_project_compatibility",
    "detect_strategy",
]

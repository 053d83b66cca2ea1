"""Data contracts for the migration core.

Every structured type passed between the scanner, strategies, validator
and engine.  Kept as dataclasses for transport between layers; snapshot
records are frozen, their sequences are tuples and their mappings are
read-only proxies.
"""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ..constants import TARGET_SCOPES


class ProviderTag(str, Enum):
    """Which wallet integration an import statement belongs to."""
    PRIVY = "privy"
    REOWN = "reown"
    WEB3MODAL = "web3modal"
    WAGMI = "wagmi"
    PARA = "para"
    OTHER = "other"


# Tags of the providers we migrate away from
SOURCE_PROVIDER_TAGS = frozenset({ProviderTag.PRIVY, ProviderTag.REOWN, ProviderTag.WEB3MODAL})


class OperationKind(str, Enum):
    DEPENDENCY = "dependency"
    IMPORT = "import"
    PROVIDER = "provider"
    HOOK = "hook"
    STYLE = "style"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ValidationPhase(str, Enum):
    PRE = "pre"
    POST = "post"
    COMPLETION = "completion"


class EngineState(str, Enum):
    """Lifecycle of one MigrationEngine instance."""
    IDLE = "idle"
    SCANNED = "scanned"
    PLANNED = "planned"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


def freeze_value(value: Any) -> Any:
    """Read-only copy of a props value: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_value(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_value(item) for item in value)
    return value


def thaw_value(value: Any) -> Any:
    """Plain JSON-shaped copy of a value produced by :func:`freeze_value`."""
    if isinstance(value, Mapping):
        return {key: thaw_value(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw_value(item) for item in value]
    return value


# ── Project snapshot records ────────────────────────────────────────────


@dataclass(frozen=True)
class DependencyEntry:
    """One ``package.json`` dependency, as edited by an operation."""
    name: str
    version: str


@dataclass(frozen=True)
class FileImport:
    """An import statement found by the scanner."""
    file: str
    line: int
    imported_symbols: Tuple[str, ...]
    source_module: str
    provider_tag: ProviderTag = ProviderTag.OTHER

    def __post_init__(self):
        object.__setattr__(self, "imported_symbols", tuple(self.imported_symbols))
        object.__setattr__(self, "provider_tag", ProviderTag(self.provider_tag))

    def statement(self) -> str:
        """Render the import as a single ES module import line."""
        return f"import {{ {', '.join(self.imported_symbols)} }} from '{self.source_module}'"


@dataclass(frozen=True)
class ProviderUsage:
    """A wallet provider component (or factory call) rendered in a file."""
    file: str
    line: int
    provider_name: str
    props: Mapping[str, Any] = field(default_factory=dict)
    active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "props", freeze_value(self.props))

    def __hash__(self):
        return hash((self.file, self.line, self.provider_name, self.active))


@dataclass(frozen=True)
class HookUsage:
    file: str
    line: int
    hook_name: str
    source_module: str
    raw_usage_text: str


@dataclass(frozen=True)
class StyleImport:
    file: str
    line: int
    imported_path: str
    is_target_style: bool = False


Record = Union[DependencyEntry, FileImport, ProviderUsage, HookUsage, StyleImport]


@dataclass(frozen=True)
class ProjectState:
    """Snapshot of a project's wallet-integration surface.

    Produced fresh by every scan.  ``file``/``line`` pairs are opaque
    identifiers supplied by the scanner; nothing in the core re-reads
    file contents.
    """
    dependencies: Mapping[str, str] = field(default_factory=dict)
    imports: Tuple[FileImport, ...] = ()
    providers: Tuple[ProviderUsage, ...] = ()
    hooks: Tuple[HookUsage, ...] = ()
    styles: Tuple[StyleImport, ...] = ()
    entry_points: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "dependencies", MappingProxyType(dict(self.dependencies)))
        object.__setattr__(self, "imports", tuple(self.imports))
        object.__setattr__(self, "providers", tuple(self.providers))
        object.__setattr__(self, "hooks", tuple(self.hooks))
        object.__setattr__(self, "styles", tuple(self.styles))
        object.__setattr__(self, "entry_points", frozenset(self.entry_points))

    def __hash__(self):
        return hash((
            frozenset(self.dependencies.items()),
            self.imports,
            self.providers,
            self.hooks,
            self.styles,
            self.entry_points,
        ))

    @classmethod
    def empty(cls) -> "ProjectState":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencies": dict(self.dependencies),
            "imports": [_record_dict(i) for i in self.imports],
            "providers": [_record_dict(p) for p in self.providers],
            "hooks": [_record_dict(h) for h in self.hooks],
            "styles": [_record_dict(s) for s in self.styles],
            "entry_points": sorted(self.entry_points),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectState":
        """Build a state from the JSON shape produced by :meth:`to_dict`."""
        return cls(
            dependencies=data.get("dependencies") or {},
            imports=[FileImport(**i) for i in data.get("imports") or []],
            providers=[ProviderUsage(**p) for p in data.get("providers") or []],
            hooks=[HookUsage(**h) for h in data.get("hooks") or []],
            styles=[StyleImport(**s) for s in data.get("styles") or []],
            entry_points=data.get("entry_points") or [],
        )


def _record_dict(record: Record) -> Dict[str, Any]:
    if isinstance(record, ProviderUsage):
        return {
            "file": record.file,
            "line": record.line,
            "provider_name": record.provider_name,
            "props": thaw_value(record.props),
            "active": record.active,
        }
    data = asdict(record)
    if isinstance(record, FileImport):
        data["imported_symbols"] = list(record.imported_symbols)
        data["provider_tag"] = record.provider_tag.value
    return data


# ── Plan ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReplacementOperation:
    """One atomic edit in a migration plan.

    ``old_value``/``new_value`` are the source text handed to code
    generation.  ``before``/``after`` are the snapshot records the edit
    removes and adds, which is what appliers act on.
    """
    id: str
    kind: OperationKind
    old_value: str
    new_value: str
    critical: bool
    file: Optional[str] = None
    line: Optional[int] = None
    before: Tuple[Record, ...] = ()
    after: Tuple[Record, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "kind", OperationKind(self.kind))
        object.__setattr__(self, "before", tuple(self.before))
        object.__setattr__(self, "after", tuple(self.after))

    def inverse(self) -> "ReplacementOperation":
        """Return the operation that undoes this one."""
        return replace(
            self,
            id=f"rollback-{self.id}",
            old_value=self.new_value,
            new_value=self.old_value,
            before=self.after,
            after=self.before,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "file": self.file,
            "line": self.line,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "critical": self.critical,
        }


@dataclass(frozen=True)
class RollbackAction:
    """Inverse of one forward operation, paired at plan-build time."""
    operation_id: str
    inverse: ReplacementOperation


@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    code: str
    message: str
    remediation: str
    file: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": Severity(self.severity).value,
            "code": self.code,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "remediation": self.remediation,
        }


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    issues: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "issues", tuple(self.issues))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @classmethod
    def ok(cls, warnings: Iterable[str] = ()) -> "ValidationResult":
        return cls(valid=True, warnings=tuple(warnings))

    @classmethod
    def failed(cls, *issues: ValidationIssue, warnings: Iterable[str] = ()) -> "ValidationResult":
        return cls(valid=False, issues=issues, warnings=tuple(warnings))

    @classmethod
    def merge(cls, results: Iterable["ValidationResult"]) -> "ValidationResult":
        """Combine check results: AND of validity, failing issues, all warnings."""
        valid = True
        issues: List[ValidationIssue] = []
        warnings: List[str] = []
        for result in results:
            if not result.valid:
                valid = False
                issues.extend(result.issues)
            warnings.extend(result.warnings)
        return cls(valid=valid, issues=tuple(issues), warnings=tuple(warnings))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": [i.to_dict() for i in self.issues],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ValidationCheck:
    """A named check the engine runs before or after applying a plan."""
    check_id: str
    phase: ValidationPhase
    description: str
    run: Callable[[ProjectState], ValidationResult] = field(compare=False, repr=False)


@dataclass(frozen=True)
class MigrationPlan:
    """Everything needed to execute one migration attempt.

    ``rollback_plan`` is stored in forward order, one action per
    operation; the engine walks it backwards.
    """
    strategy_name: str
    operations: Tuple[ReplacementOperation, ...]
    pre_validations: Tuple[ValidationCheck, ...]
    post_validations: Tuple[ValidationCheck, ...]
    rollback_plan: Tuple[RollbackAction, ...]
    estimated_duration_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy_name": self.strategy_name,
            "operations": [op.to_dict() for op in self.operations],
            "pre_validations": [c.check_id for c in self.pre_validations],
            "post_validations": [c.check_id for c in self.post_validations],
            "rollback_plan": [a.inverse.id for a in reversed(self.rollback_plan)],
            "estimated_duration_seconds": self.estimated_duration_seconds,
        }


@dataclass(frozen=True)
class MigrationResult:
    """Terminal outcome of one ``execute_atomic_migration`` call."""
    success: bool
    completed_operation_ids: Tuple[str, ...]
    failed_operation_ids: Tuple[str, ...]
    validation_results: Tuple[ValidationResult, ...]
    rollback_executed: bool
    duration_ms: int
    issues: Tuple[ValidationIssue, ...]
    final_state: Optional[ProjectState] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "completed_operation_ids": list(self.completed_operation_ids),
            "failed_operation_ids": list(self.failed_operation_ids),
            "validation_results": [v.to_dict() for v in self.validation_results],
            "rollback_executed": self.rollback_executed,
            "duration_ms": self.duration_ms,
            "issues": [i.to_dict() for i in self.issues],
        }


def is_target_module(module: str, package: str) -> bool:
    """True when *module* (a package or import path) belongs to the target SDK."""
    return (
        module == package
        or module.startswith(package + "/")
        or module.startswith(TARGET_SCOPES)
    )

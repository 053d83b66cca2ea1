"""Migration Engine -- scan → plan → execute → validate, with rollback.

State machine (one in-flight attempt per engine instance)::

    IDLE → SCANNED → PLANNED → EXECUTING → SUCCEEDED
                                         → ROLLED_BACK
                                         → FAILED

* ``scan_project_state`` asks the scanner collaborator for a fresh
  ProjectState, discarding any previous state and plan.
* ``create_replacement_plan`` asks a registered strategy for operations
  and pairs each with its inverse.
* ``execute_atomic_migration`` runs pre-flight checks, applies operations
  in order, runs post-migration checks, and on any critical failure walks
  the rollback plan backwards over the operations that completed.

Out-of-order calls raise :class:`PreconditionError`; everything that goes
wrong during execution is reported as data on the MigrationResult.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Protocol, Sequence, Set

from ..config import Settings, get_settings
from ..constants import CODE_OPERATION_FAILED, CODE_ROLLBACK_FAILED
from ..errors import PreconditionError, ScanError
from .applier import OperationApplier, ProjectStateApplier
from .models import (
    EngineState,
    MigrationPlan,
    MigrationResult,
    ProjectState,
    ReplacementOperation,
    RollbackAction,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from .strategies import StrategyRegistry
from .validator import AtomicValidator

logger = logging.getLogger(__name__)


class ProjectScanner(Protocol):
    """Collaborator that turns a project root into a ProjectState."""

    def scan(self, root: str) -> ProjectState:
        """Return the project's state or raise :class:`ScanError`."""
        ...


ApplierFactory = Callable[[ProjectState], OperationApplier]


class MigrationEngine:
    """Orchestrate one atomic wallet-provider migration.

    Args:
        scanner: ProjectScanner collaborator (default: FileSystemScanner)
        settings: Settings instance (default: loaded from config)
        applier_factory: Builds the OperationApplier for an execution
            from the scanned state (default: ProjectStateApplier)
        validator: AtomicValidator (default: built from settings)
    """

    def __init__(
        self,
        scanner: Optional[ProjectScanner] = None,
        settings: Optional[Settings] = None,
        applier_factory: Optional[ApplierFactory] = None,
        validator: Optional[AtomicValidator] = None,
    ):
        self._settings = settings or get_settings()
        if scanner is None:
            from ..scanner import FileSystemScanner
            scanner = FileSystemScanner(self._settings.target)
        self._scanner = scanner
        self._applier_factory = applier_factory or ProjectStateApplier
        self._validator = validator or AtomicValidator(self._settings.target)

        self._state: Optional[ProjectState] = None
        self._plan: Optional[MigrationPlan] = None
        self._status = EngineState.IDLE
        self._in_flight: Optional[str] = None

    # ── Introspection ──────────────────────────────────────────────────

    @property
    def status(self) -> EngineState:
        return self._status

    @property
    def state(self) -> Optional[ProjectState]:
        return self._state

    @property
    def plan(self) -> Optional[MigrationPlan]:
        return self._plan

    @property
    def validator(self) -> AtomicValidator:
        return self._validator

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        """Reject a call that would interleave with one still in flight."""
        if self._in_flight is not None:
            raise PreconditionError(
                f"Cannot {operation} while {self._in_flight} is in progress"
            )
        self._in_flight = operation
        try:
            yield
        finally:
            self._in_flight = None

    def _require_state(self) -> ProjectState:
        if self._state is None:
            raise PreconditionError("Must scan project state first")
        return self._state

    # ── Phase 1: Scan ──────────────────────────────────────────────────

    def scan_project_state(self, project_root: str) -> ProjectState:
        """Scan *project_root* and make the result the engine's current state.

        Raises:
            ScanError: If the scanner cannot produce a state.
        """
        with self._exclusive("scan the project"):
            try:
                state = self._scanner.scan(project_root)
            except ScanError:
                logger.error(f"Scan failed for {project_root}")
                raise
            except OSError as e:
                logger.error(f"Scan failed for {project_root}: {e}")
                raise ScanError(project_root, str(e)) from e

            self._adopt(state)
            logger.info(
                f"Scanned {project_root}: {len(state.dependencies)} dependencies, "
                f"{len(state.imports)} imports, {len(state.providers)} providers, "
                f"{len(state.entry_points)} entry points"
            )
            return state

    def load_project_state(self, state: ProjectState) -> ProjectState:
        """Adopt an already-built state, exactly as a scan would."""
        with self._exclusive("load a project state"):
            self._adopt(state)
            return state

    def _adopt(self, state: ProjectState) -> None:
        self._state = state
        self._plan = None
        self._status = EngineState.SCANNED

    def detect_strategy(self, priority: Optional[Sequence[str]] = None) -> Optional[str]:
        """Detect the strategy for the current state, honouring configured priority."""
        state = self._require_state()
        return StrategyRegistry.detect_strategy(
            state, priority or self._settings.strategy_priority
        )

    # ── Phase 2: Plan ──────────────────────────────────────────────────

    def create_replacement_plan(self, strategy_name: str) -> MigrationPlan:
        """Build the atomic replacement plan for *strategy_name*.

        Raises:
            PreconditionError: If nothing was scanned, the strategy is
                unknown, or the scanned state holds nothing it migrates.
        """
        with self._exclusive("create a replacement plan"):
            state = self._require_state()
            strategy = StrategyRegistry.create(strategy_name, self._settings.target)
            if not strategy.validate(state):
                raise PreconditionError(
                    f"Strategy {strategy_name} does not apply: no "
                    f"{'/'.join(strategy.fingerprints)} dependencies or imports found"
                )

            operations = tuple(strategy.execute(state))
            plan = MigrationPlan(
                strategy_name=strategy_name,
                operations=operations,
                pre_validations=self._validator.pre_flight_checks(),
                post_validations=self._validator.post_migration_checks(),
                rollback_plan=tuple(
                    RollbackAction(operation_id=op.id, inverse=op.inverse())
                    for op in operations
                ),
                estimated_duration_seconds=strategy.get_estimated_duration_seconds(),
            )
            self._plan = plan
            self._status = EngineState.PLANNED

            critical = sum(1 for op in operations if op.critical)
            logger.info(
                f"Created {strategy_name} plan: {len(operations)} operations "
                f"({critical} critical), ~{plan.estimated_duration_seconds}s"
            )
            return plan

    # ── Phase 3: Execute ───────────────────────────────────────────────

    def execute_atomic_migration(self) -> MigrationResult:
        """Execute the current plan; roll back on any critical failure.

        The plan is consumed: a second execution needs a new plan.
        """
        with self._exclusive("execute a migration"):
            if self._plan is None or self._status != EngineState.PLANNED:
                raise PreconditionError("Must create replacement plan first")
            plan, state = self._plan, self._require_state()
            self._plan = None
            self._status = EngineState.EXECUTING

            try:
                start = time.monotonic()
                completed: List[str] = []
                failed: List[str] = []
                validations: List[ValidationResult] = []
                issues: List[ValidationIssue] = []
                rollback_executed = False
                final_state = state

                pre = self._validator.run_checks(plan.pre_validations, state)
                validations.append(pre)
                if not pre.valid:
                    issues.extend(pre.issues)
                    outcome = EngineState.FAILED
                    logger.warning(
                        f"Pre-flight validation failed: {[i.code for i in pre.issues]}"
                    )
                else:
                    applier = self._applier_factory(state)
                    aborted = self._apply_operations(plan, applier, completed, failed, issues)

                    if not aborted:
                        migrated = applier.current_state()
                        post = self._validator.run_checks(plan.post_validations, migrated)
                        validations.append(post)
                        if post.valid:
                            final_state = migrated
                        else:
                            issues.extend(post.issues)
                            aborted = True
                            logger.warning(
                                f"Post-migration validation failed: {[i.code for i in post.issues]}"
                            )

                    if aborted:
                        issues.extend(self._execute_rollback(plan, applier, completed))
                        rollback_executed = True
                        final_state = applier.current_state()
                        outcome = EngineState.ROLLED_BACK
                    else:
                        outcome = EngineState.SUCCEEDED
                        self._state = final_state

                self._status = outcome
                result = MigrationResult(
                    success=outcome == EngineState.SUCCEEDED,
                    completed_operation_ids=tuple(completed),
                    failed_operation_ids=tuple(failed),
                    validation_results=tuple(validations),
                    rollback_executed=rollback_executed,
                    duration_ms=int((time.monotonic() - start) * 1000),
                    issues=tuple(issues),
                    final_state=final_state,
                )
                logger.info(
                    f"Migration {plan.strategy_name} finished: {outcome.value} "
                    f"({len(completed)}/{len(plan.operations)} operations, "
                    f"{len(failed)} failed, {result.duration_ms}ms)"
                )
                return result
            except Exception:
                # The plan is already consumed; the engine ends FAILED
                self._status = EngineState.FAILED
                logger.exception(f"Migration {plan.strategy_name} aborted")
                raise

    def _apply_operations(
        self,
        plan: MigrationPlan,
        applier: OperationApplier,
        completed: List[str],
        failed: List[str],
        issues: List[ValidationIssue],
    ) -> bool:
        """Apply operations in order.  Returns True if a critical one failed."""
        for operation in plan.operations:
            try:
                applier.apply(operation)
            except Exception as e:
                failed.append(operation.id)
                issues.append(_operation_failed(operation, e))
                if operation.critical:
                    logger.error(f"Critical operation {operation.id} failed: {e}")
                    return True
                logger.warning(f"Non-critical operation {operation.id} failed: {e}")
                continue
            completed.append(operation.id)
        return False

    def _execute_rollback(
        self,
        plan: MigrationPlan,
        applier: OperationApplier,
        completed: Sequence[str],
    ) -> List[ValidationIssue]:
        """Undo completed operations, last first.  Best effort: never stops early."""
        done: Set[str] = set(completed)
        issues: List[ValidationIssue] = []
        for action in reversed(plan.rollback_plan):
            if action.operation_id not in done:
                continue
            try:
                applier.apply(action.inverse)
                logger.info(f"Rolled back {action.operation_id}")
            except Exception as e:
                logger.error(f"Rollback of {action.operation_id} failed: {e}")
                issues.append(ValidationIssue(
                    severity=Severity.CRITICAL,
                    code=CODE_ROLLBACK_FAILED,
                    message=f"Rollback of {action.operation_id} failed: {e}",
                    remediation="Manual intervention required",
                    file=action.inverse.file,
                    line=action.inverse.line,
                ))
        return issues

    # ── Phase 4: Validate ──────────────────────────────────────────────

    def validate_pre_flight(self) -> ValidationResult:
        return self._validator.validate_pre_flight(self._require_state())

    def validate_post_migration(self) -> ValidationResult:
        return self._validator.validate_post_migration(self._require_state())

    def validate_completion(self) -> ValidationResult:
        """Run the completion battery on the current state.  Read-only."""
        return self._validator.validate_completion(self._require_state())

    def calculate_migration_success(self, state: Optional[ProjectState] = None) -> int:
        if state is None:
            state = self._require_state()
        return self._validator.calculate_migration_success(state)


def _operation_failed(operation: ReplacementOperation, error: Exception) -> ValidationIssue:
    if operation.critical:
        severity, remediation = Severity.CRITICAL, (
            f"Fix the {operation.kind.value} edit by hand and re-run the migration"
        )
    else:
        severity, remediation = Severity.WARNING, (
            f"Update this {operation.kind.value} manually; the rest of the migration was kept"
        )
    return ValidationIssue(
        severity=severity,
        code=CODE_OPERATION_FAILED,
        message=f"Operation {operation.id} failed: {error}",
        remediation=remediation,
        file=operation.file,
        line=operation.line,
    )

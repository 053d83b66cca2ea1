"""Unit tests for MigrationEngine -- state machine, execution and rollback.

Tests cover:
- Scan / plan / execute preconditions
- Successful Privy migration end to end (in-memory applier)
- Critical failure → LIFO rollback of completed operations only
- Non-critical failure → recorded, migration continues
- Post-migration validation failure → rollback
- Best-effort rollback with ROLLBACK_FAILED issues
- Non-reentrancy
- Unexpected applier errors leave the engine FAILED
"""

from unittest.mock import MagicMock

import pytest

from paramigrate.core.config import Settings
from paramigrate.core.errors import OperationError, PreconditionError, ScanError
from paramigrate.core.migration.applier import ProjectStateApplier
from paramigrate.core.migration.engine import MigrationEngine
from paramigrate.core.migration.models import (
    EngineState,
    FileImport,
    HookUsage,
    ProjectState,
    ProviderTag,
    ProviderUsage,
    Severity,
)

PRIVY = "@privy-io/react-auth"
PARA = "@getpara/react-sdk"


# ── Fixtures ──────────────────────────────────────────────────────────────


def _make_privy_state(**overrides) -> ProjectState:
    fields = dict(
        dependencies={PRIVY: "1.0.0", "react": "18.2.0"},
        imports=[
            FileImport("src/App.tsx", 1, ("PrivyProvider",), PRIVY, ProviderTag.PRIVY),
            FileImport("src/Wallet.tsx", 1, ("usePrivy",), PRIVY, ProviderTag.PRIVY),
        ],
        providers=[ProviderUsage("src/App.tsx", 10, "PrivyProvider", {"appId": "app-123"})],
        hooks=[HookUsage("src/Wallet.tsx", 5, "usePrivy", PRIVY, "const { login } = usePrivy();")],
        entry_points={"src/main.tsx"},
    )
    fields.update(overrides)
    return ProjectState(**fields)


def _make_scanner(state: ProjectState = None) -> MagicMock:
    scanner = MagicMock()
    scanner.scan.return_value = state if state is not None else _make_privy_state()
    return scanner


class _RecordingApplier(ProjectStateApplier):
    """In-memory applier that records every id it is asked to apply and
    fails on the ids in ``fail_on``."""

    def __init__(self, state, fail_on=(), log=None):
        super().__init__(state)
        self.fail_on = set(fail_on)
        self.log = log if log is not None else []

    def apply(self, operation):
        self.log.append(operation.id)
        if operation.id in self.fail_on:
            raise OperationError(operation.id, "simulated failure")
        super().apply(operation)


def _make_engine(state=None, fail_on=(), log=None, **kwargs) -> MigrationEngine:
    return MigrationEngine(
        scanner=_make_scanner(state),
        settings=Settings(),
        applier_factory=lambda s: _RecordingApplier(s, fail_on, log),
        **kwargs,
    )


def _planned_engine(state=None, fail_on=(), log=None):
    engine = _make_engine(state, fail_on, log)
    engine.scan_project_state("/project")
    plan = engine.create_replacement_plan("privy-to-para")
    return engine, plan


# ── Tests: state machine ──────────────────────────────────────────────────


class TestStateMachine:

    def test_starts_idle(self):
        engine = _make_engine()
        assert engine.status == EngineState.IDLE
        assert engine.state is None
        assert engine.plan is None

    def test_scan_stores_state(self):
        engine = _make_engine()
        state = engine.scan_project_state("/project")
        assert engine.status == EngineState.SCANNED
        assert engine.state is state
        engine._scanner.scan.assert_called_once_with("/project")

    def test_plan_before_scan(self):
        with pytest.raises(PreconditionError, match="scan"):
            _make_engine().create_replacement_plan("privy-to-para")

    def test_execute_before_plan(self):
        engine = _make_engine()
        with pytest.raises(PreconditionError, match="plan"):
            engine.execute_atomic_migration()
        engine.scan_project_state("/project")
        with pytest.raises(PreconditionError, match="plan"):
            engine.execute_atomic_migration()

    def test_unknown_strategy(self):
        engine = _make_engine()
        engine.scan_project_state("/project")
        with pytest.raises(PreconditionError):
            engine.create_replacement_plan("magic-to-para")

    def test_strategy_that_does_not_apply(self):
        engine = _make_engine()
        engine.scan_project_state("/project")
        with pytest.raises(PreconditionError, match="does not apply"):
            engine.create_replacement_plan("web3modal-to-para")
        assert engine.status == EngineState.SCANNED

    def test_plan_built(self):
        engine, plan = _planned_engine()
        assert engine.status == EngineState.PLANNED
        assert engine.plan is plan
        assert plan.strategy_name == "privy-to-para"
        assert plan.estimated_duration_seconds == 180
        assert [a.operation_id for a in plan.rollback_plan] == [op.id for op in plan.operations]
        assert all(a.inverse == op.inverse() for a, op in zip(plan.rollback_plan, plan.operations))
        assert len(plan.pre_validations) == 3
        assert len(plan.post_validations) == 5

    def test_rescan_discards_plan(self):
        engine, _ = _planned_engine()
        engine.scan_project_state("/project")
        assert engine.plan is None
        assert engine.status == EngineState.SCANNED

    def test_scan_error_propagates(self):
        scanner = MagicMock()
        scanner.scan.side_effect = ScanError("/missing", "project root does not exist")
        engine = MigrationEngine(scanner=scanner, settings=Settings())
        with pytest.raises(ScanError):
            engine.scan_project_state("/missing")
        assert engine.status == EngineState.IDLE

    def test_os_error_becomes_scan_error(self):
        scanner = MagicMock()
        scanner.scan.side_effect = PermissionError("denied")
        engine = MigrationEngine(scanner=scanner, settings=Settings())
        with pytest.raises(ScanError, match="denied"):
            engine.scan_project_state("/locked")

    def test_detect_strategy(self):
        engine = _make_engine()
        with pytest.raises(PreconditionError):
            engine.detect_strategy()
        engine.scan_project_state("/project")
        assert engine.detect_strategy() == "privy-to-para"

    def test_load_project_state(self):
        engine = _make_engine()
        state = _make_privy_state()
        engine.load_project_state(state)
        assert engine.state is state
        assert engine.status == EngineState.SCANNED


# ── Tests: execution ──────────────────────────────────────────────────────


class TestExecution:

    def test_successful_migration(self):
        engine, plan = _planned_engine()
        result = engine.execute_atomic_migration()

        assert result.success
        assert engine.status == EngineState.SUCCEEDED
        assert not result.rollback_executed
        assert result.completed_operation_ids == tuple(op.id for op in plan.operations)
        assert result.failed_operation_ids == ()
        assert result.issues == ()
        assert [v.valid for v in result.validation_results] == [True, True]
        assert result.duration_ms >= 0

        final = result.final_state
        assert engine.state == final
        assert PARA in final.dependencies
        assert PRIVY not in final.dependencies
        assert engine.calculate_migration_success() == 100
        assert engine.validate_completion().valid

    def test_plan_is_consumed(self):
        engine, _ = _planned_engine()
        engine.execute_atomic_migration()
        assert engine.plan is None
        with pytest.raises(PreconditionError):
            engine.execute_atomic_migration()

    def test_pre_flight_failure_applies_nothing(self):
        log = []
        engine, _ = _planned_engine(_make_privy_state(entry_points=set()), log=log)
        result = engine.execute_atomic_migration()

        assert not result.success
        assert engine.status == EngineState.FAILED
        assert not result.rollback_executed
        assert result.completed_operation_ids == ()
        assert [i.code for i in result.issues] == ["NO_ENTRY_POINTS"]
        assert log == []

    def test_critical_failure_rolls_back_completed_in_reverse(self):
        log = []
        state = _make_privy_state()
        engine, plan = _planned_engine(state, fail_on={"replace-import-src/App.tsx:1"}, log=log)
        ids = [op.id for op in plan.operations]
        k = ids.index("replace-import-src/App.tsx:1")

        result = engine.execute_atomic_migration()

        assert not result.success
        assert result.rollback_executed
        assert engine.status == EngineState.ROLLED_BACK
        assert list(result.completed_operation_ids) == ids[:k]
        assert result.failed_operation_ids == ("replace-import-src/App.tsx:1",)
        # Forward ops up to and including k, then inverses of [0, k) last first
        assert log == ids[:k + 1] + [f"rollback-{i}" for i in reversed(ids[:k])]
        assert result.final_state == state
        assert engine.state == state
        assert result.issues[0].code == "OPERATION_FAILED"
        assert result.issues[0].severity == Severity.CRITICAL
        # Post-migration checks never ran
        assert len(result.validation_results) == 1

    def test_first_operation_failure_rolls_back_nothing(self):
        log = []
        engine, plan = _planned_engine(fail_on={f"remove-dependency-{PRIVY}"}, log=log)
        result = engine.execute_atomic_migration()
        assert result.rollback_executed
        assert result.completed_operation_ids == ()
        assert log == [f"remove-dependency-{PRIVY}"]

    def test_non_critical_failure_continues(self):
        hook_id = "replace-hook-src/Wallet.tsx:5"
        engine, plan = _planned_engine(fail_on={hook_id})
        result = engine.execute_atomic_migration()

        assert result.success
        assert not result.rollback_executed
        assert result.failed_operation_ids == (hook_id,)
        assert hook_id not in result.completed_operation_ids
        assert len(result.completed_operation_ids) == len(plan.operations) - 1
        assert [i.code for i in result.issues] == ["OPERATION_FAILED"]
        assert result.issues[0].severity == Severity.WARNING
        assert result.issues[0].file == "src/Wallet.tsx"

    def test_post_migration_failure_rolls_back(self):
        # A leftover string environment on an untouched provider
        state = _make_privy_state(providers=[
            ProviderUsage("src/App.tsx", 10, "PrivyProvider", {"appId": "app-123"}),
            ProviderUsage("src/Legacy.tsx", 4, "ParaProvider", {"env": "development"}),
        ])
        engine, plan = _planned_engine(state)
        result = engine.execute_atomic_migration()

        assert not result.success
        assert result.rollback_executed
        assert engine.status == EngineState.ROLLED_BACK
        assert result.completed_operation_ids == tuple(op.id for op in plan.operations)
        assert [i.code for i in result.issues] == ["STRING_ENVIRONMENT"]
        assert not result.validation_results[-1].valid
        assert result.final_state == state

    def test_rollback_is_best_effort(self):
        log = []
        fail_on = {
            "replace-provider-src/App.tsx:10",
            f"rollback-remove-dependency-{PRIVY}",
        }
        engine, plan = _planned_engine(fail_on=fail_on, log=log)
        result = engine.execute_atomic_migration()

        assert result.rollback_executed
        codes = [i.code for i in result.issues]
        assert codes == ["OPERATION_FAILED", "ROLLBACK_FAILED"]
        rollback_issue = result.issues[1]
        assert rollback_issue.severity == Severity.CRITICAL
        assert rollback_issue.remediation == "Manual intervention required"
        # Every completed operation still had its inverse attempted
        attempted = [i for i in log if i.startswith("rollback-")]
        assert attempted == [f"rollback-{i}" for i in reversed(result.completed_operation_ids)]

    def test_not_reentrant(self):
        engine = None

        class _ReentrantApplier(ProjectStateApplier):
            def apply(self, operation):
                engine.create_replacement_plan("privy-to-para")

        engine = MigrationEngine(
            scanner=_make_scanner(),
            settings=Settings(),
            applier_factory=_ReentrantApplier,
        )
        engine.scan_project_state("/project")
        engine.create_replacement_plan("privy-to-para")
        result = engine.execute_atomic_migration()

        assert not result.success
        assert "in progress" in result.issues[0].message
        # The nested call did not replace the state or plan
        assert engine.status == EngineState.ROLLED_BACK
        assert engine.plan is None

    def test_applier_factory_error_leaves_engine_failed(self):
        def _broken_factory(state):
            raise RuntimeError("applier unavailable")

        engine = MigrationEngine(
            scanner=_make_scanner(),
            settings=Settings(),
            applier_factory=_broken_factory,
        )
        engine.scan_project_state("/project")
        engine.create_replacement_plan("privy-to-para")
        with pytest.raises(RuntimeError, match="applier unavailable"):
            engine.execute_atomic_migration()

        assert engine.status == EngineState.FAILED
        assert engine.plan is None
        with pytest.raises(PreconditionError, match="plan"):
            engine.execute_atomic_migration()

    def test_current_state_error_leaves_engine_failed(self):
        class _BrokenStateApplier(ProjectStateApplier):
            def current_state(self):
                raise RuntimeError("state lost")

        engine = MigrationEngine(
            scanner=_make_scanner(),
            settings=Settings(),
            applier_factory=_BrokenStateApplier,
        )
        engine.scan_project_state("/project")
        engine.create_replacement_plan("privy-to-para")
        with pytest.raises(RuntimeError, match="state lost"):
            engine.execute_atomic_migration()
        assert engine.status == EngineState.FAILED

        # A fresh scan recovers the engine
        engine.scan_project_state("/project")
        assert engine.status == EngineState.SCANNED

    def test_validate_completion_does_not_change_status(self):
        engine, plan = _planned_engine()
        result = engine.validate_completion()
        assert not result.valid
        assert engine.status == EngineState.PLANNED
        assert engine.plan is plan

    def test_standalone_validations_need_state(self):
        engine = _make_engine()
        for call in (engine.validate_pre_flight, engine.validate_post_migration,
                     engine.validate_completion, engine.calculate_migration_success):
            with pytest.raises(PreconditionError):
                call()

    def test_score_unchanged_by_noop(self):
        engine, _ = _planned_engine()
        result = engine.execute_atomic_migration()
        before = engine.calculate_migration_success(result.final_state)
        engine.load_project_state(result.final_state)
        assert engine.calculate_migration_success() == before == 100

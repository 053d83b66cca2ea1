"""Unit tests for migration data contracts.

Tests cover:
- ReplacementOperation.inverse swaps values and record edits
- ValidationResult.merge AND / concat semantics
- ProjectState coercion, read-only mappings, hashing and dict round trip
- Target module detection
"""

import pytest

from paramigrate.core.migration.models import (
    DependencyEntry,
    FileImport,
    OperationKind,
    ProjectState,
    ProviderTag,
    ProviderUsage,
    ReplacementOperation,
    Severity,
    StyleImport,
    ValidationIssue,
    ValidationResult,
    is_target_module,
)


# ── Fixtures ──────────────────────────────────────────────────────────────


def _make_issue(code: str = "SOME_CODE") -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.CRITICAL,
        code=code,
        message=f"{code} happened",
        remediation="Fix it",
    )


def _make_operation() -> ReplacementOperation:
    old = FileImport("src/App.tsx", 1, ("usePrivy",), "@privy-io/react-auth", ProviderTag.PRIVY)
    new = FileImport("src/App.tsx", 1, ("useAccount",), "@getpara/react-sdk", ProviderTag.PARA)
    return ReplacementOperation(
        id="replace-import-src/App.tsx:1",
        kind=OperationKind.IMPORT,
        old_value=old.statement(),
        new_value=new.statement(),
        critical=True,
        file="src/App.tsx",
        line=1,
        before=(old,),
        after=(new,),
    )


# ── Tests: ReplacementOperation ───────────────────────────────────────────


class TestReplacementOperation:

    def test_inverse_swaps_values_and_records(self):
        op = _make_operation()
        inv = op.inverse()
        assert inv.id == "rollback-replace-import-src/App.tsx:1"
        assert inv.old_value == op.new_value
        assert inv.new_value == op.old_value
        assert inv.before == op.after
        assert inv.after == op.before
        assert inv.critical is op.critical
        assert inv.file == op.file and inv.line == op.line

    def test_kind_coerced_from_string(self):
        op = ReplacementOperation(
            id="x", kind="dependency", old_value="a", new_value="", critical=True,
            before=[DependencyEntry("a", "1.0.0")],
        )
        assert op.kind is OperationKind.DEPENDENCY
        assert isinstance(op.before, tuple)

    def test_to_dict_omits_records(self):
        data = _make_operation().to_dict()
        assert data["kind"] == "import"
        assert "before" not in data and "after" not in data


# ── Tests: ValidationResult ───────────────────────────────────────────────


class TestValidationResultMerge:

    def test_all_valid(self):
        merged = ValidationResult.merge([ValidationResult.ok(), ValidationResult.ok()])
        assert merged.valid
        assert merged.issues == ()

    def test_any_invalid_makes_invalid(self):
        merged = ValidationResult.merge([
            ValidationResult.ok(),
            ValidationResult.failed(_make_issue("A")),
            ValidationResult.failed(_make_issue("B")),
        ])
        assert not merged.valid
        assert [i.code for i in merged.issues] == ["A", "B"]

    def test_warnings_kept_from_passing_and_failing_checks(self):
        merged = ValidationResult.merge([
            ValidationResult.ok(warnings=["first"]),
            ValidationResult.failed(_make_issue(), warnings=["second"]),
        ])
        assert merged.warnings == ("first", "second")

    def test_issues_of_passing_checks_dropped(self):
        passing = ValidationResult(valid=True, issues=(_make_issue("IGNORED"),))
        merged = ValidationResult.merge([passing])
        assert merged.valid
        assert merged.issues == ()

    def test_empty_is_valid(self):
        assert ValidationResult.merge([]).valid

    def test_to_dict(self):
        data = ValidationResult.failed(_make_issue("A"), warnings=["w"]).to_dict()
        assert data["valid"] is False
        assert data["issues"][0]["code"] == "A"
        assert data["issues"][0]["severity"] == "critical"
        assert data["warnings"] == ["w"]


# ── Tests: ProjectState ───────────────────────────────────────────────────


class TestProjectState:

    def test_sequences_coerced(self):
        state = ProjectState(
            imports=[FileImport("a.ts", 1, ["x"], "m")],
            entry_points=["src/main.tsx", "src/main.tsx"],
        )
        assert isinstance(state.imports, tuple)
        assert state.imports[0].imported_symbols == ("x",)
        assert state.entry_points == frozenset({"src/main.tsx"})

    def test_empty(self):
        state = ProjectState.empty()
        assert state.dependencies == {}
        assert state.entry_points == frozenset()

    def test_dict_round_trip(self):
        state = ProjectState(
            dependencies={"@privy-io/react-auth": "1.0.0"},
            imports=[FileImport("src/App.tsx", 1, ("PrivyProvider",),
                                "@privy-io/react-auth", ProviderTag.PRIVY)],
            providers=[ProviderUsage("src/App.tsx", 9, "PrivyProvider", {"appId": "abc"})],
            styles=[StyleImport("src/main.tsx", 1, "@getpara/react-sdk/styles.css", True)],
            entry_points={"src/main.tsx"},
        )
        data = state.to_dict()
        assert data["imports"][0]["provider_tag"] == "privy"
        assert ProjectState.from_dict(data) == state

    def test_dependencies_read_only(self):
        source = {"@privy-io/react-auth": "1.0.0"}
        state = ProjectState(dependencies=source)
        with pytest.raises(TypeError):
            state.dependencies["@privy-io/react-auth"] = "9.9.9"
        source["react"] = "18.2.0"
        assert "react" not in state.dependencies

    def test_provider_props_read_only_at_any_depth(self):
        usage = ProviderUsage("src/App.tsx", 9, "PrivyProvider",
                              {"appId": "abc", "config": {"env": "development"}})
        with pytest.raises(TypeError):
            usage.props["appId"] = "other"
        with pytest.raises(TypeError):
            usage.props["config"]["env"] = "production"
        assert usage.props == {"appId": "abc", "config": {"env": "development"}}

    def test_hashable(self):
        first = ProjectState(
            dependencies={"a": "1", "b": "2"},
            providers=[ProviderUsage("src/App.tsx", 9, "PrivyProvider", {"appId": "abc"})],
        )
        second = ProjectState(
            dependencies={"b": "2", "a": "1"},
            providers=[ProviderUsage("src/App.tsx", 9, "PrivyProvider", {"appId": "abc"})],
        )
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_to_dict_is_plain_json(self):
        state = ProjectState(
            dependencies={"a": "1"},
            providers=[ProviderUsage("src/App.tsx", 9, "PrivyProvider", {"config": {"x": 1}})],
        )
        data = state.to_dict()
        assert type(data["dependencies"]) is dict
        assert type(data["providers"][0]["props"]["config"]) is dict

    def test_from_dict_rejects_unknown_fields(self):
        with pytest.raises(TypeError):
            ProjectState.from_dict({"imports": [{"bogus": 1}]})


# ── Tests: target detection ───────────────────────────────────────────────


class TestIsTargetModule:

    @pytest.mark.parametrize("module", [
        "@getpara/react-sdk",
        "@getpara/react-sdk/styles.css",
        "@getpara/core-sdk",
        "@para-wallet/legacy",
    ])
    def test_target_modules(self, module):
        assert is_target_module(module, "@getpara/react-sdk")

    @pytest.mark.parametrize("module", [
        "@privy-io/react-auth",
        "paralegal",
        "@reown/appkit",
        "@getpara-fake/react-sdk",
    ])
    def test_other_modules(self, module):
        assert not is_target_module(module, "@getpara/react-sdk")

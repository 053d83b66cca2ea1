"""Atomic validation gates for wallet-provider migrations.

Three batteries run against a :class:`ProjectState`:

* **pre-flight** -- is there anything to migrate, and somewhere to put it;
* **post-migration** -- the five failure causes seen most often in real
  migrations (missing modal, missing stylesheet, string environment,
  leftover source packages, missing target package);
* **completion** -- a standalone full-state check.

Every check returns a :class:`ValidationResult`; nothing here raises.
"""

import logging
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple

from .. import constants
from ..config import TargetSettings
from .models import (
    SOURCE_PROVIDER_TAGS,
    ProjectState,
    ProviderUsage,
    Severity,
    ValidationCheck,
    ValidationIssue,
    ValidationPhase,
    ValidationResult,
    is_target_module,
)

logger = logging.getLogger(__name__)

_RAW_ENVIRONMENTS = frozenset(constants.ENVIRONMENT_ENUM)


def _critical(code: str, message: str, remediation: str, **location: Any) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.CRITICAL,
        code=code,
        message=message,
        remediation=remediation,
        **location,
    )


def _is_environment_key(key: str) -> bool:
    lowered = key.lower()
    return lowered.endswith("env") or lowered.endswith("environment")


def _raw_environment_literals(props: Any) -> Iterator[Tuple[str, str]]:
    """Yield ``(key, value)`` for every env-like prop holding a raw string, at any depth."""
    if isinstance(props, Mapping):
        for key, value in props.items():
            if isinstance(value, str) and _is_environment_key(str(key)):
                if value.strip("'\"").lower() in _RAW_ENVIRONMENTS:
                    yield key, value
            else:
                yield from _raw_environment_literals(value)
    elif isinstance(props, (list, tuple)):
        for item in props:
            yield from _raw_environment_literals(item)


class AtomicValidator:
    """Runs the pre-flight, post-migration and completion batteries."""

    def __init__(self, target: Optional[TargetSettings] = None):
        self.target = target or TargetSettings()

    # ── Batteries ─────────────────────────────────────────────────

    def pre_flight_checks(self) -> Tuple[ValidationCheck, ...]:
        return (
            ValidationCheck("pre-migratable-content", ValidationPhase.PRE,
                            "A source wallet provider dependency is present",
                            self.check_migratable_content),
            ValidationCheck("pre-project-structure", ValidationPhase.PRE,
                            "At least one application entry point was found",
                            self.check_project_structure),
            ValidationCheck("pre-conflicts", ValidationPhase.PRE,
                            "Target SDK is not already installed",
                            self.check_for_conflicts),
        )

    def post_migration_checks(self) -> Tuple[ValidationCheck, ...]:
        return (
            ValidationCheck("post-modal-present", ValidationPhase.POST,
                            f"{self.target.modal_component} is imported from the target SDK",
                            self.check_modal_present),
            ValidationCheck("post-stylesheet-imported", ValidationPhase.POST,
                            "Target SDK stylesheet is imported",
                            self.check_stylesheet_imported),
            ValidationCheck("post-environment-enum", ValidationPhase.POST,
                            "Environment is passed as an enum, not a string",
                            self.check_environment_enum),
            ValidationCheck("post-no-old-dependencies", ValidationPhase.POST,
                            "Source provider dependencies are removed",
                            self.check_old_dependencies_removed),
            ValidationCheck("post-target-dependency", ValidationPhase.POST,
                            "Target SDK dependency is present",
                            self.check_target_dependency_present),
        )

    def completion_checks(self) -> Tuple[ValidationCheck, ...]:
        return (
            ValidationCheck("completion-no-old-imports", ValidationPhase.COMPLETION,
                            "No source provider imports remain",
                            self.check_no_old_imports),
            ValidationCheck("completion-target-hooks", ValidationPhase.COMPLETION,
                            "Target SDK hooks are in use",
                            self.check_target_hooks),
            ValidationCheck("completion-target-provider", ValidationPhase.COMPLETION,
                            f"Exactly one {self.target.provider_component} is rendered",
                            self.check_target_provider),
        )

    @staticmethod
    def run_checks(checks: Iterable[ValidationCheck], state: ProjectState) -> ValidationResult:
        return ValidationResult.merge(check.run(state) for check in checks)

    def validate_pre_flight(self, state: ProjectState) -> ValidationResult:
        """Pre-flight validation -- ensures migration can proceed."""
        return self.run_checks(self.pre_flight_checks(), state)

    def validate_post_migration(self, state: ProjectState) -> ValidationResult:
        """Post-migration validation -- the five critical failure causes."""
        return self.run_checks(self.post_migration_checks(), state)

    def validate_completion(self, state: ProjectState) -> ValidationResult:
        return self.run_checks(self.completion_checks(), state)

    # ── Helpers ───────────────────────────────────────────────────

    def _is_target(self, module: str) -> bool:
        return is_target_module(module, self.target.package)

    @staticmethod
    def active_providers(state: ProjectState) -> List[ProviderUsage]:
        """Providers actually rendered; commented-out usages are ignored."""
        return [p for p in state.providers if p.active]

    @staticmethod
    def source_dependencies(state: ProjectState, fingerprints: Iterable[str]) -> List[str]:
        fingerprints = tuple(fingerprints)
        return [
            name for name in state.dependencies
            if any(fp in name for fp in fingerprints)
        ]

    # ── Pre-flight checks ─────────────────────────────────────────

    def check_migratable_content(self, state: ProjectState) -> ValidationResult:
        found = self.source_dependencies(state, constants.SOURCE_DEPENDENCY_FINGERPRINTS)
        if found:
            return ValidationResult.ok()
        return ValidationResult.failed(_critical(
            constants.CODE_NO_MIGRATABLE_CONTENT,
            "No wallet providers detected for migration",
            "Ensure the project depends on Privy, ReOwn, Web3Modal or WalletConnect",
        ))

    def check_project_structure(self, state: ProjectState) -> ValidationResult:
        if state.entry_points:
            return ValidationResult.ok()
        return ValidationResult.failed(_critical(
            constants.CODE_NO_ENTRY_POINTS,
            "No entry points detected (main.tsx, App.tsx, index.tsx, layout.tsx, _app.tsx)",
            "Ensure the project has a React entry point the scanner can find",
        ))

    def check_for_conflicts(self, state: ProjectState) -> ValidationResult:
        if any(self._is_target(dep) for dep in state.dependencies):
            return ValidationResult.ok(warnings=[
                "Para SDK already present - migration may overwrite existing configuration",
            ])
        return ValidationResult.ok()

    # ── Post-migration checks ─────────────────────────────────────

    def check_modal_present(self, state: ProjectState) -> ValidationResult:
        modal = self.target.modal_component
        if any(
            self._is_target(imp.source_module) and modal in imp.imported_symbols
            for imp in state.imports
        ):
            return ValidationResult.ok()
        return ValidationResult.failed(_critical(
            constants.CODE_MISSING_PARA_MODAL,
            f"{modal} component missing: the connect action will render no UI",
            f"Add <{modal} /> inside your <{self.target.provider_component}>. "
            f"Import: import {{ {modal} }} from \"{self.target.package}\"",
        ))

    def check_stylesheet_imported(self, state: ProjectState) -> ValidationResult:
        if any(style.is_target_style for style in state.styles):
            return ValidationResult.ok()
        return ValidationResult.failed(_critical(
            constants.CODE_MISSING_PARA_CSS,
            "Para SDK stylesheet not imported: the modal will render unstyled",
            f"Add import \"{self.target.stylesheet}\" to your main entry point "
            "(main.tsx, layout.tsx or _app.tsx)",
        ))

    def check_environment_enum(self, state: ProjectState) -> ValidationResult:
        issues = []
        for provider in self.active_providers(state):
            for key, value in _raw_environment_literals(provider.props):
                issues.append(_critical(
                    constants.CODE_STRING_ENVIRONMENT,
                    f"{provider.provider_name} passes {key}={value!r} as a string "
                    "instead of the Environment enum",
                    f"Import Environment from \"{self.target.core_package}\" and use "
                    "Environment.DEVELOPMENT or Environment.PRODUCTION",
                    file=provider.file,
                    line=provider.line,
                ))
        if issues:
            return ValidationResult.failed(*issues)
        return ValidationResult.ok()

    def check_old_dependencies_removed(self, state: ProjectState) -> ValidationResult:
        leftovers = self.source_dependencies(state, constants.LEFTOVER_DEPENDENCY_FINGERPRINTS)
        if not leftovers:
            return ValidationResult.ok()
        return ValidationResult.failed(_critical(
            constants.CODE_OLD_DEPENDENCIES_PRESENT,
            f"Old wallet dependencies still present: {', '.join(leftovers)}",
            f"Run: npm uninstall {' '.join(leftovers)}",
        ))

    def check_target_dependency_present(self, state: ProjectState) -> ValidationResult:
        if any(self._is_target(dep) for dep in state.dependencies):
            return ValidationResult.ok()
        return ValidationResult.failed(_critical(
            constants.CODE_MISSING_PARA_DEPENDENCY,
            "Para SDK dependency missing",
            f"Run: npm install {self.target.package}",
        ))

    # ── Completion checks ─────────────────────────────────────────

    def check_no_old_imports(self, state: ProjectState) -> ValidationResult:
        issues = [
            _critical(
                constants.CODE_OLD_IMPORT_PRESENT,
                f"Old wallet import detected: {imp.statement()} in {imp.file}:{imp.line}",
                f"Replace with the {self.target.package} equivalent import",
                file=imp.file,
                line=imp.line,
            )
            for imp in state.imports
            if imp.provider_tag in SOURCE_PROVIDER_TAGS
        ]
        if issues:
            return ValidationResult.failed(*issues)
        return ValidationResult.ok()

    def check_target_hooks(self, state: ProjectState) -> ValidationResult:
        if any(self._is_target(hook.source_module) for hook in state.hooks):
            return ValidationResult.ok()
        return ValidationResult.ok(warnings=[
            "No Para hooks detected - ensure Para hooks are being used",
        ])

    def check_target_provider(self, state: ProjectState) -> ValidationResult:
        name = self.target.provider_component
        count = sum(1 for p in self.active_providers(state) if p.provider_name == name)
        if count == 0:
            return ValidationResult.failed(_critical(
                constants.CODE_NO_PARA_PROVIDER,
                f"No {name} detected",
                f"Replace the old wallet provider with {name}",
            ))
        if count > 1:
            return ValidationResult.ok(warnings=[
                f"Multiple {name}s detected ({count}) - ensure only one is active",
            ])
        return ValidationResult.ok()

    # ── Score ─────────────────────────────────────────────────────

    def calculate_migration_success(self, state: ProjectState) -> int:
        """Weighted 0-100 progress score.  Informational; never gates."""
        score = 0

        # Dependencies (30)
        if any(self._is_target(dep) for dep in state.dependencies):
            score += constants.SCORE_TARGET_DEPENDENCY
        if not self.source_dependencies(state, constants.LEFTOVER_DEPENDENCY_FINGERPRINTS):
            score += constants.SCORE_NO_SOURCE_DEPENDENCY

        # Imports (25)
        if any(self._is_target(imp.source_module) for imp in state.imports):
            score += constants.SCORE_TARGET_IMPORT
        if not any(imp.provider_tag in SOURCE_PROVIDER_TAGS for imp in state.imports):
            score += constants.SCORE_NO_SOURCE_IMPORT

        # Provider + modal (25)
        if any(
            p.provider_name == self.target.provider_component
            for p in self.active_providers(state)
        ):
            score += constants.SCORE_TARGET_PROVIDER
        if self.check_modal_present(state).valid:
            score += constants.SCORE_MODAL_IMPORT

        # Styles (10)
        if any(style.is_target_style for style in state.styles):
            score += constants.SCORE_TARGET_STYLESHEET

        # Hooks (10)
        if any(self._is_target(hook.source_module) for hook in state.hooks):
            score += constants.SCORE_TARGET_HOOK

        return score

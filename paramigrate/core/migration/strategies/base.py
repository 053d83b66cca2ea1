"""Replacement strategy base class.

A replacement strategy encapsulates provider-specific migration
knowledge: fingerprints, symbol/hook/component mapping tables and the
prop mapping for the provider block.  The base class owns plan
construction so every strategy emits operations in the same order:

1. remove source dependencies            (critical)
2. add the target dependency             (critical)
3. rewrite source-tagged imports         (critical)
4. rewrite provider blocks + modal       (critical)
5. rewrite hook usages                   (non-critical)
6. add the stylesheet to entry points    (critical)
"""

import logging
import re
from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from ...config import TargetSettings
from ...scanner.utils import classify_module
from .. import snippets
from ..models import (
    DependencyEntry,
    FileImport,
    HookUsage,
    OperationKind,
    ProjectState,
    ProviderTag,
    ProviderUsage,
    ReplacementOperation,
    StyleImport,
    is_target_module,
)

logger = logging.getLogger(__name__)

# Fallback when the source provider exposes no app identifier
API_KEY_PLACEHOLDER = "PARA_API_KEY"


class ReplacementStrategy:
    """Base for source-provider → Para strategies.

    Subclasses declare their tables as class attributes.  Tables are
    fixed data, never inferred.
    """

    # ── Identity ─────────────────────────────────────────────────

    strategy_name: ClassVar[str]
    display_name: ClassVar[str]

    fingerprints: ClassVar[Tuple[str, ...]]
    """Substrings that select this strategy during detection."""

    legacy_fingerprints: ClassVar[Tuple[str, ...]] = ()
    """Extra substrings this strategy cleans up but never detects on."""

    source_tags: ClassVar[FrozenSet[ProviderTag]]
    """Import tags rewritten by this strategy."""

    estimated_duration_seconds: ClassVar[int]

    # ── Mapping tables ───────────────────────────────────────────

    IMPORT_SYMBOL_MAP: ClassVar[Dict[str, Tuple[str, ...]]] = {}
    HOOK_MAP: ClassVar[Dict[str, str]] = {}
    PROVIDER_COMPONENTS: ClassVar[Tuple[str, ...]] = ()

    PROP_MAP: ClassVar[Dict[str, Optional[str]]] = {}
    """Source prop -> target config key; None drops the prop."""

    def __init__(self, target: Optional[TargetSettings] = None):
        self.target = target or TargetSettings()

    # ── Detection ────────────────────────────────────────────────

    @classmethod
    def detect(cls, state: ProjectState) -> bool:
        """True when a dependency name or import source carries a fingerprint."""
        return _has_fingerprint(state, cls.fingerprints)

    @classmethod
    def owns_dependency(cls, name: str) -> bool:
        return any(fp in name for fp in cls.fingerprints + cls.legacy_fingerprints)

    def validate(self, state: ProjectState) -> bool:
        """Precondition gate: the state holds something this strategy migrates."""
        return _has_fingerprint(state, self.fingerprints + self.legacy_fingerprints)

    def get_estimated_duration_seconds(self) -> int:
        return self.estimated_duration_seconds

    # ── Plan construction ────────────────────────────────────────

    def execute(self, state: ProjectState) -> List[ReplacementOperation]:
        """Build the ordered operation list for *state*.

        Deterministic: identical states yield identical lists.
        """
        ids: Set[str] = set()
        operations: List[ReplacementOperation] = []
        operations.extend(self._dependency_removals(state, ids))
        operations.append(self._dependency_addition(state, ids))
        operations.extend(self._import_rewrites(state, ids))
        operations.extend(self._provider_rewrites(state, ids))
        operations.extend(self._hook_rewrites(state, ids))
        operations.extend(self._style_insertions(state, ids))

        logger.debug(
            "%s planned %d operations", self.strategy_name, len(operations)
        )
        return operations

    def _dependency_removals(self, state: ProjectState, ids: Set[str]) -> List[ReplacementOperation]:
        return [
            ReplacementOperation(
                id=_unique_id(f"remove-dependency-{name}", ids),
                kind=OperationKind.DEPENDENCY,
                old_value=name,
                new_value="",
                critical=True,
                before=(DependencyEntry(name, version),),
            )
            for name, version in state.dependencies.items()
            if self.owns_dependency(name)
        ]

    def _dependency_addition(self, state: ProjectState, ids: Set[str]) -> ReplacementOperation:
        package = self.target.package
        existing = state.dependencies.get(package)
        before = (DependencyEntry(package, existing),) if existing is not None else ()
        return ReplacementOperation(
            id=_unique_id(f"add-dependency-{package}", ids),
            kind=OperationKind.DEPENDENCY,
            old_value=package if existing is not None else "",
            new_value=package,
            critical=True,
            before=before,
            after=(DependencyEntry(package, self.target.version),),
        )

    def map_import_symbols(self, symbols: Tuple[str, ...]) -> Tuple[str, ...]:
        """Map source symbols to target symbols; unmapped names are kept."""
        mapped: List[str] = []
        for symbol in symbols:
            for target_symbol in self.IMPORT_SYMBOL_MAP.get(symbol, (symbol,)):
                if target_symbol not in mapped:
                    mapped.append(target_symbol)
        return tuple(mapped)

    def _import_rewrites(self, state: ProjectState, ids: Set[str]) -> List[ReplacementOperation]:
        operations = []
        for imp in state.imports:
            if imp.provider_tag not in self.source_tags:
                continue
            rewritten = FileImport(
                file=imp.file,
                line=imp.line,
                imported_symbols=self.map_import_symbols(imp.imported_symbols),
                source_module=self.target.package,
                provider_tag=ProviderTag.PARA,
            )
            operations.append(ReplacementOperation(
                id=_unique_id(f"replace-import-{imp.file}:{imp.line}", ids),
                kind=OperationKind.IMPORT,
                file=imp.file,
                line=imp.line,
                old_value=imp.statement(),
                new_value=rewritten.statement(),
                critical=True,
                before=(imp,),
                after=(rewritten,),
            ))
        return operations

    def map_provider_props(self, props: Mapping[str, Any]) -> Dict[str, Any]:
        """Translate source provider props into target provider config keys."""
        return {
            self.PROP_MAP[key]: value
            for key, value in props.items()
            if self.PROP_MAP.get(key)
        }

    def _provider_config(self, props: Mapping[str, Any]) -> Dict[str, Any]:
        config: Dict[str, Any] = {"apiKey": API_KEY_PLACEHOLDER}
        config.update(self.map_provider_props(props))
        config["paraClientConfig"] = {
            "env": snippets.environment_expression(self.target.environment),
        }
        config["embeddedWalletConfig"] = {
            "createOnLogin": "all-users",
            "showWalletUiOnLogin": True,
        }
        return config

    def _file_has_modal_import(self, state: ProjectState, file: str) -> bool:
        modal = self.target.modal_component
        for imp in state.imports:
            if imp.file != file:
                continue
            if imp.provider_tag in self.source_tags:
                symbols = self.map_import_symbols(imp.imported_symbols)
            elif is_target_module(imp.source_module, self.target.package):
                symbols = imp.imported_symbols
            else:
                continue
            if modal in symbols:
                return True
        return False

    def _provider_rewrites(self, state: ProjectState, ids: Set[str]) -> List[ReplacementOperation]:
        operations = []
        components = (self.target.provider_component, self.target.modal_component)
        for usage in state.providers:
            if not usage.active or usage.provider_name not in self.PROVIDER_COMPONENTS:
                continue
            config = self._provider_config(usage.props)
            rewritten = ProviderUsage(
                file=usage.file,
                line=usage.line,
                provider_name=self.target.provider_component,
                props=config,
                active=usage.active,
            )
            after: Tuple[Any, ...] = (rewritten,)
            if not self._file_has_modal_import(state, usage.file):
                after += (FileImport(
                    file=usage.file,
                    line=usage.line,
                    imported_symbols=components,
                    source_module=self.target.package,
                    provider_tag=ProviderTag.PARA,
                ),)
            operations.append(ReplacementOperation(
                id=_unique_id(f"replace-provider-{usage.file}:{usage.line}", ids),
                kind=OperationKind.PROVIDER,
                file=usage.file,
                line=usage.line,
                old_value=snippets.source_provider_block(usage.provider_name, usage.props),
                new_value=snippets.target_provider_block(self.target, config),
                critical=True,
                before=(usage,),
                after=after,
            ))
        return operations

    def _hook_rewrites(self, state: ProjectState, ids: Set[str]) -> List[ReplacementOperation]:
        operations = []
        for hook in state.hooks:
            new_name = self.HOOK_MAP.get(hook.hook_name)
            if new_name is None:
                continue
            # Same-named hooks from wagmi or the target SDK stay as they are
            if classify_module(hook.source_module, self.target.package) not in self.source_tags:
                continue
            new_text = re.sub(
                rf"\b{re.escape(hook.hook_name)}\b", new_name, hook.raw_usage_text
            )
            rewritten = HookUsage(
                file=hook.file,
                line=hook.line,
                hook_name=new_name,
                source_module=self.target.package,
                raw_usage_text=new_text,
            )
            operations.append(ReplacementOperation(
                id=_unique_id(f"replace-hook-{hook.file}:{hook.line}", ids),
                kind=OperationKind.HOOK,
                file=hook.file,
                line=hook.line,
                old_value=hook.raw_usage_text,
                new_value=new_text,
                critical=False,
                before=(hook,),
                after=(rewritten,),
            ))
        return operations

    def _style_insertions(self, state: ProjectState, ids: Set[str]) -> List[ReplacementOperation]:
        stylesheet = self.target.stylesheet
        return [
            ReplacementOperation(
                id=_unique_id(f"add-stylesheet-{entry}", ids),
                kind=OperationKind.STYLE,
                file=entry,
                line=1,
                old_value="",
                new_value=snippets.style_import(stylesheet),
                critical=True,
                after=(StyleImport(entry, 1, stylesheet, is_target_style=True),),
            )
            for entry in sorted(state.entry_points)
        ]


def _has_fingerprint(state: ProjectState, fingerprints: Tuple[str, ...]) -> bool:
    if any(fp in name for name in state.dependencies for fp in fingerprints):
        return True
    return any(fp in imp.source_module for imp in state.imports for fp in fingerprints)


def _unique_id(base: str, seen: Set[str]) -> str:
    """Return *base*, suffixed with ``#n`` if already used in this plan."""
    candidate = base
    n = 2
    while candidate in seen:
        candidate = f"{base}#{n}"
        n += 1
    seen.add(candidate)
    return candidate

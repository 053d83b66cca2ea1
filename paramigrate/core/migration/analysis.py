"""Project analysis -- a read-only migration report for one project root.

Summarises which wallet-provider packages a project depends on, how much
provider-specific code it carries, how hard the migration looks, which
strategy would run, and the current migration score.  A second report
checks which of the project's Wagmi hooks keep working once Para owns
the wallet connection.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config import Settings, TargetSettings, get_settings
from ..scanner.utils import classify_module
from .models import SOURCE_PROVIDER_TAGS, ProjectState, ProviderTag
from .strategies import StrategyRegistry
from .validator import AtomicValidator

logger = logging.getLogger(__name__)

# Package groups reported by the analysis, keyed by report name
PACKAGE_GROUPS: Dict[str, tuple] = {
    "reown": ("reown", "appkit", "web3modal"),
    "walletconnect": ("walletconnect",),
    "privy": ("privy",),
}

# Wagmi hooks known to keep working under ParaProvider (wagmi v1 and v2 names)
WAGMI_COMPATIBLE_HOOKS = frozenset({
    "useAccount", "useBalance", "useBlockNumber", "useConnect", "useDisconnect",
    "useEnsName", "useEnsAvatar", "useNetwork", "useSwitchNetwork", "useContractRead",
    "useContractWrite", "usePrepareContractWrite", "useWaitForTransaction",
    "useSendTransaction", "usePrepareSendTransaction", "useSignMessage",
    "useChainId", "useSwitchChain", "useReadContract", "useWriteContract",
    "useWaitForTransactionReceipt", "useSignTypedData", "useConfig",
})

# Always-applicable rules learned from failed migrations
CRITICAL_RECOMMENDATIONS = (
    "CRITICAL: Always include <{modal} /> inside {provider}",
    "CRITICAL: Import \"{stylesheet}\" in your main entry point",
    "CRITICAL: Use Environment.DEVELOPMENT/PRODUCTION from {core_package}",
)


def group_packages(dependencies: Dict[str, str]) -> Dict[str, List[str]]:
    """Source-provider package names per group, in dependency order."""
    return {
        group: [name for name in dependencies if any(fp in name for fp in fingerprints)]
        for group, fingerprints in PACKAGE_GROUPS.items()
    }


def count_usage(state: ProjectState, target: TargetSettings) -> Dict[str, int]:
    tags = [imp.provider_tag for imp in state.imports]
    hook_tags = [classify_module(h.source_module, target.package) for h in state.hooks]
    return {
        "privy_imports": tags.count(ProviderTag.PRIVY),
        "reown_imports": tags.count(ProviderTag.REOWN),
        "web3modal_imports": tags.count(ProviderTag.WEB3MODAL),
        "wagmi_imports": tags.count(ProviderTag.WAGMI),
        "source_providers": sum(
            1 for p in state.providers if p.provider_name != target.provider_component
        ),
        "source_hooks": sum(1 for tag in hook_tags if tag in SOURCE_PROVIDER_TAGS),
        "wagmi_hooks": hook_tags.count(ProviderTag.WAGMI),
    }


def estimate_complexity(total_packages: int, total_usage: int) -> str:
    if total_packages <= 2 and total_usage <= 10:
        return "Low"
    if total_packages <= 5 and total_usage <= 25:
        return "Medium"
    return "High"


def generate_recommendations(
    packages: Dict[str, List[str]],
    usage: Dict[str, int],
    settings: Settings,
) -> List[str]:
    target = settings.target
    recommendations: List[str] = []

    if packages["reown"]:
        recommendations.append(
            f"Remove {', '.join(packages['reown'])} and replace with {target.package}"
        )
    if packages["walletconnect"]:
        recommendations.append(
            "WalletConnect packages may conflict with Para - consider removing unused ones"
        )
    if packages["privy"]:
        recommendations.append(
            f"Remove {', '.join(packages['privy'])} and replace with {target.package}"
        )
    if usage["source_providers"]:
        recommendations.append(
            f"Replace {usage['source_providers']} provider setup(s) with "
            f"{target.provider_component}"
        )
    if usage["source_hooks"]:
        recommendations.append(
            f"Replace {usage['source_hooks']} provider hook call(s) with Para equivalents"
        )
    if usage["wagmi_hooks"]:
        recommendations.append("Existing Wagmi hooks keep working with Para")

    recommendations.extend(
        rule.format(
            modal=target.modal_component,
            provider=target.provider_component,
            stylesheet=target.stylesheet,
            core_package=target.core_package,
        )
        for rule in CRITICAL_RECOMMENDATIONS
    )
    return recommendations


def analyze_state(state: ProjectState, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Analysis report for an already-scanned state."""
    settings = settings or get_settings()
    packages = group_packages(state.dependencies)
    usage = count_usage(state, settings.target)
    total_packages = sum(len(names) for names in packages.values())
    total_usage = sum(usage.values())

    return {
        "packages": packages,
        "total_packages_to_migrate": total_packages,
        "usage": usage,
        "entry_points": sorted(state.entry_points),
        "complexity": estimate_complexity(total_packages, total_usage),
        "strategy": StrategyRegistry.detect_strategy(state, settings.strategy_priority),
        "migration_score": AtomicValidator(settings.target).calculate_migration_success(state),
        "recommendations": generate_recommendations(packages, usage, settings),
    }


def analyze_project(root: str, scanner=None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Scan *root* and return its analysis report.

    Raises:
        ScanError: If the project cannot be scanned.
    """
    settings = settings or get_settings()
    if scanner is None:
        from ..scanner import FileSystemScanner
        scanner = FileSystemScanner(settings.target)

    state = scanner.scan(root)
    report = analyze_state(state, settings)
    report["project_root"] = root
    logger.info(
        f"Analyzed {root}: {report['complexity']} complexity, "
        f"strategy={report['strategy']}, score={report['migration_score']}"
    )
    return report


# ── Wagmi compatibility ─────────────────────────────────────────────────


def _files_importing(state: ProjectState, predicate) -> int:
    return len({imp.file for imp in state.imports if predicate(imp)})


def check_compatibility(state: ProjectState, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Wagmi hook compatibility report for an already-scanned state.

    Hooks in :data:`WAGMI_COMPATIBLE_HOOKS` are reported compatible; any
    other Wagmi hook is reported as needing manual review.  Import counts
    are numbers of files.
    """
    settings = settings or get_settings()
    package = settings.target.package

    details: List[Dict[str, Any]] = []
    for hook in state.hooks:
        if classify_module(hook.source_module, package) != ProviderTag.WAGMI:
            continue
        compatible = hook.hook_name in WAGMI_COMPATIBLE_HOOKS
        details.append({
            "file": hook.file,
            "line": hook.line,
            "hook": hook.hook_name,
            "compatible": compatible,
            "note": (
                "This Wagmi hook will continue to work with Para" if compatible
                else "Not verified against Para - test this hook after migration"
            ),
        })

    found = len(details)
    compatible_count = sum(1 for d in details if d["compatible"])
    wagmi_hooks = {
        "found": found,
        "compatible": compatible_count,
        "incompatible": found - compatible_count,
        "details": details,
    }
    imports = {
        "wagmi_imports": _files_importing(
            state, lambda imp: imp.provider_tag == ProviderTag.WAGMI
        ),
        "reown_imports": _files_importing(
            state, lambda imp: imp.provider_tag in (ProviderTag.REOWN, ProviderTag.WEB3MODAL)
        ),
        "walletconnect_imports": _files_importing(
            state, lambda imp: "@walletconnect" in imp.source_module
        ),
    }

    recommendations: List[str] = []
    if found:
        recommendations.append(
            f"Found {found} Wagmi hook call(s); "
            f"{compatible_count} will continue to work with Para"
        )
    if imports["reown_imports"]:
        recommendations.append("Update ReOwn/Web3Modal imports to Para SDK imports")
    if wagmi_hooks["incompatible"]:
        recommendations.append(
            f"Review {wagmi_hooks['incompatible']} potentially incompatible hook call(s)"
        )
    recommendations.append("Test all wallet functionality after migration")

    return {
        "wagmi_hooks": wagmi_hooks,
        "imports": imports,
        "recommendations": recommendations,
        "compatibility_score": round(compatible_count / found * 100) if found else 100,
    }


def check_project_compatibility(
    root: str, scanner=None, settings: Optional[Settings] = None
) -> Dict[str, Any]:
    """Scan *root* and return its Wagmi compatibility report.

    Raises:
        ScanError: If the project cannot be scanned.
    """
    settings = settings or get_settings()
    if scanner is None:
        from ..scanner import FileSystemScanner
        scanner = FileSystemScanner(settings.target)

    report = check_compatibility(scanner.scan(root), settings)
    report["project_root"] = root
    logger.info(
        f"Compatibility for {root}: {report['wagmi_hooks']['found']} Wagmi hooks, "
        f"score={report['compatibility_score']}"
    )
    return report

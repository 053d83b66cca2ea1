"""ReOwn (AppKit) → Para replacement strategy.

AppKit is the successor of Web3Modal, so a ReOwn project frequently
still carries ``@web3modal`` packages and imports.  This strategy cleans
those up as well, but never selects itself on a Web3Modal-only project.
The existing Wagmi config is carried into the Para provider.
"""

from typing import Any, Dict, Mapping

from ...constants import STRATEGY_REOWN
from ..models import ProviderTag
from .base import ReplacementStrategy

_PROVIDER_SYMBOLS = ("ParaProvider", "ParaModal")


class ReownToParaStrategy(ReplacementStrategy):

    strategy_name = STRATEGY_REOWN
    display_name = "ReOwn AppKit -> Para"

    fingerprints = ("reown", "appkit")
    legacy_fingerprints = ("web3modal",)
    source_tags = frozenset({ProviderTag.REOWN, ProviderTag.WEB3MODAL})

    estimated_duration_seconds = 150

    IMPORT_SYMBOL_MAP = {
        "useAppKit": ("useModal",),
        "useAppKitAccount": ("useAccount",),
        "useAppKitTheme": ("useModal",),
        "useAppKitState": ("useAccount",),
        "useAppKitEvents": ("useWallet",),
        "useWalletInfo": ("useWallet",),
        "useWeb3Modal": ("useModal",),
        "useWeb3ModalAccount": ("useAccount",),
        "useWeb3ModalTheme": ("useModal",),
        "useWeb3ModalState": ("useAccount",),
        "createAppKit": _PROVIDER_SYMBOLS,
        "createWeb3Modal": _PROVIDER_SYMBOLS,
        "AppKit": _PROVIDER_SYMBOLS,
        "AppKitProvider": _PROVIDER_SYMBOLS,
        "defaultWagmiConfig": ("wagmiConfig",),
    }

    HOOK_MAP = {
        "useAppKit": "useModal",
        "useAppKitAccount": "useAccount",
        "useAppKitTheme": "useModal",
        "useAppKitState": "useAccount",
        "useAppKitEvents": "useWallet",
        "useWalletInfo": "useWallet",
        "useWeb3Modal": "useModal",
        "useWeb3ModalAccount": "useAccount",
        "useWeb3ModalTheme": "useModal",
        "useWeb3ModalState": "useAccount",
    }

    PROVIDER_COMPONENTS = ("AppKit", "AppKitProvider", "createAppKit", "Web3Modal", "createWeb3Modal")

    PROP_MAP = {
        "projectId": None,
        "metadata": "metadata",
        "wagmiConfig": "wagmiConfig",
    }

    def map_provider_props(self, props: Mapping[str, Any]) -> Dict[str, Any]:
        mapped = super().map_provider_props(props)
        # AppKit setups always own a wagmi config; keep it wired
        mapped.setdefault("wagmiConfig", "wagmiConfig")
        return mapped

"""Web3Modal → Para replacement strategy."""

from ...constants import STRATEGY_WEB3MODAL
from ..models import ProviderTag
from .base import ReplacementStrategy


class Web3ModalToParaStrategy(ReplacementStrategy):

    strategy_name = STRATEGY_WEB3MODAL
    display_name = "Web3Modal -> Para"

    fingerprints = ("web3modal",)
    source_tags = frozenset({ProviderTag.WEB3MODAL})

    estimated_duration_seconds = 120

    IMPORT_SYMBOL_MAP = {
        "useWeb3Modal": ("useModal",),
        "useWeb3ModalAccount": ("useAccount",),
        "useWeb3ModalTheme": ("useModal",),
        "useWeb3ModalState": ("useAccount",),
        "createWeb3Modal": ("ParaProvider", "ParaModal"),
        "Web3Modal": ("ParaProvider", "ParaModal"),
        "defaultWagmiConfig": ("wagmiConfig",),
    }

    HOOK_MAP = {
        "useWeb3Modal": "useModal",
        "useWeb3ModalAccount": "useAccount",
        "useWeb3ModalTheme": "useModal",
        "useWeb3ModalState": "useAccount",
    }

    PROVIDER_COMPONENTS = ("Web3Modal", "Web3ModalProvider", "createWeb3Modal")

    PROP_MAP = {
        "projectId": None,
        "wagmiConfig": "wagmiConfig",
        "themeMode": None,
    }


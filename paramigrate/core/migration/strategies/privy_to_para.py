"""Privy → Para replacement strategy.

Complete replacement, no compatibility layer: every ``@privy-io``
package goes, ``PrivyProvider`` becomes ``ParaProvider`` with the modal
nested inside, and Privy hooks are renamed to their Para equivalents.
"""

from ...constants import STRATEGY_PRIVY
from ..models import ProviderTag
from .base import ReplacementStrategy


class PrivyToParaStrategy(ReplacementStrategy):

    strategy_name = STRATEGY_PRIVY
    display_name = "Privy -> Para"

    fingerprints = ("privy",)
    source_tags = frozenset({ProviderTag.PRIVY})

    estimated_duration_seconds = 180

    IMPORT_SYMBOL_MAP = {
        "usePrivy": ("useAccount",),
        "useWallets": ("useWallet",),
        "useLogin": ("useConnect",),
        "useLogout": ("useDisconnect",),
        "useEmbeddedWallet": ("useWallet",),
        "PrivyProvider": ("ParaProvider", "ParaModal"),
    }

    HOOK_MAP = {
        "usePrivy": "useAccount",
        "useWallets": "useWallet",
        "useLogin": "useConnect",
        "useLogout": "useDisconnect",
        "useEmbeddedWallet": "useWallet",
    }

    PROVIDER_COMPONENTS = ("PrivyProvider",)

    # Source prop -> target config key; None drops the prop
    PROP_MAP = {
        "appId": "apiKey",
        "clientId": None,
        "config": None,
    }


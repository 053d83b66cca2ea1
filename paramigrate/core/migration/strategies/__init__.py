"""Replacement strategies -- provider-specific migration knowledge.

All built-in strategies are registered on import, in default detection
priority order.  :class:`StrategyRegistry` is the single entry point for
the engine to find and build strategies.
"""

from .base import ReplacementStrategy
from .registry import StrategyRegistry, detect_strategy

# ── Register built-in strategies ─────────────────────────────────────

from .privy_to_para import PrivyToParaStrategy
from .reown_to_para import ReownToParaStrategy
from .web3modal_to_para import Web3ModalToParaStrategy

StrategyRegistry.register(PrivyToParaStrategy)
StrategyRegistry.register(ReownToParaStrategy)
StrategyRegistry.register(Web3ModalToParaStrategy)

__all__ = [
    "PrivyToParaStrategy",
    "ReplacementStrategy",
    "ReownToParaStrategy",
    "StrategyRegistry",
    "Web3ModalToParaStrategy",
    "detect_strategy",
]

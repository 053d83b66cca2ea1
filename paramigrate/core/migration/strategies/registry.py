"""Replacement strategy registry.

Simple dict-based registry.  All strategies are registered at import time
via ``strategies/__init__.py``.  No plugin discovery, no entry points --
the provider set is small and ships together.
"""

import logging
from typing import Dict, List, Optional, Sequence, Type

from ...config import TargetSettings
from ...errors import PreconditionError
from ..models import ProjectState
from .base import ReplacementStrategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Registry for replacement strategies.

    Class-level store so the engine can call
    ``StrategyRegistry.detect_strategy(...)`` without holding an instance.
    Insertion order is the default detection priority.
    """

    _strategies: Dict[str, Type[ReplacementStrategy]] = {}

    @classmethod
    def register(cls, strategy_cls: Type[ReplacementStrategy]) -> None:
        """Register a strategy class under its ``strategy_name``."""
        cls._strategies[strategy_cls.strategy_name] = strategy_cls
        logger.info(
            "Registered replacement strategy: %s (%s)",
            strategy_cls.strategy_name,
            strategy_cls.display_name,
        )

    @classmethod
    def create(
        cls, strategy_name: str, target: Optional[TargetSettings] = None
    ) -> ReplacementStrategy:
        """Instantiate the strategy registered as *strategy_name*.

        Raises:
            PreconditionError: If no strategy has that name.
        """
        strategy_cls = cls._strategies.get(strategy_name)
        if strategy_cls is None:
            raise PreconditionError(
                f"Unsupported migration strategy: {strategy_name}. "
                f"Supported: {list(cls._strategies)}"
            )
        return strategy_cls(target)

    @classmethod
    def detect_strategy(
        cls,
        state: ProjectState,
        priority: Optional[Sequence[str]] = None,
    ) -> Optional[str]:
        """Return the first strategy, in *priority* order, whose fingerprints match.

        A project with traces of several providers always resolves to the
        earliest one in *priority*; pass an explicit order to change that.
        """
        for name in priority or list(cls._strategies):
            strategy_cls = cls._strategies.get(name)
            if strategy_cls is None:
                raise PreconditionError(f"Unknown strategy in priority list: {name}")
            if strategy_cls.detect(state):
                logger.info("Detected migration strategy: %s", name)
                return name
        return None

    @classmethod
    def names(cls) -> List[str]:
        return list(cls._strategies)

    @classmethod
    def list_strategies(cls) -> List[Dict]:
        """List all registered strategies with metadata."""
        return [
            {
                "strategy_name": s.strategy_name,
                "display_name": s.display_name,
                "fingerprints": list(s.fingerprints),
                "estimated_duration_seconds": s.estimated_duration_seconds,
            }
            for s in cls._strategies.values()
        ]


def detect_strategy(
    state: ProjectState, priority: Optional[Sequence[str]] = None
) -> Optional[str]:
    return StrategyRegistry.detect_strategy(state, priority)

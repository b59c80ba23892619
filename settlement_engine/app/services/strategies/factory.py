"""
services/strategies/factory.py — Strategy tag → implementation lookup.

The registry is built once at import and never mutated. Strategies are
stateless, so one shared instance per tag is safe for concurrent callers.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from settlement_engine.app.errors import ErrorCode, NotFoundError
from settlement_engine.app.models.suggestion import SettlementStrategyType
from settlement_engine.app.services.strategies.base import SettlementStrategy
from settlement_engine.app.services.strategies.greedy import GreedyLargestFirstStrategy
from settlement_engine.app.services.strategies.smallest_first import SmallestAmountsFirstStrategy


DEFAULT_REGISTRY: Mapping[SettlementStrategyType, SettlementStrategy] = MappingProxyType({
    SettlementStrategyType.GREEDY_MIN_TRANSFERS:   GreedyLargestFirstStrategy(),
    SettlementStrategyType.SMALLEST_AMOUNTS_FIRST: SmallestAmountsFirstStrategy(),
})


def parse_strategy_type(value: SettlementStrategyType | str) -> SettlementStrategyType:
    """Resolves an enum member or its string value; raises STRATEGY_NOT_FOUND (404)."""
    try:
        return SettlementStrategyType(value)
    except ValueError:
        raise NotFoundError(
            ErrorCode.STRATEGY_NOT_FOUND,
            f"Unknown settlement strategy {value!r}. "
            f"Valid values: {', '.join(t.value for t in SettlementStrategyType)}.",
            field="strategy",
        ) from None


class SettlementStrategyFactory:

    def __init__(
            self,
            registry: Mapping[SettlementStrategyType, SettlementStrategy] = DEFAULT_REGISTRY,
    ) -> None:
        self._registry = registry

    def get_strategy(self, strategy_type: SettlementStrategyType | str) -> SettlementStrategy:
        tag = parse_strategy_type(strategy_type)
        strategy = self._registry.get(tag)
        if strategy is None:
            raise NotFoundError(
                ErrorCode.STRATEGY_NOT_FOUND,
                f"No implementation registered for strategy {tag.value!r}.",
                field="strategy",
            )
        return strategy

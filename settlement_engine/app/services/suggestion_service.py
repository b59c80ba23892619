"""
services/suggestion_service.py — Settlement suggestion orchestration.

Composes a BalanceSource (balances for a group) with a strategy looked up
from a SettlementStrategyFactory. Holds no algorithmic logic of its own and
never special-cases a particular strategy: whatever the strategy returns is
passed through verbatim.

Stateless. One engine can serve any number of concurrent callers; strategies
work on private copies of the balance list.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from settlement_engine.app.models.suggestion import SettlementStrategyType, SuggestionResult
from settlement_engine.app.services.balance_service import BalanceSource
from settlement_engine.app.services.strategies.factory import (
    SettlementStrategyFactory,
    parse_strategy_type,
)

logger = logging.getLogger(__name__)


class SettlementSuggestionEngine:

    def __init__(
            self,
            balance_source: BalanceSource,
            strategy_factory: SettlementStrategyFactory | None = None,
    ) -> None:
        self._balance_source = balance_source
        self._strategy_factory = strategy_factory or SettlementStrategyFactory()

    def suggest(
            self,
            group_id: int,
            strategy_type: SettlementStrategyType | str,
            round_to: Decimal | None = None,
    ) -> SuggestionResult:
        """
        Suggests transfers that would settle every balance in the group.

        Raises:
            NotFoundError(STRATEGY_NOT_FOUND) — unknown strategy tag.
            NotFoundError(GROUP_NOT_FOUND)    — the balance source has no such group.
            ValidationError                   — inconsistent group data.
        """
        tag = parse_strategy_type(strategy_type)
        strategy = self._strategy_factory.get_strategy(tag)
        balances = self._balance_source.balances_for(group_id)
        tolerance = self._balance_source.drift_allowance(group_id)

        suggestions = strategy.suggest(balances, round_to, tolerance=tolerance)
        logger.debug(
            "Group %s: %s suggested %d transfer(s)",
            group_id, tag.value, len(suggestions),
        )
        return SuggestionResult(
            group_id=group_id,
            strategy_type=tag,
            suggestions=list(suggestions),
        )

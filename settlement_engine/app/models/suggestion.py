"""
models/suggestion.py — Settlement suggestions and the strategy tag that produced them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal


class SettlementStrategyType(str, enum.Enum):
    """Tags selecting a SettlementStrategy implementation (see strategies/factory.py)."""
    GREEDY_MIN_TRANSFERS   = "greedy_min_transfers"
    SMALLEST_AMOUNTS_FIRST = "smallest_amounts_first"


@dataclass(frozen=True)
class SettlementSuggestion:
    from_user_id: int   # debtor
    to_user_id: int     # creditor
    amount: Decimal     # always > 0


@dataclass(frozen=True)
class SuggestionResult:
    group_id: int
    strategy_type: SettlementStrategyType
    suggestions: list[SettlementSuggestion] = field(default_factory=list)

    @property
    def total_transfers(self) -> int:
        return len(self.suggestions)

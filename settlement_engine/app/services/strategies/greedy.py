"""
services/strategies/greedy.py — Greedy largest-first debt simplification.

Repeatedly matches the largest remaining debtor with the largest remaining
creditor until one side runs out. Minimises the number of transfers in
common small-group cases; not provably optimal in general. For N members,
produces at most N-1 transfers.
"""

from __future__ import annotations

from decimal import Decimal

from settlement_engine.app.models.suggestion import SettlementSuggestion
from settlement_engine.app.services.strategies.base import Party, SettlementStrategy


def _largest(parties: list[Party]) -> Party | None:
    """Largest magnitude among the active parties; ties go to the earlier input."""
    active = [p for p in parties if not p.retired]
    if not active:
        return None
    return max(active, key=lambda p: (p.magnitude, -p.order))


class GreedyLargestFirstStrategy(SettlementStrategy):

    def _match(
            self,
            debtors: list[Party],
            creditors: list[Party],
            round_to: Decimal | None,
            suggestions: list[SettlementSuggestion],
    ) -> None:
        while True:
            debtor = _largest(debtors)
            creditor = _largest(creditors)
            if debtor is None or creditor is None:
                return
            self._transfer(debtor, creditor, round_to, suggestions)

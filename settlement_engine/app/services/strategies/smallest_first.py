"""
services/strategies/smallest_first.py — Settle the smallest balances first.

Works through debtors in ascending order of |balance|; each debtor pays the
creditors (also visited smallest first) until its debt is cleared or no
creditor with an outstanding balance is left. Produces more, smaller
transfers than the greedy strategy but clears near-zero balances early.
"""

from __future__ import annotations

from decimal import Decimal

from settlement_engine.app.models.suggestion import SettlementSuggestion
from settlement_engine.app.services.strategies.base import Party, SettlementStrategy


def _by_magnitude(parties: list[Party]) -> list[Party]:
    # sorted() is stable, so equal magnitudes keep their input order.
    return sorted(parties, key=lambda p: p.magnitude)


class SmallestAmountsFirstStrategy(SettlementStrategy):

    def _match(
            self,
            debtors: list[Party],
            creditors: list[Party],
            round_to: Decimal | None,
            suggestions: list[SettlementSuggestion],
    ) -> None:
        ordered_creditors = _by_magnitude(creditors)

        for debtor in _by_magnitude(debtors):
            for creditor in ordered_creditors:
                if creditor.retired:
                    continue
                self._transfer(debtor, creditor, round_to, suggestions)
                if debtor.retired:
                    break

"""
services/strategies/base.py — Shared contract and helpers for settlement strategies.

Every strategy consumes a list of UserBalances (positive = creditor) and an
optional rounding increment, and returns an ordered list of
SettlementSuggestions. Guarantees, for every implementation:

  - The caller's list is never mutated; work happens on Party copies.
  - Every suggestion has amount > 0, a debtor as from_user_id, a creditor as
    to_user_id, and from_user_id != to_user_id.
  - Without an increment, applying the suggestions in order zeroes every
    balance exactly. With one, each transfer is snapped to the nearest
    multiple and may leave up to half an increment behind on its parties.
    Those per-transfer residuals add up, so a party touched by several
    transfers can end further than one increment from zero.
  - At most N-1 suggestions for N non-zero balances. Each transfer retires at
    least one party (see _transfer), and a retired party is never used again.

Input balances must sum to zero within the caller's tolerance, or one cent
per entry when none is given. Anything beyond that raises
BALANCE_SUM_MISMATCH.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from settlement_engine.app.errors import ErrorCode, ValidationError
from settlement_engine.app.models.balance import UserBalance
from settlement_engine.app.models.money import CENT, ZERO, snap_to_increment
from settlement_engine.app.models.suggestion import SettlementSuggestion


@dataclass
class Party:
    """Mutable working copy of one balance. `order` is the input position."""
    user_id: int
    balance: Decimal
    order: int
    retired: bool = False

    @property
    def magnitude(self) -> Decimal:
        return abs(self.balance)


class SettlementStrategy(ABC):

    def suggest(
            self,
            balances: Sequence[UserBalance],
            round_to: Decimal | None = None,
            tolerance: Decimal | None = None,
    ) -> list[SettlementSuggestion]:
        """
        Returns the ordered transfers that settle `balances`.

        A round_to that is None, zero or negative means no rounding.
        tolerance bounds |sum(balances)|; None means one cent per balance.
        """
        if tolerance is None:
            tolerance = CENT * len(balances)
        self._check_zero_sum(balances, tolerance)

        debtors: list[Party] = []
        creditors: list[Party] = []
        for order, b in enumerate(balances):
            if b.is_debtor:
                debtors.append(Party(b.user_id, b.balance, order))
            elif b.is_creditor:
                creditors.append(Party(b.user_id, b.balance, order))

        suggestions: list[SettlementSuggestion] = []
        self._match(debtors, creditors, round_to, suggestions)
        return suggestions

    @abstractmethod
    def _match(
            self,
            debtors: list[Party],
            creditors: list[Party],
            round_to: Decimal | None,
            suggestions: list[SettlementSuggestion],
    ) -> None:
        """Appends transfers to `suggestions`, mutating only the Party copies."""

    # ── Shared helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _check_zero_sum(balances: Sequence[UserBalance], tolerance: Decimal) -> None:
        total = sum((b.balance for b in balances), ZERO)
        if abs(total) > tolerance:
            raise ValidationError(
                ErrorCode.BALANCE_SUM_MISMATCH,
                f"Balances must sum to zero to be settled (got {total}, "
                f"allowed drift {tolerance}).",
                field="balances",
            )

    @staticmethod
    def _transfer(
            debtor: Party,
            creditor: Party,
            round_to: Decimal | None,
            suggestions: list[SettlementSuggestion],
    ) -> None:
        """
        Moves min(|debtor|, creditor), snapped to round_to, from debtor to creditor.

        Retires the side(s) whose magnitude was the minimum, plus any side whose
        balance reached zero or changed sign through rounding. A transfer that
        snaps to zero is not recorded, but still retires the smaller side.
        """
        debt = debtor.magnitude
        credit = creditor.magnitude
        raw = min(debt, credit)
        amount = snap_to_increment(raw, round_to)

        if amount == ZERO:
            debtor.retired = debt == raw
            creditor.retired = credit == raw
            return

        suggestions.append(
            SettlementSuggestion(debtor.user_id, creditor.user_id, amount)
        )
        debtor.balance += amount
        creditor.balance -= amount

        debtor.retired = debt == raw or debtor.balance >= ZERO
        creditor.retired = credit == raw or creditor.balance <= ZERO

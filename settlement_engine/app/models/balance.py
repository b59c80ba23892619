"""
models/balance.py — Net balance per user.

Sign convention: positive = creditor (the group owes this user),
negative = debtor (this user owes the group).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from settlement_engine.app.models.money import ZERO


@dataclass(frozen=True)
class UserBalance:
    user_id: int
    balance: Decimal

    @property
    def is_creditor(self) -> bool:
        return self.balance > ZERO

    @property
    def is_debtor(self) -> bool:
        return self.balance < ZERO

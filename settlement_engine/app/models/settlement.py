"""
models/settlement.py — Recorded settlements and their balance effects.

A Settlement is a payment from one member to another that the caller has
recorded. Its lifecycle (pending → confirmed / rejected) is owned by the
caller; the engine only reads the status. Only confirmed settlements move
balances, and they do so through a SettlementEffect.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable


class SettlementStatus(str, enum.Enum):
    PENDING   = "pending"
    CONFIRMED = "confirmed"
    REJECTED  = "rejected"


@dataclass(frozen=True)
class SettlementEffect:
    from_user_id: int
    to_user_id: int
    amount: Decimal


@dataclass(frozen=True)
class Settlement:
    from_user_id: int
    to_user_id: int
    amount: Decimal
    status: SettlementStatus = SettlementStatus.CONFIRMED
    settlement_id: int | None = None

    @property
    def is_confirmed(self) -> bool:
        return self.status == SettlementStatus.CONFIRMED


def confirmed_effects(settlements: Iterable[Settlement]) -> list[SettlementEffect]:
    """Returns the balance effects of the confirmed settlements, in input order."""
    return [
        SettlementEffect(s.from_user_id, s.to_user_id, s.amount)
        for s in settlements
        if s.is_confirmed
    ]

"""
models/ledger.py — Everything the engine needs to know about one group.

A GroupLedger is supplied whole by the caller (persistence and membership
management are not the engine's concern). Expenses are split requests; an
EQUAL request with no participant_ids is split across member_ids.
"""

from __future__ import annotations

from dataclasses import dataclass

from settlement_engine.app.models.settlement import Settlement
from settlement_engine.app.models.split import ExpenseSplitRequest


@dataclass(frozen=True)
class GroupLedger:
    group_id: int
    member_ids: tuple[int, ...] = ()
    expenses: tuple[ExpenseSplitRequest, ...] = ()
    settlements: tuple[Settlement, ...] = ()

    def is_member(self, user_id: int) -> bool:
        return user_id in self.member_ids

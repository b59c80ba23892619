"""
models/split.py — Expense split request and per-participant share result.

Value objects only. No business logic; ShareSplitter in
services/share_splitter.py turns an ExpenseSplitRequest into ShareResults.

Sign convention for ShareResult.amount: positive means "owes".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal


class SplitPolicy(str, enum.Enum):
    EQUAL   = "equal"
    EXACT   = "exact"
    PERCENT = "percent"


@dataclass(frozen=True)
class ExactShare:
    user_id: int
    # None is accepted and dropped before summation (see share_splitter).
    amount: Decimal | None


@dataclass(frozen=True)
class PercentShare:
    user_id: int
    percent: int


@dataclass(frozen=True)
class ExpenseSplitRequest:
    """
    Input to ShareSplitter.split().

    participant_ids is used by EQUAL only and must already be resolved: an
    empty tuple is an error for the splitter, and group membership is
    substituted upstream (see balance_service.compute_group_balances).
    explicit_shares is used by EXACT, percent_shares by PERCENT.
    """

    total_amount: Decimal
    payer_id: int
    policy: SplitPolicy = SplitPolicy.EQUAL
    participant_ids: tuple[int, ...] = ()
    explicit_shares: tuple[ExactShare, ...] = ()
    percent_shares: tuple[PercentShare, ...] = ()
    expense_id: int | None = None


@dataclass(frozen=True)
class ShareResult:
    user_id: int
    amount: Decimal

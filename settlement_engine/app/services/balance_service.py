"""
services/balance_service.py — Balance aggregation across a group.

This file is the SINGLE SOURCE OF TRUTH for how balances are computed.
The formula must not be reimplemented elsewhere in the codebase.

Sign conventions:
  ShareResult.amount   positive = owes   (produced by share_splitter)
  UserBalance.balance  positive = is owed (creditor), negative = owes (debtor)

  The aggregator therefore inverts each share: balance[user] -= share.amount.
  A confirmed settlement from A to B moves A up and B down by its amount:
  balance[A] += amount, balance[B] -= amount.

Conservation:
  sum(balances) == 0 within the drift the expenses can actually produce.
  EQUAL and EXACT expenses contribute exactly zero and are allowed one cent.
  A PERCENT expense with n shares rounds each share by at most half a cent,
  so it is allowed ceil(n / 2) cents. Beyond the summed allowance the input
  is inconsistent and BALANCE_SUM_MISMATCH is raised.

Everything here is pure: the only "source" is the GroupLedger the caller hands
over. LedgerBalanceSource is the in-process adapter the suggestion engine
reads from.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from decimal import Decimal

from settlement_engine.app.errors import ErrorCode, NotFoundError, ValidationError
from settlement_engine.app.models.balance import UserBalance
from settlement_engine.app.models.ledger import GroupLedger
from settlement_engine.app.models.money import CENT, ZERO
from settlement_engine.app.models.settlement import SettlementEffect, confirmed_effects
from settlement_engine.app.models.split import ExpenseSplitRequest, ShareResult, SplitPolicy
from settlement_engine.app.services import share_splitter

logger = logging.getLogger(__name__)


# ── Core algorithm ─────────────────────────────────────────────────────────

def conservation_tolerance(expense_count: int) -> Decimal:
    """One cent per expense."""
    return CENT * expense_count


def expense_drift_allowance(expense: ExpenseSplitRequest) -> Decimal:
    """
    Largest rounding drift the shares of one expense can carry.

    PERCENT: half a cent per share, in whole cents (at least one).
    Everything else: one cent.
    """
    if expense.policy == SplitPolicy.PERCENT:
        return CENT * max(1, math.ceil(len(expense.percent_shares) / 2))
    return CENT


def ledger_drift_allowance(ledger: GroupLedger) -> Decimal:
    """Sum of expense_drift_allowance() over the ledger's expenses."""
    return sum((expense_drift_allowance(e) for e in ledger.expenses), ZERO)


def aggregate(
        expense_shares: Iterable[Sequence[ShareResult]],
        settlement_effects: Iterable[SettlementEffect] = (),
        member_ids: Iterable[int] = (),
        tolerance: Decimal | None = None,
) -> list[UserBalance]:
    """
    Nets every share and settlement effect into one balance per user.

    Args:
        expense_shares:     One sequence of ShareResults per expense.
        settlement_effects: Effects of confirmed settlements only.
        member_ids:         Users that must appear even with a zero balance.
        tolerance:          Allowed |sum of balances|. Defaults to
                            conservation_tolerance(number of expenses).

    Returns:
        One UserBalance per user, in order of first appearance
        (members, then share users, then settlement users).

    Raises:
        ValidationError(BALANCE_SUM_MISMATCH) — the result does not conserve
        money within the tolerance.
    """
    balances: dict[int, Decimal] = {}

    for member_id in member_ids:
        balances.setdefault(member_id, ZERO)

    expense_count = 0
    for shares in expense_shares:
        expense_count += 1
        for share in shares:
            balances[share.user_id] = balances.get(share.user_id, ZERO) - share.amount

    for effect in settlement_effects:
        balances[effect.from_user_id] = balances.get(effect.from_user_id, ZERO) + effect.amount
        balances[effect.to_user_id] = balances.get(effect.to_user_id, ZERO) - effect.amount

    if tolerance is None:
        tolerance = conservation_tolerance(expense_count)

    total = sum(balances.values(), ZERO)
    if abs(total) > tolerance:
        raise ValidationError(
            ErrorCode.BALANCE_SUM_MISMATCH,
            f"Balances sum to {total} across {expense_count} expense(s); "
            f"allowed drift is {tolerance}.",
        )

    return [UserBalance(uid, bal) for uid, bal in balances.items()]


# ── Ledger helpers ─────────────────────────────────────────────────────────

def resolve_participants(expense: ExpenseSplitRequest, ledger: GroupLedger) -> ExpenseSplitRequest:
    """An EQUAL expense with no participants is split across the whole group."""
    if SplitPolicy(expense.policy) == SplitPolicy.EQUAL and not expense.participant_ids:
        return replace(expense, participant_ids=tuple(ledger.member_ids))
    return expense


def split_ledger_expenses(ledger: GroupLedger) -> list[list[ShareResult]]:
    """Runs share_splitter.split over every expense in the ledger."""
    return [
        share_splitter.split(resolve_participants(expense, ledger))
        for expense in ledger.expenses
    ]


def compute_group_balances(ledger: GroupLedger) -> list[UserBalance]:
    """
    Canonical balance computation for a group.

    Every member appears in the result even if their balance is exactly zero.
    Pending and rejected settlements are ignored. PERCENT rounding drift is
    accepted up to ledger_drift_allowance(ledger).
    """
    balances = aggregate(
        split_ledger_expenses(ledger),
        confirmed_effects(ledger.settlements),
        member_ids=ledger.member_ids,
        tolerance=ledger_drift_allowance(ledger),
    )
    logger.debug("Group %s: computed %d balances", ledger.group_id, len(balances))
    return balances


def owed_between(ledger: GroupLedger, debtor_id: int, creditor_id: int) -> Decimal:
    """
    Bilateral outstanding debt from debtor_id to creditor_id.

    Formula:
      debt = portions the debtor owes on expenses the creditor paid
           - portions the creditor owes on expenses the debtor paid
           - confirmed settlements debtor -> creditor
           + confirmed settlements creditor -> debtor

    Returns:
        The debt if positive, else Decimal("0.00").
    """
    debt = ZERO

    for expense in ledger.expenses:
        if expense.payer_id not in (debtor_id, creditor_id):
            continue
        portions = share_splitter.owed_portions(resolve_participants(expense, ledger))
        for portion in portions:
            if expense.payer_id == creditor_id and portion.user_id == debtor_id:
                debt += portion.amount
            elif expense.payer_id == debtor_id and portion.user_id == creditor_id:
                debt -= portion.amount

    for effect in confirmed_effects(ledger.settlements):
        if (effect.from_user_id, effect.to_user_id) == (debtor_id, creditor_id):
            debt -= effect.amount
        elif (effect.from_user_id, effect.to_user_id) == (creditor_id, debtor_id):
            debt += effect.amount

    return debt if debt > ZERO else ZERO


# ── Balance source ─────────────────────────────────────────────────────────

class BalanceSource(ABC):
    """Supplies the current balances of a group to the suggestion engine."""

    @abstractmethod
    def balances_for(self, group_id: int) -> list[UserBalance]:
        ...

    def drift_allowance(self, group_id: int) -> Decimal | None:
        """
        Rounding drift the group's balances may carry.

        None leaves the strategy's own default (one cent per balance) in place.
        """
        return None


class LedgerBalanceSource(BalanceSource):
    """Computes balances from caller-supplied GroupLedgers keyed by group id."""

    def __init__(self, ledgers: Mapping[int, GroupLedger]) -> None:
        self._ledgers = dict(ledgers)

    @classmethod
    def of(cls, *ledgers: GroupLedger) -> "LedgerBalanceSource":
        return cls({ledger.group_id: ledger for ledger in ledgers})

    def ledger(self, group_id: int) -> GroupLedger:
        """Returns the ledger or raises GROUP_NOT_FOUND (404)."""
        ledger = self._ledgers.get(group_id)
        if ledger is None:
            raise NotFoundError(
                ErrorCode.GROUP_NOT_FOUND,
                f"Group {group_id} does not exist.",
            )
        return ledger

    def balances_for(self, group_id: int) -> list[UserBalance]:
        return compute_group_balances(self.ledger(group_id))

    def drift_allowance(self, group_id: int) -> Decimal:
        return ledger_drift_allowance(self.ledger(group_id))

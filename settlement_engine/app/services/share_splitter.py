"""
services/share_splitter.py — Per-expense share computation.

Turns one ExpenseSplitRequest into one ShareResult per participant.
Pure: no I/O, no membership lookups, no partial results. Either every
share is returned or a ValidationError is raised.

Two views are offered:
  owed_portions(request) — gross "owes" amount per participant, exactly as the
                           policy computes it (payer's own portion included).
  split(request)         — net shares: the payer's entry additionally carries
                           -total for having fronted the expense, so the shares
                           of one expense sum to zero.

Policies:
  EQUAL    perHead = round_half_up(total / count). Non-payers owe perHead.
           The payer's net share is -(count - 1) * perHead, i.e.
           perHead - total plus the rounding remainder: the payer absorbs the
           whole remainder and the sum is exactly zero.
  EXACT    Literal amounts, normalised to cents. Entries with amount None are
           dropped before summation. sum(amounts) must equal total exactly.
  PERCENT  round_half_up(total * percent / 100) each. sum(percent) must be 100.
           Rounding drift (up to half a cent per share) is NOT corrected;
           the net shares of such an expense may miss zero by it.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from settlement_engine.app.errors import ErrorCode, ValidationError
from settlement_engine.app.models.money import ZERO, round_half_up, to_money
from settlement_engine.app.models.split import ExpenseSplitRequest, ShareResult, SplitPolicy

logger = logging.getLogger(__name__)

_HUNDRED = Decimal(100)


# ── Private helpers ────────────────────────────────────────────────────────

def _validate_total(request: ExpenseSplitRequest) -> None:
    """Raises INVALID_AMOUNT (422) if the expense total is not strictly positive."""
    if request.total_amount <= ZERO:
        raise ValidationError(
            ErrorCode.INVALID_AMOUNT,
            f"Expense amount must be greater than zero (got {request.total_amount}).",
            field="total_amount",
        )


def _validate_unique(user_ids: list[int], field: str) -> None:
    """Raises DUPLICATE_SPLIT_USER (422) for the first user_id listed twice."""
    seen: set[int] = set()
    for uid in user_ids:
        if uid in seen:
            raise ValidationError(
                ErrorCode.DUPLICATE_SPLIT_USER,
                f"User {uid} appears more than once in {field}.",
                field=field,
            )
        seen.add(uid)


def _validate_payer_present(payer_id: int, user_ids: Iterable[int], field: str) -> None:
    """
    Raises PAYER_NOT_PARTICIPANT (422) if the payer has no share entry.

    Group membership is the caller's check; this only guards against being
    asked to net the payer's credit into a share that does not exist.
    """
    if payer_id not in set(user_ids):
        raise ValidationError(
            ErrorCode.PAYER_NOT_PARTICIPANT,
            f"Payer {payer_id} is not among the participants of this expense.",
            field=field,
        )


def _equal_portions(request: ExpenseSplitRequest) -> list[ShareResult]:
    participant_ids = list(request.participant_ids)
    if not participant_ids:
        raise ValidationError(
            ErrorCode.NO_PARTICIPANTS,
            "An equal split needs at least one participant.",
            field="participant_ids",
        )
    _validate_unique(participant_ids, "participant_ids")
    _validate_payer_present(request.payer_id, participant_ids, "participant_ids")

    per_head = round_half_up(request.total_amount / Decimal(len(participant_ids)))
    return [ShareResult(uid, per_head) for uid in participant_ids]


def _exact_portions(request: ExpenseSplitRequest) -> list[ShareResult]:
    # Entries without an amount are dropped, not treated as zero.
    entries = [s for s in request.explicit_shares if s.amount is not None]
    user_ids = [s.user_id for s in entries]
    _validate_unique(user_ids, "explicit_shares")

    total = sum((to_money(s.amount) for s in entries), ZERO)
    if total != to_money(request.total_amount):
        raise ValidationError(
            ErrorCode.SPLIT_SUM_MISMATCH,
            f"Split amounts must total {request.total_amount} (got {total}).",
            field="explicit_shares",
        )
    _validate_payer_present(request.payer_id, user_ids, "explicit_shares")
    return [ShareResult(s.user_id, to_money(s.amount)) for s in entries]


def _percent_portions(request: ExpenseSplitRequest) -> list[ShareResult]:
    entries = list(request.percent_shares)
    user_ids = [s.user_id for s in entries]
    _validate_unique(user_ids, "percent_shares")

    percent_sum = sum(s.percent for s in entries)
    if percent_sum != 100:
        raise ValidationError(
            ErrorCode.PERCENT_SUM_MISMATCH,
            f"Split percentages must total 100 (got {percent_sum}).",
            field="percent_shares",
        )
    _validate_payer_present(request.payer_id, user_ids, "percent_shares")
    return [
        ShareResult(s.user_id, round_half_up(request.total_amount * s.percent / _HUNDRED))
        for s in entries
    ]


_PORTION_BUILDERS = {
    SplitPolicy.EQUAL:   _equal_portions,
    SplitPolicy.EXACT:   _exact_portions,
    SplitPolicy.PERCENT: _percent_portions,
}


# ── Public functions ───────────────────────────────────────────────────────

def owed_portions(request: ExpenseSplitRequest) -> list[ShareResult]:
    """
    Returns each participant's gross owed portion, in participant order.

    Example: PERCENT, total 100.00, {1: 60, 2: 40} → [(1, 60.00), (2, 40.00)].

    Raises:
        ValidationError — see the module docstring for the per-policy rules.
    """
    _validate_total(request)
    try:
        builder = _PORTION_BUILDERS[SplitPolicy(request.policy)]
    except ValueError:
        raise ValidationError(
            ErrorCode.INVALID_SPLIT_POLICY,
            f"Unknown split policy {request.policy!r}. "
            f"Valid values: {', '.join(p.value for p in SplitPolicy)}.",
            field="policy",
        ) from None
    return builder(request)


def split(request: ExpenseSplitRequest) -> list[ShareResult]:
    """
    Returns each participant's net share (positive = owes), in participant order.

    The payer's entry is their owed portion minus the expense total. For EQUAL
    splits it is computed as the negated sum of everyone else's portion, which
    places the whole rounding remainder on the payer:

        100.00 / {1, 2, 3}, payer 1 → [(1, -66.66), (2, 33.33), (3, 33.33)]
    """
    portions = owed_portions(request)
    payer_id = request.payer_id

    if SplitPolicy(request.policy) == SplitPolicy.EQUAL:
        others = sum((p.amount for p in portions if p.user_id != payer_id), ZERO)
        payer_share = ZERO - others
    else:
        payer_portion = next(p.amount for p in portions if p.user_id == payer_id)
        payer_share = payer_portion - to_money(request.total_amount)

    shares = [
        ShareResult(p.user_id, payer_share if p.user_id == payer_id else p.amount)
        for p in portions
    ]
    logger.debug(
        "Split %s of %s paid by %s into %d shares",
        request.policy, request.total_amount, payer_id, len(shares),
    )
    return shares

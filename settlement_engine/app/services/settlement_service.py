"""
services/settlement_service.py — Checks for a proposed settlement.

Nothing is recorded here: the caller owns settlement persistence and the
pending → confirmed lifecycle. This module only answers "may A pay B this
amount?" against a GroupLedger.

Rules:
  SELF_SETTLEMENT (422)          — from_user_id must not equal to_user_id
  PAYER_NOT_MEMBER (422)         — from_user_id must be a group member
  RECIPIENT_NOT_MEMBER (422)     — to_user_id must be a group member
  INVALID_AMOUNT (422)           — amount must be strictly positive
  SETTLEMENT_EXCEEDS_OWED (422)  — amount > bilateral debt, when the owed
                                   limit is enforced
  OVERPAYMENT (warning)          — amount > bilateral debt, when the owed
                                   limit is NOT enforced. Pre-payment is valid.
"""

from __future__ import annotations

from decimal import Decimal

from settlement_engine.app.errors import ErrorCode, ValidationError, WarningCode
from settlement_engine.app.models.ledger import GroupLedger
from settlement_engine.app.models.money import ZERO
from settlement_engine.app.services.balance_service import owed_between


def check_settlement(
        ledger: GroupLedger,
        from_user_id: int,
        to_user_id: int,
        amount: Decimal,
        enforce_owed_limit: bool = True,
) -> list[dict]:
    """
    Validates a proposed settlement and returns any warnings.

    Returns:
        [] when the amount is within what is owed, otherwise (limit not
        enforced) a single OVERPAYMENT warning dict.

    Raises:
        ValidationError — see the module docstring.
    """
    if from_user_id == to_user_id:
        raise ValidationError(
            ErrorCode.SELF_SETTLEMENT,
            "A user cannot settle with themselves.",
            field="to_user_id",
        )
    if not ledger.is_member(from_user_id):
        raise ValidationError(
            ErrorCode.PAYER_NOT_MEMBER,
            f"User {from_user_id} is not a member of group {ledger.group_id}.",
            field="from_user_id",
        )
    if not ledger.is_member(to_user_id):
        raise ValidationError(
            ErrorCode.RECIPIENT_NOT_MEMBER,
            f"User {to_user_id} is not a member of group {ledger.group_id}.",
            field="to_user_id",
        )
    if amount <= ZERO:
        raise ValidationError(
            ErrorCode.INVALID_AMOUNT,
            "Settlement amount must be greater than zero.",
            field="amount",
        )

    owed = owed_between(ledger, from_user_id, to_user_id)
    if amount <= owed:
        return []

    if enforce_owed_limit:
        raise ValidationError(
            ErrorCode.SETTLEMENT_EXCEEDS_OWED,
            "Cannot settle more than owed",
            field="amount",
        )
    return [{
        "code": WarningCode.OVERPAYMENT,
        "message": (
            f"Settlement of {amount} exceeds the {owed} currently owed by user "
            f"{from_user_id} to user {to_user_id}."
        ),
    }]

"""
schemas/settlement_schema.py — Marshmallow schema for recorded settlements.

Field rules only. Self-settlement and membership are checked in
services/settlement_service.py because they need the group ledger.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import Schema, ValidationError, fields, post_load, validate

from settlement_engine.app.errors import ErrorCode
from settlement_engine.app.models.money import to_money
from settlement_engine.app.models.settlement import Settlement, SettlementStatus


# ── Shared monetary amount validator ──────────────────────────────────────
#
# Identical logic to the validator in expense_schema.py. Defined here
# rather than imported to keep each schema file self-contained.
# ──────────────────────────────────────────────────────────────────────────

def _validate_monetary_amount(value: Decimal) -> None:
    """
    Validates a monetary Decimal value:
      - Must be strictly greater than zero.
      - Must have at most 2 decimal places (INVALID_AMOUNT_PRECISION otherwise).
    """
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


class SettlementInputSchema(Schema):
    """
    A settlement the caller has already recorded.

    Only 'confirmed' settlements affect balances; 'pending' and 'rejected'
    ones are accepted and ignored so callers can send their full history.
    """

    settlement_id = fields.Int(strict=True, load_default=None)

    from_user_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="from_user_id must be a positive integer."),
    )

    to_user_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="to_user_id must be a positive integer."),
    )

    amount = fields.Decimal(
        required=True,
        validate=_validate_monetary_amount,
    )

    status = fields.Enum(
        SettlementStatus,
        load_default=SettlementStatus.CONFIRMED,
        by_value=True,
    )

    @post_load
    def make_settlement(self, data: dict, **kwargs) -> Settlement:
        data["amount"] = to_money(data["amount"])
        return Settlement(**data)

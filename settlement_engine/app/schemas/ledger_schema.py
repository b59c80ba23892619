"""
schemas/ledger_schema.py — Marshmallow schemas for a whole group's data.

The group id always comes from the URL, never the body. ledger_from_payload()
combines the two into a GroupLedger.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import Schema, ValidationError, fields, post_load, validate, validates_schema

from settlement_engine.app.errors import ErrorCode
from settlement_engine.app.models.ledger import GroupLedger
from settlement_engine.app.models.money import to_money
from settlement_engine.app.schemas.expense_schema import ExpenseSplitSchema
from settlement_engine.app.schemas.settlement_schema import SettlementInputSchema


def _validate_monetary_amount(value: Decimal) -> None:
    """Strictly positive, at most 2 decimal places (same rule as settlement_schema)."""
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


class LedgerSchema(Schema):
    """
    Members, expenses and recorded settlements of one group.

    member_ids drives EQUAL splits sent without participant_ids and makes
    members with no activity show up with a 0.00 balance.
    """

    member_ids = fields.List(
        fields.Int(
            strict=True,
            validate=validate.Range(min=1, error="member_ids must be positive integers."),
        ),
        load_default=list,
    )

    expenses = fields.List(fields.Nested(ExpenseSplitSchema), load_default=list)

    settlements = fields.List(fields.Nested(SettlementInputSchema), load_default=list)

    @validates_schema
    def validate_unique_members(self, data: dict, **kwargs) -> None:
        member_ids = data.get("member_ids") or []
        if len(member_ids) != len(set(member_ids)):
            raise ValidationError({"member_ids": ["member_ids must not contain duplicates."]})


class SettlementCheckSchema(LedgerSchema):
    """A ledger plus the settlement being proposed against it."""

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

    # Default mirrors the strict behaviour: refuse to settle more than owed.
    enforce_owed_limit = fields.Bool(load_default=True)

    @post_load
    def normalise_amount(self, data: dict, **kwargs) -> dict:
        data["amount"] = to_money(data["amount"])
        return data


def ledger_from_payload(group_id: int, data: dict) -> GroupLedger:
    """Builds a GroupLedger from LedgerSchema (or subclass) output."""
    return GroupLedger(
        group_id=group_id,
        member_ids=tuple(data["member_ids"]),
        expenses=tuple(data["expenses"]),
        settlements=tuple(data["settlements"]),
    )

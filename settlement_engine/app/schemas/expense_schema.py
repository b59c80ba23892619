"""
schemas/expense_schema.py — Marshmallow schemas for expense split requests.

Validation responsibility:
  - This file (400, request shape):
      - Field types, enum values, decimal precision
      - explicit_shares required for policy 'exact'
      - percent_shares required for policy 'percent'
      - DUPLICATE_SPLIT_USER — same user_id twice in one list
  - services/share_splitter.py (422, arithmetic):
      - SPLIT_SUM_MISMATCH, PERCENT_SUM_MISMATCH — require Decimal/int sums
      - NO_PARTICIPANTS — an EQUAL split left without participants
      - PAYER_NOT_PARTICIPANT — payer has no share entry

A successful load() returns an ExpenseSplitRequest, not a dict.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import (
    Schema,
    ValidationError,
    fields,
    post_load,
    validate,
    validates_schema,
)

from settlement_engine.app.errors import ErrorCode
from settlement_engine.app.models.money import to_money
from settlement_engine.app.models.split import (
    ExactShare,
    ExpenseSplitRequest,
    PercentShare,
    SplitPolicy,
)


# ── Shared monetary amount validators ─────────────────────────────────────
#
# Input with more than 2 decimal places is REJECTED with
# INVALID_AMOUNT_PRECISION, never rounded or truncated.
# ──────────────────────────────────────────────────────────────────────────

def _validate_precision(value: Decimal) -> None:
    # Decimal.as_tuple().exponent gives the scale as a negative integer.
    # e.g. Decimal("10.123").as_tuple().exponent == -3 → 3 dp → REJECT
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


def _validate_monetary_amount(value: Decimal) -> None:
    """Strictly positive, at most 2 decimal places."""
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")
    _validate_precision(value)


def _validate_share_amount(value: Decimal | None) -> None:
    """Zero or positive, at most 2 decimal places. None is allowed (dropped later)."""
    if value is None:
        return
    if value < Decimal("0"):
        raise ValidationError("Share amount must not be negative.")
    _validate_precision(value)


def _user_id_field(name: str, **kwargs) -> fields.Int:
    return fields.Int(
        strict=True,   # reject floats like 1.0
        validate=validate.Range(min=1, error=f"{name} must be a positive integer."),
        **kwargs,
    )


def _reject_duplicates(user_ids: list[int], field_name: str) -> None:
    if len(user_ids) != len(set(user_ids)):
        raise ValidationError({field_name: [ErrorCode.DUPLICATE_SPLIT_USER]})


# ── Sub-schemas: one entry in explicit_shares / percent_shares ────────────

class ExactShareInputSchema(Schema):

    user_id = _user_id_field("user_id", required=True)

    # A null amount is accepted and dropped by the splitter before summation.
    amount = fields.Decimal(
        required=True,
        allow_none=True,
        validate=_validate_share_amount,
    )


class PercentShareInputSchema(Schema):

    user_id = _user_id_field("user_id", required=True)

    percent = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=0, max=100, error="percent must be between 0 and 100."),
    )


# ── Expense split request ──────────────────────────────────────────────────

class ExpenseSplitSchema(Schema):
    """
    One expense to split.

    Policy behaviour:
      - 'equal'   → participant_ids (optional; empty = whole group when the
                    expense is part of a ledger).
      - 'exact'   → explicit_shares required.
      - 'percent' → percent_shares required.
    """

    expense_id = fields.Int(strict=True, load_default=None)

    total_amount = fields.Decimal(
        required=True,
        validate=_validate_monetary_amount,
    )

    payer_id = _user_id_field("payer_id", required=True)

    policy = fields.Enum(
        SplitPolicy,
        load_default=SplitPolicy.EQUAL,
        by_value=True,
        error_messages={"unknown": ErrorCode.INVALID_SPLIT_POLICY},
    )

    participant_ids = fields.List(
        _user_id_field("participant_ids"),
        load_default=list,
    )

    explicit_shares = fields.List(
        fields.Nested(ExactShareInputSchema),
        load_default=None,
    )

    percent_shares = fields.List(
        fields.Nested(PercentShareInputSchema),
        load_default=None,
    )

    @validates_schema
    def validate_shares_coherence(self, data: dict, **kwargs) -> None:
        """
        Request-shape checks only. Sums are checked by share_splitter because
        they need Decimal arithmetic, and the result must be identical for
        callers that bypass the HTTP layer.
        """
        policy = data.get("policy", SplitPolicy.EQUAL)

        _reject_duplicates(data.get("participant_ids") or [], "participant_ids")

        if policy == SplitPolicy.EXACT:
            shares = data.get("explicit_shares")
            if shares is None:
                raise ValidationError(
                    {"explicit_shares": ["explicit_shares is required when policy is 'exact'."]}
                )
            _reject_duplicates([s["user_id"] for s in shares], "explicit_shares")

        elif policy == SplitPolicy.PERCENT:
            shares = data.get("percent_shares")
            if shares is None:
                raise ValidationError(
                    {"percent_shares": ["percent_shares is required when policy is 'percent'."]}
                )
            _reject_duplicates([s["user_id"] for s in shares], "percent_shares")

    @post_load
    def make_request(self, data: dict, **kwargs) -> ExpenseSplitRequest:
        return ExpenseSplitRequest(
            total_amount=to_money(data["total_amount"]),
            payer_id=data["payer_id"],
            policy=data["policy"],
            participant_ids=tuple(data["participant_ids"]),
            explicit_shares=tuple(
                ExactShare(s["user_id"], None if s["amount"] is None else to_money(s["amount"]))
                for s in data.get("explicit_shares") or []
            ),
            percent_shares=tuple(
                PercentShare(s["user_id"], s["percent"])
                for s in data.get("percent_shares") or []
            ),
            expense_id=data.get("expense_id"),
        )

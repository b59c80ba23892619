"""
routes/splits.py — Expense split route handler.

Layer rules:
  - Parse, validate, call ONE service, return envelope.
  - No business logic. Nothing is stored.

Endpoints (url_prefix=/api/v1):
  POST /splits   → 200  net shares + gross owed portions for one expense
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from settlement_engine.app.models.money import ZERO
from settlement_engine.app.models.split import ShareResult
from settlement_engine.app.schemas.expense_schema import ExpenseSplitSchema
from settlement_engine.app.services import share_splitter

splits_bp = Blueprint("splits", __name__)


def _serialize_shares(shares: list[ShareResult]) -> list[dict]:
    return [{"user_id": s.user_id, "amount": str(s.amount)} for s in shares]


@splits_bp.route("/splits", methods=["POST"])
def split_expense():
    """
    POST /splits

    Returns the net shares (positive = owes, payer carries -total, sum 0.00
    apart from PERCENT rounding drift) and the gross portions each participant
    owes before the payer's credit is netted.
    """
    split_request = ExpenseSplitSchema().load(request.get_json(silent=True) or {})

    shares = share_splitter.split(split_request)
    portions = share_splitter.owed_portions(split_request)

    result = {
        "policy": split_request.policy.value,
        "total_amount": str(split_request.total_amount),
        "payer_id": split_request.payer_id,
        "shares": _serialize_shares(shares),
        "portions": _serialize_shares(portions),
        "share_sum": str(sum((s.amount for s in shares), ZERO)),
    }
    return jsonify({"data": result, "warnings": []}), 200

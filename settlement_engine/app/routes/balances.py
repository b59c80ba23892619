"""
routes/balances.py — Balance route handler.

Layer rules:
  - Parse body, call ONE service, return envelope.
  - No business logic. Nothing is stored: the body carries the whole ledger.

Endpoints (url_prefix=/api/v1/groups):
  POST /groups/:id/balances   → 200  one balance per user + balance_sum
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from settlement_engine.app.models.money import ZERO
from settlement_engine.app.schemas.ledger_schema import LedgerSchema, ledger_from_payload
from settlement_engine.app.services import balance_service

balances_bp = Blueprint("balances", __name__)


@balances_bp.route("/<int:group_id>/balances", methods=["POST"])
def compute_balances(group_id: int):
    """
    POST /groups/:id/balances

    Positive balance = the group owes this user; negative = this user owes.
    balance_sum is "0.00" unless PERCENT splits left rounding drift.
    """
    data = LedgerSchema().load(request.get_json(silent=True) or {})
    ledger = ledger_from_payload(group_id, data)

    balances = balance_service.compute_group_balances(ledger)

    result = {
        "group_id": group_id,
        "balances": [
            {"user_id": b.user_id, "balance": str(b.balance)}
            for b in balances
        ],
        "balance_sum": str(sum((b.balance for b in balances), ZERO)),
    }
    return jsonify({"data": result, "warnings": []}), 200

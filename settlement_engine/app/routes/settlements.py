"""
routes/settlements.py — Proposed settlement check.

Endpoints (url_prefix=/api/v1/groups):
  POST /groups/:id/settlements/check   → 200  owed amount + warnings
                                          422  SELF_SETTLEMENT, PAYER_NOT_MEMBER,
                                               RECIPIENT_NOT_MEMBER,
                                               SETTLEMENT_EXCEEDS_OWED

Nothing is recorded. A 200 means the caller may record the settlement.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from settlement_engine.app.schemas.ledger_schema import SettlementCheckSchema, ledger_from_payload
from settlement_engine.app.services import balance_service, settlement_service

settlements_bp = Blueprint("settlements", __name__)


@settlements_bp.route("/<int:group_id>/settlements/check", methods=["POST"])
def check_settlement(group_id: int):
    data = SettlementCheckSchema().load(request.get_json(silent=True) or {})
    ledger = ledger_from_payload(group_id, data)

    warnings = settlement_service.check_settlement(
        ledger,
        from_user_id=data["from_user_id"],
        to_user_id=data["to_user_id"],
        amount=data["amount"],
        enforce_owed_limit=data["enforce_owed_limit"],
    )
    owed = balance_service.owed_between(ledger, data["from_user_id"], data["to_user_id"])

    result = {
        "group_id": group_id,
        "from_user_id": data["from_user_id"],
        "to_user_id": data["to_user_id"],
        "amount": str(data["amount"]),
        "owed": str(owed),
    }
    return jsonify({"data": result, "warnings": warnings}), 200

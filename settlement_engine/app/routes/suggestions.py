"""
routes/suggestions.py — Settlement suggestion route handler.

Endpoints (url_prefix=/api/v1/groups):
  POST /groups/:id/suggestions?strategy=<tag>&round_to=<increment>
       → 200  suggested transfers, strategy used, total_transfers

Defaults come from app config (DEFAULT_SETTLEMENT_STRATEGY, DEFAULT_ROUND_TO).
round_to=0 explicitly disables a configured default increment.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from settlement_engine.app.models.suggestion import SuggestionResult
from settlement_engine.app.schemas.ledger_schema import LedgerSchema, ledger_from_payload
from settlement_engine.app.schemas.suggestion_schema import SuggestionQuerySchema
from settlement_engine.app.services.balance_service import LedgerBalanceSource
from settlement_engine.app.services.suggestion_service import SettlementSuggestionEngine

suggestions_bp = Blueprint("suggestions", __name__)


def _serialize_result(result: SuggestionResult) -> dict:
    return {
        "group_id": result.group_id,
        "strategy": result.strategy_type.value,
        "total_transfers": result.total_transfers,
        "suggestions": [
            {
                "from_user_id": s.from_user_id,
                "to_user_id": s.to_user_id,
                "amount": str(s.amount),
            }
            for s in result.suggestions
        ],
    }


@suggestions_bp.route("/<int:group_id>/suggestions", methods=["POST"])
def suggest_settlements(group_id: int):
    """
    POST /groups/:id/suggestions

    Unknown strategy → 404 STRATEGY_NOT_FOUND. Inconsistent ledger → 422.
    """
    query = SuggestionQuerySchema().load(request.args.to_dict())
    data = LedgerSchema().load(request.get_json(silent=True) or {})
    ledger = ledger_from_payload(group_id, data)

    strategy = query["strategy"] or current_app.config["DEFAULT_SETTLEMENT_STRATEGY"]
    round_to = query["round_to"]
    if round_to is None:
        round_to = current_app.config.get("DEFAULT_ROUND_TO")

    engine = SettlementSuggestionEngine(LedgerBalanceSource.of(ledger))
    result = engine.suggest(group_id, strategy, round_to)

    return jsonify({"data": _serialize_result(result), "warnings": []}), 200

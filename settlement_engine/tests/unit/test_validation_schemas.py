"""
tests/unit/test_validation_schemas.py — Unit tests for the marshmallow schemas.

What this file proves:
  - Monetary fields reject more than 2 decimal places with
    INVALID_AMOUNT_PRECISION (never rounded or truncated)
  - Monetary fields reject zero and negative values
  - User ids must be strict positive integers (1.0 and "1" are rejected)
  - An unknown policy reports INVALID_SPLIT_POLICY
  - exact / percent policies require their share lists
  - Duplicate user ids in any list report DUPLICATE_SPLIT_USER
  - Successful loads return model objects, not dicts
  - Nested ledger errors keep the path down to the failing field

Unit test constraints:
  - No Flask context. Schemas are loaded directly.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from marshmallow import ValidationError

from settlement_engine.app.errors import ErrorCode
from settlement_engine.app.models.settlement import Settlement, SettlementStatus
from settlement_engine.app.models.split import ExpenseSplitRequest, SplitPolicy
from settlement_engine.app.schemas.expense_schema import ExpenseSplitSchema
from settlement_engine.app.schemas.ledger_schema import LedgerSchema, SettlementCheckSchema
from settlement_engine.app.schemas.settlement_schema import SettlementInputSchema
from settlement_engine.app.schemas.suggestion_schema import SuggestionQuerySchema


# ── Helpers ────────────────────────────────────────────────────────────────

def _expense(**overrides) -> dict:
    payload = {
        "total_amount": "90.00",
        "payer_id": 1,
        "policy": "equal",
        "participant_ids": [1, 2, 3],
    }
    payload.update(overrides)
    return payload


def _load_errors(schema, payload) -> dict:
    with pytest.raises(ValidationError) as exc:
        schema.load(payload)
    return exc.value.messages


# ── ExpenseSplitSchema ─────────────────────────────────────────────────────

def test_equal_expense_loads_into_request():
    result = ExpenseSplitSchema().load(_expense())

    assert isinstance(result, ExpenseSplitRequest)
    assert result.total_amount == Decimal("90.00")
    assert result.policy == SplitPolicy.EQUAL
    assert result.participant_ids == (1, 2, 3)


def test_policy_defaults_to_equal():
    payload = _expense()
    del payload["policy"]
    assert ExpenseSplitSchema().load(payload).policy == SplitPolicy.EQUAL


def test_equal_without_participants_loads_empty():
    payload = _expense()
    del payload["participant_ids"]
    assert ExpenseSplitSchema().load(payload).participant_ids == ()


def test_exact_expense_keeps_null_amounts():
    result = ExpenseSplitSchema().load(_expense(
        policy="exact",
        total_amount="100.00",
        explicit_shares=[
            {"user_id": 1, "amount": "100.00"},
            {"user_id": 2, "amount": None},
        ],
    ))

    assert result.policy == SplitPolicy.EXACT
    assert [(s.user_id, s.amount) for s in result.explicit_shares] == [
        (1, Decimal("100.00")),
        (2, None),
    ]


def test_integer_amounts_normalised_to_cents():
    result = ExpenseSplitSchema().load(_expense(
        policy="exact",
        total_amount=10,
        explicit_shares=[{"user_id": 1, "amount": 4}, {"user_id": 2, "amount": "6.5"}],
    ))

    assert str(result.total_amount) == "10.00"
    assert [str(s.amount) for s in result.explicit_shares] == ["4.00", "6.50"]


def test_percent_expense_loads():
    result = ExpenseSplitSchema().load(_expense(
        policy="percent",
        percent_shares=[{"user_id": 1, "percent": 60}, {"user_id": 2, "percent": 40}],
    ))
    assert [(s.user_id, s.percent) for s in result.percent_shares] == [(1, 60), (2, 40)]


def test_total_with_three_decimals_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(total_amount="10.123"))
    assert errors["total_amount"] == [ErrorCode.INVALID_AMOUNT_PRECISION]


@pytest.mark.parametrize("total", ["0", "-5.00"])
def test_non_positive_total_rejected(total):
    errors = _load_errors(ExpenseSplitSchema(), _expense(total_amount=total))
    assert "total_amount" in errors


def test_missing_payer_rejected():
    payload = _expense()
    del payload["payer_id"]
    errors = _load_errors(ExpenseSplitSchema(), payload)
    assert errors["payer_id"][0].startswith("Missing data for required field")


@pytest.mark.parametrize("payer_id", [1.0, "1", 0, -3])
def test_payer_id_must_be_strict_positive_int(payer_id):
    errors = _load_errors(ExpenseSplitSchema(), _expense(payer_id=payer_id))
    assert "payer_id" in errors


def test_unknown_policy_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(policy="by_weight"))
    assert errors["policy"] == [ErrorCode.INVALID_SPLIT_POLICY]


def test_exact_without_shares_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(policy="exact"))
    assert "explicit_shares" in errors


def test_percent_without_shares_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(policy="percent"))
    assert "percent_shares" in errors


def test_duplicate_participants_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(participant_ids=[1, 2, 2]))
    assert errors["participant_ids"] == [ErrorCode.DUPLICATE_SPLIT_USER]


def test_duplicate_exact_users_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(
        policy="exact",
        explicit_shares=[{"user_id": 1, "amount": "45.00"}, {"user_id": 1, "amount": "45.00"}],
    ))
    assert errors["explicit_shares"] == [ErrorCode.DUPLICATE_SPLIT_USER]


def test_negative_share_amount_rejected():
    errors = _load_errors(ExpenseSplitSchema(), _expense(
        policy="exact",
        explicit_shares=[{"user_id": 1, "amount": "100.00"}, {"user_id": 2, "amount": "-10.00"}],
    ))
    assert "explicit_shares" in errors


@pytest.mark.parametrize("percent", [-1, 101, 50.5])
def test_percent_out_of_range_rejected(percent):
    errors = _load_errors(ExpenseSplitSchema(), _expense(
        policy="percent",
        percent_shares=[{"user_id": 1, "percent": percent}],
    ))
    assert "percent_shares" in errors


# ── SettlementInputSchema ──────────────────────────────────────────────────

def test_settlement_defaults_to_confirmed():
    result = SettlementInputSchema().load(
        {"from_user_id": 2, "to_user_id": 1, "amount": "20.00"}
    )

    assert isinstance(result, Settlement)
    assert result.status == SettlementStatus.CONFIRMED
    assert result.amount == Decimal("20.00")


def test_settlement_status_loaded_by_value():
    result = SettlementInputSchema().load(
        {"from_user_id": 2, "to_user_id": 1, "amount": "20.00", "status": "pending"}
    )
    assert result.status == SettlementStatus.PENDING
    assert not result.is_confirmed


def test_settlement_integer_amount_normalised_to_cents():
    result = SettlementInputSchema().load({"from_user_id": 2, "to_user_id": 1, "amount": 20})
    assert str(result.amount) == "20.00"


def test_settlement_amount_precision_rejected():
    errors = _load_errors(
        SettlementInputSchema(),
        {"from_user_id": 2, "to_user_id": 1, "amount": "20.001"},
    )
    assert errors["amount"] == [ErrorCode.INVALID_AMOUNT_PRECISION]


# ── LedgerSchema / SettlementCheckSchema ───────────────────────────────────

def test_empty_ledger_loads_with_defaults():
    assert LedgerSchema().load({}) == {"member_ids": [], "expenses": [], "settlements": []}


def test_ledger_nested_objects():
    result = LedgerSchema().load({
        "member_ids": [1, 2],
        "expenses": [_expense(participant_ids=[1, 2])],
        "settlements": [{"from_user_id": 2, "to_user_id": 1, "amount": "5.00"}],
    })

    assert isinstance(result["expenses"][0], ExpenseSplitRequest)
    assert isinstance(result["settlements"][0], Settlement)


def test_ledger_nested_error_keeps_path():
    errors = _load_errors(LedgerSchema(), {"expenses": [_expense(total_amount="1.001")]})
    assert errors == {"expenses": {0: {"total_amount": [ErrorCode.INVALID_AMOUNT_PRECISION]}}}


def test_ledger_duplicate_members_rejected():
    errors = _load_errors(LedgerSchema(), {"member_ids": [1, 2, 1]})
    assert "member_ids" in errors


def test_settlement_check_enforces_limit_by_default():
    result = SettlementCheckSchema().load(
        {"member_ids": [1, 2], "from_user_id": 1, "to_user_id": 2, "amount": "10.00"}
    )
    assert result["enforce_owed_limit"] is True
    assert result["amount"] == Decimal("10.00")


# ── SuggestionQuerySchema ──────────────────────────────────────────────────

def test_query_defaults_to_none():
    assert SuggestionQuerySchema().load({}) == {"strategy": None, "round_to": None}


def test_query_keeps_strategy_as_free_string():
    result = SuggestionQuerySchema().load({"strategy": "not_a_strategy", "round_to": "1.00"})
    assert result == {"strategy": "not_a_strategy", "round_to": Decimal("1.00")}


def test_query_round_to_precision_rejected():
    errors = _load_errors(SuggestionQuerySchema(), {"round_to": "0.001"})
    assert errors["round_to"] == [ErrorCode.INVALID_AMOUNT_PRECISION]

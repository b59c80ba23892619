"""
tests/unit/test_share_splitter.py — Unit tests for services/share_splitter.py.

What this file proves:
  - EQUAL splits sum to exactly 0.00 for any amount and participant count
  - The EQUAL rounding remainder lands entirely on the payer's share
  - EXACT splits reproduce the input amounts 1:1 and reject any sum mismatch
  - Integer EXACT amounts come back normalised to two decimal places
  - EXACT entries with a null amount are dropped before summation
  - PERCENT splits require percentages totalling exactly 100
  - PERCENT rounding drift is left uncorrected
  - Missing payer, empty participants, duplicates and bad totals fail with
    ValidationError and never return partial results
  - All amounts are Decimal — never float

Unit test constraints:
  - No Flask context. Pure Decimal arithmetic on value objects.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from settlement_engine.app.errors import ErrorCode, ValidationError
from settlement_engine.app.models.split import (
    ExactShare,
    ExpenseSplitRequest,
    PercentShare,
    SplitPolicy,
)
from settlement_engine.app.services.share_splitter import owed_portions, split


# ── Helpers ────────────────────────────────────────────────────────────────

def _equal(total: str, participants: list[int], payer: int) -> ExpenseSplitRequest:
    return ExpenseSplitRequest(
        total_amount=Decimal(total),
        payer_id=payer,
        policy=SplitPolicy.EQUAL,
        participant_ids=tuple(participants),
    )


def _exact(total: str, shares: dict[int, str | None], payer: int) -> ExpenseSplitRequest:
    return ExpenseSplitRequest(
        total_amount=Decimal(total),
        payer_id=payer,
        policy=SplitPolicy.EXACT,
        explicit_shares=tuple(
            ExactShare(uid, Decimal(amt) if amt is not None else None)
            for uid, amt in shares.items()
        ),
    )


def _percent(total: str, shares: dict[int, int], payer: int) -> ExpenseSplitRequest:
    return ExpenseSplitRequest(
        total_amount=Decimal(total),
        payer_id=payer,
        policy=SplitPolicy.PERCENT,
        percent_shares=tuple(PercentShare(uid, pct) for uid, pct in shares.items()),
    )


def _as_dict(shares) -> dict[int, Decimal]:
    return {s.user_id: s.amount for s in shares}


def _sum(shares) -> Decimal:
    return sum((s.amount for s in shares), Decimal("0.00"))


# ── EQUAL ──────────────────────────────────────────────────────────────────

def test_equal_even_split_payer_carries_the_rest():
    """90.00 over three → others owe 30.00 each, payer is owed 60.00."""
    result = split(_equal("90.00", [1, 2, 3], payer=1))

    assert _as_dict(result) == {
        1: Decimal("-60.00"),
        2: Decimal("30.00"),
        3: Decimal("30.00"),
    }
    assert _sum(result) == Decimal("0.00")


def test_equal_remainder_is_absorbed_by_payer():
    """
    100.00 / 3 = 33.33 per head (half-up). The payer's share, not split
    evenly, carries the leftover cent so the three sum to exactly 0.00.
    """
    result = split(_equal("100.00", [1, 2, 3], payer=1))

    assert _as_dict(result) == {
        1: Decimal("-66.66"),
        2: Decimal("33.33"),
        3: Decimal("33.33"),
    }
    assert _sum(result) == Decimal("0.00")


def test_equal_rounds_half_up():
    """200.00 / 3 = 66.666… → 66.67 per head; payer absorbs the overshoot."""
    result = split(_equal("200.00", [1, 2, 3], payer=3))

    assert _as_dict(result) == {
        1: Decimal("66.67"),
        2: Decimal("66.67"),
        3: Decimal("-133.34"),
    }
    assert _sum(result) == Decimal("0.00")


def test_equal_half_cent_rounds_up():
    """0.05 / 2 = 0.025 → 0.03 (half-up, not banker's rounding)."""
    portions = owed_portions(_equal("0.05", [1, 2], payer=1))
    assert all(p.amount == Decimal("0.03") for p in portions)

    result = split(_equal("0.05", [1, 2], payer=1))
    assert _as_dict(result) == {1: Decimal("-0.03"), 2: Decimal("0.03")}


def test_equal_preserves_participant_order():
    result = split(_equal("30.00", [3, 1, 2], payer=2))
    assert [s.user_id for s in result] == [3, 1, 2]


def test_equal_single_participant_is_zero():
    """Paying for yourself alone nets to 0.00 (not -0.00)."""
    result = split(_equal("42.00", [7], payer=7))

    assert len(result) == 1
    assert result[0].amount == Decimal("0.00")
    assert str(result[0].amount) == "0.00"


@pytest.mark.parametrize("total", ["0.01", "1.00", "10.00", "99.99", "100.00", "1234.57"])
@pytest.mark.parametrize("count", [1, 2, 3, 6, 7])
def test_equal_sum_is_exactly_zero(total: str, count: int):
    participants = list(range(1, count + 1))
    result = split(_equal(total, participants, payer=1))

    assert _sum(result) == Decimal("0.00")
    others = {s.amount for s in result if s.user_id != 1}
    assert len(others) <= 1, "every non-payer owes the same per-head amount"


def test_equal_without_participants_rejected():
    with pytest.raises(ValidationError) as exc:
        split(_equal("10.00", [], payer=1))
    assert exc.value.code == ErrorCode.NO_PARTICIPANTS
    assert exc.value.http_status == 422


def test_equal_payer_not_participant_rejected():
    with pytest.raises(ValidationError) as exc:
        split(_equal("10.00", [2, 3], payer=1))
    assert exc.value.code == ErrorCode.PAYER_NOT_PARTICIPANT


def test_equal_duplicate_participant_rejected():
    with pytest.raises(ValidationError) as exc:
        split(_equal("10.00", [1, 2, 2], payer=1))
    assert exc.value.code == ErrorCode.DUPLICATE_SPLIT_USER


# ── EXACT ──────────────────────────────────────────────────────────────────

def test_exact_portions_match_input():
    portions = owed_portions(_exact("100.00", {1: "60.00", 2: "40.00"}, payer=1))
    assert _as_dict(portions) == {1: Decimal("60.00"), 2: Decimal("40.00")}


def test_exact_shares_net_the_payer_credit():
    result = split(_exact("100.00", {1: "60.00", 2: "40.00"}, payer=1))

    assert _as_dict(result) == {1: Decimal("-40.00"), 2: Decimal("40.00")}
    assert _sum(result) == Decimal("0.00")


def test_exact_payer_with_zero_portion():
    result = split(_exact("75.00", {1: "0.00", 2: "25.00", 3: "50.00"}, payer=1))

    assert _as_dict(result) == {
        1: Decimal("-75.00"),
        2: Decimal("25.00"),
        3: Decimal("50.00"),
    }


def test_exact_integer_amounts_normalised_to_cents():
    request = ExpenseSplitRequest(
        total_amount=Decimal("10"),
        payer_id=1,
        policy=SplitPolicy.EXACT,
        explicit_shares=(ExactShare(1, Decimal("4")), ExactShare(2, Decimal("6"))),
    )

    result = split(request)

    assert [(s.user_id, str(s.amount)) for s in result] == [(1, "-6.00"), (2, "6.00")]
    assert [str(p.amount) for p in owed_portions(request)] == ["4.00", "6.00"]


def test_exact_sum_mismatch_rejected():
    """Decimal equality, no tolerance: one cent off is a mismatch."""
    with pytest.raises(ValidationError) as exc:
        split(_exact("100.00", {1: "60.00", 2: "39.99"}, payer=1))
    assert exc.value.code == ErrorCode.SPLIT_SUM_MISMATCH


def test_exact_null_amounts_are_dropped():
    request = _exact("100.00", {1: "100.00", 2: None}, payer=1)

    assert _as_dict(owed_portions(request)) == {1: Decimal("100.00")}
    assert _as_dict(split(request)) == {1: Decimal("0.00")}


def test_exact_null_amount_is_not_counted_towards_total():
    with pytest.raises(ValidationError) as exc:
        split(_exact("100.00", {1: "60.00", 2: None}, payer=1))
    assert exc.value.code == ErrorCode.SPLIT_SUM_MISMATCH


def test_exact_payer_absent_rejected():
    with pytest.raises(ValidationError) as exc:
        split(_exact("100.00", {2: "60.00", 3: "40.00"}, payer=1))
    assert exc.value.code == ErrorCode.PAYER_NOT_PARTICIPANT


# ── PERCENT ────────────────────────────────────────────────────────────────

def test_percent_portions():
    """total=100.00, {1: 60%, 2: 40%} → portions 60.00 and 40.00."""
    portions = owed_portions(_percent("100.00", {1: 60, 2: 40}, payer=1))
    assert _as_dict(portions) == {1: Decimal("60.00"), 2: Decimal("40.00")}


def test_percent_shares_net_the_payer_credit():
    result = split(_percent("100.00", {1: 60, 2: 40}, payer=1))
    assert _as_dict(result) == {1: Decimal("-40.00"), 2: Decimal("40.00")}


def test_percent_rounding_drift_is_not_corrected():
    """
    10.01 at 50/50 → 5.005 → 5.01 each. The portions total 10.02 and the net
    shares miss zero by one cent; this drift is kept, not redistributed.
    """
    request = _percent("10.01", {1: 50, 2: 50}, payer=1)

    assert _as_dict(owed_portions(request)) == {1: Decimal("5.01"), 2: Decimal("5.01")}
    result = split(request)
    assert _as_dict(result) == {1: Decimal("-5.00"), 2: Decimal("5.01")}
    assert _sum(result) == Decimal("0.01")


def test_percent_sum_not_100_rejected():
    with pytest.raises(ValidationError) as exc:
        split(_percent("100.00", {1: 60, 2: 30}, payer=1))
    assert exc.value.code == ErrorCode.PERCENT_SUM_MISMATCH


def test_percent_payer_absent_rejected():
    with pytest.raises(ValidationError) as exc:
        split(_percent("100.00", {2: 50, 3: 50}, payer=1))
    assert exc.value.code == ErrorCode.PAYER_NOT_PARTICIPANT


# ── Shared rules ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("total", ["0.00", "-5.00"])
def test_non_positive_total_rejected(total: str):
    with pytest.raises(ValidationError) as exc:
        split(_equal(total, [1, 2], payer=1))
    assert exc.value.code == ErrorCode.INVALID_AMOUNT


def test_unknown_policy_rejected():
    request = ExpenseSplitRequest(
        total_amount=Decimal("10.00"),
        payer_id=1,
        policy="by_weight",
        participant_ids=(1, 2),
    )
    with pytest.raises(ValidationError) as exc:
        split(request)
    assert exc.value.code == ErrorCode.INVALID_SPLIT_POLICY


def test_policy_given_as_string_value():
    request = ExpenseSplitRequest(
        total_amount=Decimal("10.00"),
        payer_id=1,
        policy="equal",
        participant_ids=(1, 2),
    )
    assert _as_dict(split(request)) == {1: Decimal("-5.00"), 2: Decimal("5.00")}


def test_amounts_are_decimal_not_float():
    for request in (
        _equal("10.00", [1, 2, 3], payer=1),
        _exact("10.00", {1: "4.00", 2: "6.00"}, payer=2),
        _percent("10.00", {1: 30, 2: 70}, payer=1),
    ):
        for share in split(request):
            assert isinstance(share.amount, Decimal)

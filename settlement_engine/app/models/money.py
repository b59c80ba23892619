"""
models/money.py — Fixed-point money helpers.

All monetary values are Decimal with two fractional digits. Float never
appears in or around money calculations; to_money() rejects it outright.
Division is the only place rounding happens, and it is always ROUND_HALF_UP.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

_UNIT = Decimal("1")


def round_half_up(value: Decimal, exponent: Decimal = CENT) -> Decimal:
    """Quantizes `value` to the scale of `exponent`, half-way cases away from zero."""
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def to_money(value: Decimal | int | str) -> Decimal:
    """
    Converts an int, str or Decimal into a scale-2 Decimal.

    Raises TypeError for float (and bool) input.
    """
    if isinstance(value, (float, bool)):
        raise TypeError(f"Monetary amounts must not be {type(value).__name__}: {value!r}")
    return round_half_up(Decimal(value))


def snap_to_increment(amount: Decimal, increment: Decimal | None) -> Decimal:
    """
    Snaps `amount` to the nearest multiple of `increment` (round-half-up).

    A missing, zero or negative increment means "no rounding": the amount is
    returned unchanged apart from normalising it to cents.

        snap_to_increment(Decimal("30.49"), Decimal("1.00"))  -> Decimal("30.00")
        snap_to_increment(Decimal("30.50"), Decimal("1.00"))  -> Decimal("31.00")
        snap_to_increment(Decimal("0.40"),  Decimal("1.00"))  -> Decimal("0.00")
    """
    if increment is None or increment <= ZERO:
        return round_half_up(amount)
    steps = (amount / increment).quantize(_UNIT, rounding=ROUND_HALF_UP)
    return round_half_up(steps * increment)

"""
schemas/suggestion_schema.py — Query parameters of the suggestions endpoint.

strategy is deliberately a free string: an unknown tag is a 404
(STRATEGY_NOT_FOUND) raised by the strategy factory, not a 400.
round_to may be zero or negative; the strategies treat that as no rounding.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import Schema, ValidationError, fields

from settlement_engine.app.errors import ErrorCode


def _validate_increment_precision(value: Decimal | None) -> None:
    if value is not None and value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


class SuggestionQuerySchema(Schema):

    strategy = fields.Str(load_default=None)

    round_to = fields.Decimal(
        load_default=None,
        allow_none=True,
        validate=_validate_increment_precision,
    )

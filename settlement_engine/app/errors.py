"""
errors.py — AppError base class and error code registry.

Every error surfaced by the engine must use a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - ValidationError (422) means the caller supplied inconsistent input.
    NotFoundError (404) means a tag or group the caller named does not exist.
  - The core never retries and never silently corrects; every failure is
    deterministic given the same inputs.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which input field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


class ValidationError(AppError):
    """Malformed or inconsistent input. Always 422 unless stated otherwise."""

    def __init__(
            self,
            code: str,
            message: str,
            field: str | None = None,
            http_status: int = 422,
    ) -> None:
        super().__init__(code, message, http_status, field=field)


class NotFoundError(AppError):
    """A named strategy tag or group is unknown."""

    def __init__(
            self,
            code: str,
            message: str,
            field: str | None = None,
            http_status: int = 404,
    ) -> None:
        super().__init__(code, message, http_status, field=field)


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_AMOUNT_PRECISION   = "INVALID_AMOUNT_PRECISION"

    # ── Split Errors (422) ─────────────────────────────────────────────────
    INVALID_AMOUNT             = "INVALID_AMOUNT"
    INVALID_SPLIT_POLICY       = "INVALID_SPLIT_POLICY"
    DUPLICATE_SPLIT_USER       = "DUPLICATE_SPLIT_USER"
    NO_PARTICIPANTS            = "NO_PARTICIPANTS"
    PAYER_NOT_PARTICIPANT      = "PAYER_NOT_PARTICIPANT"
    SPLIT_SUM_MISMATCH         = "SPLIT_SUM_MISMATCH"
    PERCENT_SUM_MISMATCH       = "PERCENT_SUM_MISMATCH"

    # ── Balance / Settlement Errors (422) ──────────────────────────────────
    BALANCE_SUM_MISMATCH       = "BALANCE_SUM_MISMATCH"
    SELF_SETTLEMENT            = "SELF_SETTLEMENT"
    PAYER_NOT_MEMBER           = "PAYER_NOT_MEMBER"
    RECIPIENT_NOT_MEMBER       = "RECIPIENT_NOT_MEMBER"
    SETTLEMENT_EXCEEDS_OWED    = "SETTLEMENT_EXCEEDS_OWED"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    GROUP_NOT_FOUND            = "GROUP_NOT_FOUND"
    STRATEGY_NOT_FOUND         = "STRATEGY_NOT_FOUND"

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"


# ── Warning Code Registry ──────────────────────────────────────────────────
#
# Warnings are returned alongside a 2xx response in the `warnings` array.
# They do not block the request.
# ──────────────────────────────────────────────────────────────────────────

class WarningCode:

    # Settlement amount exceeds the current debt between the two parties.
    # Only reported when the owed limit is not enforced.
    OVERPAYMENT = "OVERPAYMENT"

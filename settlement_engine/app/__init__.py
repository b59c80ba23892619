"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time — this enables multiple
         isolated test app instances.

The HTTP layer is a stateless adapter over the pure engine in app/services:
every request carries the data to compute over and nothing is stored.

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure the app logger level (LOG_LEVEL)
  3. Register all route blueprints under /api/v1
  4. Register global error handlers (AppError → JSON, Exception → 500)
  5. Register a custom JSON provider to serialise Decimal as string
     (monetary amounts are transmitted as strings, never JS numbers)
"""

from __future__ import annotations

import traceback
from decimal import Decimal

from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from settlement_engine.config import config_by_name, validate_production_config


# ── Custom JSON provider ───────────────────────────────────────────────────

class DecimalJSONProvider(DefaultJSONProvider):
    """
    Extends Flask's default JSON provider to serialise Decimal as str.

    Example: Decimal("10.50") → "10.50" (not 10.5 or 10.500000001)
    """

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
                     Defaults to "development".
    """
    app = Flask(__name__)
    app.json_provider_class = DecimalJSONProvider
    app.json = DecimalJSONProvider(app)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    # Service modules log under settlement_engine.app.*, i.e. below app.logger,
    # so one level setting covers the whole package.
    app.logger.setLevel(app.config["LOG_LEVEL"])

    _register_blueprints(app)
    _register_error_handlers(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    The url_prefix is set here so individual route files only specify
    the path relative to their resource.
    """
    from settlement_engine.app.routes.balances import balances_bp
    from settlement_engine.app.routes.settlements import settlements_bp
    from settlement_engine.app.routes.splits import splits_bp
    from settlement_engine.app.routes.suggestions import suggestions_bp

    app.register_blueprint(splits_bp,      url_prefix="/api/v1")
    app.register_blueprint(balances_bp,    url_prefix="/api/v1/groups")
    app.register_blueprint(suggestions_bp, url_prefix="/api/v1/groups")
    app.register_blueprint(settlements_bp, url_prefix="/api/v1/groups")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError              → structured JSON error envelope with its HTTP status
                              (ValidationError 422, NotFoundError 404)
      marshmallow errors    → first field error as MISSING_FIELD / INVALID_FIELD
                              or a registered code (400)
      HTTPException         → passed through unchanged (404 route, 405 method)
      Exception             → generic INTERNAL_ERROR (500); traceback logged

    Stack traces never leave the server.
    """
    from settlement_engine.app.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """Routes never catch AppError — they let it propagate here."""
        app.logger.info("%r", error)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(error: SchemaValidationError):
        """
        Converts marshmallow ValidationError into the standard error envelope.

        Only the FIRST error is returned ("one error, not many"). Nested list
        errors ({"expenses": {0: {"total_amount": [...]}}}) are unwrapped to
        the innermost field name.
        """
        field, raw_message = _first_schema_error(error.messages)

        if raw_message in vars(ErrorCode).values():
            code = raw_message
            message = _code_to_message(code)
        elif str(raw_message).startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD
            message = raw_message
        else:
            code = ErrorCode.INVALID_FIELD
            message = raw_message

        response_body = {"error": {"code": code, "message": message}}
        if field is not None:
            response_body["error"]["field"] = field
        return jsonify(response_body), 400

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            return error

        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _first_schema_error(messages) -> tuple[str | None, str]:
    """Walks a marshmallow messages structure down to its first (field, message)."""
    field = None
    while isinstance(messages, dict) and messages:
        key, messages = next(iter(messages.items()))
        if isinstance(key, str) and key != "_schema":
            field = key
    if isinstance(messages, list):
        messages = messages[0] if messages else "Invalid input."
    return field, str(messages)


def _code_to_message(code: str) -> str:
    """
    Returns a human-readable default message for a known error code.
    Used when a ValidationError message IS the error code constant itself.
    """
    _messages = {
        "INVALID_AMOUNT_PRECISION": "Amount must have at most 2 decimal places.",
        "INVALID_SPLIT_POLICY": "policy must be 'equal', 'exact' or 'percent'.",
        "DUPLICATE_SPLIT_USER": "The same user_id appears more than once in the list.",
    }
    return _messages.get(code, "Invalid input.")

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv


_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent

# Root .env is canonical; settlement_engine/.env is a local override fallback.
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_PACKAGE_DIR / ".env")

KNOWN_STRATEGIES: tuple[str, ...] = ("greedy_min_transfers", "smallest_amounts_first")


def _first_non_empty_env(*names: str, default: str) -> str:
    """Returns the first non-empty env var value from `names`, else `default`."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _parse_round_to_env(name: str) -> Decimal | None:
    """
    Parses the default rounding increment for settlement suggestions.

    Unset, empty or unparsable values mean "no rounding". The value is kept
    as given (zero and negative increments are treated as "no rounding" by
    the strategies themselves).
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        return None


class BaseConfig:

    SECRET_KEY: str = _first_non_empty_env(
        "SECRET_KEY",
        default="change-me-in-production",
    )

    JSON_SORT_KEYS: bool = False
    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="INFO").upper()

    # Strategy used by the suggestions endpoint when ?strategy= is omitted.
    DEFAULT_SETTLEMENT_STRATEGY: str = _first_non_empty_env(
        "DEFAULT_SETTLEMENT_STRATEGY",
        default="greedy_min_transfers",
    )

    # Rounding increment used when ?round_to= is omitted. None = exact cents.
    DEFAULT_ROUND_TO: Decimal | None = _parse_round_to_env("DEFAULT_ROUND_TO")


class DevelopmentConfig(BaseConfig):
    DEBUG:   bool = True
    TESTING: bool = False

    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="DEBUG").upper()


class TestingConfig(BaseConfig):

    DEBUG:   bool = True
    TESTING: bool = True

    # Tests must not depend on the developer's .env.
    DEFAULT_SETTLEMENT_STRATEGY: str = "greedy_min_transfers"
    DEFAULT_ROUND_TO: Decimal | None = None


class ProductionConfig(BaseConfig):

    DEBUG:   bool = False
    TESTING: bool = False


def validate_production_config(app) -> None:
    """
    Fail-fast guard for production configuration.

    Must be called in the app factory immediately after
    app.config.from_object(ProductionConfig):

        app.config.from_object(ProductionConfig)
        validate_production_config(app)   # raises ValueError if misconfigured

    Raises ValueError if any required production value is missing or insecure.
    """
    if app.config.get("SECRET_KEY") == "change-me-in-production":
        raise ValueError(
            "SECRET_KEY must be set to a strong random value in production. "
            "Do not use the default placeholder."
        )
    if app.config.get("DEFAULT_SETTLEMENT_STRATEGY") not in KNOWN_STRATEGIES:
        raise ValueError(
            f"DEFAULT_SETTLEMENT_STRATEGY must be one of {', '.join(KNOWN_STRATEGIES)}; "
            f"got {app.config.get('DEFAULT_SETTLEMENT_STRATEGY')!r}."
        )


# ── Config selector ────────────────────────────────────────────────────────
#
# Used by the app factory:
#   from settlement_engine.config import config_by_name
#   app.config.from_object(config_by_name[flask_env])
# ──────────────────────────────────────────────────────────────────────────

config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
}

# Convenience alias: resolves the active config class from FLASK_ENV.
# Defaults to development if the variable is not set.
ActiveConfig: type[BaseConfig] = config_by_name.get(
    os.getenv("FLASK_ENV", "development"),
    DevelopmentConfig,
)

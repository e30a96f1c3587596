# order_food/core/config.py (Order Food API)

from __future__ import annotations

import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """
    Configuration unique de l'app, injectée via `create_app(settings)`.
    - DB: privilégie DATABASE_URL, sinon compose avec POSTGRES_* ou fallback SQLite.
    - Sécurité: clé API attendue dans le header `api_key`.
    - Promotions: règle des fichiers de coupons + effet de la remise.
    - Logs: JSON par défaut.

    Les kwargs écrasent les valeurs lues dans l'environnement (tests).
    """

    def __init__(self, **overrides) -> None:
        # ---------- Métadonnées ----------
        self.ENV = os.getenv("ENV", "dev")
        self.APP_NAME = os.getenv("APP_NAME", "order-food")
        self.APP_TITLE = os.getenv("APP_TITLE", "Order Food API")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.APP_DESCRIPTION = os.getenv(
            "APP_DESCRIPTION", "Catalogue produits et prise de commandes"
        )

        # ---------- Base de données ----------
        self.DATABASE_URL = os.getenv("DATABASE_URL") or self._compose_db_url()
        self.DB_ECHO = _get_bool("DB_ECHO", False)

        # ---------- Sécurité ----------
        self.API_KEY = os.getenv("API_KEY", "apitest")

        # ---------- Commandes ----------
        self.ORDER_TIMEOUT_SECONDS = _get_float("ORDER_TIMEOUT_SECONDS", 10.0)
        self.DEFAULT_PAGE_SIZE = _get_int("DEFAULT_PAGE_SIZE", 10)
        self.MAX_PAGE_SIZE = _get_int("MAX_PAGE_SIZE", 100)

        # ---------- Codes promo ----------
        self.PROMO_MIN_LENGTH = _get_int("PROMO_MIN_LENGTH", 8)
        self.PROMO_MAX_LENGTH = _get_int("PROMO_MAX_LENGTH", 10)
        self.PROMO_MIN_SOURCES = _get_int("PROMO_MIN_SOURCES", 2)
        self.PROMO_DISCOUNT_TYPE = os.getenv("PROMO_DISCOUNT_TYPE", "percentage")
        self.PROMO_DISCOUNT_VALUE = Decimal(os.getenv("PROMO_DISCOUNT_VALUE", "10"))

        # ---------- Logging ----------
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "json")

        # ---------- CORS ----------
        self.CORS_ALLOW_ORIGINS = [
            o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
        ]
        self.CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", False)
        self.CORS_ALLOW_METHODS = os.getenv("CORS_ALLOW_METHODS", "GET,POST,OPTIONS")
        self.CORS_ALLOW_HEADERS = os.getenv(
            "CORS_ALLOW_HEADERS", "Content-Type,Authorization,api_key"
        )

        for name, value in overrides.items():
            if not hasattr(self, name):
                raise AttributeError(f"Unknown setting: {name}")
            setattr(self, name, value)

    # -------- Helpers internes --------
    def _compose_db_url(self) -> str:
        pg_host = os.getenv("POSTGRES_HOST")
        pg_db = os.getenv("POSTGRES_DB")
        pg_user = os.getenv("POSTGRES_USER")
        pg_pwd = os.getenv("POSTGRES_PASSWORD", "")
        pg_port = os.getenv("POSTGRES_PORT", "5432")

        if pg_host and pg_db and pg_user:
            return f"postgresql+asyncpg://{pg_user}:{pg_pwd}@{pg_host}:{pg_port}/{pg_db}"

        sqlite_path = os.getenv("SQLITE_PATH", "data/order_food.db")
        return f"sqlite+aiosqlite:///{sqlite_path}"

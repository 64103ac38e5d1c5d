"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Jewelry Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/jewelry_ledger"
    )
    # Reports read accounts and entries in separate statements;
    # repeatable read keeps them on one snapshot. Ignored for SQLite.
    DATABASE_ISOLATION_LEVEL: str = os.getenv(
        "DATABASE_ISOLATION_LEVEL", "REPEATABLE READ"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "console")

    # Accounting
    BASE_CURRENCY: str = os.getenv("BASE_CURRENCY", "USD")
    LOCAL_LANGUAGE: str = os.getenv("LOCAL_LANGUAGE", "fa")
    REFERENCE_PREFIX: str = os.getenv("REFERENCE_PREFIX", "TXN")

    # Balance updates are compare-and-swap; a stale write is retried
    # with exponential backoff before giving up with ContentionError.
    BALANCE_RETRY_ATTEMPTS: int = int(os.getenv("BALANCE_RETRY_ATTEMPTS", "5"))
    BALANCE_RETRY_BASE_DELAY: float = float(
        os.getenv("BALANCE_RETRY_BASE_DELAY", "0.05")
    )
    BALANCE_RETRY_MAX_DELAY: float = float(
        os.getenv("BALANCE_RETRY_MAX_DELAY", "1.0")
    )


# Every money amount is held to two decimal places
MONEY_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()

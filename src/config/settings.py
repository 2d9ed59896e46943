"""Application configuration from environment variables and .env."""

import logging
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    """Settings loaded from environment variables.

    Pydantic automatically loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file (if present)

    Instantiate AFTER environment variables are loaded; use get_settings().
    """

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Allow extra fields in .env file
    )

    # Database
    database_url: str = "sqlite:///./hoa.db"

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/server.log"

    # Dues policy
    default_annual_fee_amount: Decimal = Decimal("300.00")
    annual_fee_type_prefix: str = "Annual HOA Fee"
    admin_payment_settles_all_outstanding: bool = True

    # Receipt storage
    receipts_dir: str = "data/receipts"
    receipts_base_url: str = "/receipts"

    # Push notifications (empty token disables Telegram delivery)
    telegram_bot_token: str = ""

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    def validate(self) -> None:
        """Validate configuration values that pydantic cannot check alone."""
        if self.default_annual_fee_amount <= 0:
            raise ValueError("DEFAULT_ANNUAL_FEE_AMOUNT must be positive")
        if not self.annual_fee_type_prefix.strip():
            raise ValueError("ANNUAL_FEE_TYPE_PREFIX must not be empty")


# Lazy loader to ensure environment is loaded before instantiation
_settings_instance: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get or create the settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = AppSettings()
        _settings_instance.validate()
        logger.debug("Settings loaded: database_url=%s", _settings_instance.database_url)
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None


__all__ = ["AppSettings", "get_settings", "reset_settings"]

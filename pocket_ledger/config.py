"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class PocketLedgerConfig(BaseSettings):
    """Pocket Ledger configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Display configuration
    currency_symbol: str = "₹"
    number_grouping: str = "indian"  # indian (12,34,567.00) or western (1,234,567.00)
    display_precision: int = 2

    # Account defaults
    default_tenure_months: int = 12  # Fixed deposit tenure when none is given

    # Notifications
    max_notifications: int = 0  # 0 keeps every notification

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("number_grouping")
    @classmethod
    def validate_number_grouping(cls, v: str) -> str:
        if v not in {"indian", "western"}:
            raise ValueError("number_grouping must be 'indian' or 'western'")
        return v

    @field_validator("default_tenure_months")
    @classmethod
    def validate_tenure(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("default_tenure_months must be positive")
        return v

    @field_validator("max_notifications")
    @classmethod
    def validate_max_notifications(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_notifications cannot be negative")
        return v

    model_config = SettingsConfigDict(
        env_prefix="POCKET_LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


# Global configuration instance
config = PocketLedgerConfig()


def get_config() -> PocketLedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> PocketLedgerConfig:
    """Reload configuration from environment"""
    global config
    config = PocketLedgerConfig()
    return config

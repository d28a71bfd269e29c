"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Ledger defaults (starting balance, buffer capacity, snapshot location)
are validated once at startup instead of being scattered as constants.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Transaction store and snapshot configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    initial_balance: Decimal = Field(
        default=Decimal("0"),
        description="Starting balance for accounts created without one"
    )
    initial_capacity: int = Field(
        default=100,
        ge=1,
        le=1_000_000,
        description="Initial slot capacity of a transaction store"
    )

    # Snapshot files
    snapshot_dir: str = Field(
        default=".",
        description="Directory where snapshot files are written"
    )
    snapshot_suffix: str = Field(
        default="_finance.txt",
        description="Suffix appended to the user name to form the file name"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made when writing a snapshot fails"
    )
    write_retry_wait_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Base wait for exponential backoff between write attempts"
    )

    @field_validator('snapshot_suffix')
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Suffix must not smuggle in a directory component."""
        if "/" in v or "\\" in v:
            raise ValueError("Snapshot suffix cannot contain path separators")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Starting balances used by the front end
    primary_initial_balance: Decimal = Field(
        default=Decimal("1000"),
        description="Starting balance of the session's first user"
    )
    secondary_initial_balance: Decimal = Field(
        default=Decimal("500"),
        description="Starting balance of additional users created for comparison"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results

"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Bank Reconciler", alias="APP_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Matching
    amount_tolerance: Decimal = Field(default=Decimal("0.01"), alias="AMOUNT_TOLERANCE")
    matching_strategy: Literal["first_match", "one_to_one"] = Field(
        default="first_match", alias="MATCHING_STRATEGY"
    )
    min_description_length: int = Field(default=0, alias="MIN_DESCRIPTION_LENGTH")
    description_similarity_threshold: Optional[float] = Field(
        default=None, alias="DESCRIPTION_SIMILARITY_THRESHOLD"
    )

    # Record ids
    bank_id_prefix: str = Field(default="bank-", alias="BANK_ID_PREFIX")
    expense_id_prefix: str = Field(default="jobber-", alias="EXPENSE_ID_PREFIX")

    # Notifications
    notification_webhook_url: Optional[str] = Field(default=None, alias="NOTIFICATION_WEBHOOK_URL")
    notification_timeout: int = Field(default=10, alias="NOTIFICATION_TIMEOUT")

    # Storage
    export_path: str = Field(default="files", alias="EXPORT_PATH")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("amount_tolerance")
    @classmethod
    def validate_tolerance(cls, v):
        """Tolerance must be strictly positive."""
        if v <= 0:
            raise ValueError("Amount tolerance must be greater than 0")
        return v

    @field_validator("min_description_length")
    @classmethod
    def validate_min_length(cls, v):
        if v < 0:
            raise ValueError("Minimum description length cannot be negative")
        return v

    @field_validator("description_similarity_threshold")
    @classmethod
    def validate_similarity(cls, v):
        """Similarity threshold is a Levenshtein ratio in (0, 1]."""
        if v is not None and not (0 < v <= 1):
            raise ValueError("Description similarity threshold must be in (0, 1]")
        return v

    @field_validator("notification_timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v < 1:
            raise ValueError("Notification timeout must be at least 1 second")
        return v

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.export_path).mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None

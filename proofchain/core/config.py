"""
Library configuration using Pydantic Settings.
All configuration is loaded from environment variables with sensible defaults.
"""

import warnings
from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENCRYPTION_KEY = "default-key-change-in-production"


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    Secure defaults are enforced for staging and production; development
    keeps working out of the box with a warning.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Core Settings
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ==========================================================================
    # Hashing / Encryption
    # ==========================================================================
    hash_canonicalization: Literal["compact-json", "rfc8785"] = Field(
        default="compact-json",
        description="Serialization used for block hash input of new blocks",
    )
    encryption_key: str = Field(
        default=DEFAULT_ENCRYPTION_KEY,
        description="Fallback key for sensitive value encryption when callers pass none",
    )
    token_prefix: str = Field(default="TKN", min_length=1)

    # ==========================================================================
    # External Ledger
    # ==========================================================================
    ledger_enabled: bool = Field(default=False)
    ledger_url: str = Field(default="", description="Base URL of the ledger anchoring API")
    ledger_api_key: str = Field(default="")
    ledger_timeout_seconds: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Self:
        """Enforce critical security settings in production/staging."""
        if self.ledger_enabled and not self.ledger_url.strip():
            raise ValueError("ledger_url must be set when ledger_enabled is true")
        if self.environment in ("production", "staging"):
            if self.encryption_key == DEFAULT_ENCRYPTION_KEY:
                raise ValueError(
                    f"encryption_key must be explicitly set in {self.environment} environment"
                )
        elif self.encryption_key == DEFAULT_ENCRYPTION_KEY:
            warnings.warn(
                "encryption_key uses the built-in default. Set ENCRYPTION_KEY before deploying.",
                UserWarning,
                stacklevel=2,
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated environment variable parsing.
    """
    return Settings()

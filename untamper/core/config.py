"""
Client configuration using Pydantic Settings.
All configuration is loaded from ``UNTAMPER_*`` environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SDK_USER_AGENT = "untamper-verify-python/0.1.0"


class Settings(BaseSettings):
    """
    Settings for the verification client.

    Only the public key fetch talks to the network; everything else is
    local computation, so most deployments only need ``UNTAMPER_API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="UNTAMPER_",
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
    # unTamper API
    # ==========================================================================
    base_url: str = Field(default="https://app.untamper.com")
    api_key: str = Field(default="", description="Project API key sent as a bearer token")
    public_key_path: str = Field(default="/api/v1/public-key")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    # ==========================================================================
    # Chain Verification
    # ==========================================================================
    genesis_sequence: int = Field(
        default=1,
        ge=1,
        description="Sequence number assigned to the first record of every project chain",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading environment variables on every call.
    Clear the cache with get_settings.cache_clear() when testing.
    """
    return Settings()

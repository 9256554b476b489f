"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
Every value has a usable default so the service starts without a .env file; the
assistant falls back to an apology reply when no Anthropic key is configured.

Production Mode:
    When app_env="production", additional validations apply:
    - debug must be False
    - cors_allowed_origins cannot be ["*"]
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from geomind.store.geo_store import DEFAULT_STORAGE_KEY
from geomind.store.location import DEFAULT_CENTER


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Anthropic (Assistant)
    # -------------------------------------------------------------------------
    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key for the chat assistant"
    )
    assistant_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used for location commentary",
    )
    assistant_max_tokens: int = Field(
        default=1024,
        ge=64,
        description="Maximum tokens per assistant reply",
    )
    assistant_web_search: bool = Field(
        default=True,
        description="Let the assistant ground answers with the web search tool",
    )
    assistant_max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts per assistant call before giving up on transient errors",
    )

    # -------------------------------------------------------------------------
    # Storage (Vendor Registry)
    # -------------------------------------------------------------------------
    storage_path: Path = Field(
        default=Path(".geomind/state.json"),
        description="JSON document holding persisted records",
    )
    vendor_storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        description="Key of the persisted vendor-shop list",
    )

    # -------------------------------------------------------------------------
    # Map
    # -------------------------------------------------------------------------
    default_latitude: float = Field(
        default=DEFAULT_CENTER.lat,
        description="Initial latitude of the location cursor (Chennai)",
    )
    default_longitude: float = Field(
        default=DEFAULT_CENTER.lng,
        description="Initial longitude of the location cursor (Chennai)",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    api_host: str = Field(default="0.0.0.0", description="Bind address")
    api_port: int = Field(default=8000, description="Bind port")

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins. Use ['*'] for development only.",
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def assistant_enabled(self) -> bool:
        """Check if an Anthropic key is available."""
        return self.anthropic_api_key is not None and bool(
            self.anthropic_api_key.get_secret_value().strip()
        )

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are secure."""
        if self.app_env == "production":
            errors = []

            # Debug must be disabled in production
            if self.debug:
                errors.append("debug must be False in production")

            # CORS cannot allow all origins in production
            if "*" in self.cors_allowed_origins:
                errors.append("cors_allowed_origins cannot contain '*' in production")

            if errors:
                raise ValueError(
                    f"Production configuration errors: {'; '.join(errors)}"
                )

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()

"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
All settings are validated at startup - invalid values will raise an error.

The Gemini API key is optional here: a key can also be granted at runtime
from the key-selection page.

Production Mode:
    When app_env="production", additional validations apply:
    - debug must be False
    - cors_allowed_origins cannot be ["*"]
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Gemini (Google GenAI)
    # -------------------------------------------------------------------------
    gemini_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("gemini_api_key", "google_api_key"),
        description="Gemini API key. Can also be granted from the key-selection page.",
    )
    discovery_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for the Maps/Search grounded discovery call",
    )
    extraction_model: str = Field(
        default="gemini-3-flash-preview",
        description="Model used to extract structured businesses from discovery text",
    )
    analysis_model: str = Field(
        default="gemini-3-pro-preview",
        description="Model used for the strategic turnaround analysis",
    )
    image_model: str = Field(
        default="gemini-3-pro-image-preview",
        description="Model used for the visual brand concept",
    )
    video_model: str = Field(
        default="veo-3.1-fast-generate-preview",
        description="Model used for the explanation video",
    )
    video_resolution: str = Field(default="720p", description="Requested video resolution")

    # -------------------------------------------------------------------------
    # Video polling
    # -------------------------------------------------------------------------
    video_poll_interval_seconds: float = Field(
        default=10.0,
        ge=0.0,
        description="Seconds to wait between video operation status checks",
    )
    video_max_poll_attempts: int = Field(
        default=60,
        ge=0,
        description="Maximum number of status checks before giving up (0 = unbounded)",
    )
    video_status_offsets_seconds: tuple[float, float] = Field(
        default=(15.0, 35.0),
        description="Wall-clock offsets for the cosmetic video status messages",
    )
    media_download_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for downloading the finished video",
    )

    # -------------------------------------------------------------------------
    # Geolocation
    # -------------------------------------------------------------------------
    default_latitude: Optional[float] = Field(
        default=None, ge=-90.0, le=90.0, description="Fallback latitude for discovery"
    )
    default_longitude: Optional[float] = Field(
        default=None, ge=-180.0, le=180.0, description="Fallback longitude for discovery"
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
    api_host: str = Field(default="127.0.0.1", description="Bind host for uvicorn")
    api_port: int = Field(default=8000, description="Bind port for uvicorn")
    session_cookie_name: str = Field(
        default="bizniz_session",
        description="Cookie carrying the browser session identifier",
    )
    session_max_count: int = Field(
        default=1000,
        ge=1,
        description="Maximum live browser sessions; the least recently used is evicted",
    )
    session_idle_ttl_seconds: float = Field(
        default=3600.0,
        gt=0.0,
        description="Sessions idle for longer than this are evicted",
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:8000", "http://127.0.0.1:8000"],
        description="Allowed CORS origins. Use ['*'] for development only.",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are secure."""
        if self.app_env == "production":
            errors = []

            if self.debug:
                errors.append("debug must be False in production")

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

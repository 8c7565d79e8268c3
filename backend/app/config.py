"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from dataclasses import dataclass
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field, field_validator, ConfigDict


@dataclass(frozen=True)
class StravaConfig:
    """
    Provider configuration injected into handlers and clients.

    Built from Settings so tests can substitute endpoints and credentials
    without touching the environment.
    """

    client_id: Optional[str]
    client_secret: Optional[str]
    token_url: str = "https://www.strava.com/oauth/token"
    api_url: str = "https://www.strava.com/api/v3"
    authorize_url: str = "https://www.strava.com/oauth/authorize"
    lookback_days: int = 90
    page_size: int = 100
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./app.db",
        description="Database connection URL"
    )

    # === Strava ===
    strava_client_id: Optional[str] = Field(default=None)
    strava_client_secret: Optional[str] = Field(
        default=None,
        # Also accept STRAVA_SECRET
        validation_alias=AliasChoices("strava_client_secret", "strava_secret"),
    )
    strava_token_url: str = Field(default="https://www.strava.com/oauth/token")
    strava_api_url: str = Field(default="https://www.strava.com/api/v3")
    strava_authorize_url: str = Field(default="https://www.strava.com/oauth/authorize")

    # === Sync ===
    sync_lookback_days: int = Field(default=90, description="Activity fetch window (days)")
    sync_page_size: int = Field(default=100, description="Activities requested per sync")
    provider_timeout_seconds: float = Field(default=30.0)

    # === Identity ===
    identity_url: Optional[str] = Field(
        default=None,
        description="Endpoint resolving a bearer token to a user (e.g. <supabase>/auth/v1/user)"
    )
    identity_api_key: Optional[str] = Field(
        default=None,
        description="API key sent with identity lookups"
    )

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    def strava_config(self) -> StravaConfig:
        """Build the provider configuration handed to the Strava components."""
        return StravaConfig(
            client_id=self.strava_client_id,
            client_secret=self.strava_client_secret,
            token_url=self.strava_token_url,
            api_url=self.strava_api_url.rstrip("/"),
            authorize_url=self.strava_authorize_url,
            lookback_days=self.sync_lookback_days,
            page_size=self.sync_page_size,
            timeout_seconds=self.provider_timeout_seconds,
        )

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance
settings = Settings()

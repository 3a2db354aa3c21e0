"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis
    redis_url: RedisDsn = Field(
        default=...,
        description="Redis connection URL",
    )

    # Sessions
    jwt_secret: str = Field(
        default=...,
        description="Secret used to sign admin session tokens",
    )
    client_jwt_secret: str = Field(
        default=...,
        description="Secret used to sign client portal session tokens",
    )
    admin_session_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        description="Admin session lifetime in seconds",
    )
    client_session_seconds: int = Field(
        default=30 * 24 * 60 * 60,
        description="Client session lifetime in seconds",
    )
    verification_token_seconds: int = Field(
        default=24 * 60 * 60,
        description="Email verification token lifetime in seconds",
    )

    # Email (Resend)
    resend_api_key: str = Field(
        default=...,
        description="Resend API key for transactional email",
    )
    email_from: str = Field(
        default="boris@199.clinic",
        description="Sender address for outbound email",
    )
    email_to: str = Field(
        default="info@thecontinuumclinic.com",
        description="Clinic inbox receiving form notifications",
    )

    # Site
    site_url: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("site_url", "next_public_site_url"),
        description="Public base URL used in email links",
    )
    default_locale: str = Field(
        default="en",
        description="Locale used when none can be negotiated",
    )

    # Application
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Application environment",
    )
    app_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    app_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # Rate limits (fixed windows)
    contact_rate_limit: int = Field(default=3, description="Contact submissions per window")
    contact_rate_window_seconds: int = Field(default=60 * 60)
    login_rate_limit: int = Field(default=5, description="Login attempts per window")
    login_rate_window_seconds: int = Field(default=15 * 60)
    appointment_rate_limit: int = Field(default=5, description="Booking requests per window")
    appointment_rate_window_seconds: int = Field(default=24 * 60 * 60)

    # Analytics
    analytics_session_seconds: int = Field(
        default=30 * 60,
        description="Idle window of an analytics visitor session",
    )
    analytics_default_days: int = Field(
        default=30,
        description="Default range of the analytics dashboard",
    )
    analytics_top_n: int = Field(
        default=10,
        description="Number of entries in ranked analytics lists",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def secure_cookies(self) -> bool:
        """Session cookies carry the Secure flag only in production."""
        return self.is_production


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    return Settings()

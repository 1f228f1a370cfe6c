"""
Centralized configuration for the Scribe backend.

All settings are loaded from environment variables with sensible defaults.
Every variable is prefixed with SCRIBE_ (e.g., SCRIBE_STRIPE_SECRET_KEY).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCRIBE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Scribe API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Session tokens issued by the sign-in boundary
    auth_jwt_secret: str = ""
    auth_jwt_audience: str = "authenticated"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # direct Postgres URI, used by run_migrations.py

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_price_id: str = ""

    # Frontend URLs (for redirects)
    frontend_url: str = "http://localhost:3000"

    # Social network API
    social_api_base_url: str = "https://api.twitter.com"

    # Ceiling for every outbound call (social API, Stripe)
    upstream_timeout_seconds: float = 30.0

    # Posting quota
    free_post_allowance: int = 2
    max_post_length: int = 280
    default_monthly_post_limit: int = 0
    post_commit_attempts: int = 3


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

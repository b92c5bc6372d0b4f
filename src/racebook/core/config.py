"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_config_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined in the model
    )

    # App
    app_name: str = "Racebook API"
    app_version: str = "0.1.0"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""  # Used for provisioning rows when signup returns no session
    supabase_jwt_secret: str = ""

    # Tables
    bets_table: str = "racing_bets"
    profiles_table: str = "user_profiles"
    bankrolls_table: str = "bankrolls"
    user_settings_table: str = "user_settings"

    # First-run provisioning defaults
    default_currency: str = "GBP"
    default_bankroll_amount: float = 1000.0
    default_stake: float = 10.0
    default_odds_format: str = "decimal"

    # Accounts
    password_medium_min_length: int = 10  # 8 = lenient registration-page rule
    dashboard_path: str = "/betting-dashboard"

    # API Settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    http_timeout: float = 15.0

    # Rate Limiting
    rate_limit_enabled: bool = True
    redis_url: str = ""

    # Monitoring
    sentry_dsn: str = ""

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @model_validator(mode="after")
    def _validate_production_env(self) -> "Settings":
        """Validate that critical env vars are set in production."""
        if self.app_env != "production":
            return self
        missing: list[str] = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")
        if missing:
            raise ValueError(f"Missing required env vars for production: {', '.join(missing)}")
        if not self.supabase_jwt_secret:
            _config_logger.warning("SUPABASE_JWT_SECRET not set - only JWKS verification available")
        if not self.supabase_service_role_key:
            _config_logger.warning(
                "SUPABASE_SERVICE_ROLE_KEY not set - provisioning falls back to the anon key"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

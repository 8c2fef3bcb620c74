"""
Application configuration using Pydantic settings.

Usage:
    from core.config import get_settings
    settings = get_settings()

For domain constants, import from core.constants:
    from core.constants import ALLOWED_IMAGE_TYPES, POINTS_PER_CURRENCY_UNIT
"""

import os
import warnings
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION_ENVS = ("production", "prod")
PLACEHOLDER_JWT_SECRETS = frozenset(
    {"change_me", "changeme", "secret", "your-secret-key", "jwt-secret", "supersecret", "development", "test"}
)


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for production:
        - JWT_SECRET_KEY (min 32 chars)
        - STRIPE_SECRET_KEY / STRIPE_WEBHOOK_SECRET (for checkout)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "CampusEats API"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)
    env: str = Field(default="development", validation_alias="ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Database
    database_url: str = Field(default="sqlite:///campuseats.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    auto_create_tables: bool = Field(default=True, validation_alias="AUTO_CREATE_TABLES")

    # JWT / Authentication
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str = Field(default="campuseats", validation_alias="JWT_ISSUER")
    jwt_audience: str = Field(default="campuseats-clients", validation_alias="JWT_AUDIENCE")
    access_token_expire_minutes: int = Field(default=15, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(default=7, validation_alias="REFRESH_TOKEN_EXPIRE_DAYS")

    # Refresh token cookie
    refresh_cookie_name: str = Field(default="refresh_token")
    refresh_cookie_secure: bool = Field(default=True, validation_alias="REFRESH_COOKIE_SECURE")

    # CORS
    cors_allowed_origins: str = Field(default="http://localhost:5173", validation_alias="CORS_ALLOWED_ORIGINS")

    # Uploads
    public_base_url: str = Field(default="http://localhost:8000", validation_alias="PUBLIC_BASE_URL")
    upload_root: str = Field(default="uploads", validation_alias="UPLOAD_ROOT")
    max_image_size_mb: int = Field(default=5, validation_alias="MAX_IMAGE_SIZE_MB")
    max_request_size_mb: int = Field(default=10, validation_alias="MAX_REQUEST_SIZE_MB")

    # Stripe checkout
    stripe_secret_key: Optional[str] = Field(default=None, validation_alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: Optional[str] = Field(default=None, validation_alias="STRIPE_WEBHOOK_SECRET")
    stripe_success_url: str = Field(
        default="http://localhost:5173/orders?status=success",
        validation_alias="STRIPE_SUCCESS_URL",
    )
    stripe_cancel_url: str = Field(
        default="http://localhost:5173/orders?status=cancel",
        validation_alias="STRIPE_CANCEL_URL",
    )
    payment_currency: str = Field(default="ron", validation_alias="PAYMENT_CURRENCY")

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Reject placeholder or short secrets in production, warn about them elsewhere."""
        problem = None
        if v.lower() in PLACEHOLDER_JWT_SECRETS:
            problem = "JWT_SECRET_KEY is a placeholder value"
        elif len(v) < 32:
            problem = f"JWT_SECRET_KEY should be at least 32 characters (got {len(v)})"

        if problem is None:
            return v
        if os.getenv("ENV", "development").lower() in PRODUCTION_ENVS:
            raise ValueError(f"{problem}; generate one with secrets.token_urlsafe(48)")
        warnings.warn(f"{problem}. Set a proper key before deploying.", UserWarning, stacklevel=2)
        return v

    @property
    def is_production(self) -> bool:
        return self.env.lower() in PRODUCTION_ENVS

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    def validate_production_config(self) -> tuple[List[str], List[str]]:
        """
        Production-only checks on top of the generic security checks.

        Returns:
            (errors, advisories): errors stop startup, advisories are logged.
        """
        errors: List[str] = []
        advisories: List[str] = []

        if self.debug:
            errors.append("DEBUG must be off in production")
        if not self.refresh_cookie_secure:
            errors.append("REFRESH_COOKIE_SECURE must be true in production")
        if self.database_url.startswith("sqlite"):
            advisories.append("DATABASE_URL points at SQLite; use PostgreSQL in production")
        if self.auto_create_tables:
            advisories.append("AUTO_CREATE_TABLES is on; run Alembic migrations instead")

        return errors, advisories


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]

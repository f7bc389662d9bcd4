"""
Application configuration settings.

All configuration is loaded from environment variables with sensible defaults.
"""
import json
from typing import Any, Optional
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Humidor Club"
    api_debug: bool = True
    secret_key: str = DEFAULT_SECRET_KEY  # SECURITY: Must be overridden in production via env var

    # JWT Settings
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24 * 30  # 30 days, matches the session cookie lifetime

    # Magic link sign-in
    magic_link_expire_minutes: int = 60 * 24
    # Keeps the most recent sign-in link per email so developers can fetch it
    # without reading logs. Never enable in production.
    magic_link_store_enabled: Optional[bool] = None
    magic_link_store_ttl_seconds: int = 60 * 60 * 24
    magic_link_store_max_size: int = 1000

    # Domain settings for production
    frontend_url: str = "http://localhost:3000"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_user: str = "humidor"
    postgres_password: str = "humidor_password"
    postgres_db: str = "humidor_club"
    database_url: Optional[str] = None
    database_pool_size: int = 10
    database_max_overflow: int = 20

    # Redis
    redis_url: str = "redis://redis:6379/0"

    # Rate limiting
    rate_limit_per_minute: int = 60
    auth_rate_limit_per_minute: int = 5

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [v]
        return v

    @property
    def database_url_computed(self) -> str:
        """Compute database URL from components if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def magic_link_store_active(self) -> bool:
        """The dev link store follows debug mode unless set explicitly."""
        if self.magic_link_store_enabled is None:
            return self.api_debug
        return self.magic_link_store_enabled


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    # Security check: warn if using default secret key in production
    if not settings.api_debug and settings.secret_key == DEFAULT_SECRET_KEY:
        import warnings
        warnings.warn(
            "SECURITY WARNING: Using default secret_key in production! "
            "Set SECRET_KEY environment variable to a secure random value.",
            UserWarning
        )

    return settings


settings = get_settings()

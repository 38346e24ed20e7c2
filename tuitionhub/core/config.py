# tuitionhub/core/config.py
# All application settings loaded from environment variables / .env file
# In production: values come from the deployment's secret store via env injection
# In development: loaded from .env file via python-dotenv

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all TuitionHub configuration.
    pydantic-settings automatically reads from environment variables.
    Variable names are case-insensitive.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # App
    app_env: str = "development"
    app_name: str = "TuitionHub"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle: int = 1800
    db_echo: bool = False
    auto_migrate_on_startup: bool = False

    # Redis (health check + notification fan-out)
    # Empty string disables publishing
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: int = 2  # Seconds, for both connect and read/write
    notification_channel_prefix: str = "tuitionhub:notifications"

    # JWT
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Password hashing
    bcrypt_rounds: int = 12

    # Razorpay
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    payment_currency: str = "BDT"

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origins(self) -> List[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached Settings instance.
    Use as a FastAPI dependency: settings = Depends(get_settings)
    Or import directly:         from tuitionhub.core.config import settings
    """
    return Settings()


# Module-level singleton -- import this directly in most places
settings = get_settings()

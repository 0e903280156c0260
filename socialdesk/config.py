"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "SocialDesk API"
    debug: bool = False
    environment: str = "development"

    # Security
    secret_key: str = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./socialdesk.db")

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # OneUp scheduler
    oneup_api_key: Optional[str] = None
    oneup_base_url: str = "https://www.oneupapp.io/api"

    # Public URL the scheduler fetches post images from
    public_app_url: str = "http://localhost:3000"

    # Content research VPS (topical maps)
    content_api_url: str = "http://localhost:8080"

    # Scheduling
    schedule_horizon_months: int = 6
    publish_rate_limit: str = "10/minute"
    http_timeout: int = 30  # seconds

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Validate secret key on startup
settings = get_settings()
if settings.environment == "production" and not os.getenv("SECRET_KEY"):
    raise ValueError(
        "SECRET_KEY must be set in production! "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )

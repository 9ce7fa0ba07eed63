"""
Configuration management for the portfolio gallery API.
Uses Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Portfolio Gallery API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Backend API for the portfolio image feed, admin panel and visitor counter"

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:9002",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:9002",
    ]

    # Database Configuration
    # Empty means an in-memory SQLite database (development only)
    DATABASE_URL: str = ""
    # Create tables on startup instead of relying on Alembic migrations
    DB_CREATE_TABLES: bool = False

    # Admin account
    # ADMIN_PASSWORD_HASH should be a bcrypt hash (see generate_password_hash.py)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD_HASH: str = ""
    ADMIN_AVATAR_URL: str = "/images/logo.jpg"

    # JWT Configuration
    # SECRET_KEY should be a long random string (e.g., generated with: openssl rand -hex 32)
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production-use-openssl-rand-hex-32"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    COOKIE_SECURE: bool = True

    # Image feed pagination
    DEFAULT_PAGE_SIZE: int = 4
    MAX_PAGE_SIZE: int = 100

    RATE_LIMIT_ENABLED: bool = True
    SEED_DB_ON_START: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()

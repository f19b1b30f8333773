"""
Application configuration using Pydantic Settings.

Values are read from the environment (and an optional .env file).
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./achievements.db"
    # Create missing tables on startup
    AUTO_CREATE_TABLES: bool = True

    # ===========================================
    # API Keys
    # ===========================================
    API_KEY_HEADER: str = "x-api-key"
    # Default lifetime for keys issued without an explicit expDate
    API_KEY_TTL_DAYS: int = 365

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # URL for accessing the backend (used to build public storage URLs)
    BASE_URL: str = "http://localhost:8000"

    # ===========================================
    # Storage
    # ===========================================
    STORAGE_BASE_PATH: str = "./storage"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()

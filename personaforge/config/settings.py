"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "PersonaForge"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Database (SQLite locally, PostgreSQL in production)
    DATABASE_URL: str = "sqlite:///./personaforge.db"

    # Internal Token (HS256)
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    ALGORITHM: str = "HS256"

    # Cookie settings
    COOKIE_NAME: str = "personaforge_access_token"
    COOKIE_DOMAIN: Optional[str] = None  # None = use request domain
    COOKIE_SECURE: bool = True  # HTTPS required
    COOKIE_SAMESITE: str = "lax"

    # Operator registration
    ALLOWED_EMAIL_DOMAIN: Optional[str] = None  # e.g. "police.belgium.eu"
    PASSWORD_HASH_ITERATIONS: int = 390_000

    # Upstream random identity source
    IDENTITY_SOURCE_URL: str = "https://randomuser.me/api/"
    IDENTITY_SOURCE_TIMEOUT: float = 10.0  # seconds per upstream call
    IDENTITY_MAX_ATTEMPTS: int = 25  # age rejection-sampling cap

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

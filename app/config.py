"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. This keeps the superuser credentials out of source code — the .env
file is gitignored, and operators supply real values per deployment.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from app.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Shop Admin API.

    Nothing is strictly required: without SUPERUSER_EMAIL / SUPERUSER_PASSWORD
    the startup bootstrap simply does not create a superuser.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Shop Admin API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for development; swap to a postgresql+asyncpg URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/shop.db"

    # --- Superuser bootstrap ---
    # Read once at startup. Both must be set for a superuser to be created.
    SUPERUSER_EMAIL: str | None = None
    SUPERUSER_PASSWORD: str | None = None
    SUPERUSER_NAME: str = "Super User"

    # --- Verification codes ---
    # Number of random bytes behind each code (token_urlsafe encodes ~1.3 chars/byte)
    VERIFICATION_CODE_BYTES: int = 24

    # --- Directory pagination ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # --- CORS ---
    # Origins allowed to make cross-origin requests (admin frontend URLs)
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

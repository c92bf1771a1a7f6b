from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator

DEFAULT_SESSION_SECRET = "change-me-in-production-session"


class Settings(BaseSettings):
    """
    Main configuration for Spend Ledger.
    Uses Pydantic-Settings for environment variable parsing from .env.
    """
    APP_NAME: str = "Spend Ledger"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    TESTING: bool = False

    # Security
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    SESSION_SECRET_KEY: str = DEFAULT_SESSION_SECRET
    SESSION_COOKIE_NAME: str = "session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7  # 7 days

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./spend_ledger.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Reconnect-and-retry for transient connection failures
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_BASE_DELAY_SECONDS: float = 0.5

    # Ingestion
    INGEST_BATCH_SIZE: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True
    )

    @property
    def is_production(self) -> bool:
        return not (self.DEBUG or self.TESTING)

    @model_validator(mode='after')
    def validate_session_key_in_production(self) -> 'Settings':
        """Fail-closed: Prevent startup with the default session key in production."""
        if self.is_production and self.SESSION_SECRET_KEY == DEFAULT_SESSION_SECRET:
            raise ValueError(
                "SECURITY ERROR: SESSION_SECRET_KEY must be changed from default in production! "
                "Set SESSION_SECRET_KEY environment variable to a secure random value."
            )
        if self.DB_RETRY_ATTEMPTS < 1:
            raise ValueError("DB_RETRY_ATTEMPTS must be at least 1.")
        return self


@lru_cache
def get_settings():
    """Returns a singleton instance of the application settings."""
    return Settings()

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Inventory & Sales Analytics API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "local"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./inventory.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_REQUESTS: bool = True

    # ==============================
    # Security
    # ==============================
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 7 * 24 * 60
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None
    PASSWORD_PBKDF2_ROUNDS: int = 200_000
    PASSWORD_MIN_LENGTH: int = 6

    # ==============================
    # Rate limiting (per client IP, sliding window)
    # ==============================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_API_REQUESTS: int = 100
    RATE_LIMIT_AUTH_REQUESTS: int = 5

    # ==============================
    # Bootstrap owner account
    # ==============================
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_EMAIL: str = "admin@example.com"
    DEFAULT_ADMIN_PASSWORD: Optional[str] = None

    # ==============================
    # Uploads
    # ==============================
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024

    # ==============================
    # Sales
    # ==============================
    SALE_RETRY_ATTEMPTS: int = 3
    SALE_RETRY_BACKOFF_SECONDS: float = 0.05
    SALES_STATS_DAYS: int = 30

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]

"""ServiceHub Backend — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/servicehub.db"

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60

    # Accounts granted the admin role on first visit to the admin area
    ADMIN_EMAILS: list[str] = []

    # Timezone
    TIMEZONE: str = "Asia/Kolkata"

    # Object storage
    STORAGE_DIR: str = "./data/storage"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Geocoding (OpenCage-compatible)
    GEOCODING_API_URL: str = "https://api.opencagedata.com/geocode/v1/json"
    GEOCODING_API_KEY: str = ""

    # Transactional mail HTTP API
    MAIL_API_URL: str = ""
    MAIL_API_KEY: str = ""
    PASSWORD_RESET_EXPIRE_MINUTES: int = 30
    PASSWORD_RESET_URL: str = "http://localhost:3000/reset-password"

    # Maintenance
    REJECTED_RETENTION_DAYS: int = 30
    SCHEDULER_ENABLED: bool = True
    CLEANUP_HOUR: int = 3

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

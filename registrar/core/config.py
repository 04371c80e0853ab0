"""Settings, read from ``REGISTRAR_*`` environment variables or a ``.env`` file."""
from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # DEV defaults
    secret_key: str = Field(default="change-me-in-production", min_length=8)
    algorithm: str = "HS256"
    token_expire_minutes: int = Field(default=60, ge=1, le=10080)

    database_url: str = "sqlite:///./registrar.db"
    # seconds a SQLite writer waits for the database lock before giving up
    sqlite_busy_timeout: float = Field(default=30.0, gt=0)

    log_level: str = "INFO"

    institution_name: str = "Secretaria Online"

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()

SECRET_KEY = settings.secret_key
ALGORITHM = settings.algorithm
ACCESS_TOKEN_EXPIRE = timedelta(minutes=settings.token_expire_minutes)

DATABASE_URL = settings.database_url
SQLITE_BUSY_TIMEOUT_SECONDS = settings.sqlite_busy_timeout

LOG_LEVEL = settings.log_level.upper()

# Academic rules
MAX_CURRENT_SEMESTER = 12
REENROLLMENT_MIN_YEAR = 2020
REENROLLMENT_MAX_YEAR = 2100

# Contract rendering
INSTITUTION_NAME = settings.institution_name

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # JWT Authentication
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Accountability engine
    # "check_in" (weekly check-ins) or "progress_update" (progress notes)
    INACTIVITY_SIGNAL: Literal["check_in", "progress_update"] = "check_in"

    # Weekly inactivity sweep (UTC)
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_WEEKDAY: int = 0  # Monday
    SCHEDULER_HOUR: int = 9
    SCHEDULER_MINUTE: int = 0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()

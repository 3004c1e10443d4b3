"""
@file: config.py
@description:
This module provides centralized configuration management for the Pitchside backend.
It loads environment variables and provides typed access to configuration settings
used throughout the application.

The configuration includes settings for:
- Application general settings (debug mode, environment)
- Supabase connection (prediction store) and the raw database URL for schema bootstrap
- External APIs (OpenAI, TheSportsDB)
- Prediction job tuning (reuse window, sync lookback, polling cadence)
- Celery and Redis for background generation and scheduled syncs
- Logging parameters

@dependencies:
- pydantic: For settings validation
- pydantic_settings: For environment variable loading
- dotenv: For loading environment variables from .env file

@notes:
- All sensitive configuration is loaded from environment variables
- Credentials default to None; components that need them raise ConfigurationError
  when they are missing instead of failing at import time
"""

from typing import Optional, Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from datetime import timedelta


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Provides typed access to all configuration parameters used in the application.
    """
    # Application Settings
    APP_ENV: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # Prediction store
    SUPABASE_URL: Optional[str] = Field(default=None)
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(default=None)
    DATABASE_URL: Optional[str] = Field(default=None)

    # External APIs
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    OPENAI_MODEL: str = Field(default="gpt-4o")
    OPENAI_TEMPERATURE: float = Field(default=0.4)
    OPENAI_MAX_TOKENS: int = Field(default=4000)
    THESPORTSDB_API_KEY: Optional[str] = Field(default=None)
    THESPORTSDB_BASE_URL: str = Field(default="https://www.thesportsdb.com/api/v1/json")
    SPORTS_API_TIMEOUT: float = Field(default=8.0)

    # Prediction jobs
    REUSE_WINDOW_HOURS: int = Field(default=24)
    SYNC_LOOKBACK_DAYS: int = Field(default=7)
    POLL_INTERVAL_SECONDS: float = Field(default=3.0)
    POLL_MAX_ATTEMPTS: int = Field(default=20)
    LIVE_SCORES_LIMIT: int = Field(default=15)

    # Redis and Celery
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    CELERY_BROKER_URL: Optional[str] = Field(default=None, validate_default=True)
    CELERY_RESULT_BACKEND: Optional[str] = Field(default=None, validate_default=True)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("CELERY_BROKER_URL", mode="before")
    def set_celery_broker_url(cls, v: Optional[str], values: Dict[str, Any]) -> str:
        """
        Set the Celery broker URL to the Redis URL if not explicitly specified.
        """
        if v is not None:
            return v
        return values.data.get("REDIS_URL", "redis://localhost:6379/0")

    @field_validator("CELERY_RESULT_BACKEND", mode="before")
    def set_celery_result_backend(cls, v: Optional[str], values: Dict[str, Any]) -> str:
        """
        Set the Celery result backend to the Redis URL if not explicitly specified.
        """
        if v is not None:
            return v
        return values.data.get("REDIS_URL", "redis://localhost:6379/0")

    @property
    def REUSE_WINDOW(self) -> timedelta:
        """Rolling window during which a request attaches to an existing job."""
        return timedelta(hours=self.REUSE_WINDOW_HOURS)

    @property
    def SYNC_LOOKBACK(self) -> timedelta:
        """How far back the status sync looks for pending predictions."""
        return timedelta(days=self.SYNC_LOOKBACK_DAYS)


# Create a global settings object
settings = Settings()


def get_settings() -> Settings:
    """
    Function to get the settings object for dependency injection in FastAPI.
    """
    return settings

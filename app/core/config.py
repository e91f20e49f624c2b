"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.schemas.calibration import ConditionPreset


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Capacity Engine: activity load and pacing estimation."
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = []
    PROJECT_URL: str = ""

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./capacity.db"

    # Engine
    DEFAULT_PRESET: ConditionPreset = ConditionPreset.STANDARD
    LOAD_CACHE_MAX_SIZE: int = Field(default=500, ge=1)
    CALIBRATION_HISTORY_DAYS: int = Field(default=7, ge=0)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()

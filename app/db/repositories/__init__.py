"""Database repositories."""

from app.db.repositories.load_settings import CalibrationDayRepository, LoadSettingsRepository
from app.db.repositories.day_reflection import DayReflectionRepository

__all__ = [
    "LoadSettingsRepository",
    "CalibrationDayRepository",
    "DayReflectionRepository",
]

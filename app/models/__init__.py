"""SQLModel database models."""

from app.models.load_settings import LoadSettings
from app.models.calibration_day import CalibrationDayRecord
from app.models.day_reflection import DayReflection

__all__ = [
    "LoadSettings",
    "CalibrationDayRecord",
    "DayReflection",
]

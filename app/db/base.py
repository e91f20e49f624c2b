"""
Base database configuration.

Import all models here so ``SQLModel.metadata`` knows every table.
"""

from app.models.load_settings import LoadSettings  # noqa: F401
from app.models.calibration_day import CalibrationDayRecord  # noqa: F401
from app.models.day_reflection import DayReflection  # noqa: F401

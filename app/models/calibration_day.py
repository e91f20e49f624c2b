"""
Calibration day model.

One row per good day recorded during the current calibration run.
Rows are cleared when the run completes or is cancelled.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.timestamps import timestamp_column, utcnow


class CalibrationDayRecord(SQLModel, table=True):
    __tablename__ = "calibration_days"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: datetime.date = Field(nullable=False, index=True)
    recorded_load: float = Field(nullable=False, ge=0, le=100)
    position: int = Field(default=0, description="Order within the calibration run")

    created_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

"""
Load settings model.

Persists the calibration manager's state: the capacity profile, an
optional custom configuration, the personal baseline and whether a
calibration run is in progress.  Pending good days live in
``calibration_days``.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.core.timestamps import timestamp_column, utcnow


class LoadSettings(SQLModel, table=True):
    """Singleton row holding the capacity configuration.

    Profile components are stored as their enum values.  The custom
    configuration and the baseline loads are JSON, since they are only
    ever read back whole.
    """

    __tablename__ = "load_settings"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Profile
    preset: str = Field(default="standard", max_length=20)
    capacity: str = Field(default="medium", max_length=20)
    sensitivity: str = Field(default="standard", max_length=20)
    recovery_window: str = Field(default="24h", max_length=10)

    # Explicit configuration, overrides profile and baseline when set
    custom_configuration: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True), )

    # Calibration
    is_calibrating: bool = Field(default=False)
    baseline_established_date: Optional[datetime.date] = Field(default=None)
    baseline_average_load: Optional[float] = Field(default=None)
    baseline_sample_count: int = Field(default=0)
    baseline_loads: Optional[list] = Field(default=None, sa_column=Column(JSON, nullable=True), )

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

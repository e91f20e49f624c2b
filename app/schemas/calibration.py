"""
Calibration and capacity-profile schemas.

A *profile* is the user-facing description of their capacity: a condition
preset, or a custom combination of capacity level, symptom sensitivity
and recovery window.  The profile resolves to a
:class:`~app.schemas.load.LoadConfiguration`.

Calibration personalises the thresholds from three user-confirmed
"good days".  While calibrating, at most three days are pending; the
third one completes the protocol.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.schemas.load import LoadConfiguration, LoadThresholds

CALIBRATION_DAYS_REQUIRED = 3


class ConditionPreset(str, Enum):
    STANDARD = "standard"
    MECFS = "mecfs"
    FIBROMYALGIA = "fibromyalgia"
    PCOS = "pcos"
    PTSD = "ptsd"
    LONG_COVID = "longcovid"
    AUTOIMMUNE = "autoimmune"
    CUSTOM = "custom"


class CapacityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SensitivityProfile(str, Enum):
    SENSITIVE = "sensitive"
    STANDARD = "standard"
    RESILIENT = "resilient"


class RecoveryWindow(str, Enum):
    QUICK = "12h"
    STANDARD = "24h"
    MODERATE = "48h"
    EXTENDED = "72h"


class CapacityProfile(BaseModel):
    """The user's selected preset and its three components."""

    model_config = ConfigDict(frozen=True)

    preset: ConditionPreset = ConditionPreset.STANDARD
    capacity: CapacityLevel = CapacityLevel.MEDIUM
    sensitivity: SensitivityProfile = SensitivityProfile.STANDARD
    recovery_window: RecoveryWindow = RecoveryWindow.STANDARD


class ProfileUpdate(BaseModel):
    """Partial profile change.

    Setting ``preset`` (other than ``custom``) overwrites the three
    components; changing a component away from the preset's value makes
    the profile ``custom``.
    """

    preset: Optional[ConditionPreset] = None
    capacity: Optional[CapacityLevel] = None
    sensitivity: Optional[SensitivityProfile] = None
    recovery_window: Optional[RecoveryWindow] = None


class CalibrationDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    recorded_load: float = Field(..., ge=0.0, le=100.0, allow_inf_nan=False)


class CalibrationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_calibrating: bool = False
    calibration_days: tuple[CalibrationDay, ...] = Field(
        default=(), max_length=CALIBRATION_DAYS_REQUIRED,
    )


class PersonalBaseline(BaseModel):
    """Result of a completed calibration."""

    model_config = ConfigDict(frozen=True)

    established_date: datetime.date
    average_good_day_load: float = Field(..., ge=0.0)
    sample_count: int = Field(..., ge=0)

    @property
    def is_calibrated(self) -> bool:
        return self.sample_count >= CALIBRATION_DAYS_REQUIRED


class GoodDayRequest(BaseModel):
    date: datetime.date
    load: float = Field(..., ge=0.0, le=100.0, allow_inf_nan=False)


class CalibrationProgress(BaseModel):
    """Calibration status surfaced to the presentation layer."""

    is_calibrating: bool
    days_recorded: int
    days_required: int = CALIBRATION_DAYS_REQUIRED
    calibration_days: list[CalibrationDay]
    baseline: Optional[PersonalBaseline] = None
    thresholds: LoadThresholds

    @computed_field
    @property
    def is_calibrated(self) -> bool:
        return self.baseline is not None and self.baseline.is_calibrated


class CalibrationNeed(BaseModel):
    """Whether to invite the user into a calibration run."""

    needs_calibration: bool
    days_of_history: int
    history_days: int = Field(..., description="History shorter than this suggests calibrating")


class ConfigurationResponse(BaseModel):
    profile: CapacityProfile
    configuration: LoadConfiguration
    has_custom_configuration: bool


class PresetDescription(BaseModel):
    preset: ConditionPreset
    display_name: str
    description: str
    capacity: CapacityLevel
    sensitivity: SensitivityProfile
    recovery_window: RecoveryWindow

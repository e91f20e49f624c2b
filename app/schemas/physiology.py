"""
Physiological state schemas.

The classifier maps a handful of biometric readings, judged against the
user's personal baselines, to one discrete state label.  It is independent
from the load recurrence: a state is a display hint, not a load input.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MIN_BASELINE_SAMPLES = 10


class PhysiologicalState(str, Enum):
    RELAXED = "relaxed"
    ELEVATED = "elevated"
    FATIGUED = "fatigued"
    RECOVERED = "recovered"
    ACTIVE = "active"
    MENSTRUAL = "menstrual"
    PRE_MENSTRUAL = "pre_menstrual"
    OVULATION = "ovulation"

    @property
    def display_text(self) -> str:
        return _DISPLAY_TEXT[self]


_DISPLAY_TEXT = {
    PhysiologicalState.RELAXED: "Body: quiet signals",
    PhysiologicalState.ELEVATED: "Body: higher tension",
    PhysiologicalState.FATIGUED: "Body: fatigue markers",
    PhysiologicalState.RECOVERED: "Body: recovery pattern",
    PhysiologicalState.ACTIVE: "Body: busy signals",
    PhysiologicalState.MENSTRUAL: "Cycle: menstrual",
    PhysiologicalState.PRE_MENSTRUAL: "Cycle: pre-menstrual",
    PhysiologicalState.OVULATION: "Cycle: ovulation",
}


class HealthBaseline(BaseModel):
    """Personal mean / spread of one metric."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    mean: float
    standard_deviation: float = Field(..., ge=0.0)
    sample_count: int = Field(..., ge=0)
    last_updated: Optional[datetime.datetime] = None

    @property
    def is_calibrated(self) -> bool:
        return self.sample_count >= MIN_BASELINE_SAMPLES

    def threshold(self, deviations: float) -> float:
        return self.mean + deviations * self.standard_deviation


class HealthBaselines(BaseModel):
    model_config = ConfigDict(frozen=True)

    hrv: Optional[HealthBaseline] = None
    resting_hr: Optional[HealthBaseline] = None


class BiometricReadings(BaseModel):
    """Latest readings for a display refresh.  Every field is optional."""

    hrv: Optional[float] = Field(None, ge=0.0, description="Heart rate variability (ms)")
    resting_hr: Optional[float] = Field(None, ge=0.0, description="Resting heart rate (bpm)")
    sleep_hours: Optional[float] = Field(None, ge=0.0, le=24.0)
    workout_minutes: Optional[float] = Field(None, ge=0.0)
    cycle_day: Optional[int] = Field(None, description="Day of the menstrual cycle")
    flow_level: Optional[str] = Field(None, max_length=20)
    baselines: HealthBaselines = Field(default_factory=HealthBaselines)


class PhysiologicalStateResponse(BaseModel):
    state: Optional[PhysiologicalState]
    display_text: Optional[str]


class BaselineRequest(BaseModel):
    metric: Literal["hrv", "resting_hr"]
    samples: list[float] = Field(..., min_length=1)


class BaselineResponse(BaseModel):
    metric: Literal["hrv", "resting_hr"]
    baseline: Optional[HealthBaseline] = Field(
        None, description="None when fewer than the minimum number of samples were given",
    )

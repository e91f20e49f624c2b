"""
Load score schemas.

A :class:`LoadScore` is produced once per calendar day by the decay
recurrence.  It is immutable: a changed input means the day (and every
day after it) is recomputed, never patched.

Risk tiers are *operational categories* against the active thresholds:

- ``safe``      — load < safe
- ``caution``   — safe <= load < caution
- ``high``      — caution <= load < high
- ``critical``  — load >= high
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from app.schemas.events import DayEvents

LOAD_MIN = 0.0
LOAD_MAX = 100.0

REFLECTION_MULTIPLIER_MIN = 0.5
REFLECTION_MULTIPLIER_MAX = 2.0


class RiskLevel(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)


_RISK_ORDER = [RiskLevel.SAFE, RiskLevel.CAUTION, RiskLevel.HIGH, RiskLevel.CRITICAL]


# ======================================================================
# Configuration
# ======================================================================


class LoadThresholds(BaseModel):
    """Risk thresholds.  ``safe < caution < high`` is enforced.

    ``critical`` mirrors ``high`` in every built-in capacity level and is
    kept for display only; tiering uses ``safe``, ``caution`` and ``high``.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    safe: float = Field(..., gt=0.0, le=LOAD_MAX)
    caution: float = Field(..., gt=0.0, le=LOAD_MAX)
    high: float = Field(..., gt=0.0, le=LOAD_MAX)
    critical: Optional[float] = Field(None, gt=0.0, le=LOAD_MAX)

    @model_validator(mode="after")
    def _check_ascending(self) -> LoadThresholds:
        if not (self.safe < self.caution < self.high):
            raise ValueError(
                f"thresholds must be strictly ascending (safe < caution < high), "
                f"got {self.safe} / {self.caution} / {self.high}"
            )
        if self.critical is not None and self.critical < self.high:
            raise ValueError("critical threshold cannot be below high")
        return self

    def scaled(self, factor: float) -> LoadThresholds:
        """Return thresholds multiplied by *factor* (capped at 100)."""
        return LoadThresholds(
            safe=min(self.safe * factor, LOAD_MAX),
            caution=min(self.caution * factor, LOAD_MAX),
            high=min(self.high * factor, LOAD_MAX),
            critical=min(self.critical * factor, LOAD_MAX) if self.critical is not None else None,
        )


class LoadConfiguration(BaseModel):
    """Everything a recurrence call reads besides the day's inputs."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    thresholds: LoadThresholds = Field(
        default_factory=lambda: LoadThresholds(safe=25.0, caution=50.0, high=75.0, critical=75.0),
    )
    decay_rate: float = Field(0.7, gt=0.0, lt=1.0, description="Per-day carry-over factor of previous load")
    symptom_multiplier: float = Field(1.0, ge=0.0, description="Sensitivity applied to symptom load")


# ======================================================================
# Normalized inputs
# ======================================================================


class DayLoadInputs(BaseModel):
    """One day's events reduced to the terms the recurrence needs."""

    model_config = ConfigDict(frozen=True)

    activity_load: float = Field(0.0, ge=0.0, description="Sum of exertion-event contributions")
    meal_load: float = Field(0.0, ge=0.0, description="Share of activity_load coming from meals")
    sleep_load: float = Field(0.0, ge=0.0, description="Load added by poor main sleep")
    symptom_load: float = Field(0.0, ge=0.0)
    avg_normalized_severity: float = Field(0.0, ge=0.0, le=5.0)
    symptom_modifier: float = Field(1.0, gt=0.0)
    recovery_modifier: Optional[float] = Field(None, gt=0.0)
    symptom_count: int = Field(0, ge=0)

    @property
    def today_load(self) -> float:
        return self.activity_load + self.symptom_load + self.sleep_load


# ======================================================================
# Results
# ======================================================================


class LoadScore(BaseModel):
    """Accumulated load for a single calendar day."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    raw_load: float = Field(..., ge=LOAD_MIN, le=LOAD_MAX, description="Today's load without carry-over")
    decayed_load: float = Field(..., ge=LOAD_MIN, le=LOAD_MAX, description="Today's load plus decayed history")
    risk_level: RiskLevel
    reflection_multiplier: Optional[float] = Field(
        None, ge=REFLECTION_MULTIPLIER_MIN, le=REFLECTION_MULTIPLIER_MAX,
        description="Subjective correction supplied by the user for this day",
    )

    @computed_field
    @property
    def felt_load(self) -> Optional[float]:
        if self.reflection_multiplier is None:
            return None
        return self.decayed_load * self.reflection_multiplier

    @computed_field
    @property
    def effective_load(self) -> float:
        felt = self.felt_load
        return felt if felt is not None else self.decayed_load


class LoadBreakdown(BaseModel):
    """Per-source breakdown of one day's load (carry-over excluded)."""

    activity_load: float
    meal_load: float
    sleep_load: float
    symptom_load: float
    total_load: float

    def _share(self, part: float) -> float:
        return part / self.total_load * 100.0 if self.total_load > 0 else 0.0

    @computed_field
    @property
    def activity_percentage(self) -> float:
        return self._share(self.activity_load)

    @computed_field
    @property
    def meal_percentage(self) -> float:
        return self._share(self.meal_load)

    @computed_field
    @property
    def sleep_percentage(self) -> float:
        return self._share(self.sleep_load)

    @computed_field
    @property
    def symptom_percentage(self) -> float:
        return self._share(self.symptom_load)


# ======================================================================
# API request bodies
# ======================================================================


class DayLoadRequest(BaseModel):
    """Compute a single day against an explicit previous load."""

    day: DayEvents
    previous_load: float = Field(0.0, ge=LOAD_MIN, le=LOAD_MAX, allow_inf_nan=False)
    reflection_multiplier: Optional[float] = Field(
        None, ge=REFLECTION_MULTIPLIER_MIN, le=REFLECTION_MULTIPLIER_MAX,
    )


class RangeLoadRequest(BaseModel):
    """Compute every day in ``[start, end]``.  Days absent from ``days`` are empty."""

    start: datetime.date
    end: datetime.date
    days: list[DayEvents] = Field(default_factory=list)
    use_reflections: bool = Field(True, description="Apply stored day reflections and carry felt load forward")

    @model_validator(mode="after")
    def _check_order(self) -> RangeLoadRequest:
        if self.end < self.start:
            raise ValueError("end must not be before start")
        if (self.end - self.start).days > 366:
            raise ValueError("range cannot exceed 366 days")
        return self

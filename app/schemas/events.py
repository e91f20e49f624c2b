"""
Event record schemas.

The engine consumes three families of records for a calendar day:

- **Exertion events** — activities and meals.  Each carries a physical,
  cognitive and emotional exertion rating on a 1-5 scale and adds load.
- **Recovery events** — sleep.  Sleep mostly changes how fast yesterday's
  load decays; only poor main sleep adds load of its own.
- **Symptom records** — severity on a 1-5 scale, plus whether the symptom
  is a *positive* type (e.g. "energy") whose scale runs the other way.

Numeric fields are deliberately *not* range-constrained here: records come
from persisted data that may be stale or corrupted, and the normalizer
clamps values (or discards non-finite ones) instead of rejecting the whole
day.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ActivityEvent(BaseModel):
    """A logged activity.  Full weight, duration-scaled."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["activity"] = "activity"
    effective_date: datetime.date = Field(..., description="Calendar day the activity counts towards")
    name: Optional[str] = Field(None, max_length=200)
    physical_exertion: float = Field(..., description="Physical exertion (1-5)")
    cognitive_exertion: float = Field(..., description="Cognitive exertion (1-5)")
    emotional_load: float = Field(..., description="Emotional load (1-5)")
    duration_minutes: Optional[float] = Field(None, description="Duration in minutes (defaults to 60)")


class MealEvent(BaseModel):
    """A logged meal.  Half weight; exertion ratings are optional.

    A meal without any exertion rating contributes no load at all.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["meal"] = "meal"
    effective_date: datetime.date
    meal_type: Optional[str] = Field(None, max_length=50)
    physical_exertion: Optional[float] = None
    cognitive_exertion: Optional[float] = None
    emotional_load: Optional[float] = None

    @property
    def has_exertion_data(self) -> bool:
        return (self.physical_exertion is not None or self.cognitive_exertion is not None
                or self.emotional_load is not None)


class SleepEvent(BaseModel):
    """A sleep period, main sleep or nap, derived from bed and wake times."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["sleep"] = "sleep"
    quality: float = Field(..., description="Sleep quality (1-5)")
    bed_time: Optional[datetime.datetime] = None
    wake_time: Optional[datetime.datetime] = None
    effective_date: Optional[datetime.date] = Field(
        None, description="Day the sleep impacts (defaults to the wake time's day)",
    )

    @property
    def duration_hours(self) -> float:
        if self.bed_time is None or self.wake_time is None:
            return 0.0
        return (self.wake_time - self.bed_time).total_seconds() / 3600.0


ExertionEvent = Annotated[Union[ActivityEvent, MealEvent], Field(discriminator="kind")]
LoadEvent = Annotated[Union[ActivityEvent, MealEvent, SleepEvent], Field(discriminator="kind")]


class SymptomRecord(BaseModel):
    """A single symptom observation."""

    model_config = ConfigDict(frozen=True)

    effective_date: datetime.date
    severity: float = Field(..., description="Severity (1-5); for positive types 5 is best")
    is_positive_type: bool = Field(False, description="True for wellbeing-type symptoms such as energy")
    name: Optional[str] = Field(None, max_length=100)


class DayEvents(BaseModel):
    """All records supplied for one calendar day."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    events: list[LoadEvent] = Field(default_factory=list)
    symptoms: list[SymptomRecord] = Field(default_factory=list)

    @property
    def exertion_events(self) -> list[Union[ActivityEvent, MealEvent]]:
        return [e for e in self.events if isinstance(e, (ActivityEvent, MealEvent))]

    @property
    def sleep_events(self) -> list[SleepEvent]:
        return [e for e in self.events if isinstance(e, SleepEvent)]

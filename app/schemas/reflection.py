"""
Day reflection API schemas.

A reflection is the user's end-of-day self-report.  Its
``load_multiplier`` is the subjective correction ("today felt heavier /
lighter than computed") applied to that day's decayed load.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.load import REFLECTION_MULTIPLIER_MAX, REFLECTION_MULTIPLIER_MIN


class DayReflectionBase(BaseModel):
    """Shared reflection fields.  All optional; unset means not answered."""

    body_to_mood: Optional[int] = Field(
        None, ge=1, le=5,
        description="How much the body affected mood today (1-5)",
    )
    mind_to_body: Optional[int] = Field(
        None, ge=1, le=5,
        description="How much the mind affected the body today (1-5)",
    )
    self_care_space: Optional[int] = Field(
        None, ge=1, le=5,
        description="How much room there was for self-care (1-5)",
    )
    load_multiplier: Optional[float] = Field(
        None, ge=REFLECTION_MULTIPLIER_MIN, le=REFLECTION_MULTIPLIER_MAX, allow_inf_nan=False,
        description="Felt load relative to the computed load (0.5-2.0)",
    )
    notes: Optional[str] = Field(None, max_length=2000)


class DayReflectionUpdate(DayReflectionBase):
    """Partial update; only fields present in the request body are applied."""
    pass


class DayReflectionResponse(DayReflectionBase):
    id: int
    date: datetime.date
    created_at: datetime.datetime
    updated_at: datetime.datetime

    class Config:
        from_attributes = True

    @property
    def has_data(self) -> bool:
        return any(
            value is not None
            for value in (self.body_to_mood, self.mind_to_body, self.self_care_space, self.load_multiplier)
        ) or bool(self.notes)

"""
Day reflection database model.

Defines the day_reflections table: the user's end-of-day self-report,
at most one per calendar day.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.timestamps import timestamp_column, utcnow


class DayReflection(SQLModel, table=True):
    """
    Subjective reflection on one day.

    ``load_multiplier`` corrects the computed load for that day; the three
    ratings (1-5) are kept for the user's own review.  Created lazily the
    first time any field is set.
    """
    __tablename__ = "day_reflections"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: datetime.date = Field(nullable=False, unique=True, index=True)

    # Ratings
    body_to_mood: Optional[int] = Field(default=None, ge=1, le=5)
    mind_to_body: Optional[int] = Field(default=None, ge=1, le=5)
    self_care_space: Optional[int] = Field(default=None, ge=1, le=5)

    # Load correction
    load_multiplier: Optional[float] = Field(default=None, ge=0.5, le=2.0)

    notes: Optional[str] = Field(default=None, max_length=2000)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

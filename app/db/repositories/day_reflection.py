"""
Day reflection repository.

Handles database operations for the DayReflection model.
"""

import datetime
from typing import Optional

from sqlmodel import Session, select

from app.models.day_reflection import DayReflection


class DayReflectionRepository:
    """Repository for DayReflection database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, reflection: DayReflection) -> DayReflection:
        self.session.add(reflection)
        self.session.commit()
        self.session.refresh(reflection)
        return reflection

    def get_by_id(self, reflection_id: int) -> Optional[DayReflection]:
        return self.session.get(DayReflection, reflection_id)

    def get_by_date(self, date: datetime.date) -> Optional[DayReflection]:
        statement = select(DayReflection).where(DayReflection.date == date)
        return self.session.exec(statement).first()

    def get_date_range(self, start: datetime.date, end: datetime.date) -> list[DayReflection]:
        """Get reflections within a date range (inclusive), oldest first."""
        statement = (
            select(DayReflection)
            .where(
                DayReflection.date >= start,
                DayReflection.date <= end,
            )
            .order_by(DayReflection.date)
        )
        return list(self.session.exec(statement).all())

    def get_multipliers(self, start: datetime.date, end: datetime.date) -> dict[datetime.date, float]:
        """``{date: load_multiplier}`` for days in range that have one."""
        statement = select(DayReflection.date, DayReflection.load_multiplier).where(
            DayReflection.date >= start,
            DayReflection.date <= end,
            DayReflection.load_multiplier.is_not(None),
        )
        return {date: multiplier for date, multiplier in self.session.exec(statement).all()}

    def update(self, reflection: DayReflection) -> DayReflection:
        self.session.add(reflection)
        self.session.commit()
        self.session.refresh(reflection)
        return reflection

    def delete(self, reflection_id: int) -> bool:
        reflection = self.get_by_id(reflection_id)
        if reflection:
            self.session.delete(reflection)
            self.session.commit()
            return True
        return False

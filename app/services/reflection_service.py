"""
Day reflection service.

Business logic for end-of-day reflections.  A reflection is created
lazily on the first write for a date; later writes merge only the fields
present in the request.
"""

import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.capacity.cache import LoadScoreCache
from app.core.timestamps import utcnow
from app.db.repositories.day_reflection import DayReflectionRepository
from app.models.day_reflection import DayReflection
from app.schemas.reflection import DayReflectionResponse, DayReflectionUpdate

logger = logging.getLogger(__name__)


class ReflectionService:
    """Service for day reflection business logic."""

    def __init__(self, session: Session, cache: Optional[LoadScoreCache] = None):
        self.repository = DayReflectionRepository(session)
        self.cache = cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, date: datetime.date, data: DayReflectionUpdate) -> tuple[DayReflectionResponse, bool]:
        """Create or update the reflection for *date*.

        Returns:
            Tuple of (response, created) where created is True if new entry.
        """
        fields = data.model_dump(exclude_unset=True)
        existing = self.repository.get_by_date(date)

        if existing:
            for key, value in fields.items():
                setattr(existing, key, value)
            existing.updated_at = utcnow()
            reflection = self.repository.update(existing)
            created = False
        else:
            reflection = self.repository.create(DayReflection(date=date, **fields))
            created = True

        if "load_multiplier" in fields:
            self._invalidate_from(date)
        return DayReflectionResponse.model_validate(reflection), created

    def get_by_date(self, date: datetime.date) -> DayReflectionResponse:
        return DayReflectionResponse.model_validate(self._get_existing(date))

    def get_range(self, start: datetime.date, end: datetime.date) -> list[DayReflectionResponse]:
        return [DayReflectionResponse.model_validate(r) for r in self.repository.get_date_range(start, end)]

    def get_multipliers(self, start: datetime.date, end: datetime.date) -> dict[datetime.date, float]:
        return self.repository.get_multipliers(start, end)

    def delete_by_date(self, date: datetime.date) -> None:
        reflection = self._get_existing(date)
        self.repository.delete(reflection.id)
        self._invalidate_from(date)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_existing(self, date: datetime.date) -> DayReflection:
        reflection = self.repository.get_by_date(date)
        if not reflection:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No reflection for {date}",
            )
        return reflection

    def _invalidate_from(self, date: datetime.date) -> None:
        # The felt load of *date* seeds every later day.
        if self.cache is not None:
            self.cache.invalidate_from(date)
            logger.debug("Load cache invalidated from %s after reflection change", date)

"""
Unit tests for the day reflection service.
"""

import datetime

import pytest
from fastapi import HTTPException

from app.capacity.cache import LoadScoreCache
from app.schemas.reflection import DayReflectionUpdate
from app.services.reflection_service import ReflectionService

DAY = datetime.date(2025, 8, 1)


class TestUpsert:

    def test_creates_lazily(self, session):
        service = ReflectionService(session)
        reflection, created = service.upsert(DAY, DayReflectionUpdate(body_to_mood=3))
        assert created
        assert reflection.date == DAY
        assert reflection.body_to_mood == 3
        assert reflection.load_multiplier is None
        assert reflection.has_data

    def test_merges_only_sent_fields(self, session):
        service = ReflectionService(session)
        service.upsert(DAY, DayReflectionUpdate(body_to_mood=3, notes="tired"))
        reflection, created = service.upsert(DAY, DayReflectionUpdate(load_multiplier=1.4))
        assert not created
        assert reflection.body_to_mood == 3
        assert reflection.notes == "tired"
        assert reflection.load_multiplier == pytest.approx(1.4)

    def test_update_refreshes_timestamp(self, session):
        service = ReflectionService(session)
        service.upsert(DAY, DayReflectionUpdate(load_multiplier=1.5))
        reflection, created = service.upsert(DAY, DayReflectionUpdate(notes="heavier than it looked"))
        assert not created
        assert reflection.updated_at is not None

    def test_explicit_null_clears_field(self, session):
        service = ReflectionService(session)
        service.upsert(DAY, DayReflectionUpdate(load_multiplier=1.4))
        reflection, _ = service.upsert(DAY, DayReflectionUpdate.model_validate({"load_multiplier": None}))
        assert reflection.load_multiplier is None

    def test_multiplier_change_invalidates_cache_forward(self, session):
        cache = LoadScoreCache()
        cache.calculate_range(DAY - datetime.timedelta(days=2), DAY + datetime.timedelta(days=2), [])
        service = ReflectionService(session, cache)

        service.upsert(DAY, DayReflectionUpdate(notes="no multiplier"))
        assert len(cache) == 5

        service.upsert(DAY, DayReflectionUpdate(load_multiplier=0.8))
        assert len(cache) == 2


class TestQueries:

    def test_missing_date_is_404(self, session):
        with pytest.raises(HTTPException) as exc_info:
            ReflectionService(session).get_by_date(DAY)
        assert exc_info.value.status_code == 404

    def test_range_and_multipliers(self, session):
        service = ReflectionService(session)
        for offset, multiplier in ((0, 1.2), (1, None), (3, 0.6)):
            service.upsert(DAY + datetime.timedelta(days=offset),
                           DayReflectionUpdate(load_multiplier=multiplier, self_care_space=2))

        reflections = service.get_range(DAY, DAY + datetime.timedelta(days=3))
        assert [r.date for r in reflections] == [DAY + datetime.timedelta(days=o) for o in (0, 1, 3)]

        multipliers = service.get_multipliers(DAY, DAY + datetime.timedelta(days=3))
        assert multipliers == {
            DAY: pytest.approx(1.2),
            DAY + datetime.timedelta(days=3): pytest.approx(0.6),
        }

    def test_delete(self, session):
        service = ReflectionService(session)
        service.upsert(DAY, DayReflectionUpdate(mind_to_body=4))
        service.delete_by_date(DAY)
        with pytest.raises(HTTPException):
            service.get_by_date(DAY)

    def test_delete_missing_is_404(self, session):
        with pytest.raises(HTTPException) as exc_info:
            ReflectionService(session).delete_by_date(DAY)
        assert exc_info.value.status_code == 404

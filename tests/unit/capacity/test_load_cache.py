"""
Unit tests for the load score cache.

Tests fingerprint-based reuse, forward invalidation, LRU eviction and
agreement with the uncached recurrence.
"""

import datetime

import pytest

from app.capacity.cache import LoadScoreCache
from app.capacity.recurrence import calculate_range
from app.schemas.events import ActivityEvent, DayEvents
from app.schemas.load import LoadConfiguration

START = datetime.date(2025, 6, 1)


# ======================================================================
# Helpers
# ======================================================================


def _day(offset: int) -> datetime.date:
    return START + datetime.timedelta(days=offset)


def _make_day(offset: int, rating: float = 4.0) -> DayEvents:
    date = _day(offset)
    return DayEvents(date=date, events=[
        ActivityEvent(effective_date=date, physical_exertion=rating, cognitive_exertion=rating,
                      emotional_load=rating, duration_minutes=60),
    ])


def _make_week() -> list[DayEvents]:
    return [_make_day(i, rating=(i % 5) + 1) for i in range(0, 7, 2)]


# ======================================================================
# Tests
# ======================================================================


class TestCalculateRange:

    def test_matches_uncached_recurrence(self):
        cache = LoadScoreCache()
        reflections = {_day(2): 1.5}
        expected = calculate_range(_day(0), _day(6), _make_week(), reflections=reflections)
        assert cache.calculate_range(_day(0), _day(6), _make_week(), reflections=reflections) == expected

    def test_second_call_hits(self):
        cache = LoadScoreCache()
        cache.calculate_range(_day(0), _day(6), _make_week())
        cache.reset_statistics()

        cache.calculate_range(_day(0), _day(6), _make_week())
        stats = cache.statistics()
        assert stats.hits == 7
        assert stats.misses == 0
        assert stats.hit_rate == 1.0

    def test_changed_day_recomputes_forward(self):
        cache = LoadScoreCache()
        week = _make_week()
        cache.calculate_range(_day(0), _day(6), week)
        cache.reset_statistics()

        week[1] = _make_day(2, rating=5.0)
        scores = cache.calculate_range(_day(0), _day(6), week)
        stats = cache.statistics()
        assert stats.hits == 2
        assert stats.misses == 5
        assert scores == calculate_range(_day(0), _day(6), week)

    def test_reflection_change_misses_from_that_day(self):
        cache = LoadScoreCache()
        cache.calculate_range(_day(0), _day(6), _make_week())
        cache.reset_statistics()

        cache.calculate_range(_day(0), _day(6), _make_week(), reflections={_day(4): 0.5})
        assert cache.statistics().hits == 4

    def test_configuration_change_misses(self):
        cache = LoadScoreCache()
        cache.calculate_range(_day(0), _day(3), _make_week())
        cache.reset_statistics()

        cache.calculate_range(_day(0), _day(3), _make_week(), LoadConfiguration(decay_rate=0.5))
        assert cache.statistics().hits == 0

    def test_empty_range(self):
        assert LoadScoreCache().calculate_range(_day(3), _day(0), []) == []


class TestInvalidation:

    def _filled(self) -> LoadScoreCache:
        cache = LoadScoreCache()
        cache.calculate_range(_day(0), _day(9), [])
        return cache

    def test_invalidate_from(self):
        cache = self._filled()
        cache.invalidate_from(_day(4))
        assert len(cache) == 4

    def test_invalidate_single_day(self):
        cache = self._filled()
        cache.invalidate(_day(4))
        cache.invalidate(_day(40))
        assert len(cache) == 9

    def test_invalidate_all(self):
        cache = self._filled()
        cache.invalidate_all()
        assert len(cache) == 0

    def test_prune_older_than(self):
        cache = self._filled()
        removed = cache.prune_older_than(3, today=_day(9))
        assert removed == 6
        assert len(cache) == 4


class TestEviction:

    def test_evicts_least_recently_used_down_to_ninety_percent(self):
        cache = LoadScoreCache(max_size=10)
        cache.calculate_range(_day(0), _day(9), [])

        # Touch the first day so it becomes most recently used.
        cache.get(DayEvents(date=_day(0)), 0.0, LoadConfiguration())

        cache.calculate_range(_day(10), _day(10), [])
        assert len(cache) == 9
        assert cache.get(DayEvents(date=_day(0)), 0.0, LoadConfiguration()) is not None
        assert cache.get(DayEvents(date=_day(1)), 0.0, LoadConfiguration()) is None

    def test_max_size_must_be_positive(self):
        with pytest.raises(ValueError):
            LoadScoreCache(max_size=0)

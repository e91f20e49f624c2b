"""
Unit tests for the decay recurrence.

Tests single-day scoring, risk labelling, range computation with
reflections carried forward, and the load breakdown.
"""

import datetime
import math

import pytest

from app.capacity.recurrence import (
    analyse_contributions,
    calculate_day,
    calculate_day_from_events,
    calculate_range,
    index_days,
    label_risk,
)
from app.schemas.events import ActivityEvent, DayEvents, MealEvent, SleepEvent, SymptomRecord
from app.schemas.load import DayLoadInputs, LoadConfiguration, LoadThresholds, RiskLevel

START = datetime.date(2025, 3, 1)
DEFAULT_THRESHOLDS = LoadThresholds(safe=25, caution=50, high=75, critical=75)


# ======================================================================
# Helpers
# ======================================================================


def _day(offset: int) -> datetime.date:
    return START + datetime.timedelta(days=offset)


def _make_activity_day(offset: int, rating: float = 5.0, minutes: float = 60.0) -> DayEvents:
    date = _day(offset)
    return DayEvents(date=date, events=[
        ActivityEvent(
            effective_date=date,
            physical_exertion=rating,
            cognitive_exertion=rating,
            emotional_load=rating,
            duration_minutes=minutes,
        ),
    ])


# ======================================================================
# label_risk
# ======================================================================


class TestLabelRisk:
    """Strict "<" comparisons: a load on a threshold goes up a tier."""

    @pytest.mark.parametrize("load,expected", [
        (0.0, RiskLevel.SAFE),
        (24.99, RiskLevel.SAFE),
        (25.0, RiskLevel.CAUTION),
        (49.9, RiskLevel.CAUTION),
        (50.0, RiskLevel.HIGH),
        (74.9, RiskLevel.HIGH),
        (75.0, RiskLevel.CRITICAL),
        (100.0, RiskLevel.CRITICAL),
    ])
    def test_tiers(self, load, expected):
        assert label_risk(load, DEFAULT_THRESHOLDS) == expected

    def test_rank_order(self):
        ranks = [r.rank for r in (RiskLevel.SAFE, RiskLevel.CAUTION, RiskLevel.HIGH, RiskLevel.CRITICAL)]
        assert ranks == sorted(ranks)


# ======================================================================
# calculate_day
# ======================================================================


class TestCalculateDay:
    """Single-day recurrence."""

    def test_scenario_single_maximal_activity(self):
        """One hour at 5/5/5 from rest → 30, caution."""
        score = calculate_day_from_events(_make_activity_day(0), previous_load=0.0)
        assert score.raw_load == pytest.approx(30.0)
        assert score.decayed_load == pytest.approx(30.0)
        assert score.risk_level == RiskLevel.CAUTION

    def test_scenario_symptoms_only(self):
        """Average severity 5 from rest → 20, safe."""
        day = DayEvents(date=_day(0), symptoms=[SymptomRecord(effective_date=_day(0), severity=5)])
        score = calculate_day_from_events(day, previous_load=0.0)
        assert score.decayed_load == pytest.approx(20.0)
        assert score.risk_level == RiskLevel.SAFE

    def test_empty_day_from_rest(self):
        score = calculate_day(_day(0), DayLoadInputs(), 0.0)
        assert score.raw_load == 0.0
        assert score.decayed_load == 0.0
        assert score.risk_level == RiskLevel.SAFE

    def test_pure_decay_sequence(self):
        """No events: 80 → 56 → 39.2 → 27.44 → 19.208."""
        load = 80.0
        seen = []
        for offset in range(4):
            load = calculate_day(_day(offset), DayLoadInputs(), load).decayed_load
            seen.append(load)
        assert seen == pytest.approx([56.0, 39.2, 27.44, 19.208])

    def test_load_is_capped_at_100(self):
        day = DayEvents(date=_day(0), events=[
            ActivityEvent(effective_date=_day(0), physical_exertion=5, cognitive_exertion=5,
                          emotional_load=5, duration_minutes=120)
            for _ in range(3)
        ])
        score = calculate_day_from_events(day, previous_load=90.0)
        assert score.raw_load == 100.0
        assert score.decayed_load == 100.0
        assert score.risk_level == RiskLevel.CRITICAL

    def test_symptoms_slow_decay(self):
        heavy = DayLoadInputs(symptom_modifier=0.4, symptom_load=0.0, symptom_count=1, avg_normalized_severity=5)
        score = calculate_day(_day(0), heavy, 50.0)
        assert score.decayed_load == pytest.approx(50.0 * 0.7 * 0.4)

    def test_good_sleep_speeds_decay_up_to_bound(self):
        inputs = DayLoadInputs(recovery_modifier=1.4)
        assert calculate_day(_day(0), inputs, 50.0).decayed_load == pytest.approx(50.0 * 0.7 * 1.4)

    def test_custom_configuration(self):
        cfg = LoadConfiguration(
            thresholds=LoadThresholds(safe=10, caution=20, high=30),
            decay_rate=0.5,
        )
        score = calculate_day(_day(0), DayLoadInputs(), 40.0, cfg)
        assert score.decayed_load == pytest.approx(20.0)
        assert score.risk_level == RiskLevel.HIGH

    @pytest.mark.parametrize("previous", [math.nan, math.inf, -math.inf])
    def test_non_finite_previous_load_is_zero(self, previous):
        score = calculate_day_from_events(_make_activity_day(0), previous_load=previous)
        assert score.decayed_load == pytest.approx(30.0)

    def test_previous_load_is_clamped(self):
        score = calculate_day(_day(0), DayLoadInputs(), 500.0)
        assert score.decayed_load == pytest.approx(70.0)

    def test_reflection_multiplier_is_bounded(self):
        score = calculate_day(_day(0), DayLoadInputs(activity_load=40.0), 0.0, reflection_multiplier=5.0)
        assert score.reflection_multiplier == 2.0
        assert score.felt_load == pytest.approx(80.0)


class TestRecurrenceProperties:
    """Invariants over a sweep of inputs."""

    @pytest.mark.parametrize("rating", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("previous", [0.0, 10.0, 55.5, 100.0])
    @pytest.mark.parametrize("minutes", [0, 30, 90, 240])
    def test_loads_stay_in_range(self, rating, previous, minutes):
        day = _make_activity_day(0, rating, minutes)
        day = day.model_copy(update={
            "symptoms": [SymptomRecord(effective_date=_day(0), severity=rating)],
        })
        score = calculate_day_from_events(day, previous)
        assert 0.0 <= score.raw_load <= 100.0
        assert 0.0 <= score.decayed_load <= 100.0

    @pytest.mark.parametrize("decay_rate", [0.1, 0.4, 0.7, 0.95])
    def test_monotone_in_previous_load(self, decay_rate):
        cfg = LoadConfiguration(decay_rate=decay_rate)
        inputs = DayLoadInputs(activity_load=12.0, symptom_modifier=0.72, recovery_modifier=1.2)
        loads = [calculate_day(_day(0), inputs, p, cfg).decayed_load for p in range(0, 101, 5)]
        assert all(a <= b for a, b in zip(loads, loads[1:]))


# ======================================================================
# calculate_range
# ======================================================================


class TestCalculateRange:
    """Sequential range computation."""

    def test_one_score_per_day_including_empty_days(self):
        scores = calculate_range(_day(0), _day(6), [_make_activity_day(0)])
        assert [s.date for s in scores] == [_day(i) for i in range(7)]
        assert scores[0].decayed_load == pytest.approx(30.0)
        assert scores[1].decayed_load == pytest.approx(21.0)
        assert scores[1].raw_load == 0.0

    def test_end_before_start_is_empty(self):
        assert calculate_range(_day(5), _day(0), []) == []

    def test_mapping_input(self):
        days = {_day(0): _make_activity_day(0), _day(2): _make_activity_day(2, rating=3)}
        by_list = calculate_range(_day(0), _day(3), list(days.values()))
        assert calculate_range(_day(0), _day(3), days) == by_list

    def test_is_pure(self):
        days = [_make_activity_day(i, rating=(i % 5) + 1) for i in range(0, 14, 2)]
        first = calculate_range(_day(0), _day(13), days)
        second = calculate_range(_day(0), _day(13), days)
        assert first == second

    def test_parallel_normalization_gives_same_result(self):
        days = [_make_activity_day(i, rating=(i % 5) + 1) for i in range(10)]
        assert calculate_range(_day(0), _day(9), days, max_workers=4) == calculate_range(_day(0), _day(9), days)

    def test_reflection_carries_forward(self):
        """Felt load, not the computed one, seeds the next day."""
        days = [_make_activity_day(0)]
        scores = calculate_range(_day(0), _day(1), days, reflections={_day(0): 1.5})
        assert scores[0].decayed_load == pytest.approx(30.0)
        assert scores[0].effective_load == pytest.approx(45.0)
        assert scores[1].decayed_load == pytest.approx(45.0 * 0.7)

    def test_reflection_can_stay_on_its_own_day(self):
        days = [_make_activity_day(0)]
        scores = calculate_range(_day(0), _day(1), days, reflections={_day(0): 1.5}, carry_reflections=False)
        assert scores[0].effective_load == pytest.approx(45.0)
        assert scores[1].decayed_load == pytest.approx(21.0)

    def test_sleep_placed_on_wake_day(self):
        wake = datetime.datetime.combine(_day(1), datetime.time(7, 0))
        sleep = SleepEvent(quality=5, bed_time=wake - datetime.timedelta(hours=8), wake_time=wake)
        days = [_make_activity_day(0), DayEvents(date=_day(1), events=[sleep])]
        scores = calculate_range(_day(0), _day(1), days)
        assert scores[1].decayed_load == pytest.approx(30.0 * 0.7 * 1.4)

    def test_same_date_supplied_twice_is_merged(self):
        days = [_make_activity_day(0), _make_activity_day(0, rating=3)]
        merged = index_days(days)
        assert list(merged) == [_day(0)]
        assert len(merged[_day(0)].events) == 2

        scores = calculate_range(_day(0), _day(0), days)
        assert scores[0].raw_load == pytest.approx(30.0 + 18.0)


# ======================================================================
# analyse_contributions
# ======================================================================


class TestAnalyseContributions:
    """Per-source breakdown of one day's own load."""

    def test_split(self):
        date = _day(0)
        wake = datetime.datetime.combine(date, datetime.time(7, 0))
        day = DayEvents(
            date=date,
            events=[
                ActivityEvent(effective_date=date, physical_exertion=5, cognitive_exertion=5,
                              emotional_load=5, duration_minutes=60),
                MealEvent(effective_date=date, physical_exertion=5, cognitive_exertion=5, emotional_load=5),
                SleepEvent(quality=1, bed_time=wake - datetime.timedelta(hours=8), wake_time=wake),
            ],
            symptoms=[SymptomRecord(effective_date=date, severity=5)],
        )
        breakdown = analyse_contributions(day)
        assert breakdown.activity_load == pytest.approx(30.0)
        assert breakdown.meal_load == pytest.approx(7.5)
        assert breakdown.sleep_load == pytest.approx(10.0)
        assert breakdown.symptom_load == pytest.approx(20.0)
        assert breakdown.total_load == pytest.approx(67.5)
        assert breakdown.activity_percentage == pytest.approx(30.0 / 67.5 * 100)

    def test_empty_day_percentages_are_zero(self):
        breakdown = analyse_contributions(DayEvents(date=_day(0)))
        assert breakdown.total_load == 0.0
        assert breakdown.symptom_percentage == 0.0

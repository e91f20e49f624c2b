"""
Unit tests for the capacity service.

Tests persistence of the calibration manager's state, hydration at
startup, reflection-aware range scoring, and HTTP error mapping.
"""

import datetime

import pytest
from fastapi import HTTPException

from app.capacity.cache import LoadScoreCache
from app.models.day_reflection import DayReflection
from app.schemas.calibration import CapacityLevel, ConditionPreset, GoodDayRequest, ProfileUpdate
from app.schemas.events import ActivityEvent, DayEvents
from app.schemas.load import LoadConfiguration, LoadThresholds, RangeLoadRequest
from app.services.capacity_service import CapacityService

DAY = datetime.date(2025, 7, 1)


# ======================================================================
# Helpers
# ======================================================================


def _day(offset: int) -> datetime.date:
    return DAY + datetime.timedelta(days=offset)


def _make_day(offset: int) -> DayEvents:
    date = _day(offset)
    return DayEvents(date=date, events=[
        ActivityEvent(effective_date=date, physical_exertion=5, cognitive_exertion=5,
                      emotional_load=5, duration_minutes=60),
    ])


# ======================================================================
# Persistence round trip
# ======================================================================


class TestHydration:

    def test_defaults_without_stored_settings(self, session):
        manager = CapacityService.load_manager(session, ConditionPreset.MECFS)
        assert manager.snapshot().profile.preset == ConditionPreset.MECFS
        assert manager.configuration.decay_rate == 0.4

    def test_pending_days_survive_restart(self, session, manager):
        service = CapacityService(session, manager)
        service.start_calibration()
        service.record_good_day(GoodDayRequest(date=_day(0), load=20))
        service.record_good_day(GoodDayRequest(date=_day(1), load=25))

        restored = CapacityService.load_manager(session)
        state = restored.state
        assert state.is_calibrating
        assert [d.recorded_load for d in state.calibration_days] == [20.0, 25.0]

    def test_baseline_survives_restart(self, session, manager):
        service = CapacityService(session, manager)
        service.start_calibration()
        for offset in range(3):
            service.record_good_day(GoodDayRequest(date=_day(offset), load=36))

        restored = CapacityService.load_manager(session)
        assert restored.progress().is_calibrated
        assert not restored.state.is_calibrating
        assert restored.configuration == manager.configuration
        assert restored.configuration.thresholds.safe == pytest.approx(30.0)

    def test_custom_configuration_and_profile_survive_restart(self, session, manager):
        service = CapacityService(session, manager)
        service.update_profile(ProfileUpdate(capacity=CapacityLevel.HIGH))
        custom = LoadConfiguration(thresholds=LoadThresholds(safe=10, caution=20, high=30), decay_rate=0.5)
        service.set_configuration(custom)

        restored = CapacityService.load_manager(session)
        snapshot = restored.snapshot()
        assert snapshot.profile.preset == ConditionPreset.CUSTOM
        assert snapshot.profile.capacity == CapacityLevel.HIGH
        assert restored.configuration == custom

    def test_calibrated_custom_configuration_survives_restart(self, session, manager):
        service = CapacityService(session, manager)
        service.set_configuration(LoadConfiguration(thresholds=LoadThresholds(safe=25, caution=50, high=75)))
        service.start_calibration()
        for offset in range(3):
            service.record_good_day(GoodDayRequest(date=_day(offset), load=10))

        restored = CapacityService.load_manager(session)
        assert restored.configuration.thresholds.safe == pytest.approx(20.0)
        assert restored.configuration == manager.configuration


# ======================================================================
# Calibration errors
# ======================================================================


class TestCalibrationErrors:

    def test_good_day_without_calibration_conflicts(self, session, manager):
        service = CapacityService(session, manager)
        with pytest.raises(HTTPException) as exc_info:
            service.record_good_day(GoodDayRequest(date=DAY, load=20))
        assert exc_info.value.status_code == 409

    def test_invalid_configuration_is_422(self, session, manager):
        service = CapacityService(session, manager)
        bad = LoadConfiguration.model_construct(
            thresholds=LoadThresholds(safe=25, caution=50, high=75), decay_rate=1.0, symptom_multiplier=1.0,
        )
        with pytest.raises(HTTPException) as exc_info:
            service.set_configuration(bad)
        assert exc_info.value.status_code == 422


# ======================================================================
# Load scoring
# ======================================================================


class TestRangeScoring:

    def test_stored_reflections_are_applied(self, session, manager):
        session.add(DayReflection(date=_day(0), load_multiplier=1.5))
        session.commit()

        service = CapacityService(session, manager, LoadScoreCache())
        scores = service.calculate_range(RangeLoadRequest(start=_day(0), end=_day(1), days=[_make_day(0)]))
        assert scores[0].effective_load == pytest.approx(45.0)
        assert scores[1].decayed_load == pytest.approx(31.5)

    def test_reflections_can_be_skipped(self, session, manager):
        session.add(DayReflection(date=_day(0), load_multiplier=1.5))
        session.commit()

        service = CapacityService(session, manager)
        request = RangeLoadRequest(start=_day(0), end=_day(1), days=[_make_day(0)], use_reflections=False)
        scores = service.calculate_range(request)
        assert scores[0].reflection_multiplier is None
        assert scores[1].decayed_load == pytest.approx(21.0)

    def test_uses_active_configuration(self, session, manager):
        manager.set_configuration(LoadConfiguration(decay_rate=0.5))
        service = CapacityService(session, manager)
        scores = service.calculate_range(RangeLoadRequest(start=_day(0), end=_day(1), days=[_make_day(0)]))
        assert scores[1].decayed_load == pytest.approx(15.0)

"""
Capacity service.

Glue between the HTTP layer, the in-process :class:`CalibrationManager`
and the database:

- **load**: score single days and ranges, applying stored reflections
  and reusing the process-wide :class:`LoadScoreCache`;
- **calibration**: run the good-day protocol and settings changes on the
  manager, then persist the resulting snapshot;
- **hydration**: rebuild a manager from the stored settings at startup.

Engine errors are translated into HTTP errors here, the way the other
services raise ``HTTPException``.
"""

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.capacity.cache import LoadScoreCache
from app.capacity.calibration import CALIBRATION_HISTORY_DAYS, CalibrationManager, CalibrationSnapshot
from app.capacity.exceptions import InvalidConfigurationError
from app.capacity.presets import describe_presets, profile_for_preset
from app.capacity.recurrence import analyse_contributions, calculate_day_from_events, calculate_range
from app.core.timestamps import utcnow
from app.db.repositories.day_reflection import DayReflectionRepository
from app.db.repositories.load_settings import CalibrationDayRepository, LoadSettingsRepository
from app.models.calibration_day import CalibrationDayRecord
from app.models.load_settings import LoadSettings
from app.schemas.calibration import (
    CalibrationDay,
    CalibrationNeed,
    CalibrationProgress,
    CalibrationState,
    CapacityLevel,
    CapacityProfile,
    ConditionPreset,
    ConfigurationResponse,
    GoodDayRequest,
    PersonalBaseline,
    PresetDescription,
    ProfileUpdate,
    RecoveryWindow,
    SensitivityProfile,
)
from app.schemas.events import DayEvents
from app.schemas.load import DayLoadRequest, LoadBreakdown, LoadConfiguration, LoadScore, RangeLoadRequest

logger = logging.getLogger(__name__)


class CapacityService:
    """Service for load scoring and calibration."""

    def __init__(
        self,
        session: Session,
        manager: CalibrationManager,
        cache: Optional[LoadScoreCache] = None,
        history_days: int = CALIBRATION_HISTORY_DAYS,
    ):
        self.manager = manager
        self.cache = cache
        self.history_days = history_days
        self.settings_repo = LoadSettingsRepository(session)
        self.days_repo = CalibrationDayRepository(session)
        self.reflection_repo = DayReflectionRepository(session)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def calculate_day(self, request: DayLoadRequest) -> LoadScore:
        return calculate_day_from_events(
            request.day,
            request.previous_load,
            self.manager.configuration,
            request.reflection_multiplier,
        )

    def calculate_range(self, request: RangeLoadRequest) -> list[LoadScore]:
        """Score every day in the request, seeded with zero load.

        With ``use_reflections`` the stored multipliers are applied and each
        day's felt load is carried into the next.
        """
        reflections = {}
        if request.use_reflections:
            reflections = self.reflection_repo.get_multipliers(request.start, request.end)

        configuration = self.manager.configuration
        if self.cache is not None:
            return self.cache.calculate_range(request.start, request.end, request.days, configuration, reflections)
        return calculate_range(request.start, request.end, request.days, configuration, reflections)

    def breakdown(self, day: DayEvents) -> LoadBreakdown:
        return analyse_contributions(day, self.manager.configuration)

    # ------------------------------------------------------------------
    # Calibration
    # ------------------------------------------------------------------

    def get_progress(self) -> CalibrationProgress:
        return self.manager.progress()

    def needs_calibration(self, days_of_history: int) -> CalibrationNeed:
        return CalibrationNeed(
            needs_calibration=self.manager.needs_calibration(days_of_history, self.history_days),
            days_of_history=days_of_history,
            history_days=self.history_days,
        )

    def start_calibration(self) -> CalibrationProgress:
        self.manager.start_calibration()
        return self._persist_and_report()

    def record_good_day(self, data: GoodDayRequest) -> CalibrationProgress:
        if not self.manager.state.is_calibrating:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No calibration in progress",
            )
        try:
            self.manager.record_good_day(data.load, data.date)
        except InvalidConfigurationError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        return self._persist_and_report()

    def cancel_calibration(self) -> CalibrationProgress:
        self.manager.cancel_calibration()
        return self._persist_and_report()

    def reset_baseline(self) -> CalibrationProgress:
        self.manager.reset_baseline()
        return self._persist_and_report()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_configuration(self) -> ConfigurationResponse:
        snapshot = self.manager.snapshot()
        return ConfigurationResponse(
            profile=snapshot.profile,
            configuration=snapshot.configuration,
            has_custom_configuration=snapshot.custom_configuration is not None,
        )

    def set_configuration(self, configuration: LoadConfiguration) -> ConfigurationResponse:
        try:
            self.manager.set_configuration(configuration)
        except InvalidConfigurationError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        self.persist(self.manager.snapshot())
        return self.get_configuration()

    def clear_custom_configuration(self) -> ConfigurationResponse:
        self.manager.clear_custom_configuration()
        self.persist(self.manager.snapshot())
        return self.get_configuration()

    def update_profile(self, update: ProfileUpdate) -> ConfigurationResponse:
        try:
            self.manager.update_profile(update)
        except InvalidConfigurationError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        self.persist(self.manager.snapshot())
        return self.get_configuration()

    @staticmethod
    def list_presets() -> list[PresetDescription]:
        return describe_presets()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self, snapshot: CalibrationSnapshot) -> None:
        """Write *snapshot* to ``load_settings`` and ``calibration_days``."""
        row = self.settings_repo.get_or_create()
        row.preset = snapshot.profile.preset.value
        row.capacity = snapshot.profile.capacity.value
        row.sensitivity = snapshot.profile.sensitivity.value
        row.recovery_window = snapshot.profile.recovery_window.value
        row.custom_configuration = (
            snapshot.custom_configuration.model_dump() if snapshot.custom_configuration else None
        )
        row.is_calibrating = snapshot.state.is_calibrating

        baseline = snapshot.baseline
        row.baseline_established_date = baseline.established_date if baseline else None
        row.baseline_average_load = baseline.average_good_day_load if baseline else None
        row.baseline_sample_count = baseline.sample_count if baseline else 0
        row.baseline_loads = list(snapshot.baseline_loads) or None

        row.updated_at = utcnow()
        self.settings_repo.update(row)

        self.days_repo.replace_all([
            CalibrationDayRecord(date=day.date, recorded_load=day.recorded_load, position=position)
            for position, day in enumerate(snapshot.state.calibration_days)
        ])

    @classmethod
    def load_manager(
        cls,
        session: Session,
        default_preset: ConditionPreset = ConditionPreset.STANDARD,
    ) -> CalibrationManager:
        """Build a :class:`CalibrationManager` from the stored settings.

        Without stored settings the manager starts from *default_preset*.

        Raises:
            InvalidConfigurationError: the stored custom configuration is
                invalid.
        """
        row = LoadSettingsRepository(session).get()
        if row is None:
            logger.info("No stored load settings, starting from preset '%s'", default_preset.value)
            return CalibrationManager(profile=profile_for_preset(default_preset))

        days = CalibrationDayRepository(session).get_all()
        return CalibrationManager(
            profile=cls._profile_from_row(row),
            baseline=cls._baseline_from_row(row),
            baseline_loads=tuple(row.baseline_loads or ()),
            custom_configuration=row.custom_configuration,
            state=CalibrationState(
                is_calibrating=row.is_calibrating,
                calibration_days=tuple(
                    CalibrationDay(date=d.date, recorded_load=d.recorded_load) for d in days
                ) if row.is_calibrating else (),
            ),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist_and_report(self) -> CalibrationProgress:
        self.persist(self.manager.snapshot())
        return self.manager.progress()

    @staticmethod
    def _profile_from_row(row: LoadSettings) -> CapacityProfile:
        return CapacityProfile(
            preset=ConditionPreset(row.preset),
            capacity=CapacityLevel(row.capacity),
            sensitivity=SensitivityProfile(row.sensitivity),
            recovery_window=RecoveryWindow(row.recovery_window),
        )

    @staticmethod
    def _baseline_from_row(row: LoadSettings) -> Optional[PersonalBaseline]:
        if row.baseline_established_date is None or row.baseline_average_load is None:
            return None
        return PersonalBaseline(
            established_date=row.baseline_established_date,
            average_good_day_load=row.baseline_average_load,
            sample_count=row.baseline_sample_count,
        )

"""
Calibration manager — owner of the active load configuration.

The manager holds three pieces of shared, mutable state:

- the capacity **profile** (preset + components) or a custom configuration,
- the **calibration state** (pending good days),
- the **personal baseline** produced by the last completed calibration.

Protocol
--------
1. :meth:`CalibrationManager.start_calibration` opens a calibration run.
2. Each :meth:`~CalibrationManager.record_good_day` appends
   ``(date, load)``.  Outside a run it is a no-op.
3. The third good day completes the run atomically: the pluggable
   :data:`ThresholdCalibrator` derives new thresholds from the three
   loads, the baseline is stored, pending days are cleared and
   ``is_calibrating`` drops to ``False``.
   With a custom configuration active, its own thresholds are the ones
   scaled.

The default calibrator scales the capacity thresholds by how the average
good day compares with a typical one (30 load points), bounded to
[0.8, 1.2]::

    factor     = clamp(mean(good_day_loads) / 30, 0.8, 1.2)
    thresholds = capacity_thresholds × factor

Concurrency
-----------
Every read and write goes through one re-entrant lock.  Readers get
immutable snapshots, so nobody can observe more than three pending days
or thresholds halfway through an update.
"""

from __future__ import annotations

import datetime
import logging
import threading
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, ValidationError

from app.capacity.exceptions import InvalidConfigurationError
from app.capacity.presets import (
    CAPACITY_THRESHOLDS,
    apply_profile_update,
    configuration_for_profile,
)
from app.capacity.recurrence import label_risk
from app.schemas.calibration import (
    CALIBRATION_DAYS_REQUIRED,
    CalibrationDay,
    CalibrationProgress,
    CalibrationState,
    CapacityProfile,
    ConditionPreset,
    PersonalBaseline,
    ProfileUpdate,
)
from app.schemas.load import LoadConfiguration, LoadThresholds, RiskLevel

logger = logging.getLogger(__name__)

# ======================================================================
# Threshold calibration
# ======================================================================

ThresholdCalibrator = Callable[[Sequence[float], LoadThresholds], LoadThresholds]

STANDARD_GOOD_DAY_LOAD = 30.0
BASELINE_FACTOR_MIN = 0.8
BASELINE_FACTOR_MAX = 1.2

# With less history than this, a calibration run is suggested.
CALIBRATION_HISTORY_DAYS = 7


def baseline_factor(average_good_day_load: float) -> float:
    ratio = average_good_day_load / STANDARD_GOOD_DAY_LOAD
    return max(BASELINE_FACTOR_MIN, min(BASELINE_FACTOR_MAX, ratio))


def scale_by_good_day_average(loads: Sequence[float], base: LoadThresholds) -> LoadThresholds:
    """Default :data:`ThresholdCalibrator`."""
    average = sum(loads) / len(loads)
    return base.scaled(baseline_factor(average))


# ======================================================================
# Snapshot
# ======================================================================


class CalibrationSnapshot(BaseModel):
    """Consistent, immutable view of the manager's state."""

    model_config = ConfigDict(frozen=True)

    profile: CapacityProfile
    custom_configuration: Optional[LoadConfiguration] = None
    baseline: Optional[PersonalBaseline] = None
    baseline_loads: tuple[float, ...] = ()
    state: CalibrationState
    configuration: LoadConfiguration


Listener = Callable[[CalibrationSnapshot], None]


def _validated(configuration: LoadConfiguration | dict) -> LoadConfiguration:
    """Re-run validation (also catches instances built with ``model_construct``)."""
    data = configuration.model_dump() if isinstance(configuration, LoadConfiguration) else configuration
    try:
        return LoadConfiguration.model_validate(data)
    except ValidationError as exc:
        raise InvalidConfigurationError(str(exc)) from exc


# ======================================================================
# Manager
# ======================================================================


class CalibrationManager:
    """Process-wide owner of :class:`LoadConfiguration` and calibration state.

    Meant to be created once by the application's composition root and
    injected where needed; it holds no global state of its own.
    """

    def __init__(
        self,
        profile: Optional[CapacityProfile] = None,
        calibrator: Optional[ThresholdCalibrator] = None,
        baseline: Optional[PersonalBaseline] = None,
        baseline_loads: Sequence[float] = (),
        custom_configuration: Optional[LoadConfiguration | dict] = None,
        state: Optional[CalibrationState] = None,
    ):
        self._lock = threading.RLock()
        self._calibrator: ThresholdCalibrator = calibrator or scale_by_good_day_average
        self._listeners: list[Listener] = []

        self._profile = profile or CapacityProfile()
        self._baseline = baseline
        self._baseline_loads = tuple(baseline_loads)
        self._custom = _validated(custom_configuration) if custom_configuration is not None else None
        self._state = state or CalibrationState()
        self._configuration = self._resolve(self._profile, self._baseline, self._baseline_loads, self._custom)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def configuration(self) -> LoadConfiguration:
        with self._lock:
            return self._configuration

    @property
    def state(self) -> CalibrationState:
        with self._lock:
            return self._state

    def snapshot(self) -> CalibrationSnapshot:
        with self._lock:
            return self._snapshot()

    def progress(self) -> CalibrationProgress:
        with self._lock:
            return CalibrationProgress(
                is_calibrating=self._state.is_calibrating,
                days_recorded=len(self._state.calibration_days),
                calibration_days=list(self._state.calibration_days),
                baseline=self._baseline,
                thresholds=self._configuration.thresholds,
            )

    def risk_level(self, load: float) -> RiskLevel:
        return label_risk(load, self.configuration.thresholds)

    def needs_calibration(self, days_of_history: int, history_days: int = CALIBRATION_HISTORY_DAYS) -> bool:
        """Whether to invite the user into a calibration run."""
        with self._lock:
            calibrated = self._baseline is not None and self._baseline.is_calibrated
            return not calibrated and not self._state.is_calibrating and days_of_history < history_days

    # ------------------------------------------------------------------
    # Calibration protocol
    # ------------------------------------------------------------------

    def start_calibration(self) -> CalibrationState:
        with self._lock:
            self._state = CalibrationState(is_calibrating=True)
            snapshot = self._snapshot()
        logger.info("Calibration started")
        self._notify(snapshot)
        return snapshot.state

    def record_good_day(self, load: float, date: Optional[datetime.date] = None) -> CalibrationState:
        """Record a user-confirmed good day.

        Returns the resulting state.  The third day completes the run, so
        the returned state is then idle with no pending days.
        """
        day = CalibrationDay(date=date or datetime.date.today(), recorded_load=load)

        with self._lock:
            if not self._state.is_calibrating:
                logger.debug("Good day ignored: no calibration in progress")
                return self._state

            pending = self._state.calibration_days + (day,)
            if len(pending) < CALIBRATION_DAYS_REQUIRED:
                self._state = CalibrationState(is_calibrating=True, calibration_days=pending)
            else:
                self._complete(pending)
            snapshot = self._snapshot()

        self._notify(snapshot)
        return snapshot.state

    def cancel_calibration(self) -> CalibrationState:
        with self._lock:
            self._state = CalibrationState()
            snapshot = self._snapshot()
        logger.info("Calibration cancelled")
        self._notify(snapshot)
        return snapshot.state

    def reset_baseline(self) -> None:
        with self._lock:
            configuration = self._resolve(self._profile, None, (), self._custom)
            self._baseline = None
            self._baseline_loads = ()
            self._state = CalibrationState()
            self._configuration = configuration
            snapshot = self._snapshot()
        logger.info("Personal baseline reset")
        self._notify(snapshot)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_configuration(self, configuration: LoadConfiguration | dict) -> LoadConfiguration:
        """Install an explicit configuration, overriding profile and baseline.

        Raises:
            InvalidConfigurationError: thresholds not strictly ascending,
                decay rate outside (0, 1), or negative symptom multiplier.
        """
        validated = _validated(configuration)
        with self._lock:
            self._custom = validated
            self._configuration = validated
            snapshot = self._snapshot()
        logger.info("Custom load configuration set: %s", validated.model_dump())
        self._notify(snapshot)
        return validated

    def clear_custom_configuration(self) -> LoadConfiguration:
        with self._lock:
            self._configuration = self._resolve(self._profile, self._baseline, self._baseline_loads, None)
            self._custom = None
            snapshot = self._snapshot()
        self._notify(snapshot)
        return snapshot.configuration

    def update_profile(self, update: ProfileUpdate) -> CapacityProfile:
        """Apply a profile change.  Clears any custom configuration."""
        with self._lock:
            profile = apply_profile_update(self._profile, update)
            configuration = self._resolve(profile, self._baseline, self._baseline_loads, None)
            self._profile = profile
            self._custom = None
            self._configuration = configuration
            snapshot = self._snapshot()
        logger.info("Capacity profile updated: %s", profile.model_dump(mode="json"))
        self._notify(snapshot)
        return profile

    def apply_preset(self, preset: ConditionPreset) -> CapacityProfile:
        return self.update_profile(ProfileUpdate(preset=preset))

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        """Call *listener* with a fresh snapshot after every change."""
        with self._lock:
            self._listeners.append(listener)

    def _notify(self, snapshot: CalibrationSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)

    # ------------------------------------------------------------------
    # Internals (call with the lock held)
    # ------------------------------------------------------------------

    def _complete(self, days: tuple[CalibrationDay, ...]) -> None:
        loads = tuple(d.recorded_load for d in days)
        baseline = PersonalBaseline(
            established_date=days[-1].date,
            average_good_day_load=sum(loads) / len(loads),
            sample_count=len(loads),
        )
        # Compute everything first: a bad calibrator result must leave state untouched.
        custom = self._custom
        if custom is not None:
            # An explicit configuration is scaled once, from its own thresholds.
            custom = custom.model_copy(update={"thresholds": self._calibrated_thresholds(loads, custom.thresholds)})
        configuration = self._resolve(self._profile, baseline, loads, custom)

        self._custom = custom
        self._baseline = baseline
        self._baseline_loads = loads
        self._configuration = configuration
        self._state = CalibrationState()
        logger.info(
            "Calibration complete: average good day %.1f, thresholds %s",
            baseline.average_good_day_load, configuration.thresholds.model_dump(),
        )

    def _resolve(
        self,
        profile: CapacityProfile,
        baseline: Optional[PersonalBaseline],
        baseline_loads: Sequence[float],
        custom: Optional[LoadConfiguration],
    ) -> LoadConfiguration:
        if custom is not None:
            return custom

        configuration = configuration_for_profile(profile)
        if baseline is None or not baseline.is_calibrated or not baseline_loads:
            return configuration

        thresholds = self._calibrated_thresholds(baseline_loads, CAPACITY_THRESHOLDS[profile.capacity])
        return configuration.model_copy(update={"thresholds": thresholds})

    def _calibrated_thresholds(self, loads: Sequence[float], base: LoadThresholds) -> LoadThresholds:
        try:
            thresholds = self._calibrator(loads, base)
            return LoadThresholds.model_validate(thresholds.model_dump())
        except ValidationError as exc:
            raise InvalidConfigurationError(f"calibrated thresholds are invalid: {exc}") from exc

    def _snapshot(self) -> CalibrationSnapshot:
        return CalibrationSnapshot(
            profile=self._profile,
            custom_configuration=self._custom,
            baseline=self._baseline,
            baseline_loads=self._baseline_loads,
            state=self._state,
            configuration=self._configuration,
        )

"""Capacity engine — event normalization, decay recurrence, calibration, state classifier."""

from app.capacity.cache import LoadScoreCache
from app.capacity.calibration import CalibrationManager, ThresholdCalibrator, scale_by_good_day_average
from app.capacity.exceptions import InvalidConfigurationError
from app.capacity.normalizer import normalize_day
from app.capacity.physiology import classify_state, compute_baseline, project_cycle_day
from app.capacity.recurrence import analyse_contributions, calculate_day, calculate_day_from_events, calculate_range
from app.capacity.reflection import apply_reflection, effective_load, felt_load

__all__ = [
    "CalibrationManager",
    "InvalidConfigurationError",
    "LoadScoreCache",
    "ThresholdCalibrator",
    "analyse_contributions",
    "apply_reflection",
    "calculate_day",
    "calculate_day_from_events",
    "calculate_range",
    "classify_state",
    "compute_baseline",
    "effective_load",
    "felt_load",
    "normalize_day",
    "project_cycle_day",
    "scale_by_good_day_average",
]

"""
Physiological state classifier — a display hint from biometric readings.

Precedence
----------
1. Cycle day windows: 1–5 menstrual, 12–16 ovulation, 24–28 pre-menstrual.
2. Any non-empty flow level → menstrual.
3. Integer scoring over relaxed / elevated / fatigued / recovered / active.
   The highest score wins; ties go to the earlier state in that order.
   All-zero scores mean "not enough signal" → ``None``.

HRV and resting heart rate are judged against a personal baseline
(mean ± 0.5 SD) once the baseline has at least 10 samples, and against
fixed population thresholds before that.
"""

from __future__ import annotations

import datetime
import math
from typing import Optional, Sequence

from app.schemas.physiology import (
    MIN_BASELINE_SAMPLES,
    BiometricReadings,
    HealthBaseline,
    PhysiologicalState,
)

BASELINE_DEVIATIONS = 0.5

HRV_HIGH_FALLBACK = 50.0
HRV_LOW_FALLBACK = 30.0
RESTING_HR_HIGH_FALLBACK = 75.0
RESTING_HR_LOW_FALLBACK = 55.0

SHORT_SLEEP_HOURS = 6.0
LONG_SLEEP_HOURS = 8.0
LONG_WORKOUT_MINUTES = 30.0

MAX_CYCLE_LENGTH = 45

_CYCLE_WINDOWS = (
    (range(1, 6), PhysiologicalState.MENSTRUAL),
    (range(12, 17), PhysiologicalState.OVULATION),
    (range(24, 29), PhysiologicalState.PRE_MENSTRUAL),
)

# Declaration order doubles as tie-break order.
_SCORED_STATES = (
    PhysiologicalState.RELAXED,
    PhysiologicalState.ELEVATED,
    PhysiologicalState.FATIGUED,
    PhysiologicalState.RECOVERED,
    PhysiologicalState.ACTIVE,
)


# ======================================================================
# Baselines
# ======================================================================


def compute_baseline(
    samples: Sequence[float],
    now: Optional[datetime.datetime] = None,
) -> Optional[HealthBaseline]:
    """Mean and population standard deviation of *samples*.

    Returns ``None`` with fewer than ``MIN_BASELINE_SAMPLES`` finite samples.
    """
    values = [float(s) for s in samples if s is not None and math.isfinite(s)]
    if len(values) < MIN_BASELINE_SAMPLES:
        return None

    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return HealthBaseline(
        mean=mean,
        standard_deviation=math.sqrt(variance),
        sample_count=len(values),
        last_updated=now or datetime.datetime.now(datetime.timezone.utc),
    )


def _evaluate(value: float, baseline: Optional[HealthBaseline], high: float, low: float) -> int:
    if baseline is None or not baseline.is_calibrated:
        if value > high:
            return 1
        if value < low:
            return -1
        return 0

    if value > baseline.threshold(BASELINE_DEVIATIONS):
        return 1
    if value < baseline.threshold(-BASELINE_DEVIATIONS):
        return -1
    return 0


def evaluate_hrv(value: float, baseline: Optional[HealthBaseline] = None) -> int:
    """-1 low, 0 normal, 1 high."""
    return _evaluate(value, baseline, HRV_HIGH_FALLBACK, HRV_LOW_FALLBACK)


def evaluate_resting_hr(value: float, baseline: Optional[HealthBaseline] = None) -> int:
    """-1 low, 0 normal, 1 high."""
    return _evaluate(value, baseline, RESTING_HR_HIGH_FALLBACK, RESTING_HR_LOW_FALLBACK)


# ======================================================================
# Classification
# ======================================================================


def _cycle_state(cycle_day: Optional[int], flow_level: Optional[str]) -> Optional[PhysiologicalState]:
    if cycle_day is not None:
        for window, state in _CYCLE_WINDOWS:
            if cycle_day in window:
                return state
    if flow_level:
        return PhysiologicalState.MENSTRUAL
    return None


def score_states(readings: BiometricReadings) -> dict[PhysiologicalState, int]:
    scores = dict.fromkeys(_SCORED_STATES, 0)

    if readings.hrv is not None:
        evaluation = evaluate_hrv(readings.hrv, readings.baselines.hrv)
        if evaluation == 1:
            scores[PhysiologicalState.RELAXED] += 2
            scores[PhysiologicalState.RECOVERED] += 1
        elif evaluation == 0:
            scores[PhysiologicalState.RELAXED] += 1
        else:
            scores[PhysiologicalState.ELEVATED] += 2

    if readings.resting_hr is not None:
        evaluation = evaluate_resting_hr(readings.resting_hr, readings.baselines.resting_hr)
        if evaluation == -1:
            scores[PhysiologicalState.RECOVERED] += 2
            scores[PhysiologicalState.RELAXED] += 1
        elif evaluation == 0:
            scores[PhysiologicalState.RECOVERED] += 1
        else:
            scores[PhysiologicalState.ELEVATED] += 1
            scores[PhysiologicalState.FATIGUED] += 1

    if readings.sleep_hours is not None:
        if readings.sleep_hours < SHORT_SLEEP_HOURS:
            scores[PhysiologicalState.FATIGUED] += 2
        elif readings.sleep_hours > LONG_SLEEP_HOURS:
            scores[PhysiologicalState.RECOVERED] += 2
            scores[PhysiologicalState.RELAXED] += 1
        else:
            scores[PhysiologicalState.RECOVERED] += 1

    if readings.workout_minutes is not None:
        if readings.workout_minutes > LONG_WORKOUT_MINUTES:
            scores[PhysiologicalState.ACTIVE] += 3
        elif readings.workout_minutes > 0:
            scores[PhysiologicalState.ACTIVE] += 2

    return scores


def classify_state(readings: BiometricReadings) -> Optional[PhysiologicalState]:
    """Classify *readings*; ``None`` when there is no usable signal."""
    cycle = _cycle_state(readings.cycle_day, readings.flow_level)
    if cycle is not None:
        return cycle

    scores = score_states(readings)
    best = max(scores.values())
    if best == 0:
        return None
    # max() returns the first of several equal scores.
    return max(_SCORED_STATES, key=lambda state: scores[state])


# ======================================================================
# Manual cycle tracking
# ======================================================================


def project_cycle_day(
    set_day: int,
    set_on: datetime.date,
    today: Optional[datetime.date] = None,
) -> Optional[int]:
    """Cycle day today, given that it was *set_day* on *set_on*.

    ``None`` when the projection leaves ``1..MAX_CYCLE_LENGTH`` (the user
    needs to confirm a new cycle).
    """
    today = today or datetime.date.today()
    day = set_day + (today - set_on).days
    if 1 <= day <= MAX_CYCLE_LENGTH:
        return day
    return None

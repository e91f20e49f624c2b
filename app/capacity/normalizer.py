"""
Event normalization — heterogeneous records to recurrence inputs.

Three record families feed the recurrence, each reduced to one of two
contracts:

- **Exertion contribution** (activities, meals) — a load amount:

      exertion     = (physical + cognitive + emotional) / 3
      contribution = exertion × duration_weight × type_weight × 6.0

  Activities weigh 1.0 with ``duration_weight = min(minutes / 60, 2.0)``
  (60 minutes when unknown).  Meals weigh 0.5 with a fixed 30-minute
  equivalent, and contribute nothing unless at least one exertion rating
  was given.

- **Recovery modifier** (sleep) — a multiplier on the decay of yesterday's
  load.  Main sleep (> 3 h) is tiered by quality; naps nudge it slightly.
  Only poor main sleep (quality <= 2) adds load: ``(3 - quality) × 5``.

Symptoms are first turned into a direction-consistent *badness* scale
(positive-type symptoms are flipped), then averaged:

      symptom_load     = max(0, (avg - 3) × 10) × symptom_multiplier
      symptom_modifier = max(0.4, 1.2 - avg × 0.16)       (1.0 if none)

Every rating is clamped to its range before use.  Non-finite values are
discarded here and never reach the recurrence: a single NaN would poison
every following day of the decay chain.
"""

from __future__ import annotations

import datetime
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Sequence, Union

from app.schemas.events import ActivityEvent, DayEvents, MealEvent, SleepEvent, SymptomRecord
from app.schemas.load import DayLoadInputs

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

RATING_MIN = 1.0
RATING_MAX = 5.0

# Scales one hour of maximal exertion to 30 load points, two hours to 60.
BASE_LOAD_MULTIPLIER = 6.0
MAX_DURATION_WEIGHT = 2.0
DEFAULT_DURATION_MINUTES = 60.0

ACTIVITY_WEIGHT = 1.0
MEAL_WEIGHT = 0.5
MEAL_DURATION_WEIGHT = 0.5  # meals count as 30 minutes
MEAL_DEFAULT_EXERTION = 1.0

SEVERITY_MIDPOINT = 3.0
SYMPTOM_LOAD_PER_POINT = 10.0
SYMPTOM_MODIFIER_BASE = 1.2
SYMPTOM_MODIFIER_SLOPE = 0.16
SYMPTOM_MODIFIER_FLOOR = 0.4

MAIN_SLEEP_MIN_HOURS = 3.0
MAIN_SLEEP_MODIFIERS: dict[int, float] = {1: 0.5, 2: 0.7, 3: 1.0, 4: 1.2, 5: 1.4}
NAP_GOOD_QUALITY = 4.0
NAP_GOOD_MODIFIER = 1.1
NAP_POOR_MODIFIER = 0.95
POOR_SLEEP_QUALITY = 2.0
POOR_SLEEP_LOAD_PER_POINT = 5.0

# Bounds of the combined decay modifier (symptoms × sleep).
COMBINED_MODIFIER_MIN = 0.2
COMBINED_MODIFIER_MAX = 2.0


# ======================================================================
# Value hygiene
# ======================================================================


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _finite(value: Optional[float], field: str) -> Optional[float]:
    """Return *value*, or ``None`` if it is missing or non-finite."""
    if value is None:
        return None
    if not math.isfinite(value):
        logger.warning("Discarding non-finite %s (%r)", field, value)
        return None
    return float(value)


def _rating(value: Optional[float], field: str, default: Optional[float] = None) -> Optional[float]:
    checked = _finite(value, field)
    if checked is None:
        return default
    return clamp(checked, RATING_MIN, RATING_MAX)


# ======================================================================
# Exertion contributions
# ======================================================================


def _weighted_exertion(physical: float, cognitive: float, emotional: float, duration_weight: float,
                       weight: float, ) -> float:
    exertion = (physical + cognitive + emotional) / 3.0
    return exertion * duration_weight * weight * BASE_LOAD_MULTIPLIER


def _activity_contribution(event: ActivityEvent) -> float:
    physical = _rating(event.physical_exertion, "physical_exertion", RATING_MIN)
    cognitive = _rating(event.cognitive_exertion, "cognitive_exertion", RATING_MIN)
    emotional = _rating(event.emotional_load, "emotional_load", RATING_MIN)

    minutes = _finite(event.duration_minutes, "duration_minutes")
    if minutes is None:
        minutes = DEFAULT_DURATION_MINUTES
    duration_weight = clamp(minutes / 60.0, 0.0, MAX_DURATION_WEIGHT)

    return _weighted_exertion(physical, cognitive, emotional, duration_weight, ACTIVITY_WEIGHT)


def _meal_contribution(event: MealEvent) -> float:
    physical = _rating(event.physical_exertion, "physical_exertion")
    cognitive = _rating(event.cognitive_exertion, "cognitive_exertion")
    emotional = _rating(event.emotional_load, "emotional_load")

    if physical is None and cognitive is None and emotional is None:
        return 0.0

    return _weighted_exertion(
        physical if physical is not None else MEAL_DEFAULT_EXERTION,
        cognitive if cognitive is not None else MEAL_DEFAULT_EXERTION,
        emotional if emotional is not None else MEAL_DEFAULT_EXERTION,
        MEAL_DURATION_WEIGHT,
        MEAL_WEIGHT,
    )


_CONTRIBUTORS: dict[str, Callable[..., float]] = {
    "activity": _activity_contribution,
    "meal": _meal_contribution,
}


def exertion_contribution(event: Union[ActivityEvent, MealEvent]) -> float:
    """Load contributed by a single activity or meal."""
    return _CONTRIBUTORS[event.kind](event)


# ======================================================================
# Recovery (sleep)
# ======================================================================


def _sleep_quality(event: SleepEvent) -> Optional[float]:
    return _rating(event.quality, "sleep quality")


def is_main_recovery_period(event: SleepEvent) -> bool:
    return event.duration_hours > MAIN_SLEEP_MIN_HOURS


def recovery_modifier(event: SleepEvent) -> Optional[float]:
    """Decay multiplier for one sleep period; ``None`` if quality is unusable."""
    quality = _sleep_quality(event)
    if quality is None:
        return None
    if is_main_recovery_period(event):
        return MAIN_SLEEP_MODIFIERS.get(int(quality), 1.0)
    return NAP_GOOD_MODIFIER if quality >= NAP_GOOD_QUALITY else NAP_POOR_MODIFIER


def sleep_load_contribution(event: SleepEvent) -> float:
    quality = _sleep_quality(event)
    if quality is None or not is_main_recovery_period(event):
        return 0.0
    if quality <= POOR_SLEEP_QUALITY:
        return (3.0 - quality) * POOR_SLEEP_LOAD_PER_POINT
    return 0.0


# ======================================================================
# Symptoms
# ======================================================================


def normalized_severity(severity: float, is_positive_type: bool) -> float:
    """Map severity onto a scale where higher always means worse."""
    value = clamp(severity, RATING_MIN, RATING_MAX)
    return (6.0 - value) if is_positive_type else value


def average_normalized_severity(symptoms: Iterable[SymptomRecord]) -> tuple[float, int]:
    """Return ``(mean normalized severity, usable symptom count)``."""
    values = []
    for record in symptoms:
        severity = _finite(record.severity, "symptom severity")
        if severity is None:
            continue
        values.append(normalized_severity(severity, record.is_positive_type))
    if not values:
        return 0.0, 0
    return sum(values) / len(values), len(values)


def symptom_load(avg_severity: float, symptom_multiplier: float) -> float:
    return max(0.0, (avg_severity - SEVERITY_MIDPOINT) * SYMPTOM_LOAD_PER_POINT) * symptom_multiplier


def symptom_modifier(avg_severity: float, symptom_count: int) -> float:
    if symptom_count == 0:
        return 1.0
    return max(SYMPTOM_MODIFIER_FLOOR, SYMPTOM_MODIFIER_BASE - avg_severity * SYMPTOM_MODIFIER_SLOPE)


# ======================================================================
# Day-level normalization
# ======================================================================


def normalize_day(day: DayEvents, symptom_multiplier: float = 1.0) -> DayLoadInputs:
    """Reduce one day's records to :class:`DayLoadInputs`."""
    activity_total = 0.0
    meal_total = 0.0
    for event in day.exertion_events:
        contribution = exertion_contribution(event)
        activity_total += contribution
        if isinstance(event, MealEvent):
            meal_total += contribution

    sleep_total = 0.0
    combined_recovery: Optional[float] = None
    for sleep in day.sleep_events:
        modifier = recovery_modifier(sleep)
        if modifier is None:
            continue
        combined_recovery = modifier if combined_recovery is None else combined_recovery * modifier
        sleep_total += sleep_load_contribution(sleep)

    avg, count = average_normalized_severity(day.symptoms)

    return DayLoadInputs(
        activity_load=activity_total,
        meal_load=meal_total,
        sleep_load=sleep_total,
        symptom_load=symptom_load(avg, symptom_multiplier),
        avg_normalized_severity=avg,
        symptom_modifier=symptom_modifier(avg, count),
        recovery_modifier=combined_recovery,
        symptom_count=count,
    )


def normalize_days(
    days: Sequence[DayEvents],
    symptom_multiplier: float = 1.0,
    max_workers: Optional[int] = None,
) -> dict[datetime.date, DayLoadInputs]:
    """Normalize many days.

    Days are independent of each other, so with ``max_workers > 1`` the
    work is spread over a thread pool.  The result is keyed by date and
    identical either way.
    """
    if max_workers is None or max_workers <= 1 or len(days) <= 1:
        return {day.date: normalize_day(day, symptom_multiplier) for day in days}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = pool.map(lambda d: normalize_day(d, symptom_multiplier), days)
        return {day.date: inputs for day, inputs in zip(days, results)}


def combined_decay_modifier(inputs: DayLoadInputs) -> float:
    """Symptom modifier × sleep modifier, bounded to [0.2, 2.0]."""
    combined = inputs.symptom_modifier * (inputs.recovery_modifier if inputs.recovery_modifier is not None else 1.0)
    return clamp(combined, COMBINED_MODIFIER_MIN, COMBINED_MODIFIER_MAX)

"""
Decay recurrence — day-by-day load with symptom- and sleep-aware decay.

Model
-----
Each day adds the load of its own events and carries over a decayed share
of the previous day's load:

    decayed_previous = previous × decay_rate × symptom_modifier × recovery_modifier
    raw_load         = min(activity + symptom + sleep, 100)
    decayed_load     = min(activity + symptom + sleep + decayed_previous, 100)

Without new strain, load shrinks geometrically by ``decay_rate`` per day.
A heavy symptom day slows that shrinkage (modifier down to 0.4); good main
sleep speeds it up (up to 1.4), poor sleep slows it (down to 0.5).

Risk tiers use strict "less than" comparisons, so a load exactly on a
threshold belongs to the next tier up.

Design choices
--------------
1. **Pure per-day step** — :func:`calculate_day` depends only on its
   arguments.  No configuration is looked up behind the caller's back.
2. **Sequential range** — :func:`calculate_range` must visit days in
   order: day *n* needs day *n-1*'s result.  Only the per-day
   normalization beforehand may run in parallel.
3. **Effective load carries forward** — when a day has a reflection
   multiplier, its felt load (not the computed one) seeds the next day.
   The user's self-report can therefore redirect the whole trajectory.
"""

from __future__ import annotations

import datetime
import logging
import math
from typing import Iterable, Mapping, Optional, Union

from app.capacity.normalizer import (
    clamp,
    combined_decay_modifier,
    normalize_day,
    normalize_days,
)
from app.capacity.reflection import clamp_multiplier
from app.schemas.events import DayEvents
from app.schemas.load import (
    LOAD_MAX,
    LOAD_MIN,
    DayLoadInputs,
    LoadBreakdown,
    LoadConfiguration,
    LoadScore,
    LoadThresholds,
    RiskLevel,
)

logger = logging.getLogger(__name__)

DEFAULT_LOAD_CONFIG = LoadConfiguration()

DaysArg = Union[Mapping[datetime.date, DayEvents], Iterable[DayEvents]]


# ======================================================================
# Risk labelling
# ======================================================================


def label_risk(load: float, thresholds: LoadThresholds) -> RiskLevel:
    """Map a load value to its risk tier (strict ``<`` comparisons)."""
    if load < thresholds.safe:
        return RiskLevel.SAFE
    if load < thresholds.caution:
        return RiskLevel.CAUTION
    if load < thresholds.high:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


# ======================================================================
# Single day
# ======================================================================


def _sanitize_previous(previous_load: float) -> float:
    if not math.isfinite(previous_load):
        logger.warning("Non-finite previous load %r replaced with 0", previous_load)
        return 0.0
    return clamp(previous_load, LOAD_MIN, LOAD_MAX)


def calculate_day(
    date: datetime.date,
    inputs: DayLoadInputs,
    previous_load: float,
    configuration: Optional[LoadConfiguration] = None,
    reflection_multiplier: Optional[float] = None,
) -> LoadScore:
    """Compute one day's :class:`LoadScore`.

    Args:
        date: Calendar day being scored.
        inputs: The day's normalized inputs (see
            :func:`app.capacity.normalizer.normalize_day`).
        previous_load: Load carried from the previous day (its effective
            load).  ``0`` for the first day of a range.
        configuration: Thresholds / decay / sensitivity.  Defaults to
            ``DEFAULT_LOAD_CONFIG``.
        reflection_multiplier: Optional subjective correction for *date*.

    Returns:
        The immutable :class:`LoadScore` for the day.
    """
    cfg = configuration or DEFAULT_LOAD_CONFIG
    previous = _sanitize_previous(previous_load)

    decayed_previous = previous * cfg.decay_rate * combined_decay_modifier(inputs)
    today = inputs.today_load

    raw_load = min(today, LOAD_MAX)
    decayed_load = min(today + decayed_previous, LOAD_MAX)

    return LoadScore(
        date=date,
        raw_load=raw_load,
        decayed_load=decayed_load,
        risk_level=label_risk(decayed_load, cfg.thresholds),
        reflection_multiplier=clamp_multiplier(reflection_multiplier),
    )


def calculate_day_from_events(
    day: DayEvents,
    previous_load: float,
    configuration: Optional[LoadConfiguration] = None,
    reflection_multiplier: Optional[float] = None,
) -> LoadScore:
    """Normalize *day* and score it in one step."""
    cfg = configuration or DEFAULT_LOAD_CONFIG
    inputs = normalize_day(day, cfg.symptom_multiplier)
    return calculate_day(day.date, inputs, previous_load, cfg, reflection_multiplier)


# ======================================================================
# Range
# ======================================================================


def index_days(days: DaysArg) -> dict[datetime.date, DayEvents]:
    """Key *days* by date.  Records supplied twice for one date are merged."""
    if isinstance(days, Mapping):
        return dict(days)

    by_date: dict[datetime.date, DayEvents] = {}
    for day in days:
        existing = by_date.get(day.date)
        if existing is not None:
            day = DayEvents(
                date=day.date,
                events=existing.events + day.events,
                symptoms=existing.symptoms + day.symptoms,
            )
        by_date[day.date] = day
    return by_date


def iter_dates(start: datetime.date, end: datetime.date) -> Iterable[datetime.date]:
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)


def calculate_range(
    start: datetime.date,
    end: datetime.date,
    days: DaysArg,
    configuration: Optional[LoadConfiguration] = None,
    reflections: Optional[Mapping[datetime.date, float]] = None,
    carry_reflections: bool = True,
    max_workers: Optional[int] = None,
) -> list[LoadScore]:
    """Compute one :class:`LoadScore` per day in ``[start, end]``.

    Args:
        start: First day (seeded with a previous load of 0).
        end: Last day, inclusive.  ``end < start`` yields an empty list.
        days: Records per day, as a mapping or an iterable of
            :class:`DayEvents`.  Missing days count as empty.
        configuration: Optional configuration override.
        reflections: Optional ``{date: load_multiplier}``.
        carry_reflections: When ``True`` (default), each day's effective
            load seeds the next; when ``False``, the computed decayed load
            does and reflections only affect their own day.
        max_workers: Thread count for per-day normalization.

    Returns:
        Scores in chronological order.
    """
    if end < start:
        return []

    cfg = configuration or DEFAULT_LOAD_CONFIG
    by_date = index_days(days)
    in_range = [by_date[d] for d in iter_dates(start, end) if d in by_date]
    normalized = normalize_days(in_range, cfg.symptom_multiplier, max_workers=max_workers)
    reflections = reflections or {}

    empty = DayLoadInputs()
    scores: list[LoadScore] = []
    previous_load = 0.0

    for current in iter_dates(start, end):
        score = calculate_day(
            current,
            normalized.get(current, empty),
            previous_load,
            cfg,
            reflections.get(current),
        )
        scores.append(score)
        previous_load = score.effective_load if carry_reflections else score.decayed_load

    return scores


# ======================================================================
# Breakdown
# ======================================================================


def analyse_contributions(day: DayEvents, configuration: Optional[LoadConfiguration] = None) -> LoadBreakdown:
    """Split one day's own load (no carry-over) by source."""
    cfg = configuration or DEFAULT_LOAD_CONFIG
    inputs = normalize_day(day, cfg.symptom_multiplier)
    activity_only = inputs.activity_load - inputs.meal_load

    return LoadBreakdown(
        activity_load=activity_only,
        meal_load=inputs.meal_load,
        sleep_load=inputs.sleep_load,
        symptom_load=inputs.symptom_load,
        total_load=activity_only + inputs.meal_load + inputs.sleep_load + inputs.symptom_load,
    )

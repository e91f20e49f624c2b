"""
Load score cache — memoised recurrence with forward invalidation.

A cached score is reused only when its fingerprint matches: the day's
records, the previous load it was computed from, the configuration and
the reflection multiplier.  Because every day depends on the one before,
a change on day *d* must invalidate *d* and everything after it
(:meth:`LoadScoreCache.invalidate_from`); a configuration change must
invalidate everything (:meth:`LoadScoreCache.invalidate_all`).

The cache is bounded.  When it grows past ``max_size`` entries, the least
recently used ones are evicted down to 90% of capacity.
"""

from __future__ import annotations

import datetime
import hashlib
import logging
import threading
from collections import OrderedDict
from typing import Mapping, Optional

from pydantic import BaseModel

from app.capacity.recurrence import (
    DEFAULT_LOAD_CONFIG,
    DaysArg,
    calculate_day_from_events,
    index_days,
    iter_dates,
)
from app.capacity.reflection import clamp_multiplier
from app.schemas.events import DayEvents
from app.schemas.load import LoadConfiguration, LoadScore

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 500
EVICTION_TARGET_RATIO = 0.9


class CacheStatistics(BaseModel):
    entries: int
    hits: int
    misses: int
    hit_rate: float


def fingerprint(
    day: DayEvents,
    previous_load: float,
    configuration: LoadConfiguration,
    reflection_multiplier: Optional[float],
) -> str:
    """Stable digest of everything a day's score depends on."""
    payload = "|".join((
        day.model_dump_json(),
        repr(float(previous_load)),
        configuration.model_dump_json(),
        repr(clamp_multiplier(reflection_multiplier)),
    ))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class LoadScoreCache:
    """Thread-safe LRU cache of :class:`LoadScore` keyed by calendar day."""

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: OrderedDict[datetime.date, tuple[str, LoadScore]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Lookup / store
    # ------------------------------------------------------------------

    def get(
        self,
        day: DayEvents,
        previous_load: float,
        configuration: LoadConfiguration,
        reflection_multiplier: Optional[float] = None,
    ) -> Optional[LoadScore]:
        key = fingerprint(day, previous_load, configuration, reflection_multiplier)
        with self._lock:
            entry = self._entries.get(day.date)
            if entry is None or entry[0] != key:
                self._misses += 1
                return None
            self._entries.move_to_end(day.date)
            self._hits += 1
            return entry[1]

    def put(
        self,
        score: LoadScore,
        day: DayEvents,
        previous_load: float,
        configuration: LoadConfiguration,
        reflection_multiplier: Optional[float] = None,
    ) -> None:
        key = fingerprint(day, previous_load, configuration, reflection_multiplier)
        with self._lock:
            self._entries[day.date] = (key, score)
            self._entries.move_to_end(day.date)
            self._evict_if_needed()

    def _evict_if_needed(self) -> None:
        if len(self._entries) <= self.max_size:
            return
        target = int(self.max_size * EVICTION_TARGET_RATIO)
        evicted = 0
        while len(self._entries) > target:
            self._entries.popitem(last=False)
            evicted += 1
        logger.debug("Evicted %d cached load scores", evicted)

    # ------------------------------------------------------------------
    # Range
    # ------------------------------------------------------------------

    def calculate_range(
        self,
        start: datetime.date,
        end: datetime.date,
        days: DaysArg,
        configuration: Optional[LoadConfiguration] = None,
        reflections: Optional[Mapping[datetime.date, float]] = None,
    ) -> list[LoadScore]:
        """Same result as :func:`app.capacity.recurrence.calculate_range`,
        reusing cached days whose inputs are unchanged.

        Effective load is carried forward, so a reflection change shows up
        as a different ``previous_load`` for the next day and misses there.
        """
        if end < start:
            return []

        cfg = configuration or DEFAULT_LOAD_CONFIG
        by_date = index_days(days)
        reflections = reflections or {}

        scores: list[LoadScore] = []
        previous_load = 0.0
        for current in iter_dates(start, end):
            day = by_date.get(current) or DayEvents(date=current)
            multiplier = reflections.get(current)

            score = self.get(day, previous_load, cfg, multiplier)
            if score is None:
                score = calculate_day_from_events(day, previous_load, cfg, multiplier)
                self.put(score, day, previous_load, cfg, multiplier)

            scores.append(score)
            previous_load = score.effective_load

        return scores

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, date: datetime.date) -> None:
        """Drop a single day (its successors are left alone)."""
        with self._lock:
            self._entries.pop(date, None)

    def invalidate_from(self, date: datetime.date) -> None:
        """Drop *date* and every later day."""
        with self._lock:
            for key in [d for d in self._entries if d >= date]:
                del self._entries[key]

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("Load score cache cleared")

    def prune_older_than(self, days: int, today: Optional[datetime.date] = None) -> int:
        """Drop days more than *days* before *today*.  Returns how many went."""
        cutoff = (today or datetime.date.today()) - datetime.timedelta(days=days)
        with self._lock:
            stale = [d for d in self._entries if d < cutoff]
            for key in stale:
                del self._entries[key]
        return len(stale)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self) -> CacheStatistics:
        with self._lock:
            total = self._hits + self._misses
            return CacheStatistics(
                entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / total if total else 0.0,
            )

    def reset_statistics(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0

"""
Reflection correction — the user's subjective multiplier on a day's load.

    felt_load      = decayed_load × multiplier     (only if a multiplier exists)
    effective_load = felt_load ?? decayed_load

The multiplier is bounded to [0.5, 2.0] so a self-report can at most
halve or double a day.  Because :func:`app.capacity.recurrence.calculate_range`
carries the effective load forward, a correction also shifts every
following day.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from app.schemas.load import REFLECTION_MULTIPLIER_MAX, REFLECTION_MULTIPLIER_MIN, LoadScore

logger = logging.getLogger(__name__)


def clamp_multiplier(multiplier: Optional[float]) -> Optional[float]:
    """Bound *multiplier* to [0.5, 2.0]; drop it if missing or non-finite."""
    if multiplier is None:
        return None
    if not math.isfinite(multiplier):
        logger.warning("Ignoring non-finite reflection multiplier %r", multiplier)
        return None
    return max(REFLECTION_MULTIPLIER_MIN, min(REFLECTION_MULTIPLIER_MAX, float(multiplier)))


def felt_load(decayed_load: float, multiplier: Optional[float]) -> Optional[float]:
    bounded = clamp_multiplier(multiplier)
    if bounded is None:
        return None
    return decayed_load * bounded


def effective_load(decayed_load: float, multiplier: Optional[float]) -> float:
    felt = felt_load(decayed_load, multiplier)
    return felt if felt is not None else decayed_load


def apply_reflection(score: LoadScore, multiplier: Optional[float]) -> LoadScore:
    """Return a copy of *score* carrying *multiplier* (or none)."""
    return score.model_copy(update={"reflection_multiplier": clamp_multiplier(multiplier)})

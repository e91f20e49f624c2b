"""
Unit tests for the reflection correction.
"""

import datetime
import math

import pytest

from app.capacity.reflection import apply_reflection, clamp_multiplier, effective_load, felt_load
from app.schemas.load import LoadScore, RiskLevel


def _make_score(decayed: float = 40.0, multiplier=None) -> LoadScore:
    return LoadScore(
        date=datetime.date(2025, 3, 1),
        raw_load=decayed,
        decayed_load=decayed,
        risk_level=RiskLevel.CAUTION,
        reflection_multiplier=multiplier,
    )


class TestClampMultiplier:

    @pytest.mark.parametrize("value,expected", [
        (None, None),
        (0.1, 0.5),
        (0.5, 0.5),
        (1.25, 1.25),
        (2.0, 2.0),
        (3.0, 2.0),
        (math.nan, None),
        (math.inf, None),
    ])
    def test_bounds(self, value, expected):
        assert clamp_multiplier(value) == expected


class TestFeltLoad:

    def test_felt_heavier(self):
        """40 felt as 1.5× → 60, distinct from the computed 40."""
        score = _make_score(40.0, 1.5)
        assert score.felt_load == pytest.approx(60.0)
        assert score.effective_load == pytest.approx(60.0)
        assert score.decayed_load == 40.0

    def test_no_reflection(self):
        score = _make_score(40.0)
        assert score.felt_load is None
        assert score.effective_load == 40.0

    def test_module_helpers_agree_with_score(self):
        assert felt_load(40.0, 0.5) == pytest.approx(20.0)
        assert felt_load(40.0, None) is None
        assert effective_load(40.0, None) == 40.0
        assert effective_load(40.0, 9.0) == pytest.approx(80.0)

    def test_apply_reflection_returns_copy(self):
        original = _make_score(40.0)
        adjusted = apply_reflection(original, 0.75)
        assert original.reflection_multiplier is None
        assert adjusted.effective_load == pytest.approx(30.0)

    def test_serialised_score_exposes_derived_loads(self):
        data = _make_score(40.0, 1.5).model_dump()
        assert data["felt_load"] == pytest.approx(60.0)
        assert data["effective_load"] == pytest.approx(60.0)

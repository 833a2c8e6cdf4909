"""Tests for saturating curves and the shared factor abstraction."""

from __future__ import annotations

import math

import pytest

from placement_metrics.core.readiness.curves import Exponential, Linear, Piecewise, Proportion
from placement_metrics.core.readiness.factors import (
    Advice,
    CompositeFactor,
    ScoreFactor,
    clamp,
    clamp_total,
    fold_factors,
    read,
)


class TestCurves:
    def test_exponential_saturates_below_cap(self):
        """Exponential rises fast, then flattens under the cap."""
        curve = Exponential(2)
        assert curve(0, 20) == 0
        assert curve(2, 20) == pytest.approx(20 * (1 - math.exp(-1)))
        assert curve(1, 20) < curve(2, 20) < curve(10, 20) < 20

    def test_exponential_ignores_negative_signal(self):
        """Negative signals score nothing."""
        assert Exponential(2)(-3, 20) == 0

    def test_linear_caps(self):
        """Linear adds a fixed amount per unit until the cap."""
        assert Linear(0.2)(10, 5) == pytest.approx(2.0)
        assert Linear(0.2)(40, 5) == 5

    def test_proportion(self):
        """Proportion maps a share of ``full`` onto the cap."""
        assert Proportion(100)(40, 10) == pytest.approx(4.0)
        assert Proportion(100)(140, 10) == 10
        assert Proportion(1)(0.25, 3) == pytest.approx(0.75)

    def test_piecewise_interpolates(self):
        """Between breakpoints the curve interpolates linearly."""
        curve = Piecewise(((0, 0), (10, 4), (50, 6)))
        assert curve(5, 8) == pytest.approx(2.0)
        assert curve(30, 8) == pytest.approx(5.0)

    def test_piecewise_flat_after_last_breakpoint(self):
        """Past the last breakpoint the curve keeps its final value."""
        curve = Piecewise(((0, 0), (10, 4)))
        assert curve(1000, 8) == 4

    def test_piecewise_decreasing_table(self):
        """Tables may decrease (e.g. days since last commit)."""
        curve = Piecewise(((0, 7), (3, 7), (7, 5), (14, 3)))
        assert curve(0, 7) == 7
        assert curve(5, 7) == pytest.approx(6.0)
        assert curve(60, 7) == 3

    def test_piecewise_respects_cap(self):
        """Breakpoint values above the cap are clamped."""
        assert Piecewise(((0, 0), (1, 10)))(1, 4) == 4


class TestClamp:
    @pytest.mark.parametrize(
        "value,cap,expected",
        [(5, 10, 5), (-1, 10, 0), (12, 10, 10), (float("nan"), 10, 0), (float("inf"), 10, 0)],
    )
    def test_clamp(self, value, cap, expected):
        """Clamp to [0, cap]; non-finite values become 0."""
        assert clamp(value, cap) == expected

    @pytest.mark.parametrize(
        "value,expected", [(72.4, 72), (72.6, 73), (62.5, 63), (0.5, 1), (130, 100), (-4, 0)]
    )
    def test_clamp_total(self, value, expected):
        """Round once (halves up), then clamp to 0-100."""
        assert clamp_total(value) == expected


class TestScoreFactor:
    def test_missing_signal_scores_zero(self):
        """A None signal contributes nothing."""
        factor = ScoreFactor("projects", 20, read("projects"), Exponential(2))
        assert factor.score({}) == 0

    def test_non_numeric_signal_scores_zero(self):
        """Garbage signal values are treated as zero."""
        factor = ScoreFactor("projects", 20, read("projects"), Exponential(2))
        assert factor.score({"projects": "many"}) == 0

    def test_advice_uses_own_signal(self):
        """Advice fires on the factor's raw value."""
        factor = ScoreFactor(
            "repos", 10, read("repos"), Linear(1),
            advice=(Advice(lambda v: v == 0, "Create a repository", "high"),),
            label="Repository Quality",
        )
        recs = factor.recommend({"repos": 0})
        assert [(r.category, r.message, r.priority) for r in recs] == [
            ("Repository Quality", "Create a repository", "high")
        ]
        assert factor.recommend({"repos": 3}) == []

    def test_advice_with_named_signal(self):
        """Advice can test a different signal than the one scored."""
        factor = ScoreFactor(
            "completeness", 8, read("fields"), Linear(1.6),
            advice=(Advice(lambda v: not v, "Add a bio", "medium", signal="has_bio"),),
        )
        assert len(factor.recommend({"fields": 5, "has_bio": False})) == 1
        assert factor.recommend({"fields": 5, "has_bio": True}) == []
        assert factor.recommend({"fields": 5}) == []

    def test_every_matching_advice_fires(self):
        """Advice entries are evaluated independently."""
        factor = ScoreFactor(
            "x", 10, read("x"), Linear(1),
            advice=(
                Advice(lambda v: v < 5, "below five", "low"),
                Advice(lambda v: v < 3, "below three", "medium"),
            ),
        )
        assert [r.message for r in factor.recommend({"x": 1})] == ["below five", "below three"]


class TestCompositeFactor:
    def _composite(self, **kwargs):
        return CompositeFactor(
            "versionControl",
            10,
            parts=(
                ScoreFactor("commits", 6, read("commits"), Linear(1)),
                ScoreFactor("repos", 6, read("repos"), Linear(1)),
            ),
            **kwargs,
        )

    def test_sum_of_parts_clamped(self):
        """Parts are summed and clamped to the composite cap."""
        factor = self._composite()
        assert factor.score({"commits": 3, "repos": 2}) == 5
        assert factor.score({"commits": 6, "repos": 6}) == 10

    def test_required_signal_missing(self):
        """A missing required section scores zero and yields only its advice."""
        factor = self._composite(
            requires="section",
            missing_advice=Advice(lambda v: True, "Connect your account", "high"),
            label="Version Control",
        )
        signals = {"section": None, "commits": 6}
        assert factor.score(signals) == 0
        assert [(r.category, r.message) for r in factor.recommend(signals)] == [
            ("Version Control", "Connect your account")
        ]

    def test_rounded_parts(self):
        """round_parts rounds each sub-factor to 2 decimals before summing."""
        factor = CompositeFactor(
            "c", 10, parts=(ScoreFactor("a", 5, read("a"), Linear(1)),), round_parts=True
        )
        assert factor.part_scores({"a": 1.23456}) == {"a": 1.23}


class TestFoldFactors:
    def test_breakdown_in_factor_order(self):
        """Breakdown keys follow the factor list order."""
        factors = (
            ScoreFactor("b", 5, read("b"), Linear(1)),
            ScoreFactor("a", 5, read("a"), Linear(1)),
        )
        fold = fold_factors(factors, {"a": 1, "b": 2})
        assert list(fold.breakdown) == ["b", "a"]
        assert fold.raw_total == 3

    def test_round_each(self):
        """round_each rounds every factor before it lands in the breakdown."""
        factors = (ScoreFactor("a", 5, read("a"), Linear(1)),)
        assert fold_factors(factors, {"a": 1.26}, round_each=1).breakdown == {"a": 1.3}

    def test_round_each_half_up(self):
        """Halves round up rather than to even."""
        factors = (ScoreFactor("a", 5, read("a"), Linear(1)),)
        assert fold_factors(factors, {"a": 0.25}, round_each=1).breakdown == {"a": 0.3}

    def test_recommendations_in_factor_order(self):
        """Recommendations are collected factor by factor."""
        factors = (
            ScoreFactor("a", 5, read("a"), Linear(1), advice=(Advice(lambda v: True, "first", "low"),)),
            ScoreFactor("b", 5, read("b"), Linear(1), advice=(Advice(lambda v: True, "second", "high"),)),
        )
        fold = fold_factors(factors, {"a": 0, "b": 0})
        assert [r.message for r in fold.recommendations] == ["first", "second"]

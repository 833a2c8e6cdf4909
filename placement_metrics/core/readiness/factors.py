"""Factor definitions shared by both readiness variants.

A factor is a named, capped contribution to the score: it reads one raw
signal from the extracted signal mapping and runs it through a saturating
curve. Composite factors sum a handful of sub-factors under their own cap.

Factor lists are plain ordered tuples so weights can be read (and tested)
without running a score.
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from placement_metrics.core.coercion import round_half_up
from placement_metrics.core.readiness.curves import Curve
from placement_metrics.core.readiness.types import MAX_SCORE, Priority, Recommendation

Signals = Mapping[str, Any]


@dataclass(frozen=True)
class Advice:
    """Recommendation emitted when ``when(value)`` holds.

    ``value`` is the owning factor's raw signal, or ``signals[signal]`` when
    ``signal`` is set. Advice with a missing value never fires.
    """

    when: Callable[[float], bool]
    message: str
    priority: Priority
    signal: Optional[str] = None


@dataclass(frozen=True)
class ScoreFactor:
    """Single signal -> curve -> capped points."""

    name: str
    cap: float
    signal: Callable[[Signals], Optional[float]]
    curve: Curve
    advice: tuple[Advice, ...] = ()
    label: str = ""

    def raw(self, signals: Signals) -> Optional[float]:
        value = self.signal(signals)
        if value is None:
            return None
        return _finite(value)

    def score(self, signals: Signals) -> float:
        value = self.raw(signals)
        if value is None:
            return 0.0
        return clamp(self.curve(value, self.cap), self.cap)

    def recommend(self, signals: Signals, category: Optional[str] = None) -> list[Recommendation]:
        recommendations = []
        for advice in self.advice:
            value = self.raw(signals) if advice.signal is None else signals.get(advice.signal)
            if value is None:
                continue
            if advice.when(value):
                recommendations.append(
                    Recommendation(
                        category=category or self.label or self.name,
                        message=advice.message,
                        priority=advice.priority,
                    )
                )
        return recommendations


@dataclass(frozen=True)
class CompositeFactor:
    """Clamped sum of sub-factors.

    When ``requires`` names a signal that is absent (None), the whole factor
    scores zero and only ``missing_advice`` is emitted.
    """

    name: str
    cap: float
    parts: tuple[ScoreFactor, ...]
    label: str = ""
    requires: Optional[str] = None
    missing_advice: Optional[Advice] = None
    round_parts: bool = False

    def is_missing(self, signals: Signals) -> bool:
        return self.requires is not None and signals.get(self.requires) is None

    def part_scores(self, signals: Signals) -> dict[str, float]:
        scores = {}
        for part in self.parts:
            value = part.score(signals)
            scores[part.name] = round_half_up(value, 2) if self.round_parts else value
        return scores

    def score(self, signals: Signals) -> float:
        if self.is_missing(signals):
            return 0.0
        return clamp(sum(self.part_scores(signals).values()), self.cap)

    def recommend(self, signals: Signals, category: Optional[str] = None) -> list[Recommendation]:
        category = category or self.label or self.name
        if self.is_missing(signals):
            if self.missing_advice is None:
                return []
            return [
                Recommendation(
                    category=category,
                    message=self.missing_advice.message,
                    priority=self.missing_advice.priority,
                )
            ]
        recommendations = []
        for part in self.parts:
            recommendations.extend(part.recommend(signals, category))
        return recommendations


Factor = ScoreFactor | CompositeFactor


@dataclass
class FactorFold:
    """Result of folding an ordered factor list over one set of signals."""

    breakdown: dict[str, float] = field(default_factory=dict)
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def raw_total(self) -> float:
        return sum(self.breakdown.values())


def fold_factors(
    factors: tuple[Factor, ...],
    signals: Signals,
    round_each: Optional[int] = None,
) -> FactorFold:
    """
    Score every factor and collect its recommendations, in list order.

    Args:
        factors: Ordered factor list
        signals: Extracted raw signals
        round_each: Decimal places to round each factor to (None keeps floats)

    Returns:
        FactorFold with the per-factor breakdown and recommendations
    """
    fold = FactorFold()
    for factor in factors:
        points = factor.score(signals)
        if round_each is not None:
            points = round_half_up(points, round_each)
        fold.breakdown[factor.name] = points
        fold.recommendations.extend(factor.recommend(signals))
    return fold


def clamp(value: float, cap: float) -> float:
    """Clamp to ``[0, cap]``, mapping NaN to 0."""
    value = _finite(value)
    return max(0.0, min(float(cap), value))


def clamp_total(value: float) -> int:
    """Round once and clamp to the 0-100 score range."""
    return int(max(0, min(MAX_SCORE, round_half_up(_finite(value)))))


def read(key: str) -> Callable[[Signals], Optional[float]]:
    """Signal reader for a plain key."""
    return lambda signals: signals.get(key)


def _finite(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0

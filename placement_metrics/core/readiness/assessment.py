"""Qualitative tiers and score-change classification."""

from typing import Optional

from placement_metrics.core.readiness.types import (
    ASSESSMENT_TIERS,
    SCORE_CHANGE_MIN_DELTA,
    Assessment,
    ScoreChange,
)

# (minimum |delta|, reason), checked top-down
INCREASE_REASONS = [
    (10, "Major improvement in GitHub activity"),
    (5, "Significant progress in coding consistency"),
    (0, "Steady improvement in GitHub metrics"),
]

DECREASE_REASONS = [
    (10, "Long period of inactivity detected"),
    (5, "Reduced coding activity recently"),
    (0, "Slight decrease in GitHub engagement"),
]


def assess_score(score: float) -> Assessment:
    """Map a 0-100 score to its tier."""
    for minimum, level, message, color in ASSESSMENT_TIERS:
        if score >= minimum:
            return Assessment(level=level, message=message, color=color)
    _, level, message, color = ASSESSMENT_TIERS[-1]
    return Assessment(level=level, message=message, color=color)


def detect_score_change(
    old_score: Optional[float],
    new_score: Optional[float],
) -> Optional[ScoreChange]:
    """
    Classify a score move so callers can decide whether to surface it.

    Args:
        old_score: Previous score (None counts as 0)
        new_score: Freshly computed score (None counts as 0)

    Returns:
        None when the move is smaller than 2 points, otherwise a ScoreChange
        whose reason depends on the size of the move (>=10, >=5, smaller)
    """
    delta = (new_score or 0) - (old_score or 0)

    if abs(delta) < SCORE_CHANGE_MIN_DELTA:
        return None

    if delta > 0:
        change_type, reasons = "increase", INCREASE_REASONS
    else:
        change_type, reasons = "decrease", DECREASE_REASONS

    reason = next(text for minimum, text in reasons if abs(delta) >= minimum)
    return ScoreChange(type=change_type, reason=reason, delta=delta)

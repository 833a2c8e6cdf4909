"""Readiness scoring.

Two variants built on the same factor abstraction:
- Manual activity: everything on the student's record, 11 capped factors
- Platform only: the synced version-control profile, 4 factors with
  recommendations and a qualitative tier

Usage:
    from placement_metrics.core.readiness import calculate_readiness_score

    result = calculate_readiness_score(student)
    print(f"Readiness: {result.total} {result.breakdown}")
"""

from placement_metrics.core.readiness.assessment import assess_score, detect_score_change
from placement_metrics.core.readiness.factors import (
    Advice,
    CompositeFactor,
    ScoreFactor,
    fold_factors,
)
from placement_metrics.core.readiness.history import (
    append_score_history,
    crossed_milestones,
    score_growth,
)
from placement_metrics.core.readiness.platform import (
    PLATFORM_FACTORS,
    calculate_platform_readiness,
)
from placement_metrics.core.readiness.recommendations import select_top_recommendations
from placement_metrics.core.readiness.score import (
    READINESS_FACTORS,
    calculate_readiness_score,
)
from placement_metrics.core.readiness.types import (
    Assessment,
    PlatformReadinessScore,
    ReadinessResult,
    Recommendation,
    ScoreChange,
)

__all__ = [
    "calculate_readiness_score",
    "calculate_platform_readiness",
    "detect_score_change",
    "assess_score",
    "select_top_recommendations",
    "append_score_history",
    "score_growth",
    "crossed_milestones",
    "fold_factors",
    "ScoreFactor",
    "CompositeFactor",
    "Advice",
    "READINESS_FACTORS",
    "PLATFORM_FACTORS",
    "ReadinessResult",
    "PlatformReadinessScore",
    "Recommendation",
    "Assessment",
    "ScoreChange",
]

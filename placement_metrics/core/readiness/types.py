"""Pydantic models for readiness scoring."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

Priority = Literal["low", "medium", "high"]


# =============================================================================
# Readiness Scoring Types
# =============================================================================


class Recommendation(BaseModel):
    """An actionable recommendation to improve readiness."""

    category: str = Field(..., description="Factor this improves (e.g., 'Open Source')")
    message: str = Field(..., description="What to do")
    priority: Priority = Field(..., description="How urgent the action is")


class ReadinessResult(BaseModel):
    """Manual-activity readiness score.

    ``breakdown`` holds one entry per factor and always sums (after rounding)
    to ``total``. A student with no scoring evidence gets an empty breakdown.
    """

    total: int = Field(default=0, ge=0, le=100, description="Overall readiness score")
    breakdown: dict[str, float] = Field(
        default_factory=dict, description="Factor name -> points contributed"
    )


class Assessment(BaseModel):
    """Qualitative tier for a readiness score."""

    level: str = Field(..., description="Tier name (e.g., 'Good')")
    message: str = Field(..., description="Fixed message for the tier")
    color: str = Field(..., description="Color token for presentation")


class PlatformReadinessScore(BaseModel):
    """Readiness computed from the synced version-control profile only."""

    score: int = Field(default=0, ge=0, le=100, description="Overall readiness score")
    breakdown: dict[str, float] = Field(
        default_factory=dict, description="Top-level factor -> points contributed"
    )
    recommendations: list[Recommendation] = Field(
        default_factory=list, description="All recommendations, in factor order"
    )
    top_recommendations: list[Recommendation] = Field(
        default_factory=list, description="Highest-priority recommendations"
    )
    assessment: Assessment
    calculated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="When score was computed"
    )


class ScoreChange(BaseModel):
    """A score move large enough to surface to the student."""

    type: Literal["increase", "decrease"]
    reason: str
    delta: float = Field(..., description="new - old")


# =============================================================================
# Tiers and thresholds
# =============================================================================

# (minimum score, level, message, color), checked top-down
ASSESSMENT_TIERS = [
    (80, "Excellent", "Outstanding GitHub presence! You are highly placement-ready.", "green"),
    (60, "Good", "Strong GitHub activity. Keep building and contributing.", "blue"),
    (40, "Fair", "Decent start. Focus on consistency and quality.", "yellow"),
    (20, "Needs Improvement", "Work on building a stronger GitHub portfolio.", "orange"),
    (0, "Getting Started", "Connect GitHub and start building projects.", "red"),
]

# Score moves smaller than this are noise
SCORE_CHANGE_MIN_DELTA = 2

# Score milestones that unlock achievements
SCORE_MILESTONES = (50, 75, 90)

MAX_SCORE = 100

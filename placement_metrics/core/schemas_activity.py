"""Pydantic models for the student activity snapshot.

The snapshot is the single read-only input shared by the readiness score,
streak and goal auto-sync calculators. It mirrors the student document the
caller stores: append-only activity lists, a self-reported skill radar,
blocks synced from external platforms, and a few derived counters.

Every field is optional. Missing or malformed values fall back to empty/zero
through the validators in ``placement_metrics.core.coercion``.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import AliasChoices, AliasPath, BaseModel, BeforeValidator, Field, ValidationError

from placement_metrics.core.coercion import (
    Count,
    Flag,
    LenientModel,
    Number,
    OptionalNumber,
    ScoreMap,
    Text,
    TextList,
    Timestamp,
    to_block,
    to_list,
    to_record_list,
    to_sub_block,
)
from placement_metrics.core.logging import get_logger
from placement_metrics.core.schemas_goals import Goal

logger = get_logger(__name__)

Records = BeforeValidator(to_record_list)
Block = BeforeValidator(to_block)
SubBlock = BeforeValidator(to_sub_block)


def _present_items(value: Any) -> list:
    return [item for item in to_list(value) if item]


# =============================================================================
# Append-only activity records
# =============================================================================


class Project(LenientModel):
    title: Text = ""
    description: Text = ""
    tags: TextList = Field(default_factory=list)
    status: Text = Field(default="pending", description="pending, verified or rejected")
    verified: Flag = False
    submitted_at: Timestamp = None
    created_at: Timestamp = None

    @property
    def activity_at(self):
        return self.submitted_at or self.created_at


class Certification(LenientModel):
    name: Text = ""
    provider: Text = ""
    status: Text = "pending"
    issued_date: Timestamp = None
    created_at: Timestamp = None

    @property
    def activity_at(self):
        return self.issued_date or self.created_at


class Event(LenientModel):
    name: Text = ""
    outcome: Text = ""
    date: Timestamp = None
    created_at: Timestamp = None

    @property
    def activity_at(self):
        return self.date or self.created_at


class CodingLog(LenientModel):
    """One manually logged practice session."""

    date: Timestamp = None
    platform: Text = ""
    minutes_spent: Number = 0
    problems_solved: Count = 0
    created_at: Timestamp = None

    @property
    def activity_at(self):
        return self.date or self.created_at


class ScoreHistoryEntry(LenientModel):
    score: Number = 0
    calculated_at: Timestamp = None


# =============================================================================
# Externally synced blocks
# =============================================================================


class GitHubStats(LenientModel):
    """Version-control activity summary written by the GitHub fetcher."""

    username: Text = ""
    total_repos: Count = 0
    total_stars: Count = 0
    total_commits: Count = 0
    contribution_streak: Count = 0
    fetched_at: Timestamp = None
    last_synced_at: Timestamp = None


class RecentActivity(LenientModel):
    last_7_days: Count = 0
    last_30_days: Count = 0


class CodingPlatformStats(LenientModel):
    """Competitive-programming stats (LeetCode, HackerRank)."""

    username: Text = ""
    total_solved: Count = 0
    recent_activity: Annotated[RecentActivity, SubBlock] = Field(
        default_factory=RecentActivity
    )
    certifications: Annotated[list[Any], BeforeValidator(_present_items)] = Field(
        default_factory=list, description="Earned platform certificates (any shape)"
    )
    fetched_at: Timestamp = None


class InterviewTrend(str, Enum):
    improving = "improving"
    stable = "stable"
    declining = "declining"


def _to_trend(value: Any) -> InterviewTrend:
    if isinstance(value, InterviewTrend):
        return value
    try:
        return InterviewTrend(str(value).strip().lower())
    except ValueError:
        return InterviewTrend.stable


class InterviewStats(LenientModel):
    completed_sessions: Count = 0
    avg_score: Number = Field(default=0, description="Average session score (0-100)")
    recent_trend: Annotated[InterviewTrend, BeforeValidator(_to_trend)] = InterviewTrend.stable


class CodingProfiles(LenientModel):
    leetcode: Text = ""
    hackerrank: Text = ""
    last_synced_at: Timestamp = None


# -----------------------------------------------------------------------------
# Version-control profile (platform-only readiness variant)
# -----------------------------------------------------------------------------


class Repository(LenientModel):
    name: Text = ""
    description: Text = ""
    language: Text = ""
    stars: Count = 0
    forks: Count = 0
    is_fork: Flag = False
    topics: TextList = Field(default_factory=list)
    updated_at: Timestamp = None


class LanguageShare(LenientModel):
    language: Text = ""
    count: Count = 0


class RepositorySummary(LenientModel):
    repos: Annotated[list[Repository], Records] = Field(default_factory=list)
    original_repos: Count = 0
    top_languages: Annotated[list[LanguageShare], Records] = Field(default_factory=list)
    total_stars: Count = 0
    total_forks: Count = 0


class ConsistencySummary(LenientModel):
    active_weeks: Count = 0
    total_commits: Count = 0
    days_since_last_commit: OptionalNumber = None
    consistency_percentage: Number = Field(default=0, description="Active weeks over the window (0-100)")


class OpenCloseCounts(LenientModel):
    opened: Count = 0
    merged: Count = 0
    closed: Count = 0


class OpenSourceSummary(LenientModel):
    """Open-source activity; stored documents nest reviews and contributions."""

    pull_requests: Annotated[OpenCloseCounts, SubBlock] = Field(
        default_factory=OpenCloseCounts
    )
    issues: Annotated[OpenCloseCounts, SubBlock] = Field(
        default_factory=OpenCloseCounts
    )
    reviews_given: Count = Field(
        default=0,
        validation_alias=AliasChoices(AliasPath("reviews", "given"), "reviewsGiven", "reviews_given"),
    )
    repos_contributed_to: Count = Field(
        default=0,
        validation_alias=AliasChoices(
            AliasPath("contributions", "reposContributedTo"),
            "reposContributedTo",
            "repos_contributed_to",
        ),
    )


class ProfileSummary(LenientModel):
    avatar: Text = ""
    bio: Text = ""
    location: Text = ""
    blog: Text = ""
    company: Text = ""
    followers: Count = 0
    created_at: Timestamp = None


class VersionControlProfile(LenientModel):
    """The externally synced version-control block.

    Each section is written by a separate fetch and may be absent on its own;
    an absent section scores zero rather than failing the whole profile.
    """

    repos: Annotated[Optional[RepositorySummary], Block] = None
    consistency: Annotated[Optional[ConsistencySummary], Block] = None
    open_source: Annotated[Optional[OpenSourceSummary], Block] = None
    profile: Annotated[Optional[ProfileSummary], Block] = None


# =============================================================================
# Snapshot
# =============================================================================


class ActivitySnapshot(LenientModel):
    """Everything the metrics engine reads about one student."""

    student_id: Text = Field(
        default="",
        validation_alias=AliasChoices("studentId", "student_id", "_id", "id"),
        description="Caller's identifier, used in logs only",
    )

    projects: Annotated[list[Project], Records] = Field(default_factory=list)
    certifications: Annotated[list[Certification], Records] = Field(default_factory=list)
    events: Annotated[list[Event], Records] = Field(default_factory=list)
    coding_logs: Annotated[list[CodingLog], Records] = Field(default_factory=list)

    skills: TextList = Field(default_factory=list)
    skill_radar: ScoreMap = Field(default_factory=dict, description="Skill -> proficiency (0-100)")

    github_stats: Annotated[Optional[GitHubStats], Block] = None
    leetcode_stats: Annotated[Optional[CodingPlatformStats], Block] = None
    hackerrank_stats: Annotated[Optional[CodingPlatformStats], Block] = None
    interview_stats: Annotated[Optional[InterviewStats], Block] = None
    coding_profiles: Annotated[Optional[CodingProfiles], Block] = None
    version_control: Annotated[Optional[VersionControlProfile], Block] = None

    streak_days: Count = 0
    last_active_at: Timestamp = None
    readiness_score: Count = 0
    readiness_history: Annotated[list[ScoreHistoryEntry], Records] = Field(default_factory=list)

    goals: Annotated[list[Goal], Records] = Field(default_factory=list)

    @classmethod
    def coerce(cls, value: Any) -> "ActivitySnapshot":
        """Build a snapshot from whatever the caller handed over.

        Accepts None, a mapping (camelCase or snake_case keys) or a snapshot.
        Never raises for those; anything unusable yields an empty snapshot.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if not isinstance(value, Mapping):
            logger.warning(f"Unsupported snapshot type {type(value).__name__}, using empty snapshot")
            return cls()
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            logger.warning(f"Snapshot failed validation, using empty snapshot: {e.error_count()} errors")
            return cls()

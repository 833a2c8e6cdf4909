"""Manual-activity readiness score.

This module scores a student from everything on their record:
1. Extract raw signals from the activity snapshot
2. Run the ordered factor list (each factor capped on its own)
3. Sum, round once, clamp to 0-100

Factor caps add up to more than 100 on purpose: a strong student does not
need every factor maxed out. When the raw sum passes 100 the breakdown is
scaled down proportionally so it still adds up to the reported total.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from placement_metrics.core.coercion import to_timestamp
from placement_metrics.core.config import get_settings
from placement_metrics.core.logging import get_logger
from placement_metrics.core.readiness.curves import Exponential, Linear, Proportion
from placement_metrics.core.readiness.factors import (
    CompositeFactor,
    ScoreFactor,
    clamp_total,
    fold_factors,
    read,
)
from placement_metrics.core.readiness.types import MAX_SCORE, ReadinessResult
from placement_metrics.core.schemas_activity import ActivitySnapshot, InterviewTrend

logger = get_logger(__name__)

TREND_BONUS = {
    InterviewTrend.improving: 1.0,
    InterviewTrend.stable: 0.5,
    InterviewTrend.declining: 0.0,
}


# =============================================================================
# Factor list
# =============================================================================

READINESS_FACTORS = (
    ScoreFactor("projects", 20, read("projects"), Exponential(2)),
    ScoreFactor("codingConsistency", 10, read("coding_consistency"), Exponential(8)),
    ScoreFactor("problemsSolved", 10, read("problems_solved"), Exponential(80)),
    CompositeFactor(
        "versionControl",
        15,
        parts=(
            ScoreFactor("commits", 6, read("commits"), Exponential(60)),
            ScoreFactor("repositories", 5, read("repository_reach"), Exponential(6)),
            ScoreFactor("contributionStreak", 4, read("contribution_streak"), Exponential(5)),
        ),
    ),
    ScoreFactor("certifications", 15, read("certifications"), Exponential(2)),
    ScoreFactor("events", 10, read("events"), Exponential(3)),
    ScoreFactor("platformDiversity", 10, read("platforms"), Exponential(1.5)),
    ScoreFactor("skillRadar", 10, read("skill_radar_average"), Proportion(100)),
    ScoreFactor("skills", 10, read("skills"), Exponential(4)),
    CompositeFactor(
        "interviewPractice",
        10,
        parts=(
            ScoreFactor("averageScore", 6, read("interview_average"), Proportion(100)),
            ScoreFactor("sessions", 3, read("interview_sessions"), Exponential(3)),
            ScoreFactor("trend", 1, read("interview_trend"), Linear(1)),
        ),
    ),
    ScoreFactor("streakBonus", 5, read("streak_days"), Linear(0.2)),
)


# =============================================================================
# Entry point
# =============================================================================


def calculate_readiness_score(
    snapshot: Any,
    now: Optional[datetime] = None,
) -> ReadinessResult:
    """
    Compute the manual-activity readiness score for one student.

    Never raises: a missing snapshot, or one without any scoring evidence,
    yields ``ReadinessResult(total=0, breakdown={})``.

    Args:
        snapshot: ActivitySnapshot, raw student mapping, or None
        now: Reference time for the recent-activity window (defaults to now, UTC)

    Returns:
        ReadinessResult with the clamped total and per-factor breakdown
    """
    if snapshot is None:
        return ReadinessResult()

    snapshot = ActivitySnapshot.coerce(snapshot)
    now = to_timestamp(now) or datetime.now(timezone.utc)

    signals = extract_activity_signals(snapshot, now)
    fold = fold_factors(READINESS_FACTORS, signals)

    raw_total = fold.raw_total
    if raw_total <= 0:
        return ReadinessResult()

    breakdown = fold.breakdown
    if raw_total > MAX_SCORE:
        scale = MAX_SCORE / raw_total
        breakdown = {name: points * scale for name, points in breakdown.items()}

    total = clamp_total(sum(breakdown.values()))

    logger.debug(
        f"Readiness for student {snapshot.student_id or '<unsaved>'}: "
        f"raw={raw_total:.2f}, total={total}"
    )

    return ReadinessResult(total=total, breakdown=breakdown)


def extract_activity_signals(snapshot: ActivitySnapshot, now: datetime) -> dict[str, Any]:
    """
    Flatten a snapshot into the raw signals the factor list reads.

    Returns a dict of plain numbers; signals with no data at all are None.
    """
    settings = get_settings()
    window_start = now - timedelta(days=settings.CONSISTENCY_WINDOW_DAYS)

    recent_logs = [
        log for log in snapshot.coding_logs
        if log.activity_at is not None and log.activity_at > window_start
    ]

    leetcode = snapshot.leetcode_stats
    hackerrank = snapshot.hackerrank_stats
    github = snapshot.github_stats
    interview = snapshot.interview_stats

    synced_recent = [
        stats.recent_activity.last_30_days
        for stats in (leetcode, hackerrank)
        if stats is not None
    ]
    synced_solved = sum(stats.total_solved for stats in (leetcode, hackerrank) if stats is not None)
    logged_solved = sum(log.problems_solved for log in snapshot.coding_logs)

    # Distinct platforms: recent manual logs plus every synced platform with activity
    platforms = {log.platform.strip().lower() for log in recent_logs if log.platform.strip()}
    if leetcode is not None and (leetcode.total_solved or leetcode.recent_activity.last_30_days):
        platforms.add("leetcode")
    if hackerrank is not None and (hackerrank.total_solved or hackerrank.certifications):
        platforms.add("hackerrank")
    if github is not None and (github.total_repos or github.total_commits):
        platforms.add("github")

    radar_values = [min(max(value, 0.0), 100.0) for value in snapshot.skill_radar.values()]

    has_interviews = interview is not None and interview.completed_sessions > 0

    return {
        "projects": len(snapshot.projects),
        "coding_consistency": max([len(recent_logs), *synced_recent]),
        "problems_solved": logged_solved + synced_solved,
        "commits": github.total_commits if github else 0,
        "repository_reach": (github.total_repos + github.total_stars / 5) if github else 0,
        "contribution_streak": github.contribution_streak if github else 0,
        "certifications": len(snapshot.certifications)
        + (len(hackerrank.certifications) if hackerrank else 0),
        "events": len(snapshot.events),
        "platforms": len(platforms),
        "skill_radar_average": sum(radar_values) / len(radar_values) if radar_values else None,
        "skills": len(snapshot.skills),
        "interview_average": interview.avg_score if has_interviews else None,
        "interview_sessions": interview.completed_sessions if has_interviews else None,
        "interview_trend": TREND_BONUS[interview.recent_trend] if has_interviews else None,
        "streak_days": snapshot.streak_days,
    }

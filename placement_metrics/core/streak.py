"""Consecutive-day engagement streaks.

What counts as activity for a day:
- Coding logs
- Projects submitted (or created)
- Certifications issued (or added)
- Events attended
- External platform syncs (LeetCode, GitHub, HackerRank, coding profiles)
- The general last-active timestamp

A streak is alive while the most recent activity day is today or yesterday.
Otherwise it resets to zero, but the last activity date is still reported so
callers can show "last active N days ago".
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field

from placement_metrics.core.coercion import to_timestamp
from placement_metrics.core.config import get_settings
from placement_metrics.core.logging import get_logger, log_with_context
from placement_metrics.core.schemas_activity import ActivitySnapshot

logger = get_logger(__name__)


class StreakResult(BaseModel):
    streak_days: int = Field(default=0, ge=0, description="Consecutive active days")
    last_active_at: Optional[datetime] = Field(
        None, description="Start of the most recent active day (None if never active)"
    )


class BatchStreakResult(BaseModel):
    updated: int = 0
    errors: int = 0
    total_processed: int = 0


# =============================================================================
# Calculation
# =============================================================================


def calculate_streak(snapshot: Any, now: Optional[datetime] = None) -> StreakResult:
    """
    Calculate the consecutive-day streak from a student's activity.

    Args:
        snapshot: ActivitySnapshot, raw student mapping, or None
        now: Reference time (defaults to now, UTC)

    Returns:
        StreakResult; ``streak_days == 0`` with a non-null ``last_active_at``
        means the student was active before but the streak is broken
    """
    if snapshot is None:
        return StreakResult()

    snapshot = ActivitySnapshot.coerce(snapshot)
    tz = _streak_timezone()
    now = to_timestamp(now) or datetime.now(timezone.utc)
    today = _to_local_date(now, tz)

    active_days = sorted(collect_activity_dates(snapshot, tz), reverse=True)
    if not active_days:
        return StreakResult()

    most_recent = active_days[0]
    last_active_at = datetime.combine(most_recent, time.min, tzinfo=tz)

    # Older than yesterday: the streak is broken
    if most_recent < today - timedelta(days=1):
        return StreakResult(streak_days=0, last_active_at=last_active_at)

    streak_days = 0
    expected = most_recent
    for day in active_days:
        if day != expected:
            break
        streak_days += 1
        expected = day - timedelta(days=1)

    return StreakResult(streak_days=streak_days, last_active_at=last_active_at)


def collect_activity_dates(snapshot: ActivitySnapshot, tz: tzinfo) -> set[date]:
    """Distinct calendar days (in ``tz``) with at least one qualifying activity."""
    timestamps: list[Optional[datetime]] = []

    timestamps.extend(log.activity_at for log in snapshot.coding_logs)
    timestamps.extend(project.activity_at for project in snapshot.projects)
    timestamps.extend(cert.activity_at for cert in snapshot.certifications)
    timestamps.extend(event.activity_at for event in snapshot.events)

    for stats in (snapshot.leetcode_stats, snapshot.hackerrank_stats):
        if stats is not None:
            timestamps.append(stats.fetched_at)
    if snapshot.github_stats is not None:
        timestamps.append(snapshot.github_stats.fetched_at or snapshot.github_stats.last_synced_at)
    if snapshot.coding_profiles is not None:
        timestamps.append(snapshot.coding_profiles.last_synced_at)
    timestamps.append(snapshot.last_active_at)

    return {_to_local_date(ts, tz) for ts in timestamps if ts is not None}


def _to_local_date(moment: datetime, tz: tzinfo) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def _streak_timezone() -> tzinfo:
    name = get_settings().STREAK_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown STREAK_TIMEZONE {name!r}, falling back to UTC")
        return timezone.utc


# =============================================================================
# Updates
# =============================================================================


def update_streak(
    student: Any,
    persist: Callable[[ActivitySnapshot], Any],
    now: Optional[datetime] = None,
) -> ActivitySnapshot:
    """
    Recalculate a student's streak and hand the updated record to ``persist``.

    The previous ``last_active_at`` is kept when it is later than the
    computed activity day (it carries a time of day, the day start does not).

    Raises:
        ValueError: If no student is given
    """
    if student is None:
        raise ValueError("Student snapshot is required")

    snapshot = ActivitySnapshot.coerce(student)
    result = calculate_streak(snapshot, now=now)

    update: dict[str, Any] = {"streak_days": result.streak_days}
    if result.last_active_at is not None:
        previous = snapshot.last_active_at
        update["last_active_at"] = (
            previous if previous is not None and previous > result.last_active_at
            else result.last_active_at
        )

    updated = snapshot.model_copy(update=update)
    persist(updated)

    log_with_context(
        logger,
        logging.DEBUG,
        "Updated streak",
        student_id=snapshot.student_id or "<unsaved>",
        streak_days=result.streak_days,
    )
    return updated


def batch_update_streaks(
    students: Iterable[Any],
    persist: Callable[[ActivitySnapshot], Any],
    now: Optional[datetime] = None,
) -> BatchStreakResult:
    """
    Update streaks for many students, one at a time.

    Students are processed strictly in order; a failure for one student is
    logged and counted and the batch moves on.

    Returns:
        BatchStreakResult with updated/error/total counts
    """
    result = BatchStreakResult()
    if not students:
        return result

    for student in students:
        result.total_processed += 1
        try:
            update_streak(student, persist, now=now)
            result.updated += 1
        except Exception as e:
            student_id = _student_id(student)
            log_with_context(
                logger,
                logging.ERROR,
                f"Failed to update streak: {e}",
                student_id=student_id,
            )
            result.errors += 1

    logger.info(
        f"Batch streak update complete: {result.updated} updated, "
        f"{result.errors} errors, {result.total_processed} total"
    )
    return result


def _student_id(student: Any) -> str:
    if isinstance(student, ActivitySnapshot):
        return student.student_id or "<unsaved>"
    if isinstance(student, dict):
        return str(student.get("studentId") or student.get("student_id") or student.get("_id") or "<unsaved>")
    return "<unknown>"

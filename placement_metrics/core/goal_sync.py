"""Auto-tracked goal progress.

Goals with ``auto_track`` set derive their progress from activity counts on
the student's record instead of manual updates. Syncing is a pure transform:
the caller gets updated goal copies plus a change set per goal and decides
whether (and how) to persist them.
"""

import math
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from placement_metrics.core.coercion import round_half_up, to_timestamp
from placement_metrics.core.logging import get_logger
from placement_metrics.core.schemas_activity import ActivitySnapshot
from placement_metrics.core.schemas_goals import (
    AutoTrack,
    Goal,
    GoalChange,
    GoalStatus,
    GoalSyncResult,
)

logger = get_logger(__name__)

# Checked in order: (track, category tag, title/description keywords)
AUTO_TRACK_RULES = [
    (AutoTrack.projects, "project", ("project",)),
    (AutoTrack.certifications, "certification", ("certif",)),
    (AutoTrack.coding_problems, "coding", ("leetcode", "hackerrank", "problem")),
    (AutoTrack.skills, "skill", ("skill",)),
]

TRACK_UNITS = {
    AutoTrack.projects: "projects",
    AutoTrack.certifications: "certifications",
    AutoTrack.coding_problems: "problems",
    AutoTrack.coding_logs: "logs",
    AutoTrack.skills: "skills",
}

CATEGORY_UNITS = {
    "project": "projects",
    "certification": "certifications",
    "coding": "problems",
    "skill": "skills",
}

DEFAULT_UNIT = "steps"

_TARGET_PATTERN = re.compile(r"(\d{1,4})")


# =============================================================================
# Sync
# =============================================================================


def sync_auto_goals(
    snapshot: Any,
    goals: Optional[list[Any]] = None,
    now: Optional[datetime] = None,
) -> GoalSyncResult:
    """
    Recompute progress for every auto-tracked goal.

    Abandoned goals and goals with ``auto_track == none`` pass through
    untouched. Goals without a positive target only get ``current_value``.

    Args:
        snapshot: ActivitySnapshot or raw student mapping (activity counts source)
        goals: Goals to sync; defaults to the snapshot's own goal list
        now: Completion timestamp for goals that complete in this pass

    Returns:
        GoalSyncResult with goal copies (input order, non-mapping entries dropped)
        and per-goal changes
    """
    snapshot = ActivitySnapshot.coerce(snapshot)
    now = to_timestamp(now) or datetime.now(timezone.utc)

    if goals is None:
        source = snapshot.goals
    else:
        source = [
            goal if isinstance(goal, Goal) else Goal.model_validate(goal)
            for goal in goals
            if isinstance(goal, (Goal, Mapping))
        ]

    result = GoalSyncResult()
    for index, goal in enumerate(source):
        fields = _goal_changes(snapshot, goal, now)
        result.goals.append(goal.model_copy(update=fields))
        if fields:
            result.changes.append(GoalChange(goal_id=goal.id, index=index, fields=fields))

    if result.changed:
        logger.debug(
            f"Synced goals for student {snapshot.student_id or '<unsaved>'}: "
            f"{len(result.changes)}/{len(source)} changed"
        )

    return result


def _goal_changes(snapshot: ActivitySnapshot, goal: Goal, now: datetime) -> dict[str, Any]:
    """Field -> new value for one goal (empty when nothing changes)."""
    if goal.auto_track == AutoTrack.none or goal.is_frozen:
        return {}

    changes: dict[str, Any] = {}

    current_value = get_auto_track_value(snapshot, goal.auto_track)
    if goal.current_value != current_value:
        changes["current_value"] = current_value

    target = goal.target_value
    if target is None or not math.isfinite(target) or target <= 0:
        return changes

    progress = compute_progress(current_value, target)
    if goal.progress != progress:
        changes["progress"] = progress

    if progress >= 100:
        status = GoalStatus.completed
    elif progress > 0:
        status = GoalStatus.in_progress
    else:
        status = GoalStatus.pending

    if goal.status != status:
        changes["status"] = status

    if status == GoalStatus.completed and goal.completed_at is None:
        changes["completed_at"] = now
    elif status != GoalStatus.completed and goal.completed_at is not None:
        changes["completed_at"] = None

    return changes


def get_auto_track_value(snapshot: Any, auto_track: AutoTrack) -> int:
    """Current activity count for an auto-track kind."""
    snapshot = ActivitySnapshot.coerce(snapshot)

    if auto_track == AutoTrack.projects:
        return len(snapshot.projects)
    if auto_track == AutoTrack.certifications:
        return len(snapshot.certifications)
    if auto_track == AutoTrack.coding_problems:
        synced = snapshot.leetcode_stats.total_solved if snapshot.leetcode_stats else 0
        if synced > 0:
            return synced
        return sum(log.problems_solved for log in snapshot.coding_logs)
    if auto_track == AutoTrack.coding_logs:
        return len(snapshot.coding_logs)
    if auto_track == AutoTrack.skills:
        return max(len(snapshot.skills), len(snapshot.skill_radar))
    return 0


def compute_progress(current_value: float, target_value: Optional[float]) -> int:
    """Percent of target reached, rounded and capped at 100."""
    if target_value is None or not math.isfinite(target_value) or target_value <= 0:
        return 0
    if not math.isfinite(current_value) or current_value <= 0:
        return 0
    return int(round_half_up(min(100.0, current_value / target_value * 100)))


# =============================================================================
# Authoring helpers
# =============================================================================


def infer_auto_track(category: str = "other", title: str = "", description: str = "") -> AutoTrack:
    """Guess what a new goal should track from its category and wording."""
    category = (category or "other").strip().lower()
    text = f"{title or ''} {description or ''}".lower()

    for track, tag, keywords in AUTO_TRACK_RULES:
        if category == tag or any(keyword in text for keyword in keywords):
            return track

    return AutoTrack.none


def infer_unit(auto_track: Any, category: str = "other") -> str:
    """Display unit for a goal; ``steps`` when nothing more specific fits."""
    try:
        track = AutoTrack(auto_track)
    except ValueError:
        track = AutoTrack.none

    if track in TRACK_UNITS:
        return TRACK_UNITS[track]
    return CATEGORY_UNITS.get((category or "other").strip().lower(), DEFAULT_UNIT)


def infer_target_value_from_text(text: Any) -> Optional[int]:
    """First number (up to four digits) in the text, e.g. 'Solve 150 problems' -> 150."""
    if not text:
        return None
    match = _TARGET_PATTERN.search(str(text))
    if not match:
        return None
    return int(match.group(1))


def author_goal(
    title: str,
    description: str = "",
    category: str = "other",
    target_value: Optional[float] = None,
    auto_track: Optional[AutoTrack] = None,
) -> Goal:
    """Build a new goal, inferring tracking, unit and target where not given."""
    track = auto_track if auto_track is not None else infer_auto_track(category, title, description)
    if target_value is None:
        target_value = infer_target_value_from_text(title) or infer_target_value_from_text(description)

    return Goal(
        title=title,
        description=description,
        category=category,
        auto_track=track,
        target_value=target_value,
        unit=infer_unit(track, category),
    )

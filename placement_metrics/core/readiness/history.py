"""Score history bookkeeping and milestone crossings.

The caller appends every recomputed score to the student's history; these
helpers keep that list bounded and derive the signals downstream consumers
read from it (growth trajectory for ranking, milestones for achievements).
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from placement_metrics.core.config import get_settings
from placement_metrics.core.readiness.types import SCORE_MILESTONES
from placement_metrics.core.schemas_activity import ScoreHistoryEntry

MAX_GROWTH_SCORE = 10


def append_score_history(
    history: list[Any],
    score: float,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> list[ScoreHistoryEntry]:
    """
    Return a new history with ``score`` appended, keeping the newest entries.

    Args:
        history: Existing entries (ScoreHistoryEntry or raw mappings)
        score: Newly computed score
        now: Calculation time (defaults to now, UTC)
        limit: Max entries kept (defaults to SCORE_HISTORY_LIMIT; 0 keeps none)
    """
    if limit is None:
        limit = get_settings().SCORE_HISTORY_LIMIT
    entries = [
        entry if isinstance(entry, ScoreHistoryEntry) else ScoreHistoryEntry.model_validate(entry)
        for entry in (history or [])
        if isinstance(entry, (ScoreHistoryEntry, Mapping))
    ]
    entries.append(
        ScoreHistoryEntry(score=score, calculated_at=now or datetime.now(timezone.utc))
    )
    return entries[-limit:] if limit > 0 else []


def score_growth(history: list[ScoreHistoryEntry], window: int = 3) -> float:
    """Growth over the last ``window`` entries: half the gain, clamped to 0-10."""
    if len(history) < window:
        return 0.0
    recent = history[-window:]
    growth = recent[-1].score - recent[0].score
    return min(max(growth / 2, 0.0), MAX_GROWTH_SCORE)


def crossed_milestones(old_score: Optional[float], new_score: Optional[float]) -> list[int]:
    """Milestones the score moved up through (old < milestone <= new)."""
    old_score = old_score or 0
    new_score = new_score or 0
    return [m for m in SCORE_MILESTONES if old_score < m <= new_score]

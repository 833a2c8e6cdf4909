"""Pydantic models for student goals and auto-sync results."""

from enum import Enum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field

from placement_metrics.core.coercion import (
    LenientModel,
    Number,
    OptionalNumber,
    Text,
    Timestamp,
)


# =============================================================================
# Enums
# =============================================================================


class AutoTrack(str, Enum):
    """Activity count a goal's progress is derived from."""

    none = "none"
    projects = "projects"
    certifications = "certifications"
    coding_problems = "coding_problems"
    coding_logs = "coding_logs"
    skills = "skills"


class GoalStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    abandoned = "abandoned"  # Frozen: never re-synced


def _enum_or(enum_cls: type[Enum], default: Enum):
    def coerce(value: Any) -> Enum:
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(str(value).strip().lower())
        except ValueError:
            return default

    return BeforeValidator(coerce)


# =============================================================================
# Goal
# =============================================================================


class Goal(LenientModel):
    """A student goal, optionally auto-tracked from activity counts."""

    id: Text = Field(default="", validation_alias=AliasChoices("id", "_id"))
    title: Text = ""
    description: Text = ""
    category: Text = Field(default="other", description="Authoring category tag")
    auto_track: Annotated[AutoTrack, _enum_or(AutoTrack, AutoTrack.none)] = AutoTrack.none
    current_value: Number = 0
    target_value: OptionalNumber = None
    unit: Text = Field(default="steps", description="Display unit, e.g. 'projects'")
    progress: Number = Field(default=0, description="Percent complete (0-100)")
    status: Annotated[GoalStatus, _enum_or(GoalStatus, GoalStatus.pending)] = GoalStatus.pending
    completed_at: Timestamp = None

    @property
    def is_frozen(self) -> bool:
        """Abandoned goals keep whatever values they had when abandoned."""
        return self.status == GoalStatus.abandoned


# =============================================================================
# Sync results
# =============================================================================


class GoalChange(BaseModel):
    """Persisted fields that changed on one goal during a sync."""

    goal_id: str = Field(..., description="Goal id (empty for unsaved goals)")
    index: int = Field(
        ..., ge=0, description="Position of the goal in GoalSyncResult.goals (unusable entries dropped)"
    )
    fields: dict[str, Any] = Field(
        default_factory=dict, description="Changed field -> new value"
    )


class GoalSyncResult(BaseModel):
    """Outcome of an auto-sync pass over a goal list."""

    goals: list[Goal] = Field(default_factory=list, description="Updated goal copies, input order")
    changes: list[GoalChange] = Field(default_factory=list, description="Per-goal change sets")

    @property
    def changed(self) -> bool:
        """Whether the caller needs to persist anything."""
        return bool(self.changes)

    def newly_completed(self) -> list[Goal]:
        """Goals that entered ``completed`` during this sync."""
        indexes = {
            change.index
            for change in self.changes
            if change.fields.get("status") == GoalStatus.completed
        }
        return [goal for i, goal in enumerate(self.goals) if i in indexes]

"""Tests for auto-tracked goal sync and goal authoring helpers."""

from __future__ import annotations

import pytest

from placement_metrics.core.goal_sync import (
    author_goal,
    compute_progress,
    get_auto_track_value,
    infer_auto_track,
    infer_target_value_from_text,
    infer_unit,
    sync_auto_goals,
)
from placement_metrics.core.schemas_goals import AutoTrack, Goal, GoalStatus
from tests.builders import NOW, days_ago

LATER = days_ago(-3)


@pytest.fixture
def student():
    return {
        "studentId": "stu-goals",
        "projects": [{"title": "A"}, {"title": "B"}, {"title": "C"}],
        "certifications": [{"name": "AWS CCP"}],
        "codingLogs": [{"problemsSolved": 4}, {"problemsSolved": 6}],
        "skills": ["Python", "SQL", "React"],
        "skillRadar": {"dsa": 50, "web": 60, "ml": 20, "devops": 10},
    }


@pytest.fixture
def goals():
    return [
        {"_id": "g1", "title": "Ship 5 projects", "autoTrack": "projects", "targetValue": 5},
        {"_id": "g2", "title": "Get certified", "autoTrack": "certifications", "targetValue": 1},
        {"_id": "g3", "title": "Solve 40 problems", "autoTrack": "coding_problems", "targetValue": 40},
        {"_id": "g4", "title": "Learn 4 skills", "autoTrack": "skills", "targetValue": 4},
        {"_id": "g5", "title": "Old goal", "autoTrack": "projects", "targetValue": 2, "status": "abandoned"},
        {"_id": "g6", "title": "Read a book", "autoTrack": "none", "targetValue": 1},
        {"_id": "g7", "title": "Keep logging", "autoTrack": "coding_logs"},
    ]


# =============================================================================
# Activity counts
# =============================================================================


class TestAutoTrackValue:
    @pytest.mark.parametrize(
        "track,expected",
        [
            (AutoTrack.projects, 3),
            (AutoTrack.certifications, 1),
            (AutoTrack.coding_problems, 10),
            (AutoTrack.coding_logs, 2),
            (AutoTrack.skills, 4),
            (AutoTrack.none, 0),
        ],
    )
    def test_counts(self, student, track, expected):
        """Each auto-track kind reads its own activity count."""
        assert get_auto_track_value(student, track) == expected

    def test_synced_problem_count_wins(self, student):
        """A synced LeetCode total replaces the logged problem sum."""
        student["leetcodeStats"] = {"totalSolved": 150}
        assert get_auto_track_value(student, AutoTrack.coding_problems) == 150

    def test_skills_uses_larger_source(self, student):
        """Skills count is the larger of the skill list and the radar."""
        student["skills"] = [f"s{i}" for i in range(6)]
        assert get_auto_track_value(student, AutoTrack.skills) == 6


class TestComputeProgress:
    @pytest.mark.parametrize(
        "current,target,expected",
        [
            (3, 5, 60), (10, 40, 25), (8, 4, 100), (0, 5, 0), (3, 0, 0), (3, None, 0), (-2, 5, 0),
            (1, 200, 1), (1, 8, 13),
        ],
    )
    def test_progress(self, current, target, expected):
        """Percent of target, rounded half up and capped at 100."""
        assert compute_progress(current, target) == expected


# =============================================================================
# Sync
# =============================================================================


class TestSyncAutoGoals:
    def test_progress_and_status(self, student, goals):
        """Progress and status follow current activity counts."""
        result = sync_auto_goals(student, goals, now=NOW)
        by_id = {goal.id: goal for goal in result.goals}

        assert (by_id["g1"].current_value, by_id["g1"].progress, by_id["g1"].status) == (3, 60, GoalStatus.in_progress)
        assert (by_id["g2"].progress, by_id["g2"].status) == (100, GoalStatus.completed)
        assert by_id["g2"].completed_at == NOW
        assert (by_id["g3"].current_value, by_id["g3"].progress) == (10, 25)
        assert by_id["g4"].status == GoalStatus.completed

    def test_order_preserved(self, student, goals):
        """Goals come back in input order."""
        result = sync_auto_goals(student, goals, now=NOW)
        assert [goal.id for goal in result.goals] == ["g1", "g2", "g3", "g4", "g5", "g6", "g7"]

    def test_frozen_goals_untouched(self, student, goals):
        """Abandoned and untracked goals produce no changes."""
        result = sync_auto_goals(student, goals, now=NOW)
        changed_ids = {change.goal_id for change in result.changes}
        assert "g5" not in changed_ids
        assert "g6" not in changed_ids
        assert result.goals[4].status == GoalStatus.abandoned
        assert result.goals[4].current_value == 0

    def test_no_target_only_updates_count(self, student, goals):
        """Without a target only current_value moves."""
        result = sync_auto_goals(student, goals, now=NOW)
        change = next(c for c in result.changes if c.goal_id == "g7")
        assert change.fields == {"current_value": 2}
        assert result.goals[6].status == GoalStatus.pending

    def test_change_set_fields(self, student, goals):
        """A completing goal reports every persisted field that moved."""
        result = sync_auto_goals(student, goals, now=NOW)
        change = next(c for c in result.changes if c.goal_id == "g2")
        assert change.index == 1
        assert change.fields == {
            "current_value": 1,
            "progress": 100,
            "status": GoalStatus.completed,
            "completed_at": NOW,
        }

    def test_newly_completed(self, student, goals):
        """Goals completed during the pass are listed."""
        result = sync_auto_goals(student, goals, now=NOW)
        assert [goal.id for goal in result.newly_completed()] == ["g2", "g4"]

    def test_idempotent(self, student, goals):
        """A second sync changes nothing and keeps the completion time."""
        first = sync_auto_goals(student, goals, now=NOW)
        second = sync_auto_goals(student, first.goals, now=LATER)

        assert not second.changed
        assert second.goals == first.goals
        assert second.goals[1].completed_at == NOW

    def test_regression_clears_completion(self, student):
        """Raising the target reopens a completed goal."""
        goal = {
            "id": "g1",
            "autoTrack": "projects",
            "targetValue": 10,
            "currentValue": 3,
            "progress": 100,
            "status": "completed",
            "completedAt": days_ago(5).isoformat(),
        }
        result = sync_auto_goals(student, [goal], now=NOW)
        reopened = result.goals[0]
        assert reopened.progress == 30
        assert reopened.status == GoalStatus.in_progress
        assert reopened.completed_at is None

    def test_zero_progress_is_pending(self):
        """No activity yet keeps the goal pending."""
        result = sync_auto_goals({}, [{"autoTrack": "projects", "targetValue": 5}], now=NOW)
        assert not result.changed
        assert result.goals[0].status == GoalStatus.pending

    def test_goals_default_to_snapshot(self, student, goals):
        """Without an explicit list the snapshot's own goals are synced."""
        student["goals"] = goals
        result = sync_auto_goals(student, now=NOW)
        assert len(result.goals) == 7
        assert result.goals[0].progress == 60

    def test_input_goals_not_mutated(self, student):
        """Sync returns copies; the caller's goals are unchanged."""
        goal = Goal(id="g1", auto_track=AutoTrack.projects, target_value=5)
        sync_auto_goals(student, [goal], now=NOW)
        assert goal.progress == 0
        assert goal.status == GoalStatus.pending

    def test_garbage_goals_dropped(self, student):
        """Non-mapping entries in the goal list are skipped."""
        result = sync_auto_goals(student, [None, "goal", {"autoTrack": "projects", "targetValue": 3}], now=NOW)
        assert len(result.goals) == 1
        assert result.goals[0].status == GoalStatus.completed

    def test_change_index_points_into_result_goals(self, student):
        """Change indexes address the kept goals, not the raw input list."""
        result = sync_auto_goals(student, [None, {"autoTrack": "projects", "targetValue": 3}], now=NOW)
        (change,) = result.changes
        assert change.index == 0
        assert result.goals[change.index].status == GoalStatus.completed

    def test_half_percent_rounds_up(self):
        """0.5% progress reports 1% and starts the goal."""
        result = sync_auto_goals(
            {"projects": [{"title": "A"}]}, [{"autoTrack": "projects", "targetValue": 200}], now=NOW
        )
        assert result.goals[0].progress == 1
        assert result.goals[0].status == GoalStatus.in_progress

    def test_naive_now_read_as_utc(self, student):
        """A naive completion time is stored as UTC."""
        result = sync_auto_goals(
            student, [{"autoTrack": "certifications", "targetValue": 1}], now=NOW.replace(tzinfo=None)
        )
        assert result.goals[0].completed_at == NOW

    def test_unknown_enum_values(self, student):
        """Unknown auto-track or status values read as defaults."""
        result = sync_auto_goals(student, [{"autoTrack": "marathons", "status": "??", "targetValue": 3}], now=NOW)
        assert result.goals[0].auto_track == AutoTrack.none
        assert not result.changed


# =============================================================================
# Authoring helpers
# =============================================================================


class TestInference:
    @pytest.mark.parametrize(
        "category,title,expected",
        [
            ("project", "Anything", AutoTrack.projects),
            ("other", "Get AWS certified", AutoTrack.certifications),
            ("other", "Solve 150 LeetCode problems", AutoTrack.coding_problems),
            ("coding", "Practice daily", AutoTrack.coding_problems),
            ("other", "Learn 5 new skills", AutoTrack.skills),
            ("other", "Finish 3 projects and a certification", AutoTrack.projects),
            ("other", "Run a marathon", AutoTrack.none),
        ],
    )
    def test_infer_auto_track(self, category, title, expected):
        """Category tag first, then keywords in the wording."""
        assert infer_auto_track(category, title) == expected

    @pytest.mark.parametrize(
        "track,category,expected",
        [
            (AutoTrack.projects, "other", "projects"),
            ("coding_logs", "other", "logs"),
            (AutoTrack.none, "coding", "problems"),
            ("bogus", "other", "steps"),
            (None, "other", "steps"),
        ],
    )
    def test_infer_unit(self, track, category, expected):
        """Track unit first, then category unit, then 'steps'."""
        assert infer_unit(track, category) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [("Solve 150 problems", 150), ("Build 3 apps in 2 months", 3), ("No numbers", None), ("", None), (None, None)],
    )
    def test_infer_target(self, text, expected):
        """First number in the text becomes the target."""
        assert infer_target_value_from_text(text) == expected

    def test_author_goal(self):
        """A new goal gets tracking, target and unit from its wording."""
        goal = author_goal("Build 3 projects this semester")
        assert goal.auto_track == AutoTrack.projects
        assert goal.target_value == 3
        assert goal.unit == "projects"
        assert goal.status == GoalStatus.pending

    def test_author_goal_explicit_values_win(self):
        """Explicit track and target override inference."""
        goal = author_goal("Build 3 projects", target_value=8, auto_track=AutoTrack.coding_logs)
        assert goal.auto_track == AutoTrack.coding_logs
        assert goal.target_value == 8
        assert goal.unit == "logs"

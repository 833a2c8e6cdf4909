"""Pytest configuration and fixtures."""

import os

import pytest

from placement_metrics.core.config import get_settings
from tests.builders import NOW, days_ago


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["PLACEMENT_ENGINE_ENV"] = "test"
    os.environ["STREAK_TIMEZONE"] = "UTC"
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def override_settings(monkeypatch):
    """Set environment overrides and reload settings for one test."""

    def apply(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, str(value))
        get_settings.cache_clear()
        return get_settings()

    yield apply
    get_settings.cache_clear()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def active_student():
    """A realistic mid-level student document (camelCase, as stored)."""
    return {
        "studentId": "stu-001",
        "projects": [
            {"title": "Portfolio site", "submittedAt": days_ago(40).isoformat()},
            {"title": "Chat app", "submittedAt": days_ago(10).isoformat()},
        ],
        "certifications": [{"name": "AWS CCP", "issuedDate": days_ago(60).isoformat()}],
        "events": [{"name": "Campus hackathon", "date": days_ago(20).isoformat()}],
        "codingLogs": [
            {"date": days_ago(1).isoformat(), "platform": "LeetCode", "problemsSolved": 3},
            {"date": days_ago(3).isoformat(), "platform": "Codeforces", "problemsSolved": 2},
            {"date": days_ago(45).isoformat(), "platform": "LeetCode", "problemsSolved": 4},
        ],
        "skills": ["Python", "SQL", "React"],
        "skillRadar": {"dsa": 60, "web": 70, "databases": 50},
        "githubStats": {"totalRepos": 6, "totalStars": 10, "totalCommits": 120, "contributionStreak": 4},
        "leetcodeStats": {"totalSolved": 85, "recentActivity": {"last30Days": 12}},
        "interviewStats": {"completedSessions": 2, "avgScore": 65, "recentTrend": "improving"},
        "streakDays": 3,
    }


@pytest.fixture
def maxed_student():
    """A student strong enough on every factor to push the raw sum past 100."""
    recent = days_ago(2).isoformat()
    return {
        "studentId": "stu-max",
        "projects": [{"title": f"Project {i}"} for i in range(20)],
        "certifications": [{"name": f"Cert {i}"} for i in range(20)],
        "events": [{"name": f"Event {i}"} for i in range(20)],
        "codingLogs": [
            {"date": recent, "platform": platform, "problemsSolved": 5}
            for platform in ("leetcode", "codeforces", "codechef") * 14
        ],
        "skills": [f"skill-{i}" for i in range(20)],
        "skillRadar": {"dsa": 100, "web": 100, "ml": 100},
        "githubStats": {"totalRepos": 50, "totalStars": 100, "totalCommits": 1000, "contributionStreak": 30},
        "leetcodeStats": {"totalSolved": 800, "recentActivity": {"last30Days": 60}},
        "interviewStats": {"completedSessions": 10, "avgScore": 90, "recentTrend": "improving"},
        "streakDays": 30,
    }

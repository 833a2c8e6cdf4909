"""Platform-only readiness score from the synced version-control profile.

Four top-level factors, each built from saturating sub-factors:
- Repository Quality (30): original repos, stars, forks, languages, recent updates
- Coding Consistency (25): active-week percentage, commits, recency of last commit
- Open Source Contributions (25): pull requests, issues, reviews, repos contributed to
- Profile Strength (20): completeness, followers, account age, repo documentation

Unlike the manual-activity score, every sub-factor is clamped and rounded
before it is summed into its factor.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from placement_metrics.core.coercion import to_timestamp
from placement_metrics.core.config import get_settings
from placement_metrics.core.logging import get_logger
from placement_metrics.core.readiness.assessment import assess_score
from placement_metrics.core.readiness.curves import Linear, Piecewise, Proportion
from placement_metrics.core.readiness.factors import (
    Advice,
    CompositeFactor,
    ScoreFactor,
    clamp_total,
    fold_factors,
    read,
)
from placement_metrics.core.readiness.recommendations import select_top_recommendations
from placement_metrics.core.readiness.types import PlatformReadinessScore
from placement_metrics.core.schemas_activity import ActivitySnapshot, VersionControlProfile

logger = get_logger(__name__)

DAYS_PER_YEAR = 365


# =============================================================================
# Factor list
# =============================================================================

REPOSITORY_QUALITY = CompositeFactor(
    "repositoryQuality",
    30,
    label="Repository Quality",
    requires="repos",
    round_parts=True,
    missing_advice=Advice(
        lambda v: True, "Connect your GitHub account to showcase your projects", "high"
    ),
    parts=(
        ScoreFactor(
            "originalRepos", 10, read("original_repos"),
            Piecewise(((0, 0), (2, 2), (5, 5), (10, 8), (15, 10))),
            advice=(
                Advice(
                    lambda v: v == 0,
                    "Create at least 3-5 original repositories to demonstrate your coding skills",
                    "high",
                ),
                Advice(
                    lambda v: 0 < v <= 2,
                    "Build more original projects. Aim for at least 5 diverse repositories",
                    "medium",
                ),
            ),
        ),
        ScoreFactor(
            "stars", 8, read("total_stars"),
            Piecewise(((0, 0), (10, 2), (50, 4), (100, 6), (200, 8))),
            advice=(
                Advice(
                    lambda v: v == 0,
                    "Add proper README files and documentation to make your projects more attractive",
                    "medium",
                ),
            ),
        ),
        ScoreFactor(
            "forks", 4, read("total_forks"),
            Piecewise(((0, 0), (5, 1), (15, 2), (30, 3), (60, 4))),
        ),
        ScoreFactor(
            "languages", 4, read("language_count"),
            Piecewise(((0, 0), (1, 1), (3, 2), (5, 3), (6, 4))),
            advice=(
                Advice(
                    lambda v: v == 1,
                    "Learn and use multiple programming languages to show versatility",
                    "low",
                ),
            ),
        ),
        ScoreFactor(
            "recentRepos", 4, read("recent_repos"),
            Piecewise(((0, 0), (2, 1), (5, 2), (8, 3), (9, 4))),
            advice=(
                Advice(
                    lambda v: v == 0,
                    "Update your repositories regularly. Add new features or fix issues.",
                    "medium",
                ),
            ),
        ),
    ),
)

CODING_CONSISTENCY = CompositeFactor(
    "codingConsistency",
    25,
    label="Coding Consistency",
    requires="consistency",
    round_parts=True,
    missing_advice=Advice(
        lambda v: True, "Start coding regularly on GitHub to build a consistent habit", "high"
    ),
    parts=(
        ScoreFactor(
            "activeWeeks", 10, read("consistency_percentage"), Proportion(100),
            advice=(
                Advice(
                    lambda v: v < 30,
                    "Code at least 3-4 days per week to build consistency",
                    "high",
                ),
                Advice(
                    lambda v: 30 <= v < 60,
                    "Great start! Try to code more frequently to improve consistency",
                    "medium",
                ),
            ),
        ),
        ScoreFactor(
            "commits", 8, read("total_commits"),
            Piecewise(((0, 0), (10, 4), (50, 6), (100, 7), (150, 8))),
        ),
        ScoreFactor(
            "recency", 7, read("days_since_last_commit"),
            Piecewise(((0, 7), (3, 7), (7, 5), (14, 3), (30, 1), (31, 0))),
            advice=(
                Advice(
                    lambda v: 7 < v <= 14,
                    "Your last commit was over a week ago. Resume coding to maintain momentum",
                    "medium",
                ),
                Advice(
                    lambda v: 14 < v <= 30,
                    "Long gap since last commit. Restart your coding habit today!",
                    "high",
                ),
                Advice(
                    lambda v: v > 30,
                    "Critical: No recent coding activity. Start committing code regularly",
                    "high",
                ),
            ),
        ),
    ),
)

OPEN_SOURCE = CompositeFactor(
    "openSourceContributions",
    25,
    label="Open Source",
    requires="open_source",
    round_parts=True,
    missing_advice=Advice(
        lambda v: True,
        "Start contributing to open source projects to gain real-world experience",
        "medium",
    ),
    parts=(
        ScoreFactor(
            "pullRequests", 10, read("pull_request_weight"),
            Piecewise(((0, 0), (3, 5), (10, 8.5), (15, 10))),
            advice=(
                Advice(
                    lambda v: v == 0,
                    "Open your first pull request! Find good first issues on GitHub",
                    "medium",
                ),
            ),
        ),
        ScoreFactor(
            "issues", 6, read("issue_count"),
            Piecewise(((0, 0), (5, 3), (15, 5), (25, 6))),
        ),
        ScoreFactor(
            "reviews", 5, read("reviews_given"),
            Piecewise(((0, 0), (3, 3), (10, 4), (15, 5))),
        ),
        ScoreFactor(
            "reposContributed", 4, read("repos_contributed_to"),
            Piecewise(((0, 0), (2, 2), (5, 3.5), (8, 4))),
            advice=(
                Advice(
                    lambda v: v == 0,
                    "Participate in Hacktoberfest or similar events to start contributing",
                    "low",
                    signal="first_contributions",
                ),
            ),
        ),
    ),
)

PROFILE_STRENGTH = CompositeFactor(
    "profileStrength",
    20,
    label="Profile Strength",
    requires="profile",
    round_parts=True,
    missing_advice=Advice(
        lambda v: True, "Connect GitHub and complete your profile for better visibility", "high"
    ),
    parts=(
        ScoreFactor(
            "completeness", 8, read("profile_fields"), Linear(1.6),
            advice=(
                Advice(lambda v: not v, "Add a compelling bio to your GitHub profile", "medium", signal="has_bio"),
                Advice(lambda v: not v, "Add your portfolio or blog link to your GitHub profile", "low", signal="has_blog"),
            ),
        ),
        ScoreFactor(
            "followers", 6, read("followers"),
            Piecewise(((0, 0), (10, 3), (50, 5), (100, 6))),
        ),
        ScoreFactor(
            "accountAge", 3, read("account_age_years"),
            Piecewise(((0, 0.5), (0.5, 1), (1, 2), (2, 3))),
        ),
        ScoreFactor(
            "documentation", 3, read("documentation_ratio"), Proportion(1),
            advice=(
                Advice(
                    lambda v: v < 0.5,
                    "Add detailed descriptions to your repositories",
                    "medium",
                    signal="described_ratio",
                ),
            ),
        ),
    ),
)

PLATFORM_FACTORS = (REPOSITORY_QUALITY, CODING_CONSISTENCY, OPEN_SOURCE, PROFILE_STRENGTH)


# =============================================================================
# Entry point
# =============================================================================


def calculate_platform_readiness(
    snapshot: Any = None,
    version_control: Any = None,
    now: Optional[datetime] = None,
) -> PlatformReadinessScore:
    """
    Compute readiness from the synced version-control profile.

    Args:
        snapshot: ActivitySnapshot or raw student mapping (its ``version_control`` block is used)
        version_control: Explicit profile block; overrides the snapshot's
        now: Reference time for recency and account age (defaults to now, UTC)

    Returns:
        PlatformReadinessScore with breakdown, recommendations and tier.
        With no profile at all the breakdown is empty and the score is 0.
    """
    now = to_timestamp(now) or datetime.now(timezone.utc)
    profile = _resolve_profile(snapshot, version_control)

    signals = extract_platform_signals(profile, now)
    fold = fold_factors(PLATFORM_FACTORS, signals, round_each=1)

    breakdown = fold.breakdown if profile is not None else {}
    score = clamp_total(sum(breakdown.values()))

    settings = get_settings()
    top_recommendations = select_top_recommendations(
        fold.recommendations, limit=settings.TOP_RECOMMENDATIONS_LIMIT
    )

    logger.debug(
        f"Platform readiness: score={score}, "
        f"recommendations={len(fold.recommendations)}"
    )

    return PlatformReadinessScore(
        score=score,
        breakdown=breakdown,
        recommendations=fold.recommendations,
        top_recommendations=top_recommendations,
        assessment=assess_score(score),
        calculated_at=now,
    )


def _resolve_profile(snapshot: Any, version_control: Any) -> Optional[VersionControlProfile]:
    if version_control is not None:
        if isinstance(version_control, VersionControlProfile):
            return version_control
        return ActivitySnapshot.coerce({"version_control": version_control}).version_control
    if snapshot is None:
        return None
    return ActivitySnapshot.coerce(snapshot).version_control


def extract_platform_signals(
    profile: Optional[VersionControlProfile],
    now: datetime,
) -> dict[str, Any]:
    """
    Flatten the version-control profile into raw signals.

    Section presence flags (``repos``, ``consistency``, ``open_source``,
    ``profile``) are None when that section was never synced.
    """
    signals: dict[str, Any] = {
        "repos": None,
        "consistency": None,
        "open_source": None,
        "profile": None,
    }
    if profile is None:
        return signals

    settings = get_settings()

    repos = profile.repos
    if repos is not None:
        recent_cutoff = now - timedelta(days=settings.RECENT_REPO_WINDOW_DAYS)
        original = repos.original_repos or sum(1 for r in repos.repos if not r.is_fork)
        languages = {share.language for share in repos.top_languages if share.language}
        if not languages:
            languages = {r.language for r in repos.repos if r.language}
        signals.update(
            repos=True,
            original_repos=original,
            total_stars=repos.total_stars or sum(r.stars for r in repos.repos),
            total_forks=repos.total_forks or sum(r.forks for r in repos.repos),
            language_count=len(languages),
            recent_repos=sum(
                1 for r in repos.repos if r.updated_at is not None and r.updated_at >= recent_cutoff
            ),
        )

    consistency = profile.consistency
    if consistency is not None:
        signals.update(
            consistency=True,
            consistency_percentage=consistency.consistency_percentage,
            total_commits=consistency.total_commits,
            days_since_last_commit=consistency.days_since_last_commit,
        )

    open_source = profile.open_source
    if open_source is not None:
        prs = open_source.pull_requests
        issues = open_source.issues
        signals.update(
            open_source=True,
            pull_request_weight=prs.opened + 0.5 * prs.merged,
            issue_count=issues.opened + issues.closed,
            reviews_given=open_source.reviews_given,
            repos_contributed_to=open_source.repos_contributed_to,
            first_contributions=prs.opened + issues.opened,
        )

    github_profile = profile.profile
    if github_profile is not None:
        fields = [
            github_profile.avatar,
            github_profile.bio,
            github_profile.location,
            github_profile.blog,
            github_profile.company,
        ]
        account_age_years = None
        if github_profile.created_at is not None:
            account_age_years = max(0.0, (now - github_profile.created_at).days / DAYS_PER_YEAR)

        documentation_ratio = None
        described_ratio = None
        repo_list = repos.repos if repos is not None else []
        if repo_list:
            described = sum(1 for r in repo_list if len(r.description) > 20)
            tagged = sum(1 for r in repo_list if r.topics)
            documentation_ratio = (described + tagged) / (2 * len(repo_list))
            described_ratio = described / len(repo_list)

        signals.update(
            profile=True,
            profile_fields=sum(1 for value in fields if value.strip()),
            has_bio=bool(github_profile.bio.strip()),
            has_blog=bool(github_profile.blog.strip()),
            followers=github_profile.followers,
            account_age_years=account_age_years,
            documentation_ratio=documentation_ratio,
            described_ratio=described_ratio,
        )

    return signals

"""Recommendation selection and prioritization.

Each factor generates its own recommendations. This module picks the ones
worth showing first.
"""

from placement_metrics.core.readiness.types import Recommendation

# Lower sorts first
PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def select_top_recommendations(
    all_recommendations: list[Recommendation],
    limit: int = 5,
) -> list[Recommendation]:
    """
    Select the top recommendations from all factors.

    Selection criteria:
    1. Priority (high before medium before low)
    2. Original factor order for ties

    Args:
        all_recommendations: All recommendations, in factor order
        limit: Maximum number to return

    Returns:
        Top recommendations sorted by priority
    """
    if not all_recommendations or limit <= 0:
        return []

    # sorted() is stable, so factor order survives within a priority
    sorted_recs = sorted(
        all_recommendations,
        key=lambda r: PRIORITY_RANK.get(r.priority, 1),
    )

    # Deduplicate similar messages (keep first/highest priority)
    seen_messages: set[str] = set()
    unique_recs: list[Recommendation] = []

    for rec in sorted_recs:
        message_key = rec.message.lower().strip()

        if message_key not in seen_messages:
            seen_messages.add(message_key)
            unique_recs.append(rec)

        if len(unique_recs) >= limit:
            break

    return unique_recs

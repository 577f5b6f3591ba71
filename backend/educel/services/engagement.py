"""Engagement scoring and recency filtering for topic suggestions.

Both reads are best-effort: a storage failure degrades personalisation to
"no hint / nothing to avoid" and never fails the request.
"""

import logging
from datetime import timedelta
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from educel.config import settings
from educel.database import utcnow
from educel.models.home_recommendation import HomeRecommendation
from educel.models.user_event import UserEvent
from educel.services.topics import normalize_topic

logger = logging.getLogger(__name__)

EVENT_WEIGHTS = {
    "saved": 4,
    "quiz_completed": 3,
    "plan_generated": 6,
    "topic_clicked": 2,
    "content_viewed": 1,
}
DEFAULT_EVENT_WEIGHT = 1


def score_events(events: Iterable[tuple[str, str | None]]) -> dict[str, float]:
    """Sum event weights per normalized topic.

    ``events`` yields ``(event_type, topic)`` pairs; events without a topic
    are ignored.
    """
    scores: dict[str, float] = {}
    for event_type, topic in events:
        if not topic:
            continue
        key = normalize_topic(topic)
        if not key:
            continue
        scores[key] = scores.get(key, 0) + EVENT_WEIGHTS.get(event_type, DEFAULT_EVENT_WEIGHT)
    return scores


def top_engaged_topic(scores: dict[str, float]) -> str | None:
    # Strict ">" keeps the first-seen topic on ties.
    best_topic, best_score = None, 0
    for topic, score in scores.items():
        if score > best_score:
            best_topic, best_score = topic, score
    return best_topic


async def load_engagement_scores(
    db: AsyncSession, user_id: str, window_days: int | None = None
) -> dict[str, float]:
    """Score the user's topic-bearing events from the lookback window."""
    since = utcnow() - timedelta(days=window_days or settings.ENGAGEMENT_WINDOW_DAYS)
    try:
        result = await db.execute(
            select(UserEvent.event_type, UserEvent.topic)
            .where(
                UserEvent.user_id == user_id,
                UserEvent.created_at >= since,
                UserEvent.topic.is_not(None),
            )
            .order_by(UserEvent.created_at.asc())
        )
        rows = result.all()
    except Exception:
        logger.warning("Engagement lookup failed for user %s", user_id, exc_info=True)
        return {}
    return score_events((row.event_type, row.topic) for row in rows)


async def load_recent_topics(
    db: AsyncSession, user_id: str, limit: int | None = None
) -> list[str]:
    """Normalized topics from the latest shown recommendations, newest first."""
    try:
        result = await db.execute(
            select(HomeRecommendation.topic)
            .where(HomeRecommendation.user_id == user_id)
            .order_by(HomeRecommendation.created_at.desc())
            .limit(limit or settings.RECENCY_LIMIT)
        )
        topics = result.scalars().all()
    except Exception:
        logger.warning("Recency lookup failed for user %s", user_id, exc_info=True)
        return []

    recent: list[str] = []
    seen: set[str] = set()
    for topic in topics:
        key = normalize_topic(topic)
        if key and key not in seen:
            seen.add(key)
            recent.append(key)
    return recent

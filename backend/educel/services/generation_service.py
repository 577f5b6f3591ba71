"""Generation pipeline — suggestion cache, personalisation, dedup'd persistence.

Request flow for ``generate``:
  1. topic_options only: reuse the per-user suggestion cache if fresh
  2. topic_options only: engagement hint + recently shown topics
  3. build prompt (client errors surface here, before any model call)
  4. rate-limit check for the user
  5. orchestrated model call (retry, deadline, validation, fallback sources)
  6. topic_options only: refresh cache, log reco_shown, record slots A/B/C

Personalisation reads and analytics writes are best-effort. They run on
their own sessions, reads under the database deadline, and a failure or
timeout is logged and never fails the response.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from educel.config import settings
from educel.database import as_utc, upsert, utcnow
from educel.middleware.rate_limit import GenerationRateLimiter
from educel.models.home_recommendation import HomeRecommendation
from educel.models.topic_options_cache import TopicOptionsCache
from educel.schemas.generation import GENERATION_TYPES, GenerateRequest
from educel.services import lifecycle
from educel.services.engagement import load_engagement_scores, load_recent_topics, top_engaged_topic
from educel.services.errors import (
    RateLimitExceededError,
    StorageTimeoutError,
    UnknownGenerationTypeError,
)
from educel.services.event_service import log_event
from educel.services.orchestrator import GenerationOrchestrator
from educel.services.prompts import PersonalizationHints, build_prompt
from educel.services.timeouts import with_timeout
from educel.services.topics import SLOT_ORDER, EventType, new_session_id, normalize_topic

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    content: dict
    meta: dict = field(default_factory=lambda: {"usedFallbackSources": False})

    def to_response(self) -> dict:
        return {**self.content, "_meta": self.meta}


class GenerationService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        orchestrator: GenerationOrchestrator,
        rate_limiter: GenerationRateLimiter,
        cache_ttl: timedelta | None = None,
        read_timeout: float | None = None,
    ):
        self.session_factory = session_factory
        self.orchestrator = orchestrator
        self.rate_limiter = rate_limiter
        self.cache_ttl = cache_ttl or timedelta(minutes=settings.TOPIC_OPTIONS_CACHE_MINUTES)
        self.read_timeout = read_timeout or settings.DATABASE_TIMEOUT_SECONDS

    # ── Generation ───────────────────────────────────────────────────────────

    async def generate(self, user_id: str, request: GenerateRequest) -> GenerationResult:
        if request.type not in GENERATION_TYPES:
            raise UnknownGenerationTypeError(request.type)

        is_topic_options = request.type == "topic_options"
        hints = None
        if is_topic_options:
            cached = await self._read_cached_options(user_id)
            if cached is not None:
                return cached
            hints = await self._personalization(user_id)

        prompt = build_prompt(request, hints)
        await self._check_rate_limit(user_id)
        outcome = await self.orchestrator.generate(request, prompt)

        result = GenerationResult(
            content=outcome.content,
            meta={"usedFallbackSources": outcome.used_fallback_sources},
        )
        if is_topic_options:
            session_id = new_session_id()
            await self._record_topic_options(user_id, outcome.content["options"], session_id)
            result.meta.update(cached=False, session_id=session_id)
        return result

    async def _check_rate_limit(self, user_id: str) -> None:
        status = await self.rate_limiter.check(user_id)
        if not status.success:
            logger.info("Generation rate limit reached for user %s", user_id)
            raise RateLimitExceededError(status.limit, status.remaining, status.reset_at)

    # ── Suggestion cache ─────────────────────────────────────────────────────

    async def _best_effort_read(self, read):
        """Run ``read(db)`` on its own session under the database deadline."""
        async def run():
            async with self.session_factory() as db:
                return await read(db)

        return await with_timeout(run(), self.read_timeout)

    async def _read_cached_options(self, user_id: str) -> GenerationResult | None:
        try:
            row = await self._best_effort_read(
                lambda db: db.scalar(
                    select(TopicOptionsCache).where(TopicOptionsCache.user_id == user_id)
                )
            )
        except StorageTimeoutError:
            logger.warning("Topic options cache read timed out for user %s", user_id)
            return None
        except Exception:
            logger.warning("Topic options cache read failed for user %s", user_id, exc_info=True)
            return None

        if row is None or as_utc(row.created_at) <= utcnow() - self.cache_ttl:
            return None
        return GenerationResult(
            content={"options": row.options},
            meta={"usedFallbackSources": False, "cached": True, "session_id": row.session_id},
        )

    async def _personalization(self, user_id: str) -> PersonalizationHints:
        engagement, recent_topics = await asyncio.gather(
            self._best_effort_read(lambda db: load_engagement_scores(db, user_id)),
            self._best_effort_read(lambda db: load_recent_topics(db, user_id)),
            return_exceptions=True,
        )
        if isinstance(engagement, Exception):
            logger.warning("Engagement scoring unavailable for user %s: %s", user_id, engagement)
            engagement = {}
        if isinstance(recent_topics, Exception):
            logger.warning("Recent topics unavailable for user %s: %s", user_id, recent_topics)
            recent_topics = []
        return PersonalizationHints(top_topic=top_engaged_topic(engagement), avoid_topics=recent_topics)

    async def _record_topic_options(self, user_id: str, options: list[dict], session_id: str) -> None:
        async def write_cache():
            async with self.session_factory() as db:
                await upsert(
                    db,
                    TopicOptionsCache,
                    values={
                        "user_id": user_id,
                        "options": options,
                        "session_id": session_id,
                        "created_at": utcnow(),
                    },
                    conflict_columns=["user_id"],
                    update_columns=["options", "session_id", "created_at"],
                )
                await db.commit()

        async def log_shown():
            async with self.session_factory() as db:
                await log_event(
                    db,
                    user_id,
                    EventType.RECO_SHOWN.value,
                    meta={"session_id": session_id, "topics": [o["topic"] for o in options]},
                )

        async def write_recommendations():
            async with self.session_factory() as db:
                db.add_all(
                    HomeRecommendation(
                        user_id=user_id,
                        session_id=session_id,
                        topic=normalize_topic(option["topic"]),
                        hook=option.get("hook"),
                        slot=slot.value,
                    )
                    for slot, option in zip(SLOT_ORDER, options)
                )
                await db.commit()

        results = await asyncio.gather(
            write_cache(), log_shown(), write_recommendations(), return_exceptions=True
        )
        for label, outcome in zip(("cache", "reco_shown event", "home recommendations"), results):
            if isinstance(outcome, Exception):
                logger.warning("Failed to record %s for user %s: %s", label, user_id, outcome)

    # ── Learn items ──────────────────────────────────────────────────────────

    async def prefetch_learn_item(
        self, user_id: str, topic: str, preferred_topics: list[str], depth: str
    ) -> dict:
        """Return the user's live learn item for ``topic``, generating it if needed."""
        existing = None
        try:
            existing = await self._best_effort_read(
                lambda db: lifecycle.find_learn_item_by_topic(db, user_id, topic)
            )
        except StorageTimeoutError:
            logger.warning("Learn item lookup timed out for user %s", user_id)
        except Exception:
            logger.warning("Learn item lookup failed for user %s", user_id, exc_info=True)

        if existing is not None and not existing.is_expired():
            return {"item": existing.to_dict(), "cached": True}

        result = await self.generate(
            user_id,
            GenerateRequest(type="learn_item", depth=depth, preferred_topics=preferred_topics, topic=topic),
        )
        async with self.session_factory() as db:
            item, _ = await lifecycle.store_learn_item(
                db,
                user_id,
                topic,
                source_type="topic_choice",
                content=result.content,
                item_id=existing.id if existing else None,
            )
        return {"item": item.to_dict(), "cached": False, "_meta": result.meta}

    async def expand_learn_item(self, user_id: str, item_id: str, depth: str) -> dict:
        """Generate the long-form article for an item once; later calls reuse it."""
        async with self.session_factory() as db:
            item = await lifecycle.get_learn_item(db, user_id, item_id)
        if item.expanded_content is not None:
            return {"item": item.to_dict(), "cached": True}

        result = await self.generate(
            user_id,
            GenerateRequest(type="expand_content", depth=depth, topic=item.topic, prior_item=item.content),
        )
        async with self.session_factory() as db:
            item, written = await lifecycle.set_expanded_content(db, user_id, item_id, result.content)
        return {"item": item.to_dict(), "cached": not written, "_meta": result.meta}

"""Content lifecycle — expiry, save/unsave, lesson-plan auto-save, expansion.

Concurrency safety comes from the unique constraints on learn_items
(user_id, topic) and saved_items (user_id, item_type, item_id); nothing here
holds a lock across an await.
"""

import logging
from datetime import datetime, timedelta
from uuid import uuid4

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from educel.config import settings
from educel.database import as_utc, upsert, utcnow
from educel.models.learn_item import LearnItem
from educel.models.lesson_plan import LessonPlan
from educel.models.saved_item import SavedItem
from educel.services.errors import AlreadySavedError, NotFoundError
from educel.services.topics import normalize_topic

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100


def expiry_from_now(days: int | None = None) -> datetime:
    return utcnow() + timedelta(days=days or settings.LEARN_ITEM_TTL_DAYS)


# ── Learn items ──────────────────────────────────────────────────────────────

async def get_learn_item(db: AsyncSession, user_id: str, item_id: str) -> LearnItem:
    item = await db.scalar(
        select(LearnItem).where(LearnItem.id == item_id, LearnItem.user_id == user_id)
    )
    if item is None:
        raise NotFoundError("Learn item not found")
    return item


async def list_learn_items(db: AsyncSession, user_id: str, limit: int = 10) -> list[LearnItem]:
    limit = min(max(limit, 1), MAX_LIST_LIMIT)
    result = await db.execute(
        select(LearnItem)
        .where(LearnItem.user_id == user_id)
        .order_by(LearnItem.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def find_learn_item_by_topic(db: AsyncSession, user_id: str, topic: str) -> LearnItem | None:
    return await db.scalar(
        select(LearnItem)
        .where(LearnItem.user_id == user_id, LearnItem.topic == normalize_topic(topic))
        .execution_options(populate_existing=True)
    )


async def store_learn_item(
    db: AsyncSession,
    user_id: str,
    topic: str,
    source_type: str,
    content: dict,
    item_id: str | None = None,
) -> tuple[LearnItem, bool]:
    """Upsert by (user_id, normalized topic) unless a live row already exists.

    A live row (saved, or not yet expired) is returned untouched along with
    its expanded content. An expired row is overwritten under its own id.
    Returns the stored item and whether this call wrote it.
    """
    normalized = normalize_topic(topic)
    existing = await find_learn_item_by_topic(db, user_id, normalized)
    if existing is not None and not existing.is_expired():
        return existing, False

    now = utcnow()
    written = await upsert(
        db,
        LearnItem,
        values={
            "id": (existing.id if existing else None) or item_id or str(uuid4()),
            "user_id": user_id,
            "topic": normalized,
            "source_type": source_type,
            "content": content,
            "expanded_content": None,
            "expanded_created_at": None,
            "created_at": now,
            "expires_at": expiry_from_now(),
        },
        conflict_columns=["user_id", "topic"],
        update_columns=[
            "source_type",
            "content",
            "expanded_content",
            "expanded_created_at",
            "created_at",
            "expires_at",
        ],
        # only an expired row is overwritten, even under a concurrent store
        where=and_(LearnItem.expires_at.is_not(None), LearnItem.expires_at <= now),
    )
    await db.commit()
    return await find_learn_item_by_topic(db, user_id, normalized), written == 1


async def set_expanded_content(
    db: AsyncSession, user_id: str, item_id: str, expanded: dict
) -> tuple[LearnItem, bool]:
    """Patch expanded_content onto a learn item once.

    Returns the item and whether this call wrote it; an item that already
    has expanded content is left unchanged.
    """
    result = await db.execute(
        update(LearnItem)
        .where(
            LearnItem.id == item_id,
            LearnItem.user_id == user_id,
            LearnItem.expanded_content.is_(None),
        )
        .values(expanded_content=expanded, expanded_created_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    item = await db.scalar(
        select(LearnItem)
        .where(LearnItem.id == item_id, LearnItem.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    if item is None:
        raise NotFoundError("Learn item not found")
    return item, result.rowcount == 1


# ── Saved items ──────────────────────────────────────────────────────────────

async def _is_saved(db: AsyncSession, user_id: str, item_type: str, item_id: str) -> bool:
    found = await db.scalar(
        select(SavedItem.id).where(
            SavedItem.user_id == user_id,
            SavedItem.item_type == item_type,
            SavedItem.item_id == item_id,
        )
    )
    return found is not None


async def _require_owned_item(db: AsyncSession, user_id: str, item_type: str, item_id: str) -> None:
    model = LearnItem if item_type == "learning" else LessonPlan
    found = await db.scalar(select(model.id).where(model.id == item_id, model.user_id == user_id))
    if found is None:
        raise NotFoundError("Item not found")


async def save_item(db: AsyncSession, user_id: str, item_type: str, item_id: str) -> SavedItem:
    await _require_owned_item(db, user_id, item_type, item_id)
    if await _is_saved(db, user_id, item_type, item_id):
        raise AlreadySavedError()

    saved = SavedItem(id=str(uuid4()), user_id=user_id, item_type=item_type, item_id=item_id)
    db.add(saved)
    if item_type == "learning":
        await db.execute(
            update(LearnItem)
            .where(LearnItem.id == item_id, LearnItem.user_id == user_id)
            .values(expires_at=None)
        )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadySavedError()
    return saved


async def unsave_item(db: AsyncSession, user_id: str, item_type: str, item_id: str) -> bool:
    result = await db.execute(
        delete(SavedItem).where(
            SavedItem.user_id == user_id,
            SavedItem.item_type == item_type,
            SavedItem.item_id == item_id,
        )
    )
    removed = result.rowcount > 0
    if removed and item_type == "learning":
        await db.execute(
            update(LearnItem)
            .where(LearnItem.id == item_id, LearnItem.user_id == user_id)
            .values(expires_at=expiry_from_now())
        )
    await db.commit()
    return removed


async def list_saved_items(db: AsyncSession, user_id: str) -> list[dict]:
    result = await db.execute(
        select(SavedItem).where(SavedItem.user_id == user_id).order_by(SavedItem.created_at.desc())
    )
    saved = list(result.scalars().all())

    learn_ids = [s.item_id for s in saved if s.item_type == "learning"]
    plan_ids = [s.item_id for s in saved if s.item_type == "lesson_plan"]
    learn_items, plans = {}, {}
    if learn_ids:
        rows = await db.execute(
            select(LearnItem).where(LearnItem.user_id == user_id, LearnItem.id.in_(learn_ids))
        )
        learn_items = {item.id: item for item in rows.scalars()}
    if plan_ids:
        rows = await db.execute(
            select(LessonPlan).where(LessonPlan.user_id == user_id, LessonPlan.id.in_(plan_ids))
        )
        plans = {plan.id: plan for plan in rows.scalars()}

    items = []
    for s in saved:
        entry = {
            "id": s.id,
            "item_type": s.item_type,
            "item_id": s.item_id,
            "created_at": as_utc(s.created_at).isoformat() if s.created_at else None,
        }
        if s.item_type == "learning":
            item = learn_items.get(s.item_id)
            entry["learn_item"] = item.to_dict() if item else None
        else:
            plan = plans.get(s.item_id)
            entry["lesson_plan"] = plan.to_dict() if plan else None
        items.append(entry)
    return items


# ── Lesson plans ─────────────────────────────────────────────────────────────

async def create_lesson_plan(
    session_factory: async_sessionmaker,
    user_id: str,
    topic: str,
    content: dict,
    title: str | None = None,
    learn_item_id: str | None = None,
) -> tuple[LessonPlan, bool]:
    """Insert a lesson plan, then auto-save it.

    A failed insert propagates; a failed auto-save is logged and reported as
    ``auto_saved=False``.
    """
    async with session_factory() as db:
        plan = LessonPlan(
            id=str(uuid4()),
            user_id=user_id,
            learn_item_id=learn_item_id,
            title=title or f"Lesson Plan: {topic}",
            topic=topic,
            goals=content["goals"],
            resources=content["resources"],
            exercises=content["exercises"],
            daily_plan=content["daily_plan"],
        )
        db.add(plan)
        await db.commit()

    auto_saved = await auto_save_lesson_plan(session_factory, user_id, plan.id)
    return plan, auto_saved


async def auto_save_lesson_plan(
    session_factory: async_sessionmaker, user_id: str, plan_id: str
) -> bool:
    """Ensure exactly one SavedItem exists for the plan. True when it is saved."""
    try:
        async with session_factory() as db:
            if await _is_saved(db, user_id, "lesson_plan", plan_id):
                return True
            db.add(SavedItem(id=str(uuid4()), user_id=user_id, item_type="lesson_plan", item_id=plan_id))
            await db.commit()
            return True
    except IntegrityError:
        # A concurrent auto-save won the unique constraint.
        logger.info("Lesson plan %s was already auto-saved", plan_id)
        return True
    except Exception:
        logger.warning("Error auto-saving lesson plan %s", plan_id, exc_info=True)
        return False


async def get_lesson_plan(db: AsyncSession, user_id: str, plan_id: str) -> LessonPlan:
    plan = await db.scalar(
        select(LessonPlan).where(LessonPlan.id == plan_id, LessonPlan.user_id == user_id)
    )
    if plan is None:
        raise NotFoundError("Lesson plan not found")
    return plan


async def find_lesson_plan_for_item(
    db: AsyncSession, user_id: str, learn_item_id: str
) -> LessonPlan | None:
    return await db.scalar(
        select(LessonPlan)
        .where(LessonPlan.learn_item_id == learn_item_id, LessonPlan.user_id == user_id)
        .order_by(LessonPlan.created_at.desc())
        .limit(1)
    )


async def list_lesson_plans(db: AsyncSession, user_id: str) -> list[LessonPlan]:
    result = await db.execute(
        select(LessonPlan).where(LessonPlan.user_id == user_id).order_by(LessonPlan.created_at.desc())
    )
    return list(result.scalars().all())

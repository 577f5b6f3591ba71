"""User preference reads and upserts."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from educel.database import as_utc, upsert, utcnow
from educel.models.user_prefs import UserPrefs

DEFAULT_PREFS = {"preferred_topics": [], "depth": "concise", "theme": "auto"}


async def get_prefs(db: AsyncSession, user_id: str) -> UserPrefs | None:
    return await db.scalar(
        select(UserPrefs)
        .where(UserPrefs.user_id == user_id)
        .execution_options(populate_existing=True)
    )


async def upsert_prefs(db: AsyncSession, user_id: str, changes: dict) -> UserPrefs:
    """Write only the provided fields; missing rows start from the defaults."""
    now = utcnow()
    values = {**DEFAULT_PREFS, **changes, "user_id": user_id, "created_at": now, "updated_at": now}
    await upsert(
        db,
        UserPrefs,
        values=values,
        conflict_columns=["user_id"],
        update_columns=[*changes.keys(), "updated_at"],
    )
    await db.commit()
    return await get_prefs(db, user_id)


def prefs_to_dict(prefs: UserPrefs | None) -> dict | None:
    if prefs is None:
        return None
    return {
        "user_id": prefs.user_id,
        "preferred_topics": prefs.preferred_topics or [],
        "depth": prefs.depth,
        "theme": prefs.theme,
        "created_at": as_utc(prefs.created_at).isoformat(),
        "updated_at": as_utc(prefs.updated_at).isoformat(),
    }

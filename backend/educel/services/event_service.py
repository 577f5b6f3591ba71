"""Engagement event logging."""

import hashlib
import logging
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educel.models.user_event import UserEvent
from educel.services.topics import EventType

logger = logging.getLogger(__name__)

MAX_VIEW_SESSION_ID = 100


def _view_session_id(event_type: str, learn_item_id: str | None, meta: dict) -> str | None:
    """content_viewed events are deduplicated per client session."""
    if event_type != EventType.CONTENT_VIEWED.value or not learn_item_id:
        return None
    session_id = meta.get("session_id")
    if not session_id:
        return None
    session_id = str(session_id)
    if len(session_id) > MAX_VIEW_SESSION_ID:
        # view_session_id is String(100)
        session_id = hashlib.sha256(session_id.encode()).hexdigest()
    return session_id


async def log_event(
    db: AsyncSession,
    user_id: str,
    event_type: str,
    topic: str | None = None,
    learn_item_id: str | None = None,
    slot: str | None = None,
    meta: dict | None = None,
) -> dict:
    """Insert one event.

    A repeated content_viewed for the same (user, item, session) is a
    no-op reported as ``{"success": True, "deduplicated": True}``.
    """
    meta = meta or {}
    view_session_id = _view_session_id(event_type, learn_item_id, meta)

    if view_session_id:
        existing = await db.scalar(
            select(UserEvent.id).where(
                UserEvent.user_id == user_id,
                UserEvent.learn_item_id == learn_item_id,
                UserEvent.view_session_id == view_session_id,
            )
        )
        if existing:
            return {"success": True, "deduplicated": True}

    db.add(
        UserEvent(
            id=str(uuid4()),
            user_id=user_id,
            event_type=event_type,
            topic=topic,
            learn_item_id=learn_item_id,
            slot=slot,
            meta=meta,
            view_session_id=view_session_id,
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if view_session_id:
            return {"success": True, "deduplicated": True}
        raise
    return {"success": True}

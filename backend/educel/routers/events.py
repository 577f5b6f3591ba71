"""Events router — engagement signals that feed topic personalisation."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from educel.database import get_db
from educel.middleware.auth import CurrentUser, get_current_user
from educel.schemas.events import EventCreateRequest
from educel.services.event_service import log_event

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("")
async def create_event(
    body: EventCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await log_event(
        db,
        current_user.id,
        body.event_type,
        topic=body.topic,
        learn_item_id=body.learn_item_id,
        slot=body.slot,
        meta=body.meta,
    )

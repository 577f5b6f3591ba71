"""Learn router — micro-learning cards: list, store, prefetch, expand."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from educel.config import settings
from educel.database import get_db
from educel.dependencies import get_generation_service
from educel.middleware.auth import CurrentUser, get_current_user
from educel.schemas.learn import (
    CreateLearnItemRequest,
    ExpandRequest,
    PrefetchRequest,
    UpdateLearnItemRequest,
)
from educel.services import lifecycle
from educel.services.generation_service import GenerationService
from educel.services.timeouts import with_timeout

router = APIRouter(prefix="/api/learn", tags=["learn"])


@router.get("")
async def get_learn_items(
    id: Optional[str] = Query(None),
    limit: int = Query(10),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """One item by ``id``, or the user's most recent items (limit capped at 100)."""
    if id:
        item = await with_timeout(
            lifecycle.get_learn_item(db, current_user.id, id), settings.DATABASE_TIMEOUT_SECONDS
        )
        return {"item": item.to_dict()}

    items = await with_timeout(
        lifecycle.list_learn_items(db, current_user.id, limit), settings.DATABASE_TIMEOUT_SECONDS
    )
    return {"items": [item.to_dict() for item in items]}


@router.post("", status_code=201)
async def create_learn_item(
    body: CreateLearnItemRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Store a card; a live card for the same topic is returned as is with 200."""
    item, created = await lifecycle.store_learn_item(
        db,
        current_user.id,
        body.topic,
        source_type=body.source_type,
        content=body.content.model_dump(exclude_none=True),
    )
    if not created:
        response.status_code = 200
    return {"item": item.to_dict(), "created": created}


@router.patch("")
async def update_learn_item(
    body: UpdateLearnItemRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Attach expanded content once; an already-expanded item is left as is."""
    item, updated = await lifecycle.set_expanded_content(
        db, current_user.id, body.id, body.expanded_content.model_dump(exclude_none=True)
    )
    return {"item": item.to_dict(), "updated": updated}


@router.post("/prefetch")
async def prefetch_learn_item(
    body: PrefetchRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
):
    return await service.prefetch_learn_item(
        current_user.id, body.topic, body.preferred_topics, body.depth
    )


@router.post("/{item_id}/expand")
async def expand_learn_item(
    item_id: str,
    body: Optional[ExpandRequest] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
):
    depth = body.depth if body else "concise"
    return await service.expand_learn_item(current_user.id, item_id, depth)

"""Saved router — bookmark learn items and lesson plans."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educel.config import settings
from educel.database import as_utc, get_db
from educel.middleware.auth import CurrentUser, get_current_user
from educel.schemas.saved import CreateSavedItemRequest, ItemType
from educel.services import lifecycle
from educel.services.timeouts import with_timeout

router = APIRouter(prefix="/api/saved", tags=["saved"])


@router.get("")
async def list_saved(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    items = await with_timeout(
        lifecycle.list_saved_items(db, current_user.id), settings.DATABASE_TIMEOUT_SECONDS
    )
    return {"items": items}


@router.post("", status_code=201)
async def save(
    body: CreateSavedItemRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Save an item. Saving a learn item stops it from expiring."""
    saved = await lifecycle.save_item(db, current_user.id, body.item_type, body.target_id)
    return {
        "saved": {
            "id": saved.id,
            "item_type": saved.item_type,
            "item_id": saved.item_id,
            "created_at": as_utc(saved.created_at).isoformat() if saved.created_at else None,
        }
    }


@router.delete("")
async def unsave(
    item_id: str = Query(..., min_length=1),
    item_type: ItemType = Query("learning"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Remove a saved item. An unsaved learn item expires again in 30 days."""
    removed = await lifecycle.unsave_item(db, current_user.id, item_type, item_id)
    return {"success": True, "removed": removed}

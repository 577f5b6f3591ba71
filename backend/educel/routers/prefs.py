"""Prefs router — read and update the user's personalisation settings."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from educel.config import settings
from educel.database import get_db
from educel.middleware.auth import CurrentUser, get_current_user
from educel.schemas.prefs import UpdateUserPrefsRequest
from educel.services.errors import InvalidRequestError
from educel.services.prefs_service import get_prefs, prefs_to_dict, upsert_prefs
from educel.services.timeouts import with_timeout

router = APIRouter(prefix="/api/prefs", tags=["prefs"])


@router.get("")
async def read_prefs(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    prefs = await with_timeout(get_prefs(db, current_user.id), settings.DATABASE_TIMEOUT_SECONDS)
    return {"prefs": prefs_to_dict(prefs)}


@router.post("")
async def update_prefs(
    body: UpdateUserPrefsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidRequestError("At least one field must be provided")
    prefs = await upsert_prefs(db, current_user.id, changes)
    return {"prefs": prefs_to_dict(prefs)}

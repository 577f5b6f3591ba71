"""User router — the authenticated identity plus stored preferences."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from educel.config import settings
from educel.database import get_db
from educel.middleware.auth import CurrentUser, get_current_user
from educel.services.prefs_service import get_prefs, prefs_to_dict
from educel.services.timeouts import with_timeout

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("")
async def get_user(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    prefs = await with_timeout(get_prefs(db, current_user.id), settings.DATABASE_TIMEOUT_SECONDS)
    return {
        "user": {"id": current_user.id, "email": current_user.email},
        "prefs": prefs_to_dict(prefs),
    }

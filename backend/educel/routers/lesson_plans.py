"""Lesson plan router — list/get plans, create with auto-save."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from educel.config import settings
from educel.database import get_db
from educel.dependencies import get_session_factory
from educel.middleware.auth import CurrentUser, get_current_user
from educel.schemas.lesson_plan import CreateLessonPlanRequest
from educel.services import lifecycle
from educel.services.timeouts import with_timeout

router = APIRouter(prefix="/api/lesson-plan", tags=["lesson-plans"])


@router.get("")
async def get_lesson_plans(
    id: Optional[str] = Query(None),
    learn_item_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """A plan by ``id``, the latest plan for a learn item, or all plans."""
    timeout = settings.DATABASE_TIMEOUT_SECONDS
    if id:
        plan = await with_timeout(lifecycle.get_lesson_plan(db, current_user.id, id), timeout)
        return {"lesson_plan": plan.to_dict()}
    if learn_item_id:
        plan = await with_timeout(
            lifecycle.find_lesson_plan_for_item(db, current_user.id, learn_item_id), timeout
        )
        return {"lesson_plan": plan.to_dict() if plan else None}

    plans = await with_timeout(lifecycle.list_lesson_plans(db, current_user.id), timeout)
    return {"lesson_plans": [plan.to_dict() for plan in plans]}


@router.post("", status_code=201)
async def create_lesson_plan(
    body: CreateLessonPlanRequest,
    session_factory: async_sessionmaker = Depends(get_session_factory),
    current_user: CurrentUser = Depends(get_current_user),
):
    plan, auto_saved = await lifecycle.create_lesson_plan(
        session_factory,
        current_user.id,
        body.topic,
        body.content.model_dump(),
        title=body.title,
        learn_item_id=body.learn_item_id,
    )
    return {"lesson_plan": plan.to_dict(), "auto_saved": auto_saved}

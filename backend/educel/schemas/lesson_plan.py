"""Lesson plan request schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from educel.schemas.content import LessonPlanContent


class CreateLessonPlanRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=500)
    content: LessonPlanContent
    title: Optional[str] = Field(default=None, max_length=500)
    learn_item_id: Optional[str] = None

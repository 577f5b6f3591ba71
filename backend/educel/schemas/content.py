"""Structured-output shapes the generative model must produce.

One model per generation shape. They run in strict mode: the model output
is decoded into exactly one of these, and anything that does not fit is
rejected rather than coerced.
"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _Shape(BaseModel):
    model_config = ConfigDict(strict=True)


class TopicOption(_Shape):
    topic: NonEmptyStr
    hook: NonEmptyStr
    icon: Optional[str] = None


class TopicOptions(_Shape):
    options: list[TopicOption] = Field(min_length=3, max_length=3)


class ClarifyResponse(_Shape):
    question: str
    options: list[str] = Field(min_length=3, max_length=3)


class SourceLink(_Shape):
    title: str
    url: str


class LearnContent(_Shape):
    title: str
    hook: str
    bullets: list[str] = Field(min_length=3, max_length=3)
    example: str
    micro_action: str
    quiz_question: str
    quiz_answer: str
    sources: Optional[list[SourceLink]] = None


class ExpandedContent(_Shape):
    paragraphs: list[str] = Field(min_length=3, max_length=6)
    additional_bullets: Optional[list[str]] = None
    one_line_takeaway: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=99)]


class ResourceItem(_Shape):
    title: str
    url: str
    type: Literal["article", "video", "book", "course", "tool"]


class DayPlanItem(_Shape):
    day: int = Field(ge=1)
    focus: str
    activities: list[str]


class LessonPlanContent(_Shape):
    goals: list[str] = Field(min_length=2)
    resources: list[ResourceItem] = Field(min_length=3)
    exercises: list[str] = Field(min_length=2)
    daily_plan: list[DayPlanItem] = Field(min_length=7)

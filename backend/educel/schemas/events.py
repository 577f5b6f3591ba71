"""Engagement event schemas."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

EventTypeName = Literal[
    "reco_shown",
    "topic_clicked",
    "content_viewed",
    "saved",
    "quiz_completed",
    "plan_generated",
]


class EventCreateRequest(BaseModel):
    event_type: EventTypeName
    topic: Optional[str] = Field(None, max_length=500)
    learn_item_id: Optional[str] = Field(None, max_length=36)
    slot: Optional[Literal["A", "B", "C"]] = None
    meta: dict[str, Any] = Field(default_factory=dict)

"""Generation request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

GENERATION_TYPES = (
    "topic_options",
    "adjacent_options",
    "clarify_topic",
    "learn_item",
    "learn_more",
    "expand_content",
    "lesson_plan",
)

Depth = Literal["concise", "deeper"]


class GenerateRequest(BaseModel):
    # Left as a plain string so unknown types reach the prompt builder and
    # come back as a labelled client error.
    type: str
    depth: Depth
    preferred_topics: list[str] = Field(default_factory=list)
    topic: Optional[str] = None
    custom_topic: Optional[str] = None
    prior_item: Optional[dict] = None

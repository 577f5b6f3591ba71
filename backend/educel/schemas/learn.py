"""Learn item request schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from educel.schemas.content import ExpandedContent, LearnContent
from educel.schemas.generation import Depth


class CreateLearnItemRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=500)
    source_type: Literal["topic_choice", "teach_me", "learn_more", "adjacent"]
    content: LearnContent


class UpdateLearnItemRequest(BaseModel):
    id: str
    expanded_content: ExpandedContent


class PrefetchRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=500)
    preferred_topics: list[str] = Field(min_length=3, max_length=20)
    depth: Depth


class ExpandRequest(BaseModel):
    depth: Depth = "concise"

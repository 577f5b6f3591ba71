"""Saved item request schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, model_validator

ItemType = Literal["learning", "lesson_plan"]


class CreateSavedItemRequest(BaseModel):
    item_type: ItemType = "learning"
    item_id: Optional[str] = None
    learn_item_id: Optional[str] = None  # legacy clients

    @model_validator(mode="after")
    def require_item(self):
        if not (self.item_id or self.learn_item_id):
            raise ValueError("Either item_id or learn_item_id must be provided")
        return self

    @property
    def target_id(self) -> str:
        return self.item_id or self.learn_item_id

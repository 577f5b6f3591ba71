"""User preference schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class UpdateUserPrefsRequest(BaseModel):
    preferred_topics: Optional[list[str]] = Field(default=None, max_length=20)
    depth: Optional[Literal["concise", "deeper"]] = None
    theme: Optional[Literal["light", "dark", "auto"]] = None

    @model_validator(mode="after")
    def require_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

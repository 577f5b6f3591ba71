"""Structural validation of decoded model output, one shape per generation type."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from educel.schemas.content import (
    ClarifyResponse,
    ExpandedContent,
    LearnContent,
    LessonPlanContent,
    SourceLink,
    TopicOptions,
)
from educel.services.errors import UnknownGenerationTypeError

SHAPES: dict[str, type[BaseModel]] = {
    "topic_options": TopicOptions,
    "adjacent_options": TopicOptions,
    "clarify_topic": ClarifyResponse,
    "learn_item": LearnContent,
    "learn_more": LearnContent,
    "expand_content": ExpandedContent,
    "lesson_plan": LessonPlanContent,
}

# Types whose ``sources`` field is best-effort rather than strict.
RELAXED_SOURCE_TYPES = frozenset({"learn_item", "learn_more"})


@dataclass
class ValidationResult:
    ok: bool
    value: dict | None = None
    reason: str | None = None


def _relaxed_sources(raw: Any) -> list[dict] | None:
    """Keep well-formed sources; drop the whole list if any entry is malformed."""
    if raw is None:
        return None
    if not isinstance(raw, list):
        return None
    try:
        return [SourceLink.model_validate(entry).model_dump() for entry in raw]
    except ValidationError:
        return None


def validate_generation(gen_type: str, value: Any) -> ValidationResult:
    shape = SHAPES.get(gen_type)
    if shape is None:
        raise UnknownGenerationTypeError(gen_type)
    if not isinstance(value, dict):
        return ValidationResult(ok=False, reason="expected a JSON object")

    sources = None
    if gen_type in RELAXED_SOURCE_TYPES:
        value = dict(value)
        sources = _relaxed_sources(value.pop("sources", None))

    try:
        parsed = shape.model_validate(value)
    except ValidationError as e:
        return ValidationResult(ok=False, reason=_summarize(e))

    normalized = parsed.model_dump(exclude_none=True)
    if sources:
        normalized["sources"] = sources
    return ValidationResult(ok=True, value=normalized)


def _summarize(error: ValidationError) -> str:
    parts = []
    for err in error.errors()[:3]:
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)

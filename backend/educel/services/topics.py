"""Topic canonicalisation and discovery constants."""

import re
import uuid
from enum import Enum

_WHITESPACE = re.compile(r"\s+")


def normalize_topic(topic: str) -> str:
    """Trim, collapse whitespace runs to one space, lowercase.

    This is the join key for engagement scoring, recency filtering, the
    learn-item dedup key and home recommendation rows.
    """
    return _WHITESPACE.sub(" ", topic.strip()).lower()


def new_session_id() -> str:
    return str(uuid.uuid4())


class EventType(str, Enum):
    RECO_SHOWN = "reco_shown"
    TOPIC_CLICKED = "topic_clicked"
    CONTENT_VIEWED = "content_viewed"
    SAVED = "saved"
    QUIZ_COMPLETED = "quiz_completed"
    PLAN_GENERATED = "plan_generated"


class Slot(str, Enum):
    A = "A"  # heavyweight: highest engagement
    B = "B"  # related: not recently shown
    C = "C"  # explore


SLOT_ORDER = (Slot.A, Slot.B, Slot.C)

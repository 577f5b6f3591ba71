"""Test doubles and canned model output."""

import json
import time
from uuid import uuid4

from jose import jwt

from educel.config import settings
from educel.middleware.rate_limit import GenerationRateLimiter
from educel.services.generation_service import GenerationService
from educel.services.orchestrator import GenerationOrchestrator, RetryPolicy

TOPIC_OPTIONS = {
    "options": [
        {"topic": "Anchoring in Salary Talks", "hook": "The first number sets the whole range."},
        {"topic": "Running Async Standups", "hook": "Fewer meetings, same alignment."},
        {"topic": "Writing One-Page Memos", "hook": "Clarity forces better decisions."},
    ]
}

LEARN_ITEM = {
    "title": "Negotiation Anchors",
    "hook": "Whoever names a number first shapes the deal.",
    "bullets": [
        "Anchors pull final outcomes toward them",
        "Ambitious but defensible anchors work best",
        "Counter-anchor quickly to reset the range",
    ],
    "example": "A founder opened a seed round at a higher valuation and closed near it.",
    "micro_action": "Write down your anchor before your next negotiation.",
    "quiz_question": "Why does the first offer matter?",
    "quiz_answer": "It frames the range of acceptable outcomes.",
    "sources": [{"title": "Program on Negotiation", "url": "https://www.pon.harvard.edu/daily/"}],
}

EXPANDED = {
    "paragraphs": ["First paragraph.", "Second paragraph.", "Third paragraph."],
    "additional_bullets": ["Prepare a walk-away point"],
    "one_line_takeaway": "Set the anchor before the other side does.",
}

LESSON_PLAN = {
    "goals": ["Understand anchoring", "Practice counter-offers"],
    "resources": [
        {"title": "Negotiation basics", "url": "https://www.pon.harvard.edu/daily/", "type": "article"},
        {"title": "Getting to Yes", "url": "https://www.britannica.com/", "type": "book"},
        {"title": "Negotiation course", "url": "https://www.khanacademy.org/", "type": "course"},
    ],
    "exercises": ["Role-play a salary talk", "Review a past deal"],
    "daily_plan": [
        {"day": day, "focus": f"Focus {day}", "activities": [f"Activity {day}"]}
        for day in range(1, 8)
    ],
}


def without(payload: dict, *keys: str) -> dict:
    return {k: v for k, v in payload.items() if k not in keys}


class FakeModel:
    """Replays queued replies; dicts are sent as JSON, exceptions are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        if not self.replies:
            raise AssertionError("Unexpected model call")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply if isinstance(reply, str) else json.dumps(reply)


async def no_sleep(_seconds: float) -> None:
    return None


def build_orchestrator(model, deadline: float = 5.0) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        model,
        policy=RetryPolicy(max_attempts=3, backoff=(1.0, 2.0, 4.0)),
        deadline_seconds=deadline,
        sleep=no_sleep,
    )


def build_service(session_factory, model, limit: str = "100/hour", **kwargs) -> GenerationService:
    limiter = GenerationRateLimiter(limit, storage_uri="async+memory://", namespace=f"test-{uuid4()}")
    return GenerationService(session_factory, build_orchestrator(model), limiter, **kwargs)


def make_token(user_id: str = "user-1", email: str | None = "user@example.com", **claims) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "exp": int(time.time()) + 3600,
        **claims,
    }
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def auth_headers(user_id: str = "user-1") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}

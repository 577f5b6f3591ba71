"""Retry/timeout orchestration around a single generative-model call.

One attempt is: model call -> text -> markdown fence strip -> JSON parse ->
shape validation. Attempts are retried under a RetryPolicy, and the whole
retry sequence runs as one task under an overall deadline. On expiry the
task is cancelled, so no pending sleep or model call outlives the request.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

import anthropic

from educel.schemas.generation import GenerateRequest
from educel.services.errors import (
    EducelError,
    GenerationFailedError,
    GenerationTimeoutError,
    SchemaValidationError,
)
from educel.services.fallback_sources import resolve_fallback_sources
from educel.services.prompts import JSON_RETRY_REMINDER, Prompt
from educel.services.validators import RELAXED_SOURCE_TYPES, validate_generation

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")

# Upstream errors that retrying cannot fix.
_FATAL_UPSTREAM_ERRORS = (anthropic.AuthenticationError, anthropic.PermissionDeniedError)


class ChatModel(Protocol):
    async def complete(self, system: str, user: str) -> str: ...


def strip_markdown_fences(text: str) -> str:
    """Remove a leading ```/```json fence and/or a trailing ``` fence."""
    text = text.strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    backoff: tuple[float, ...] = (1.0, 2.0, 4.0)

    def delay(self, failed_attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        if not self.backoff:
            return 0.0
        return self.backoff[min(failed_attempt, len(self.backoff)) - 1]

    def is_retryable(self, error: BaseException) -> bool:
        # EducelErrors (missing credentials, unknown type, ...) are terminal.
        if isinstance(error, EducelError):
            return False
        return not isinstance(error, _FATAL_UPSTREAM_ERRORS)


@dataclass
class GenerationOutcome:
    content: dict
    attempts: int
    used_fallback_sources: bool = False


class GenerationOrchestrator:
    def __init__(
        self,
        model: ChatModel,
        policy: RetryPolicy | None = None,
        deadline_seconds: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.model = model
        self.policy = policy or RetryPolicy()
        self.deadline_seconds = deadline_seconds
        self._sleep = sleep

    async def generate(self, request: GenerateRequest, prompt: Prompt) -> GenerationOutcome:
        try:
            content, attempts = await asyncio.wait_for(
                self._run_attempts(request.type, prompt),
                timeout=self.deadline_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Generation of %s exceeded the %.0fs deadline", request.type, self.deadline_seconds
            )
            raise GenerationTimeoutError() from None

        outcome = GenerationOutcome(content=content, attempts=attempts)
        if request.type in RELAXED_SOURCE_TYPES and not content.get("sources"):
            subject = request.topic or request.custom_topic or content.get("title", "")
            content["sources"] = resolve_fallback_sources(subject)
            outcome.used_fallback_sources = True
        return outcome

    async def _run_attempts(self, gen_type: str, prompt: Prompt) -> tuple[dict, int]:
        last_error: Exception | None = None
        for attempt in range(1, self.policy.max_attempts + 1):
            user = prompt.user if attempt == 1 else f"{prompt.user}\n\n{JSON_RETRY_REMINDER}"
            try:
                return await self._attempt(gen_type, prompt.system, user), attempt
            except Exception as e:
                if not self.policy.is_retryable(e):
                    raise
                last_error = e
                logger.warning(
                    "Generation attempt %d/%d for %s failed: %s",
                    attempt, self.policy.max_attempts, gen_type, e,
                )
            if attempt < self.policy.max_attempts:
                await self._sleep(self.policy.delay(attempt))

        logger.error(
            "Generation of %s failed after %d attempts", gen_type, self.policy.max_attempts,
            exc_info=last_error,
        )
        raise GenerationFailedError(cause=last_error, attempts=self.policy.max_attempts) from last_error

    async def _attempt(self, gen_type: str, system: str, user: str) -> dict:
        raw = await self.model.complete(system, user)
        data = json.loads(strip_markdown_fences(raw))
        result = validate_generation(gen_type, data)
        if not result.ok:
            raise SchemaValidationError(f"Response does not match expected schema ({result.reason})")
        return result.value

"""
Anthropic Claude client used by the generation orchestrator.

The client is built from an explicit ModelConfig at startup; a missing API
key is detected there and surfaced as "service unavailable" instead of
failing deep inside a request.
"""

from dataclasses import dataclass

import anthropic

from educel.config import Settings
from educel.services.errors import MissingCredentialsError, MissingTextBlockError


@dataclass(frozen=True)
class ModelConfig:
    api_key: str
    model: str
    max_tokens: int = 2048
    temperature: float = 0.7
    # Per-request network timeout; the orchestrator enforces the overall deadline.
    request_timeout: float = 25.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelConfig":
        return cls(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            max_tokens=settings.GENERATION_MAX_TOKENS,
            temperature=settings.GENERATION_TEMPERATURE,
            request_timeout=max(1.0, settings.GENERATION_DEADLINE_SECONDS - 5.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


class AnthropicChatModel:
    """One system + user prompt in, one block of text out."""

    def __init__(self, config: ModelConfig):
        if not config.configured:
            raise MissingCredentialsError("ANTHROPIC_API_KEY is not set")
        self.config = config
        # Retries are owned by the orchestrator.
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            timeout=config.request_timeout,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return f"Anthropic ({self.config.model})"

    async def complete(self, system: str, user: str) -> str:
        message = await self._client.messages.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            system=system,
            messages=[{"role": "user", "content": user}],
        )
        for block in message.content:
            if getattr(block, "type", None) == "text":
                return block.text
        raise MissingTextBlockError("No text content in response")


def ai_provider_name(config: ModelConfig) -> str:
    if config.configured:
        return f"Anthropic ({config.model})"
    return "none"


async def ai_health_check(model: AnthropicChatModel | None) -> dict:
    """Live connectivity test — called by /api/health/ai."""
    if model is None:
        return {
            "provider": "none",
            "status": "unconfigured",
            "message": "Set ANTHROPIC_API_KEY in backend/.env.",
        }

    try:
        reply = await model.complete(
            system="You are a test assistant.",
            user="Reply with exactly: OK",
        )
        return {"provider": model.name, "status": "ok", "test_reply": reply.strip()}
    except Exception as e:
        return {"provider": model.name, "status": "error", "error": str(e)}

"""Rate limiting.

Two limiters share one storage URI:
  - ``limiter`` (slowapi) caps overall API traffic per client address.
  - ``GenerationRateLimiter`` caps model invocations per user id and is
    injected into the generation service.

Backends come from RATE_LIMIT_STORAGE_URI:
  - async+redis://host:6379  increments run as atomic Lua scripts, safe with
    any number of server processes.
  - async+memory://          process-local map with a periodic expiry sweep.
    NOT safe when several server processes serve the same users.
"""

from dataclasses import dataclass

from limits import parse
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string
from slowapi import Limiter
from slowapi.util import get_remote_address

from educel.config import settings


def _sync_storage_uri(uri: str) -> str:
    return uri[len("async+"):] if uri.startswith("async+") else uri


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.API_RATE_LIMIT],
    enabled=settings.API_RATE_LIMIT_ENABLED,
    storage_uri=_sync_storage_uri(settings.RATE_LIMIT_STORAGE_URI),
)


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds


class GenerationRateLimiter:
    def __init__(self, limit: str, storage_uri: str = "async+memory://", namespace: str = "generation"):
        if not storage_uri.startswith("async+"):
            storage_uri = f"async+{storage_uri}"
        self.item = parse(limit)
        self.namespace = namespace
        self.storage_uri = storage_uri
        self._strategy = MovingWindowRateLimiter(storage_from_string(storage_uri))

    @property
    def distributed(self) -> bool:
        return not self.storage_uri.startswith("async+memory")

    async def check(self, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier`` and report the window state."""
        allowed = await self._strategy.hit(self.item, self.namespace, identifier)
        stats = await self._strategy.get_window_stats(self.item, self.namespace, identifier)
        return RateLimitResult(
            success=allowed,
            limit=self.item.amount,
            remaining=stats.remaining,
            reset_at=stats.reset_time,
        )


def build_generation_rate_limiter() -> GenerationRateLimiter:
    return GenerationRateLimiter(
        settings.generation_rate_limit,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    )

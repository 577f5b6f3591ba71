"""Deadline helper for awaitables outside the generation orchestrator."""

import asyncio
from typing import Awaitable, TypeVar

from educel.services.errors import EducelError, StorageTimeoutError

T = TypeVar("T")


async def with_timeout(
    awaitable: Awaitable[T],
    seconds: float,
    error: type[EducelError] = StorageTimeoutError,
) -> T:
    """Await with a deadline; the pending work is cancelled on expiry."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        raise error() from None

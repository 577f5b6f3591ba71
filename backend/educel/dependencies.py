"""FastAPI dependencies shared by the routers."""

from fastapi import Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from educel.database import SessionLocal
from educel.services.errors import ServiceUnavailableError
from educel.services.generation_service import GenerationService


def get_session_factory() -> async_sessionmaker:
    """Session factory for work that must run on its own session."""
    return SessionLocal


def get_generation_service(request: Request) -> GenerationService:
    # Built at startup only when ANTHROPIC_API_KEY is configured.
    service = getattr(request.app.state, "generation_service", None)
    if service is None:
        raise ServiceUnavailableError()
    return service

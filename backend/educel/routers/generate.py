"""Generate router — single entry point into the generation pipeline."""

from fastapi import APIRouter, Depends

from educel.dependencies import get_generation_service
from educel.middleware.auth import CurrentUser, get_current_user
from educel.schemas.generation import GenerateRequest
from educel.services.generation_service import GenerationService

router = APIRouter(prefix="/api/generate", tags=["generate"])


@router.post("")
async def generate(
    body: GenerateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
):
    """Generate validated content of the requested ``type``.

    The response is the content object plus ``_meta``
    (``usedFallbackSources``; ``cached`` and ``session_id`` for topic_options).
    """
    result = await service.generate(current_user.id, body)
    return result.to_response()

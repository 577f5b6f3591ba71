"""Educel — FastAPI Application Entry Point."""

import logging
import math
import time

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from educel.config import settings
from educel.database import SessionLocal, create_all, engine
from educel.middleware.rate_limit import build_generation_rate_limiter, limiter
from educel.routers import events, generate, learn, lesson_plans, prefs, saved, user
from educel.services.ai_client import (
    AnthropicChatModel,
    ModelConfig,
    ai_health_check,
    ai_provider_name,
)
from educel.services.errors import EducelError, RateLimitExceededError
from educel.services.generation_service import GenerationService
from educel.services.orchestrator import GenerationOrchestrator, RetryPolicy

# Configure logging BEFORE creating the app
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(levelname)s:\t%(name)s\t%(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

# ── CORS origins from env (supports dev localhost + production domain) ──────
_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="Educel",
    description="Personalised micro-learning generation API.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.model_config = ModelConfig.from_settings(settings)
app.state.model = None
app.state.generation_service = None

# Rate limiting (API-wide, per client address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(generate.router)
app.include_router(learn.router)
app.include_router(lesson_plans.router)
app.include_router(saved.router)
app.include_router(prefs.router)
app.include_router(events.router)
app.include_router(user.router)


@app.exception_handler(EducelError)
async def educel_exception_handler(request: Request, exc: EducelError):
    headers = None
    if isinstance(exc, RateLimitExceededError):
        retry_after = max(0, math.ceil(exc.reset_at - time.time()))
        headers = {"Retry-After": str(retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.payload(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
    )


def build_generation_service(config: ModelConfig) -> tuple[AnthropicChatModel, GenerationService]:
    model = AnthropicChatModel(config)
    orchestrator = GenerationOrchestrator(
        model,
        policy=RetryPolicy(
            max_attempts=settings.GENERATION_MAX_ATTEMPTS,
            backoff=tuple(settings.GENERATION_BACKOFF_SECONDS),
        ),
        deadline_seconds=settings.GENERATION_DEADLINE_SECONDS,
    )
    service = GenerationService(SessionLocal, orchestrator, build_generation_rate_limiter())
    return model, service


@app.on_event("startup")
async def on_startup():
    """Create tables and wire the generation pipeline."""
    await create_all()

    config = app.state.model_config
    if not config.configured:
        logger.warning(
            "AI NOT CONFIGURED: set ANTHROPIC_API_KEY in backend/.env and restart. "
            "Generation routes answer 503 until then; visit /api/health/ai to verify."
        )
        return

    app.state.model, app.state.generation_service = build_generation_service(config)
    rate_limiter = app.state.generation_service.rate_limiter
    if not rate_limiter.distributed:
        logger.warning(
            "Generation rate limit uses process-local storage; "
            "set RATE_LIMIT_STORAGE_URI=async+redis://... when running several workers"
        )
    logger.info("AI provider: %s", ai_provider_name(config))


@app.on_event("shutdown")
async def on_shutdown():
    await engine.dispose()


@app.get("/")
def root():
    return {
        "name": "Educel API",
        "version": "1.0.0",
        "docs": "/docs",
        "ai_provider": ai_provider_name(app.state.model_config),
    }


@app.get("/health")
def health():
    return {"status": "ok", "ai_provider": ai_provider_name(app.state.model_config)}


@app.get("/api/health/ai")
async def health_ai():
    """Live connectivity test for the configured AI provider.

    Returns:
        provider: which AI is active
        status:   "ok" | "error" | "unconfigured"
        test_reply / error: result of a tiny test call
    """
    return await ai_health_check(app.state.model)

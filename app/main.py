"""Entry point for the Intimex assistant FastAPI application."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api import chat as chat_router
from .config import settings
from .core.providers import get_assistant_profile

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Refuse to start without an API key; load the assistant profile once."""

    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is missing; refusing to start")
    profile = get_assistant_profile()
    logger.info(
        "Intimex assistant starting (env=%s, model=%s)", settings.app_env, profile.model
    )
    yield


app = FastAPI(
    title="Intimex assistant API",
    version="0.1.0",
    summary="Company Q&A relay over the Intimex reference tables",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["meta"])
def index() -> Dict[str, Any]:
    """Basic service descriptor."""

    return {
        "service": "intimex-assistant",
        "environment": settings.app_env,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", tags=["meta"])
def health() -> Dict[str, Any]:
    """Liveness probe with the configured model and data sources."""

    return {
        "status": "ok",
        "model": get_assistant_profile().model,
        "data_sources": settings.data_sources,
    }


app.include_router(chat_router.router)
app.add_exception_handler(RequestValidationError, chat_router.chat_validation_error_handler)

_downloads_dir = Path(settings.downloads_dir)
_downloads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/downloads", StaticFiles(directory=_downloads_dir), name="downloads")

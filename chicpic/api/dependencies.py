"""FastAPI dependencies for database sessions, model client and storage."""

from typing import Any

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.config.settings import settings
from chicpic.database.db_session import get_db
from chicpic.generation import GenerationOrchestrator, VideoGenerator, build_client
from chicpic.storage import ImageStorage, build_storage

__all__ = [
    "get_db_session",
    "get_gemini_client",
    "get_orchestrator",
    "get_video_generator",
    "get_storage",
    "get_http_client",
]


async def get_db_session() -> AsyncSession:
    """Dependency for FastAPI to get database session."""
    async for session in get_db():
        yield session


def get_gemini_client(request: Request) -> Any:
    """Client created at startup and shared by all requests."""
    state = request.app.state
    if getattr(state, "gemini_client", None) is None:
        state.gemini_client = build_client(settings)
    return state.gemini_client


def get_storage(request: Request) -> ImageStorage:
    state = request.app.state
    if getattr(state, "storage", None) is None:
        state.storage = build_storage(settings)
    return state.storage


def get_http_client(request: Request) -> httpx.AsyncClient:
    """HTTP client used to download reference images."""
    state = request.app.state
    if getattr(state, "http_client", None) is None:
        state.http_client = httpx.AsyncClient(timeout=30.0)
    return state.http_client


def get_orchestrator(client: Any = Depends(get_gemini_client)) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        client,
        max_attempts=settings.generation_max_attempts,
        backoff_base=settings.quota_backoff_base_seconds,
        backoff_cap=settings.quota_backoff_cap_seconds,
    )


def get_video_generator(client: Any = Depends(get_gemini_client)) -> VideoGenerator:
    return VideoGenerator(
        client,
        poll_interval=settings.video_poll_interval_seconds,
        duration_seconds=settings.video_duration_seconds,
        aspect_ratio=settings.video_aspect_ratio,
        resolution=settings.video_resolution,
    )

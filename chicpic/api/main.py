"""FastAPI main application."""

from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chicpic.api.middleware.rate_limit import setup_rate_limiting
from chicpic.api.middleware.request_context import RequestContextMiddleware
from chicpic.api.routers import garments, generation, health, looks, models, processing, videos
from chicpic.config.settings import settings
from chicpic.generation import build_client
from chicpic.storage import build_storage
from chicpic.storage.images import MEDIA_URL_PREFIX
from chicpic.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Chic Pic API",
    version="1.0.0",
    description="Génération d'images de mode infantile (vêtements, modèles, looks) et de vidéos promotionnelles",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)

setup_rate_limiting(app)

app.include_router(health.router, prefix="/api/v1")
app.include_router(generation.router, prefix="/api/v1")
app.include_router(processing.router, prefix="/api/v1")
app.include_router(videos.router, prefix="/api/v1")
app.include_router(garments.router, prefix="/api/v1")
app.include_router(models.router, prefix="/api/v1")
app.include_router(looks.router, prefix="/api/v1")

# Local storage backend: files are served under /media/...
if settings.storage_backend.lower() == "local":
    media_dir = Path(settings.local_storage_dir)
    media_dir.mkdir(parents=True, exist_ok=True)
    app.mount(MEDIA_URL_PREFIX, StaticFiles(directory=str(media_dir)), name="media")


@app.on_event("startup")
async def startup_event() -> None:
    """Create the shared model client, storage backend and HTTP client."""
    app.state.gemini_client = build_client(settings)
    app.state.storage = build_storage(settings)
    app.state.http_client = httpx.AsyncClient(timeout=30.0)
    if not app.state.gemini_client.is_configured:
        logger.warning("GOOGLE_API_KEY not configured, generation endpoints return placeholders")
    logger.info("Application started", storage_backend=settings.storage_backend)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Close HTTP clients."""
    http_client = getattr(app.state, "http_client", None)
    if http_client is not None:
        await http_client.aclose()
    storage = getattr(app.state, "storage", None)
    if storage is not None and hasattr(storage, "close"):
        await storage.close()

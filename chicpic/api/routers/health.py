"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from chicpic.api.dependencies import get_gemini_client
from chicpic.config.settings import settings

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "",
    summary="Health check",
    description="Check the health status of the API service.",
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "service": "chic-pic",
                    }
                }
            },
        }
    },
)
async def health_check() -> dict:
    """
    Health check endpoint.

    Can be used for load balancer health checks and monitoring.

    Example:
        ```bash
        curl http://localhost:8000/api/v1/health
        ```
    """
    return {
        "status": "healthy",
        "service": "chic-pic",
    }


@router.get(
    "/status",
    summary="Generation service status",
    description="Report whether a Google API key is configured and which models are used.",
)
async def generation_status(client: Any = Depends(get_gemini_client)) -> dict:
    """
    Generation service status.

    Without an API key every generation endpoint answers with placeholder images.
    """
    configured = bool(client.is_configured)
    return {
        "success": True,
        "has_api_key": configured,
        "image_model": settings.gemini_image_model if configured else None,
        "text_model": settings.gemini_text_model if configured else None,
        "video_model": settings.veo_model if configured else None,
        "storage_backend": settings.storage_backend,
        "message": "Generation service available" if configured else "GOOGLE_API_KEY not configured, using placeholders",
    }

"""API router for promotional video generation."""

from __future__ import annotations

import time
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from chicpic.api.dependencies import get_gemini_client, get_http_client, get_storage, get_video_generator
from chicpic.api.middleware.rate_limit import GENERATION_RATE_LIMIT, limiter
from chicpic.api.schemas.video import VideoGenerationRequest, VideoGenerationResponse
from chicpic.api.utils.media import load_reference_image
from chicpic.config.settings import settings
from chicpic.generation import (
    ErrorKind,
    ImageLoadError,
    LookImage,
    ModelCallError,
    VideoBlockedError,
    VideoGenerationError,
    VideoGenerator,
)
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import StorageError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Video Generation"])

_MODEL_ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.QUOTA: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
}


def _failure(status_code: int, message: str) -> JSONResponse:
    body = VideoGenerationResponse(success=False, message=message)
    return JSONResponse(status_code=status_code, content={**body.model_dump(), "error": message})


def video_storage_path() -> str:
    return f"videos/{int(time.time() * 1000)}-video-promocional.mp4"


@router.post(
    "/generate-video",
    response_model=VideoGenerationResponse,
    summary="Generate a promotional video from looks",
    description="""
    Generate an 8 second 16:9 promotional video with Veo from up to three look images.

    When Veo filters the reference images because they show children, the looks are
    described by the text model and the video is generated again from text only.
    """,
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_video(
    request: Request,
    payload: VideoGenerationRequest,
    client: Any = Depends(get_gemini_client),
    generator: VideoGenerator = Depends(get_video_generator),
    storage: ImageStorage = Depends(get_storage),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    """
    Generate, download and store a promotional video.

    Raises:
        400: image load failure or safety filter
        404: video model not found
        429: quota exceeded
        503: Google API key not configured
    """
    if not client.is_configured:
        return _failure(status.HTTP_503_SERVICE_UNAVAILABLE, "GOOGLE_API_KEY is not configured")

    look_images = []
    for look in payload.look_images:
        try:
            image = await load_reference_image(look.image_url, http_client)
        except ImageLoadError as e:
            return _failure(status.HTTP_400_BAD_REQUEST, f"Could not load image for look '{look.name}': {e}")
        look_images.append(LookImage(image=image, name=look.name, description=look.description))

    try:
        video = await generator.generate(look_images, payload.description)
    except VideoBlockedError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, str(e))
    except ModelCallError as e:
        logger.error("Video model error", kind=e.kind.value, status_code=e.status_code, error=str(e))
        status_code = _MODEL_ERROR_STATUS.get(e.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if e.kind is ErrorKind.NOT_FOUND:
            return _failure(status_code, f"Video model {settings.veo_model} not found or not available")
        return _failure(status_code, str(e))
    except VideoGenerationError as e:
        logger.error("Video generation failed", error=str(e))
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    path = video_storage_path()
    try:
        video_url = await storage.upload_file(video, path, "video/mp4", bucket=settings.video_bucket)
    except StorageError as e:
        logger.error("Video upload failed", error=str(e))
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    logger.info("Video generated", storage_path=path, size=len(video))
    return VideoGenerationResponse(
        success=True,
        video_url=video_url,
        storage_path=path,
        message="Video generated",
    )

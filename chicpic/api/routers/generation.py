"""API router for image generation and edition."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from chicpic.api.dependencies import get_gemini_client, get_http_client, get_orchestrator
from chicpic.api.middleware.rate_limit import GENERATION_RATE_LIMIT, limiter
from chicpic.api.schemas.generation import EditImageRequest, GenerateRequest, GenerateResponse
from chicpic.api.utils.media import load_reference_image
from chicpic.config.settings import settings
from chicpic.generation import (
    AssetType,
    GenerationOrchestrator,
    GenerationOutcome,
    GenerationRequest,
    ImageLoadError,
    ReferenceImage,
    create_placeholder,
)
from chicpic.generation.prompt_builder import build_styling_instructions, validate_edit_prompt
from chicpic.utils.logging import get_logger, set_request_context

logger = get_logger(__name__)

router = APIRouter(tags=["Image Generation"])

PLACEHOLDER_MESSAGE = "Placeholder image generated (configure GOOGLE_API_KEY for real generation)"


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    body = GenerateResponse(success=False, error=error, message=error, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def outcome_response(outcome: GenerationOutcome) -> Any:
    """
    Map a generation outcome to an HTTP response.

    - safety block: 400 with the provider's reason
    - quota exhausted: 429
    - no usable image: 200 with a placeholder and the model's text
    """
    if outcome.blocked:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            outcome.message,
            image_data_uri=outcome.image_data_uri,
            attempts=outcome.attempts_used,
            safety_blocked=True,
            blocked_reason=outcome.blocked_reason,
        )

    if outcome.quota_exceeded:
        return _error(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "API quota exceeded. Please wait a few minutes before trying again.",
            image_data_uri=outcome.image_data_uri,
            attempts=outcome.attempts_used,
            quota_exceeded=True,
            details=outcome.error,
        )

    if outcome.success:
        return GenerateResponse(
            success=True,
            image_data_uri=outcome.image_data_uri,
            message=outcome.message,
            is_real_image=True,
            attempts=outcome.attempts_used,
            model=settings.gemini_image_model,
            text_only_fallback=outcome.text_only_fallback,
        )

    return GenerateResponse(
        success=True,
        image_data_uri=outcome.image_data_uri,
        message="The model answered without a valid image. Using placeholder.",
        is_real_image=False,
        attempts=outcome.attempts_used,
        ai_description=outcome.message,
    )


async def _look_references(payload: GenerateRequest, http_client: httpx.AsyncClient) -> tuple[ReferenceImage, ...]:
    """Model image first, then garments; images that fail to load are skipped."""
    sources = ([payload.model_image] if payload.model_image else []) + list(payload.garment_images)
    images = []
    for source in sources:
        try:
            images.append(await load_reference_image(source, http_client))
        except ImageLoadError as e:
            logger.warning("Reference image skipped", error=str(e))
    return tuple(images)


def _styling_context(payload: GenerateRequest) -> Optional[dict[str, Any]]:
    if not payload.styling_data and not payload.garments:
        return None
    context = dict(payload.styling_data or {})
    if payload.garments:
        context["garments"] = payload.garments
    return context


@router.post(
    "/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate a garment, model or look image",
    description="""
    Generate a catalog image with the Gemini image model.

    Looks accept a model image and garment images (data URI, URL or base64) that are
    combined visually; without images the look is generated from text.
    Failures always carry a placeholder image.
    """,
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_image(
    request: Request,
    payload: GenerateRequest,
    client: Any = Depends(get_gemini_client),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    """
    Generate an image.

    Raises:
        400: invalid type or safety block
        429: quota exhausted
        500: unexpected error
    """
    try:
        asset_type = AssetType(payload.type)
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid generation type: {payload.type}")

    description = payload.description.strip()
    if not description:
        if asset_type is not AssetType.LOOK:
            return _error(status.HTTP_400_BAD_REQUEST, "Description is required")
        description = build_styling_instructions()

    set_request_context(asset_type=asset_type.value)

    try:
        if not client.is_configured:
            logger.warning("Google API key not configured, returning placeholder", asset_type=asset_type.value)
            return GenerateResponse(
                success=True,
                image_data_uri=create_placeholder(asset_type.value, description),
                message=PLACEHOLDER_MESSAGE,
                is_real_image=False,
            )

        references: tuple[ReferenceImage, ...] = ()
        styling_context = None
        if asset_type is AssetType.LOOK:
            references = await _look_references(payload, http_client)
            styling_context = _styling_context(payload)

        generation_request = GenerationRequest(
            asset_type=asset_type,
            description=description,
            reference_images=references,
            styling_context=styling_context,
        )

        try:
            outcome = await orchestrator.generate(generation_request)
        except Exception as e:
            logger.error("Image generation failed, falling back to text description", error=str(e))
            ai_description = await orchestrator.describe(generation_request)
            return GenerateResponse(
                success=True,
                image_data_uri=create_placeholder(asset_type.value, description),
                message="Image model unavailable. Using placeholder.",
                is_real_image=False,
                ai_description=ai_description[:200] + "..." if ai_description else None,
                error=str(e),
            )

        logger.info(
            "Generation finished",
            success=outcome.success,
            attempts=outcome.attempts_used,
            blocked=outcome.blocked,
            quota_exceeded=outcome.quota_exceeded,
        )
        return outcome_response(outcome)

    except Exception as e:
        logger.error("Generation endpoint error", error=str(e), exc_info=True)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            image_data_uri=create_placeholder(asset_type.value, description),
            details=str(e),
        )


@router.post(
    "/edit-image",
    response_model=GenerateResponse,
    status_code=status.HTTP_200_OK,
    summary="Edit an existing image",
    description="Apply user instructions to a garment, model or look image.",
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def edit_image(
    request: Request,
    payload: EditImageRequest,
    client: Any = Depends(get_gemini_client),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    """Edit an image in a single model call."""
    edit = payload.edit_data

    if payload.type != "edit":
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request type: {payload.type}")
    try:
        item_type = AssetType(edit.item_type)
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid item type: {edit.item_type}")
    if not edit.full_prompt and not validate_edit_prompt(edit.edit_prompt):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Edit instructions must be at least 10 characters and appropriate",
        )

    set_request_context(asset_type=item_type.value)

    if not client.is_configured:
        return GenerateResponse(
            success=True,
            image_data_uri=create_placeholder(item_type.value, f"edited {item_type.value}"),
            message=PLACEHOLDER_MESSAGE,
            is_real_image=False,
        )

    try:
        image = await load_reference_image(edit.original_image_base64, http_client)
    except ImageLoadError as e:
        return _error(status.HTTP_400_BAD_REQUEST, f"Could not load image: {e}")

    try:
        outcome = await orchestrator.edit(item_type, image, edit.edit_prompt, edit.full_prompt)
    except Exception as e:
        logger.error("Image edit failed", error=str(e))
        return GenerateResponse(
            success=True,
            image_data_uri=create_placeholder(item_type.value, f"edited {item_type.value}"),
            message="Image model unavailable. Using placeholder.",
            is_real_image=False,
            error=str(e),
        )

    return outcome_response(outcome)

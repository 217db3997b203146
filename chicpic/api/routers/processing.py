"""API router turning user photos into catalog garments and models."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from chicpic.api.dependencies import get_gemini_client, get_http_client, get_orchestrator, get_storage
from chicpic.api.middleware.rate_limit import GENERATION_RATE_LIMIT, limiter
from chicpic.api.schemas.generation import ProcessGarmentResponse, ProcessImageRequest, ProcessModelResponse
from chicpic.api.utils.media import data_uri_to_bytes, load_reference_image
from chicpic.generation import (
    AssetType,
    GenerationOrchestrator,
    GenerationRequest,
    ImageLoadError,
    ReferenceImage,
    create_placeholder,
)
from chicpic.generation.analysis import GarmentAnalysis, ModelAnalysis, analyze_garment_image, analyze_model_image
from chicpic.generation.prompt_builder import build_catalog_prompt
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import StorageError
from chicpic.utils.logging import get_logger, set_request_context

logger = get_logger(__name__)

router = APIRouter(tags=["Catalog Processing"])

# kind -> (storage folder, analysis function, default metadata, response data field)
_PROCESSING = {
    AssetType.GARMENT: ("garments", analyze_garment_image, GarmentAnalysis, "garment_data"),
    AssetType.MODEL: ("models", analyze_model_image, ModelAnalysis, "model_data"),
}


def _failure(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


async def process_photo(
    kind: AssetType,
    image: ReferenceImage,
    annotations: Optional[str],
    client: Any,
    orchestrator: GenerationOrchestrator,
    storage: ImageStorage,
) -> Any:
    """
    Produce the catalog image and analyse the photo in parallel, then upload the result.

    Returns:
        Response payload dict, or a JSONResponse for failures
    """
    folder, analyze, defaults, data_field = _PROCESSING[kind]
    generation_request = GenerationRequest(
        asset_type=kind,
        description=annotations or f"catalog {kind.value}",
        reference_images=(image,),
        prompt_override=build_catalog_prompt(kind, annotations),
    )

    outcome, analysis = await asyncio.gather(
        orchestrator.generate(generation_request),
        analyze(client, image, annotations),
    )

    if outcome.blocked:
        return _failure(status.HTTP_400_BAD_REQUEST, outcome.message, safety_blocked=True, blocked_reason=outcome.blocked_reason)
    if outcome.quota_exceeded:
        return _failure(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "API quota exceeded. Please wait a few minutes before trying again.",
            quota_exceeded=True,
        )
    if not outcome.success:
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Could not produce the processed image: {outcome.message}")

    data, mime_type = data_uri_to_bytes(outcome.image_data_uri)
    upload = await storage.upload_image(data, folder, mime_type)

    logger.info("Photo processed", kind=kind.value, storage_path=upload.path, analysed=analysis is not None)
    return {
        "success": True,
        "processed_image_url": upload.url,
        "thumbnail_url": upload.thumbnail_url,
        "storage_path": upload.path,
        "is_real_image": True,
        data_field: (analysis or defaults()).to_dict(),
        "message": "Image processed",
    }


async def _handle(
    kind: AssetType,
    payload: ProcessImageRequest,
    client: Any,
    orchestrator: GenerationOrchestrator,
    storage: ImageStorage,
    http_client: httpx.AsyncClient,
) -> Any:
    _, _, defaults, data_field = _PROCESSING[kind]
    set_request_context(asset_type=kind.value)

    if not client.is_configured:
        return {
            "success": True,
            "processed_image_url": create_placeholder(kind.value, payload.annotations or f"catalog {kind.value}"),
            "is_real_image": False,
            data_field: defaults().to_dict(),
            "message": "Placeholder image generated (configure GOOGLE_API_KEY for real processing)",
        }

    try:
        image = await load_reference_image(payload.image_url, http_client)
    except ImageLoadError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, f"Could not load image: {e}")

    try:
        return await process_photo(kind, image, payload.annotations, client, orchestrator, storage)
    except StorageError as e:
        logger.error("Processed image upload failed", error=str(e))
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        logger.error("Photo processing failed", kind=kind.value, error=str(e), exc_info=True)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))


@router.post(
    "/process-garment-image",
    response_model=ProcessGarmentResponse,
    summary="Turn a garment photo into a catalog image",
    description="Front and back white-background catalog image plus garment metadata analysed from the photo.",
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def process_garment_image(
    request: Request,
    payload: ProcessImageRequest,
    client: Any = Depends(get_gemini_client),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    storage: ImageStorage = Depends(get_storage),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    return await _handle(AssetType.GARMENT, payload, client, orchestrator, storage, http_client)


@router.post(
    "/process-model-image",
    response_model=ProcessModelResponse,
    summary="Turn a person photo into a catalog child model",
    description="Full body white-background model image plus model metadata analysed from the photo.",
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def process_model_image(
    request: Request,
    payload: ProcessImageRequest,
    client: Any = Depends(get_gemini_client),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    storage: ImageStorage = Depends(get_storage),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    return await _handle(AssetType.MODEL, payload, client, orchestrator, storage, http_client)

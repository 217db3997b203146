"""Client Gemini (images, texte, vidéo) injecté dans l'orchestrateur."""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger

from chicpic.config.settings import Settings
from chicpic.generation.exceptions import ClientNotConfiguredError, ErrorKind, ModelCallError
from chicpic.generation.prompt_builder import AssetType


_RETRY_DELAY_PATTERNS = (
    re.compile(r'"retryDelay":\s*"([\d.]+)s"'),
    re.compile(r"retry in ([\d.]+)s", re.IGNORECASE),
)

_STATUS_KINDS = {
    429: ErrorKind.QUOTA,
    404: ErrorKind.NOT_FOUND,
    400: ErrorKind.INVALID_REQUEST,
    503: ErrorKind.UNAVAILABLE,
}


@dataclass
class GenerationParams:
    """Paramètres d'échantillonnage d'une génération d'image."""

    temperature: float = 0.7
    top_p: float = 0.8
    top_k: int = 40
    max_output_tokens: int = 8192
    response_modalities: list[str] = field(default_factory=lambda: ["IMAGE", "TEXT"])

    @classmethod
    def for_asset(cls, asset_type: AssetType | str) -> GenerationParams:
        """Les modèles utilisent un échantillonnage plus conservateur."""
        if AssetType(asset_type) is AssetType.MODEL:
            return cls(temperature=0.6, top_p=0.7, top_k=30)
        return cls()

    def to_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            top_p=self.top_p,
            top_k=self.top_k,
            max_output_tokens=self.max_output_tokens,
            response_modalities=self.response_modalities,
        )


def parse_retry_delay(text: Optional[str]) -> Optional[float]:
    """Extrait le délai suggéré (RetryInfo retryDelay ou "retry in Ns")."""
    if not text:
        return None
    for pattern in _RETRY_DELAY_PATTERNS:
        match = pattern.search(text)
        if match:
            try:
                return float(match.group(1))
            except ValueError:
                continue
    return None


def classify_api_error(exc: Exception) -> ModelCallError:
    """Convertit une erreur du SDK en ModelCallError typée."""
    code = getattr(exc, "code", None)
    status = str(getattr(exc, "status", "") or "")
    message = getattr(exc, "message", None) or str(exc)

    if code == 429 or status == "RESOURCE_EXHAUSTED":
        kind = ErrorKind.QUOTA
    else:
        kind = _STATUS_KINDS.get(code, ErrorKind.OTHER)

    retry_after = None
    if kind is ErrorKind.QUOTA:
        details = getattr(exc, "details", None)
        details_text = json.dumps(details, default=str) if details else ""
        retry_after = parse_retry_delay(f"{details_text} {exc}")

    return ModelCallError(message, kind=kind, status_code=code, retry_after=retry_after)


def _image_parts(images: Sequence[Any]) -> list[types.Part]:
    return [types.Part.from_bytes(data=image.data, mime_type=image.mime_type) for image in images]


class GeminiClient:
    """
    Client asynchrone pour les modèles Gemini et Veo.

    Une seule instance est créée au démarrage de l'application puis partagée.
    """

    is_configured = True

    def __init__(
        self,
        api_key: str,
        image_model: str,
        text_model: str,
        video_model: str,
        sdk_client: Optional[genai.Client] = None,
    ) -> None:
        if not api_key:
            raise ClientNotConfiguredError("GOOGLE_API_KEY is required to create the Gemini client")

        self.image_model = image_model
        self.text_model = text_model
        self.video_model = video_model
        self._client = sdk_client or genai.Client(api_key=api_key)

    async def generate_image(
        self,
        prompt: str,
        reference_images: Sequence[Any] = (),
        params: Optional[GenerationParams] = None,
    ) -> Any:
        """
        Appelle le modèle d'image.

        Le prompt est envoyé en premier, suivi des images de référence dans l'ordre.

        Returns:
            Réponse brute du SDK (à passer au parser)

        Raises:
            ModelCallError: Erreur classée renvoyée par l'API
        """
        params = params or GenerationParams()
        contents: list[Any] = [prompt, *_image_parts(reference_images)]

        logger.info(
            "Calling Gemini image model",
            model=self.image_model,
            prompt=prompt[:100],
            reference_images=len(reference_images),
            temperature=params.temperature,
        )

        try:
            return await self._client.aio.models.generate_content(
                model=self.image_model,
                contents=contents,
                config=params.to_config(),
            )
        except genai_errors.APIError as e:
            error = classify_api_error(e)
            logger.error(
                "Gemini image model error",
                status_code=error.status_code,
                kind=error.kind.value,
                retry_after=error.retry_after,
            )
            raise error from e

    async def generate_text(self, prompt: str, images: Sequence[Any] = ()) -> str:
        """Appelle le modèle texte (analyse d'images, descriptions de secours)."""
        contents: list[Any] = [prompt, *_image_parts(images)]

        try:
            response = await self._client.aio.models.generate_content(
                model=self.text_model,
                contents=contents,
            )
        except genai_errors.APIError as e:
            error = classify_api_error(e)
            logger.error("Gemini text model error", status_code=error.status_code, kind=error.kind.value)
            raise error from e

        return response.text or ""

    async def start_video(
        self,
        prompt: str,
        reference_images: Sequence[Any] = (),
        duration_seconds: int = 8,
        aspect_ratio: str = "16:9",
        resolution: str = "720p",
    ) -> Any:
        """Soumet une génération vidéo Veo et retourne l'opération longue."""
        config = types.GenerateVideosConfig(
            aspect_ratio=aspect_ratio,
            resolution=resolution,
            duration_seconds=duration_seconds,
        )
        if reference_images:
            config.reference_images = [
                types.VideoGenerationReferenceImage(
                    image=types.Image(image_bytes=image.data, mime_type=image.mime_type),
                    reference_type="asset",
                )
                for image in reference_images
            ]

        logger.info(
            "Submitting Veo video generation",
            model=self.video_model,
            reference_images=len(reference_images),
            duration_seconds=duration_seconds,
        )

        try:
            return await self._client.aio.models.generate_videos(
                model=self.video_model,
                prompt=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            error = classify_api_error(e)
            logger.error("Veo submission error", status_code=error.status_code, kind=error.kind.value)
            raise error from e

    async def poll_video(self, operation: Any) -> Any:
        """Rafraîchit l'état d'une opération vidéo."""
        try:
            return await self._client.aio.operations.get(operation)
        except genai_errors.APIError as e:
            raise classify_api_error(e) from e

    async def download_video(self, video: Any) -> bytes:
        """Télécharge les octets d'une vidéo générée."""
        if getattr(video, "video_bytes", None):
            return video.video_bytes
        try:
            return await asyncio.to_thread(self._client.files.download, file=video)
        except genai_errors.APIError as e:
            raise classify_api_error(e) from e


class UnconfiguredClient:
    """Client utilisé sans clé API : chaque appel lève ClientNotConfiguredError."""

    is_configured = False

    def _fail(self) -> None:
        raise ClientNotConfiguredError("GOOGLE_API_KEY is not configured")

    async def generate_image(self, prompt: str, reference_images: Sequence[Any] = (), params: Any = None) -> Any:
        self._fail()

    async def generate_text(self, prompt: str, images: Sequence[Any] = ()) -> str:
        self._fail()
        return ""

    async def start_video(self, prompt: str, reference_images: Sequence[Any] = (), **kwargs: Any) -> Any:
        self._fail()

    async def poll_video(self, operation: Any) -> Any:
        self._fail()

    async def download_video(self, video: Any) -> bytes:
        self._fail()
        return b""


def build_client(settings: Settings) -> GeminiClient | UnconfiguredClient:
    """Crée le client Gemini, ou un client non configuré sans clé API."""
    if not settings.has_google_api_key:
        logger.warning("GOOGLE_API_KEY not set, image generation will return placeholders")
        return UnconfiguredClient()

    logger.info(
        "Gemini client configured",
        image_model=settings.gemini_image_model,
        text_model=settings.gemini_text_model,
        video_model=settings.veo_model,
    )
    return GeminiClient(
        api_key=settings.google_api_key,
        image_model=settings.gemini_image_model,
        text_model=settings.gemini_text_model,
        video_model=settings.veo_model,
    )

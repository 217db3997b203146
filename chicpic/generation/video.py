"""Génération de vidéos promotionnelles avec Veo."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from loguru import logger

from chicpic.generation.analysis import describe_look_image
from chicpic.generation.exceptions import VideoBlockedError, VideoGenerationError
from chicpic.generation.prompt_builder import build_video_fallback_prompt, build_video_prompt


@dataclass(frozen=True)
class LookImage:
    """Image de look chargée, avec son nom et sa description."""

    image: Any  # ReferenceImage
    name: str
    description: str = ""


def _is_children_filter(reason: str) -> bool:
    return "children" in reason.lower()


class VideoGenerator:
    """
    Soumet une génération Veo, attend la fin de l'opération et télécharge la vidéo.

    Si Veo filtre la demande à cause d'enfants photoréalistes dans les images
    de référence, chaque look est décrit par le modèle texte et la génération
    est relancée une fois sans images.
    """

    def __init__(
        self,
        client: Any,
        poll_interval: float = 10.0,
        duration_seconds: int = 8,
        aspect_ratio: str = "16:9",
        resolution: str = "720p",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.duration_seconds = duration_seconds
        self.aspect_ratio = aspect_ratio
        self.resolution = resolution
        self._sleep = sleep

    async def generate(self, look_images: Sequence[LookImage], description: str) -> bytes:
        """
        Génère la vidéo et retourne ses octets (MP4).

        Raises:
            VideoBlockedError: Filtre de sécurité non contournable
            VideoGenerationError: Opération en erreur ou aucune vidéo produite
            ModelCallError: Erreur classée de l'API (quota, modèle introuvable...)
        """
        if not look_images:
            raise VideoGenerationError("At least one look image is required")

        looks = [(look.name, look.description) for look in look_images]
        prompt = build_video_prompt(description, looks, self.duration_seconds)
        operation = await self._run(prompt, [look.image for look in look_images])

        reasons = list(getattr(operation.response, "rai_media_filtered_reasons", None) or [])
        if reasons:
            reason = reasons[0]
            logger.warning("Video filtered by RAI", reason=reason)
            if not _is_children_filter(reason):
                raise VideoBlockedError(f"Video blocked by safety policies: {reason}", reason=reason)

            image_descriptions = []
            for index, look in enumerate(look_images, start=1):
                logger.info("Describing look image for video fallback", index=index, total=len(look_images))
                text = await describe_look_image(self.client, look.image)
                image_descriptions.append(f'Look "{look.name}": {text}')

            fallback_prompt = build_video_fallback_prompt(description, looks, image_descriptions, self.duration_seconds)
            operation = await self._run(fallback_prompt, [])

            retry_reasons = list(getattr(operation.response, "rai_media_filtered_reasons", None) or [])
            if retry_reasons:
                raise VideoBlockedError(
                    f"Video blocked by safety policies: {retry_reasons[0]}",
                    reason=retry_reasons[0],
                )

        return await self._download(operation)

    async def _run(self, prompt: str, reference_images: Sequence[Any]) -> Any:
        operation = await self.client.start_video(
            prompt,
            reference_images,
            duration_seconds=self.duration_seconds,
            aspect_ratio=self.aspect_ratio,
            resolution=self.resolution,
        )
        logger.info("Video operation started", operation=getattr(operation, "name", None))

        while not operation.done:
            await self._sleep(self.poll_interval)
            operation = await self.client.poll_video(operation)
            logger.debug("Video operation polled", done=bool(operation.done))

        if operation.error:
            raise VideoGenerationError(f"Video operation failed: {json.dumps(operation.error, default=str)}")
        return operation

    async def _download(self, operation: Any) -> bytes:
        videos = list(getattr(operation.response, "generated_videos", None) or [])
        if not videos:
            raise VideoGenerationError("No video was generated")

        video = videos[0].video
        if video is None:
            raise VideoGenerationError("Generated video has no associated file")

        data = await self.client.download_video(video)
        logger.info("Video downloaded", size=len(data))
        return data

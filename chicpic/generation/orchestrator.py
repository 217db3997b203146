"""
Orchestrateur de génération d'images.

Boucle de tentatives autour du client Gemini :
- construction du prompt par tentative (échelle des modèles, contexte des looks)
- analyse de la réponse (image, texte ou blocage de sécurité)
- validation de l'image et image de remplacement en cas d'échec
- attente exponentielle sur les erreurs de quota
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from loguru import logger

from chicpic.generation.client import GenerationParams
from chicpic.generation.exceptions import ClientNotConfiguredError, ErrorKind, ModelCallError
from chicpic.generation.image_sources import format_data_uri
from chicpic.generation.placeholder import create_placeholder
from chicpic.generation.prompt_builder import (
    AssetType,
    LookMode,
    build_edit_prompt,
    build_prompt,
    look_context,
    text_only_look_description,
    validate_model_description,
)
from chicpic.generation.response_parser import ParsedResponse, parse_response
from chicpic.generation.validator import is_valid_image


@dataclass(frozen=True)
class ReferenceImage:
    """Image de référence envoyée au modèle (modèle d'abord, puis vêtements)."""

    data: bytes
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class GenerationRequest:
    """Demande de génération, consommée une seule fois."""

    asset_type: AssetType
    description: str
    reference_images: tuple[ReferenceImage, ...] = ()
    styling_context: Optional[Mapping[str, Any]] = None
    prompt_override: Optional[str] = None


@dataclass
class GenerationOutcome:
    """Résultat d'une génération. Un échec porte toujours une image de remplacement."""

    success: bool
    image_data_uri: str
    attempts_used: int
    is_real_image: bool
    message: str = ""
    blocked_reason: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    text_only_fallback: bool = False

    @property
    def blocked(self) -> bool:
        return self.blocked_reason is not None

    @property
    def quota_exceeded(self) -> bool:
        return self.error_kind is ErrorKind.QUOTA


class GenerationOrchestrator:
    """Exécute la boucle de génération pour une demande."""

    def __init__(
        self,
        client: Any,
        max_attempts: int = 3,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        backoff_base: float = 5.0,
        backoff_cap: float = 60.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.client = client
        self.max_attempts = max_attempts
        self._sleep = sleep
        self.backoff_base = backoff_base
        self.backoff_cap = backoff_cap

    def quota_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Délai avant la tentative suivante après une erreur de quota."""
        if retry_after is not None:
            return retry_after + 1
        return min(2**attempt * self.backoff_base, self.backoff_cap)

    def _prompt_for(self, request: GenerationRequest, attempt: int) -> str:
        if request.prompt_override:
            return request.prompt_override

        asset_type = AssetType(request.asset_type)
        if asset_type is not AssetType.LOOK:
            return build_prompt(asset_type, request.description, attempt)

        if request.reference_images:
            return build_prompt(
                asset_type,
                request.description,
                attempt,
                additional_context=look_context(LookMode.COMBINE_IMAGES, request.styling_context),
                look_mode=LookMode.COMBINE_IMAGES,
            )
        return self._text_only_prompt(request)

    def _text_only_prompt(self, request: GenerationRequest) -> str:
        return build_prompt(
            AssetType.LOOK,
            text_only_look_description(request.description, request.styling_context),
            1,
            additional_context=look_context(LookMode.TEXT_ONLY, request.styling_context),
            look_mode=LookMode.TEXT_ONLY,
        )

    def _success(self, parsed: ParsedResponse, attempt: int, **extra: Any) -> GenerationOutcome:
        return GenerationOutcome(
            success=True,
            image_data_uri=format_data_uri(parsed.mime_type, parsed.image_data),
            attempts_used=attempt,
            is_real_image=True,
            message=extra.pop("message", "Image generated successfully"),
            **extra,
        )

    def _failure(self, asset_type: AssetType | str, description: str, attempt: int, **extra: Any) -> GenerationOutcome:
        return GenerationOutcome(
            success=False,
            image_data_uri=create_placeholder(AssetType(asset_type).value, description),
            attempts_used=attempt,
            is_real_image=False,
            **extra,
        )

    @staticmethod
    def _is_usable(parsed: ParsedResponse) -> bool:
        return parsed.has_image and is_valid_image(parsed.mime_type, parsed.image_data)

    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        """
        Génère une image pour la demande.

        Returns:
            GenerationOutcome (succès, blocage, quota épuisé ou échec avec remplacement)

        Raises:
            Exception: Erreur inattendue persistante après la dernière tentative
        """
        asset_type = AssetType(request.asset_type)
        params = GenerationParams.for_asset(asset_type)
        last_message = "No image generated"

        if asset_type is AssetType.MODEL:
            check = validate_model_description(request.description)
            if check.issues:
                logger.warning("Model description may trigger safety filters", issues=check.issues)

        for attempt in range(1, self.max_attempts + 1):
            is_last = attempt == self.max_attempts
            prompt = self._prompt_for(request, attempt)

            logger.info(
                "Generation attempt",
                asset_type=asset_type.value,
                attempt=attempt,
                max_attempts=self.max_attempts,
                reference_images=len(request.reference_images),
            )

            try:
                raw = await self.client.generate_image(prompt, request.reference_images, params)
            except ClientNotConfiguredError:
                raise
            except ModelCallError as e:
                if e.is_quota:
                    if is_last:
                        logger.error("Quota exceeded, attempts exhausted", attempt=attempt)
                        return self._failure(
                            asset_type,
                            request.description,
                            attempt,
                            message="API quota exceeded. Please try again later.",
                            error=str(e),
                            error_kind=ErrorKind.QUOTA,
                        )
                    delay = self.quota_delay(attempt, e.retry_after)
                    logger.warning("Quota exceeded, backing off", attempt=attempt, delay=delay)
                    await self._sleep(delay)
                    continue
                if is_last:
                    raise
                logger.warning("Model call failed, retrying", attempt=attempt, kind=e.kind.value, error=str(e))
                continue
            except Exception as e:
                if is_last:
                    raise
                logger.warning("Unexpected generation error, retrying", attempt=attempt, error=str(e))
                continue

            parsed = parse_response(raw)

            if parsed.is_blocked:
                block = parsed.block_info
                logger.warning(
                    "Generation blocked by safety filters",
                    asset_type=asset_type.value,
                    finish_reason=block.finish_reason,
                    attempt=attempt,
                )
                if (
                    asset_type is AssetType.LOOK
                    and attempt == 1
                    and request.styling_context
                    and request.reference_images
                ):
                    fallback = await self._text_only_look(request, params)
                    if fallback is not None:
                        return fallback
                return self._failure(
                    asset_type,
                    request.description,
                    attempt,
                    message=block.finish_message or f"Content blocked by safety filters: {block.finish_reason}",
                    blocked_reason=block.finish_reason,
                )

            if self._is_usable(parsed):
                logger.info("Image generated", asset_type=asset_type.value, attempt=attempt, mime_type=parsed.mime_type)
                return self._success(parsed, attempt)

            last_message = parsed.text_response or "Invalid image data received"
            logger.warning("No valid image in response", attempt=attempt, detail=last_message[:200])

        return self._failure(asset_type, request.description, self.max_attempts, message=last_message)

    async def _text_only_look(self, request: GenerationRequest, params: GenerationParams) -> Optional[GenerationOutcome]:
        """Unique tentative sans images de référence après un blocage de look."""
        logger.info("Retrying look in text-only mode after safety block")
        try:
            raw = await self.client.generate_image(self._text_only_prompt(request), (), params)
        except (ModelCallError, ClientNotConfiguredError) as e:
            logger.warning("Text-only look generation failed", error=str(e))
            return None

        parsed = parse_response(raw)
        if parsed.is_blocked or not self._is_usable(parsed):
            logger.warning("Text-only look generation produced no usable image")
            return None
        return self._success(
            parsed,
            1,
            message="Image generated from text descriptions after a safety block",
            text_only_fallback=True,
        )

    async def edit(
        self,
        item_type: AssetType | str,
        image: ReferenceImage,
        edit_prompt: str,
        full_prompt: Optional[str] = None,
    ) -> GenerationOutcome:
        """
        Édite une image existante en une seule tentative.

        Args:
            item_type: Type de l'image éditée (garment, model, look)
            image: Image originale
            edit_prompt: Instructions de l'utilisateur
            full_prompt: Prompt complet fourni par l'appelant (remplace le template)
        """
        item_type = AssetType(item_type)
        prompt = full_prompt or build_edit_prompt(edit_prompt, item_type)
        description = f"edited {item_type.value}"

        try:
            raw = await self.client.generate_image(prompt, (image,), GenerationParams.for_asset(item_type))
        except ModelCallError as e:
            if not e.is_quota:
                raise
            return self._failure(
                item_type,
                description,
                1,
                message="API quota exceeded. Please try again later.",
                error=str(e),
                error_kind=ErrorKind.QUOTA,
            )

        parsed = parse_response(raw)
        if parsed.is_blocked:
            block = parsed.block_info
            return self._failure(
                item_type,
                description,
                1,
                message=block.finish_message or f"Content blocked by safety filters: {block.finish_reason}",
                blocked_reason=block.finish_reason,
            )
        if self._is_usable(parsed):
            return self._success(parsed, 1, message="Image edited successfully")
        return self._failure(item_type, description, 1, message=parsed.text_response or "No image in edit response")

    async def describe(self, request: GenerationRequest) -> Optional[str]:
        """Description textuelle de secours quand la génération d'image a échoué."""
        prompt = build_prompt(request.asset_type, request.description)
        try:
            text = await self.client.generate_text(prompt)
        except (ModelCallError, ClientNotConfiguredError) as e:
            logger.warning("Text description fallback failed", error=str(e))
            return None
        return text or None

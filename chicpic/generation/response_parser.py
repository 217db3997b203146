"""Analyse des réponses du modèle génératif (image, texte ou blocage)."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from loguru import logger


DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

# Raisons d'arrêt qui signifient un blocage par les filtres de sécurité
SAFETY_FINISH_REASONS = frozenset(
    {
        "SAFETY",
        "IMAGE_SAFETY",
        "RECITATION",
        "PROHIBITED_CONTENT",
        "IMAGE_PROHIBITED_CONTENT",
    }
)


@dataclass(frozen=True)
class ImagePayload:
    """Image encodée en base64."""

    data: str
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE


@dataclass(frozen=True)
class TextPayload:
    """Réponse textuelle (aucune image produite)."""

    text: str


@dataclass(frozen=True)
class BlockedPayload:
    """Génération refusée par les filtres de sécurité."""

    finish_reason: str
    finish_message: Optional[str] = None


ModelPayload = Union[ImagePayload, TextPayload, BlockedPayload]


@dataclass
class ParsedResponse:
    """Résultat normalisé d'une réponse du modèle."""

    payload: ModelPayload
    # Image trouvée dans une réponse malgré tout bloquée (diagnostic uniquement)
    image: Optional[ImagePayload] = None
    debug_info: dict[str, Any] = field(default_factory=dict)

    @property
    def has_image(self) -> bool:
        return isinstance(self.payload, ImagePayload)

    @property
    def is_blocked(self) -> bool:
        return isinstance(self.payload, BlockedPayload)

    @property
    def image_data(self) -> Optional[str]:
        return self.payload.data if isinstance(self.payload, ImagePayload) else None

    @property
    def mime_type(self) -> Optional[str]:
        return self.payload.mime_type if isinstance(self.payload, ImagePayload) else None

    @property
    def text_response(self) -> Optional[str]:
        return self.payload.text if isinstance(self.payload, TextPayload) else None

    @property
    def block_info(self) -> Optional[BlockedPayload]:
        return self.payload if isinstance(self.payload, BlockedPayload) else None


def _field(obj: Any, *names: str) -> Any:
    """Lit un champ sur un objet SDK ou un dict (snake_case ou camelCase)."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, dict):
            if name in obj and obj[name] is not None:
                return obj[name]
        else:
            value = getattr(obj, name, None)
            if value is not None:
                return value
    return None


def _normalize_reason(reason: Any) -> Optional[str]:
    if reason is None:
        return None
    value = getattr(reason, "value", reason)
    return str(value)


def _encode_image_data(data: Any) -> str:
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return str(data)


def parse_response(response: Any) -> ParsedResponse:
    """
    Classe une réponse du modèle en image, texte ou blocage.

    Ne lève jamais d'exception : toute anomalie donne un TextPayload de diagnostic.

    Args:
        response: Réponse SDK (GenerateContentResponse) ou dict équivalent

    Returns:
        ParsedResponse avec le payload et des informations de debug
    """
    try:
        return _parse(response)
    except Exception as e:
        logger.error("Failed to parse model response", error=str(e))
        return ParsedResponse(
            payload=TextPayload(text=f"Error processing response: {e}"),
            debug_info={"error": str(e)},
        )


def _parse(response: Any) -> ParsedResponse:
    candidates = _field(response, "candidates") or []
    if not candidates:
        return ParsedResponse(
            payload=TextPayload(text="No candidates in response"),
            debug_info={"candidates_count": 0},
        )

    candidate = candidates[0]
    finish_reason = _normalize_reason(_field(candidate, "finish_reason", "finishReason"))
    finish_message = _field(candidate, "finish_message", "finishMessage")
    content = _field(candidate, "content")
    parts = _field(content, "parts") or []

    debug_info: dict[str, Any] = {
        "candidates_count": len(candidates),
        "finish_reason": finish_reason,
        "parts_count": len(parts),
    }
    blocked = BlockedPayload(finish_reason, finish_message) if finish_reason in SAFETY_FINISH_REASONS else None

    if not parts:
        if blocked:
            return ParsedResponse(payload=blocked, debug_info=debug_info)
        return ParsedResponse(
            payload=TextPayload(text=f"Response stopped: {finish_reason or 'unknown'}"),
            debug_info=debug_info,
        )

    image: Optional[ImagePayload] = None
    texts: list[str] = []
    for part in parts:
        inline_data = _field(part, "inline_data", "inlineData")
        data = _field(inline_data, "data")
        if data and image is None:
            mime_type = _field(inline_data, "mime_type", "mimeType") or DEFAULT_IMAGE_MIME_TYPE
            image = ImagePayload(data=_encode_image_data(data), mime_type=mime_type)
            continue
        text = _field(part, "text")
        if text:
            texts.append(text)

    debug_info["has_image"] = image is not None
    debug_info["text_parts"] = len(texts)

    if blocked:
        # Le blocage l'emporte sur une éventuelle image
        return ParsedResponse(payload=blocked, image=image, debug_info=debug_info)
    if image is not None:
        return ParsedResponse(payload=image, debug_info=debug_info)
    if texts:
        return ParsedResponse(payload=TextPayload(text=" ".join(texts)), debug_info=debug_info)
    return ParsedResponse(
        payload=TextPayload(text=f"Response stopped: {finish_reason or 'unknown'}"),
        debug_info=debug_info,
    )

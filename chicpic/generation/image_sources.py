"""Chargement des images de référence (data URI, URL http(s) ou base64 brut)."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional

import httpx
from loguru import logger

from chicpic.generation.exceptions import ImageLoadError
from chicpic.utils.retry import retry_network_operation


DEFAULT_MIME_TYPE = "image/jpeg"

_DATA_URI_PATTERN = re.compile(r"^data:([^;,]+);base64,(.*)$", re.DOTALL)

_EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


def format_data_uri(mime_type: str, base64_data: str) -> str:
    """Compose "data:{mime};base64,{data}"."""
    return f"data:{mime_type};base64,{base64_data}"


def parse_data_uri(value: str) -> Optional[tuple[str, str]]:
    """Retourne (mime_type, base64) ou None si la valeur n'est pas une data URI."""
    match = _DATA_URI_PATTERN.match(value.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def _decode(base64_data: str) -> bytes:
    try:
        return base64.b64decode(base64_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError(f"Invalid base64 image data: {e}") from e


def _mime_from_url(url: str) -> str:
    path = url.split("?", 1)[0].lower()
    extension = path.rsplit(".", 1)[-1] if "." in path else ""
    return _EXTENSION_MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


@retry_network_operation()
async def _download(url: str, http_client: httpx.AsyncClient) -> httpx.Response:
    response = await http_client.get(url, follow_redirects=True)
    response.raise_for_status()
    return response


async def load_image_source(
    source: str,
    http_client: Optional[httpx.AsyncClient] = None,
) -> tuple[bytes, str]:
    """
    Charge une image de référence.

    Args:
        source: Data URI, URL http(s) ou base64 brut (considéré comme JPEG)
        http_client: Client httpx réutilisé pour les téléchargements

    Returns:
        Tuple (octets de l'image, type MIME)

    Raises:
        ImageLoadError: Source vide, base64 invalide ou téléchargement impossible
    """
    if not source or not source.strip():
        raise ImageLoadError("Empty image source")

    parsed = parse_data_uri(source)
    if parsed:
        mime_type, base64_data = parsed
        return _decode(base64_data), mime_type

    if source.startswith(("http://", "https://")):
        owns_client = http_client is None
        client = http_client or httpx.AsyncClient(timeout=30.0)
        try:
            response = await _download(source, client)
        except httpx.HTTPError as e:
            logger.error("Failed to download reference image", url=source[:100], error=str(e))
            raise ImageLoadError(f"Failed to load image: {e}") from e
        finally:
            if owns_client:
                await client.aclose()

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip()
        mime_type = content_type if content_type.startswith("image/") else _mime_from_url(source)
        logger.debug("Reference image downloaded", url=source[:100], size=len(response.content))
        return response.content, mime_type

    return _decode(source.strip()), DEFAULT_MIME_TYPE

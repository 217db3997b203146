"""Conversions between request payloads and generation inputs."""

import base64
from typing import Optional

import httpx

from chicpic.generation import ImageLoadError, ReferenceImage
from chicpic.generation.image_sources import load_image_source, parse_data_uri


async def load_reference_image(source: str, http_client: Optional[httpx.AsyncClient] = None) -> ReferenceImage:
    """
    Load a reference image from a data URI, an http(s) URL or bare base64.

    Raises:
        ImageLoadError: If the image cannot be loaded
    """
    data, mime_type = await load_image_source(source, http_client)
    return ReferenceImage(data=data, mime_type=mime_type)


def data_uri_to_bytes(data_uri: str) -> tuple[bytes, str]:
    """Decode a generated image data URI into (bytes, mime type)."""
    parsed = parse_data_uri(data_uri)
    if parsed is None:
        raise ImageLoadError("Generated image is not a data URI")
    mime_type, payload = parsed
    return base64.b64decode(payload), mime_type

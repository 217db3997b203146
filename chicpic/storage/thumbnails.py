"""Miniatures JPEG des images stockées."""

from __future__ import annotations

import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

THUMBNAIL_WIDTH = 300
THUMBNAIL_QUALITY = 60


def make_thumbnail(data: bytes, width: int = THUMBNAIL_WIDTH, quality: int = THUMBNAIL_QUALITY) -> Optional[bytes]:
    """
    Réduit une image à `width` pixels de large (ratio conservé) en JPEG.

    Returns:
        Octets JPEG, ou None si l'image ne peut pas être décodée
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image = image.convert("RGB")
            if image.width > width:
                height = max(1, round(image.height * width / image.width))
                image = image.resize((width, height), Image.LANCZOS)
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("Thumbnail generation failed", error=str(e))
        return None
    return buffer.getvalue()


def thumbnail_path_for(path: str) -> str:
    """Chemin de la miniature associée à une image ("x.jpg" -> "x-thumb.jpg")."""
    stem, dot, _ = path.rpartition(".")
    if not dot:
        return f"{path}-thumb.jpg"
    return f"{stem}-thumb.jpg"

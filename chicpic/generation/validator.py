"""Validation des images renvoyées par le modèle."""

from __future__ import annotations

import re
from typing import Optional

ALLOWED_IMAGE_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/gif",
    }
)

# En dessous, la charge utile ne peut pas être une vraie image
MIN_BASE64_LENGTH = 1000

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")


def is_valid_image(mime_type: Optional[str], base64_data: Optional[str]) -> bool:
    """Vérifie le type MIME, l'alphabet base64 et la taille minimale."""
    if not mime_type or not base64_data:
        return False
    if mime_type.lower() not in ALLOWED_IMAGE_MIME_TYPES:
        return False
    if not _BASE64_PATTERN.match(base64_data):
        return False
    return len(base64_data) >= MIN_BASE64_LENGTH

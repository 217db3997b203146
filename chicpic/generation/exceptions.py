"""Exceptions personnalisées pour la génération d'images et de vidéos."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification structurée des erreurs renvoyées par le fournisseur."""

    QUOTA = "quota"
    NOT_FOUND = "not_found"
    INVALID_REQUEST = "invalid_request"
    UNAVAILABLE = "unavailable"
    OTHER = "other"


class GenerationError(Exception):
    """Erreur générale de génération."""

    pass


class ClientNotConfiguredError(GenerationError):
    """Aucune clé API : le client Gemini n'est pas disponible."""

    pass


class ModelCallError(GenerationError):
    """Erreur lors de l'appel au modèle génératif."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.OTHER,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        # Délai suggéré par le serveur (secondes), uniquement pour QUOTA
        self.retry_after = retry_after

    @property
    def is_quota(self) -> bool:
        return self.kind is ErrorKind.QUOTA


class ImageLoadError(GenerationError):
    """Impossible de charger une image de référence."""

    pass


class VideoGenerationError(GenerationError):
    """Erreur lors de la génération vidéo."""

    pass


class VideoBlockedError(VideoGenerationError):
    """Vidéo filtrée par les politiques de sécurité du fournisseur."""

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.reason = reason

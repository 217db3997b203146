"""Stockage objet des médias générés."""

from chicpic.config.settings import Settings
from chicpic.storage.images import (
    ImageStorage,
    LocalImageStorage,
    SupabaseImageStorage,
    UploadResult,
    generate_filename,
)
from chicpic.storage.thumbnails import make_thumbnail, thumbnail_path_for
from chicpic.utils.exceptions import ConfigurationError


def build_storage(settings: Settings) -> ImageStorage:
    """Crée le backend de stockage configuré (local ou supabase)."""
    backend = settings.storage_backend.lower()
    if backend == "local":
        return LocalImageStorage(settings.local_storage_dir, settings.public_base_url)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for supabase storage")
        return SupabaseImageStorage(
            settings.supabase_url,
            settings.supabase_service_role_key,
            settings.storage_bucket,
        )
    raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend}")


__all__ = [
    "ImageStorage",
    "LocalImageStorage",
    "SupabaseImageStorage",
    "UploadResult",
    "build_storage",
    "generate_filename",
    "make_thumbnail",
    "thumbnail_path_for",
]

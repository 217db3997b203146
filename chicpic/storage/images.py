"""Stockage objet des images et vidéos (système de fichiers local ou Supabase Storage)."""

from __future__ import annotations

import asyncio
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import httpx

from chicpic.storage.thumbnails import make_thumbnail, thumbnail_path_for
from chicpic.utils.exceptions import StorageError
from chicpic.utils.logging import get_logger
from chicpic.utils.retry import retry_network_operation

logger = get_logger(__name__)

MEDIA_URL_PREFIX = "/media"

_RANDOM_ALPHABET = string.ascii_lowercase + string.digits

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


@dataclass
class UploadResult:
    """Résultat d'un upload d'image."""

    url: str
    thumbnail_url: str
    path: str


def generate_filename(base_name: str, suffix: str = "", extension: str = "jpg") -> str:
    """Nom unique "{timestamp}-{aléatoire}-{base}{suffixe}.{extension}"."""
    timestamp = int(time.time() * 1000)
    random_part = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(6))
    return f"{timestamp}-{random_part}-{base_name}{suffix}.{extension}"


def extension_for(content_type: str) -> str:
    """Extension de fichier pour un type MIME d'image (jpg par défaut)."""
    return _EXTENSIONS.get(content_type.split(";")[0].strip().lower(), "jpg")


class ImageStorage:
    """Interface commune aux backends de stockage."""

    async def put(self, path: str, data: bytes, content_type: str, bucket: Optional[str] = None) -> None:
        raise NotImplementedError

    def public_url(self, path: str, bucket: Optional[str] = None) -> str:
        raise NotImplementedError

    async def delete(self, paths: Sequence[str], bucket: Optional[str] = None) -> None:
        raise NotImplementedError

    async def upload_file(self, data: bytes, path: str, content_type: str, bucket: Optional[str] = None) -> str:
        """Stocke un fichier au chemin donné et retourne son URL publique."""
        await self.put(path, data, content_type, bucket)
        return self.public_url(path, bucket)

    async def upload_image(self, data: bytes, folder: str, content_type: str = "image/jpeg") -> UploadResult:
        """
        Stocke une image et sa miniature dans un dossier (garments, models, looks).

        La miniature est facultative : en cas d'échec, l'URL de l'original est réutilisée.

        Raises:
            StorageError: L'upload de l'image originale a échoué
        """
        path = f"{folder}/{generate_filename(folder, extension=extension_for(content_type))}"
        url = await self.upload_file(data, path, content_type)

        thumbnail_url = url
        thumbnail = await asyncio.to_thread(make_thumbnail, data)
        if thumbnail is not None:
            try:
                thumbnail_url = await self.upload_file(thumbnail, thumbnail_path_for(path), "image/jpeg")
            except StorageError as e:
                logger.warning("Thumbnail upload failed, using original", path=path, error=str(e))

        logger.info("Image uploaded", path=path, size=len(data), has_thumbnail=thumbnail_url != url)
        return UploadResult(url=url, thumbnail_url=thumbnail_url, path=path)

    async def delete_image(self, path: str) -> None:
        """Supprime une image et sa miniature."""
        await self.delete([path, thumbnail_path_for(path)])


class LocalImageStorage(ImageStorage):
    """Fichiers écrits sur disque et servis par l'application sous /media."""

    def __init__(self, base_dir: str | Path, base_url: str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str, bucket: Optional[str] = None) -> Path:
        root = (self.base_dir / bucket) if bucket else self.base_dir
        target = (root / path).resolve()
        if not target.is_relative_to(self.base_dir.resolve()):
            raise StorageError(f"Path escapes storage directory: {path}")
        return target

    async def put(self, path: str, data: bytes, content_type: str, bucket: Optional[str] = None) -> None:
        target = self._resolve(path, bucket)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(target.write_bytes, data)
        except OSError as e:
            logger.error("Local storage write failed", path=path, error=str(e))
            raise StorageError(f"Failed to write {path}: {e}") from e

    def public_url(self, path: str, bucket: Optional[str] = None) -> str:
        prefix = f"{bucket}/" if bucket else ""
        return f"{self.base_url}{MEDIA_URL_PREFIX}/{prefix}{path}"

    async def delete(self, paths: Sequence[str], bucket: Optional[str] = None) -> None:
        for path in paths:
            target = self._resolve(path, bucket)
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Failed to delete {path}: {e}") from e
        logger.info("Files deleted", count=len(paths))


class SupabaseImageStorage(ImageStorage):
    """Backend Supabase Storage via son API REST."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        bucket: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.bucket = bucket
        self._headers = {
            "Authorization": f"Bearer {service_role_key}",
            "apikey": service_role_key,
        }
        self._client = http_client or httpx.AsyncClient(timeout=60.0)

    @retry_network_operation()
    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        return await self._client.request(method, url, headers={**self._headers, **kwargs.pop("headers", {})}, **kwargs)

    async def put(self, path: str, data: bytes, content_type: str, bucket: Optional[str] = None) -> None:
        bucket = bucket or self.bucket
        try:
            response = await self._request(
                "POST",
                f"{self.url}/storage/v1/object/{bucket}/{path}",
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "false"},
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Upload failed for {path}: {e}") from e

        if response.status_code >= 400:
            logger.error("Supabase upload failed", path=path, status_code=response.status_code, body=response.text[:200])
            raise StorageError(f"Upload failed for {path}: HTTP {response.status_code}")

    def public_url(self, path: str, bucket: Optional[str] = None) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket or self.bucket}/{path}"

    async def delete(self, paths: Sequence[str], bucket: Optional[str] = None) -> None:
        bucket = bucket or self.bucket
        try:
            response = await self._request(
                "DELETE",
                f"{self.url}/storage/v1/object/{bucket}",
                json={"prefixes": list(paths)},
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Delete failed: {e}") from e

        if response.status_code >= 400:
            logger.error("Supabase delete failed", paths=list(paths), status_code=response.status_code)
            raise StorageError(f"Delete failed: HTTP {response.status_code}")
        logger.info("Files deleted", count=len(paths), bucket=bucket)

    async def close(self) -> None:
        await self._client.aclose()

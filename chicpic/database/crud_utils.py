"""Helpers shared by the asset CRUD modules."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError, DatabaseError, ValidationError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)


async def flush(db: AsyncSession, kind: str) -> None:
    """Flush pending changes, wrapping driver errors in DatabaseError."""
    try:
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("Database flush failed", kind=kind, error=str(e))
        raise DatabaseError(f"{kind} could not be saved: {e}") from e


def apply_updates(obj: Any, updates: dict[str, Any], allowed: Iterable[str]) -> list[str]:
    """
    Set the allowed, non-None fields of `updates` on `obj`.

    Returns:
        Names of the fields that were changed

    Raises:
        ValidationError: If a field is not updatable
    """
    allowed = set(allowed)
    unknown = set(updates) - allowed
    if unknown:
        raise ValidationError(f"Fields not updatable: {', '.join(sorted(unknown))}")

    changed = []
    for name, value in updates.items():
        if value is None:
            continue
        setattr(obj, name, value)
        changed.append(name)
    return changed


async def delete_asset(
    db: AsyncSession,
    obj: Optional[Any],
    kind: str,
    asset_id: Any,
    storage: Optional[ImageStorage] = None,
) -> None:
    """Remove the stored image (and thumbnail) then the row."""
    if obj is None:
        raise AssetNotFoundError(f"{kind} {asset_id} not found")

    if storage is not None and obj.storage_path:
        await storage.delete_image(obj.storage_path)

    await db.delete(obj)
    await flush(db, kind)
    logger.info("Asset deleted", kind=kind, asset_id=str(asset_id), storage_path=obj.storage_path)

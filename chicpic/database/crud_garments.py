"""CRUD operations for garments."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.database.crud_utils import apply_updates, delete_asset, flush
from chicpic.database.models import Garment
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "category",
    "color",
    "available_sizes",
    "image_url",
    "thumbnail_url",
    "storage_path",
)


async def add_garment(
    db: AsyncSession,
    name: str,
    category: str,
    image_url: str,
    description: str = "",
    color: Optional[str] = None,
    available_sizes: Optional[list[str]] = None,
    thumbnail_url: Optional[str] = None,
    storage_path: Optional[str] = None,
) -> Garment:
    """
    Create a garment.

    Args:
        db: Database session
        name: Garment name
        category: camiseta, pantalon, vestido, falda, camisa, chaqueta, zapatos or accesorios
        image_url: Public URL of the catalog image
        description: Free text description
        color: Main color
        available_sizes: Sizes the garment exists in
        thumbnail_url: Public URL of the thumbnail
        storage_path: Object path in storage (used on delete)

    Returns:
        Created Garment
    """
    garment = Garment(
        name=name,
        category=category,
        image_url=image_url,
        description=description,
        color=color,
        available_sizes=list(available_sizes or []),
        thumbnail_url=thumbnail_url,
        storage_path=storage_path,
    )
    db.add(garment)
    await flush(db, "Garment")

    logger.info("Garment created", garment_id=str(garment.id), category=category)
    return garment


async def get_garments(db: AsyncSession, category: Optional[str] = None) -> list[Garment]:
    """List garments, newest first."""
    stmt = select(Garment).order_by(Garment.created_at.desc())
    if category:
        stmt = stmt.where(Garment.category == category)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_garment(db: AsyncSession, garment_id: UUID) -> Optional[Garment]:
    return await db.get(Garment, garment_id)


async def get_garments_by_ids(db: AsyncSession, garment_ids: list[UUID]) -> list[Garment]:
    """Garments in the order of `garment_ids`; unknown ids are skipped."""
    if not garment_ids:
        return []
    result = await db.execute(select(Garment).where(Garment.id.in_(garment_ids)))
    by_id = {garment.id: garment for garment in result.scalars().all()}
    return [by_id[garment_id] for garment_id in garment_ids if garment_id in by_id]


async def update_garment(db: AsyncSession, garment_id: UUID, **updates: Any) -> Garment:
    """
    Update a garment.

    Raises:
        AssetNotFoundError: Unknown garment
        ValidationError: Field not updatable
    """
    garment = await get_garment(db, garment_id)
    if garment is None:
        raise AssetNotFoundError(f"Garment {garment_id} not found")

    changed = apply_updates(garment, updates, UPDATABLE_FIELDS)
    await flush(db, "Garment")

    logger.info("Garment updated", garment_id=str(garment_id), fields=changed)
    return garment


async def delete_garment(db: AsyncSession, garment_id: UUID, storage: Optional[ImageStorage] = None) -> None:
    """Delete a garment and its stored image."""
    garment = await get_garment(db, garment_id)
    await delete_asset(db, garment, "Garment", garment_id, storage)

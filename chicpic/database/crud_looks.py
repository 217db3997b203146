"""CRUD operations for styled looks."""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.database.crud_garments import get_garments_by_ids
from chicpic.database.crud_models import get_model
from chicpic.database.crud_utils import apply_updates, delete_asset, flush
from chicpic.database.models import StyledLook
from chicpic.sizing import compute_garment_fits
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError, ValidationError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "image_url",
    "thumbnail_url",
    "storage_path",
)


async def add_look(
    db: AsyncSession,
    name: str,
    model_id: UUID,
    garment_ids: list[UUID],
    image_url: str,
    description: Optional[str] = None,
    selected_sizes: Optional[Mapping[str, str]] = None,
    thumbnail_url: Optional[str] = None,
    storage_path: Optional[str] = None,
) -> StyledLook:
    """
    Create a look and compute how each garment fits the model.

    Args:
        db: Database session
        name: Look name
        model_id: Model wearing the garments
        garment_ids: Garments worn, in display order
        image_url: Public URL of the look image
        description: Free text description
        selected_sizes: Chosen size per garment id (defaults to the model's size)
        thumbnail_url: Public URL of the thumbnail
        storage_path: Object path in storage

    Returns:
        Created StyledLook

    Raises:
        AssetNotFoundError: Unknown model or garment
        ValidationError: Size not valid for the garment category
    """
    model = await get_model(db, model_id)
    if model is None:
        raise AssetNotFoundError(f"Model {model_id} not found")

    garments = await get_garments_by_ids(db, garment_ids)
    missing = {str(garment_id) for garment_id in garment_ids} - {str(garment.id) for garment in garments}
    if missing:
        raise AssetNotFoundError(f"Garments not found: {', '.join(sorted(missing))}")

    try:
        garment_fits = compute_garment_fits(model, garments, selected_sizes)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    look = StyledLook(
        name=name,
        model_id=model_id,
        garment_ids=[str(garment_id) for garment_id in garment_ids],
        description=description,
        garment_fits=garment_fits,
        image_url=image_url,
        thumbnail_url=thumbnail_url,
        storage_path=storage_path,
    )
    db.add(look)
    await flush(db, "Look")

    logger.info("Look created", look_id=str(look.id), model_id=str(model_id), garments=len(garment_ids))
    return look


async def get_looks(db: AsyncSession, model_id: Optional[UUID] = None) -> list[StyledLook]:
    """List looks, newest first."""
    stmt = select(StyledLook).order_by(StyledLook.created_at.desc())
    if model_id:
        stmt = stmt.where(StyledLook.model_id == model_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_look(db: AsyncSession, look_id: UUID) -> Optional[StyledLook]:
    return await db.get(StyledLook, look_id)


async def update_look(db: AsyncSession, look_id: UUID, **updates: Any) -> StyledLook:
    look = await get_look(db, look_id)
    if look is None:
        raise AssetNotFoundError(f"Look {look_id} not found")

    changed = apply_updates(look, updates, UPDATABLE_FIELDS)
    await flush(db, "Look")

    logger.info("Look updated", look_id=str(look_id), fields=changed)
    return look


async def delete_look(db: AsyncSession, look_id: UUID, storage: Optional[ImageStorage] = None) -> None:
    look = await get_look(db, look_id)
    await delete_asset(db, look, "Look", look_id, storage)

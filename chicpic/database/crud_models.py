"""CRUD operations for fashion models."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.database.crud_utils import apply_updates, delete_asset, flush
from chicpic.database.models import FashionModel
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError, ValidationError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

DESCRIPTIVE_FIELDS = (
    "age",
    "height",
    "body_type",
    "hair_color",
    "eye_color",
    "skin_tone",
    "upper_body_size",
    "lower_body_size",
    "shoe_size",
)

UPDATABLE_FIELDS = (
    "name",
    "characteristics",
    "gender",
    *DESCRIPTIVE_FIELDS,
    "image_url",
    "thumbnail_url",
    "storage_path",
)


async def add_model(
    db: AsyncSession,
    name: str,
    gender: str,
    image_url: str,
    characteristics: str = "",
    thumbnail_url: Optional[str] = None,
    storage_path: Optional[str] = None,
    **attributes: Optional[str],
) -> FashionModel:
    """
    Create a fashion model.

    Args:
        db: Database session
        name: Model name
        gender: masculino, femenino or unisex
        image_url: Public URL of the model image
        characteristics: Free text characteristics
        thumbnail_url: Public URL of the thumbnail
        storage_path: Object path in storage
        **attributes: age, height, body_type, hair_color, eye_color, skin_tone,
            upper_body_size, lower_body_size, shoe_size

    Returns:
        Created FashionModel
    """
    unknown = set(attributes) - set(DESCRIPTIVE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown model attributes: {', '.join(sorted(unknown))}")

    model = FashionModel(
        name=name,
        gender=gender,
        image_url=image_url,
        characteristics=characteristics,
        thumbnail_url=thumbnail_url,
        storage_path=storage_path,
        **attributes,
    )
    db.add(model)
    await flush(db, "Model")

    logger.info("Model created", model_id=str(model.id), gender=gender)
    return model


async def get_models(db: AsyncSession) -> list[FashionModel]:
    """List models, newest first."""
    result = await db.execute(select(FashionModel).order_by(FashionModel.created_at.desc()))
    return list(result.scalars().all())


async def get_model(db: AsyncSession, model_id: UUID) -> Optional[FashionModel]:
    return await db.get(FashionModel, model_id)


async def update_model(db: AsyncSession, model_id: UUID, **updates: Any) -> FashionModel:
    model = await get_model(db, model_id)
    if model is None:
        raise AssetNotFoundError(f"Model {model_id} not found")

    changed = apply_updates(model, updates, UPDATABLE_FIELDS)
    await flush(db, "Model")

    logger.info("Model updated", model_id=str(model_id), fields=changed)
    return model


async def delete_model(db: AsyncSession, model_id: UUID, storage: Optional[ImageStorage] = None) -> None:
    """Delete a model, its stored image and (by cascade) its looks."""
    model = await get_model(db, model_id)
    if model is not None:
        await db.refresh(model, attribute_names=["looks"])
        for look in model.looks:
            if storage is not None and look.storage_path:
                await storage.delete_image(look.storage_path)
    await delete_asset(db, model, "Model", model_id, storage)

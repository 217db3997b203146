"""API routes for fashion models."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.api.dependencies import get_db_session as get_db
from chicpic.api.dependencies import get_storage
from chicpic.api.schemas.assets import FashionModelCreate, FashionModelResponse, FashionModelUpdate
from chicpic.database.crud_models import add_model, delete_model, get_model, get_models, update_model
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError

router = APIRouter(prefix="/models", tags=["Models"])


@router.get("", response_model=List[FashionModelResponse], summary="List models")
async def list_models(db: AsyncSession = Depends(get_db)) -> List[FashionModelResponse]:
    """Models, newest first."""
    return [FashionModelResponse.model_validate(model) for model in await get_models(db)]


@router.get("/{model_id}", response_model=FashionModelResponse, summary="Get a model")
async def read_model(model_id: UUID, db: AsyncSession = Depends(get_db)) -> FashionModelResponse:
    model = await get_model(db, model_id)
    if model is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Model {model_id} not found")
    return FashionModelResponse.model_validate(model)


@router.post(
    "",
    response_model=FashionModelResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a model",
)
async def create_model(payload: FashionModelCreate, db: AsyncSession = Depends(get_db)) -> FashionModelResponse:
    model = await add_model(db, **payload.model_dump())
    return FashionModelResponse.model_validate(model)


@router.patch("/{model_id}", response_model=FashionModelResponse, summary="Update a model")
async def patch_model(
    model_id: UUID,
    payload: FashionModelUpdate,
    db: AsyncSession = Depends(get_db),
) -> FashionModelResponse:
    try:
        model = await update_model(db, model_id, **payload.model_dump(exclude_unset=True))
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return FashionModelResponse.model_validate(model)


@router.delete(
    "/{model_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a model",
    description="Delete the stored image, the model and its looks.",
)
async def remove_model(
    model_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
) -> Response:
    try:
        await delete_model(db, model_id, storage)
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)

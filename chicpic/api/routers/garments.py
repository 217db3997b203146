"""API routes for garments."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.api.dependencies import get_db_session as get_db
from chicpic.api.dependencies import get_storage
from chicpic.api.schemas.assets import GarmentCreate, GarmentResponse, GarmentUpdate
from chicpic.database.crud_garments import add_garment, delete_garment, get_garment, get_garments, update_garment
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/garments", tags=["Garments"])


@router.get(
    "",
    response_model=List[GarmentResponse],
    summary="List garments",
    description="Garments of the catalog, newest first.",
)
async def list_garments(
    category: Optional[str] = Query(None, description="Filter by category"),
    db: AsyncSession = Depends(get_db),
) -> List[GarmentResponse]:
    garments = await get_garments(db, category=category)
    return [GarmentResponse.model_validate(garment) for garment in garments]


@router.get("/{garment_id}", response_model=GarmentResponse, summary="Get a garment")
async def read_garment(garment_id: UUID, db: AsyncSession = Depends(get_db)) -> GarmentResponse:
    garment = await get_garment(db, garment_id)
    if garment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Garment {garment_id} not found",
        )
    return GarmentResponse.model_validate(garment)


@router.post(
    "",
    response_model=GarmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a garment",
)
async def create_garment(payload: GarmentCreate, db: AsyncSession = Depends(get_db)) -> GarmentResponse:
    garment = await add_garment(db, **payload.model_dump())
    return GarmentResponse.model_validate(garment)


@router.patch("/{garment_id}", response_model=GarmentResponse, summary="Update a garment")
async def patch_garment(
    garment_id: UUID,
    payload: GarmentUpdate,
    db: AsyncSession = Depends(get_db),
) -> GarmentResponse:
    try:
        garment = await update_garment(db, garment_id, **payload.model_dump(exclude_unset=True))
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return GarmentResponse.model_validate(garment)


@router.delete(
    "/{garment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a garment",
    description="Delete the stored image and thumbnail, then the garment.",
)
async def remove_garment(
    garment_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
) -> Response:
    try:
        await delete_garment(db, garment_id, storage)
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)

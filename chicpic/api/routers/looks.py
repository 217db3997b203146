"""API routes for styled looks."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.api.dependencies import get_db_session as get_db
from chicpic.api.dependencies import get_storage
from chicpic.api.schemas.assets import LookCreate, LookResponse, LookUpdate
from chicpic.database.crud_looks import add_look, delete_look, get_look, get_looks, update_look
from chicpic.storage import ImageStorage
from chicpic.utils.exceptions import AssetNotFoundError, ValidationError
from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/looks", tags=["Looks"])


@router.get("", response_model=List[LookResponse], summary="List looks")
async def list_looks(
    model_id: Optional[UUID] = Query(None, description="Filter by model"),
    db: AsyncSession = Depends(get_db),
) -> List[LookResponse]:
    return [LookResponse.model_validate(look) for look in await get_looks(db, model_id=model_id)]


@router.get("/{look_id}", response_model=LookResponse, summary="Get a look")
async def read_look(look_id: UUID, db: AsyncSession = Depends(get_db)) -> LookResponse:
    look = await get_look(db, look_id)
    if look is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Look {look_id} not found")
    return LookResponse.model_validate(look)


@router.post(
    "",
    response_model=LookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a look",
    description="""
    Save a look. The fit of each garment on the model is computed from the
    model's sizes (upper body, lower body, shoes) and the selected garment sizes.
    """,
)
async def create_look(payload: LookCreate, db: AsyncSession = Depends(get_db)) -> LookResponse:
    """
    Create a look.

    Raises:
        HTTPException: 404 if the model or a garment does not exist
        HTTPException: 400 if a selected size cannot be compared for its category
    """
    try:
        look = await add_look(db, **payload.model_dump())
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        logger.warning("Invalid look sizes", error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return LookResponse.model_validate(look)


@router.patch("/{look_id}", response_model=LookResponse, summary="Update a look")
async def patch_look(look_id: UUID, payload: LookUpdate, db: AsyncSession = Depends(get_db)) -> LookResponse:
    try:
        look = await update_look(db, look_id, **payload.model_dump(exclude_unset=True))
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return LookResponse.model_validate(look)


@router.delete("/{look_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a look")
async def remove_look(
    look_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
) -> Response:
    try:
        await delete_look(db, look_id, storage)
    except AssetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Schemas for garments, models and looks."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StoredImageFields(BaseModel):
    image_url: str = Field(..., min_length=1)
    thumbnail_url: Optional[str] = None
    storage_path: Optional[str] = None


class GarmentCreate(StoredImageFields):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: str = Field(..., description="camiseta, pantalon, vestido, falda, camisa, chaqueta, zapatos, accesorios")
    color: Optional[str] = None
    available_sizes: List[str] = Field(default_factory=list)


class GarmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    available_sizes: Optional[List[str]] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    storage_path: Optional[str] = None


class GarmentResponse(GarmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class ModelAttributes(BaseModel):
    age: Optional[str] = None
    height: Optional[str] = None
    body_type: Optional[str] = None
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    skin_tone: Optional[str] = None
    upper_body_size: Optional[str] = None
    lower_body_size: Optional[str] = None
    shoe_size: Optional[str] = None


class FashionModelCreate(StoredImageFields, ModelAttributes):
    name: str = Field(..., min_length=1, max_length=255)
    characteristics: str = ""
    gender: str = Field(..., description="masculino, femenino or unisex")


class FashionModelUpdate(ModelAttributes):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    characteristics: Optional[str] = None
    gender: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    storage_path: Optional[str] = None


class FashionModelResponse(FashionModelCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class GarmentFit(BaseModel):
    garment_id: str
    selected_size: str
    model_size: str
    fit_type: str
    fit_description: str


class LookCreate(StoredImageFields):
    model_config = ConfigDict(protected_namespaces=())

    name: str = Field(..., min_length=1, max_length=255)
    model_id: UUID
    garment_ids: List[UUID] = Field(..., min_length=1)
    description: Optional[str] = None
    selected_sizes: Dict[str, str] = Field(default_factory=dict, description="Chosen size per garment id")


class LookUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    storage_path: Optional[str] = None


class LookResponse(StoredImageFields):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: UUID
    name: str
    model_id: UUID
    garment_ids: List[str]
    description: Optional[str] = None
    garment_fits: List[GarmentFit] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

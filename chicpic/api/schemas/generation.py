"""Schemas for image generation, edition and catalog processing."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Request schema for image generation."""

    model_config = ConfigDict(protected_namespaces=())

    type: str = Field(..., description="Asset type: garment, model or look")
    description: str = Field(..., max_length=4000, description="Free or structured description (may be blank for looks)")
    garment_images: List[str] = Field(
        default_factory=list,
        description="Garment reference images (data URI, http(s) URL or base64), looks only",
    )
    model_image: Optional[str] = Field(None, description="Model reference image, looks only")
    garments: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Garment descriptors (name, category, color) used in text-only looks",
    )
    styling_data: Optional[Dict[str, Any]] = Field(None, description="Extra styling context for looks")


class GenerateResponse(BaseModel):
    """Response schema for image generation. Failures still carry a placeholder image."""

    success: bool
    image_data_uri: Optional[str] = None
    message: str = ""
    is_real_image: bool = False
    attempts: Optional[int] = None
    model: Optional[str] = None
    ai_description: Optional[str] = None
    text_only_fallback: bool = False
    safety_blocked: bool = False
    blocked_reason: Optional[str] = None
    quota_exceeded: bool = False
    error: Optional[str] = None
    details: Optional[str] = None


class EditData(BaseModel):
    """Edit instructions for an existing image."""

    original_image_base64: str = Field(..., min_length=1, description="Image to edit (data URI or base64)")
    edit_prompt: str = Field(..., description="User instructions")
    item_type: str = Field("garment", description="garment, model or look")
    full_prompt: Optional[str] = Field(None, description="Complete prompt overriding the edit template")


class EditImageRequest(BaseModel):
    """Request schema for image edition."""

    type: str = Field("edit", description="Must be 'edit'")
    edit_data: EditData


class ProcessImageRequest(BaseModel):
    """Request schema for catalog processing of a user photo."""

    image_url: str = Field(..., min_length=1, description="Photo to process (http(s) URL or data URI)")
    annotations: Optional[str] = Field(None, max_length=2000, description="Instructions for the model")


class ProcessGarmentResponse(BaseModel):
    success: bool
    processed_image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    storage_path: Optional[str] = None
    is_real_image: bool = True
    garment_data: Dict[str, Any] = Field(default_factory=dict)
    message: str = ""


class ProcessModelResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    success: bool
    processed_image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    storage_path: Optional[str] = None
    is_real_image: bool = True
    model_data: Dict[str, Any] = Field(default_factory=dict)
    message: str = ""

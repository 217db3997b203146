"""Schemas for promotional video generation."""

from typing import List, Optional

from pydantic import BaseModel, Field


class LookImageInput(BaseModel):
    image_url: str = Field(..., min_length=1, description="Look image (http(s) URL or data URI)")
    name: str = Field(..., min_length=1)
    description: str = ""


class VideoGenerationRequest(BaseModel):
    look_images: List[LookImageInput] = Field(..., min_length=1, max_length=3)
    description: str = Field(..., min_length=1, max_length=2000)


class VideoGenerationResponse(BaseModel):
    success: bool
    video_url: Optional[str] = None
    storage_path: Optional[str] = None
    message: str = ""

"""
Image upload I/O models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImageSize(BaseModel):
    width: int
    height: int


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    storage: str = Field(description="cloudinary or local")
    original_size: ImageSize
    processed_size: ImageSize

"""Small schemas shared by several endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AuthorSummary(BaseModel):
    """Name and email of the user who owns a listing, post or activity."""

    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = Field(default=None, description="Human readable outcome")

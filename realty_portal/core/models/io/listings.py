"""
Listing I/O models for API requests and responses.

Request bodies are deliberately loose (numbers may arrive as strings from
HTML forms); the detailed rules live in ``content.validation`` so the
error messages stay user facing.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .common import AuthorSummary

NumberInput = Optional[Union[int, float, str]]


class ListingWrite(BaseModel):
    """Schema for creating or updating a listing."""

    title: Optional[str] = None
    description: Optional[str] = None
    price: NumberInput = None
    location: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    property_type: Optional[str] = Field(default=None, description="condominium, house-and-lot, townhouse, ...")
    listing_type: Optional[str] = Field(default=None, description="sale or rent")
    bedrooms: NumberInput = None
    bathrooms: NumberInput = None
    size: NumberInput = None
    parking: NumberInput = None
    year_built: NumberInput = None
    floor: NumberInput = None
    total_floors: NumberInput = None
    images: Optional[List[str]] = None
    amenities: Optional[Union[List[Any], Dict[str, Any]]] = None
    available: Optional[bool] = None
    is_published: Optional[bool] = Field(default=None, description="Honoured for admins only")


class ListingRead(BaseModel):
    """Schema for reading a listing."""

    id: str
    property_id: Optional[str] = None
    title: str
    description: str
    price: Optional[float] = None
    location: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    size: Optional[float] = None
    parking: Optional[int] = None
    year_built: Optional[int] = None
    floor: Optional[int] = None
    total_floors: Optional[int] = None
    images: List[str] = Field(default_factory=list)
    amenities: Optional[Union[List[Any], Dict[str, Any]]] = None
    available: bool = True
    user_id: str
    is_published: bool
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    location_display: Optional[str] = Field(default=None, description="Short location for cards")
    location_label: Optional[str] = Field(default=None, description="Longer location line for the detail page")
    user: Optional[AuthorSummary] = None

    class Config:
        from_attributes = True


class ListingResponse(BaseModel):
    success: bool = True
    listing: ListingRead


class ListingListResponse(BaseModel):
    listings: List[ListingRead]
    total: int
    limit: Optional[int] = None
    offset: int = 0


class CityGroups(BaseModel):
    cities: List[str]
    metro_manila: List[str]
    outside: List[str]

"""
Property listing entity models.

A listing is submitted by an agent (or any signed-in user), stays hidden
from the public until an admin approves it, and carries a human-friendly
``property_id`` of the form ``TSR-XXXXXX``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ListingBase(Base):
    """Base fields for a property listing."""

    title: str = Field(max_length=200)
    description: str = Field(sa_column=Column(Text, nullable=False))
    price: float = Field(default=0)
    location: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=100, index=True)
    address: Optional[str] = Field(default=None, max_length=500)
    property_type: Optional[str] = Field(default=None, max_length=32, description="condominium, house-and-lot, ...")
    listing_type: Optional[str] = Field(default=None, max_length=8, description="sale or rent")
    bedrooms: Optional[int] = Field(default=None)
    bathrooms: Optional[float] = Field(default=None)
    size: Optional[float] = Field(default=None, description="Floor area in square metres")
    parking: Optional[int] = Field(default=None)
    year_built: Optional[int] = Field(default=None)
    floor: Optional[int] = Field(default=None)
    total_floors: Optional[int] = Field(default=None)
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    amenities: Optional[Union[list[str], dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))
    available: bool = Field(default=True)


class Listing(ListingBase, table=True):
    """Persistent property listing.

    Table: listings
    """

    __tablename__ = "listings"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    property_id: Optional[str] = Field(default=None, max_length=16, unique=True, index=True)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=64)

    is_published: bool = Field(default=False, index=True)
    approved_by: Optional[str] = Field(default=None, foreign_key="users.id", ondelete="SET NULL", max_length=64)
    approved_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Listing(id={self.id}, property_id={self.property_id}, published={self.is_published})"

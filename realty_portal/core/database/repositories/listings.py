"""
Listing repository.

Data access for property listings: visibility-aware browsing with the
author attached, filtering, the distinct city list and property-id
uniqueness checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select

from ..base import utc_now
from ..entities.listings import Listing
from ..entities.users import User
from ..retry import db_retry
from .base import AsyncBaseRepository, QueryBuilder


@dataclass
class ListingFilters:
    """Browse filters accepted by :meth:`ListingRepository.list_visible`."""

    listing_type: Optional[str] = None
    property_type: Optional[str] = None
    city: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    min_size: Optional[float] = None
    max_size: Optional[float] = None
    search: Optional[str] = None
    user_id: Optional[str] = None

    def apply(self, stmt):
        if self.listing_type:
            stmt = stmt.where(Listing.listing_type == self.listing_type)
        if self.property_type:
            stmt = stmt.where(Listing.property_type == self.property_type)
        if self.city:
            stmt = stmt.where(func.lower(Listing.city) == self.city.lower())
        if self.location:
            pattern = f"%{self.location}%"
            stmt = stmt.where(
                or_(
                    Listing.location.ilike(pattern),
                    Listing.city.ilike(pattern),
                    Listing.address.ilike(pattern),
                )
            )
        if self.min_price is not None:
            stmt = stmt.where(Listing.price >= self.min_price)
        if self.max_price is not None:
            stmt = stmt.where(Listing.price <= self.max_price)
        # bedroom and bathroom filters are minimums
        if self.bedrooms is not None:
            stmt = stmt.where(Listing.bedrooms >= self.bedrooms)
        if self.bathrooms is not None:
            stmt = stmt.where(Listing.bathrooms >= self.bathrooms)
        if self.min_size is not None:
            stmt = stmt.where(Listing.size >= self.min_size)
        if self.max_size is not None:
            stmt = stmt.where(Listing.size <= self.max_size)
        if self.search:
            pattern = f"%{self.search}%"
            stmt = stmt.where(
                or_(
                    Listing.title.ilike(pattern),
                    Listing.description.ilike(pattern),
                    Listing.location.ilike(pattern),
                    Listing.property_id.ilike(pattern),
                )
            )
        if self.user_id:
            stmt = stmt.where(Listing.user_id == self.user_id)
        return stmt


def visibility_clause(viewer_id: Optional[str], published_only: bool):
    """Published rows for everyone; a signed-in viewer also sees their own drafts."""
    if published_only or not viewer_id:
        return Listing.is_published == True  # noqa: E712
    return or_(Listing.is_published == True, Listing.user_id == viewer_id)  # noqa: E712


class ListingRepository(AsyncBaseRepository[Listing]):
    """Repository for property listings."""

    def __init__(self, session) -> None:
        super().__init__(session, Listing)

    async def update(self, listing: Listing) -> Listing:
        listing.updated_at = utc_now()
        return await super().update(listing)

    @db_retry
    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Listing]:
        """List listings newest first, filtered by column equality.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (user_id, is_published, listing_type, ...)

        Returns:
            List of Listing instances
        """
        stmt = select(Listing).order_by(Listing.created_at.desc())
        stmt = QueryBuilder.apply_filters(stmt, Listing, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @db_retry
    async def list_visible(
        self,
        *,
        viewer_id: Optional[str] = None,
        published_only: bool = False,
        filters: Optional[ListingFilters] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Tuple[Listing, User]], int]:
        """Browse listings the viewer may see, newest first, with their authors.

        Returns:
            ``([(listing, author), ...], total_matching)``
        """
        filters = filters or ListingFilters()
        clause = visibility_clause(viewer_id, published_only)

        stmt = select(Listing, User).join(User, User.id == Listing.user_id).where(clause)
        stmt = filters.apply(stmt).order_by(Listing.created_at.desc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)

        count_stmt = filters.apply(select(func.count()).select_from(Listing).where(clause))

        rows = (await self.session.execute(stmt)).all()
        total = (await self.session.execute(count_stmt)).scalar_one()
        return [(listing, author) for listing, author in rows], int(total)

    @db_retry
    async def get_with_author(self, listing_id: str) -> Optional[Tuple[Listing, User]]:
        stmt = select(Listing, User).join(User, User.id == Listing.user_id).where(Listing.id == listing_id)
        row = (await self.session.execute(stmt)).first()
        return (row[0], row[1]) if row else None

    @db_retry
    async def property_id_exists(self, property_id: str) -> bool:
        stmt = select(Listing.id).where(Listing.property_id == property_id)
        return (await self.session.execute(stmt)).first() is not None

    @db_retry
    async def distinct_cities(self, published_only: bool = True) -> List[str]:
        """Distinct non-empty cities, alphabetically."""
        stmt = select(Listing.city).where(Listing.city.is_not(None), Listing.city != "").distinct()
        if published_only:
            stmt = stmt.where(Listing.is_published == True)  # noqa: E712
        result = await self.session.execute(stmt.order_by(Listing.city))
        return [city for city in result.scalars().all() if city and city.strip()]

    @db_retry
    async def list_with_authors(self) -> List[Tuple[Listing, User]]:
        """Every listing with its author, newest first (export)."""
        stmt = select(Listing, User).join(User, User.id == Listing.user_id).order_by(Listing.created_at.desc())
        return [(listing, author) for listing, author in (await self.session.execute(stmt)).all()]

"""
Listing Endpoints.

Public browsing of approved listings plus the authoring flow used by
agents: create (pending approval), edit and delete. Photos attached to a
listing are also spread through its description.
"""

import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.auth.deps import get_optional_user, require_user
from realty_portal.auth.session_tokens import SessionClaims
from realty_portal.content.interleave import distribute_images, strip_inline_images
from realty_portal.content.location import group_cities_for_filter
from realty_portal.content.validation import safe_parse_float, safe_parse_int, validate_listing_input
from realty_portal.core.database import get_session
from realty_portal.core.database.base import utc_now
from realty_portal.core.database.entities import Listing
from realty_portal.core.database.repositories import ListingFilters, ListingRepository
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import ActivityAction
from realty_portal.core.models.io.common import SuccessResponse
from realty_portal.core.models.io.listings import CityGroups, ListingListResponse, ListingResponse, ListingWrite
from realty_portal.services.activity_logger import log_listing_activity

from .common import bad_request, can_view_draft, ensure_owner, ensure_owner_or_admin, listing_read

logger = get_logger(__name__)

router = APIRouter(tags=["listings"])

PROPERTY_ID_PREFIX = "TSR"
PROPERTY_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PROPERTY_ID_LENGTH = 6
PROPERTY_ID_ATTEMPTS = 10

_INT_FIELDS = ("bedrooms", "parking", "year_built", "floor", "total_floors")
_FLOAT_FIELDS = ("bathrooms", "size")
_TEXT_FIELDS = ("title", "description", "location", "city", "address", "property_type", "listing_type")


def generate_property_id() -> str:
    """``TSR-`` followed by six characters that cannot be confused (no 0/O, 1/I)."""
    suffix = "".join(secrets.choice(PROPERTY_ID_ALPHABET) for _ in range(PROPERTY_ID_LENGTH))
    return f"{PROPERTY_ID_PREFIX}-{suffix}"


async def unique_property_id(repository: ListingRepository) -> str:
    property_id = generate_property_id()
    for _ in range(PROPERTY_ID_ATTEMPTS):
        if not await repository.property_id_exists(property_id):
            break
        property_id = generate_property_id()
    return property_id


def _apply_fields(listing: Listing, body: Dict[str, Any]) -> None:
    """Copy validated request fields onto ``listing``, parsing numbers."""
    for name in _TEXT_FIELDS:
        if name in body:
            setattr(listing, name, body[name])
    if "price" in body:
        listing.price = safe_parse_float(body["price"]) or 0
    for name in _INT_FIELDS:
        if name in body:
            setattr(listing, name, safe_parse_int(body[name]))
    for name in _FLOAT_FIELDS:
        if name in body:
            setattr(listing, name, safe_parse_float(body[name]))
    if "images" in body:
        listing.images = list(body["images"] or [])
    if "amenities" in body:
        listing.amenities = body["amenities"]
    if body.get("available") is not None:
        listing.available = body["available"]


def _current_fields(listing: Listing) -> Dict[str, Any]:
    names = _TEXT_FIELDS + _INT_FIELDS + _FLOAT_FIELDS + ("price", "images", "amenities")
    return {name: getattr(listing, name) for name in names}


@router.get(
    "",
    response_model=ListingListResponse,
    summary="List Listings",
    description="Browse listings, newest first. Anonymous visitors see approved listings; signed-in users also see their own drafts.",
    response_description="A page of listings and the total number of matches.",
)
async def list_listings(
    published: Optional[bool] = Query(None, description="true: approved listings only, even for signed-in users"),
    listing_type: Optional[str] = Query(None, description="sale or rent"),
    property_type: Optional[str] = None,
    city: Optional[str] = None,
    location: Optional[str] = Query(None, description="Matches location, city or address"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    bedrooms: Optional[int] = Query(None, ge=0, description="Minimum bedrooms"),
    bathrooms: Optional[float] = Query(None, ge=0, description="Minimum bathrooms"),
    min_size: Optional[float] = Query(None, ge=0),
    max_size: Optional[float] = Query(None, ge=0),
    search: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    claims: Optional[SessionClaims] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> ListingListResponse:
    """
    List listings visible to the caller.

    - **published**: restrict to approved listings
    - **listing_type** / **property_type** / **city**: exact filters
    - **location**: partial match over location, city and address
    - **min_price** / **max_price** / **min_size** / **max_size**: ranges
    - **bedrooms** / **bathrooms**: minimums
    - **search**: partial match over title, description, location and property ID
    """
    filters = ListingFilters(
        listing_type=listing_type,
        property_type=property_type,
        city=city,
        location=location,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        min_size=min_size,
        max_size=max_size,
        search=search,
        user_id=user_id,
    )
    rows, total = await ListingRepository(session).list_visible(
        viewer_id=claims.user_id if claims else None,
        published_only=bool(published),
        filters=filters,
        limit=limit,
        offset=offset,
    )
    return ListingListResponse(
        listings=[listing_read(listing, author) for listing, author in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/cities",
    response_model=CityGroups,
    summary="List Cities",
    description="Distinct cities of approved listings, split into Metro Manila and the rest for the search filter.",
)
async def list_cities(session: AsyncSession = Depends(get_session)) -> CityGroups:
    """
    Cities for the location filter.
    """
    cities = await ListingRepository(session).distinct_cities(published_only=True)
    groups = group_cities_for_filter(cities)
    return CityGroups(cities=cities, metro_manila=groups["metro_manila"], outside=groups["outside"])


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Get Listing",
    description="Retrieve one listing with its author. Drafts are only visible to their owner and admins.",
    responses={404: {"description": "Listing not found"}},
)
async def get_listing(
    listing_id: str,
    claims: Optional[SessionClaims] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> ListingResponse:
    """
    Get a listing by ID.

    - **listing_id**: internal listing identifier
    """
    found = await ListingRepository(session).get_with_author(listing_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    listing, author = found
    if not listing.is_published and not can_view_draft(claims, listing.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return ListingResponse(listing=listing_read(listing, author))


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Listing",
    description="Submit a listing. It stays unpublished until an admin approves it.",
    response_description="The created listing, including its generated property ID.",
    responses={
        201: {"description": "Listing created"},
        400: {"description": "Invalid listing data"},
        401: {"description": "Not signed in"},
    },
)
async def create_listing(
    payload: ListingWrite,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> ListingResponse:
    """
    Create a listing.

    - **title** / **description**: required
    - **images**: photo URLs; they are also inserted between the description's paragraphs
    - numeric fields accept numbers or numeric strings
    """
    body = payload.model_dump(exclude_unset=True, exclude={"is_published"})
    result = validate_listing_input(body)
    if not result.valid:
        raise bad_request(result.error)

    repository = ListingRepository(session)
    listing = Listing(title=body["title"], description=body["description"], user_id=claims.user_id)
    _apply_fields(listing, body)
    listing.description = distribute_images(listing.description, listing.images, alt_text=listing.title)
    listing.property_id = await unique_property_id(repository)
    listing.is_published = False

    try:
        listing = await repository.create(listing)
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Listing insert conflicted: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Listing conflicts with an existing record")

    logger.info(f"Listing {listing.id} ({listing.property_id}) created by {claims.user_id}")
    await log_listing_activity(session, claims.user_id, ActivityAction.CREATE, listing.id, {"title": listing.title}, request)

    found = await repository.get_with_author(listing.id)
    return ListingResponse(listing=listing_read(*found) if found else listing_read(listing))


@router.put(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Update Listing",
    description="Edit a listing. Owners and admins only; admins may also publish or unpublish it.",
    responses={
        400: {"description": "Invalid listing data"},
        403: {"description": "Not the owner"},
        404: {"description": "Listing not found"},
    },
)
async def update_listing(
    listing_id: str,
    payload: ListingWrite,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> ListingResponse:
    """
    Update a listing.

    Only the fields sent are changed. The description's inline photos are
    rebuilt from the resulting image list.

    - **is_published**: admins only; publishing records the admin as approver
    """
    repository = ListingRepository(session)
    listing = await repository.get_by_id(listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    ensure_owner_or_admin(claims, listing.user_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"is_published"})
    merged = {**_current_fields(listing), **changes}
    # Length and emptiness rules apply to the text without the inserted photos
    if isinstance(merged["description"], str):
        merged["description"] = strip_inline_images(merged["description"])
    result = validate_listing_input(merged)
    if not result.valid:
        raise bad_request(result.error)

    _apply_fields(listing, changes)
    if "description" in changes or "images" in changes:
        listing.description = distribute_images(listing.description, listing.images, alt_text=listing.title)

    if claims.is_admin and payload.is_published is not None:
        listing.is_published = payload.is_published
        listing.approved_by = claims.user_id if payload.is_published else None
        listing.approved_at = utc_now() if payload.is_published else None

    listing = await repository.update(listing)
    await log_listing_activity(session, claims.user_id, ActivityAction.UPDATE, listing.id, {"title": listing.title}, request)

    found = await repository.get_with_author(listing.id)
    return ListingResponse(listing=listing_read(*found) if found else listing_read(listing))


@router.post(
    "/{listing_id}/delete",
    response_model=SuccessResponse,
    summary="Delete Listing",
    description="Delete one of your own listings. Admins use the admin endpoint instead.",
    responses={
        403: {"description": "Not the owner"},
        404: {"description": "Listing not found"},
    },
)
async def delete_listing(
    listing_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """
    Delete a listing owned by the caller.
    """
    repository = ListingRepository(session)
    listing = await repository.get_by_id(listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    ensure_owner(claims, listing.user_id)

    await log_listing_activity(session, claims.user_id, ActivityAction.DELETE, listing.id, {"title": listing.title}, request)
    await repository.delete(listing_id)
    logger.info(f"Listing {listing_id} deleted by its owner {claims.user_id}")
    return SuccessResponse(message="Listing deleted")

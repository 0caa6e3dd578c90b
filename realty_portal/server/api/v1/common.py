"""
Helpers shared by the content routers: response shaping and ownership checks.
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from realty_portal.auth.session_tokens import SessionClaims
from realty_portal.content.location import format_location_display, format_location_with_label
from realty_portal.core.database.entities import Activity, BlogPost, Listing, User
from realty_portal.core.models.io.activities import ActivityRead
from realty_portal.core.models.io.blog_posts import BlogPostRead
from realty_portal.core.models.io.common import AuthorSummary
from realty_portal.core.models.io.listings import ListingRead


def _author(user: Optional[User]) -> Optional[AuthorSummary]:
    return AuthorSummary(name=user.name, email=user.email) if user is not None else None


def listing_read(listing: Listing, author: Optional[User] = None) -> ListingRead:
    read = ListingRead.model_validate(listing)
    read.location_display = format_location_display(listing.city, listing.location, listing.address)
    read.location_label = format_location_with_label(listing.city, listing.location, listing.address)
    read.user = _author(author)
    return read


def blog_read(post: BlogPost, author: Optional[User] = None) -> BlogPostRead:
    read = BlogPostRead.model_validate(post)
    read.user = _author(author)
    return read


def activity_read(activity: Activity, user: Optional[User] = None) -> ActivityRead:
    read = ActivityRead.model_validate(activity)
    read.user = _author(user)
    return read


def can_view_draft(claims: Optional[SessionClaims], owner_id: str) -> bool:
    """Unpublished content is visible to its owner and to admins only."""
    return claims is not None and (claims.user_id == owner_id or claims.is_admin)


def ensure_owner_or_admin(claims: SessionClaims, owner_id: str) -> None:
    if claims.user_id != owner_id and not claims.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def ensure_owner(claims: SessionClaims, owner_id: str) -> None:
    if claims.user_id != owner_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"

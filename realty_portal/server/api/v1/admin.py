"""
Admin Endpoints.

Content moderation (approve, reject, delete), user management and the
system overview. Every route requires an admin session.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.auth.deps import require_admin
from realty_portal.auth.security import MIN_PASSWORD_LENGTH, generate_temporary_password, hash_password
from realty_portal.auth.session_tokens import SessionClaims
from realty_portal.core.database import get_session
from realty_portal.core.database.base import utc_now
from realty_portal.core.database.entities import User
from realty_portal.core.database.repositories import (
    ActivityRepository,
    BlogPostRepository,
    ListingRepository,
    UserRepository,
)
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import ActivityAction, ActivityItemType, UserRole
from realty_portal.core.models.io.activities import ActivityListResponse
from realty_portal.core.models.io.blog_posts import BlogPostResponse
from realty_portal.core.models.io.common import SuccessResponse
from realty_portal.core.models.io.dashboard import SystemStats
from realty_portal.core.models.io.listings import ListingResponse
from realty_portal.core.models.io.users import (
    PasswordResetResponse,
    UserCreate,
    UserListResponse,
    UserRead,
    UserResponse,
    UserUpdate,
)
from realty_portal.core.monitoring import log_moderation
from realty_portal.services.activity_logger import log_blog_activity, log_listing_activity, log_user_activity
from realty_portal.services.dashboard import system_stats

from .common import activity_read, bad_request, blog_read, listing_read

logger = get_logger(__name__)

router = APIRouter(tags=["admin"])

ROLES = tuple(role.value for role in UserRole)


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


def _email_conflict() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already taken by another user")


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


async def _moderate_listing(
    listing_id: str, approve: bool, claims: SessionClaims, request: Request, session: AsyncSession
) -> ListingResponse:
    repository = ListingRepository(session)
    listing = await repository.get_by_id(listing_id)
    if listing is None:
        raise _not_found("Listing")

    listing.is_published = approve
    listing.approved_by = claims.user_id if approve else None
    listing.approved_at = utc_now() if approve else None
    listing = await repository.update(listing)

    action = ActivityAction.APPROVE if approve else ActivityAction.REJECT
    log_moderation(ActivityItemType.LISTING.value, listing.id, action.value, claims.user_id)
    await log_listing_activity(session, claims.user_id, action, listing.id, {"title": listing.title}, request)
    logger.info(f"Listing {listing.id} {'approved' if approve else 'rejected'} by {claims.user_id}")

    found = await repository.get_with_author(listing.id)
    return ListingResponse(listing=listing_read(*found) if found else listing_read(listing))


@router.post(
    "/listings/{listing_id}/approve",
    response_model=ListingResponse,
    summary="Approve Listing",
    description="Publish a listing and record the approving admin.",
    responses={404: {"description": "Listing not found"}},
)
async def approve_listing(
    listing_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ListingResponse:
    return await _moderate_listing(listing_id, True, claims, request, session)


@router.post(
    "/listings/{listing_id}/reject",
    response_model=ListingResponse,
    summary="Reject Listing",
    description="Unpublish a listing and clear its approval.",
    responses={404: {"description": "Listing not found"}},
)
async def reject_listing(
    listing_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ListingResponse:
    return await _moderate_listing(listing_id, False, claims, request, session)


@router.post(
    "/listings/{listing_id}/delete",
    response_model=SuccessResponse,
    summary="Delete Listing (Admin)",
    description="Delete any listing.",
    responses={404: {"description": "Listing not found"}},
)
async def admin_delete_listing(
    listing_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    repository = ListingRepository(session)
    listing = await repository.get_by_id(listing_id)
    if listing is None:
        raise _not_found("Listing")

    await log_listing_activity(session, claims.user_id, ActivityAction.DELETE, listing.id, {"title": listing.title}, request)
    await repository.delete(listing_id)
    logger.info(f"Listing {listing_id} deleted by admin {claims.user_id}")
    return SuccessResponse(message="Listing deleted")


# ---------------------------------------------------------------------------
# Blog posts
# ---------------------------------------------------------------------------


async def _moderate_blog(
    post_id: str, approve: bool, claims: SessionClaims, request: Request, session: AsyncSession
) -> BlogPostResponse:
    repository = BlogPostRepository(session)
    post = await repository.get_by_id(post_id)
    if post is None:
        raise _not_found("Blog post")

    post.is_published = approve
    post.approved_by = claims.user_id if approve else None
    post.approved_at = utc_now() if approve else None
    post = await repository.update(post)

    action = ActivityAction.APPROVE if approve else ActivityAction.REJECT
    log_moderation(ActivityItemType.BLOG.value, post.id, action.value, claims.user_id)
    await log_blog_activity(session, claims.user_id, action, post.id, {"title": post.title}, request)
    logger.info(f"Blog post {post.id} {'approved' if approve else 'rejected'} by {claims.user_id}")

    found = await repository.get_with_author(post.id)
    return BlogPostResponse(blog=blog_read(*found) if found else blog_read(post))


@router.post(
    "/blogs/{post_id}/approve",
    response_model=BlogPostResponse,
    summary="Approve Blog Post",
    description="Publish a blog post and record the approving admin.",
    responses={404: {"description": "Blog post not found"}},
)
async def approve_blog(
    post_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BlogPostResponse:
    return await _moderate_blog(post_id, True, claims, request, session)


@router.post(
    "/blogs/{post_id}/reject",
    response_model=BlogPostResponse,
    summary="Reject Blog Post",
    description="Unpublish a blog post and clear its approval.",
    responses={404: {"description": "Blog post not found"}},
)
async def reject_blog(
    post_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BlogPostResponse:
    return await _moderate_blog(post_id, False, claims, request, session)


@router.post(
    "/blogs/{post_id}/delete",
    response_model=SuccessResponse,
    summary="Delete Blog Post (Admin)",
    description="Delete any blog post.",
    responses={404: {"description": "Blog post not found"}},
)
async def admin_delete_blog(
    post_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    repository = BlogPostRepository(session)
    post = await repository.get_by_id(post_id)
    if post is None:
        raise _not_found("Blog post")

    await log_blog_activity(session, claims.user_id, ActivityAction.DELETE, post.id, {"title": post.title}, request)
    await repository.delete(post_id)
    logger.info(f"Blog post {post_id} deleted by admin {claims.user_id}")
    return SuccessResponse(message="Blog post deleted")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List Users",
    description="All accounts, newest first, with per-role counts.",
)
async def list_users(
    role: Optional[str] = Query(None, description="ADMIN, AGENT or WRITER"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserListResponse:
    repository = UserRepository(session)
    filters = {"role": role}
    users = await repository.list(limit=limit, offset=offset, filters=filters)
    return UserListResponse(
        users=[UserRead.model_validate(user) for user in users],
        total=await repository.count(filters),
        counts_by_role=await repository.count_by_role(),
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="Create an admin, agent or writer account.",
    responses={
        400: {"description": "Missing fields, invalid role or short password"},
        409: {"description": "Email already in use"},
    },
)
async def create_user(
    payload: UserCreate,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """
    Create a user.

    - **email** / **name** / **role** / **password**: all required
    - **password**: at least 8 characters
    """
    if not payload.email or not payload.name or not payload.role or not payload.password:
        raise bad_request("Name, email, role, and password are required")
    if payload.role not in ROLES:
        raise bad_request("Invalid role")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise bad_request(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    repository = UserRepository(session)
    if await repository.email_taken(payload.email):
        raise _email_conflict()

    user = User(
        email=payload.email.strip().lower(),
        name=payload.name.strip(),
        role=payload.role,
        password=hash_password(payload.password),
    )
    try:
        user = await repository.create(user)
    except IntegrityError:
        await session.rollback()
        raise _email_conflict()

    await log_user_activity(
        session,
        claims.user_id,
        ActivityAction.CREATE,
        user.id,
        {"email": user.email, "name": user.name, "role": user.role},
        request,
    )
    logger.info(f"User {user.id} ({user.role}) created by admin {claims.user_id}")
    return UserResponse(user=UserRead.model_validate(user))


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get User",
    responses={404: {"description": "User not found"}},
)
async def get_user(
    user_id: str,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise _not_found("User")
    return UserResponse(user=UserRead.model_validate(user))


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update User",
    description="Change a user's name, email and role.",
    responses={
        400: {"description": "Missing fields or invalid role"},
        404: {"description": "User not found"},
        409: {"description": "Email already in use"},
    },
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """
    Update a user.

    - **name** / **email** / **role**: all required
    """
    if not payload.name or not payload.email or not payload.role:
        raise bad_request("Name, email, and role are required")
    if payload.role not in ROLES:
        raise bad_request("Invalid role")

    repository = UserRepository(session)
    user = await repository.get_by_id(user_id)
    if user is None:
        raise _not_found("User")
    if await repository.email_taken(payload.email, exclude_id=user_id):
        raise _email_conflict()

    previous = {"previousEmail": user.email, "previousName": user.name, "previousRole": user.role}
    user.name = payload.name.strip()
    user.email = payload.email.strip().lower()
    user.role = payload.role
    user = await repository.update(user)

    await log_user_activity(
        session,
        claims.user_id,
        ActivityAction.UPDATE,
        user.id,
        {"email": user.email, "name": user.name, "role": user.role, **previous},
        request,
    )
    return UserResponse(user=UserRead.model_validate(user))


@router.post(
    "/users/{user_id}/delete",
    response_model=SuccessResponse,
    summary="Delete User",
    description="Delete a user together with their listings, posts and activities. Admins cannot delete themselves.",
    responses={
        400: {"description": "Attempt to delete yourself"},
        404: {"description": "User not found"},
    },
)
async def delete_user(
    user_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    if user_id == claims.user_id:
        raise bad_request("Cannot delete yourself")

    repository = UserRepository(session)
    user = await repository.get_by_id(user_id)
    if user is None:
        raise _not_found("User")

    await log_user_activity(
        session, claims.user_id, ActivityAction.DELETE, user.id, {"email": user.email, "name": user.name}, request
    )
    await repository.delete(user_id)
    logger.info(f"User {user_id} deleted by admin {claims.user_id}")
    return SuccessResponse(message="User deleted")


@router.post(
    "/users/{user_id}/reset-password",
    response_model=PasswordResetResponse,
    summary="Reset User Password",
    description="Replace a user's password with a generated temporary one, returned once in the response.",
    responses={404: {"description": "User not found"}},
)
async def reset_user_password(
    user_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> PasswordResetResponse:
    repository = UserRepository(session)
    user = await repository.get_by_id(user_id)
    if user is None:
        raise _not_found("User")

    temporary_password = generate_temporary_password()
    user.password = hash_password(temporary_password)
    await repository.update(user)

    await log_user_activity(
        session,
        claims.user_id,
        ActivityAction.UPDATE,
        user.id,
        {"action": "password_reset_by_admin", "targetUserEmail": user.email, "targetUserName": user.name},
        request,
    )
    logger.info(f"Password of user {user_id} reset by admin {claims.user_id}")
    return PasswordResetResponse(temporary_password=temporary_password)


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


@router.get(
    "/stats",
    response_model=SystemStats,
    summary="System Statistics",
    description="Totals of users, listings, blog posts, pending approvals and activities.",
)
async def get_system_stats(
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SystemStats:
    return SystemStats(**await system_stats(session))


@router.get(
    "/activities",
    response_model=ActivityListResponse,
    summary="Activity Log",
    description="Audit log entries, newest first.",
)
async def list_activities(
    action: Optional[str] = Query(None, description="LOGIN, LOGOUT, CREATE, UPDATE, DELETE, APPROVE or REJECT"),
    item_type: Optional[str] = Query(None, description="LISTING, BLOG, USER or AUTH"),
    user_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    claims: SessionClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ActivityListResponse:
    """
    Browse the activity log.

    - **action** / **item_type** / **user_id**: exact filters
    - **limit** / **offset**: pagination
    """
    repository = ActivityRepository(session)
    filters = {"action": action, "item_type": item_type, "user_id": user_id}
    rows = await repository.list_with_users(limit=limit, offset=offset, filters=filters)
    return ActivityListResponse(
        activities=[activity_read(activity, user) for activity, user in rows],
        total=await repository.count(filters),
        limit=limit,
        offset=offset,
    )

"""
Blog Post Endpoints.

Public reading of approved posts (by ID or slug) and the authoring flow
for writers. Like listings, new posts wait for admin approval and their
images are spread through the content.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.auth.deps import get_optional_user, require_user
from realty_portal.auth.session_tokens import SessionClaims
from realty_portal.content.interleave import distribute_images, strip_inline_images
from realty_portal.content.validation import slugify, validate_blog_post_input
from realty_portal.core.database import get_session
from realty_portal.core.database.base import utc_now
from realty_portal.core.database.entities import BlogPost
from realty_portal.core.database.repositories import BlogPostRepository
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import ActivityAction
from realty_portal.core.models.io.blog_posts import BlogPostListResponse, BlogPostResponse, BlogPostWrite
from realty_portal.core.models.io.common import SuccessResponse
from realty_portal.services.activity_logger import log_blog_activity

from .common import bad_request, blog_read, can_view_draft, ensure_owner, ensure_owner_or_admin

logger = get_logger(__name__)

router = APIRouter(tags=["blog-posts"])

# POST /api/blogs/{id}/delete lives under its own prefix
delete_router = APIRouter(tags=["blog-posts"])

SLUG_TAKEN = "Slug already exists"
_TEXT_FIELDS = ("title", "content", "slug", "excerpt", "featured_image")


def _with_default_slug(body: Dict[str, Any]) -> Dict[str, Any]:
    if not body.get("slug") and isinstance(body.get("title"), str):
        body["slug"] = slugify(body["title"]) or None
    return body


def _current_fields(post: BlogPost) -> Dict[str, Any]:
    return {name: getattr(post, name) for name in _TEXT_FIELDS + ("images",)}


@router.get(
    "",
    response_model=BlogPostListResponse,
    summary="List Blog Posts",
    description="Browse blog posts, newest first. Anonymous visitors see approved posts; signed-in users also see their own drafts.",
)
async def list_blog_posts(
    published: Optional[bool] = Query(None, description="true: approved posts only, even for signed-in users"),
    search: Optional[str] = Query(None, description="Matches title, excerpt or content"),
    user_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    claims: Optional[SessionClaims] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> BlogPostListResponse:
    """
    List blog posts visible to the caller.

    - **published**: restrict to approved posts
    - **search**: partial text match
    - **user_id**: posts by one author
    """
    rows, total = await BlogPostRepository(session).list_visible(
        viewer_id=claims.user_id if claims else None,
        published_only=bool(published),
        search=search,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return BlogPostListResponse(
        blogs=[blog_read(post, author) for post, author in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/slug/{slug}",
    response_model=BlogPostResponse,
    summary="Get Blog Post by Slug",
    description="Retrieve a published blog post by its URL slug.",
    responses={404: {"description": "Blog post not found or not published"}},
)
async def get_blog_post_by_slug(slug: str, session: AsyncSession = Depends(get_session)) -> BlogPostResponse:
    """
    Get a published post by slug.

    - **slug**: the post's URL slug
    """
    found = await BlogPostRepository(session).get_by_slug(slug)
    if found is None or not found[0].is_published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return BlogPostResponse(blog=blog_read(*found))


@router.get(
    "/{post_id}",
    response_model=BlogPostResponse,
    summary="Get Blog Post",
    description="Retrieve one blog post with its author. Drafts are only visible to their owner and admins.",
    responses={404: {"description": "Blog post not found"}},
)
async def get_blog_post(
    post_id: str,
    claims: Optional[SessionClaims] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> BlogPostResponse:
    found = await BlogPostRepository(session).get_with_author(post_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    post, author = found
    if not post.is_published and not can_view_draft(claims, post.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return BlogPostResponse(blog=blog_read(post, author))


@router.post(
    "",
    response_model=BlogPostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Blog Post",
    description="Submit a blog post. It stays unpublished until an admin approves it.",
    responses={
        201: {"description": "Blog post created"},
        400: {"description": "Invalid data or slug already taken"},
        401: {"description": "Not signed in"},
    },
)
async def create_blog_post(
    payload: BlogPostWrite,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> BlogPostResponse:
    """
    Create a blog post.

    - **title** / **content**: required
    - **slug**: derived from the title when omitted
    - **images**: up to 10 URLs, inserted between the content's paragraphs
    """
    body = _with_default_slug(payload.model_dump(exclude_unset=True, exclude={"is_published"}))
    result = validate_blog_post_input(body)
    if not result.valid:
        raise bad_request(result.error)

    repository = BlogPostRepository(session)
    if await repository.slug_exists(body["slug"]):
        raise bad_request(SLUG_TAKEN)

    images = list(body.get("images") or [])
    post = BlogPost(
        title=body["title"],
        content=distribute_images(body["content"], images, alt_text=body["title"]),
        slug=body["slug"],
        excerpt=body.get("excerpt"),
        featured_image=body.get("featured_image"),
        images=images,
        user_id=claims.user_id,
        is_published=False,
    )
    try:
        post = await repository.create(post)
    except IntegrityError:
        await session.rollback()
        raise bad_request(SLUG_TAKEN)

    logger.info(f"Blog post {post.id} ({post.slug}) created by {claims.user_id}")
    await log_blog_activity(session, claims.user_id, ActivityAction.CREATE, post.id, {"title": post.title}, request)

    found = await repository.get_with_author(post.id)
    return BlogPostResponse(blog=blog_read(*found) if found else blog_read(post))


@router.put(
    "/{post_id}",
    response_model=BlogPostResponse,
    summary="Update Blog Post",
    description="Edit a blog post. Owners and admins only; admins may also publish or unpublish it.",
    responses={
        400: {"description": "Invalid data or slug already taken"},
        403: {"description": "Not the owner"},
        404: {"description": "Blog post not found"},
    },
)
async def update_blog_post(
    post_id: str,
    payload: BlogPostWrite,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> BlogPostResponse:
    """
    Update a blog post.

    Only the fields sent are changed; a new slug must not belong to another post.
    """
    repository = BlogPostRepository(session)
    post = await repository.get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    ensure_owner_or_admin(claims, post.user_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"is_published"})
    merged = {**_current_fields(post), **changes}
    if isinstance(merged["content"], str):
        merged["content"] = strip_inline_images(merged["content"])
    result = validate_blog_post_input(merged)
    if not result.valid:
        raise bad_request(result.error)
    if merged["slug"] != post.slug and await repository.slug_exists(merged["slug"], exclude_id=post.id):
        raise bad_request(SLUG_TAKEN)

    for name in _TEXT_FIELDS:
        if name in changes:
            setattr(post, name, changes[name])
    if "images" in changes:
        post.images = list(changes["images"] or [])
    if "content" in changes or "images" in changes:
        post.content = distribute_images(post.content, post.images, alt_text=post.title)

    if claims.is_admin and payload.is_published is not None:
        post.is_published = payload.is_published
        post.approved_by = claims.user_id if payload.is_published else None
        post.approved_at = utc_now() if payload.is_published else None

    post = await repository.update(post)
    await log_blog_activity(session, claims.user_id, ActivityAction.UPDATE, post.id, {"title": post.title}, request)

    found = await repository.get_with_author(post.id)
    return BlogPostResponse(blog=blog_read(*found) if found else blog_read(post))


@delete_router.post(
    "/{post_id}/delete",
    response_model=SuccessResponse,
    summary="Delete Blog Post",
    description="Delete one of your own blog posts. Admins use the admin endpoint instead.",
    responses={
        403: {"description": "Not the owner"},
        404: {"description": "Blog post not found"},
    },
)
async def delete_blog_post(
    post_id: str,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    repository = BlogPostRepository(session)
    post = await repository.get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    ensure_owner(claims, post.user_id)

    await log_blog_activity(session, claims.user_id, ActivityAction.DELETE, post.id, {"title": post.title}, request)
    await repository.delete(post_id)
    logger.info(f"Blog post {post_id} deleted by its owner {claims.user_id}")
    return SuccessResponse(message="Blog post deleted")

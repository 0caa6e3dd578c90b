"""
Blog post repository.

Data access for blog posts, including slug lookups and the
visibility-aware browse query shared with listings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select

from ..base import utc_now
from ..entities.blog_posts import BlogPost
from ..entities.users import User
from ..retry import db_retry
from .base import AsyncBaseRepository, QueryBuilder


class BlogPostRepository(AsyncBaseRepository[BlogPost]):
    """Repository for blog posts."""

    def __init__(self, session) -> None:
        super().__init__(session, BlogPost)

    async def update(self, post: BlogPost) -> BlogPost:
        post.updated_at = utc_now()
        return await super().update(post)

    @db_retry
    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[BlogPost]:
        """List blog posts newest first, filtered by column equality."""
        stmt = select(BlogPost).order_by(BlogPost.created_at.desc())
        stmt = QueryBuilder.apply_filters(stmt, BlogPost, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @db_retry
    async def list_visible(
        self,
        *,
        viewer_id: Optional[str] = None,
        published_only: bool = False,
        search: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Tuple[BlogPost, User]], int]:
        """Browse posts the viewer may see, newest first, with their authors.

        Returns:
            ``([(post, author), ...], total_matching)``
        """
        if published_only or not viewer_id:
            clause = BlogPost.is_published == True  # noqa: E712
        else:
            clause = or_(BlogPost.is_published == True, BlogPost.user_id == viewer_id)  # noqa: E712

        def narrow(stmt):
            if search:
                pattern = f"%{search}%"
                stmt = stmt.where(
                    or_(BlogPost.title.ilike(pattern), BlogPost.excerpt.ilike(pattern), BlogPost.content.ilike(pattern))
                )
            if user_id:
                stmt = stmt.where(BlogPost.user_id == user_id)
            return stmt

        stmt = narrow(select(BlogPost, User).join(User, User.id == BlogPost.user_id).where(clause))
        stmt = QueryBuilder.apply_pagination(stmt.order_by(BlogPost.created_at.desc()), limit, offset)
        count_stmt = narrow(select(func.count()).select_from(BlogPost).where(clause))

        rows = (await self.session.execute(stmt)).all()
        total = (await self.session.execute(count_stmt)).scalar_one()
        return [(post, author) for post, author in rows], int(total)

    @db_retry
    async def get_with_author(self, post_id: str) -> Optional[Tuple[BlogPost, User]]:
        stmt = select(BlogPost, User).join(User, User.id == BlogPost.user_id).where(BlogPost.id == post_id)
        row = (await self.session.execute(stmt)).first()
        return (row[0], row[1]) if row else None

    @db_retry
    async def get_by_slug(self, slug: str) -> Optional[Tuple[BlogPost, User]]:
        stmt = select(BlogPost, User).join(User, User.id == BlogPost.user_id).where(BlogPost.slug == slug)
        row = (await self.session.execute(stmt)).first()
        return (row[0], row[1]) if row else None

    @db_retry
    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(BlogPost.id).where(BlogPost.slug == slug)
        if exclude_id:
            stmt = stmt.where(BlogPost.id != exclude_id)
        return (await self.session.execute(stmt)).first() is not None

    @db_retry
    async def find_with_image_host(self, host: str) -> List[BlogPost]:
        """Posts whose images, featured image or content reference ``host``."""
        result = await self.session.execute(select(BlogPost))
        matches = []
        for post in result.scalars().all():
            urls = list(post.images or []) + ([post.featured_image] if post.featured_image else [])
            if any(host in url for url in urls) or host in (post.content or ""):
                matches.append(post)
        return matches

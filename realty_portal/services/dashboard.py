"""
Dashboard statistics.

Personal numbers for the signed-in author and system-wide numbers for
administrators.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.core.database.entities.activities import Activity
from realty_portal.core.database.entities.users import User
from realty_portal.core.database.repositories import (
    ActivityRepository,
    BlogPostRepository,
    ListingRepository,
    UserRepository,
)

RECENT_ACTIVITY_LIMIT = 10


async def personal_stats(session: AsyncSession, user_id: str) -> Dict[str, int]:
    listings = ListingRepository(session)
    blogs = BlogPostRepository(session)

    total_listings = await listings.count({"user_id": user_id})
    published_listings = await listings.count({"user_id": user_id, "is_published": True})
    total_blogs = await blogs.count({"user_id": user_id})
    published_blogs = await blogs.count({"user_id": user_id, "is_published": True})

    return {
        "total_listings": total_listings,
        "published_listings": published_listings,
        "pending_listings": total_listings - published_listings,
        "total_blogs": total_blogs,
        "published_blogs": published_blogs,
        "pending_blogs": total_blogs - published_blogs,
    }


async def system_stats(session: AsyncSession) -> Dict[str, Any]:
    listings = ListingRepository(session)
    blogs = BlogPostRepository(session)

    return {
        "total_users": await UserRepository(session).count(),
        "users_by_role": await UserRepository(session).count_by_role(),
        "total_listings": await listings.count(),
        "total_blogs": await blogs.count(),
        "pending_listings": await listings.count({"is_published": False}),
        "pending_blogs": await blogs.count({"is_published": False}),
        "total_activities": await ActivityRepository(session).count(),
    }


async def recent_activity(
    session: AsyncSession,
    user_id: str,
    limit: int = RECENT_ACTIVITY_LIMIT,
    offset: int = 0,
) -> List[Tuple[Activity, User]]:
    return await ActivityRepository(session).list_with_users(limit=limit, offset=offset, filters={"user_id": user_id})

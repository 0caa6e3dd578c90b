"""
Maintenance jobs: activity retention, listing export and removal of blog
posts that still point at an external image host.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.core.database.base import utc_now
from realty_portal.core.database.entities import BlogPost
from realty_portal.core.database.repositories import ActivityRepository, BlogPostRepository, ListingRepository
from realty_portal.core.logging_config import get_logger

logger = get_logger(__name__)

# rough size of one activity row including indexes
ESTIMATED_ACTIVITY_ROW_BYTES = 750
PRUNE_BATCH_SIZE = 1000
DEFAULT_IMAGE_HOST = "i.ibb.co"


@dataclass
class CleanupResult:
    matched: int
    deleted: int
    breakdown: Dict[str, int]
    estimated_bytes: int
    dry_run: bool


async def cleanup_activities(
    session: AsyncSession,
    *,
    days: int = 30,
    keep: int = 100,
    action: Optional[str] = None,
    item_type: Optional[str] = None,
    dry_run: bool = False,
) -> CleanupResult:
    """Delete activities older than ``days``, always keeping the ``keep`` newest."""
    repository = ActivityRepository(session)
    cutoff = utc_now() - timedelta(days=days)
    matched = await repository.count_prunable(cutoff, keep, action, item_type)
    breakdown = await repository.prunable_breakdown(cutoff, keep, action, item_type)

    deleted = 0
    if matched and not dry_run:
        deleted = await repository.prune(cutoff, keep, action, item_type, batch_size=PRUNE_BATCH_SIZE)
        logger.info(f"Deleted {deleted} activities older than {cutoff.isoformat()}")
    return CleanupResult(
        matched=matched,
        deleted=deleted,
        breakdown=breakdown,
        estimated_bytes=matched * ESTIMATED_ACTIVITY_ROW_BYTES,
        dry_run=dry_run,
    )


async def export_listings(session: AsyncSession) -> List[Dict[str, Any]]:
    """Every listing as JSON-ready dicts, with the author's email and name."""
    exported = []
    for listing, author in await ListingRepository(session).list_with_authors():
        record = listing.model_dump(mode="json")
        record["author_email"] = author.email
        record["author_name"] = author.name
        exported.append(record)
    return exported


async def delete_external_image_blogs(
    session: AsyncSession, host: str = DEFAULT_IMAGE_HOST, dry_run: bool = False
) -> List[BlogPost]:
    """Delete blog posts whose images reference ``host``; returns the affected posts."""
    repository = BlogPostRepository(session)
    posts = await repository.find_with_image_host(host)
    if not dry_run:
        for post in posts:
            await repository.delete(post.id)
            logger.info(f"Deleted blog post {post.id} ({post.slug}) referencing {host}")
    return posts

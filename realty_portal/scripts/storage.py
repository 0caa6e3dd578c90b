"""
Database storage report.

Row counts for every table, on-disk sizes when the database is Postgres,
the activity log broken down by action and item type, and the largest
posts and listings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.core.database.entities import Activity, BlogPost, Listing, User
from realty_portal.core.database.repositories import ActivityRepository
from realty_portal.core.logging_config import get_logger

logger = get_logger(__name__)

TABLES = {"users": User, "listings": Listing, "blog_posts": BlogPost, "activities": Activity}
LARGEST_LIMIT = 5

_RELATION_SIZE_SQL = text(
    "SELECT pg_total_relation_size(CAST(:table AS regclass)) AS total, "
    "pg_relation_size(CAST(:table AS regclass)) AS data, "
    "pg_indexes_size(CAST(:table AS regclass)) AS indexes"
)


async def table_sizes(session: AsyncSession) -> Optional[Dict[str, Dict[str, int]]]:
    """Bytes used per table (total, data, indexes); None on non-Postgres databases."""
    if session.get_bind().dialect.name != "postgresql":
        return None
    sizes = {}
    for table in TABLES:
        row = (await session.execute(_RELATION_SIZE_SQL, {"table": table})).one()
        sizes[table] = {"total": int(row.total), "data": int(row.data), "indexes": int(row.indexes)}
    return sizes


async def largest(session: AsyncSession, model, text_column, limit: int = LARGEST_LIMIT) -> List[Dict[str, Any]]:
    size = func.length(text_column)
    stmt = select(model.id, model.title, size.label("size")).order_by(size.desc()).limit(limit)
    return [{"id": row.id, "title": row.title, "size": int(row.size or 0)} for row in (await session.execute(stmt)).all()]


async def analyze_storage(session: AsyncSession) -> Dict[str, Any]:
    counts = {}
    for name, model in TABLES.items():
        counts[name] = int((await session.execute(select(func.count()).select_from(model))).scalar_one())

    activities = ActivityRepository(session)
    oldest, newest = await activities.oldest_and_newest()
    report = {
        "row_counts": counts,
        "table_sizes": await table_sizes(session),
        "activities": {
            "by_action": await activities.count_by("action"),
            "by_item_type": await activities.count_by("item_type"),
            "oldest": oldest,
            "newest": newest,
        },
        "largest_blog_posts": await largest(session, BlogPost, BlogPost.content),
        "largest_listings": await largest(session, Listing, Listing.description),
    }
    logger.debug(f"Storage report: {counts}")
    return report

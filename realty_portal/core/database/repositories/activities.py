"""
Activity repository.

Data access for the activity audit log: paginated browsing, per-column
breakdowns for the storage report and retention-based pruning.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.orm import aliased

from ..entities.activities import Activity
from ..entities.users import User
from ..retry import db_retry
from .base import AsyncBaseRepository, QueryBuilder


class ActivityRepository(AsyncBaseRepository[Activity]):
    """Repository for activity records."""

    def __init__(self, session) -> None:
        super().__init__(session, Activity)

    @db_retry
    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Activity]:
        """List activities newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (user_id, action, item_type, item_id)

        Returns:
            List of Activity instances
        """
        stmt = select(Activity).order_by(Activity.timestamp.desc())
        stmt = QueryBuilder.apply_filters(stmt, Activity, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @db_retry
    async def list_with_users(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Tuple[Activity, User]]:
        """Same as :meth:`list` but with the acting user attached."""
        stmt = select(Activity, User).join(User, User.id == Activity.user_id).order_by(Activity.timestamp.desc())
        stmt = QueryBuilder.apply_filters(stmt, Activity, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        return [(activity, user) for activity, user in (await self.session.execute(stmt)).all()]

    @db_retry
    async def count_by(self, column: str) -> Dict[str, int]:
        """Row counts grouped by ``action`` or ``item_type``, largest first."""
        attr = getattr(Activity, column)
        stmt = select(attr, func.count()).group_by(attr).order_by(func.count().desc())
        return {key: int(total) for key, total in (await self.session.execute(stmt)).all()}

    @db_retry
    async def oldest_and_newest(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        stmt = select(func.min(Activity.timestamp), func.max(Activity.timestamp))
        oldest, newest = (await self.session.execute(stmt)).one()
        return oldest, newest

    def _prune_candidates(
        self,
        cutoff: datetime,
        keep: int,
        action: Optional[str],
        item_type: Optional[str],
    ):
        recent = aliased(Activity)
        keep_ids = select(recent.id).order_by(recent.timestamp.desc()).limit(keep).scalar_subquery()
        stmt = select(Activity.id).where(Activity.timestamp < cutoff)
        if keep > 0:
            stmt = stmt.where(Activity.id.not_in(keep_ids))
        if action:
            stmt = stmt.where(Activity.action == action)
        if item_type:
            stmt = stmt.where(Activity.item_type == item_type)
        return stmt

    @db_retry
    async def count_prunable(
        self,
        cutoff: datetime,
        keep: int = 0,
        action: Optional[str] = None,
        item_type: Optional[str] = None,
    ) -> int:
        candidates = self._prune_candidates(cutoff, keep, action, item_type).subquery()
        result = await self.session.execute(select(func.count()).select_from(candidates))
        return int(result.scalar_one())

    @db_retry
    async def prunable_breakdown(
        self,
        cutoff: datetime,
        keep: int = 0,
        action: Optional[str] = None,
        item_type: Optional[str] = None,
    ) -> Dict[str, int]:
        """Prunable rows counted per ``ACTION/ITEM_TYPE`` pair, largest first."""
        ids = self._prune_candidates(cutoff, keep, action, item_type).subquery()
        stmt = (
            select(Activity.action, Activity.item_type, func.count())
            .where(Activity.id.in_(select(ids.c.id)))
            .group_by(Activity.action, Activity.item_type)
            .order_by(func.count().desc())
        )
        rows = (await self.session.execute(stmt)).all()
        return {f"{row_action}/{row_item_type}": int(total) for row_action, row_item_type, total in rows}

    async def prune(
        self,
        cutoff: datetime,
        keep: int = 0,
        action: Optional[str] = None,
        item_type: Optional[str] = None,
        batch_size: int = 1000,
    ) -> int:
        """Delete activities older than ``cutoff`` in batches.

        The ``keep`` most recent activities overall are never deleted,
        whatever their age.

        Returns:
            Number of deleted rows
        """
        deleted = 0
        while True:
            batch = await self._next_prune_batch(cutoff, keep, action, item_type, batch_size)
            if not batch:
                return deleted
            await self._delete_ids(batch)
            deleted += len(batch)

    @db_retry
    async def _next_prune_batch(self, cutoff, keep, action, item_type, batch_size) -> List[str]:
        stmt = self._prune_candidates(cutoff, keep, action, item_type).limit(batch_size)
        return list((await self.session.execute(stmt)).scalars().all())

    @db_retry
    async def _delete_ids(self, ids: List[str]) -> None:
        await self.session.execute(delete(Activity).where(Activity.id.in_(ids)))
        await self.session.commit()

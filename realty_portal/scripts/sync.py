"""
Copy content between two databases.

Used to promote data from a development database to production. Every
step is an upsert, so re-running a sync converges instead of duplicating:

- users are matched by email; existing users keep their password,
- listings and blog posts are matched by id, after making sure their
  owner exists on the target (owner ids are remapped when the target
  already has that email under another id),
- only the most recent activities are copied, and only when their user
  made it across.

A row that fails is rolled back, counted and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from realty_portal.core.database.entities import Activity, BlogPost, Listing, User
from realty_portal.core.logging_config import get_logger

logger = get_logger(__name__)

ACTIVITY_LIMIT = 1000


@dataclass
class TableReport:
    synced: int = 0
    skipped: int = 0


@dataclass
class SyncReport:
    users: TableReport = field(default_factory=TableReport)
    listings: TableReport = field(default_factory=TableReport)
    blog_posts: TableReport = field(default_factory=TableReport)
    activities: TableReport = field(default_factory=TableReport)

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            name: {"synced": report.synced, "skipped": report.skipped}
            for name, report in (
                ("users", self.users),
                ("listings", self.listings),
                ("blog_posts", self.blog_posts),
                ("activities", self.activities),
            )
        }


def copy_fields(source: SQLModel, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Column values of ``source`` keyed by model field name."""
    skip = set(exclude)
    return {name: getattr(source, name) for name in type(source).model_fields if name not in skip}


class DatabaseSync:
    """One sync run from ``source`` to ``target``."""

    def __init__(self, source: AsyncSession, target: AsyncSession, activity_limit: int = ACTIVITY_LIMIT) -> None:
        self.source = source
        self.target = target
        self.activity_limit = activity_limit
        self.report = SyncReport()
        # source user id -> target user id
        self.user_ids: Dict[str, str] = {}

    async def run(self) -> SyncReport:
        await self.sync_users()
        await self.sync_content(Listing, self.report.listings)
        await self.sync_content(BlogPost, self.report.blog_posts)
        await self.sync_activities()
        return self.report

    async def _upsert_user(self, user: User) -> str:
        result = await self.target.execute(select(User).where(User.email == user.email))
        existing = result.scalars().first()
        if existing is not None:
            existing.name = user.name
            existing.role = user.role
            self.target.add(existing)
            await self.target.commit()
            return existing.id

        self.target.add(User(**copy_fields(user)))
        await self.target.commit()
        return user.id

    async def sync_users(self) -> None:
        users = (await self.source.execute(select(User).order_by(User.created_at))).scalars().all()
        for user in users:
            try:
                self.user_ids[user.id] = await self._upsert_user(user)
                self.report.users.synced += 1
            except Exception as e:
                await self.target.rollback()
                logger.warning(f"Failed to sync user {user.email}: {e}")
                self.report.users.skipped += 1
        logger.info(f"Users synced: {self.report.users.synced}, skipped: {self.report.users.skipped}")

    async def _ensure_owner(self, user_id: str) -> Optional[str]:
        if user_id in self.user_ids:
            return self.user_ids[user_id]
        owner = await self.source.get(User, user_id)
        if owner is None:
            return None
        self.user_ids[user_id] = await self._upsert_user(owner)
        return self.user_ids[user_id]

    async def sync_content(self, model: Type[SQLModel], report: TableReport) -> None:
        rows = (await self.source.execute(select(model).order_by(model.created_at))).scalars().all()
        for row in rows:
            try:
                owner_id = await self._ensure_owner(row.user_id)
                if owner_id is None:
                    raise LookupError(f"owner {row.user_id} not found")
                values = copy_fields(row, exclude=("id", "user_id", "approved_by"))
                values["user_id"] = owner_id
                values["approved_by"] = self.user_ids.get(row.approved_by) if row.approved_by else None

                existing = await self.target.get(model, row.id)
                if existing is None:
                    self.target.add(model(id=row.id, **values))
                else:
                    for name, value in values.items():
                        setattr(existing, name, value)
                    self.target.add(existing)
                await self.target.commit()
                report.synced += 1
            except Exception as e:
                await self.target.rollback()
                logger.warning(f"Failed to sync {model.__name__} {row.id}: {e}")
                report.skipped += 1
        logger.info(f"{model.__name__} synced: {report.synced}, skipped: {report.skipped}")

    async def sync_activities(self) -> None:
        stmt = select(Activity).order_by(Activity.timestamp.desc()).limit(self.activity_limit)
        activities = (await self.source.execute(stmt)).scalars().all()
        report = self.report.activities
        for activity in activities:
            user_id = self.user_ids.get(activity.user_id)
            if user_id is None:
                report.skipped += 1
                continue
            try:
                if await self.target.get(Activity, activity.id) is None:
                    values = copy_fields(activity, exclude=("user_id",))
                    self.target.add(Activity(user_id=user_id, **values))
                    await self.target.commit()
                report.synced += 1
            except Exception as e:
                await self.target.rollback()
                logger.warning(f"Failed to sync activity {activity.id}: {e}")
                report.skipped += 1
        logger.info(f"Activities synced: {report.synced}, skipped: {report.skipped}")


async def sync_databases(
    source: AsyncSession, target: AsyncSession, activity_limit: int = ACTIVITY_LIMIT
) -> SyncReport:
    return await DatabaseSync(source, target, activity_limit).run()

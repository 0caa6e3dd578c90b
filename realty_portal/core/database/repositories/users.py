"""
User repository.

Data access for admin, agent and writer accounts, including the
email-keyed upsert used by the seed and sync commands.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select

from ..base import utc_now
from ..entities.users import User
from ..retry import db_retry
from .base import AsyncBaseRepository, QueryBuilder


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session) -> None:
        super().__init__(session, User)

    @db_retry
    async def get_by_email(self, email: str) -> Optional[User]:
        """Look a user up by email, case-insensitively."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    @db_retry
    async def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        if exclude_id:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def update(self, user: User) -> User:
        user.updated_at = utc_now()
        return await super().update(user)

    @db_retry
    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[User]:
        """List users, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (role)

        Returns:
            List of User instances
        """
        stmt = select(User).order_by(User.created_at.desc())
        stmt = QueryBuilder.apply_filters(stmt, User, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @db_retry
    async def count_by_role(self) -> Dict[str, int]:
        stmt = select(User.role, func.count()).group_by(User.role)
        result = await self.session.execute(stmt)
        return {role: int(total) for role, total in result.all()}

    async def upsert_by_email(
        self,
        *,
        email: str,
        name: str,
        role: str,
        password_hash: str,
        user_id: Optional[str] = None,
        update_password: bool = False,
    ) -> Tuple[User, bool]:
        """Insert a user or update the one that already owns ``email``.

        Existing users keep their password unless ``update_password`` is set,
        so re-running a sync never locks anyone out.

        Returns:
            ``(user, created)``
        """
        existing = await self.get_by_email(email)
        if existing is not None:
            existing.name = name
            existing.role = role
            if update_password:
                existing.password = password_hash
            return await self.update(existing), False

        user = User(email=email.strip().lower(), name=name, role=role, password=password_hash)
        if user_id:
            user.id = user_id
        return await self.create(user), True

"""
Activity audit log entity.

One row per recorded user action. The free-form ``details`` attribute is
stored in the ``metadata`` column (``metadata`` itself is reserved on
declarative classes).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ActivityBase(Base):
    """Base fields for an activity record."""

    action: str = Field(max_length=16, index=True)
    item_type: str = Field(max_length=16, index=True)
    item_id: Optional[str] = Field(default=None, max_length=64)
    details: Optional[dict[str, Any]] = Field(default=None, sa_column=Column("metadata", JSON))
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=500)


class Activity(ActivityBase, table=True):
    """Persistent activity record.

    Table: activities
    """

    __tablename__ = "activities"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=64)
    timestamp: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Activity(user={self.user_id}, action={self.action}, item={self.item_type}:{self.item_id})"

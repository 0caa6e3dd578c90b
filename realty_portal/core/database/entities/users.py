"""
User entity models.

Accounts for admins, agents and writers. Passwords are stored as bcrypt
hashes; the email address is the natural key used when syncing users
between environments.
"""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from realty_portal.core.models.domain.enums import UserRole

from ..base import Base, new_id, utc_now


class UserBase(Base):
    """Base fields for a user account."""

    email: str = Field(max_length=255, unique=True, index=True, description="Login email, unique")
    name: str = Field(max_length=200, description="Display name")
    role: str = Field(default=UserRole.AGENT.value, max_length=16, description="ADMIN, AGENT or WRITER")


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    password: str = Field(max_length=255, description="bcrypt password hash")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"

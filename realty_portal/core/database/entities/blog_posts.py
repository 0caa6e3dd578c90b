"""
Blog post entity models.

Blog posts are addressed publicly by their unique slug and, like listings,
only become visible once an admin publishes them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class BlogPostBase(Base):
    """Base fields for a blog post."""

    title: str = Field(max_length=200)
    content: str = Field(sa_column=Column(Text, nullable=False))
    slug: str = Field(max_length=200, unique=True, index=True)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = Field(default=None, max_length=1000)
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))


class BlogPost(BlogPostBase, table=True):
    """Persistent blog post.

    Table: blog_posts
    """

    __tablename__ = "blog_posts"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=64)

    is_published: bool = Field(default=False, index=True)
    approved_by: Optional[str] = Field(default=None, foreign_key="users.id", ondelete="SET NULL", max_length=64)
    approved_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"BlogPost(id={self.id}, slug={self.slug}, published={self.is_published})"

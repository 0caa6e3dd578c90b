"""
Blog post I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import AuthorSummary


class BlogPostWrite(BaseModel):
    """Schema for creating or updating a blog post."""

    title: Optional[str] = None
    content: Optional[str] = None
    slug: Optional[str] = Field(default=None, description="Lowercase words joined by hyphens; derived from the title when omitted")
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    images: Optional[List[str]] = None
    is_published: Optional[bool] = Field(default=None, description="Honoured for admins only")


class BlogPostRead(BaseModel):
    """Schema for reading a blog post."""

    id: str
    title: str
    content: str
    slug: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    user_id: str
    is_published: bool
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[AuthorSummary] = None

    class Config:
        from_attributes = True


class BlogPostResponse(BaseModel):
    success: bool = True
    blog: BlogPostRead


class BlogPostListResponse(BaseModel):
    blogs: List[BlogPostRead]
    total: int
    limit: Optional[int] = None
    offset: int = 0

"""
Dashboard I/O models.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .activities import ActivityRead


class PersonalStats(BaseModel):
    total_listings: int
    published_listings: int
    pending_listings: int
    total_blogs: int
    published_blogs: int
    pending_blogs: int


class SystemStats(BaseModel):
    total_users: int
    users_by_role: Dict[str, int] = Field(default_factory=dict)
    total_listings: int
    total_blogs: int
    pending_listings: int
    pending_blogs: int
    total_activities: int


class DashboardResponse(BaseModel):
    stats: PersonalStats
    recent_activity: List[ActivityRead]
    system: Optional[SystemStats] = Field(default=None, description="Present for admins only")

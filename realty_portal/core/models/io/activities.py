"""
Activity I/O models for the admin log and the dashboard feed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .common import AuthorSummary


class ActivityRead(BaseModel):
    """Schema for reading one audit log entry."""

    id: str
    user_id: str
    action: str
    item_type: str
    item_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="details")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime
    user: Optional[AuthorSummary] = None

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    activities: List[ActivityRead]
    total: int
    limit: int
    offset: int

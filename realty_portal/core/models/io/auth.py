"""
Authentication I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionUser(BaseModel):
    id: str
    email: str
    name: str
    role: str


class SessionInfo(BaseModel):
    """The signed-in user plus the timestamps that drive expiry."""

    user: SessionUser
    issued_at: datetime
    last_activity: datetime
    expires_at: datetime = Field(description="Hard expiry regardless of activity")
    inactivity_timeout_seconds: int


class LoginResponse(BaseModel):
    success: bool = True
    user: SessionUser
    token: Optional[str] = Field(default=None, description="Same value as the session cookie, for non-browser clients")

"""
User I/O models for API requests and responses.

Password hashes never leave the server; the only plaintext password in a
response is the temporary one returned by an admin reset.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    """Schema for reading a user account."""

    id: str
    email: str
    name: str
    role: str = Field(description="ADMIN, AGENT or WRITER")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    """Schema for an admin creating a user."""

    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = Field(default=None, description="ADMIN, AGENT or WRITER")
    password: Optional[str] = Field(default=None, description="Initial password, at least 8 characters")


class UserUpdate(BaseModel):
    """Schema for an admin editing a user; all three fields are required."""

    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


class UserResponse(BaseModel):
    success: bool = True
    user: UserRead


class UserListResponse(BaseModel):
    users: List[UserRead]
    total: int
    counts_by_role: Dict[str, int] = Field(default_factory=dict)


class PasswordResetResponse(BaseModel):
    success: bool = True
    temporary_password: str = Field(description="Shown once; the user should change it after signing in")
    message: str = "Password reset successfully"


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None

"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the centralized database layer using SQLModel.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime; every timestamp column stores UTC."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Primary key for new rows: a 32 character hex UUID, stable across environments."""
    return uuid.uuid4().hex

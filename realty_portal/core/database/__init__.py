"""
Centralized database layer for the Realty Portal.

Structure:
- entities/: SQLModel table models (users, listings, blog posts, activities)
- repositories/: Data access layer, one repository per table
- session.py: Global engine and session factory management
- retry.py: Retry policy for transient connection errors
- utils.py: Engine/session helpers and connectivity checks
"""

from .base import Base
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
)
from .utils import (
    check_connection,
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "Base",
    "async_session_maker",
    "check_connection",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
]

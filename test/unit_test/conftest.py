"""Shared fixtures for unit tests.

Every test gets its own in-memory SQLite database with the full schema,
plus small factories for users, listings, blog posts and activities.
"""

from __future__ import annotations

from datetime import datetime
from typing import AsyncGenerator, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from realty_portal.auth.security import hash_password
from realty_portal.core.database import entities  # noqa: F401
from realty_portal.core.database.base import Base, utc_now
from realty_portal.core.database.entities import Activity, BlogPost, Listing, User
from realty_portal.core.database.utils import create_sessionmaker
from test.settings import test_settings

_password_hash: Optional[str] = None


def fixture_password_hash() -> str:
    """bcrypt hash of the fixture password, computed once per test run."""
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(test_settings.fixture_password)
    return _password_hash


@pytest.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture
def make_user(session: AsyncSession):
    counter = {"n": 0}

    async def _make(role: str = "AGENT", email: Optional[str] = None, name: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.lower()}{counter['n']}@example.com",
            name=name or f"{role.title()} {counter['n']}",
            role=role,
            password=fixture_password_hash(),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_listing(session: AsyncSession):
    counter = {"n": 0}

    async def _make(user: User, **overrides) -> Listing:
        counter["n"] += 1
        values = {
            "title": f"Listing {counter['n']}",
            "description": "A bright unit.\n\nClose to transport.",
            "price": 5_000_000,
            "city": "Makati",
            "location": "Salcedo Village",
            "property_type": "condominium",
            "listing_type": "sale",
            "bedrooms": 2,
            "bathrooms": 1,
            "size": 45,
            "images": [],
            "property_id": f"TSR-TEST{counter['n']:02d}",
            "is_published": False,
        }
        values.update(overrides)
        listing = Listing(user_id=user.id, **values)
        session.add(listing)
        await session.commit()
        await session.refresh(listing)
        return listing

    return _make


@pytest.fixture
def make_blog_post(session: AsyncSession):
    counter = {"n": 0}

    async def _make(user: User, **overrides) -> BlogPost:
        counter["n"] += 1
        values = {
            "title": f"Post {counter['n']}",
            "content": "First paragraph.\n\nSecond paragraph.",
            "slug": f"post-{counter['n']}",
            "images": [],
            "is_published": False,
        }
        values.update(overrides)
        post = BlogPost(user_id=user.id, **values)
        session.add(post)
        await session.commit()
        await session.refresh(post)
        return post

    return _make


@pytest.fixture
def make_activity(session: AsyncSession):
    async def _make(
        user: User,
        action: str = "CREATE",
        item_type: str = "LISTING",
        timestamp: Optional[datetime] = None,
        **overrides,
    ) -> Activity:
        activity = Activity(
            user_id=user.id,
            action=action,
            item_type=item_type,
            timestamp=timestamp or utc_now(),
            **overrides,
        )
        session.add(activity)
        await session.commit()
        await session.refresh(activity)
        return activity

    return _make

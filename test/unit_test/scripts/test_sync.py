"""Unit tests for copying content between two databases."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from realty_portal.core.database.base import Base
from realty_portal.core.database.entities import Activity, BlogPost, Listing, User
from realty_portal.core.database.utils import create_sessionmaker
from realty_portal.scripts.sync import copy_fields, sync_databases


@pytest.fixture
async def target():
    engine = create_async_engine("sqlite+aiosqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with create_sessionmaker(engine)() as session:
        yield session
    await engine.dispose()


async def _all(session, model):
    return (await session.execute(select(model))).scalars().all()


def test_copy_fields_respects_exclusions():
    user = User(id="u1", email="a@example.com", name="A", role="AGENT", password="hash")

    values = copy_fields(user, exclude=("password",))

    assert values["id"] == "u1"
    assert values["email"] == "a@example.com"
    assert "password" not in values


async def test_sync_copies_everything(session, target, make_user, make_listing, make_blog_post, make_activity):
    agent = await make_user(email="agent@example.com")
    admin = await make_user(role="ADMIN", email="admin@example.com")
    listing = await make_listing(agent, is_published=True, approved_by=admin.id)
    post = await make_blog_post(agent)
    await make_activity(agent)

    report = await sync_databases(session, target)

    assert report.as_dict() == {
        "users": {"synced": 2, "skipped": 0},
        "listings": {"synced": 1, "skipped": 0},
        "blog_posts": {"synced": 1, "skipped": 0},
        "activities": {"synced": 1, "skipped": 0},
    }
    copied = await target.get(Listing, listing.id)
    assert copied.property_id == listing.property_id
    assert copied.approved_by == admin.id
    assert (await target.get(BlogPost, post.id)).slug == post.slug


async def test_existing_target_user_is_matched_by_email(session, target, make_user, make_listing):
    target.add(User(id="target-id", email="agent@example.com", name="Old name", role="WRITER", password="target-hash"))
    await target.commit()
    agent = await make_user(email="agent@example.com", name="New name")
    listing = await make_listing(agent)

    await sync_databases(session, target)

    users = await _all(target, User)
    assert len(users) == 1
    assert users[0].id == "target-id"
    assert users[0].name == "New name"
    assert users[0].role == "AGENT"
    assert users[0].password == "target-hash"
    assert (await target.get(Listing, listing.id)).user_id == "target-id"


async def test_rerun_updates_instead_of_duplicating(session, target, make_user, make_listing):
    agent = await make_user()
    listing = await make_listing(agent, title="Before")
    await sync_databases(session, target)

    listing.title = "After"
    session.add(listing)
    await session.commit()
    report = await sync_databases(session, target)

    assert report.listings.synced == 1
    rows = await _all(target, Listing)
    assert len(rows) == 1
    assert rows[0].title == "After"


async def test_listing_without_owner_is_skipped(session, target, make_user, make_listing):
    agent = await make_user()
    await make_listing(agent)
    orphan = Listing(title="Orphan", description="No owner", user_id="missing-user", property_id="TSR-ORPHAN")
    session.add(orphan)
    await session.commit()

    report = await sync_databases(session, target)

    assert report.listings.synced == 1
    assert report.listings.skipped == 1


async def test_only_recent_activities_are_copied(session, target, make_user, make_activity):
    agent = await make_user()
    for day in (1, 2, 3):
        await make_activity(agent, timestamp=datetime(2026, 1, day, tzinfo=timezone.utc))

    report = await sync_databases(session, target, activity_limit=2)

    assert report.activities.synced == 2
    timestamps = sorted(activity.timestamp.day for activity in await _all(target, Activity))
    assert timestamps == [2, 3]

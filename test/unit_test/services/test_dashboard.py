"""Unit tests for dashboard statistics."""

from datetime import datetime, timezone

from realty_portal.services.dashboard import personal_stats, recent_activity, system_stats


async def test_personal_stats(session, make_user, make_listing, make_blog_post):
    agent = await make_user()
    other = await make_user()
    await make_listing(agent, is_published=True)
    await make_listing(agent)
    await make_listing(agent)
    await make_listing(other)
    await make_blog_post(agent, is_published=True)

    assert await personal_stats(session, agent.id) == {
        "total_listings": 3,
        "published_listings": 1,
        "pending_listings": 2,
        "total_blogs": 1,
        "published_blogs": 1,
        "pending_blogs": 0,
    }


async def test_system_stats(session, make_user, make_listing, make_blog_post, make_activity):
    admin = await make_user(role="ADMIN")
    agent = await make_user()
    await make_listing(agent)
    await make_listing(agent, is_published=True)
    await make_blog_post(agent)
    await make_activity(agent)

    stats = await system_stats(session)

    assert stats["total_users"] == 2
    assert stats["users_by_role"] == {"ADMIN": 1, "AGENT": 1}
    assert stats["total_listings"] == 2
    assert stats["pending_listings"] == 1
    assert stats["total_blogs"] == 1
    assert stats["pending_blogs"] == 1
    assert stats["total_activities"] == 1
    assert admin.role == "ADMIN"


async def test_recent_activity_is_per_user(session, make_user, make_activity):
    agent = await make_user()
    other = await make_user()
    await make_activity(agent, timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc))
    await make_activity(agent, action="DELETE", timestamp=datetime(2026, 3, 2, tzinfo=timezone.utc))
    await make_activity(other)

    rows = await recent_activity(session, agent.id, limit=10)

    assert [activity.action for activity, _ in rows] == ["DELETE", "CREATE"]
    assert all(user.id == agent.id for _, user in rows)

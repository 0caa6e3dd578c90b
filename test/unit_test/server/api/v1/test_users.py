"""Tests for the dashboard and change-password endpoints."""

from datetime import timedelta

import pytest

from realty_portal.auth.security import verify_password
from realty_portal.core.database.base import utc_now
from realty_portal.core.database.repositories import UserRepository
from test.settings import test_settings


class TestDashboard:
    async def test_personal_stats(self, client, agent, make_listing, make_activity, auth_headers):
        await make_listing(agent, is_published=True)
        await make_listing(agent)
        await make_listing(agent)
        await make_activity(agent, action="CREATE")

        response = await client.get("/api/dashboard", headers=auth_headers(agent))

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["total_listings"] == 3
        assert body["stats"]["published_listings"] == 1
        assert body["stats"]["pending_listings"] == 2
        assert body["stats"]["total_blogs"] == 0
        assert len(body["recent_activity"]) == 1
        assert body["system"] is None

    async def test_admin_gets_system_overview(self, client, admin, agent, auth_headers):
        response = await client.get("/api/dashboard", headers=auth_headers(admin))

        assert response.json()["system"]["total_users"] == 2

    async def test_recent_activity_is_capped(self, client, agent, make_activity, auth_headers):
        now = utc_now()
        for minutes in range(12):
            await make_activity(agent, timestamp=now - timedelta(minutes=minutes))

        response = await client.get("/api/dashboard", headers=auth_headers(agent))

        assert len(response.json()["recent_activity"]) == 10

    async def test_requires_session(self, client):
        assert (await client.get("/api/dashboard")).status_code == 401


class TestMyActivity:
    async def test_only_own_entries(self, client, agent, writer, make_activity, auth_headers):
        now = utc_now()
        await make_activity(agent, action="LOGIN", item_type="AUTH", timestamp=now - timedelta(hours=1))
        await make_activity(agent, action="CREATE", timestamp=now)
        await make_activity(writer, action="CREATE", item_type="BLOG")

        response = await client.get("/api/dashboard/activity", headers=auth_headers(agent))

        body = response.json()
        assert body["total"] == 2
        assert [entry["action"] for entry in body["activities"]] == ["CREATE", "LOGIN"]

    async def test_pagination(self, client, agent, make_activity, auth_headers):
        now = utc_now()
        for minutes in range(3):
            await make_activity(agent, timestamp=now - timedelta(minutes=minutes))

        response = await client.get("/api/dashboard/activity", params={"limit": 2, "offset": 2}, headers=auth_headers(agent))

        body = response.json()
        assert body["total"] == 3
        assert len(body["activities"]) == 1


class TestChangePassword:
    def _payload(self, new_password="brand-new-secret", confirm=None, current=None):
        return {
            "current_password": current if current is not None else test_settings.fixture_password,
            "new_password": new_password,
            "confirm_password": confirm if confirm is not None else new_password,
        }

    async def test_success(self, client, session, agent, auth_headers):
        response = await client.post("/api/user/change-password", json=self._payload(), headers=auth_headers(agent))

        assert response.status_code == 200
        assert response.json()["message"] == "Password changed successfully"
        stored = await UserRepository(session).get_by_id(agent.id)
        assert verify_password("brand-new-secret", stored.password)

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"new_password": ""}, "All fields are required"),
            ({"confirm": "something-else"}, "New password and confirmation do not match"),
            ({"new_password": "short"}, "New password must be at least 8 characters long"),
        ],
    )
    async def test_rejects(self, client, agent, auth_headers, kwargs, message):
        response = await client.post("/api/user/change-password", json=self._payload(**kwargs), headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"] == message

    async def test_same_password(self, client, agent, auth_headers):
        payload = self._payload(new_password=test_settings.fixture_password)

        response = await client.post("/api/user/change-password", json=payload, headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"] == "New password must be different from current password"

    async def test_wrong_current_password(self, client, agent, auth_headers):
        payload = self._payload(current="not-my-password")

        response = await client.post("/api/user/change-password", json=payload, headers=auth_headers(agent))

        assert response.status_code == 401
        assert response.json()["detail"] == "Current password is incorrect"

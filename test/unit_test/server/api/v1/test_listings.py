"""Tests for the listing endpoints."""

import re

import pytest

from realty_portal.core.database.repositories import ActivityRepository, ListingRepository
from realty_portal.server.api.v1 import listings as listings_api
from realty_portal.server.api.v1.listings import PROPERTY_ID_ALPHABET, generate_property_id, unique_property_id
from realty_portal.services import activity_logger

NEW_LISTING = {
    "title": "Sunny 2BR in Salcedo",
    "description": "Corner unit with city views.\n\nWalking distance to Ayala.\n\nComes furnished.",
    "price": "8500000",
    "city": "Makati",
    "location": "Salcedo Village",
    "property_type": "condominium",
    "listing_type": "sale",
    "bedrooms": "2",
    "bathrooms": 2,
    "size": "68.5 sqm",
    "images": ["https://res.cloudinary.com/demo/a.jpg", "https://res.cloudinary.com/demo/b.jpg"],
    "amenities": ["pool", "gym"],
}


def test_generate_property_id_format():
    property_id = generate_property_id()

    assert re.fullmatch(r"TSR-[A-Z2-9]{6}", property_id)
    assert all(char in PROPERTY_ID_ALPHABET for char in property_id[4:])


async def test_unique_property_id_retries_on_collision(session, make_user, make_listing, monkeypatch):
    agent = await make_user()
    await make_listing(agent, property_id="TSR-AAAAAA")
    candidates = iter(["TSR-AAAAAA", "TSR-BBBBBB"])
    monkeypatch.setattr(listings_api, "generate_property_id", lambda: next(candidates))

    assert await unique_property_id(ListingRepository(session)) == "TSR-BBBBBB"


class TestBrowse:
    async def test_anonymous_sees_published_listings(self, client, agent, make_listing):
        published = await make_listing(agent, is_published=True, city="Makati", location="Salcedo Village")
        await make_listing(agent)

        response = await client.get("/api/listings")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        listing = body["listings"][0]
        assert listing["id"] == published.id
        assert listing["user"] == {"name": agent.name, "email": agent.email}
        assert listing["location_display"] == "Makati"

    async def test_owner_sees_own_drafts_unless_published_only(self, client, agent, make_listing, auth_headers):
        await make_listing(agent, is_published=True)
        await make_listing(agent)

        mine = await client.get("/api/listings", headers=auth_headers(agent))
        published_only = await client.get("/api/listings?published=true", headers=auth_headers(agent))

        assert mine.json()["total"] == 2
        assert published_only.json()["total"] == 1

    async def test_filters_and_pagination(self, client, agent, make_listing):
        await make_listing(agent, is_published=True, listing_type="rent", price=40_000, bedrooms=1)
        await make_listing(agent, is_published=True, listing_type="rent", price=90_000, bedrooms=3)
        await make_listing(agent, is_published=True, listing_type="sale", price=9_000_000, bedrooms=3)

        response = await client.get("/api/listings", params={"listing_type": "rent", "bedrooms": 2})
        assert [item["price"] for item in response.json()["listings"]] == [90_000]

        page = await client.get("/api/listings", params={"limit": 1, "offset": 1})
        assert page.json()["total"] == 3
        assert page.json()["limit"] == 1
        assert len(page.json()["listings"]) == 1

    async def test_invalid_query_is_rejected(self, client):
        response = await client.get("/api/listings", params={"limit": 0})

        assert response.status_code == 422

    async def test_cities_grouped(self, client, agent, make_listing):
        for city in ("Makati", "Cebu City", "Taguig", "Baguio"):
            await make_listing(agent, is_published=True, city=city)
        await make_listing(agent, city="Davao City")

        response = await client.get("/api/listings/cities")

        assert response.json() == {
            "cities": ["Baguio", "Cebu City", "Makati", "Taguig"],
            "metro_manila": ["Makati", "Taguig"],
            "outside": ["Baguio", "Cebu City"],
        }


class TestGetListing:
    async def test_published_listing(self, client, agent, make_listing):
        listing = await make_listing(agent, is_published=True)

        response = await client.get(f"/api/listings/{listing.id}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["listing"]["property_id"] == listing.property_id
        assert response.json()["listing"]["location_display"] == "Makati"
        assert response.json()["listing"]["location_label"] == "Salcedo Village, Makati"

    async def test_draft_hidden_from_others(self, client, agent, make_user, make_listing, auth_headers):
        other = await make_user()
        draft = await make_listing(agent)

        anonymous = await client.get(f"/api/listings/{draft.id}")
        stranger = await client.get(f"/api/listings/{draft.id}", headers=auth_headers(other))

        assert anonymous.status_code == 404
        assert stranger.status_code == 404

    async def test_draft_visible_to_owner_and_admin(self, client, agent, admin, make_listing, auth_headers):
        draft = await make_listing(agent)

        assert (await client.get(f"/api/listings/{draft.id}", headers=auth_headers(agent))).status_code == 200
        assert (await client.get(f"/api/listings/{draft.id}", headers=auth_headers(admin))).status_code == 200

    async def test_missing(self, client):
        assert (await client.get("/api/listings/missing")).status_code == 404


class TestCreateListing:
    async def test_requires_session(self, client):
        response = await client.post("/api/listings", json=NEW_LISTING)

        assert response.status_code == 401

    async def test_creates_unpublished_listing(self, client, session, agent, auth_headers):
        response = await client.post("/api/listings", json={**NEW_LISTING, "is_published": True}, headers=auth_headers(agent))

        assert response.status_code == 201
        listing = response.json()["listing"]
        assert re.fullmatch(r"TSR-[A-Z2-9]{6}", listing["property_id"])
        assert listing["is_published"] is False
        assert listing["user_id"] == agent.id
        assert listing["price"] == 8_500_000
        assert listing["bedrooms"] == 2
        assert listing["size"] == 68.5
        assert listing["amenities"] == ["pool", "gym"]
        assert listing["user"]["name"] == agent.name

        activities = await ActivityRepository(session).list(filters={"action": "CREATE"})
        assert len(activities) == 1
        assert activities[0].item_id == listing["id"]
        assert activities[0].details["title"] == NEW_LISTING["title"]

    async def test_failed_activity_write_keeps_created_listing(self, client, session, agent, auth_headers, monkeypatch):
        activity_class = activity_logger.Activity
        # A row without an author violates NOT NULL when flushed
        monkeypatch.setattr(activity_logger, "Activity", lambda **values: activity_class(**{**values, "user_id": None}))

        response = await client.post("/api/listings", json=NEW_LISTING, headers=auth_headers(agent))

        assert response.status_code == 201
        assert response.json()["listing"]["user"]["name"] == agent.name
        assert await ListingRepository(session).count() == 1
        assert await ActivityRepository(session).count() == 0

    async def test_images_are_spread_through_description(self, client, agent, auth_headers):
        response = await client.post("/api/listings", json=NEW_LISTING, headers=auth_headers(agent))

        description = response.json()["listing"]["description"]
        blocks = description.split("\n\n")
        assert blocks[0] == "Corner unit with city views."
        assert 'src="https://res.cloudinary.com/demo/a.jpg"' in blocks[1]
        assert blocks[2] == "Walking distance to Ayala."
        assert 'src="https://res.cloudinary.com/demo/b.jpg"' in blocks[3]
        assert blocks[4] == "Comes furnished."

    @pytest.mark.parametrize(
        "override,message",
        [
            ({"title": "  "}, "Title is required and must be a non-empty string"),
            ({"description": None}, "Description is required and must be a non-empty string"),
            ({"listing_type": "lease"}, 'Invalid listing type. Must be "sale" or "rent"'),
            ({"bedrooms": 99}, "Bedrooms must be a number between 0 and 50"),
            ({"price": "free"}, "Price must be a valid positive number"),
        ],
    )
    async def test_validation_errors(self, client, agent, auth_headers, override, message):
        response = await client.post("/api/listings", json={**NEW_LISTING, **override}, headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"] == message


class TestUpdateListing:
    async def test_owner_updates_fields(self, client, agent, make_listing, auth_headers):
        listing = await make_listing(agent)

        response = await client.put(
            f"/api/listings/{listing.id}", json={"price": "6000000", "city": "Pasig"}, headers=auth_headers(agent)
        )

        assert response.status_code == 200
        body = response.json()["listing"]
        assert body["price"] == 6_000_000
        assert body["city"] == "Pasig"
        assert body["title"] == listing.title

    async def test_owner_cannot_publish(self, client, agent, make_listing, auth_headers):
        listing = await make_listing(agent)

        response = await client.put(f"/api/listings/{listing.id}", json={"is_published": True}, headers=auth_headers(agent))

        assert response.status_code == 200
        assert response.json()["listing"]["is_published"] is False

    async def test_admin_publish_records_approver(self, client, agent, admin, make_listing, auth_headers):
        listing = await make_listing(agent)

        response = await client.put(f"/api/listings/{listing.id}", json={"is_published": True}, headers=auth_headers(admin))

        body = response.json()["listing"]
        assert body["is_published"] is True
        assert body["approved_by"] == admin.id
        assert body["approved_at"] is not None

    async def test_admin_unpublish_clears_approval(self, client, agent, admin, make_listing, auth_headers):
        listing = await make_listing(agent)
        headers = auth_headers(admin)
        await client.put(f"/api/listings/{listing.id}", json={"is_published": True}, headers=headers)

        response = await client.put(f"/api/listings/{listing.id}", json={"is_published": False}, headers=headers)

        body = response.json()["listing"]
        assert body["is_published"] is False
        assert body["approved_by"] is None
        assert body["approved_at"] is None

    async def test_edit_near_limit_description_with_photos(self, client, agent, auth_headers):
        description = "\n\n".join([("Bright corner unit. " * 49).strip()] * 10)
        images = [f"https://img.example.com/unit-{n}.jpg" for n in range(10)]
        headers = auth_headers(agent)
        created = await client.post(
            "/api/listings",
            json={**NEW_LISTING, "title": "Tower A", "description": description, "images": images},
            headers=headers,
        )
        listing = created.json()["listing"]
        assert len(description) < 10_000 < len(listing["description"])

        response = await client.put(f"/api/listings/{listing['id']}", json={"title": "Tower B"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["listing"]["title"] == "Tower B"

    async def test_other_user_is_forbidden(self, client, agent, make_user, make_listing, auth_headers):
        other = await make_user()
        listing = await make_listing(agent)

        response = await client.put(f"/api/listings/{listing.id}", json={"title": "Mine now"}, headers=auth_headers(other))

        assert response.status_code == 403

    async def test_new_images_replace_inline_images(self, client, agent, make_listing, auth_headers):
        listing = await make_listing(agent, description="One.\n\nTwo.")
        headers = auth_headers(agent)

        await client.put(f"/api/listings/{listing.id}", json={"images": ["https://img.example.com/1.jpg"]}, headers=headers)
        response = await client.put(
            f"/api/listings/{listing.id}", json={"images": ["https://img.example.com/2.jpg"]}, headers=headers
        )

        description = response.json()["listing"]["description"]
        assert "1.jpg" not in description
        assert description.count("<img") == 1
        assert "https://img.example.com/2.jpg" in description

    async def test_invalid_merged_update(self, client, agent, make_listing, auth_headers):
        listing = await make_listing(agent)

        response = await client.put(f"/api/listings/{listing.id}", json={"title": ""}, headers=auth_headers(agent))

        assert response.status_code == 400

    async def test_missing(self, client, agent, auth_headers):
        response = await client.put("/api/listings/missing", json={"title": "x"}, headers=auth_headers(agent))

        assert response.status_code == 404


class TestDeleteListing:
    async def test_owner_deletes(self, client, session, agent, make_listing, auth_headers):
        listing = await make_listing(agent)

        response = await client.post(f"/api/listings/{listing.id}/delete", headers=auth_headers(agent))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Listing deleted"}
        assert await ListingRepository(session).get_by_id(listing.id) is None
        assert await ActivityRepository(session).count({"action": "DELETE"}) == 1

    async def test_admin_must_use_admin_route(self, client, agent, admin, make_listing, auth_headers):
        listing = await make_listing(agent)

        response = await client.post(f"/api/listings/{listing.id}/delete", headers=auth_headers(admin))

        assert response.status_code == 403

    async def test_missing(self, client, agent, auth_headers):
        response = await client.post("/api/listings/missing/delete", headers=auth_headers(agent))

        assert response.status_code == 404

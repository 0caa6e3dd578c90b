"""Unit tests for ListingRepository browsing, filters and lookups."""

from datetime import datetime, timezone

import pytest

from realty_portal.core.database.repositories import ListingFilters, ListingRepository


@pytest.fixture
async def owner(make_user):
    return await make_user(role="AGENT", name="Owner")


@pytest.fixture
async def other(make_user):
    return await make_user(role="AGENT", name="Other")


class TestVisibility:
    async def test_anonymous_sees_published_only(self, session, owner, make_listing):
        published = await make_listing(owner, is_published=True)
        await make_listing(owner)

        rows, total = await ListingRepository(session).list_visible()

        assert total == 1
        assert [listing.id for listing, _ in rows] == [published.id]

    async def test_owner_also_sees_own_drafts(self, session, owner, other, make_listing):
        await make_listing(owner, is_published=True)
        own_draft = await make_listing(owner)
        await make_listing(other)

        rows, total = await ListingRepository(session).list_visible(viewer_id=owner.id)

        assert total == 2
        assert own_draft.id in {listing.id for listing, _ in rows}

    async def test_published_only_hides_own_drafts(self, session, owner, make_listing):
        await make_listing(owner, is_published=True)
        await make_listing(owner)

        _, total = await ListingRepository(session).list_visible(viewer_id=owner.id, published_only=True)

        assert total == 1

    async def test_rows_carry_author_newest_first(self, session, owner, make_listing):
        older = await make_listing(owner, is_published=True, created_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
        newer = await make_listing(owner, is_published=True, created_at=datetime(2026, 2, 1, tzinfo=timezone.utc))

        rows, _ = await ListingRepository(session).list_visible()

        assert [listing.id for listing, _ in rows] == [newer.id, older.id]
        assert all(author.id == owner.id for _, author in rows)

    async def test_pagination_keeps_full_total(self, session, owner, make_listing):
        for day in range(1, 6):
            await make_listing(owner, is_published=True, created_at=datetime(2026, 1, day, tzinfo=timezone.utc))

        rows, total = await ListingRepository(session).list_visible(limit=2, offset=2)

        assert total == 5
        assert [listing.created_at.day for listing, _ in rows] == [3, 2]


class TestFilters:
    @pytest.fixture
    async def catalogue(self, owner, make_listing):
        return {
            "condo": await make_listing(
                owner, is_published=True, city="Makati", price=5_000_000, bedrooms=1, bathrooms=1, size=30
            ),
            "house": await make_listing(
                owner,
                is_published=True,
                city="Cebu City",
                location="Lahug",
                property_type="house-and-lot",
                price=12_000_000,
                bedrooms=4,
                bathrooms=3,
                size=220,
            ),
            "rental": await make_listing(
                owner,
                is_published=True,
                city="Taguig",
                address="5th Avenue, BGC",
                listing_type="rent",
                price=60_000,
                bedrooms=2,
                bathrooms=2,
                size=70,
                title="Furnished BGC unit",
            ),
        }

    async def _ids(self, session, **kwargs):
        rows, _ = await ListingRepository(session).list_visible(filters=ListingFilters(**kwargs))
        return {listing.id for listing, _ in rows}

    async def test_listing_and_property_type(self, session, catalogue):
        assert await self._ids(session, listing_type="rent") == {catalogue["rental"].id}
        assert await self._ids(session, property_type="house-and-lot") == {catalogue["house"].id}

    async def test_city_is_case_insensitive(self, session, catalogue):
        assert await self._ids(session, city="makati") == {catalogue["condo"].id}

    async def test_location_matches_city_location_or_address(self, session, catalogue):
        assert await self._ids(session, location="lahug") == {catalogue["house"].id}
        assert await self._ids(session, location="BGC") == {catalogue["rental"].id}
        assert await self._ids(session, location="Cebu") == {catalogue["house"].id}

    async def test_price_and_size_ranges(self, session, catalogue):
        assert await self._ids(session, min_price=1_000_000, max_price=6_000_000) == {catalogue["condo"].id}
        assert await self._ids(session, min_size=50, max_size=100) == {catalogue["rental"].id}

    async def test_bedrooms_and_bathrooms_are_minimums(self, session, catalogue):
        assert await self._ids(session, bedrooms=2) == {catalogue["house"].id, catalogue["rental"].id}
        assert await self._ids(session, bathrooms=3) == {catalogue["house"].id}

    async def test_search_matches_title_and_property_id(self, session, catalogue):
        assert await self._ids(session, search="furnished") == {catalogue["rental"].id}
        assert await self._ids(session, search=catalogue["condo"].property_id) == {catalogue["condo"].id}

    async def test_user_filter(self, session, catalogue, other, make_listing):
        theirs = await make_listing(other, is_published=True)
        assert await self._ids(session, user_id=other.id) == {theirs.id}


class TestLookups:
    async def test_get_with_author(self, session, owner, make_listing):
        listing = await make_listing(owner)

        found = await ListingRepository(session).get_with_author(listing.id)

        assert found is not None
        assert found[0].id == listing.id
        assert found[1].name == "Owner"
        assert await ListingRepository(session).get_with_author("missing") is None

    async def test_property_id_exists(self, session, owner, make_listing):
        await make_listing(owner, property_id="TSR-ABC234")
        repository = ListingRepository(session)

        assert await repository.property_id_exists("TSR-ABC234")
        assert not await repository.property_id_exists("TSR-ZZZ999")

    async def test_distinct_cities(self, session, owner, make_listing):
        await make_listing(owner, is_published=True, city="Pasig")
        await make_listing(owner, is_published=True, city="Makati")
        await make_listing(owner, is_published=True, city="Makati")
        await make_listing(owner, is_published=True, city="")
        await make_listing(owner, city="Davao City")
        repository = ListingRepository(session)

        assert await repository.distinct_cities() == ["Makati", "Pasig"]
        assert await repository.distinct_cities(published_only=False) == ["Davao City", "Makati", "Pasig"]

    async def test_list_with_authors_includes_drafts(self, session, owner, make_listing):
        await make_listing(owner, is_published=True)
        await make_listing(owner)

        rows = await ListingRepository(session).list_with_authors()

        assert len(rows) == 2

    async def test_count_with_filters(self, session, owner, make_listing):
        await make_listing(owner, is_published=True)
        await make_listing(owner)

        repository = ListingRepository(session)
        assert await repository.count() == 2
        assert await repository.count({"is_published": False}) == 1

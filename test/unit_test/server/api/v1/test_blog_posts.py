"""Tests for the blog post endpoints."""

import pytest

from realty_portal.core.database.repositories import BlogPostRepository

NEW_POST = {
    "title": "Buying Your First Condo",
    "content": "Start with a budget.\n\nVisit at different times of day.",
    "excerpt": "A short checklist",
    "images": ["https://res.cloudinary.com/demo/tour.jpg"],
}


class TestBrowse:
    async def test_list_published(self, client, writer, make_blog_post):
        published = await make_blog_post(writer, is_published=True)
        await make_blog_post(writer)

        response = await client.get("/api/blog-posts")

        body = response.json()
        assert body["total"] == 1
        assert body["blogs"][0]["id"] == published.id
        assert body["blogs"][0]["user"]["name"] == writer.name

    async def test_search(self, client, writer, make_blog_post):
        await make_blog_post(writer, is_published=True, title="Condo checklist")
        await make_blog_post(writer, is_published=True, title="House hunting")

        response = await client.get("/api/blog-posts", params={"search": "condo"})

        assert [blog["title"] for blog in response.json()["blogs"]] == ["Condo checklist"]

    async def test_get_by_slug(self, client, writer, make_blog_post):
        await make_blog_post(writer, is_published=True, slug="market-update")
        await make_blog_post(writer, slug="draft-post")

        found = await client.get("/api/blog-posts/slug/market-update")
        draft = await client.get("/api/blog-posts/slug/draft-post")
        missing = await client.get("/api/blog-posts/slug/nope")

        assert found.status_code == 200
        assert found.json()["blog"]["slug"] == "market-update"
        assert draft.status_code == 404
        assert missing.status_code == 404

    async def test_draft_by_id_visible_to_owner_only(self, client, writer, make_user, make_blog_post, auth_headers):
        other = await make_user(role="WRITER")
        draft = await make_blog_post(writer)

        assert (await client.get(f"/api/blog-posts/{draft.id}")).status_code == 404
        assert (await client.get(f"/api/blog-posts/{draft.id}", headers=auth_headers(other))).status_code == 404
        assert (await client.get(f"/api/blog-posts/{draft.id}", headers=auth_headers(writer))).status_code == 200


class TestCreate:
    async def test_creates_with_derived_slug(self, client, writer, auth_headers):
        response = await client.post("/api/blog-posts", json=NEW_POST, headers=auth_headers(writer))

        assert response.status_code == 201
        blog = response.json()["blog"]
        assert blog["slug"] == "buying-your-first-condo"
        assert blog["is_published"] is False
        assert blog["images"] == NEW_POST["images"]
        assert 'src="https://res.cloudinary.com/demo/tour.jpg"' in blog["content"]
        assert 'alt="Buying Your First Condo"' in blog["content"]

    async def test_duplicate_slug(self, client, writer, make_blog_post, auth_headers):
        await make_blog_post(writer, slug="buying-your-first-condo")

        response = await client.post("/api/blog-posts", json=NEW_POST, headers=auth_headers(writer))

        assert response.status_code == 400
        assert response.json()["detail"] == "Slug already exists"

    @pytest.mark.parametrize(
        "override,message",
        [
            ({"slug": "Not A Slug"}, "Slug must contain only lowercase letters, numbers, and hyphens"),
            ({"content": ""}, "Content is required and must be a non-empty string"),
            ({"images": [f"https://img.example.com/{i}.jpg" for i in range(11)]}, "Maximum 10 images allowed per blog post"),
        ],
    )
    async def test_validation(self, client, writer, auth_headers, override, message):
        response = await client.post("/api/blog-posts", json={**NEW_POST, **override}, headers=auth_headers(writer))

        assert response.status_code == 400
        assert response.json()["detail"] == message

    async def test_requires_session(self, client):
        assert (await client.post("/api/blog-posts", json=NEW_POST)).status_code == 401


class TestUpdate:
    async def test_change_slug(self, client, writer, make_blog_post, auth_headers):
        post = await make_blog_post(writer)

        response = await client.put(f"/api/blog-posts/{post.id}", json={"slug": "fresh-slug"}, headers=auth_headers(writer))

        assert response.status_code == 200
        assert response.json()["blog"]["slug"] == "fresh-slug"

    async def test_slug_taken_by_another_post(self, client, writer, make_blog_post, auth_headers):
        await make_blog_post(writer, slug="taken")
        post = await make_blog_post(writer)

        response = await client.put(f"/api/blog-posts/{post.id}", json={"slug": "taken"}, headers=auth_headers(writer))

        assert response.status_code == 400
        assert response.json()["detail"] == "Slug already exists"

    async def test_keeping_own_slug_is_fine(self, client, writer, make_blog_post, auth_headers):
        post = await make_blog_post(writer, slug="mine")

        response = await client.put(
            f"/api/blog-posts/{post.id}", json={"slug": "mine", "title": "New title"}, headers=auth_headers(writer)
        )

        assert response.status_code == 200
        assert response.json()["blog"]["title"] == "New title"

    async def test_admin_can_publish(self, client, writer, admin, make_blog_post, auth_headers):
        post = await make_blog_post(writer)

        response = await client.put(f"/api/blog-posts/{post.id}", json={"is_published": True}, headers=auth_headers(admin))

        assert response.json()["blog"]["is_published"] is True
        assert response.json()["blog"]["approved_by"] == admin.id

    async def test_admin_unpublish_clears_approval(self, client, writer, admin, make_blog_post, auth_headers):
        post = await make_blog_post(writer)
        headers = auth_headers(admin)
        await client.put(f"/api/blog-posts/{post.id}", json={"is_published": True}, headers=headers)

        response = await client.put(f"/api/blog-posts/{post.id}", json={"is_published": False}, headers=headers)

        blog = response.json()["blog"]
        assert blog["is_published"] is False
        assert blog["approved_by"] is None
        assert blog["approved_at"] is None

    async def test_edit_near_limit_content_with_photos(self, client, writer, auth_headers):
        content = "\n\n".join([("Quiet streets and good schools. " * 311).strip()] * 10)
        images = [f"https://img.example.com/street-{n}.jpg" for n in range(10)]
        headers = auth_headers(writer)
        created = await client.post(
            "/api/blog-posts", json={"title": "Living in Makati", "content": content, "images": images}, headers=headers
        )
        blog = created.json()["blog"]
        assert len(content) < 100_000 < len(blog["content"])

        response = await client.put(
            f"/api/blog-posts/{blog['id']}", json={"title": "Living in Makati, updated"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["blog"]["content"].count("<img") == 10

    async def test_other_writer_forbidden(self, client, writer, make_user, make_blog_post, auth_headers):
        other = await make_user(role="WRITER")
        post = await make_blog_post(writer)

        response = await client.put(f"/api/blog-posts/{post.id}", json={"title": "Hijack"}, headers=auth_headers(other))

        assert response.status_code == 403


class TestDelete:
    async def test_owner_deletes(self, client, session, writer, make_blog_post, auth_headers):
        post = await make_blog_post(writer)

        response = await client.post(f"/api/blogs/{post.id}/delete", headers=auth_headers(writer))

        assert response.status_code == 200
        assert await BlogPostRepository(session).get_by_id(post.id) is None

    async def test_non_owner_forbidden(self, client, writer, admin, make_blog_post, auth_headers):
        post = await make_blog_post(writer)

        response = await client.post(f"/api/blogs/{post.id}/delete", headers=auth_headers(admin))

        assert response.status_code == 403

    async def test_missing(self, client, writer, auth_headers):
        response = await client.post("/api/blogs/missing/delete", headers=auth_headers(writer))

        assert response.status_code == 404

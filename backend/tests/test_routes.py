"""
Blog API — HTTP Endpoint Tests
================================

What:  End-to-end tests of every endpoint through the ASGI app.
How:   HTTPX AsyncClient over ASGITransport, backed by a temporary SQLite
       store (see the `database` / `test_client` fixtures in conftest.py).
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import AsyncClient, ASGITransport

from blog_api.exceptions import StoreError
from blog_api.routes.blogs import get_blog_service


async def _create(client, payload) -> dict:
    response = await client.post("/blogs", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["blog"]


class TestLiveness:

    @pytest.mark.asyncio
    async def test_root_returns_text(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.text == "Hello World!"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "Route not found"

    @pytest.mark.asyncio
    async def test_unsupported_method(self, test_client):
        response = await test_client.patch("/blogs", json={})
        assert response.status_code == 405
        assert response.json()["error"] == "Method Not Allowed"

    @pytest.mark.asyncio
    async def test_request_id_round_trip(self, test_client):
        response = await test_client.get("/nope", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"


class TestCreateBlog:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_trimmed_fields(self, test_client, blog_payload):
        response = await test_client.post(
            "/blogs",
            json=blog_payload(title="  My title ", author=" Ann ", description=" Text  "),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Blog created successfully"
        blog = body["blog"]
        assert blog["title"] == "My title"
        assert blog["author"] == "Ann"
        assert blog["description"] == "Text"
        assert blog["revision"] == 0
        assert blog["id"]

    @pytest.mark.asyncio
    async def test_example_post_then_list(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload(title="A", author="Bob", description="D"))
        assert created["title"] == "A"

        response = await test_client.get("/blogs")
        body = response.json()
        assert response.status_code == 200
        assert body["count"] >= 1
        assert created["id"] in [b["id"] for b in body["blogs"]]

    @pytest.mark.asyncio
    async def test_missing_title_rejected_and_nothing_stored(self, test_client):
        response = await test_client.post(
            "/blogs", json={"data": {"author": "Bob", "description": "D"}}
        )

        assert response.status_code == 400
        assert "title" in response.json()["error"]

        listing = await test_client.get("/blogs")
        assert listing.json()["count"] == 0

    @pytest.mark.asyncio
    async def test_blank_author_rejected(self, test_client, blog_payload):
        response = await test_client.post("/blogs", json=blog_payload(author="   "))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_title_too_long_rejected(self, test_client, blog_payload):
        response = await test_client.post("/blogs", json=blog_payload(title="x" * 101))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_description_too_long_rejected(self, test_client, blog_payload):
        response = await test_client.post("/blogs", json=blog_payload(description="x" * 1001))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_data_wrapper_rejected(self, test_client):
        response = await test_client.post(
            "/blogs", json={"title": "A", "author": "B", "description": "C"}
        )
        assert response.status_code == 400


class TestGetBlog:

    @pytest.mark.asyncio
    async def test_get_existing(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())

        response = await test_client.get(f"/blog/id/{created['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Blog found"
        assert response.json()["blog"] == created

    @pytest.mark.asyncio
    async def test_get_nonexistent_well_formed_id(self, test_client):
        response = await test_client.get(f"/blog/id/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "Blog not found"

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, test_client):
        response = await test_client.get("/blog/id/not-an-id")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid blog ID format"


class TestListBlogs:

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client):
        response = await test_client.get("/blogs")
        assert response.status_code == 200
        assert response.json() == {
            "message": "Blogs retrieved successfully",
            "count": 0,
            "blogs": [],
        }

    @pytest.mark.asyncio
    async def test_list_in_creation_order(self, test_client, blog_payload):
        ids = [
            (await _create(test_client, blog_payload(title=f"post {i}")))["id"]
            for i in range(3)
        ]

        response = await test_client.get("/blogs")

        assert [b["id"] for b in response.json()["blogs"]] == ids


class TestUpdateBlog:

    @pytest.mark.asyncio
    async def test_partial_update_bumps_revision_once(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload(title="Old", author="Ann"))

        response = await test_client.put(
            f"/blog/id/{created['id']}", json={"data": {"title": "  New  "}}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Blog updated successfully"
        blog = body["blog"]
        assert blog["title"] == "New"
        assert blog["author"] == "Ann"
        assert blog["description"] == created["description"]
        assert blog["revision"] == created["revision"] + 1

    @pytest.mark.asyncio
    async def test_each_update_adds_one(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        url = f"/blog/id/{created['id']}"

        await test_client.put(url, json={"data": {"title": "B"}})
        response = await test_client.put(url, json={"data": {"author": "C"}})

        assert response.json()["blog"]["revision"] == 2

    @pytest.mark.asyncio
    async def test_empty_data_rejected_and_record_unchanged(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        url = f"/blog/id/{created['id']}"

        response = await test_client.put(url, json={"data": {}})

        assert response.status_code == 400
        assert response.json()["error"] == "No update data provided"
        stored = (await test_client.get(url)).json()["blog"]
        assert stored == created

    @pytest.mark.asyncio
    async def test_missing_data_key_rejected(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        response = await test_client.put(f"/blog/id/{created['id']}", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_null_data_rejected(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        response = await test_client.put(f"/blog/id/{created['id']}", json={"data": None})
        assert response.status_code == 400
        assert response.json()["error"] == "No update data provided"

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        url = f"/blog/id/{created['id']}"

        response = await test_client.put(url, json={"data": {"revision": 99}})

        assert response.status_code == 400
        assert (await test_client.get(url)).json()["blog"]["revision"] == 0

    @pytest.mark.asyncio
    async def test_invalid_value_rejected(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        response = await test_client.put(
            f"/blog/id/{created['id']}", json={"data": {"title": "x" * 101}}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_nonexistent(self, test_client):
        response = await test_client.put(f"/blog/id/{uuid4()}", json={"data": {"title": "T"}})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_malformed_id(self, test_client):
        response = await test_client.put("/blog/id/123", json={"data": {"title": "T"}})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid blog ID format"


class TestDeleteBlog:

    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(self, test_client, blog_payload):
        created = await _create(test_client, blog_payload())
        url = f"/blog/id/{created['id']}"

        response = await test_client.delete(url)
        assert response.status_code == 200
        assert response.json() == {"message": "Blog deleted successfully"}

        assert (await test_client.get(url)).status_code == 404
        assert (await test_client.delete(url)).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, test_client):
        response = await test_client.delete("/blog/id/zzz")
        assert response.status_code == 400


class TestAuthorSearch:

    @pytest.mark.asyncio
    async def test_case_insensitive_substring(self, test_client, blog_payload):
        for author in ("John", "Joanna", "Bob", "majordomo"):
            await _create(test_client, blog_payload(author=author))

        response = await test_client.get("/blog/author", params={"name": "Jo"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Blogs successfully retrieved by author"
        authors = [b["author"] for b in body["blogs"]]
        assert authors == ["John", "Joanna", "majordomo"]
        assert body["count"] == 3

    @pytest.mark.asyncio
    async def test_lowercase_query_matches(self, test_client, blog_payload):
        await _create(test_client, blog_payload(author="John"))
        response = await test_client.get("/blog/author", params={"name": "jOHN"})
        assert response.json()["count"] == 1

    @pytest.mark.asyncio
    async def test_no_match_is_404(self, test_client, blog_payload):
        await _create(test_client, blog_payload(author="Bob"))
        response = await test_client.get("/blog/author", params={"name": "Jo"})
        assert response.status_code == 404
        assert response.json()["error"] == "Blog not found"

    @pytest.mark.asyncio
    async def test_missing_name_is_400(self, test_client):
        response = await test_client.get("/blog/author")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_blank_name_is_400(self, test_client, blog_payload):
        await _create(test_client, blog_payload(author="   Bob"))
        response = await test_client.get("/blog/author", params={"name": "   "})
        assert response.status_code == 400
        assert response.json()["error"] == "Author name is required"


class TestServerErrors:

    @pytest.mark.asyncio
    async def test_store_error_is_500(self, app, test_client):
        failing = MagicMock()
        failing.list_all = AsyncMock(side_effect=StoreError(context={"operation": "list_all"}))
        app.dependency_overrides[get_blog_service] = lambda: failing

        response = await test_client.get("/blogs")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "A database error occurred. Please try again later."
        assert "operation" not in body

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500(self, app):
        failing = MagicMock()
        failing.list_all = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_blog_service] = lambda: failing

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/blogs")

        assert response.status_code == 500
        assert response.json()["error"] == "Something went wrong!"

    @pytest.mark.asyncio
    async def test_disconnected_database_is_500(self, app, test_client):
        app.state.database = None

        response = await test_client.get("/blogs")

        assert response.status_code == 500
        assert (await test_client.get("/health")).status_code == 200

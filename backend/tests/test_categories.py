"""
Tests for the category endpoints and the JSON envelope they return.
"""
import pytest

from app.models.category import CategoryCreate
from app.services.category_service import category_service


async def add_category(client, headers, **body):
    return await client.post("/api/category/add", json=body, headers=headers)


class TestCreate:

    async def test_derives_slug_from_name(self, client, admin_headers):
        resp = await add_category(client, admin_headers, name="My Topic")

        assert resp.status_code == 201
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "Category added successfully."
        assert data["category"]["name"] == "My Topic"
        assert data["category"]["slug"] == "my-topic"

    async def test_explicit_slug_is_normalized(self, client, admin_headers):
        resp = await add_category(client, admin_headers, name="Đà Lạt Travel", slug="Da Lat  Travel!")

        assert resp.status_code == 201
        assert resp.json()["category"]["slug"] == "da-lat-travel"

    async def test_duplicate_name_is_a_conflict(self, client, admin_headers):
        await add_category(client, admin_headers, name="My Topic")

        resp = await add_category(client, admin_headers, name="My Topic")

        assert resp.status_code == 409
        assert resp.json()["success"] is False
        assert resp.json()["statusCode"] == 409

    async def test_duplicate_slug_is_a_conflict(self, client, admin_headers):
        await add_category(client, admin_headers, name="My Topic")

        resp = await add_category(client, admin_headers, name="Another Name", slug="my-topic")

        assert resp.status_code == 409

    async def test_missing_name_is_a_validation_error(self, client, admin_headers):
        resp = await add_category(client, admin_headers, slug="no-name")

        assert resp.status_code == 400
        body = resp.json()
        assert body == {"success": False, "statusCode": 400, "message": body["message"]}
        assert "name" in body["message"]

    async def test_name_without_slug_characters_is_rejected(self, client, admin_headers):
        resp = await add_category(client, admin_headers, name="!!!")

        assert resp.status_code == 400

    async def test_requires_admin(self, client, author_headers):
        resp = await add_category(client, author_headers, name="My Topic")

        assert resp.status_code == 403
        assert resp.json()["success"] is False

    async def test_requires_authentication(self, client):
        resp = await client.post("/api/category/add", json={"name": "My Topic"})

        assert resp.status_code == 401
        assert resp.json()["statusCode"] == 401


class TestRead:

    async def test_list_is_ordered_by_name(self, client, admin_headers):
        for name in ["Zebra Facts", "Apple Pie", "Mango Season"]:
            await add_category(client, admin_headers, name=name)

        resp = await client.get("/api/category/all-category")

        assert resp.status_code == 200
        names = [c["name"] for c in resp.json()["category"]]
        assert names == ["Apple Pie", "Mango Season", "Zebra Facts"]

    async def test_empty_list_is_not_an_error(self, client):
        resp = await client.get("/api/category/all-category")

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "category": []}

    async def test_get_by_id(self, client, admin_headers):
        created = (await add_category(client, admin_headers, name="My Topic")).json()["category"]

        resp = await client.get(f"/api/category/{created['id']}")

        assert resp.status_code == 200
        assert resp.json()["category"]["slug"] == "my-topic"

    async def test_get_missing_is_not_found(self, client):
        resp = await client.get("/api/category/9999")

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "statusCode": 404, "message": "Category not found."}


class TestUpdate:

    async def test_partial_update_keeps_slug(self, client, admin_headers):
        created = (await add_category(client, admin_headers, name="My Topic")).json()["category"]

        resp = await client.put(
            f"/api/category/{created['id']}", json={"name": "My Renamed Topic"}, headers=admin_headers
        )

        assert resp.status_code == 200
        category = resp.json()["category"]
        assert category["name"] == "My Renamed Topic"
        assert category["slug"] == "my-topic"

    async def test_update_slug(self, client, admin_headers):
        created = (await add_category(client, admin_headers, name="My Topic")).json()["category"]

        resp = await client.put(
            f"/api/category/{created['id']}", json={"slug": "New Slug"}, headers=admin_headers
        )

        assert resp.json()["category"]["slug"] == "new-slug"

    async def test_update_to_taken_name_is_a_conflict(self, client, admin_headers):
        await add_category(client, admin_headers, name="First")
        second = (await add_category(client, admin_headers, name="Second")).json()["category"]

        resp = await client.put(f"/api/category/{second['id']}", json={"name": "First"}, headers=admin_headers)

        assert resp.status_code == 409

    async def test_update_missing_is_not_found(self, client, admin_headers):
        resp = await client.put("/api/category/9999", json={"name": "Whatever"}, headers=admin_headers)

        assert resp.status_code == 404


class TestDelete:

    async def test_delete(self, client, admin_headers):
        created = (await add_category(client, admin_headers, name="My Topic")).json()["category"]

        resp = await client.delete(f"/api/category/{created['id']}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert (await client.get(f"/api/category/{created['id']}")).status_code == 404

    async def test_delete_missing_is_not_found(self, client, admin_headers):
        resp = await client.delete("/api/category/9999", headers=admin_headers)

        assert resp.status_code == 404
        assert resp.json()["success"] is False

    async def test_delete_twice_is_not_found(self, client, admin_headers):
        created = (await add_category(client, admin_headers, name="My Topic")).json()["category"]
        await client.delete(f"/api/category/{created['id']}", headers=admin_headers)

        resp = await client.delete(f"/api/category/{created['id']}", headers=admin_headers)

        assert resp.status_code == 404

    async def test_category_in_use_cannot_be_deleted(self, client, admin_headers, author_headers):
        created = (await add_category(client, admin_headers, name="My Topic")).json()["category"]
        await client.post(
            "/api/blog/add",
            json={"category_id": created["id"], "title": "Hello World", "blog_content": "<p>Hi</p>"},
            headers=author_headers,
        )

        resp = await client.delete(f"/api/category/{created['id']}", headers=admin_headers)

        assert resp.status_code == 409


class FakeCache:
    def __init__(self):
        self.store = {}
        self.deleted = []

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl=None):
        self.store[key] = value

    async def incr(self, key):
        self.store[key] = self.store.get(key, 0) + 1
        return self.store[key]

    async def delete_pattern(self, pattern):
        self.deleted.append(pattern)
        prefix = pattern.rstrip("*")
        for key in [k for k in self.store if k.startswith(prefix)]:
            del self.store[key]

    def cached_lists(self):
        return {k: v for k, v in self.store.items() if k.startswith("categories:all:")}


@pytest.fixture
def fake_cache(monkeypatch):
    cache = FakeCache()
    monkeypatch.setattr("app.services.category_service.cache_service", cache)
    return cache


async def test_list_is_cached_and_invalidated(client, admin_headers, fake_cache):
    await add_category(client, admin_headers, name="Apple Pie")
    await client.get("/api/category/all-category")
    [cached] = fake_cache.cached_lists().values()
    assert cached[0]["name"] == "Apple Pie"
    invalidations = len(fake_cache.deleted)

    await add_category(client, admin_headers, name="Banana Bread")

    assert len(fake_cache.deleted) == invalidations + 1
    assert fake_cache.cached_lists() == {}
    resp = await client.get("/api/category/all-category")
    assert [c["name"] for c in resp.json()["category"]] == ["Apple Pie", "Banana Bread"]


async def test_cached_list_is_served_without_the_database(db, fake_cache):
    fake_cache.store["categories:all:0"] = [{"id": 7, "name": "Cached", "slug": "cached"}]

    categories = await category_service.get_all_categories(db)

    assert [c.name for c in categories] == ["Cached"]


async def test_list_read_racing_a_write_is_not_served_later(db, fake_cache, monkeypatch):
    await category_service.create_category(db, CategoryCreate(name="Apple Pie"))
    original_set = fake_cache.set
    raced = []

    async def set_after_concurrent_create(key, value, ttl=None):
        # Another request adds a category after the list was read, before it is cached
        if not raced:
            raced.append(key)
            await category_service.create_category(db, CategoryCreate(name="Banana Bread"))
        await original_set(key, value, ttl)

    monkeypatch.setattr(fake_cache, "set", set_after_concurrent_create)

    stale = await category_service.get_all_categories(db)
    fresh = await category_service.get_all_categories(db)

    assert [c.name for c in stale] == ["Apple Pie"]
    assert [c.name for c in fresh] == ["Apple Pie", "Banana Bread"]

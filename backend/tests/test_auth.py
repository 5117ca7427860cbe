"""
Tests for registration, login, tokens and user profiles.
"""
import pytest

from app.services.auth import auth_service

from conftest import PASSWORD


async def register(client, **overrides):
    body = {"name": "Carol Reader", "email": "carol@example.com", "password": PASSWORD, **overrides}
    return await client.post("/api/auth/register", json=body)


class TestRegisterAndLogin:

    async def test_register(self, client):
        resp = await register(client)

        assert resp.status_code == 201
        data = resp.json()
        assert data["success"] is True
        assert data["user"]["email"] == "carol@example.com"
        assert data["user"]["is_admin"] is False
        assert "hashed_password" not in data["user"]

    async def test_register_normalizes_email_case(self, client):
        await register(client, email="Carol@Example.com")

        resp = await register(client, email="carol@example.com")

        assert resp.status_code == 409
        assert resp.json()["message"] == "User already registered."

    @pytest.mark.parametrize("overrides", [
        {"name": "Al"},
        {"email": "not-an-email"},
        {"password": "short"},
    ])
    async def test_register_validation(self, client, overrides):
        resp = await register(client, **overrides)

        assert resp.status_code == 400
        assert resp.json()["success"] is False

    async def test_login_returns_tokens_and_sets_cookie(self, client):
        await register(client)

        resp = await client.post("/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD})

        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["name"] == "Carol Reader"
        assert data["token_type"] == "bearer"
        assert "access_token" in resp.cookies

    async def test_cookie_authenticates_later_requests(self, client):
        await register(client)
        await client.post("/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD})

        resp = await client.get("/api/auth/me")

        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "carol@example.com"

    @pytest.mark.parametrize("email,password", [
        ("carol@example.com", "wrong-password"),
        ("nobody@example.com", PASSWORD),
    ])
    async def test_bad_credentials_are_401(self, client, email, password):
        await register(client)

        resp = await client.post("/api/auth/login", json={"email": email, "password": password})

        assert resp.status_code == 401
        assert resp.json() == {"success": False, "statusCode": 401, "message": "Invalid login credentials."}

    async def test_logout_clears_cookie(self, client):
        await register(client)
        await client.post("/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD})

        resp = await client.post("/api/auth/logout")

        assert resp.status_code == 200
        assert (await client.get("/api/auth/me")).status_code == 401


class TestTokens:

    async def test_me_with_bearer_header(self, client, author_headers):
        resp = await client.get("/api/auth/me", headers=author_headers)

        assert resp.json()["user"]["name"] == "Alice Writer"

    async def test_garbage_token_is_401(self, client):
        resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    async def test_refresh_issues_new_pair(self, client, author):
        refresh = auth_service.create_refresh_token(author.id)

        resp = await client.post("/api/auth/refresh", json={"refresh_token": refresh})

        assert resp.status_code == 200
        access = resp.json()["access_token"]
        assert auth_service.decode_token(access) == author.id

    async def test_refresh_rejects_access_token(self, client, author):
        access = auth_service.create_access_token(author.id)

        resp = await client.post("/api/auth/refresh", json={"refresh_token": access})

        assert resp.status_code == 401

    async def test_refresh_token_is_not_an_access_token(self, client, author):
        refresh = auth_service.create_refresh_token(author.id)

        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {refresh}"})

        assert resp.status_code == 401


class TestEnsureAdmin:

    async def test_promotes_existing_user(self, db, author):
        user = await auth_service.ensure_admin(db, name="ignored", email="ALICE@example.com")

        assert user.id == author.id
        assert user.is_admin is True
        assert user.name == "Alice Writer"

    async def test_creates_new_admin(self, db):
        user = await auth_service.ensure_admin(db, name="Root", email="root@example.com", password=PASSWORD)

        assert user.is_admin is True
        assert auth_service.verify_password(PASSWORD, user.hashed_password)

    async def test_new_admin_needs_password(self, db):
        with pytest.raises(ValueError):
            await auth_service.ensure_admin(db, name="Root", email="root@example.com")


class TestUsers:

    async def test_admin_lists_users(self, client, admin_headers, author):
        resp = await client.get("/api/user/get-all-user", headers=admin_headers)

        assert resp.status_code == 200
        assert {u["email"] for u in resp.json()["user"]} == {"admin@example.com", "alice@example.com"}

    async def test_author_cannot_list_users(self, client, author_headers):
        resp = await client.get("/api/user/get-all-user", headers=author_headers)

        assert resp.status_code == 403

    async def test_get_user(self, client, author_headers, author):
        resp = await client.get(f"/api/user/get-user/{author.id}", headers=author_headers)

        assert resp.json()["user"]["name"] == "Alice Writer"

    async def test_get_missing_user_is_404(self, client, author_headers):
        resp = await client.get("/api/user/get-user/9999", headers=author_headers)

        assert resp.status_code == 404

    async def test_update_own_profile(self, client, author_headers, author):
        resp = await client.put(
            f"/api/user/update-user/{author.id}",
            json={"bio": "Writes about tea", "password": "a-brand-new-secret"},
            headers=author_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["user"]["bio"] == "Writes about tea"
        assert resp.json()["user"]["name"] == "Alice Writer"
        login = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "a-brand-new-secret"}
        )
        assert login.status_code == 200

    async def test_cannot_update_someone_else(self, client, other_headers, author):
        resp = await client.put(f"/api/user/update-user/{author.id}", json={"bio": "x"}, headers=other_headers)

        assert resp.status_code == 403

    async def test_admin_deletes_user_and_their_content(self, client, admin_headers, author_headers, author):
        category = (await client.post("/api/category/add", json={"name": "Tea"}, headers=admin_headers)).json()["category"]
        await client.post(
            "/api/blog/add",
            json={"category_id": category["id"], "title": "Green Tea", "blog_content": "<p>Tea</p>"},
            headers=author_headers,
        )

        resp = await client.delete(f"/api/user/delete/{author.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert (await client.get("/api/blog/blogs")).json()["blog"] == []
        assert (await client.get(f"/api/user/get-user/{author.id}", headers=admin_headers)).status_code == 404

    async def test_delete_missing_user_is_404(self, client, admin_headers):
        resp = await client.delete("/api/user/delete/9999", headers=admin_headers)

        assert resp.status_code == 404

    async def test_admin_cannot_delete_self(self, client, admin_headers, admin):
        resp = await client.delete(f"/api/user/delete/{admin.id}", headers=admin_headers)

        assert resp.status_code == 400

"""
Tests for magic-link authentication endpoints.
"""
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from httpx import AsyncClient

from humidor_club.services.auth import create_access_token, create_magic_link_token


def _token_from(url: str) -> str:
    return parse_qs(urlparse(url).query)["token"][0]


class TestMagicLinkFlow:
    async def test_request_lookup_verify_me(self, client: AsyncClient):
        response = await client.post("/api/auth/magic-link", json={"email": "NewMember@Example.com"})
        assert response.status_code == 202
        assert response.json()["expires_in_minutes"] > 0

        lookup = await client.get("/api/auth/magic-link", params={"email": "newmember@example.com"})
        assert lookup.status_code == 200
        assert lookup.json()["email"] == "newmember@example.com"
        url = lookup.json()["url"]
        assert "/auth/verify?token=" in url

        verified = await client.post("/api/auth/verify", json={"token": _token_from(url)})
        assert verified.status_code == 200
        body = verified.json()
        assert body["token_type"] == "bearer"

        me = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == "newmember@example.com"
        assert me.json()["last_login"] is not None

    async def test_existing_member_is_reused(self, client: AsyncClient, test_user):
        await client.post("/api/auth/magic-link", json={"email": "member@example.com"})
        lookup = await client.get("/api/auth/magic-link", params={"email": "member@example.com"})

        verified = await client.post("/api/auth/verify", json={"token": _token_from(lookup.json()["url"])})
        me = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {verified.json()['access_token']}"}
        )

        assert me.json()["id"] == test_user.id

    async def test_invalid_email_is_rejected(self, client: AsyncClient):
        response = await client.post("/api/auth/magic-link", json={"email": "not-an-email"})
        assert response.status_code == 422

    async def test_lookup_without_link_is_not_found(self, client: AsyncClient):
        response = await client.get("/api/auth/magic-link", params={"email": "nobody@example.com"})
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestVerify:
    async def test_garbage_token(self, client: AsyncClient):
        response = await client.post("/api/auth/verify", json={"token": "not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    async def test_access_token_is_not_a_sign_in_link(self, client: AsyncClient, test_user):
        response = await client.post("/api/auth/verify", json={"token": create_access_token(test_user.id)})
        assert response.status_code == 401

    async def test_expired_link(self, client: AsyncClient, test_user):
        token = create_magic_link_token(test_user.id, test_user.email, expires_delta=timedelta(minutes=-1))
        response = await client.post("/api/auth/verify", json={"token": token})
        assert response.status_code == 401


class TestMe:
    async def test_requires_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_sign_in_link_is_not_an_access_token(self, client: AsyncClient, test_user):
        token = create_magic_link_token(test_user.id, test_user.email)
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_returns_current_user(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user.email

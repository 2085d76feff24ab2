"""
API tests for sign-up, sign-in, Google sign-in and the profile.
"""
from unittest.mock import Mock, patch

import httpx

from tests.conftest import auth_headers, sign_up


def _google_response(status_code=200, **claims):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = claims
    return response


class TestPasswordAuth:
    """Tests for email and password accounts."""

    def test_signup_returns_token_and_user(self, client):
        data = sign_up(client, "Jane@Example.com")

        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["email"] == "jane@example.com"
        assert data["user"]["subscription_tier"] == "free"
        assert "password" not in data["user"]

    def test_duplicate_signup_conflicts(self, client):
        sign_up(client)
        response = client.post("/api/v1/auth/signup", json={"email": "user@example.com", "password": "secret2"})

        assert response.status_code == 409

    def test_signup_validation(self, client):
        assert client.post("/api/v1/auth/signup", json={"email": "nope", "password": "secret1"}).status_code == 422
        assert client.post("/api/v1/auth/signup", json={"email": "a@b.co", "password": "123"}).status_code == 422

    def test_login(self, client):
        sign_up(client)
        ok = client.post("/api/v1/auth/login", json={"email": "USER@example.com", "password": "secret1"})
        bad = client.post("/api/v1/auth/login", json={"email": "user@example.com", "password": "wrong!"})

        assert ok.status_code == 200
        assert ok.json()["user"]["email"] == "user@example.com"
        assert bad.status_code == 401

    def test_me_requires_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401
        assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401

    def test_me_and_update(self, client):
        headers = auth_headers(client)
        response = client.patch("/api/v1/auth/me", json={"full_name": "Jane Doe"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["full_name"] == "Jane Doe"
        assert client.get("/api/v1/auth/me", headers=headers).json()["full_name"] == "Jane Doe"

    def test_password_change(self, client):
        headers = auth_headers(client)
        client.patch("/api/v1/auth/me", json={"password": "newsecret"}, headers=headers)

        assert client.post("/api/v1/auth/login", json={"email": "user@example.com", "password": "secret1"}).status_code == 401
        assert client.post("/api/v1/auth/login", json={"email": "user@example.com", "password": "newsecret"}).status_code == 200

    def test_logout_revokes_token(self, client):
        headers = auth_headers(client)

        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 204
        assert client.get("/api/v1/auth/me", headers=headers).status_code == 401

    def test_status(self, client):
        assert client.get("/api/v1/auth/status").json() == {
            "password": True,
            "google": False,
            "google_client_id": None,
        }


class TestGoogleAuth:
    """Tests for Google sign-in with mocked token verification."""

    def test_creates_account(self, client):
        claims = {"sub": "g-123", "email": "g@example.com", "email_verified": "true", "name": "Gee"}
        with patch("slidesync_api.app.services.user_service.httpx.get", return_value=_google_response(**claims)):
            response = client.post("/api/v1/auth/google", json={"id_token": "x" * 20})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "g@example.com"
        assert user["social_provider"] == "google"
        assert user["full_name"] == "Gee"

    def test_links_existing_account(self, client):
        existing = sign_up(client, "g@example.com")["user"]
        claims = {"sub": "g-123", "email": "g@example.com", "email_verified": True}
        with patch("slidesync_api.app.services.user_service.httpx.get", return_value=_google_response(**claims)):
            response = client.post("/api/v1/auth/google", json={"id_token": "x" * 20})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == existing["id"]

    def test_rejected_token(self, client):
        with patch("slidesync_api.app.services.user_service.httpx.get", return_value=_google_response(400)):
            response = client.post("/api/v1/auth/google", json={"id_token": "x" * 20})

        assert response.status_code == 401

    def test_wrong_audience(self, client, monkeypatch):
        monkeypatch.setattr("slidesync_api.app.services.user_service.settings.google_client_id", "my-client")
        claims = {"sub": "g-1", "aud": "other-client"}
        with patch("slidesync_api.app.services.user_service.httpx.get", return_value=_google_response(**claims)):
            response = client.post("/api/v1/auth/google", json={"id_token": "x" * 20})

        assert response.status_code == 401

    def test_google_unreachable(self, client):
        with patch(
            "slidesync_api.app.services.user_service.httpx.get",
            side_effect=httpx.ConnectError("boom"),
        ):
            response = client.post("/api/v1/auth/google", json={"id_token": "x" * 20})

        assert response.status_code == 502

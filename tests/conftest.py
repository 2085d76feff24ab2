"""
Pytest configuration and fixtures.
"""
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from slidesync_api.app.core.config import settings
from slidesync_api.app.core.db import get_connection, init_db
from slidesync_api.app.main import create_app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the database and media directory at a temporary folder."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "media_dir", str(tmp_path / "media"))
    monkeypatch.setattr(settings, "music_dir", str(tmp_path / "music"))
    monkeypatch.setattr(settings, "public_base_url", "http://testserver")
    monkeypatch.setattr(settings, "stripe_secret_key", "")
    monkeypatch.setattr(settings, "stripe_webhook_secret", "")
    monkeypatch.setattr(settings, "google_client_id", "")
    init_db()
    return settings


@pytest.fixture
def client(isolated_settings):
    """Create a test client for a freshly configured application."""
    with TestClient(create_app()) as test_client:
        yield test_client


def png_bytes(color=(200, 120, 40), size=(64, 48)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def sign_up(client, email="user@example.com", password="secret1") -> dict:
    response = client.post("/api/v1/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(client, email="user@example.com", password="secret1") -> dict:
    token = sign_up(client, email, password)["access_token"]
    return {"Authorization": f"Bearer {token}"}


def make_premium(email="user@example.com") -> None:
    conn = get_connection()
    try:
        conn.execute("UPDATE users SET subscription_tier = 'premium' WHERE email = ?", (email,))
        conn.commit()
    finally:
        conn.close()


def upload_image(client, headers, color=(200, 120, 40), size=(64, 48)) -> str:
    response = client.post(
        "/api/v1/media/images",
        files={"file": ("photo.png", png_bytes(color, size), "image/png")},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["url"]


def create_slideshow(client, headers, **fields) -> dict:
    body = {"title": "My Slideshow"}
    body.update(fields)
    response = client.post("/api/v1/slideshows/", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def headers(client):
    return auth_headers(client)

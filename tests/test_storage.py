"""
Tests for media uploads and local storage.
"""
import pytest

from slidesync_api.app.core.config import settings
from slidesync_api.app.services.storage_service import StorageService, media_root
from tests.conftest import auth_headers, png_bytes


class TestUploads:
    """Upload endpoints."""

    def test_upload_image(self, client, headers):
        response = client.post(
            "/api/v1/media/images", files={"file": ("before.png", png_bytes(), "image/png")}, headers=headers
        )

        assert response.status_code == 201
        media = response.json()
        assert media["url"] == f"http://testserver/media/{media['path']}"
        assert media["path"].endswith(".png")
        assert media["content_type"] == "image/png"
        assert (media_root() / media["path"]).is_file()
        assert client.get(f"/media/{media['path']}").content == png_bytes()

    def test_upload_rejects_non_images(self, client, headers):
        text = client.post("/api/v1/media/images", files={"file": ("a.txt", b"hi", "text/plain")}, headers=headers)
        fake = client.post("/api/v1/media/images", files={"file": ("a.png", b"nope", "image/png")}, headers=headers)

        assert text.status_code == 400
        assert fake.status_code == 400

    def test_upload_too_large(self, client, headers, monkeypatch):
        monkeypatch.setattr(settings, "max_image_bytes", 10)

        response = client.post(
            "/api/v1/media/images", files={"file": ("a.png", png_bytes(), "image/png")}, headers=headers
        )

        assert response.status_code == 413

    def test_upload_audio(self, client, headers, monkeypatch):
        ok = client.post("/api/v1/media/audio", files={"file": ("song.mp3", b"ID3data", "audio/mpeg")}, headers=headers)
        wrong = client.post("/api/v1/media/audio", files={"file": ("song.png", png_bytes(), "image/png")}, headers=headers)
        monkeypatch.setattr(settings, "max_audio_bytes", 3)
        big = client.post("/api/v1/media/audio", files={"file": ("song.mp3", b"ID3data", "audio/mpeg")}, headers=headers)

        assert ok.status_code == 201
        assert ok.json()["path"].endswith(".mp3")
        assert wrong.status_code == 400
        assert big.status_code == 413

    def test_upload_requires_auth(self, client):
        response = client.post("/api/v1/media/images", files={"file": ("a.png", png_bytes(), "image/png")})

        assert response.status_code == 401


class TestDelete:
    """Deleting uploaded files."""

    def test_delete_own_file(self, client, headers):
        path = client.post(
            "/api/v1/media/images", files={"file": ("a.png", png_bytes(), "image/png")}, headers=headers
        ).json()["path"]

        assert client.delete(f"/api/v1/media/{path}", headers=headers).status_code == 204
        assert not (media_root() / path).exists()
        assert client.delete(f"/api/v1/media/{path}", headers=headers).status_code == 404

    def test_cannot_delete_others_files(self, client, headers):
        path = client.post(
            "/api/v1/media/images", files={"file": ("a.png", png_bytes(), "image/png")}, headers=headers
        ).json()["path"]
        other = auth_headers(client, "other@example.com")

        assert client.delete(f"/api/v1/media/{path}", headers=other).status_code == 403
        assert (media_root() / path).is_file()


class TestLocalPath:
    """Mapping URLs to files."""

    def test_local_and_remote_urls(self):
        assert StorageService.local_path("http://testserver/media/1/a.png") == media_root() / "1" / "a.png"
        assert StorageService.local_path("/media/1/a.png") == media_root() / "1" / "a.png"
        assert StorageService.local_path("https://cdn.example.com/a.png") is None

    def test_traversal_rejected(self):
        with pytest.raises(ValueError):
            StorageService.local_path("/media/../secret.db")

    def test_unique_names(self):
        first = StorageService.export_path()
        first.write_bytes(b"")
        second = StorageService.export_path()

        assert first != second
        assert second.name.startswith("slideshow_")

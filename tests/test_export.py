"""
Tests for video export.  Rendering with ffmpeg is mocked out.
"""
from unittest.mock import patch

import pytest
from moviepy import vfx

from slidesync_api.app.core.config import settings
from slidesync_api.app.services.export_service import resolve_music, transition_effects, video_duration
from tests.conftest import create_slideshow, make_premium, upload_image

RENDER = "slidesync_api.app.services.export_service.render_video"


class TestExportHelpers:
    """Unit tests for transitions, durations and music lookup."""

    def test_transition_effects(self):
        assert isinstance(transition_effects("fade", 1)[0], vfx.CrossFadeIn)
        assert isinstance(transition_effects("slide-left", 1)[0], vfx.SlideIn)
        assert transition_effects("slide-left", 1)[0].side == "right"
        assert transition_effects("slide-right", 1)[0].side == "left"
        assert isinstance(transition_effects("zoom", 1)[0], vfx.Resize)
        assert isinstance(transition_effects("spin", 1)[0], vfx.Rotate)
        assert isinstance(transition_effects("unknown", 1)[0], vfx.CrossFadeIn)

    def test_video_duration(self):
        assert video_duration(0, 3, 1) == 0
        assert video_duration(1, 3, 1) == 3
        assert video_duration(3, 3, 1) == 7

    def test_resolve_music(self, tmp_path):
        music_dir = tmp_path / "music"
        music_dir.mkdir()
        (music_dir / "upbeat.mp3").write_bytes(b"ID3")

        assert resolve_music(None) is None
        assert resolve_music("upbeat") == music_dir / "upbeat.mp3"
        assert resolve_music("cinematic") is None
        assert resolve_music("streaming-spotify-1") is None
        assert resolve_music(f"{settings.public_base_url}/media/1/missing.mp3") is None


class TestExportAPI:
    """Export through the API with the renderer patched."""

    def test_free_export_is_watermarked_720p(self, client, headers):
        images = [upload_image(client, headers), upload_image(client, headers, (0, 0, 0))]
        show = create_slideshow(client, headers, images=images)

        with patch(RENDER, return_value=5.0) as render:
            response = client.post(f"/api/v1/slideshows/{show['id']}/export", headers=headers)

        assert response.status_code == 200
        result = response.json()
        assert result["format"] == "720p"
        assert (result["width"], result["height"]) == (1280, 720)
        assert result["watermark"] is True
        assert result["duration"] == 5.0
        assert result["url"] == f"http://testserver/media/exports/{result['filename']}"
        assert result["filename"].startswith("slideshow_") and result["filename"].endswith(".mp4")
        args = render.call_args.args
        assert args[1:3] == (1280, 720)
        assert args[4] == settings.watermark_text

    def test_1080p_needs_premium(self, client, headers):
        show = create_slideshow(client, headers, images=[upload_image(client, headers)])
        url = f"/api/v1/slideshows/{show['id']}/export"

        with patch(RENDER, return_value=3.0):
            assert client.post(url, json={"format": "1080p"}, headers=headers).status_code == 403
            make_premium()
            response = client.post(url, json={"format": "1080p"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["width"] == 1920
        assert response.json()["watermark"] is False

    def test_export_without_images(self, client, headers):
        show = create_slideshow(client, headers)

        assert client.post(f"/api/v1/slideshows/{show['id']}/export", headers=headers).status_code == 400

    def test_failed_render_propagates(self, client, headers):
        show = create_slideshow(client, headers, images=[upload_image(client, headers)])

        with patch(RENDER, side_effect=OSError("ffmpeg missing")), pytest.raises(OSError):
            client.post(f"/api/v1/slideshows/{show['id']}/export", headers=headers)

        assert client.get("/api/v1/analytics/activity", params={"action": "export"}, headers=headers).json() == []

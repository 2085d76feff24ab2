"""
Tests for the editor steps, suggestions and templates.
"""
import pytest

from slidesync_api.app.services.editor_service import can_proceed, next_step, previous_step, slide_label
from tests.conftest import create_slideshow, make_premium

IMAGES = ["https://cdn.example.com/before.jpg", "https://cdn.example.com/after.jpg"]


class TestEditorSteps:
    """Unit tests for step navigation."""

    def test_slide_labels(self):
        assert [slide_label(i) for i in range(4)] == ["Before", "After", "Image 3", "Image 4"]

    def test_steps_need_two_images(self):
        assert can_proceed("upload", 0) is True
        assert can_proceed("enhance", 1) is False
        assert can_proceed("export", 2) is True
        with pytest.raises(ValueError):
            can_proceed("publish", 2)

    def test_navigation_clamps(self):
        assert next_step("upload") == "enhance"
        assert next_step("export") == "export"
        assert previous_step("upload") == "upload"
        assert previous_step("music") == "text"

    def test_editor_state(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES[:1])

        state = client.get(f"/api/v1/slideshows/{show['id']}/editor", headers=headers).json()

        assert state["image_count"] == 1
        assert state["slide_labels"] == ["Before"]
        available = {s["id"]: s["available"] for s in state["steps"]}
        assert available["upload"] is True
        assert available["transition"] is False


class TestSuggestions:
    """Applying items of an enhancement report."""

    def test_text_suggestion_adds_overlay(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES)
        body = {"type": "text", "suggestion": {"text": "See the Difference", "position": "bottom", "color": "#96ceb4"}}

        updated = client.post(f"/api/v1/slideshows/{show['id']}/suggestions", json=body, headers=headers).json()

        overlay = updated["text_overlays"][0]
        assert overlay["text"] == "See the Difference"
        assert overlay["image_index"] == 0
        assert overlay["y"] == 80
        assert overlay["font"] == "Inter"
        assert overlay["size"] == 28

    def test_music_suggestion(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES)
        url = f"/api/v1/slideshows/{show['id']}/suggestions"

        assert client.post(url, json={"type": "music", "suggestion": "cinematic"}, headers=headers).json()["music"] == "cinematic"
        assert client.post(url, json={"type": "music", "suggestion": "energetic"}, headers=headers).status_code == 403

    def test_timing_suggestion(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES)
        url = f"/api/v1/slideshows/{show['id']}/suggestions"

        updated = client.post(url, json={"type": "timing", "suggestion": 3.5}, headers=headers).json()

        assert updated["settings"]["slide_duration"] == 3.5
        assert client.post(url, json={"type": "timing", "suggestion": 0}, headers=headers).status_code == 400
        assert client.post(url, json={"type": "timing", "suggestion": "soon"}, headers=headers).status_code == 400

    def test_bad_text_suggestion(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES)
        url = f"/api/v1/slideshows/{show['id']}/suggestions"

        assert client.post(url, json={"type": "text", "suggestion": "plain"}, headers=headers).status_code == 400
        assert client.post(url, json={"type": "layout", "suggestion": 1}, headers=headers).status_code == 422


class TestTemplates:
    """Applying catalog templates to a slideshow."""

    def test_apply_free_template(self, client, headers):
        show = create_slideshow(
            client, headers, images=IMAGES, text_overlays=[{"text": "Day 1"}]
        )

        response = client.post(
            f"/api/v1/slideshows/{show['id']}/template", json={"template_id": "home-renovation"}, headers=headers
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["transition"] == "swipe"
        assert updated["music"] == "upbeat"
        assert updated["text_overlays"][0]["color"] == "#2563eb"
        assert updated["text_overlays"][0]["size"] == 30
        assert updated["settings"]["template"] == "home-renovation"

    def test_genre_without_track_kept_in_settings(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES)

        updated = client.post(
            f"/api/v1/slideshows/{show['id']}/template", json={"template_id": "beauty-makeover"}, headers=headers
        ).json()

        assert updated["music"] is None
        assert updated["settings"]["music_genre"] == "elegant"

    def test_premium_template(self, client, headers):
        show = create_slideshow(client, headers, images=IMAGES)
        url = f"/api/v1/slideshows/{show['id']}/template"

        assert client.post(url, json={"template_id": "business-growth"}, headers=headers).status_code == 403
        assert client.post(url, json={"template_id": "missing"}, headers=headers).status_code == 404

        make_premium()
        assert client.post(url, json={"template_id": "business-growth"}, headers=headers).json()["transition"] == "zoom"

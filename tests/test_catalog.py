"""
Tests for the built-in catalog and the streaming-music helpers.
"""
import pytest

from slidesync_api.app.services.catalog_service import TEMPLATES, CatalogService


class TestCatalogService:
    """Unit tests for catalog lookups."""

    def test_premium_flags(self):
        assert CatalogService.get_transition("fade").premium is False
        assert CatalogService.get_transition("zoom").premium is True
        assert CatalogService.get_music("energetic").premium is True
        assert CatalogService.get_export_format("1080p").premium is True
        assert CatalogService.get_transition("wobble") is None

    def test_search_by_name_and_tag(self):
        assert [t.id for t in CatalogService.search_templates("FITNESS")] == ["fitness-transformation"]
        assert [t.id for t in CatalogService.search_templates("makeup")] == ["beauty-makeover"]
        assert len(CatalogService.search_templates("")) == len(TEMPLATES)

    def test_search_by_category(self):
        results = CatalogService.search_templates("", "food")

        assert [t.id for t in results] == ["food-recipe"]
        assert CatalogService.search_templates("fitness", "food") == []

    def test_categories_count_templates(self):
        counts = {c.id: c.count for c in CatalogService.categories()}

        assert counts["all"] == len(TEMPLATES)
        assert counts["fitness"] == 1
        assert counts["home"] == 1

    @pytest.mark.parametrize(
        "url,platform",
        [
            ("https://open.spotify.com/track/abc", "spotify"),
            ("https://audiomack.com/song/x", "audiomack"),
            ("https://music.apple.com/us/album/y", "apple"),
        ],
    )
    def test_detect_platform(self, url, platform):
        assert CatalogService.detect_platform(url) == platform

    def test_detect_platform_errors(self):
        with pytest.raises(ValueError, match="valid streaming URL"):
            CatalogService.detect_platform("  ")
        with pytest.raises(ValueError, match="Unsupported platform"):
            CatalogService.detect_platform("https://soundcloud.com/x")

    def test_music_references(self):
        assert CatalogService.is_music_reference("upbeat")
        assert CatalogService.is_music_reference("streaming-apple-1")
        assert CatalogService.is_music_reference("/media/1/song.mp3")
        assert not CatalogService.is_music_reference("polka")


class TestCatalogAPI:
    """Tests for the public catalog endpoints."""

    def test_full_catalog(self, client):
        data = client.get("/api/v1/catalog/").json()

        assert len(data["transitions"]) == 6
        assert len(data["music"]) == 6
        assert {f["id"] for f in data["export_formats"]} == {"720p", "1080p"}
        assert data["limits"]["min_images"] == 2
        assert data["premium_features"]

    def test_template_endpoints(self, client):
        assert client.get("/api/v1/catalog/templates", params={"q": "recipe"}).json()[0]["id"] == "food-recipe"
        assert client.get("/api/v1/catalog/templates/beauty-makeover").json()["transition"] == "fade"
        assert client.get("/api/v1/catalog/templates/nope").status_code == 404
        assert client.get("/api/v1/catalog/templates/categories").json()[0]["id"] == "all"

    def test_streaming_endpoints(self, client):
        imported = client.post("/api/v1/catalog/streaming/import", json={"url": "https://open.spotify.com/track/1"})
        rejected = client.post("/api/v1/catalog/streaming/import", json={"url": "https://example.com/x"})

        assert imported.status_code == 200
        assert imported.json()["platform"] == "spotify"
        assert imported.json()["music"].startswith("streaming-spotify-")
        assert rejected.status_code == 400
        assert len(client.get("/api/v1/catalog/streaming/search", params={"q": "happy"}).json()) == 3
        assert client.get("/api/v1/catalog/streaming/search").json() == []

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

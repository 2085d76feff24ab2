"""
Tests for share payloads and share/download counting.
"""
from urllib.parse import parse_qs, urlparse

from slidesync_api.app.services.share_service import DEFAULT_HASHTAGS, download_filename, qr_code_url
from tests.conftest import create_slideshow


class TestShareHelpers:
    """Unit tests for share helpers."""

    def test_download_filename(self):
        assert download_filename("My Kitchen Glow-Up!") == "my_kitchen_glow_up__slideshow.mp4"
        assert download_filename("abc") == "abc_slideshow.mp4"

    def test_qr_code_url(self):
        url = qr_code_url("https://example.com/v.mp4?a=1")
        query = parse_qs(urlparse(url).query)

        assert url.startswith("https://api.qrserver.com/v1/create-qr-code/?")
        assert query["size"] == ["200x200"]
        assert query["data"] == ["https://example.com/v.mp4?a=1"]


class TestShareAPI:
    """Share payloads through the API."""

    def test_default_payload(self, client, headers):
        show = create_slideshow(client, headers, title="Garden")

        payload = client.post(f"/api/v1/slideshows/{show['id']}/share", headers=headers).json()

        assert payload["message"] == "Check out my amazing before & after slideshow: Garden"
        assert payload["hashtags"] == DEFAULT_HASHTAGS
        assert payload["share_url"] == f"http://testserver/slideshows/{show['id']}"
        assert payload["video_url"] is None
        assert payload["download_filename"] == "garden_slideshow.mp4"
        assert set(payload["links"]) == {"twitter", "facebook", "whatsapp"}
        assert payload["clipboard_text"] == f"{payload['message']} {payload['share_url']} {DEFAULT_HASHTAGS}"

    def test_custom_payload(self, client, headers):
        show = create_slideshow(client, headers)
        body = {"video_url": "http://testserver/media/exports/slideshow_1.mp4", "text": "Look!", "hashtags": ["#diy"]}

        payload = client.post(f"/api/v1/slideshows/{show['id']}/share", json=body, headers=headers).json()

        assert payload["share_url"] == body["video_url"]
        assert payload["message"] == "Look!"
        assert payload["hashtags"] == "#diy"
        facebook = parse_qs(urlparse(payload["links"]["facebook"]).query)
        assert facebook["u"] == [body["video_url"]]

    def test_record_share_and_download(self, client, headers):
        show = create_slideshow(client, headers)
        base = f"/api/v1/slideshows/{show['id']}"

        assert client.post(f"{base}/shares", json={"platform": "twitter"}, headers=headers).status_code == 204
        assert client.post(f"{base}/shares", json={"platform": "myspace"}, headers=headers).status_code == 400
        assert client.post(f"{base}/downloads", headers=headers).status_code == 204

        actions = [a["action"] for a in client.get("/api/v1/analytics/activity", headers=headers).json()]
        assert actions.count("share") == 1
        assert actions.count("download") == 1

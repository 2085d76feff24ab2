"""SlideSync API client.

A small wrapper around the SlideSync REST API built on ``requests``.
It covers the flow of the web editor: sign in, upload images, create a
slideshow, enhance it, export it and fetch the share payload.  Every
method returns a tuple ``(data, error)``: ``data`` holds the parsed JSON
response on success and ``error`` is ``None``; on failure ``data`` is
``None`` and ``error`` is a dictionary with ``status_code`` and
``message``.

Example::

    client = SlideSyncAPI(base_url="http://localhost:8000")
    client.sign_in("user@example.com", "secret1")
    before, _ = client.upload_image("before.jpg")
    after, _ = client.upload_image("after.jpg")
    show, _ = client.create_slideshow("My glow-up", [before["url"], after["url"]])
    video, _ = client.export(show["id"])
"""

from __future__ import annotations

import logging
import mimetypes
import os
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class SlideSyncAPI:
    """Client for the SlideSync API (version 1)."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            token: Optional bearer token.  ``sign_in`` and ``sign_up``
                set it automatically.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Timeout in seconds for ordinary requests.  Exports
                use a longer timeout.
        """
        self.base_url = base_url.rstrip("/")
        self.api_base = f"{self.base_url}/api/v1"
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
        files: Dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Result:
        """Perform an HTTP request against ``/api/v1``."""
        url = f"{self.api_base}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                files=files,
                headers=headers,
                timeout=timeout or self.timeout,
            )
            response.raise_for_status()
            if response.content and response.headers.get("content-type", "").startswith("application/json"):
                return response.json(), None
            return (response.content or None), None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _store_token(self, result: Result) -> Result:
        data, error = result
        if data and data.get("access_token"):
            self.token = data["access_token"]
        return data, error

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Result:
        body = {"email": email, "password": password, "full_name": full_name}
        return self._store_token(self._request("POST", "/auth/signup", json_body=body))

    def sign_in(self, email: str, password: str) -> Result:
        body = {"email": email, "password": password}
        return self._store_token(self._request("POST", "/auth/login", json_body=body))

    def sign_out(self) -> Result:
        result = self._request("POST", "/auth/logout")
        if result[1] is None:
            self.token = None
        return result

    def me(self) -> Result:
        return self._request("GET", "/auth/me")

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------
    def _upload(self, path: str, file_path: str) -> Result:
        content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
        with open(file_path, "rb") as fh:
            files = {"file": (os.path.basename(file_path), fh, content_type)}
            return self._request("POST", path, files=files, timeout=max(self.timeout, 60))

    def upload_image(self, file_path: str) -> Result:
        """Upload an image file and return its media record (with ``url``)."""
        return self._upload("/media/images", file_path)

    def upload_audio(self, file_path: str) -> Result:
        return self._upload("/media/audio", file_path)

    # ------------------------------------------------------------------
    # Slideshows
    # ------------------------------------------------------------------
    def list_slideshows(self) -> Result:
        return self._request("GET", "/slideshows/")

    def create_slideshow(self, title: str, images: List[str], **fields: Any) -> Result:
        body = {"title": title, "images": images, **fields}
        return self._request("POST", "/slideshows/", json_body=body)

    def update_slideshow(self, slideshow_id: int, **fields: Any) -> Result:
        return self._request("PUT", f"/slideshows/{slideshow_id}", json_body=fields)

    def delete_slideshow(self, slideshow_id: int) -> Result:
        return self._request("DELETE", f"/slideshows/{slideshow_id}")

    def enhance(self, slideshow_id: int, **options: Any) -> Result:
        """Run auto-enhancement; ``options`` are ``EnhanceOptions`` fields."""
        return self._request(
            "POST", f"/slideshows/{slideshow_id}/enhance", json_body=options or None, timeout=max(self.timeout, 120)
        )

    def apply_suggestion(self, slideshow_id: int, suggestion_type: str, suggestion: Any) -> Result:
        body = {"type": suggestion_type, "suggestion": suggestion}
        return self._request("POST", f"/slideshows/{slideshow_id}/suggestions", json_body=body)

    def preview(self, slideshow_id: int, index: int = 0) -> Result:
        """Return the PNG bytes of one slide."""
        return self._request("GET", f"/slideshows/{slideshow_id}/preview", params={"index": index})

    def export(self, slideshow_id: int, export_format: str = "720p") -> Result:
        return self._request(
            "POST",
            f"/slideshows/{slideshow_id}/export",
            json_body={"format": export_format},
            timeout=max(self.timeout, 600),
        )

    def share(self, slideshow_id: int, video_url: Optional[str] = None) -> Result:
        return self._request("POST", f"/slideshows/{slideshow_id}/share", json_body={"video_url": video_url})

    # ------------------------------------------------------------------
    # Catalog, payments and analytics
    # ------------------------------------------------------------------
    def catalog(self) -> Result:
        return self._request("GET", "/catalog/")

    def search_templates(self, query: str = "", category: str = "all") -> Result:
        return self._request("GET", "/catalog/templates", params={"q": query, "category": category})

    def start_checkout(self) -> Result:
        return self._request("POST", "/payments/checkout")

    def analytics(self, time_range: str = "7d") -> Result:
        return self._request("GET", "/analytics/summary", params={"time_range": time_range})

"""
Share payloads for exported slideshows.

Direct posting to social networks is not supported.  The API returns
the share text, intent links for the networks that accept one and a QR
code URL so that clients can hand the video over however they like.
"""

import re
from typing import List, Optional
from urllib.parse import quote, urlencode

from slidesync_api.app.core.config import settings
from slidesync_api.app.schemas.slideshow import SharePayload, SlideshowRead
from slidesync_api.app.services.activity_service import ActivityService

DEFAULT_HASHTAGS = "#BeforeAndAfter #Transformation #SlideSync"
QR_CODE_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/"
SHARE_PLATFORMS = {"twitter", "facebook", "whatsapp", "instagram", "tiktok", "copy", "qr", "native"}


def default_message(title: str) -> str:
    return f"Check out my amazing before & after slideshow: {title}"


def download_filename(title: str) -> str:
    return f"{re.sub(r'[^a-z0-9]', '_', title, flags=re.IGNORECASE).lower()}_slideshow.mp4"


def qr_code_url(data: str) -> str:
    return f"{QR_CODE_ENDPOINT}?{urlencode({'size': '200x200', 'data': data}, quote_via=quote)}"


def build_share_payload(
    slideshow: SlideshowRead,
    video_url: Optional[str] = None,
    text: Optional[str] = None,
    hashtags: Optional[List[str]] = None,
) -> SharePayload:
    message = text or default_message(slideshow.title)
    tags = " ".join(hashtags) if hashtags else DEFAULT_HASHTAGS
    share_url = video_url or f"{settings.public_base_url}/slideshows/{slideshow.id}"
    full_text = f"{message} {share_url} {tags}"
    links = {
        "twitter": "https://twitter.com/intent/tweet?" + urlencode({"text": f"{message} {tags}", "url": share_url}),
        "facebook": "https://www.facebook.com/sharer/sharer.php?" + urlencode({"u": share_url}),
        "whatsapp": "https://wa.me/?" + urlencode({"text": full_text}),
    }
    return SharePayload(
        message=message,
        hashtags=tags,
        clipboard_text=full_text,
        share_url=share_url,
        video_url=video_url,
        download_filename=download_filename(slideshow.title),
        qr_code_url=qr_code_url(share_url),
        links=links,
    )


class ShareService:
    """Builds share payloads and counts shares and downloads."""

    @classmethod
    async def share(
        cls,
        slideshow: SlideshowRead,
        video_url: Optional[str] = None,
        text: Optional[str] = None,
        hashtags: Optional[List[str]] = None,
    ) -> SharePayload:
        return build_share_payload(slideshow, video_url, text, hashtags)

    @classmethod
    async def record_share(cls, slideshow: SlideshowRead, platform: str) -> None:
        if platform not in SHARE_PLATFORMS:
            raise ValueError(f"Unknown share platform: {platform}")
        await ActivityService.record(
            slideshow.user_id, "share", "slideshow", slideshow.id, {"platform": platform}
        )

    @classmethod
    async def record_download(cls, slideshow: SlideshowRead, video_url: Optional[str] = None) -> None:
        await ActivityService.record(
            slideshow.user_id, "download", "slideshow", slideshow.id, {"video_url": video_url}
        )

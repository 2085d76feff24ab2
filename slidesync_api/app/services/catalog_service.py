"""
Static catalog of editor options.

Transitions, the built-in music library, slideshow templates and export
formats are fixed data shipped with the application.  ``CatalogService``
exposes lookups used by the slideshow, editor and export services to
validate ids and to decide which options need a premium account, plus
the streaming-music helpers of the music step.
"""

import logging
import time
from typing import Dict, List, Optional

from slidesync_api.app.core.config import settings
from slidesync_api.app.schemas.catalog import (
    Catalog,
    ExportFormat,
    MusicTrack,
    StreamingTrack,
    Template,
    TemplateCategory,
    TextStyle,
    Transition,
)

logger = logging.getLogger(__name__)

MIN_IMAGES = 2

TRANSITIONS: List[Transition] = [
    Transition(id="fade", name="Fade", description="Smooth fade between images"),
    Transition(id="slide-left", name="Slide Left", description="Slide from right to left"),
    Transition(id="slide-right", name="Slide Right", description="Slide from left to right"),
    Transition(id="swipe", name="Swipe", description="Swipe effect revealing the next image"),
    Transition(id="zoom", name="Zoom", description="Zoom in/out between images", premium=True),
    Transition(id="spin", name="Spin", description="Rotating transition effect", premium=True),
]

MUSIC_LIBRARY: List[MusicTrack] = [
    MusicTrack(id="upbeat", name="Upbeat Inspiration", duration="1:30"),
    MusicTrack(id="cinematic", name="Cinematic Reveal", duration="2:15"),
    MusicTrack(id="emotional", name="Emotional Journey", duration="1:45"),
    MusicTrack(id="corporate", name="Corporate Success", duration="2:00"),
    MusicTrack(id="dramatic", name="Dramatic Transformation", duration="2:30", premium=True),
    MusicTrack(id="energetic", name="Energetic Workout", duration="1:50", premium=True),
]

_THUMBNAIL = "/placeholder.svg?height=200&width=300"

TEMPLATES: List[Template] = [
    Template(
        id="fitness-transformation",
        name="Fitness Transformation",
        category="fitness",
        description="Perfect for weight loss and muscle gain journeys",
        thumbnail=_THUMBNAIL,
        transition="slide-left",
        text_style=TextStyle(font="Arial", size=32, color="#ffffff"),
        music_genre="motivational",
        popular=True,
        tags=["fitness", "weight loss", "muscle gain", "transformation"],
    ),
    Template(
        id="beauty-makeover",
        name="Beauty Makeover",
        category="beauty",
        description="Showcase stunning beauty transformations",
        thumbnail=_THUMBNAIL,
        transition="fade",
        text_style=TextStyle(font="Georgia", size=28, color="#ff69b4"),
        music_genre="elegant",
        popular=True,
        tags=["beauty", "makeup", "hair", "skincare"],
    ),
    Template(
        id="home-renovation",
        name="Home Renovation",
        category="home",
        description="Perfect for room makeovers and renovations",
        thumbnail=_THUMBNAIL,
        transition="swipe",
        text_style=TextStyle(font="Inter", size=30, color="#2563eb"),
        music_genre="upbeat",
        tags=["home", "renovation", "interior", "design"],
    ),
    Template(
        id="business-growth",
        name="Business Growth",
        category="business",
        description="Show your business journey and achievements",
        thumbnail=_THUMBNAIL,
        transition="zoom",
        text_style=TextStyle(font="Inter", size=34, color="#059669"),
        music_genre="corporate",
        premium=True,
        tags=["business", "growth", "success", "corporate"],
    ),
    Template(
        id="art-creation",
        name="Art Creation Process",
        category="creative",
        description="Perfect for showing artistic process and results",
        thumbnail=_THUMBNAIL,
        transition="spin",
        text_style=TextStyle(font="Georgia", size=26, color="#7c3aed"),
        music_genre="creative",
        premium=True,
        popular=True,
        tags=["art", "creative", "painting", "drawing"],
    ),
    Template(
        id="food-recipe",
        name="Recipe Creation",
        category="food",
        description="Show cooking process from ingredients to final dish",
        thumbnail=_THUMBNAIL,
        transition="slide-right",
        text_style=TextStyle(font="Verdana", size=24, color="#ea580c"),
        music_genre="cheerful",
        tags=["food", "cooking", "recipe", "kitchen"],
    ),
]

_CATEGORY_NAMES = [
    ("all", "All Templates"),
    ("fitness", "Fitness"),
    ("beauty", "Beauty"),
    ("home", "Home & Design"),
    ("business", "Business"),
    ("creative", "Creative"),
    ("food", "Food"),
]

EXPORT_FORMATS: List[ExportFormat] = [
    ExportFormat(
        id="720p",
        name="720p HD",
        description="1280x720 - Good quality, smaller file size",
        width=1280,
        height=720,
    ),
    ExportFormat(
        id="1080p",
        name="1080p Full HD",
        description="1920x1080 - High quality, larger file size",
        width=1920,
        height=1080,
        premium=True,
    ),
]

PREMIUM_FEATURES = [
    "Remove watermark from all exports",
    "Access to all premium transitions (Zoom, Spin, etc.)",
    "1080p Full HD video export",
    "Full music library access",
    "Unlimited slideshows",
    "Priority customer support",
    "Advanced text styling options",
    "Custom branding options",
]

STREAMING_PLATFORMS = {
    "spotify.com": "spotify",
    "audiomack.com": "audiomack",
    "music.apple.com": "apple",
}

_STREAMING_RESULTS = [
    StreamingTrack(
        id="spotify-1",
        title="Uplifting Journey",
        artist="Audio Artist",
        duration="2:45",
        platform="spotify",
        url="https://open.spotify.com/track/example",
        preview_url="https://example.com/preview.mp3",
    ),
    StreamingTrack(
        id="audiomack-1",
        title="Motivational Beat",
        artist="Beat Maker",
        duration="3:12",
        platform="audiomack",
        url="https://audiomack.com/song/example",
    ),
    StreamingTrack(
        id="apple-1",
        title="Inspiring Melody",
        artist="Music Creator",
        duration="2:58",
        platform="apple",
        url="https://music.apple.com/song/example",
    ),
]


class CatalogService:
    """Lookups over the built-in catalog."""

    @classmethod
    def catalog(cls) -> Catalog:
        return Catalog(
            transitions=TRANSITIONS,
            music=MUSIC_LIBRARY,
            export_formats=EXPORT_FORMATS,
            categories=cls.categories(),
            premium_features=PREMIUM_FEATURES,
            limits={
                "min_images": MIN_IMAGES,
                "max_image_bytes": settings.max_image_bytes,
                "max_audio_bytes": settings.max_audio_bytes,
            },
        )

    @classmethod
    def get_transition(cls, transition_id: str) -> Optional[Transition]:
        return next((t for t in TRANSITIONS if t.id == transition_id), None)

    @classmethod
    def get_music(cls, track_id: str) -> Optional[MusicTrack]:
        return next((m for m in MUSIC_LIBRARY if m.id == track_id), None)

    @classmethod
    def get_template(cls, template_id: str) -> Optional[Template]:
        return next((t for t in TEMPLATES if t.id == template_id), None)

    @classmethod
    def get_export_format(cls, format_id: str) -> Optional[ExportFormat]:
        return next((f for f in EXPORT_FORMATS if f.id == format_id), None)

    @classmethod
    def search_templates(cls, query: str = "", category: str = "all") -> List[Template]:
        """Filter templates by a case-insensitive substring of the name or a
        tag, and by category (``all`` matches every category)."""
        needle = (query or "").strip().lower()
        results = []
        for template in TEMPLATES:
            matches_search = needle in template.name.lower() or any(
                needle in tag.lower() for tag in template.tags
            )
            matches_category = category in ("all", "", None) or template.category == category
            if matches_search and matches_category:
                results.append(template)
        return results

    @classmethod
    def categories(cls) -> List[TemplateCategory]:
        counts: Dict[str, int] = {}
        for template in TEMPLATES:
            counts[template.category] = counts.get(template.category, 0) + 1
        return [
            TemplateCategory(
                id=cat_id,
                name=name,
                count=len(TEMPLATES) if cat_id == "all" else counts.get(cat_id, 0),
            )
            for cat_id, name in _CATEGORY_NAMES
        ]

    @classmethod
    def detect_platform(cls, url: str) -> str:
        """Return the streaming platform a track URL belongs to.

        Raises ``ValueError`` for empty or unsupported URLs.
        """
        if not url or not url.strip():
            raise ValueError("Please enter a valid streaming URL")
        for domain, platform in STREAMING_PLATFORMS.items():
            if domain in url:
                return platform
        raise ValueError("Unsupported platform. Please use Spotify, Audiomack, or Apple Music URLs")

    @classmethod
    def import_streaming_track(cls, url: str) -> Dict[str, str]:
        platform = cls.detect_platform(url)
        reference = f"streaming-{platform}-{int(time.time() * 1000)}"
        logger.info("Imported %s track as %s", platform, reference)
        return {"platform": platform, "music": reference}

    @classmethod
    def search_streaming(cls, query: str) -> List[StreamingTrack]:
        # Streaming providers are not integrated; every non-empty query
        # returns the same sample tracks.
        if not query or not query.strip():
            return []
        return list(_STREAMING_RESULTS)

    @classmethod
    def is_music_reference(cls, value: str) -> bool:
        """Whether ``value`` is an accepted music reference: a library id,
        an imported streaming reference or an uploaded audio URL."""
        if cls.get_music(value) is not None:
            return True
        if value.startswith("streaming-"):
            return True
        return value.startswith(("http://", "https://", "/media/"))

"""
Frame composition for previews and video export.

Every slide is rendered onto a black canvas of the output size: the
image is letter-boxed to fit, text overlays are drawn centred on their
percent coordinates and free accounts get a watermark in the corner.
"""

import io
import logging
from typing import List, Optional, Sequence, Tuple

from fastapi.concurrency import run_in_threadpool
from PIL import Image, ImageColor, ImageDraw, ImageFont

from slidesync_api.app.core.config import settings
from slidesync_api.app.schemas.slideshow import SlideshowRead, TextOverlay, Timeline, TimelineEntry
from slidesync_api.app.services.editor_service import slide_label
from slidesync_api.app.services.slideshow_service import SlideshowService
from slidesync_api.app.services.storage_service import StorageService

logger = logging.getLogger(__name__)

PREVIEW_SIZE = (1280, 720)
# Overlay sizes are authored against a 720 px high preview.
REFERENCE_HEIGHT = 720
WATERMARK_MARGIN = 24


def load_font(name: str, size: int) -> ImageFont.ImageFont:
    """Load a TrueType font by family name, falling back to Pillow's default."""
    candidates = [name, f"{name}.ttf", f"{name.replace(' ', '')}.ttf", "DejaVuSans.ttf"]
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _parse_color(value: str) -> Tuple[int, ...]:
    try:
        return ImageColor.getrgb(value)
    except ValueError:
        logger.debug("Unknown colour %r, using white", value)
        return (255, 255, 255)


def fit_image(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Scale ``image`` to fit inside ``size`` and centre it on black."""
    width, height = size
    canvas = Image.new("RGB", size, (0, 0, 0))
    scale = min(width / image.width, height / image.height)
    new_size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    resized = image.convert("RGB").resize(new_size, Image.Resampling.LANCZOS)
    canvas.paste(resized, ((width - new_size[0]) // 2, (height - new_size[1]) // 2))
    return canvas


def draw_overlay(canvas: Image.Image, overlay: TextOverlay) -> None:
    width, height = canvas.size
    draw = ImageDraw.Draw(canvas)
    font_size = max(6, round(overlay.size * height / REFERENCE_HEIGHT))
    font = load_font(overlay.font, font_size)
    bbox = draw.textbbox((0, 0), overlay.text, font=font)
    text_w = bbox[2] - bbox[0]
    text_h = bbox[3] - bbox[1]
    x = width * overlay.x / 100 - text_w / 2 - bbox[0]
    y = height * overlay.y / 100 - text_h / 2 - bbox[1]
    draw.text(
        (x, y),
        overlay.text,
        font=font,
        fill=_parse_color(overlay.color),
        stroke_width=max(1, font_size // 16),
        stroke_fill=(0, 0, 0),
    )


def draw_watermark(canvas: Image.Image, text: str) -> Image.Image:
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    font = load_font("Inter", max(12, canvas.height // 30))
    bbox = draw.textbbox((0, 0), text, font=font)
    x = canvas.width - (bbox[2] - bbox[0]) - WATERMARK_MARGIN
    y = canvas.height - (bbox[3] - bbox[1]) - WATERMARK_MARGIN
    draw.text((x, y), text, font=font, fill=(255, 255, 255, 160))
    return Image.alpha_composite(canvas.convert("RGBA"), layer).convert("RGB")


def compose_frame(
    image: Image.Image,
    overlays: Sequence[TextOverlay],
    size: Tuple[int, int],
    watermark: Optional[str] = None,
) -> Image.Image:
    canvas = fit_image(image, size)
    for overlay in overlays:
        draw_overlay(canvas, overlay)
    if watermark:
        canvas = draw_watermark(canvas, watermark)
    return canvas


def overlays_for(slideshow: SlideshowRead, index: int) -> List[TextOverlay]:
    return [o for o in slideshow.text_overlays if o.image_index == index]


def build_timeline(slideshow: SlideshowRead) -> Timeline:
    """Start and end time of each slide at the slideshow's slide duration."""
    duration = SlideshowService.slide_duration(slideshow, settings.slide_duration_seconds)
    slides = [
        TimelineEntry(
            index=i,
            label=slide_label(i),
            image=url,
            start=i * duration,
            end=(i + 1) * duration,
            overlays=overlays_for(slideshow, i),
        )
        for i, url in enumerate(slideshow.images)
    ]
    return Timeline(
        slideshow_id=slideshow.id,
        transition=slideshow.transition,
        slide_duration=duration,
        total_duration=duration * len(slides),
        slides=slides,
    )


class RenderService:
    """Preview rendering."""

    @classmethod
    async def preview_frame(cls, slideshow: SlideshowRead, index: int, premium: bool = False) -> bytes:
        """Render one slide as PNG bytes.

        ``index`` wraps around the image list, so stepping past the last
        slide returns to the first one and ``-1`` is the last slide.
        """
        if not slideshow.images:
            raise ValueError("No images to preview")
        index %= len(slideshow.images)

        def _render() -> bytes:
            image = StorageService.open_image(slideshow.images[index])
            frame = compose_frame(
                image,
                overlays_for(slideshow, index),
                PREVIEW_SIZE,
                None if premium else settings.watermark_text,
            )
            buffer = io.BytesIO()
            frame.save(buffer, format="PNG")
            return buffer.getvalue()

        return await run_in_threadpool(_render)

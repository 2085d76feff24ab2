"""
Heuristic image analysis and auto-enhancement.

There is no computer vision here.  Each image is summarised by a few
pixel statistics (mean brightness, mean saturation, the most common
coarse colours) and fixed thresholds on those numbers decide the
corrections, the mood and the suggested text, music and slide timing.
"""

import io
import logging
from typing import List, Optional, Tuple

import numpy as np
from fastapi.concurrency import run_in_threadpool
from PIL import Image, ImageEnhance, ImageFilter, UnidentifiedImageError

from slidesync_api.app.schemas.enhance import EnhanceOptions, EnhancementReport, ImageAnalysis, TextSuggestion
from slidesync_api.app.schemas.slideshow import SlideshowRead
from slidesync_api.app.services.activity_service import ActivityService
from slidesync_api.app.services.slideshow_service import SlideshowService
from slidesync_api.app.services.storage_service import StorageService

logger = logging.getLogger(__name__)

COLOR_BUCKET = 50
# 0..255 floored to multiples of 50 gives six buckets per channel.
_BUCKETS_PER_CHANNEL = 256 // COLOR_BUCKET + 1

TEXT_SUGGESTIONS = {
    "vibrant": [
        TextSuggestion(text="Amazing Transformation! 🌟", position="center", style="bold", color="#ff6b6b"),
        TextSuggestion(text="Before & After", position="top", style="elegant", color="#4ecdc4"),
    ],
    "bright": [
        TextSuggestion(text="Incredible Journey ✨", position="center", style="modern", color="#45b7d1"),
        TextSuggestion(text="See the Difference", position="bottom", style="clean", color="#96ceb4"),
    ],
    "muted": [
        TextSuggestion(text="Stunning Results", position="center", style="classic", color="#ffeaa7"),
        TextSuggestion(text="The Transformation", position="top", style="minimal", color="#dda0dd"),
    ],
}

MUSIC_BY_MOOD = {
    "vibrant": "energetic",
    "bright": "upbeat",
    "muted": "cinematic",
    "dark": "dramatic",
}


def analyze_image(image: Image.Image) -> ImageAnalysis:
    """Compute brightness, saturation, dominant colours, mood and quality."""
    pixels = np.asarray(image.convert("RGB"), dtype=np.float64).reshape(-1, 3)
    if pixels.size == 0:
        raise ValueError("Image has no pixels")

    brightness = float(pixels.mean(axis=1).mean())
    high = pixels.max(axis=1)
    low = pixels.min(axis=1)
    per_pixel_sat = np.divide(high - low, high, out=np.zeros_like(high), where=high > 0)
    saturation = float(per_pixel_sat.mean())

    buckets = (pixels // COLOR_BUCKET).astype(np.int64)
    keys = (
        buckets[:, 0] * _BUCKETS_PER_CHANNEL * _BUCKETS_PER_CHANNEL
        + buckets[:, 1] * _BUCKETS_PER_CHANNEL
        + buckets[:, 2]
    )
    counts = np.bincount(keys)
    top = [k for k in np.argsort(-counts, kind="stable")[:3] if counts[k] > 0]
    dominant_colors = []
    for key in top:
        r, rest = divmod(int(key), _BUCKETS_PER_CHANNEL * _BUCKETS_PER_CHANNEL)
        g, b = divmod(rest, _BUCKETS_PER_CHANNEL)
        dominant_colors.append(f"rgb({r * COLOR_BUCKET},{g * COLOR_BUCKET},{b * COLOR_BUCKET})")

    if saturation > 0.3:
        mood = "vibrant"
    elif brightness > 128:
        mood = "bright"
    else:
        mood = "muted"
    quality = "excellent" if 50 < brightness < 200 else "good"

    suggestions = []
    if brightness < 100:
        suggestions.append("Increase brightness")
    if saturation < 0.2:
        suggestions.append("Boost colors")
    if brightness > 200:
        suggestions.append("Reduce overexposure")

    return ImageAnalysis(
        brightness=brightness,
        contrast=abs(brightness - 128) / 128,
        saturation=saturation,
        # Edge detection would be needed for a real value.
        sharpness=0.5,
        dominant_colors=dominant_colors,
        mood=mood,
        quality=quality,
        suggestions=suggestions,
    )


def enhance_image(image: Image.Image, analysis: ImageAnalysis, options: EnhanceOptions) -> Image.Image:
    """Apply colour correction, pseudo-sharpening and noise reduction."""
    result = image.convert("RGB")
    if options.color_correction:
        if analysis.brightness < 100:
            result = ImageEnhance.Brightness(result).enhance(1.2)
        elif analysis.brightness > 180:
            result = ImageEnhance.Brightness(result).enhance(0.8)
        if analysis.contrast < 0.3:
            result = ImageEnhance.Contrast(result).enhance(1.2)
        if analysis.saturation < 0.2:
            result = ImageEnhance.Color(result).enhance(1.3)
    if options.sharpening:
        # Sharpening is approximated with a contrast boost.
        result = ImageEnhance.Contrast(result).enhance(1 + options.intensity / 200)
    if options.noise_reduction:
        radius = max(0.0, 0.5 - options.intensity / 200)
        if radius > 0:
            result = result.filter(ImageFilter.GaussianBlur(radius))
    return result


def overall_mood(analyses: List[ImageAnalysis]) -> str:
    """``vibrant`` if any image is vibrant, else ``bright`` if any is bright."""
    moods = {a.mood for a in analyses}
    if "vibrant" in moods:
        return "vibrant"
    if "bright" in moods:
        return "bright"
    return "muted"


def suggest_texts(mood: str) -> List[TextSuggestion]:
    return list(TEXT_SUGGESTIONS.get(mood, TEXT_SUGGESTIONS["muted"]))


def suggest_music(mood: str) -> str:
    return MUSIC_BY_MOOD.get(mood, "upbeat")


def optimal_duration(analyses: List[ImageAnalysis]) -> float:
    """Seconds per slide: 3 plus half the mean complexity, clamped to 2..5.

    Complexity is the number of suggestions for an image divided by three.
    """
    if not analyses:
        return 3.0
    complexity = sum(len(a.suggestions) / 3 for a in analyses) / len(analyses)
    return max(2.0, min(5.0, 3 + complexity * 0.5))


def auto_enhance(
    images: List[Image.Image],
    options: EnhanceOptions,
) -> Tuple[List[Image.Image], EnhancementReport]:
    """Analyse and enhance every image and build the suggestion report.

    The report's ``images`` list is left empty for the caller to fill in
    with the stored locations of the enhanced images.
    """
    if not images:
        raise ValueError("No images to enhance")
    analyses = [analyze_image(img) for img in images]
    enhanced = [enhance_image(img, analysis, options) for img, analysis in zip(images, analyses)]
    mood = overall_mood(analyses)
    report = EnhancementReport(
        images=[],
        analyses=analyses,
        overall_mood=mood,
        suggested_texts=suggest_texts(mood) if options.auto_text else [],
        suggested_music=suggest_music(mood) if options.smart_music else None,
        optimal_duration=optimal_duration(analyses) if options.optimal_timing else None,
        improvements=[s for a in analyses for s in a.suggestions],
    )
    return enhanced, report


class EnhanceService:
    """Runs the enhancer over stored slideshows and uploads."""

    @classmethod
    async def enhance_slideshow(
        cls,
        slideshow: SlideshowRead,
        options: Optional[EnhanceOptions] = None,
    ) -> EnhancementReport:
        """Enhance all images of a slideshow.

        The enhanced images are stored as new files and replace the
        slideshow's image list; the originals stay untouched on disk.
        """
        options = options or EnhanceOptions()
        if not slideshow.images:
            raise ValueError("No images to enhance")
        logger.info("Enhancing %d images of slideshow %s", len(slideshow.images), slideshow.id)

        def _work() -> EnhancementReport:
            images = [StorageService.open_image(url) for url in slideshow.images]
            enhanced, report = auto_enhance(images, options)
            report.images = [
                StorageService.save_image(img, slideshow.user_id, suffix="enhanced").url for img in enhanced
            ]
            return report

        report = await run_in_threadpool(_work)
        await SlideshowService.save_fields(slideshow.id, slideshow.user_id, images=report.images)
        await ActivityService.record(
            slideshow.user_id,
            "enhance",
            "slideshow",
            slideshow.id,
            {"images": len(report.images), "mood": report.overall_mood},
        )
        return report

    @classmethod
    async def analyze_upload(cls, data: bytes) -> ImageAnalysis:
        """Analyse raw image bytes without storing them."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return await run_in_threadpool(analyze_image, img.convert("RGB"))
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("File is not a valid image") from exc

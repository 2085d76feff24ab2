"""
Video export.

Slides are rendered with ``render_service.compose_frame`` and assembled
into an H.264 MP4 with moviepy (which drives ffmpeg).  Consecutive
slides overlap by the transition length; the slideshow's transition id
picks the effect applied to the incoming slide.
"""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
from fastapi.concurrency import run_in_threadpool
from moviepy import AudioFileClip, ImageClip, afx, concatenate_videoclips, vfx

from slidesync_api.app.core.config import settings
from slidesync_api.app.schemas.slideshow import ExportResult, SlideshowRead
from slidesync_api.app.services.activity_service import ActivityService
from slidesync_api.app.services.catalog_service import CatalogService
from slidesync_api.app.services.render_service import compose_frame, overlays_for
from slidesync_api.app.services.slideshow_service import SlideshowService
from slidesync_api.app.services.storage_service import EXPORTS_DIR, StorageService, public_url

logger = logging.getLogger(__name__)


def transition_effects(transition: str, seconds: float) -> list:
    """moviepy effects that bring a slide in with the given transition."""
    if transition == "slide-left":
        return [vfx.SlideIn(seconds, "right")]
    if transition == "slide-right":
        return [vfx.SlideIn(seconds, "left")]
    if transition == "swipe":
        return [vfx.SlideIn(seconds, "bottom")]
    if transition == "zoom":
        return [
            vfx.Resize(lambda t: min(1.0, 0.3 + 0.7 * t / seconds)),
            vfx.CrossFadeIn(seconds),
        ]
    if transition == "spin":
        return [
            vfx.Rotate(lambda t: max(0.0, 360.0 * (1 - t / seconds))),
            vfx.CrossFadeIn(seconds),
        ]
    return [vfx.CrossFadeIn(seconds)]


def video_duration(slide_count: int, slide_seconds: float, transition_seconds: float) -> float:
    """Total length of ``slide_count`` slides overlapping by the transition."""
    if slide_count <= 0:
        return 0.0
    return slide_count * slide_seconds - (slide_count - 1) * transition_seconds


def resolve_music(music: Optional[str]) -> Optional[Path]:
    """Find an audio file for a music reference.

    Uploaded tracks are media URLs; library tracks are looked up as
    ``{MUSIC_DIR}/{id}.mp3``.  Streaming references cannot be rendered.
    """
    if not music:
        return None
    local = StorageService.local_path(music)
    if local is not None:
        if local.is_file():
            return local
        logger.warning("Music file %s does not exist; exporting without audio", music)
        return None
    if CatalogService.get_music(music) is not None:
        candidate = Path(settings.music_dir) / f"{music}.mp3"
        if candidate.is_file():
            return candidate
        logger.warning("No audio file for library track %s in %s", music, settings.music_dir)
        return None
    logger.warning("Music reference %s cannot be rendered; exporting without audio", music)
    return None


def render_video(
    slideshow: SlideshowRead,
    width: int,
    height: int,
    output_path: Path,
    watermark: Optional[str],
) -> float:
    """Render the slideshow to ``output_path`` and return its duration."""
    slide_seconds = SlideshowService.slide_duration(slideshow, settings.slide_duration_seconds)
    transition_seconds = min(settings.transition_seconds, slide_seconds / 2)
    clips: List[ImageClip] = []
    for index, url in enumerate(slideshow.images):
        image = StorageService.open_image(url)
        frame = compose_frame(image, overlays_for(slideshow, index), (width, height), watermark)
        clip = ImageClip(np.array(frame)).with_duration(slide_seconds)
        if index > 0 and transition_seconds > 0:
            clip = clip.with_effects(transition_effects(slideshow.transition, transition_seconds))
        clips.append(clip)

    padding = -transition_seconds if len(clips) > 1 else 0
    final = concatenate_videoclips(clips, method="compose", padding=padding, bg_color=(0, 0, 0))
    duration = video_duration(len(clips), slide_seconds, transition_seconds if len(clips) > 1 else 0)

    audio = None
    music_path = resolve_music(slideshow.music)
    if music_path is not None:
        audio = AudioFileClip(str(music_path))
        if audio.duration > duration:
            audio = audio.subclipped(0, duration)
        else:
            audio = audio.with_effects([afx.AudioLoop(duration=duration)])
        audio = audio.with_effects([afx.AudioFadeOut(min(1.0, duration / 2))])
        final = final.with_audio(audio)

    try:
        final.write_videofile(
            str(output_path),
            fps=settings.export_fps,
            codec="libx264",
            audio_codec="aac",
            preset="ultrafast",
            threads=1,
            logger=None,
        )
    finally:
        final.close()
        if audio is not None:
            audio.close()
        for clip in clips:
            clip.close()
    return duration


class ExportService:
    """Exports slideshows to MP4 files under ``MEDIA_DIR/exports``."""

    @classmethod
    async def export_video(cls, slideshow: SlideshowRead, format_id: str = "720p", premium: bool = False) -> ExportResult:
        export_format = CatalogService.get_export_format(format_id)
        if export_format is None:
            raise ValueError(f"Unknown export format: {format_id}")
        if export_format.premium and not premium:
            raise PermissionError(f"{export_format.name} export requires a premium subscription")
        if not slideshow.images:
            raise ValueError("No images to export")

        watermark = None if premium else settings.watermark_text
        output_path = StorageService.export_path()
        logger.info(
            "Exporting slideshow %s as %s (%d slides) to %s",
            slideshow.id,
            export_format.id,
            len(slideshow.images),
            output_path.name,
        )
        try:
            duration = await run_in_threadpool(
                render_video,
                slideshow,
                export_format.width,
                export_format.height,
                output_path,
                watermark,
            )
        except Exception:
            logger.exception("Export of slideshow %s failed", slideshow.id)
            if output_path.exists():
                output_path.unlink()
            raise

        result = ExportResult(
            url=public_url(f"{EXPORTS_DIR}/{output_path.name}"),
            filename=output_path.name,
            format=export_format.id,
            width=export_format.width,
            height=export_format.height,
            duration=duration,
            watermark=watermark is not None,
        )
        await ActivityService.record(
            slideshow.user_id,
            "export",
            "slideshow",
            slideshow.id,
            {"format": export_format.id, "filename": result.filename, "duration": duration},
        )
        return result

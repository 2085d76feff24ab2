"""
Editor workflow for a slideshow.

The editor walks through a fixed sequence of steps.  Every step after
``upload`` needs at least two images (a "before" and an "after" shot).
This module also applies AI suggestions and templates to a stored
slideshow.
"""

import logging
from typing import Any, List

from slidesync_api.app.schemas.slideshow import EditorState, EditorStep, SlideshowRead, TextOverlay
from slidesync_api.app.services.catalog_service import MIN_IMAGES, CatalogService
from slidesync_api.app.services.slideshow_service import SlideshowService

logger = logging.getLogger(__name__)

STEPS = [
    ("upload", "Upload"),
    ("enhance", "AI Enhance"),
    ("transition", "Transition"),
    ("text", "Text"),
    ("music", "Music"),
    ("preview", "Preview"),
    ("export", "Export & Share"),
]
STEP_IDS = [step_id for step_id, _ in STEPS]

SUGGESTED_FONT = "Inter"
SUGGESTED_SIZE = 28
MAX_SLIDE_DURATION = 30.0


def slide_label(index: int) -> str:
    if index == 0:
        return "Before"
    if index == 1:
        return "After"
    return f"Image {index + 1}"


def can_proceed(step: str, image_count: int) -> bool:
    if step not in STEP_IDS:
        raise ValueError(f"Unknown editor step: {step}")
    if step == "upload":
        return True
    return image_count >= MIN_IMAGES


def next_step(step: str) -> str:
    index = STEP_IDS.index(step) if step in STEP_IDS else 0
    return STEP_IDS[min(index + 1, len(STEP_IDS) - 1)]


def previous_step(step: str) -> str:
    index = STEP_IDS.index(step) if step in STEP_IDS else 0
    return STEP_IDS[max(index - 1, 0)]


def overlay_y(position: str) -> int:
    if position == "top":
        return 20
    if position == "bottom":
        return 80
    return 50


class EditorService:
    """Step availability, suggestions and templates."""

    @classmethod
    def editor_state(cls, slideshow: SlideshowRead) -> EditorState:
        count = len(slideshow.images)
        return EditorState(
            slideshow_id=slideshow.id,
            image_count=count,
            slide_labels=[slide_label(i) for i in range(count)],
            steps=[
                EditorStep(id=step_id, label=label, available=can_proceed(step_id, count))
                for step_id, label in STEPS
            ],
        )

    @classmethod
    async def apply_suggestion(
        cls,
        slideshow: SlideshowRead,
        suggestion_type: str,
        suggestion: Any,
        premium: bool = False,
    ) -> SlideshowRead:
        """Apply one item from an enhancement report.

        * ``text``: appends an overlay on the first image using the
          suggestion's text, colour and position.
        * ``music``: selects the suggested track.
        * ``timing``: stores the per-slide duration in ``settings``.
        """
        if suggestion_type == "text":
            if not isinstance(suggestion, dict) or not suggestion.get("text"):
                raise ValueError("Text suggestion must contain 'text'")
            position = suggestion.get("position", "center")
            overlay = TextOverlay(
                image_index=0,
                text=suggestion["text"],
                font=SUGGESTED_FONT,
                size=SUGGESTED_SIZE,
                color=suggestion.get("color", "#ffffff"),
                position=position,
                x=50,
                y=overlay_y(position),
            )
            overlays: List[TextOverlay] = list(slideshow.text_overlays) + [overlay]
            return await SlideshowService.save_fields(
                slideshow.id,
                slideshow.user_id,
                text_overlays=[o.model_dump() for o in overlays],
            )
        if suggestion_type == "music":
            if not isinstance(suggestion, str) or not suggestion:
                raise ValueError("Music suggestion must be a track id")
            SlideshowService.validate_options(None, suggestion, premium)
            return await SlideshowService.save_fields(slideshow.id, slideshow.user_id, music=suggestion)
        if suggestion_type == "timing":
            try:
                duration = float(suggestion)
            except (TypeError, ValueError) as exc:
                raise ValueError("Timing suggestion must be a number of seconds") from exc
            if not 0 < duration <= MAX_SLIDE_DURATION:
                raise ValueError(f"Slide duration must be between 0 and {MAX_SLIDE_DURATION:g} seconds")
            new_settings = dict(slideshow.settings)
            new_settings["slide_duration"] = duration
            return await SlideshowService.save_fields(slideshow.id, slideshow.user_id, settings=new_settings)
        raise ValueError(f"Unknown suggestion type: {suggestion_type}")

    @classmethod
    async def apply_template(cls, slideshow: SlideshowRead, template_id: str, premium: bool = False) -> SlideshowRead:
        """Copy a template's transition, text style and music onto a slideshow.

        Existing overlays take the template's font, size and colour.  The
        template's music genre becomes the track when it names a library
        track, otherwise it is kept in ``settings.music_genre``.
        """
        template = CatalogService.get_template(template_id)
        if template is None:
            raise LookupError(f"Template {template_id} not found")
        if template.premium and not premium:
            raise PermissionError("This template requires a premium subscription. Upgrade to unlock!")
        style = template.text_style
        overlays = [
            o.model_copy(update={"font": style.font, "size": style.size, "color": style.color}).model_dump()
            for o in slideshow.text_overlays
        ]
        new_settings = dict(slideshow.settings)
        new_settings["template"] = template.id
        new_settings["text_style"] = style.model_dump()
        new_settings["music_genre"] = template.music_genre
        fields = {
            "transition": template.transition,
            "text_overlays": overlays,
            "settings": new_settings,
        }
        if CatalogService.get_music(template.music_genre) is not None:
            fields["music"] = template.music_genre
        logger.info("Applying template %s to slideshow %s", template.id, slideshow.id)
        return await SlideshowService.save_fields(slideshow.id, slideshow.user_id, **fields)

"""
Business logic for slideshows.

Slideshows are stored in the ``slideshows`` table.  The list-valued and
free-form fields (``images``, ``text_overlays``, ``settings``) are kept as
JSON text columns.  Every method takes the id of the acting user:
slideshows are private, so a slideshow owned by someone else is treated
as forbidden.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from slidesync_api.app.core.db import get_connection
from slidesync_api.app.schemas.slideshow import SlideshowCreate, SlideshowRead, SlideshowUpdate
from slidesync_api.app.services.activity_service import ActivityService
from slidesync_api.app.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

SLIDESHOW_COLUMNS = (
    "id, user_id, title, description, images, transition, text_overlays, "
    "music, settings, created_at, updated_at"
)


def _row_to_slideshow(row: sqlite3.Row) -> SlideshowRead:
    return SlideshowRead(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row["description"],
        images=json.loads(row["images"] or "[]"),
        transition=row["transition"],
        text_overlays=json.loads(row["text_overlays"] or "[]"),
        music=row["music"],
        settings=json.loads(row["settings"] or "{}"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _fetch(cursor: sqlite3.Cursor, slideshow_id: int) -> Optional[sqlite3.Row]:
    return cursor.execute(
        f"SELECT {SLIDESHOW_COLUMNS} FROM slideshows WHERE id = ?", (slideshow_id,)
    ).fetchone()


class SlideshowService:
    """CRUD operations on slideshows with ownership and tier checks."""

    @classmethod
    def validate_options(
        cls,
        transition: Optional[str],
        music: Optional[str],
        premium: bool,
    ) -> None:
        """Check a transition id and music reference against the catalog.

        Raises ``ValueError`` for unknown ids and ``PermissionError`` when
        a premium-only option is chosen by a free account.
        """
        if transition is not None:
            item = CatalogService.get_transition(transition)
            if item is None:
                raise ValueError(f"Unknown transition: {transition}")
            if item.premium and not premium:
                raise PermissionError(f"Transition '{item.name}' requires a premium subscription")
        if music:
            if not CatalogService.is_music_reference(music):
                raise ValueError(f"Unknown music track: {music}")
            track = CatalogService.get_music(music)
            if track is not None and track.premium and not premium:
                raise PermissionError(f"Track '{track.name}' requires a premium subscription")

    @classmethod
    async def create_slideshow(cls, user_id: int, data: SlideshowCreate, premium: bool = False) -> SlideshowRead:
        cls.validate_options(data.transition, data.music, premium)
        logger.info("User %s is creating slideshow '%s'", user_id, data.title)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO slideshows (user_id, title, description, images, transition, text_overlays, music, settings)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    data.title,
                    data.description,
                    json.dumps(data.images),
                    data.transition,
                    json.dumps([o.model_dump() for o in data.text_overlays]),
                    data.music,
                    json.dumps(data.settings),
                ),
            )
            slideshow_id = cursor.lastrowid
            conn.commit()
            row = _fetch(cursor, slideshow_id)
        finally:
            conn.close()
        await ActivityService.record(
            user_id, "create", "slideshow", slideshow_id, {"title": data.title, "images": len(data.images)}
        )
        return _row_to_slideshow(row)

    @classmethod
    async def get_slideshow(cls, slideshow_id: int, user_id: int) -> SlideshowRead:
        """Return a slideshow owned by ``user_id``.

        Raises ``LookupError`` if it does not exist and ``PermissionError``
        if it belongs to another user.
        """
        conn = get_connection()
        try:
            row = _fetch(conn.cursor(), slideshow_id)
        finally:
            conn.close()
        if not row:
            raise LookupError(f"Slideshow {slideshow_id} not found")
        if row["user_id"] != user_id:
            raise PermissionError("You do not have access to this slideshow")
        return _row_to_slideshow(row)

    @classmethod
    async def list_slideshows(cls, user_id: int, limit: int = 100, offset: int = 0) -> List[SlideshowRead]:
        """Return the user's slideshows, most recently updated first."""
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {SLIDESHOW_COLUMNS} FROM slideshows WHERE user_id = ? "
                "ORDER BY updated_at DESC, id DESC LIMIT ? OFFSET ?",
                (user_id, limit, offset),
            ).fetchall()
            return [_row_to_slideshow(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def update_slideshow(
        cls,
        slideshow_id: int,
        user_id: int,
        data: SlideshowUpdate,
        premium: bool = False,
    ) -> SlideshowRead:
        """Merge the provided fields into the slideshow and bump ``updated_at``."""
        await cls.get_slideshow(slideshow_id, user_id)
        updates = data.model_dump(exclude_unset=True)
        cls.validate_options(updates.get("transition"), updates.get("music"), premium)
        fields: List[str] = []
        values: List[Any] = []
        for key, value in updates.items():
            if key in {"images", "text_overlays", "settings"}:
                if value is None:
                    value = {} if key == "settings" else []
                value = json.dumps(value)
            elif key in {"title", "transition"} and value is None:
                continue
            fields.append(f"{key} = ?")
            values.append(value)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            values.append(slideshow_id)
            set_clause = ", ".join(fields + ["updated_at = strftime('%Y-%m-%d %H:%M:%f', 'now')"])
            cursor.execute(f"UPDATE slideshows SET {set_clause} WHERE id = ?", tuple(values))
            conn.commit()
            row = _fetch(cursor, slideshow_id)
        finally:
            conn.close()
        await ActivityService.record(
            user_id, "update", "slideshow", slideshow_id, {"fields": sorted(updates.keys())}
        )
        return _row_to_slideshow(row)

    @classmethod
    async def save_fields(cls, slideshow_id: int, user_id: int, **fields: Any) -> SlideshowRead:
        """Write already-validated fields, as the editor helpers do."""
        update = SlideshowUpdate(**fields)
        return await cls.update_slideshow(slideshow_id, user_id, update, premium=True)

    @classmethod
    async def delete_slideshow(cls, slideshow_id: int, user_id: int) -> None:
        existing = await cls.get_slideshow(slideshow_id, user_id)
        conn = get_connection()
        try:
            conn.execute("DELETE FROM slideshows WHERE id = ?", (slideshow_id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s deleted slideshow %s", user_id, slideshow_id)
        await ActivityService.record(user_id, "delete", "slideshow", slideshow_id, {"title": existing.title})

    @classmethod
    async def duplicate_slideshow(cls, slideshow_id: int, user_id: int) -> SlideshowRead:
        """Copy a slideshow under the title ``"<title> (copy)"``."""
        source = await cls.get_slideshow(slideshow_id, user_id)
        copy = SlideshowCreate(
            title=f"{source.title} (copy)",
            description=source.description,
            images=list(source.images),
            transition=source.transition,
            text_overlays=source.text_overlays,
            music=source.music,
            settings=dict(source.settings),
        )
        # The source was already accepted, so tier checks are not repeated.
        duplicate = await cls.create_slideshow(user_id, copy, premium=True)
        await ActivityService.record(
            user_id, "duplicate", "slideshow", duplicate.id, {"source_id": slideshow_id}
        )
        return duplicate

    @classmethod
    async def count_for_user(cls, user_id: int) -> int:
        conn = get_connection()
        try:
            row = conn.execute("SELECT COUNT(*) AS n FROM slideshows WHERE user_id = ?", (user_id,)).fetchone()
            return int(row["n"])
        finally:
            conn.close()

    @classmethod
    def slide_duration(cls, slideshow: SlideshowRead, default: float) -> float:
        """Per-slide duration in seconds from ``settings.slide_duration``."""
        value: Dict[str, Any] = slideshow.settings or {}
        try:
            duration = float(value.get("slide_duration", default))
        except (TypeError, ValueError):
            return default
        return duration if duration > 0 else default

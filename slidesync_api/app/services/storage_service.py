"""
Local media storage.

Uploaded images and audio, enhanced images and exported videos are
written below ``settings.media_dir``:

    {media_dir}/{user_id}/{unix_millis}.{ext}
    {media_dir}/exports/slideshow_{unix_millis}.mp4

and served by the static ``/media`` mount, so public URLs look like
``{public_base_url}/media/{user_id}/{name}``.  Existing files are never
overwritten; a colliding name moves to the next millisecond.
"""

import io
import logging
import mimetypes
import time
from pathlib import Path
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError

from slidesync_api.app.core.config import settings
from slidesync_api.app.schemas.media import MediaFile

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "bmp"}
AUDIO_EXTENSIONS = {"mp3", "wav", "ogg", "m4a", "aac", "flac"}
EXPORTS_DIR = "exports"


class FileTooLargeError(ValueError):
    """Raised when an upload exceeds its size limit."""


def media_root() -> Path:
    """Absolute path of the media directory.

    Relative ``MEDIA_DIR`` values are resolved against the package
    directory, like the database path.
    """
    root = Path(settings.media_dir)
    if not root.is_absolute():
        root = Path(__file__).resolve().parent.parent.parent / root
    return root.resolve()


def public_url(relative_path: str) -> str:
    return f"{settings.public_base_url}/media/{relative_path}"


def _unique_path(directory: Path, ext: str, prefix: str = "", suffix: str = "") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    millis = int(time.time() * 1000)
    candidate = directory / f"{prefix}{millis}{suffix}.{ext}"
    while candidate.exists():
        millis += 1
        candidate = directory / f"{prefix}{millis}{suffix}.{ext}"
    return candidate


def _extension(filename: Optional[str], allowed: set, fallback: str) -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
        if ext in allowed:
            return ext
    return fallback


class StorageService:
    """Stores and resolves user media files."""

    @classmethod
    async def upload_image(
        cls,
        user_id: int,
        data: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> MediaFile:
        """Validate and store an uploaded image.

        Raises ``ValueError`` if the content type is not ``image/*`` or
        Pillow cannot decode the bytes, ``FileTooLargeError`` if the file
        exceeds ``MAX_IMAGE_BYTES``.
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValueError("Only image files are allowed")
        if len(data) > settings.max_image_bytes:
            raise FileTooLargeError(
                f"Image is larger than {settings.max_image_bytes // (1024 * 1024)}MB"
            )
        try:
            with Image.open(io.BytesIO(data)) as probe:
                detected = (probe.format or "png").lower()
                probe.verify()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("File is not a valid image") from exc
        fallback = "jpg" if detected == "jpeg" else detected
        if fallback not in IMAGE_EXTENSIONS:
            fallback = "png"
        ext = _extension(filename, IMAGE_EXTENSIONS, fallback)
        target = _unique_path(media_root() / str(user_id), ext)
        target.write_bytes(data)
        relative = f"{user_id}/{target.name}"
        logger.info("Stored image %s (%d bytes) for user %s", relative, len(data), user_id)
        return MediaFile(url=public_url(relative), path=relative, content_type=content_type, size=len(data))

    @classmethod
    async def upload_audio(
        cls,
        user_id: int,
        data: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> MediaFile:
        """Store an uploaded music file (``audio/*``, at most ``MAX_AUDIO_BYTES``)."""
        if not content_type or not content_type.startswith("audio/"):
            raise ValueError("Only audio files are allowed")
        if len(data) > settings.max_audio_bytes:
            raise FileTooLargeError(
                f"Audio file is larger than {settings.max_audio_bytes // (1024 * 1024)}MB"
            )
        guessed = (mimetypes.guess_extension(content_type) or ".mp3").lstrip(".")
        ext = _extension(filename, AUDIO_EXTENSIONS, guessed if guessed in AUDIO_EXTENSIONS else "mp3")
        target = _unique_path(media_root() / str(user_id), ext)
        target.write_bytes(data)
        relative = f"{user_id}/{target.name}"
        logger.info("Stored audio %s (%d bytes) for user %s", relative, len(data), user_id)
        return MediaFile(url=public_url(relative), path=relative, content_type=content_type, size=len(data))

    @classmethod
    async def delete_file(cls, user_id: int, path: str) -> None:
        """Delete ``{user_id}/{name}`` from the media directory.

        Users may only delete files inside their own folder.
        """
        parts = path.strip("/").split("/")
        if len(parts) != 2 or not parts[1] or parts[1] in {".", ".."}:
            raise ValueError("Invalid file path")
        if parts[0] != str(user_id):
            raise PermissionError("You can only delete your own files")
        target = media_root() / parts[0] / parts[1]
        if not target.is_file():
            raise LookupError(f"File {path} not found")
        target.unlink()
        logger.info("Deleted media file %s", path)

    @classmethod
    def local_path(cls, url: str) -> Optional[Path]:
        """Map a media URL (absolute or ``/media/...``) to a file on disk.

        Returns ``None`` for URLs that are not served by this application.
        """
        prefixes = (f"{settings.public_base_url}/media/", "/media/")
        for prefix in prefixes:
            if url.startswith(prefix):
                root = media_root()
                candidate = (root / url[len(prefix):]).resolve()
                if root not in candidate.parents:
                    raise ValueError("Invalid media path")
                return candidate
        return None

    @classmethod
    def open_image(cls, url: str) -> Image.Image:
        """Load an image as RGB, from disk for local media or over HTTP."""
        path = cls.local_path(url)
        if path is not None:
            if not path.is_file():
                raise LookupError(f"Image {url} not found")
            with Image.open(path) as img:
                return img.convert("RGB")
        response = httpx.get(url, timeout=30, follow_redirects=True)
        response.raise_for_status()
        with Image.open(io.BytesIO(response.content)) as img:
            return img.convert("RGB")

    @classmethod
    def save_image(cls, image: Image.Image, user_id: int, suffix: str = "") -> MediaFile:
        """Save a processed image as PNG and return its public location."""
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        target = _unique_path(media_root() / str(user_id), "png", suffix=f"-{suffix}" if suffix else "")
        image.save(target, format="PNG")
        relative = f"{user_id}/{target.name}"
        return MediaFile(
            url=public_url(relative),
            path=relative,
            content_type="image/png",
            size=target.stat().st_size,
        )

    @classmethod
    def export_path(cls) -> Path:
        """Fresh ``exports/slideshow_{millis}.mp4`` path for a rendered video."""
        return _unique_path(media_root() / EXPORTS_DIR, "mp4", prefix="slideshow_")

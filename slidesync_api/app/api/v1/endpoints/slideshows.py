"""
Slideshow endpoints for API v1.

CRUD for the current user's slideshows plus the editor workflow:
editor state, applying AI suggestions and templates, the preview
timeline and frames, auto-enhancement, video export and sharing.
Slideshows are private; other users' slideshows answer 403.
"""

import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status

from slidesync_api.app.core.security import get_current_user, is_premium
from slidesync_api.app.schemas.enhance import EnhanceOptions, EnhancementReport
from slidesync_api.app.schemas.slideshow import (
    DownloadEvent,
    EditorState,
    ExportRequest,
    ExportResult,
    ShareEvent,
    SharePayload,
    ShareRequest,
    SlideshowCreate,
    SlideshowRead,
    SlideshowUpdate,
    SuggestionApply,
    TemplateApply,
    Timeline,
)
from slidesync_api.app.services.editor_service import EditorService
from slidesync_api.app.services.enhance_service import EnhanceService
from slidesync_api.app.services.export_service import ExportService
from slidesync_api.app.services.render_service import RenderService, build_timeline
from slidesync_api.app.services.share_service import ShareService
from slidesync_api.app.services.slideshow_service import SlideshowService

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: Exception) -> HTTPException:
    """Translate a service exception into the matching HTTP error."""
    if isinstance(e, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, httpx.HTTPError):
        logger.error("Fetching slideshow media failed: %s", e)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not fetch slideshow image")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


async def _load(slideshow_id: int, current_user: dict) -> SlideshowRead:
    try:
        return await SlideshowService.get_slideshow(slideshow_id, current_user["user_id"])
    except (LookupError, PermissionError) as e:
        raise _http_error(e)


@router.post("/", response_model=SlideshowRead, status_code=status.HTTP_201_CREATED)
async def create_slideshow(
    slideshow: SlideshowCreate,
    current_user: dict = Depends(get_current_user),
) -> SlideshowRead:
    """Create a slideshow.

    The transition and music must exist in the catalog; premium-only
    options need a premium account (403).
    """
    try:
        return await SlideshowService.create_slideshow(
            current_user["user_id"], slideshow, premium=is_premium(current_user)
        )
    except (ValueError, PermissionError) as e:
        raise _http_error(e)


@router.get("/", response_model=List[SlideshowRead])
async def list_slideshows(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
) -> List[SlideshowRead]:
    """List the current user's slideshows, most recently updated first."""
    return await SlideshowService.list_slideshows(current_user["user_id"], limit=limit, offset=offset)


@router.get("/{slideshow_id}", response_model=SlideshowRead)
async def get_slideshow(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> SlideshowRead:
    return await _load(slideshow_id, current_user)


@router.put("/{slideshow_id}", response_model=SlideshowRead)
async def update_slideshow(
    body: SlideshowUpdate,
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> SlideshowRead:
    """Update a slideshow.  Only the provided fields change."""
    try:
        return await SlideshowService.update_slideshow(
            slideshow_id, current_user["user_id"], body, premium=is_premium(current_user)
        )
    except (ValueError, LookupError, PermissionError) as e:
        raise _http_error(e)


@router.delete("/{slideshow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slideshow(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> None:
    try:
        await SlideshowService.delete_slideshow(slideshow_id, current_user["user_id"])
    except (LookupError, PermissionError) as e:
        raise _http_error(e)
    return None


@router.post("/{slideshow_id}/duplicate", response_model=SlideshowRead, status_code=status.HTTP_201_CREATED)
async def duplicate_slideshow(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> SlideshowRead:
    """Copy a slideshow; the copy is titled ``"<title> (copy)"``."""
    try:
        return await SlideshowService.duplicate_slideshow(slideshow_id, current_user["user_id"])
    except (LookupError, PermissionError) as e:
        raise _http_error(e)


@router.get("/{slideshow_id}/editor", response_model=EditorState)
async def editor_state(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> EditorState:
    """Editor steps with their availability for this slideshow."""
    slideshow = await _load(slideshow_id, current_user)
    return EditorService.editor_state(slideshow)


@router.post("/{slideshow_id}/suggestions", response_model=SlideshowRead)
async def apply_suggestion(
    body: SuggestionApply,
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> SlideshowRead:
    """Apply a text, music or timing suggestion from an enhancement report."""
    slideshow = await _load(slideshow_id, current_user)
    try:
        return await EditorService.apply_suggestion(
            slideshow, body.type, body.suggestion, premium=is_premium(current_user)
        )
    except (ValueError, PermissionError) as e:
        raise _http_error(e)


@router.post("/{slideshow_id}/template", response_model=SlideshowRead)
async def apply_template(
    body: TemplateApply,
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> SlideshowRead:
    slideshow = await _load(slideshow_id, current_user)
    try:
        return await EditorService.apply_template(slideshow, body.template_id, premium=is_premium(current_user))
    except (LookupError, PermissionError) as e:
        raise _http_error(e)


@router.get("/{slideshow_id}/timeline", response_model=Timeline)
async def timeline(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> Timeline:
    slideshow = await _load(slideshow_id, current_user)
    return build_timeline(slideshow)


@router.get(
    "/{slideshow_id}/preview",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def preview_frame(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    index: int = Query(0, description="Slide index; wraps around the image list"),
    current_user: dict = Depends(get_current_user),
) -> Response:
    """Render one slide with its overlays as a PNG image."""
    slideshow = await _load(slideshow_id, current_user)
    try:
        png = await RenderService.preview_frame(slideshow, index, premium=is_premium(current_user))
    except (ValueError, LookupError, httpx.HTTPError) as e:
        raise _http_error(e)
    return Response(content=png, media_type="image/png")


@router.post("/{slideshow_id}/enhance", response_model=EnhancementReport)
async def enhance_slideshow(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    options: Optional[EnhanceOptions] = Body(None),
    current_user: dict = Depends(get_current_user),
) -> EnhancementReport:
    """Auto-enhance every image and return the analysis and suggestions.

    The slideshow's images are replaced by the enhanced copies.
    """
    slideshow = await _load(slideshow_id, current_user)
    try:
        return await EnhanceService.enhance_slideshow(slideshow, options)
    except (ValueError, LookupError, httpx.HTTPError) as e:
        raise _http_error(e)


@router.post("/{slideshow_id}/export", response_model=ExportResult)
async def export_slideshow(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    body: Optional[ExportRequest] = Body(None),
    current_user: dict = Depends(get_current_user),
) -> ExportResult:
    """Render the slideshow to MP4.

    ``1080p`` needs a premium account.  Free accounts get a watermark.
    """
    slideshow = await _load(slideshow_id, current_user)
    export_format = body.format if body else "720p"
    try:
        return await ExportService.export_video(slideshow, export_format, premium=is_premium(current_user))
    except (ValueError, LookupError, PermissionError, httpx.HTTPError) as e:
        raise _http_error(e)


@router.post("/{slideshow_id}/share", response_model=SharePayload)
async def share_slideshow(
    slideshow_id: int = Path(..., description="Slideshow ID"),
    body: Optional[ShareRequest] = Body(None),
    current_user: dict = Depends(get_current_user),
) -> SharePayload:
    """Build the share message, platform links and QR code for a slideshow."""
    slideshow = await _load(slideshow_id, current_user)
    body = body or ShareRequest()
    return await ShareService.share(slideshow, body.video_url, body.text, body.hashtags)


@router.post("/{slideshow_id}/shares", status_code=status.HTTP_204_NO_CONTENT)
async def record_share(
    body: ShareEvent,
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> None:
    """Count a share on a platform for the analytics dashboard."""
    slideshow = await _load(slideshow_id, current_user)
    try:
        await ShareService.record_share(slideshow, body.platform)
    except ValueError as e:
        raise _http_error(e)
    return None


@router.post("/{slideshow_id}/downloads", status_code=status.HTTP_204_NO_CONTENT)
async def record_download(
    body: Optional[DownloadEvent] = Body(None),
    slideshow_id: int = Path(..., description="Slideshow ID"),
    current_user: dict = Depends(get_current_user),
) -> None:
    slideshow = await _load(slideshow_id, current_user)
    await ShareService.record_download(slideshow, body.video_url if body else None)
    return None

"""
Image analysis endpoint for API v1.

Analyses a single uploaded image without storing it.  Enhancing a whole
slideshow lives under ``/slideshows/{id}/enhance``.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from slidesync_api.app.core.config import settings
from slidesync_api.app.core.security import get_current_user
from slidesync_api.app.schemas.enhance import ImageAnalysis
from slidesync_api.app.services.enhance_service import EnhanceService

router = APIRouter()


@router.post("/analyze", response_model=ImageAnalysis)
async def analyze_image(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
) -> ImageAnalysis:
    """Return brightness, saturation, dominant colours, mood and suggestions."""
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")
    data = await file.read()
    if len(data) > settings.max_image_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Image is too large")
    try:
        return await EnhanceService.analyze_upload(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

"""
Media upload endpoints for API v1.

Images and audio are stored below the media directory and served from
``/media``.  The returned URL is what clients put into a slideshow's
``images`` list or ``music`` field.
"""

from fastapi import APIRouter, Depends, File, HTTPException, Path, UploadFile, status

from slidesync_api.app.core.security import get_current_user
from slidesync_api.app.schemas.media import MediaFile
from slidesync_api.app.services.storage_service import FileTooLargeError, StorageService

router = APIRouter()


@router.post("/images", response_model=MediaFile, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
) -> MediaFile:
    """Upload an image (``image/*``, Pillow-readable, size-limited)."""
    data = await file.read()
    try:
        return await StorageService.upload_image(
            current_user["user_id"], data, file.content_type, file.filename
        )
    except FileTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/audio", response_model=MediaFile, status_code=status.HTTP_201_CREATED)
async def upload_audio(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
) -> MediaFile:
    """Upload a music track (``audio/*``, smaller than the audio limit)."""
    data = await file.read()
    try:
        return await StorageService.upload_audio(
            current_user["user_id"], data, file.content_type, file.filename
        )
    except FileTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{owner_id}/{filename}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    owner_id: str = Path(..., description="Folder of the file, i.e. the owner's user ID"),
    filename: str = Path(...),
    current_user: dict = Depends(get_current_user),
) -> None:
    """Delete one of the current user's uploaded files."""
    try:
        await StorageService.delete_file(current_user["user_id"], f"{owner_id}/{filename}")
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return None

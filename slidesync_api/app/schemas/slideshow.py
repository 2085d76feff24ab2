"""
Pydantic models for slideshow data.

``SlideshowBase`` holds the editable fields shared by the create
request and the read model.  ``SlideshowUpdate`` makes every field
optional so clients can send partial updates from any editor step.
Text overlays accept both ``image_index`` and the camel-case
``imageIndex`` used by browser clients.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field


class TextOverlay(BaseModel):
    image_index: int = Field(
        0, ge=0, validation_alias=AliasChoices("image_index", "imageIndex")
    )
    text: str = Field("Your text here", max_length=300)
    font: str = "Inter"
    size: int = Field(24, ge=6, le=300)
    color: str = "#ffffff"
    position: Literal["top", "center", "bottom"] = "center"
    x: float = Field(50, ge=0, le=100, description="Horizontal position in percent of the frame")
    y: float = Field(50, ge=0, le=100, description="Vertical position in percent of the frame")

    model_config = {"populate_by_name": True}


class SlideshowBase(BaseModel):
    title: str = Field("My Slideshow", min_length=1, max_length=200)
    description: Optional[str] = Field(None, examples=["Created with SlideSync"])
    images: List[str] = Field(default_factory=list, description="Ordered image URLs; the first is the 'before' shot")
    transition: str = Field("fade", examples=["fade"])
    text_overlays: List[TextOverlay] = Field(default_factory=list)
    music: Optional[str] = Field(None, examples=["upbeat"])
    settings: Dict[str, Any] = Field(default_factory=dict)


class SlideshowCreate(SlideshowBase):
    """Schema for creating a slideshow."""
    pass


class SlideshowUpdate(BaseModel):
    """Schema for updating a slideshow.

    All fields are optional; only provided fields will be updated.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    images: Optional[List[str]] = None
    transition: Optional[str] = None
    text_overlays: Optional[List[TextOverlay]] = None
    music: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class SlideshowRead(SlideshowBase):
    """Schema for reading a slideshow from the API."""

    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }


class EditorStep(BaseModel):
    id: str
    label: str
    available: bool


class EditorState(BaseModel):
    slideshow_id: int
    image_count: int
    slide_labels: List[str]
    steps: List[EditorStep]


class SuggestionApply(BaseModel):
    type: Literal["text", "music", "timing"]
    suggestion: Any


class TemplateApply(BaseModel):
    template_id: str


class TimelineEntry(BaseModel):
    index: int
    label: str
    image: str
    start: float
    end: float
    overlays: List[TextOverlay] = Field(default_factory=list)


class Timeline(BaseModel):
    slideshow_id: int
    transition: str
    slide_duration: float
    total_duration: float
    slides: List[TimelineEntry]


class ExportRequest(BaseModel):
    format: Literal["720p", "1080p"] = "720p"


class ExportResult(BaseModel):
    url: str
    filename: str
    format: str
    width: int
    height: int
    duration: float
    watermark: bool


class ShareRequest(BaseModel):
    video_url: Optional[str] = None
    text: Optional[str] = None
    hashtags: Optional[List[str]] = None


class SharePayload(BaseModel):
    message: str
    hashtags: str
    clipboard_text: str
    share_url: str
    video_url: Optional[str] = None
    download_filename: str
    qr_code_url: str
    links: Dict[str, str]


class ShareEvent(BaseModel):
    platform: str = Field(..., examples=["twitter"])


class DownloadEvent(BaseModel):
    video_url: Optional[str] = None

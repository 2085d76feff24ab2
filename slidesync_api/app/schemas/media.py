"""
Pydantic models for uploaded media files.
"""

from pydantic import BaseModel


class MediaFile(BaseModel):
    url: str
    path: str
    content_type: str
    size: int

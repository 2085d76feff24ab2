"""
Pydantic models for the static editor catalog: transitions, music
tracks, templates and export formats.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Transition(BaseModel):
    id: str
    name: str
    description: str
    premium: bool = False


class MusicTrack(BaseModel):
    id: str
    name: str
    duration: str
    premium: bool = False


class TextStyle(BaseModel):
    font: str
    size: int
    color: str


class Template(BaseModel):
    id: str
    name: str
    category: str
    description: str
    thumbnail: str
    transition: str
    text_style: TextStyle
    music_genre: str
    premium: bool = False
    popular: bool = False
    tags: List[str] = Field(default_factory=list)


class TemplateCategory(BaseModel):
    id: str
    name: str
    count: int


class ExportFormat(BaseModel):
    id: str
    name: str
    description: str
    width: int
    height: int
    premium: bool = False


class StreamingTrack(BaseModel):
    id: str
    title: str
    artist: str
    duration: str
    platform: str
    url: str
    preview_url: Optional[str] = None


class StreamingImport(BaseModel):
    url: str


class StreamingImportResult(BaseModel):
    platform: str
    music: str


class Catalog(BaseModel):
    transitions: List[Transition]
    music: List[MusicTrack]
    export_formats: List[ExportFormat]
    categories: List[TemplateCategory]
    premium_features: List[str]
    limits: Dict[str, int]

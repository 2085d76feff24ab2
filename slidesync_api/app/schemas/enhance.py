"""
Pydantic models for image analysis and auto-enhancement.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class EnhanceOptions(BaseModel):
    color_correction: bool = True
    noise_reduction: bool = True
    sharpening: bool = True
    auto_text: bool = True
    smart_music: bool = True
    optimal_timing: bool = True
    intensity: int = Field(70, ge=0, le=100, description="Enhancement intensity in percent")


class ImageAnalysis(BaseModel):
    brightness: float
    contrast: float
    saturation: float
    sharpness: float
    dominant_colors: List[str]
    mood: Literal["bright", "dark", "vibrant", "muted"]
    quality: Literal["excellent", "good", "fair", "poor"]
    suggestions: List[str]


class TextSuggestion(BaseModel):
    text: str
    position: Literal["top", "center", "bottom"]
    style: str
    color: str


class EnhancementReport(BaseModel):
    images: List[str]
    analyses: List[ImageAnalysis]
    overall_mood: str
    suggested_texts: List[TextSuggestion] = Field(default_factory=list)
    suggested_music: Optional[str] = None
    optimal_duration: Optional[float] = None
    improvements: List[str] = Field(default_factory=list)

"""
Pydantic models for the analytics dashboard and the activity log.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ActivityRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    object_type: Optional[str] = None
    object_id: Optional[int] = None
    timestamp: datetime
    details: Optional[Any] = None


class AnalyticsSummary(BaseModel):
    time_range: str
    total_slideshows: int
    slideshows_created: int
    total_exports: int
    total_shares: int
    total_downloads: int
    total_enhancements: int
    action_breakdown: Dict[str, int]
    top_slideshow: Optional[str] = None
    recent_activity: List[ActivityRead]

"""
Analytics endpoints for API v1.

The dashboard summary and the raw activity log of the current user.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from slidesync_api.app.core.security import get_current_user
from slidesync_api.app.schemas.analytics import ActivityRead, AnalyticsSummary
from slidesync_api.app.services.activity_service import ActivityService
from slidesync_api.app.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/summary", response_model=AnalyticsSummary)
async def summary(
    time_range: str = Query("7d", description="24h, 7d, 30d or 90d"),
    current_user: dict = Depends(get_current_user),
) -> AnalyticsSummary:
    try:
        return await AnalyticsService.summary(current_user["user_id"], time_range)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/activity", response_model=List[ActivityRead])
async def list_activity(
    object_type: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
) -> List[ActivityRead]:
    """The current user's activity log, newest first."""
    logs = await ActivityService.list_logs(
        user_id=current_user["user_id"],
        object_type=object_type,
        action=action,
        limit=limit,
        offset=offset,
    )
    return [ActivityRead(**log) for log in logs]

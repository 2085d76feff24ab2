"""
Per-user analytics computed from the activity log.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from slidesync_api.app.core.db import get_connection
from slidesync_api.app.schemas.analytics import ActivityRead, AnalyticsSummary
from slidesync_api.app.services.activity_service import ActivityService
from slidesync_api.app.services.slideshow_service import SlideshowService

logger = logging.getLogger(__name__)

TIME_RANGES = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
RECENT_ACTIVITY_LIMIT = 10
# Upper bound on log rows read for one summary.
MAX_LOG_ROWS = 10_000


class AnalyticsService:
    """Aggregates a user's activity over a time window."""

    @classmethod
    async def summary(cls, user_id: int, time_range: str = "7d", now: Optional[datetime] = None) -> AnalyticsSummary:
        if time_range not in TIME_RANGES:
            raise ValueError(f"Unknown time range: {time_range}. Use one of {', '.join(TIME_RANGES)}")
        # Log timestamps are written by SQLite in UTC.
        now = now or datetime.utcnow()
        since = (now - TIME_RANGES[time_range]).strftime("%Y-%m-%d %H:%M:%S")
        logs = await ActivityService.list_logs(user_id=user_id, since=since, limit=MAX_LOG_ROWS)

        breakdown = Counter(log["action"] for log in logs)
        slideshow_events = Counter(
            log["object_id"] for log in logs if log["object_type"] == "slideshow" and log["object_id"] is not None
        )
        return AnalyticsSummary(
            time_range=time_range,
            total_slideshows=await SlideshowService.count_for_user(user_id),
            slideshows_created=sum(
                1 for log in logs if log["action"] == "create" and log["object_type"] == "slideshow"
            ),
            total_exports=breakdown.get("export", 0),
            total_shares=breakdown.get("share", 0),
            total_downloads=breakdown.get("download", 0),
            total_enhancements=breakdown.get("enhance", 0),
            action_breakdown=dict(breakdown),
            top_slideshow=cls._top_slideshow_title(user_id, slideshow_events),
            recent_activity=[ActivityRead(**log) for log in logs[:RECENT_ACTIVITY_LIMIT]],
        )

    @classmethod
    def _top_slideshow_title(cls, user_id: int, counts: Counter) -> Optional[str]:
        """Title of the existing slideshow with the most activity."""
        if not counts:
            return None
        conn = get_connection()
        try:
            for slideshow_id, _ in counts.most_common():
                row = conn.execute(
                    "SELECT title FROM slideshows WHERE id = ? AND user_id = ?",
                    (slideshow_id, user_id),
                ).fetchone()
                if row:
                    return row["title"]
            return None
        finally:
            conn.close()

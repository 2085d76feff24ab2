"""
Activity service for recording and querying user actions.

This module writes activity events (slideshow created, exported,
shared, enhanced, payment confirmed, ...) to the ``activity_logs``
table and reads them back with filters.  The analytics dashboard is
computed from these records.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from slidesync_api.app.core.db import get_connection

logger = logging.getLogger(__name__)


class ActivityService:
    """Service class for writing and retrieving activity logs."""

    @classmethod
    async def log(
        cls,
        user_id: Optional[int],
        action: str,
        object_type: str,
        object_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Insert a new activity record.

        Parameters
        ----------
        user_id : Optional[int]
            ID of the user performing the action.  ``None`` for system
            actions such as webhook confirmations.
        action : str
            Short verb (e.g. "create", "update", "export", "share").
        object_type : str
            Type of object affected (e.g. "slideshow", "payment").
        object_id : Optional[int]
            Primary key of the affected object, if applicable.
        details : Optional[dict]
            Additional structured data, stored as JSON.
        """
        conn = get_connection()
        try:
            details_json = json.dumps(details) if details else None
            conn.execute(
                """
                INSERT INTO activity_logs (user_id, action, object_type, object_id, details)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, action, object_type, object_id, details_json),
            )
            conn.commit()
        finally:
            conn.close()

    @classmethod
    async def record(cls, *args: Any, **kwargs: Any) -> None:
        """Like ``log`` but never raises.

        Used by the other services so that a failing activity write does
        not undo the action being recorded.
        """
        try:
            await cls.log(*args, **kwargs)
        except Exception:
            logger.exception("Failed to write activity log entry")

    @classmethod
    async def list_logs(
        cls,
        user_id: Optional[int] = None,
        object_type: Optional[str] = None,
        action: Optional[str] = None,
        since: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Retrieve activity records with optional filters and pagination.

        ``since`` is a ``YYYY-MM-DD HH:MM:SS`` string compared against the
        ``timestamp`` column.  Newest records come first.
        """
        conn = get_connection()
        try:
            where_clauses: List[str] = []
            params: List[Any] = []
            if user_id is not None:
                where_clauses.append("user_id = ?")
                params.append(user_id)
            if object_type:
                where_clauses.append("object_type = ?")
                params.append(object_type)
            if action:
                where_clauses.append("action = ?")
                params.append(action)
            if since:
                where_clauses.append("timestamp >= ?")
                params.append(since)
            query = "SELECT id, user_id, action, object_type, object_id, timestamp, details FROM activity_logs"
            if where_clauses:
                query += " WHERE " + " AND ".join(where_clauses)
            query += " ORDER BY timestamp DESC, id DESC LIMIT ? OFFSET ?"
            params.extend([limit, offset])
            rows = conn.execute(query, tuple(params)).fetchall()
            logs = []
            for row in rows:
                details_data = None
                if row["details"]:
                    try:
                        details_data = json.loads(row["details"])
                    except json.JSONDecodeError:
                        details_data = row["details"]
                logs.append(
                    {
                        "id": row["id"],
                        "user_id": row["user_id"],
                        "action": row["action"],
                        "object_type": row["object_type"],
                        "object_id": row["object_id"],
                        "timestamp": row["timestamp"],
                        "details": details_data,
                    }
                )
            return logs
        finally:
            conn.close()

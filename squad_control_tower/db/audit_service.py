"""
Activity Log Service.

Provides a clean interface for recording activity entries throughout the
application. Routine, task and settings mutations all go through here.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from .audit_models import ActivityModel
from .base import utc_now


class AuditService:
    """Service for managing activity entries.

    Usage:
        audit = AuditService(db_session)
        audit.log_activity("routine_created", 'Routine "Standup" created',
                           metadata={"routine_id": routine.id})

    Pass ``commit=False`` to stage the entry in the caller's transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def log_activity(
        self,
        activity_type: str,
        message: str,
        task_id: Optional[str] = None,
        agent_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> ActivityModel:
        """Record an activity entry.

        Args:
            activity_type: One of the ``activity_type`` enum values
            message: Human-readable description
            task_id: Affected task, if any
            agent_id: Acting agent, if any
            metadata: Extra structured context (e.g. ``{"routine_id": ...}``)
            created_at: Entry timestamp (defaults to now)
            commit: Commit immediately; when False the entry is only flushed

        Returns:
            The created ActivityModel
        """
        entry = ActivityModel(
            id=str(uuid.uuid4()),
            type=activity_type,
            agent_id=agent_id,
            task_id=task_id,
            message=message,
            meta=metadata,
            created_at=created_at or utc_now(),
        )

        self.db.add(entry)
        if commit:
            self.db.commit()
            self.db.refresh(entry)
        else:
            self.db.flush()
        return entry

    # Query methods

    def query_by_type(
        self,
        activity_type: str,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ActivityModel]:
        """Get activity entries of one type, newest first."""
        return (
            self.db.query(ActivityModel)
            .filter(ActivityModel.type == activity_type)
            .order_by(desc(ActivityModel.created_at))
            .offset(offset)
            .limit(limit)
            .all()
        )

    def query_by_task(
        self,
        task_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ActivityModel]:
        """Get activity history for a task, newest first."""
        return (
            self.db.query(ActivityModel)
            .filter(ActivityModel.task_id == task_id)
            .order_by(desc(ActivityModel.created_at))
            .offset(offset)
            .limit(limit)
            .all()
        )

    def query_recent(
        self,
        limit: int = 50,
        activity_type: Optional[str] = None,
    ) -> List[ActivityModel]:
        """Get most recent activity entries.

        Args:
            limit: Maximum number of entries to return
            activity_type: Optional filter by type

        Returns:
            List of ActivityModel entries, newest first
        """
        query = self.db.query(ActivityModel)

        if activity_type:
            query = query.filter(ActivityModel.type == activity_type)

        return query.order_by(desc(ActivityModel.created_at)).limit(limit).all()

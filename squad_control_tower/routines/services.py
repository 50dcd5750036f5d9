"""
Routine store.

CRUD for routine templates, the due-routine query and the trigger path that
turns a due routine into an inbox task. Due evaluation and trigger commits
run inside the store's own session so each stays atomic.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.audit_service import AuditService
from ..db.base import as_utc, utc_now
from ..db.models import RoutineModel, TaskModel
from ..db.services import AgentService
from ..timezones import LocalTime
from .errors import (
    RoutineAlreadyTriggeredError,
    RoutineNotFoundError,
    RoutineValidationError,
    TriggerCommitError,
)
from .evaluator import evaluate_due_routines
from .routine import DueRoutine, RoutineCreate, RoutineUpdate

logger = logging.getLogger(__name__)


def _validated(model, data):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RoutineValidationError(
            f"Invalid routine: {e.error_count()} validation error(s)",
            errors=e.errors(include_url=False, include_context=False),
        ) from e


class RoutineService:
    """Service for managing routines in the database."""

    def __init__(self, db: Session, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def create(self, routine: Union[RoutineCreate, Dict[str, Any]]) -> RoutineModel:
        """Create a routine from a validated template.

        Raises:
            RoutineValidationError: if a raw dict fails validation
        """
        routine = _validated(RoutineCreate, routine)
        now = utc_now()
        db_routine = RoutineModel(
            title=routine.title,
            description=routine.description,
            priority=routine.priority,
            schedule=routine.schedule.model_dump(),
            color=routine.color,
            enabled=routine.enabled,
            created_at=now,
            updated_at=now,
        )

        self.db.add(db_routine)
        self.db.flush()

        self.audit.log_activity(
            "routine_created",
            f'Routine "{db_routine.title}" created',
            metadata={"routine_id": db_routine.id},
            created_at=now,
            commit=False,
        )

        self.db.commit()
        self.db.refresh(db_routine)
        return db_routine

    def get(self, routine_id: str) -> Optional[RoutineModel]:
        """Get a routine by ID."""
        return (
            self.db.query(RoutineModel).filter(RoutineModel.id == routine_id).first()
        )

    def list(self, enabled_only: bool = False) -> List[RoutineModel]:
        """List routines, oldest first."""
        query = self.db.query(RoutineModel)
        if enabled_only:
            query = query.filter(RoutineModel.enabled.is_(True))
        return query.order_by(RoutineModel.created_at, RoutineModel.id).all()

    def update(
        self,
        routine_id: str,
        updates: Union[RoutineUpdate, Dict[str, Any]],
    ) -> RoutineModel:
        """Apply the fields that were explicitly provided.

        ``last_triggered_at`` is not updatable here.

        Raises:
            RoutineValidationError: if the update is malformed
            RoutineNotFoundError: if the routine does not exist
        """
        updates = _validated(RoutineUpdate, updates)
        db_routine = self.get(routine_id)
        if not db_routine:
            raise RoutineNotFoundError(routine_id)

        fields = updates.model_dump(exclude_unset=True)
        # An explicit null on a required column means "leave it alone"
        for key in ("title", "schedule", "color", "enabled"):
            if fields.get(key, ...) is None:
                fields.pop(key)

        before = db_routine.to_dict()
        for key, value in fields.items():
            setattr(db_routine, key, value)
        db_routine.updated_at = utc_now()

        self.audit.log_activity(
            "routine_updated",
            f'Routine "{db_routine.title}" updated',
            metadata={
                "routine_id": routine_id,
                "fields": sorted(fields),
                "before": {k: before[k] for k in fields},
            },
            created_at=db_routine.updated_at,
            commit=False,
        )

        self.db.commit()
        self.db.refresh(db_routine)
        return db_routine

    def remove(self, routine_id: str) -> None:
        """Delete a routine. Tasks it already created are kept.

        Raises:
            RoutineNotFoundError: if the routine does not exist
        """
        db_routine = self.get(routine_id)
        if not db_routine:
            raise RoutineNotFoundError(routine_id)

        title = db_routine.title
        self.db.delete(db_routine)
        self.audit.log_activity(
            "routine_deleted",
            f'Routine "{title}" deleted',
            metadata={"routine_id": routine_id},
            commit=False,
        )
        self.db.commit()

    def get_due_routines(
        self,
        current_time: datetime,
        local: LocalTime,
    ) -> List[DueRoutine]:
        """Enabled routines due in the current cycle.

        Args:
            current_time: Current UTC instant as seen by the caller
            local: ``current_time`` localized to the global zone
        """
        return evaluate_due_routines(
            self.list(enabled_only=True), as_utc(current_time), local
        )

    def trigger(
        self,
        routine_id: str,
        cycle_start: Optional[datetime] = None,
    ) -> str:
        """Materialize a routine into an inbox task.

        Creates the task, advances ``last_triggered_at`` and records a
        ``task_created_from_routine`` activity in one commit. Without
        ``cycle_start`` no due/dedup check is made; callers are expected to
        pass ids returned by ``get_due_routines``. With ``cycle_start`` the
        bookkeeping advance is conditional on the routine not having fired
        at or after that instant.

        Returns:
            The new task ID

        Raises:
            RoutineNotFoundError: if the routine does not exist
            RoutineAlreadyTriggeredError: if the conditional advance lost
            TriggerCommitError: if the transaction failed and was rolled back
        """
        routine = self.get(routine_id)
        if not routine:
            raise RoutineNotFoundError(routine_id)

        title = routine.title
        lead = AgentService(self.db, self.audit).get_lead()
        lead_id = lead.id if lead else None
        now = utc_now()

        try:
            task = TaskModel(
                title=routine.title,
                description=routine.description,
                priority=routine.priority or "normal",
                status="inbox",
                created_by=lead_id,
                created_at=now,
                updated_at=now,
            )
            self.db.add(task)
            self.db.flush()

            query = self.db.query(RoutineModel).filter(RoutineModel.id == routine_id)
            if cycle_start is not None:
                query = query.filter(
                    or_(
                        RoutineModel.last_triggered_at.is_(None),
                        RoutineModel.last_triggered_at < as_utc(cycle_start),
                    )
                )
            advanced = query.update(
                {
                    RoutineModel.last_triggered_at: now,
                    RoutineModel.updated_at: now,
                },
                synchronize_session=False,
            )
            if advanced == 0:
                self.db.rollback()
                if cycle_start is not None and self.get(routine_id) is not None:
                    raise RoutineAlreadyTriggeredError(routine_id)
                raise RoutineNotFoundError(routine_id)

            self.audit.log_activity(
                "task_created_from_routine",
                f'Routine "{title}" triggered',
                task_id=task.id,
                agent_id=lead_id,
                metadata={"routine_id": routine_id},
                created_at=now,
                commit=False,
            )

            task_id = task.id
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Trigger of routine {routine_id} rolled back: {e}")
            raise TriggerCommitError(routine_id, str(e)) from e

        logger.info(f'Routine "{title}" triggered -> task {task_id}')
        return task_id

"""
Routine API Routes.

REST endpoints for the routine store. The watcher drives scheduling through
``GET /routines/due`` and ``POST /routines/{id}/trigger``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db.base import get_db
from ..security import require_api_token
from ..timezones import LocalTime
from .errors import (
    RoutineAlreadyTriggeredError,
    RoutineNotFoundError,
    TriggerCommitError,
)
from .routine import DueRoutine, RoutineCreate, RoutineUpdate, TriggerRequest
from .services import RoutineService

logger = structlog.get_logger()

router = APIRouter(
    prefix="/routines",
    tags=["routines"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
async def list_routines(
    enabled_only: bool = False,
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    """List routines, optionally only enabled ones."""
    service = RoutineService(db)
    return [r.to_dict() for r in service.list(enabled_only=enabled_only)]


@router.post("", status_code=201)
async def create_routine(
    routine: RoutineCreate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create a new routine."""
    service = RoutineService(db)
    db_routine = service.create(routine)
    logger.info("Routine created", routine_id=db_routine.id, title=db_routine.title)
    return {
        "status": "success",
        "routine_id": db_routine.id,
        "routine": db_routine.to_dict(),
    }


# Declared before /{routine_id} so "due" is not taken as an id
@router.get("/due", response_model=List[DueRoutine])
async def get_due_routines(
    current_timestamp: int = Query(..., ge=0, description="UTC epoch milliseconds"),
    day_of_week: int = Query(..., ge=0, le=6),
    hour: int = Query(..., ge=0, le=23),
    minute: int = Query(..., ge=0, le=59),
    db: Session = Depends(get_db),
) -> List[DueRoutine]:
    """Routines due in the caller's current cycle.

    The caller supplies both the UTC instant and its localization to the
    global zone.
    """
    service = RoutineService(db)
    now = datetime.fromtimestamp(current_timestamp / 1000, tz=timezone.utc)
    return service.get_due_routines(
        now, LocalTime(day_of_week=day_of_week, hour=hour, minute=minute)
    )


@router.get("/{routine_id}")
async def get_routine(
    routine_id: str,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Get a routine by ID."""
    service = RoutineService(db)
    routine = service.get(routine_id)

    if not routine:
        raise HTTPException(
            status_code=404, detail=RoutineNotFoundError(routine_id).to_dict()
        )

    return routine.to_dict()


@router.patch("/{routine_id}")
async def update_routine(
    routine_id: str,
    updates: RoutineUpdate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Update routine details."""
    service = RoutineService(db)
    try:
        routine = service.update(routine_id, updates)
    except RoutineNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())

    return {"status": "success", "routine": routine.to_dict()}


@router.delete("/{routine_id}")
async def remove_routine(
    routine_id: str,
    db: Session = Depends(get_db),
) -> Dict[str, str]:
    """Delete a routine."""
    service = RoutineService(db)
    try:
        service.remove(routine_id)
    except RoutineNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())

    logger.info("Routine deleted", routine_id=routine_id)
    return {"status": "success", "message": f"Routine {routine_id} deleted"}


@router.post("/{routine_id}/trigger")
async def trigger_routine(
    routine_id: str,
    request: Optional[TriggerRequest] = None,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create a task from the routine template now."""
    service = RoutineService(db)
    cycle_start = request.cycle_start if request else None

    try:
        task_id = service.trigger(routine_id, cycle_start=cycle_start)
    except RoutineNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())
    except RoutineAlreadyTriggeredError as e:
        raise HTTPException(status_code=409, detail=e.to_dict())
    except TriggerCommitError as e:
        logger.error("Routine trigger failed", routine_id=routine_id, error=e.message)
        raise HTTPException(status_code=500, detail=e.to_dict())

    logger.info("Routine triggered", routine_id=routine_id, task_id=task_id)
    return {"status": "success", "task_id": task_id}

"""
FastAPI application for Squad Control Tower.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .config import configure_logging, get_settings
from .db.audit_service import AuditService
from .db.base import get_db, init_database
from .db.services import AgentService, SettingsService, TaskService
from .routines.errors import RoutineValidationError
from .routines.routes import router as routines_router
from .schemas import AgentUpsert, TaskCreate, TimezoneUpdate
from .security import require_api_token
from .timezones import TimezoneConfigError, get_timezone_options

settings = get_settings()

# Initialize structured logging
configure_logging(settings)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting Squad Control Tower")

    try:
        await init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        raise

    yield

    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Coordination board and recurring routine scheduler for agent squads",
    version=importlib.metadata.version("squad-control-tower"),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RoutineValidationError)
async def routine_validation_error_handler(
    request: Request, exc: RoutineValidationError
) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.to_dict()})


@app.exception_handler(TimezoneConfigError)
async def timezone_error_handler(
    request: Request, exc: TimezoneConfigError
) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.to_dict()})


# Health and Info Endpoints
@app.get("/health", tags=["system"])
async def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/healthz", tags=["system"])
def healthz() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version", tags=["system"])
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": importlib.metadata.version("squad-control-tower")}


@app.get("/timezones", tags=["settings"])
async def list_timezones(group: Optional[str] = None) -> List[Dict[str, str]]:
    """Selectable IANA zones as value/label/group."""
    return [option.to_dict() for option in get_timezone_options(group)]


protected = APIRouter(dependencies=[Depends(require_api_token)])


# Settings Endpoints
@protected.get("/settings/timezone", tags=["settings"])
async def get_timezone(db: Session = Depends(get_db)) -> Dict[str, str]:
    """Get the global scheduling timezone."""
    return {"timezone": SettingsService(db).get_timezone()}


@protected.put("/settings/timezone", tags=["settings"])
async def set_timezone(
    update: TimezoneUpdate, db: Session = Depends(get_db)
) -> Dict[str, str]:
    """Set the global scheduling timezone. Unknown zones are rejected."""
    zone = SettingsService(db).set_timezone(update.timezone)
    logger.info("Timezone changed", timezone=zone)
    return {"status": "success", "timezone": zone}


# Task Endpoints
@protected.post("/tasks", status_code=201, tags=["tasks"])
async def create_task(
    task: TaskCreate, db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """Create a task in the inbox."""
    db_task = TaskService(db).create_task(task)
    logger.info("Task created", task_id=db_task.id, priority=db_task.priority)
    return {"status": "success", "task_id": db_task.id, "task": db_task.to_dict()}


@protected.get("/tasks", tags=["tasks"])
async def list_tasks(
    status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    """List tasks with optional filtering."""
    tasks = TaskService(db).get_tasks(status=status, limit=limit, offset=offset)
    return [task.to_dict() for task in tasks]


@protected.get("/tasks/{task_id}", tags=["tasks"])
async def get_task(task_id: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Get a specific task by ID."""
    task = TaskService(db).get_task(task_id)

    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    return task.to_dict()


# Activity Endpoints
@protected.get("/activities", tags=["activities"])
async def list_activities(
    type: Optional[str] = None,
    task_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    """Recent activity feed, newest first."""
    audit = AuditService(db)
    if task_id:
        entries = audit.query_by_task(task_id, limit=limit)
    else:
        entries = audit.query_recent(limit=limit, activity_type=type)
    return [entry.to_dict() for entry in entries]


# Agent Endpoints
@protected.post("/agents", tags=["agents"])
async def upsert_agent(
    agent: AgentUpsert, db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """Register an agent, or update the one with the same session key."""
    db_agent = AgentService(db).upsert(agent)
    return {"status": "success", "agent": db_agent.to_dict()}


@protected.get("/agents", tags=["agents"])
async def list_agents(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """List registered agents."""
    return [agent.to_dict() for agent in AgentService(db).list()]


app.include_router(protected)
app.include_router(routines_router)

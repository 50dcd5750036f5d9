"""
Database services for the squad board collaborators: tasks, agents and
key/value settings.
"""

from typing import Any, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..config import get_settings
from ..schemas import AgentUpsert, TaskCreate
from ..timezones import validate_timezone
from .audit_service import AuditService
from .base import utc_now
from .models import AgentModel, SettingModel, TaskModel

TIMEZONE_KEY = "timezone"


class TaskService:
    """Service for managing tasks in the database."""

    def __init__(self, db: Session, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def create_task(
        self,
        task: TaskCreate,
        created_by: Optional[str] = None,
    ) -> TaskModel:
        """Create a new task in the inbox and record a task_created activity."""
        now = utc_now()
        db_task = TaskModel(
            title=task.title,
            description=task.description,
            priority=task.priority,
            status="inbox",
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

        self.db.add(db_task)
        self.db.flush()

        self.audit.log_activity(
            "task_created",
            f'Task "{db_task.title}" created',
            task_id=db_task.id,
            agent_id=created_by,
            created_at=now,
            commit=False,
        )

        self.db.commit()
        self.db.refresh(db_task)
        return db_task

    def get_task(self, task_id: str) -> Optional[TaskModel]:
        """Get a task by ID."""
        return self.db.query(TaskModel).filter(TaskModel.id == task_id).first()

    def get_tasks(
        self,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[TaskModel]:
        """Get tasks with optional status filter, newest first."""
        query = self.db.query(TaskModel)

        if status:
            query = query.filter(TaskModel.status == status)

        return (
            query.order_by(desc(TaskModel.created_at))
            .offset(offset)
            .limit(limit)
            .all()
        )


class AgentService:
    """Service for managing agents in the database."""

    def __init__(self, db: Session, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def upsert(self, agent: AgentUpsert) -> AgentModel:
        """Create an agent or update the one with the same session key."""
        now = utc_now()
        db_agent = self.get_by_session_key(agent.session_key)

        if db_agent:
            db_agent.name = agent.name
            db_agent.role = agent.role
            db_agent.emoji = agent.emoji
            db_agent.updated_at = now
        else:
            db_agent = AgentModel(
                name=agent.name,
                role=agent.role,
                emoji=agent.emoji,
                session_key=agent.session_key,
                created_at=now,
                updated_at=now,
            )
            self.db.add(db_agent)
            self.db.flush()
            self.audit.log_activity(
                "agent_registered",
                f"{agent.name} registered ({agent.session_key})",
                agent_id=db_agent.id,
                created_at=now,
                commit=False,
            )

        self.db.commit()
        self.db.refresh(db_agent)
        return db_agent

    def get_agent(self, agent_id: str) -> Optional[AgentModel]:
        """Get an agent by ID."""
        return self.db.query(AgentModel).filter(AgentModel.id == agent_id).first()

    def get_by_session_key(self, session_key: str) -> Optional[AgentModel]:
        """Get an agent by session key."""
        return (
            self.db.query(AgentModel)
            .filter(AgentModel.session_key == session_key)
            .first()
        )

    def get_lead(self) -> Optional[AgentModel]:
        """The squad lead, credited with system-created tasks."""
        return self.get_by_session_key(get_settings().lead_session_key)

    def list(self) -> List[AgentModel]:
        return self.db.query(AgentModel).order_by(AgentModel.name).all()


class SettingsService:
    """Service for key/value application settings."""

    def __init__(self, db: Session, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def get(self, key: str) -> Optional[SettingModel]:
        return self.db.query(SettingModel).filter(SettingModel.key == key).first()

    def get_value(self, key: str, default: Any = None) -> Any:
        setting = self.get(key)
        return setting.value if setting is not None else default

    def set(self, key: str, value: Any, commit: bool = True) -> SettingModel:
        """Insert or overwrite a setting."""
        setting = self.get(key)
        if setting:
            setting.value = value
            setting.updated_at = utc_now()
        else:
            setting = SettingModel(key=key, value=value, updated_at=utc_now())
            self.db.add(setting)

        if commit:
            self.db.commit()
            self.db.refresh(setting)
        else:
            self.db.flush()
        return setting

    def get_timezone(self) -> str:
        """The global scheduling zone."""
        return self.get_value(TIMEZONE_KEY) or get_settings().default_timezone

    def set_timezone(self, zone: str) -> str:
        """Set the global scheduling zone.

        Raises:
            TimezoneConfigError: if ``zone`` is not a known IANA zone
        """
        validate_timezone(zone)
        previous = self.get_timezone()

        self.set(TIMEZONE_KEY, zone, commit=False)
        self.audit.log_activity(
            "timezone_changed",
            f"Timezone changed: {previous} -> {zone}",
            metadata={"before": previous, "after": zone},
            commit=False,
        )
        self.db.commit()
        return zone

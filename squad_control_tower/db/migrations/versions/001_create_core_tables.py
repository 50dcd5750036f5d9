"""create core tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00

Agents, tasks, routines, settings and the activity log.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

PRIORITIES = ("low", "normal", "high", "urgent")


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("role", sa.String(length=100), nullable=False),
        sa.Column("emoji", sa.String(length=16), nullable=True),
        sa.Column("session_key", sa.String(length=128), nullable=False),
        sa.Column(
            "status",
            sa.Enum("idle", "active", "blocked", name="agent_status"),
            nullable=False,
            server_default="idle",
        ),
        sa.Column("last_heartbeat", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_agents_session_key", "agents", ["session_key"], unique=True
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "inbox", "assigned", "in_progress", "review", "done",
                name="task_status",
            ),
            nullable=False,
            server_default="inbox",
        ),
        sa.Column(
            "priority",
            sa.Enum(*PRIORITIES, name="task_priority"),
            nullable=False,
            server_default="normal",
        ),
        sa.Column(
            "created_by", sa.String(length=36), sa.ForeignKey("agents.id"), nullable=True
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_created_at", "tasks", ["created_at"])

    op.create_table(
        "routines",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "priority", sa.Enum(*PRIORITIES, name="routine_priority"), nullable=True
        ),
        sa.Column("schedule", sa.JSON, nullable=False),
        sa.Column("color", sa.String(length=32), nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_triggered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_routines_enabled", "routines", ["enabled"])
    op.create_index(
        "ix_routines_enabled_created", "routines", ["enabled", "created_at"]
    )

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=100), primary_key=True),
        sa.Column("value", sa.JSON, nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "type",
            sa.Enum(
                "task_created",
                "task_created_from_routine",
                "routine_created",
                "routine_updated",
                "routine_deleted",
                "timezone_changed",
                "agent_registered",
                name="activity_type",
            ),
            nullable=False,
        ),
        sa.Column("agent_id", sa.String(length=36), nullable=True),
        sa.Column("task_id", sa.String(length=36), nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_activities_type", "activities", ["type"])
    op.create_index("ix_activities_agent_id", "activities", ["agent_id"])
    op.create_index("ix_activities_task_id", "activities", ["task_id"])
    op.create_index("ix_activities_created_at", "activities", ["created_at"])
    op.create_index(
        "ix_activities_type_created", "activities", ["type", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("settings")
    op.drop_table("routines")
    op.drop_table("tasks")
    op.drop_table("agents")

    bind = op.get_bind()
    for enum_name in (
        "activity_type",
        "routine_priority",
        "task_priority",
        "task_status",
        "agent_status",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)

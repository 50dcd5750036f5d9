"""Tests for the operator CLI."""

import pytest
from sqlalchemy.orm import sessionmaker
from typer.testing import CliRunner

from squad_control_tower.cli import _parse_days, app
from squad_control_tower.db import base as db_base
from squad_control_tower.db.models import RoutineModel, TaskModel

from conftest import make_engine

runner = CliRunner()


@pytest.fixture
def cli_db(monkeypatch):
    """Point the CLI's cached engine at a fresh in-memory database."""
    engine = make_engine()
    monkeypatch.setattr(db_base, "_engine", engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


def test_parse_days():
    assert _parse_days("1,3,5") == [1, 3, 5]
    assert _parse_days("mon, Wed,friday") == [1, 3, 5]
    assert _parse_days("sun,") == [0]


def test_init_db(cli_db):
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 0
    assert "Database initialized" in result.stdout


def test_add_and_list_routines(cli_db):
    result = runner.invoke(
        app,
        ["routines", "add", "Weekly Sync", "--days", "mon,wed,fri", "--at", "09:00"],
    )
    assert result.exit_code == 0

    routine = cli_db.query(RoutineModel).one()
    assert routine.schedule == {
        "type": "weekly",
        "days_of_week": [1, 3, 5],
        "hour": 9,
        "minute": 0,
    }

    result = runner.invoke(app, ["routines", "list"])
    assert result.exit_code == 0
    assert "Weekly Sync" in result.stdout


def test_add_invalid_routine(cli_db):
    result = runner.invoke(
        app, ["routines", "add", "Late Night", "--days", "1", "--at", "25:00"]
    )

    assert result.exit_code == 1
    assert cli_db.query(RoutineModel).count() == 0


def test_disable_and_trigger(cli_db):
    runner.invoke(app, ["routines", "add", "Standup", "--days", "1", "--at", "10:00"])
    routine_id = cli_db.query(RoutineModel).one().id

    assert runner.invoke(app, ["routines", "disable", routine_id]).exit_code == 0
    cli_db.expire_all()
    assert cli_db.get(RoutineModel, routine_id).enabled is False

    result = runner.invoke(app, ["routines", "trigger", routine_id])
    assert result.exit_code == 0
    assert cli_db.query(TaskModel).count() == 1


def test_trigger_missing_routine(cli_db):
    result = runner.invoke(app, ["routines", "trigger", "missing"])

    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_due_command(cli_db):
    result = runner.invoke(app, ["routines", "due"])

    assert result.exit_code == 0
    assert "No routines due" in result.stdout


def test_timezone_set_and_show(cli_db):
    assert runner.invoke(app, ["timezone", "set", "Europe/Berlin"]).exit_code == 0

    result = runner.invoke(app, ["timezone", "show"])
    assert "Europe/Berlin" in result.stdout


def test_timezone_set_invalid(cli_db):
    result = runner.invoke(app, ["timezone", "set", "Atlantis/Capital"])

    assert result.exit_code == 1
    assert "Unknown timezone" in result.stdout

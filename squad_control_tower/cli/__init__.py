"""
Command Line Interface for Squad Control Tower.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db.base import create_tables, get_session_local
from ..db.services import SettingsService
from ..routines.errors import RoutineError
from ..routines.services import RoutineService
from ..timezones import TimezoneConfigError, get_timezone_options, localize

app = typer.Typer(help="Squad Control Tower - agent squad board and routine scheduler")
routines_app = typer.Typer(help="Manage recurring routines")
timezone_app = typer.Typer(help="Show or change the scheduling timezone")
app.add_typer(routines_app, name="routines")
app.add_typer(timezone_app, name="timezone")

console = Console()

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@contextmanager
def _session() -> Iterator[Session]:
    create_tables()
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _parse_days(days: str) -> List[int]:
    """Parse "1,3,5" or "mon,wed,fri" into weekday numbers (0=Sunday)."""
    parsed = []
    for token in days.split(","):
        token = token.strip().lower()
        if not token:
            continue
        if token.isdigit():
            parsed.append(int(token))
            continue
        names = [d.lower() for d in DAY_NAMES]
        if token[:3] not in names:
            raise typer.BadParameter(f"Unknown day '{token}'")
        parsed.append(names.index(token[:3]))
    return parsed


def _format_schedule(schedule: dict) -> str:
    days = ", ".join(DAY_NAMES[d] for d in schedule["days_of_week"])
    return f"{days} @ {schedule['hour']:02d}:{schedule['minute']:02d}"


@app.command()
def serve(
    port: int = typer.Option(None, help="Port to run the API server on"),
    host: str = typer.Option(None, help="Host to bind the server to"),
    dev: bool = typer.Option(False, help="Run in development mode with reload"),
):
    """Start the API server."""
    settings = get_settings()
    rprint(Panel.fit("Starting Squad Control Tower", style="bold blue"))
    uvicorn.run(
        "squad_control_tower.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=dev,
    )


@app.command("init-db")
def init_db():
    """Create database tables."""
    create_tables()
    console.print("Database initialized")


@routines_app.command("list")
def list_routines(
    enabled_only: bool = typer.Option(False, "--enabled-only", help="Hide disabled routines"),
):
    """List routines."""
    with _session() as db:
        routines = RoutineService(db).list(enabled_only=enabled_only)

        table = Table(title="Routines", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title")
        table.add_column("Schedule")
        table.add_column("Priority")
        table.add_column("Enabled")
        table.add_column("Last triggered")

        for routine in routines:
            data = routine.to_dict()
            table.add_row(
                data["id"],
                data["title"],
                _format_schedule(data["schedule"]),
                data["priority"] or "normal",
                "yes" if data["enabled"] else "no",
                data["last_triggered_at"] or "-",
            )

        console.print(table)


@routines_app.command("add")
def add_routine(
    title: str = typer.Argument(..., help="Task title"),
    days: str = typer.Option(..., help="Days of week, e.g. '1,3,5' or 'mon,wed,fri'"),
    at: str = typer.Option(..., help="Local time HH:MM"),
    description: Optional[str] = typer.Option(None, help="Task description"),
    priority: Optional[str] = typer.Option(None, help="low/normal/high/urgent"),
    color: str = typer.Option("emerald", help="Display color"),
):
    """Create a routine."""
    hour, _, minute = at.partition(":")
    if not (hour.isdigit() and minute.isdigit()):
        raise typer.BadParameter("Expected HH:MM", param_hint="--at")

    payload = {
        "title": title,
        "description": description,
        "priority": priority,
        "schedule": {
            "type": "weekly",
            "days_of_week": _parse_days(days),
            "hour": int(hour),
            "minute": int(minute),
        },
        "color": color,
    }

    with _session() as db:
        try:
            routine = RoutineService(db).create(payload)
        except RoutineError as e:
            _fail(e.message)
        console.print(f"Created routine [cyan]{routine.id}[/cyan]: {routine.title}")


@routines_app.command("update")
def update_routine(
    routine_id: str = typer.Argument(...),
    title: Optional[str] = typer.Option(None),
    days: Optional[str] = typer.Option(None, help="Days of week"),
    at: Optional[str] = typer.Option(None, help="Local time HH:MM"),
    description: Optional[str] = typer.Option(None),
    priority: Optional[str] = typer.Option(None),
    color: Optional[str] = typer.Option(None),
):
    """Update a routine."""
    updates = {
        key: value
        for key, value in {
            "title": title,
            "description": description,
            "priority": priority,
            "color": color,
        }.items()
        if value is not None
    }

    with _session() as db:
        service = RoutineService(db)
        routine = service.get(routine_id)
        if not routine:
            _fail(f"Routine {routine_id} not found")

        if days is not None or at is not None:
            schedule = dict(routine.schedule)
            if days is not None:
                schedule["days_of_week"] = _parse_days(days)
            if at is not None:
                hour, _, minute = at.partition(":")
                if not (hour.isdigit() and minute.isdigit()):
                    raise typer.BadParameter("Expected HH:MM", param_hint="--at")
                schedule["hour"], schedule["minute"] = int(hour), int(minute)
            updates["schedule"] = schedule

        try:
            service.update(routine_id, updates)
        except RoutineError as e:
            _fail(e.message)
        console.print(f"Updated routine [cyan]{routine_id}[/cyan]")


def _set_enabled(routine_id: str, enabled: bool) -> None:
    with _session() as db:
        try:
            RoutineService(db).update(routine_id, {"enabled": enabled})
        except RoutineError as e:
            _fail(e.message)
    console.print(f"Routine {routine_id} {'enabled' if enabled else 'disabled'}")


@routines_app.command("enable")
def enable_routine(routine_id: str = typer.Argument(...)):
    """Enable a routine."""
    _set_enabled(routine_id, True)


@routines_app.command("disable")
def disable_routine(routine_id: str = typer.Argument(...)):
    """Disable a routine."""
    _set_enabled(routine_id, False)


@routines_app.command("remove")
def remove_routine(routine_id: str = typer.Argument(...)):
    """Delete a routine."""
    with _session() as db:
        try:
            RoutineService(db).remove(routine_id)
        except RoutineError as e:
            _fail(e.message)
    console.print(f"Deleted routine {routine_id}")


@routines_app.command("trigger")
def trigger_routine(routine_id: str = typer.Argument(...)):
    """Create a task from a routine right now."""
    with _session() as db:
        try:
            task_id = RoutineService(db).trigger(routine_id)
        except RoutineError as e:
            _fail(e.message)
    console.print(f"Triggered routine {routine_id} -> task [cyan]{task_id}[/cyan]")


@routines_app.command("due")
def due_routines():
    """Show routines that are due right now (read-only)."""
    with _session() as db:
        zone = SettingsService(db).get_timezone()
        now = datetime.now(timezone.utc)
        local = localize(now, zone)
        due = RoutineService(db).get_due_routines(now, local)

    console.print(
        f"{DAY_NAMES[local.day_of_week]} {local.hour:02d}:{local.minute:02d} ({zone})"
    )
    if not due:
        console.print("No routines due")
        return
    for routine in due:
        console.print(
            f"  [cyan]{routine.routine_id}[/cyan] {routine.title} "
            f"(cycle start {routine.cycle_start.isoformat()})"
        )


@timezone_app.command("show")
def show_timezone():
    """Show the scheduling timezone."""
    with _session() as db:
        console.print(SettingsService(db).get_timezone())


@timezone_app.command("set")
def set_timezone(zone: str = typer.Argument(..., help="IANA zone, e.g. Europe/Berlin")):
    """Change the scheduling timezone."""
    with _session() as db:
        try:
            SettingsService(db).set_timezone(zone)
        except TimezoneConfigError as e:
            _fail(e.message)
    console.print(f"Timezone set to {zone}")


@app.command("timezones")
def list_timezones(group: Optional[str] = typer.Option(None, help="Filter by group")):
    """List selectable timezones."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Group")
    table.add_column("Label")
    table.add_column("Zone", style="cyan")
    for option in get_timezone_options(group):
        table.add_row(option.group, option.label, option.value)
    console.print(table)


if __name__ == "__main__":
    app()

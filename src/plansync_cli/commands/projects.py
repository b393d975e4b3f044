"""Project library commands."""

from pathlib import Path

import typer

from plansync_cli.app import app_session
from plansync_cli.models import ProjectPayload, ValidationError, error_for
from plansync_cli.services.project_file_service import (
    read_project_file,
    write_project_file,
)
from plansync_cli.services.project_sync_service import parse_target_date
from plansync_cli.utils.typer_helpers import SuggestingGroup
from plansync_cli.utils.ui.console import get_console
from plansync_cli.utils.ui.formatters import (
    format_error,
    format_output,
    format_projects_table,
    format_success,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Project library commands")
console = get_console()


def _payload_view(payload: ProjectPayload) -> dict:
    view = payload.model_dump(mode="json")
    if view.get("id") is None:
        view.pop("id", None)
    return view


@app.command("list")
@command_wrapper
async def list_projects(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """List your projects and the ones shared with you."""
    async with app_session(follow_session=True) as services:
        sync = services.projects
        if sync.last_error:
            raise error_for(sync.last_error_kind, sync.last_error)

        projects = [p.model_dump(mode="json") for p in sync.projects]
        if output == "table":
            format_projects_table(projects, services.identity.identity.id)
        else:
            format_output(projects, output)


@app.command("show")
@command_wrapper
async def show_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show a project's goal, target date, tasks and schedule."""
    async with app_session() as services:
        payload = (await services.projects.load_one(project_id)).unwrap()
    format_output(_payload_view(payload), output)


@app.command("save")
@command_wrapper
async def save_project(
    goal: str | None = typer.Option(None, "--goal", help="Project goal"),
    target_date: str | None = typer.Option(
        None, "--target-date", help="Target date (YYYY-MM-DD)"
    ),
    from_file: Path | None = typer.Option(
        None, "--from-file", help="Take goal, date, tasks and schedule from a project file"
    ),
    project_id: str | None = typer.Option(
        None, "--id", help="Overwrite this project instead of creating one"
    ),
) -> None:
    """Save a project plan to the cloud.

    The whole plan is written. When overwriting with --id and no file, the
    current tasks and schedule are kept and only the given fields change.
    """
    base: ProjectPayload | None = None
    if from_file is not None:
        base = read_project_file(from_file)

    async with app_session() as services:
        sync = services.projects
        if base is None and project_id is not None:
            base = (await sync.load_one(project_id)).unwrap()

        final_goal = goal if goal is not None else (base.goal if base else None)
        if final_goal is None:
            raise ValidationError("--goal is required when creating a project")
        if target_date is not None:
            final_date = parse_target_date(target_date)
        elif base is not None:
            final_date = base.target_date
        else:
            raise ValidationError("--target-date is required when creating a project")

        project = (
            await sync.save(
                final_goal,
                final_date,
                base.tasks if base else [],
                base.schedule_data if base else None,
                existing_id=project_id,
            )
        ).unwrap()

    verb = "updated" if project_id else "saved"
    format_success(f"Project {verb}: {project.id}")


@app.command("delete")
@command_wrapper
async def delete_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a project you own."""
    if not yes and not typer.confirm(
        f"Are you sure you want to delete project {project_id}?"
    ):
        format_error("Cancelled")
        raise typer.Exit(0)

    async with app_session() as services:
        (await services.projects.delete_one(project_id)).unwrap()
    format_success(f"Project deleted: {project_id}")


@app.command("export")
@command_wrapper
async def export_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    file: Path = typer.Option(
        Path("."), "--file", "-f", help="Output file, or a directory for the default name"
    ),
) -> None:
    """Export a project to a local file."""
    async with app_session() as services:
        payload = (await services.projects.load_one(project_id)).unwrap()
    written = write_project_file(file, payload)
    format_success(f"Project exported to: {written}")


@app.command("import")
@command_wrapper
async def import_project(
    file: Path = typer.Argument(..., help="Project file to import"),
    save: bool = typer.Option(False, "--save", help="Also save it as a new cloud project"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Read a local project file, optionally saving it to the cloud."""
    payload = read_project_file(file)

    if not save:
        format_output(_payload_view(payload), output)
        return

    async with app_session() as services:
        project = (
            await services.projects.save(
                payload.goal,
                payload.target_date,
                payload.tasks,
                payload.schedule_data,
            )
        ).unwrap()
    format_success(f"Project imported: {project.id}")

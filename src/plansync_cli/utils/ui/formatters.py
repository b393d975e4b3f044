"""Output formatters for different formats."""

import json
from datetime import UTC, date, datetime
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from plansync_cli.utils.ui.console import get_console

console = get_console()


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False))
    else:
        format_table(data)


def _plain(data: Any) -> Any:
    """Convert dates and datetimes to ISO strings so YAML stays portable."""
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_plain(value) for value in data]
    if isinstance(data, (date, datetime)):
        return data.isoformat()
    return data


def format_table(data: Any) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No data to display[/yellow]")
        return

    if isinstance(data, dict) and "projects" in data:
        format_projects_table(data["projects"], data.get("me"))
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_projects_table(projects: list[dict], me: str | None = None) -> None:
    """Format the project library as a table, most recently updated first."""
    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    header = Text()
    header.append("📁 Projects ", style="bold cyan")
    header.append(f"({len(projects)})", style="dim")
    console.print(header)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Target")
    table.add_column("Tasks", justify="right")
    table.add_column("Updated")
    table.add_column("Access")

    for project in projects:
        owned = me is not None and project.get("created_by") == me
        table.add_row(
            str(project.get("id", "-")),
            str(project.get("title", "Untitled")),
            format_target_date(project.get("target_date")),
            str(len(project.get("tasks") or [])),
            format_relative_time(project.get("updated_at")),
            "owner" if owned else "👥 shared",
        )

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        formatted_key = key.replace("_", " ").title()
        if isinstance(value, bool):
            formatted_value = "✓" if value else "✗"
        elif isinstance(value, list):
            formatted_value = f"{len(value)} item(s)"
        elif isinstance(value, date) and not isinstance(value, datetime):
            formatted_value = format_target_date(value)
        elif value is None:
            formatted_value = "-"
        else:
            formatted_value = str(value)
        table.add_row(formatted_key, formatted_value)

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def format_target_date(value: str | date | None) -> str:
    """Format a date-only value, read as UTC midnight, e.g. '01 Mar 2025'."""
    if not value:
        return "-"
    try:
        if isinstance(value, date):
            day = value if not isinstance(value, datetime) else value.date()
        else:
            day = date.fromisoformat(value)
    except ValueError:
        return str(value)
    midnight = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return midnight.strftime("%d %b %Y")


def format_relative_time(date_str: str | datetime | None) -> str:
    """Format timestamp as relative time."""
    if not date_str:
        return ""

    try:
        if isinstance(date_str, datetime):
            moment = date_str
        else:
            moment = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return ""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    seconds = (datetime.now(UTC) - moment).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = int(seconds / 60)
        return f"{minutes}m ago" if minutes > 1 else "1m ago"
    if seconds < 86400:
        hours = int(seconds / 3600)
        return f"{hours}h ago" if hours > 1 else "1h ago"
    days = int(seconds / 86400)
    return f"{days}d ago" if days > 1 else "1d ago"

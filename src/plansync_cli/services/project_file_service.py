"""Local project files - export and import of the portable payload.

The file is UTF-8 JSON holding exactly ``projectGoal``, ``targetDate``,
``tasks`` and ``ganttData``. Those names match files written by earlier
versions and must not change. Unknown extra fields are ignored on import.
"""

from __future__ import annotations

import json
import re
from datetime import date
from pathlib import Path
from typing import Any

from plansync_cli.models import (
    Project,
    ProjectPayload,
    ValidationError,
    truncate_utf16,
    utf16_length,
)

FILENAME_MAX_LENGTH = 50
DEFAULT_FILENAME = "project.json"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def export_project(project: Project | ProjectPayload) -> bytes:
    """Serialize a project's portable payload to file bytes."""
    content = {
        "projectGoal": project.goal,
        "targetDate": project.target_date.isoformat(),
        "tasks": project.tasks,
        "ganttData": project.schedule_data,
    }
    return json.dumps(content, indent=2, ensure_ascii=False).encode("utf-8")


def import_project(data: bytes | str) -> ProjectPayload:
    """Parse file bytes into a portable payload.

    Raises:
        ValidationError: If the content is not a project file
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError("Project file is not valid UTF-8") from e
    else:
        text = data

    try:
        content = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Project file is not valid JSON: {e.msg}") from e

    if not isinstance(content, dict):
        raise ValidationError("Project file must contain a JSON object")

    goal = content.get("projectGoal")
    if not isinstance(goal, str) or not goal.strip():
        raise ValidationError("Project file is missing 'projectGoal'")

    target_date = _parse_date(content.get("targetDate"))

    if "tasks" not in content or not isinstance(content["tasks"], list):
        raise ValidationError("Project file is missing a 'tasks' list")

    # Opaque schedule, carried as-is; files without one import with none
    return ProjectPayload(
        goal=goal,
        target_date=target_date,
        tasks=content["tasks"],
        schedule_data=content.get("ganttData"),
    )


def _parse_date(value: Any) -> date:
    if not isinstance(value, str):
        raise ValidationError("Project file is missing 'targetDate'")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid 'targetDate': {value!r}") from e


def suggested_filename(goal_or_title: str) -> str:
    """File name for an export: the goal's first 50 UTF-16 code units, made safe.

    Each unsafe code unit becomes one ``_``, so an emoji leaves two.
    """
    stem = _UNSAFE_FILENAME_CHARS.sub(
        lambda match: "_" * utf16_length(match.group()),
        truncate_utf16(goal_or_title, FILENAME_MAX_LENGTH),
    )
    if not stem.strip("_"):
        return DEFAULT_FILENAME
    return f"{stem}.json"


def write_project_file(path: str | Path, project: Project | ProjectPayload) -> Path:
    """Export a project to ``path``. A directory gets the suggested file name."""
    target = Path(path)
    if target.is_dir():
        target = target / suggested_filename(project.goal)
    target.write_bytes(export_project(project))
    return target


def read_project_file(path: str | Path) -> ProjectPayload:
    """Import a project file from disk."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ValidationError(f"Cannot read project file {path}: {e.strerror}") from e
    return import_project(data)

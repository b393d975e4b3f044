"""Project plan data models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

TITLE_MAX_LENGTH = 100


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units, as stored by the web app."""
    return len(text.encode("utf-16-le")) // 2


def truncate_utf16(text: str, limit: int) -> str:
    """Keep at most ``limit`` UTF-16 code units, never splitting a surrogate pair."""
    return text.encode("utf-16-le")[: limit * 2].decode("utf-16-le", errors="ignore")


def derive_title(goal: str) -> str:
    """Return the display title for a goal: its first 100 UTF-16 code units."""
    return truncate_utf16(goal, TITLE_MAX_LENGTH)


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


class Identity(BaseModel):
    """A signed-in user as reported by the identity provider.

    Attributes:
        id: Stable user identifier, recorded as ``created_by`` on projects
        email: Account email address
        display_name: Optional name shown in menus
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: EmailStr
    display_name: str | None = None


class AuthSession(BaseModel):
    """Tokens returned by a successful sign-in."""

    access_token: str
    refresh_token: str | None = None
    identity: Identity


class ProjectPayload(BaseModel):
    """Portable, store-agnostic subset of a project.

    Attributes:
        goal: Free-text objective
        target_date: Calendar date the plan targets
        tasks: Opaque task list, transported verbatim
        schedule_data: Opaque derived schedule, or None
        id: Store identifier when loaded from the store, never set by file import
    """

    goal: str
    target_date: date
    tasks: list[Any] = Field(default_factory=list)
    schedule_data: Any | None = None
    id: str | None = None

    def portable(self) -> ProjectPayload:
        """Return a copy without the store identifier."""
        return self.model_copy(update={"id": None})


class Project(BaseModel):
    """A persisted project plan as held in the project cache.

    Attributes:
        id: Store-assigned identifier, stable once assigned
        title: ``goal`` truncated to 100 UTF-16 code units
        goal: Free-text objective
        target_date: Calendar date the plan targets
        tasks: Opaque task list
        schedule_data: Opaque derived schedule (``ganttData`` on the wire)
        created_by: Owner identity id, immutable after creation
        collaborators: Identities with read access, duplicates dropped
        created_at: Creation timestamp
        updated_at: Last successful mutation timestamp
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    goal: str
    target_date: date
    tasks: list[Any] = Field(default_factory=list)
    schedule_data: Any | None = None
    created_by: str
    collaborators: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("collaborators", mode="before")
    @classmethod
    def _unique_collaborators(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, (list, tuple, set)):
            return _dedupe([str(item) for item in v])
        return v

    def portable(self) -> ProjectPayload:
        """Return the portable payload of this project (no identifiers)."""
        return ProjectPayload(
            goal=self.goal,
            target_date=self.target_date,
            tasks=self.tasks,
            schedule_data=self.schedule_data,
        )


class ProjectData(BaseModel):
    """Opaque ``data`` column of a stored project."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tasks: list[Any] | None = None
    gantt_data: Any | None = Field(default=None, alias="ganttData")


class ProjectRecord(BaseModel):
    """Project row as stored by the remote record store.

    ``tasks`` and ``schedule_data`` live nested under ``data`` on the store
    side. Rows may come back with ``data`` or ``collaborators`` null.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str
    goal: str
    target_date: date
    data: ProjectData | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    collaborators: list[str] | None = None

    @classmethod
    def build(
        cls,
        *,
        goal: str,
        target_date: date,
        tasks: list[Any],
        schedule_data: Any | None,
        updated_at: datetime,
    ) -> ProjectRecord:
        """Build the mutable part of a record; ``title`` derives from ``goal``."""
        return cls(
            title=derive_title(goal),
            goal=goal,
            target_date=target_date,
            data=ProjectData(tasks=tasks, gantt_data=schedule_data),
            updated_at=updated_at,
        )

    def insert_body(self, *, created_by: str, created_at: datetime) -> dict[str, Any]:
        """JSON body for creating this record."""
        body = self.update_body()
        body["created_by"] = created_by
        body["created_at"] = created_at.isoformat()
        body["collaborators"] = []
        return body

    def update_body(self) -> dict[str, Any]:
        """JSON body for updating this record. Never includes ownership."""
        data = self.data or ProjectData()
        body: dict[str, Any] = {
            "title": self.title,
            "goal": self.goal,
            "target_date": self.target_date.isoformat(),
            "data": {"tasks": data.tasks or [], "ganttData": data.gantt_data},
        }
        if self.updated_at is not None:
            body["updated_at"] = self.updated_at.isoformat()
        return body

    def to_project(self) -> Project:
        """Convert a confirmed store row into a cache entry."""
        if self.id is None or self.created_by is None:
            raise ValueError("Stored project row is missing id or created_by")
        data = self.data or ProjectData()
        created_at = self.created_at or self.updated_at
        updated_at = self.updated_at or self.created_at
        if created_at is None or updated_at is None:
            raise ValueError(f"Stored project {self.id} has no timestamps")
        return Project(
            id=self.id,
            title=self.title,
            goal=self.goal,
            target_date=self.target_date,
            tasks=data.tasks or [],
            schedule_data=data.gantt_data,
            created_by=self.created_by,
            collaborators=self.collaborators or [],
            created_at=created_at,
            updated_at=updated_at,
        )


class ProjectQuery(BaseModel):
    """Access predicate handed to the project store.

    Attributes:
        readable_by: Match rows owned by or shared with this identity
        owned_by: Match rows owned by this identity only
        project_id: Restrict to a single project
        newest_first: Order by ``updated_at`` descending
    """

    model_config = ConfigDict(frozen=True)

    readable_by: str | None = None
    owned_by: str | None = None
    project_id: str | None = None
    newest_first: bool = True

"""Project sync service - in-memory project cache mirrored from the store.

The service owns the list of projects the current identity may read. Every
mutation goes to the store first; the cache only changes once the store has
confirmed the new state, so a failed call never leaves it half-updated.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

from plansync_cli.models import (
    AccessDeniedError,
    ErrorKind,
    Identity,
    NotAuthenticatedError,
    NotFoundError,
    PlanSyncError,
    Project,
    ProjectPayload,
    ProjectRecord,
    Result,
    ValidationError,
)
from plansync_cli.repositories import ProjectStore
from plansync_cli.services.access_policy import (
    can_delete,
    can_read,
    can_write,
    read_query,
    write_query,
)
from plansync_cli.services.identity_service import IdentityService
from plansync_cli.utils.logger import get_logger


def parse_target_date(value: date | str) -> date:
    """Accept a date or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Invalid target date: {value!r} (expected YYYY-MM-DD)")


class ProjectSyncService:
    """Cache and sync engine for the current identity's projects.

    State:
        projects: Snapshot of the cache, most recently updated first
        loading: True while any operation is waiting on the store
        last_error: Message of the last failure, kept until the next operation
    """

    def __init__(
        self,
        store: ProjectStore,
        identity_service: IdentityService,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the sync service.

        Args:
            store: ProjectStore implementation, the authoritative copy
            identity_service: Source of the acting identity
            clock: Returns the current UTC time; defaults to ``datetime.now(UTC)``
        """
        self.store = store
        self.identity_service = identity_service
        self._clock = clock or (lambda: datetime.now(UTC))
        self._projects: tuple[Project, ...] = ()
        self._in_flight = 0
        self._fetch_generation = 0
        self._unsubscribe: Callable[[], None] | None = None
        self.last_error: str | None = None
        self.last_error_kind: ErrorKind | None = None
        self.logger = get_logger("sync")

    @property
    def projects(self) -> tuple[Project, ...]:
        """Immutable snapshot of the cached projects."""
        return self._projects

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def get(self, project_id: str) -> Project | None:
        """Return the cached project with this id, if any."""
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    # Session wiring

    def attach(self) -> None:
        """Follow identity changes: refresh on sign-in, clear on sign-out."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity_service.subscribe(self.on_identity_changed)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def on_identity_changed(self, identity: Identity | None) -> Result[list[Project]]:
        """React to a session change."""
        if identity is None:
            self.clear()
            return Result.success([])
        return await self.fetch_all()

    def clear(self) -> None:
        """Empty the cache without a network call.

        Also invalidates any fetch still in flight so it cannot repopulate
        the cache afterwards.
        """
        self._fetch_generation += 1
        self._projects = ()
        self.last_error = None
        self.last_error_kind = None

    # Internal bookkeeping

    def _begin(self) -> None:
        self._in_flight += 1
        self.last_error = None
        self.last_error_kind = None

    def _finish(self) -> None:
        self._in_flight -= 1

    def _fail(self, error: PlanSyncError, operation: str) -> Result:
        self.last_error = error.message
        self.last_error_kind = error.kind
        self.logger.warning("%s failed (%s): %s", operation, error.kind.value, error.message)
        return Result.failure(error)

    def _require_identity(self) -> Identity:
        identity = self.identity_service.identity
        if identity is None:
            raise NotAuthenticatedError("Sign in to manage cloud projects")
        return identity

    def _build_record(
        self,
        goal: str,
        target_date: date | str,
        tasks: list[Any] | None,
        schedule_data: Any | None,
    ) -> ProjectRecord:
        if not isinstance(goal, str) or not goal.strip():
            raise ValidationError("Project goal is required")
        if tasks is None:
            tasks = []
        if not isinstance(tasks, list):
            raise ValidationError("Tasks must be a list")
        return ProjectRecord.build(
            goal=goal,
            target_date=parse_target_date(target_date),
            tasks=tasks,
            schedule_data=schedule_data,
            updated_at=self._clock(),
        )

    def _put(self, project: Project) -> None:
        """Replace the cached entry in place, or prepend it when not cached."""
        if self.get(project.id) is None:
            self._projects = (project, *self._projects)
        else:
            self._projects = tuple(
                project if cached.id == project.id else cached for cached in self._projects
            )

    # Operations

    async def fetch_all(self) -> Result[list[Project]]:
        """Replace the cache with every project the identity may read.

        Only the response to the most recently issued fetch may replace the
        cache; older responses arriving late are discarded.
        """
        self._fetch_generation += 1
        generation = self._fetch_generation

        identity = self.identity_service.identity
        if identity is None:
            self._projects = ()
            self.last_error = None
            self.last_error_kind = None
            return Result.success([])

        self._begin()
        try:
            projects = await self.store.select(read_query(identity.id))
        except PlanSyncError as e:
            if generation != self._fetch_generation:
                self.logger.info("ignoring failure of superseded fetch %d", generation)
                return Result.failure(e)
            return self._fail(e, "fetch_all")
        finally:
            self._finish()

        visible = [project for project in projects if can_read(project, identity.id)]
        if len(visible) != len(projects):
            self.logger.warning(
                "store returned %d unreadable project(s), dropped",
                len(projects) - len(visible),
            )

        if generation != self._fetch_generation:
            self.logger.info(
                "discarding stale fetch %d (latest is %d)", generation, self._fetch_generation
            )
            return Result.success(visible)

        self._projects = tuple(visible)
        self.logger.debug("cache refreshed with %d project(s)", len(visible))
        return Result.success(visible)

    async def refetch(self) -> Result[list[Project]]:
        """Alias of :meth:`fetch_all`."""
        return await self.fetch_all()

    async def save(
        self,
        goal: str,
        target_date: date | str,
        tasks: list[Any] | None = None,
        schedule_data: Any | None = None,
        existing_id: str | None = None,
    ) -> Result[Project]:
        """Create a project, or overwrite one the identity owns.

        Args:
            goal: Project objective; the title is derived from it
            target_date: Date or ``YYYY-MM-DD`` string
            tasks: Opaque task list, stored verbatim
            schedule_data: Opaque schedule, stored verbatim
            existing_id: Id of the project to overwrite; None creates a new one

        Returns:
            Result carrying the persisted Project
        """
        self._begin()
        try:
            identity = self._require_identity()
            record = self._build_record(goal, target_date, tasks, schedule_data)

            if existing_id is None:
                project = await self.store.insert(record, created_by=identity.id)
                self._projects = (
                    project,
                    *(cached for cached in self._projects if cached.id != project.id),
                )
                self.logger.info("created project %s", project.id)
                return Result.success(project)

            cached = self.get(existing_id)
            if cached is not None and not can_write(cached, identity.id):
                raise AccessDeniedError("Only the owner can update this project")

            updated = await self.store.update(write_query(identity.id, existing_id), record)
            if not updated:
                raise AccessDeniedError(
                    f"Project {existing_id} does not exist or you are not its owner"
                )
            project = updated[0]
            self._put(project)
            self.logger.info("updated project %s", project.id)
            return Result.success(project)
        except PlanSyncError as e:
            return self._fail(e, "save")
        finally:
            self._finish()

    async def delete_one(self, project_id: str) -> Result[None]:
        """Delete a project the identity owns."""
        self._begin()
        try:
            identity = self._require_identity()

            cached = self.get(project_id)
            if cached is not None and not can_delete(cached, identity.id):
                raise AccessDeniedError("Only the owner can delete this project")

            deleted = await self.store.delete(write_query(identity.id, project_id))
            if not deleted:
                raise AccessDeniedError(
                    f"Project {project_id} does not exist or you are not its owner"
                )

            self._projects = tuple(p for p in self._projects if p.id != project_id)
            self.logger.info("deleted project %s", project_id)
            return Result.success(None)
        except PlanSyncError as e:
            return self._fail(e, "delete_one")
        finally:
            self._finish()

    async def load_one(self, project_id: str) -> Result[ProjectPayload]:
        """Fetch one readable project's payload without touching the cache.

        A project that does not exist and one the identity may not read fail
        identically.
        """
        self._begin()
        try:
            identity = self._require_identity()
            not_found = NotFoundError(f"Project {project_id} not found")
            try:
                project = await self.store.select_one(read_query(identity.id, project_id))
            except (NotFoundError, AccessDeniedError) as e:
                raise not_found from e
            if not can_read(project, identity.id):
                raise not_found

            payload = project.portable().model_copy(update={"id": project.id})
            return Result.success(payload)
        except PlanSyncError as e:
            return self._fail(e, "load_one")
        finally:
            self._finish()

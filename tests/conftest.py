"""Shared test fixtures and configuration.

Provides in-memory stand-ins for the record store and the identity provider,
and isolates tests from the real config and log directories.
"""

from __future__ import annotations

import itertools
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from plansync_cli.models import (
    AuthSession,
    Identity,
    NotAuthenticatedError,
    NotFoundError,
    PlanSyncError,
    Project,
    ProjectQuery,
    ProjectRecord,
)
from plansync_cli.repositories import IdentityProvider, ProjectStore
from plansync_cli.services import access_policy

ALICE = Identity(id="alice-id", email="alice@example.com", display_name="Alice")
BOB = Identity(id="bob-id", email="bob@example.com", display_name="Bob")
CAROL = Identity(id="carol-id", email="carol@example.com")

PASSWORD = "secret-pass"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class InMemoryProjectStore(ProjectStore):
    """Project store evaluating queries with the access policy.

    Set ``fail_with`` to make every call raise that error.
    """

    def __init__(self):
        self.rows: dict[str, Project] = {}
        self.calls: list[tuple[str, ProjectQuery | None]] = []
        self.fail_with: PlanSyncError | None = None
        self._ids = itertools.count(1)

    def seed(self, project: Project) -> Project:
        self.rows[project.id] = project
        return project

    def _check(self, name: str, query: ProjectQuery | None) -> None:
        self.calls.append((name, query))
        if self.fail_with is not None:
            raise self.fail_with

    def _matching(self, query: ProjectQuery) -> list[Project]:
        found = [p for p in self.rows.values() if access_policy.matches(p, query)]
        if query.newest_first:
            found.sort(key=lambda p: p.updated_at, reverse=True)
        return found

    async def select(self, query):
        self._check("select", query)
        return self._matching(query)

    async def select_one(self, query):
        self._check("select_one", query)
        found = self._matching(query)
        if not found:
            raise NotFoundError()
        return found[0]

    async def insert(self, record, *, created_by):
        self._check("insert", None)
        body = record.insert_body(created_by=created_by, created_at=record.updated_at)
        body["id"] = f"project-{next(self._ids)}"
        project = ProjectRecord.model_validate(body).to_project()
        self.rows[project.id] = project
        return project

    async def update(self, query, record):
        self._check("update", query)
        updated = []
        for project in self._matching(query):
            new = project.model_copy(
                update={
                    "title": record.title,
                    "goal": record.goal,
                    "target_date": record.target_date,
                    "tasks": record.data.tasks,
                    "schedule_data": record.data.gantt_data,
                    "updated_at": record.updated_at,
                }
            )
            self.rows[new.id] = new
            updated.append(new)
        return updated

    async def delete(self, query):
        self._check("delete", query)
        deleted = self._matching(query)
        for project in deleted:
            del self.rows[project.id]
        return deleted


class FakeIdentityProvider(IdentityProvider):
    """Identity provider keeping accounts and tokens in memory."""

    def __init__(self):
        self.accounts: dict[str, tuple[str, Identity]] = {}
        self.tokens: dict[str, Identity] = {}
        self.refresh_tokens: dict[str, Identity] = {}
        self.require_confirmation = False
        self.signed_out: list[str] = []
        self.reset_requests: list[str] = []
        self.fail_with: PlanSyncError | None = None
        self._serial = itertools.count(1)

    def add_account(self, identity: Identity, password: str = PASSWORD) -> None:
        self.accounts[identity.email] = (password, identity)

    def _session(self, identity: Identity) -> AuthSession:
        n = next(self._serial)
        access, refresh = f"token-{identity.id}-{n}", f"refresh-{identity.id}-{n}"
        self.tokens[access] = identity
        self.refresh_tokens[refresh] = identity
        return AuthSession(access_token=access, refresh_token=refresh, identity=identity)

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def sign_in(self, email, password):
        self._check()
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise NotAuthenticatedError("Invalid login credentials")
        return self._session(account[1])

    async def sign_up(self, email, password, display_name):
        self._check()
        identity = Identity(
            id=f"user-{next(self._serial)}", email=email, display_name=display_name
        )
        self.add_account(identity, password)
        if self.require_confirmation:
            return None
        return self._session(identity)

    async def sign_out(self, access_token):
        self.signed_out.append(access_token)
        self._check()
        self.tokens.pop(access_token, None)

    async def refresh_session(self, refresh_token):
        self._check()
        identity = self.refresh_tokens.pop(refresh_token, None)
        if identity is None:
            raise NotAuthenticatedError("Invalid refresh token")
        return self._session(identity)

    async def reset_password(self, email):
        self._check()
        self.reset_requests.append(email)

    async def get_identity(self, access_token):
        self._check()
        identity = self.tokens.get(access_token)
        if identity is None:
            raise NotAuthenticatedError("JWT expired")
        return identity


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep the application log file inside the test's tmp directory."""
    from plansync_cli.utils import logger as logger_module

    monkeypatch.setattr(logger_module, "_logger", None)
    with patch(
        "plansync_cli.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")
    ):
        yield


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop store overrides that may be set in the developer's shell."""
    monkeypatch.delenv("PLANSYNC_STORE_URL", raising=False)
    monkeypatch.delenv("PLANSYNC_ANON_KEY", raising=False)


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from plansync_cli.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    with patch(
        "plansync_cli.services.config_service.user_config_dir",
        return_value=str(tmp_path / "config"),
    ):
        yield ConfigService()
    get_config_service.cache_clear()


@pytest.fixture()
def configured(tmp_config):
    """A ConfigService with store settings filled in."""
    tmp_config.config.store.url = "https://store.test"
    tmp_config.config.store.anon_key = "anon-key"
    tmp_config.config.store.retry = 0
    return tmp_config


# ---------------------------------------------------------------------------
# Services over fakes
# ---------------------------------------------------------------------------


@pytest.fixture()
def store():
    return InMemoryProjectStore()


@pytest.fixture()
def provider():
    provider = FakeIdentityProvider()
    for identity in (ALICE, BOB, CAROL):
        provider.add_account(identity)
    return provider


@pytest.fixture()
def identity_service(provider, tmp_config):
    from plansync_cli.services.identity_service import IdentityService

    return IdentityService(provider, tmp_config)


@pytest.fixture()
def sync(store, identity_service):
    from plansync_cli.services.project_sync_service import ProjectSyncService

    service = ProjectSyncService(store, identity_service)
    service.attach()
    yield service
    service.detach()


@pytest.fixture()
def make_project():
    """Build a stored Project; ``minutes_ago`` sets its ``updated_at``."""
    from datetime import UTC, date, datetime, timedelta

    now = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def factory(project_id, owner, *, collaborators=(), goal=None, minutes_ago=0, tasks=None):
        goal = goal or f"Goal of {project_id}"
        stamp = now - timedelta(minutes=minutes_ago)
        return Project(
            id=project_id,
            title=goal[:100],
            goal=goal,
            target_date=date(2025, 6, 30),
            tasks=tasks if tasks is not None else [{"name": "Kickoff"}],
            schedule_data=None,
            created_by=owner.id,
            collaborators=[c.id for c in collaborators],
            created_at=stamp,
            updated_at=stamp,
        )

    return factory


# ---------------------------------------------------------------------------
# CLI wiring
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_services(store, provider, configured):
    """AppServices over the in-memory store and identity provider."""
    from plansync_cli.app import AppServices
    from plansync_cli.services.identity_service import IdentityService
    from plansync_cli.services.project_sync_service import ProjectSyncService

    identity = IdentityService(provider, configured)
    client = MagicMock()
    client.close = AsyncMock()
    return AppServices(
        config_service=configured,
        client=client,
        identity=identity,
        projects=ProjectSyncService(store, identity),
    )


@pytest.fixture()
def cli_services(app_services):
    """Make every command build ``app_services`` instead of real HTTP services."""

    def build(config_service=None, *, follow_session=True, transport=None):
        if follow_session:
            app_services.projects.attach()
        return app_services

    with (
        patch("plansync_cli.app.build_app_services", side_effect=build) as mock_build,
        patch("plansync_cli.commands.auth.build_app_services", side_effect=build),
    ):
        yield mock_build


@pytest.fixture()
def sign_in_as(provider, configured):
    """Store a valid session for an identity, as a previous login would."""

    def _sign_in(identity):
        session = provider._session(identity)
        configured.save_credentials(
            session.access_token, session.refresh_token, user_id=identity.id
        )
        return session

    return _sign_in

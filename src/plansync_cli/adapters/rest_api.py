"""REST API adapters - Repository implementations using the hosted backend.

These adapters wrap the HTTP API clients to implement the repository
interfaces, translating access predicates into record-store filters and
transport failures into ``PlanSyncError`` kinds.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from plansync_cli.models import (
    AccessDeniedError,
    AuthSession,
    ErrorKind,
    Identity,
    NotAuthenticatedError,
    NotFoundError,
    PlanSyncError,
    Project,
    ProjectQuery,
    ProjectRecord,
    StoreUnavailableError,
    error_for,
)
from plansync_cli.repositories.repository import IdentityProvider, ProjectStore
from plansync_cli.services.api.auth import AuthAPI
from plansync_cli.services.api.client import APIClient
from plansync_cli.services.api.records import RecordsAPI

# PostgREST code for a malformed value such as a non-uuid id
INVALID_TEXT_REPRESENTATION = "22P02"


def response_message(response: httpx.Response) -> str:
    """Extract the error message a backend response carries."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    text = response.text.strip()
    if text:
        return text
    return f"{response.status_code} {response.reason_phrase}"


def _error_code(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        code = body.get("code")
        return str(code) if code is not None else None
    return None


def translate_error(
    exc: httpx.HTTPError, *, client_error: ErrorKind = ErrorKind.STORE_UNAVAILABLE
) -> PlanSyncError:
    """Map an httpx failure to the error taxonomy.

    Args:
        exc: The transport or status error
        client_error: Kind used for 4xx responses other than 401 and 403
    """
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        message = response_message(exc.response)
        if status == 401:
            return NotAuthenticatedError(message)
        if status == 403:
            return AccessDeniedError(message)
        if 400 <= status < 500:
            return error_for(client_error, message)
        return StoreUnavailableError(message)
    return StoreUnavailableError(str(exc) or exc.__class__.__name__)


def _is_malformed_id(exc: httpx.HTTPError) -> bool:
    return (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response.status_code == 400
        and _error_code(exc.response) == INVALID_TEXT_REPRESENTATION
    )


def query_filters(query: ProjectQuery) -> dict[str, str]:
    """Translate an access predicate into record-store filter parameters."""
    if query.readable_by is None and query.owned_by is None:
        raise ValueError("Project queries must be scoped to an identity")

    filters: dict[str, str] = {}
    if query.readable_by is not None:
        me = query.readable_by
        filters["or"] = f"(created_by.eq.{me},collaborators.cs.{{{me}}})"
    if query.owned_by is not None:
        filters["created_by"] = f"eq.{query.owned_by}"
    if query.project_id is not None:
        filters["id"] = f"eq.{query.project_id}"
    return filters


def _to_project(row: dict[str, Any]) -> Project:
    try:
        return ProjectRecord.model_validate(row).to_project()
    except (PydanticValidationError, ValueError) as e:
        raise StoreUnavailableError(f"Store returned a malformed project row: {e}") from e


class RestApiProjectStore(ProjectStore):
    """Project store backed by the hosted record API."""

    def __init__(self, client: APIClient, table: str = "projects"):
        self._client = client
        self.records = RecordsAPI(client, table)

    async def select(self, query: ProjectQuery) -> list[Project]:
        """List projects matching the query."""
        try:
            rows = await self.records.select(
                query_filters(query),
                order="updated_at.desc" if query.newest_first else None,
            )
        except httpx.HTTPError as e:
            if query.project_id is not None and _is_malformed_id(e):
                return []
            raise translate_error(e) from e
        return [_to_project(row) for row in rows]

    async def select_one(self, query: ProjectQuery) -> Project:
        """Get the single project matching the query."""
        if query.project_id is None:
            raise ValueError("select_one requires a project id")
        try:
            rows = await self.records.select(query_filters(query), single=True)
        except httpx.HTTPError as e:
            if _is_malformed_id(e):
                raise NotFoundError() from e
            raise translate_error(e) from e
        if not rows:
            raise NotFoundError()
        return _to_project(rows[0])

    async def insert(self, record: ProjectRecord, *, created_by: str) -> Project:
        """Create a project owned by ``created_by``."""
        if record.updated_at is None:
            raise ValueError("New records need a timestamp")
        body = record.insert_body(created_by=created_by, created_at=record.updated_at)
        try:
            rows = await self.records.insert(body)
        except httpx.HTTPError as e:
            raise translate_error(e) from e
        if not rows:
            raise StoreUnavailableError("Store did not return the created project")
        return _to_project(rows[0])

    async def update(self, query: ProjectQuery, record: ProjectRecord) -> list[Project]:
        """Update the rows matching the query."""
        try:
            rows = await self.records.update(query_filters(query), record.update_body())
        except httpx.HTTPError as e:
            if _is_malformed_id(e):
                return []
            raise translate_error(e) from e
        return [_to_project(row) for row in rows]

    async def delete(self, query: ProjectQuery) -> list[Project]:
        """Delete the rows matching the query."""
        try:
            rows = await self.records.delete(query_filters(query))
        except httpx.HTTPError as e:
            if _is_malformed_id(e):
                return []
            raise translate_error(e) from e
        return [_to_project(row) for row in rows]


def identity_from_user(user: dict[str, Any]) -> Identity:
    """Build an Identity from an auth provider user object."""
    metadata = user.get("user_metadata") or {}
    display_name = metadata.get("full_name") or metadata.get("display_name")
    return Identity(id=user["id"], email=user["email"], display_name=display_name)


def _session_from(data: dict[str, Any]) -> AuthSession:
    return AuthSession(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        identity=identity_from_user(data["user"]),
    )


class RestApiIdentityProvider(IdentityProvider):
    """Identity provider backed by the hosted auth API."""

    def __init__(self, client: APIClient, redirect_url: str | None = None):
        self.auth_api = AuthAPI(client)
        self.redirect_url = redirect_url

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            data = await self.auth_api.login(email, password)
        except httpx.HTTPError as e:
            raise translate_error(e, client_error=ErrorKind.NOT_AUTHENTICATED) from e
        try:
            return _session_from(data)
        except (KeyError, PydanticValidationError) as e:
            raise StoreUnavailableError("Invalid response from auth provider") from e

    async def sign_up(
        self, email: str, password: str, display_name: str
    ) -> AuthSession | None:
        try:
            data = await self.auth_api.signup(email, password, display_name)
        except httpx.HTTPError as e:
            raise translate_error(e, client_error=ErrorKind.VALIDATION_ERROR) from e
        # Without a token the account waits for email confirmation
        if "access_token" not in data:
            return None
        try:
            return _session_from(data)
        except (KeyError, PydanticValidationError) as e:
            raise StoreUnavailableError("Invalid response from auth provider") from e

    async def sign_out(self, access_token: str) -> None:
        try:
            await self.auth_api.logout(access_token)
        except httpx.HTTPError as e:
            raise translate_error(e) from e

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        try:
            data = await self.auth_api.refresh_token(refresh_token)
        except httpx.HTTPError as e:
            raise translate_error(e, client_error=ErrorKind.NOT_AUTHENTICATED) from e
        try:
            return _session_from(data)
        except (KeyError, PydanticValidationError) as e:
            raise StoreUnavailableError("Invalid response from auth provider") from e

    async def reset_password(self, email: str) -> None:
        try:
            await self.auth_api.recover(email, self.redirect_url)
        except httpx.HTTPError as e:
            raise translate_error(e, client_error=ErrorKind.VALIDATION_ERROR) from e

    async def get_identity(self, access_token: str) -> Identity:
        try:
            user = await self.auth_api.get_user(access_token)
        except httpx.HTTPError as e:
            raise translate_error(e, client_error=ErrorKind.NOT_AUTHENTICATED) from e
        try:
            return identity_from_user(user)
        except (KeyError, PydanticValidationError) as e:
            raise StoreUnavailableError("Invalid response from auth provider") from e

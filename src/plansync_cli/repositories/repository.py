"""Repository abstraction layer for PlanSync CLI.

This module defines the abstract base classes (ports) for the two remote
collaborators of the sync layer: the project record store and the identity
provider. Concrete adapters live in ``plansync_cli.adapters``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from plansync_cli.models import AuthSession, Identity, Project, ProjectQuery, ProjectRecord


class ProjectStore(ABC):
    """Abstract base class for the authoritative project record store.

    Every call is scoped by a ``ProjectQuery``; implementations must apply
    the query as a filter and never return or touch rows outside it.
    Failures are raised as ``PlanSyncError`` subclasses.
    """

    @abstractmethod
    async def select(self, query: ProjectQuery) -> list[Project]:
        """List projects matching the query.

        Args:
            query: Access predicate, ordering and optional id restriction

        Returns:
            Matching projects, newest ``updated_at`` first when requested

        Raises:
            StoreUnavailableError: On network or service failure
        """
        raise NotImplementedError("ProjectStore.select() must be implemented by adapter")

    @abstractmethod
    async def select_one(self, query: ProjectQuery) -> Project:
        """Get the single project matching the query.

        Raises:
            NotFoundError: If no row matches
            StoreUnavailableError: On network or service failure
        """
        raise NotImplementedError(
            "ProjectStore.select_one() must be implemented by adapter"
        )

    @abstractmethod
    async def insert(
        self, record: ProjectRecord, *, created_by: str
    ) -> Project:
        """Create a project owned by ``created_by``.

        Returns:
            The created Project with store-assigned id and timestamps
        """
        raise NotImplementedError("ProjectStore.insert() must be implemented by adapter")

    @abstractmethod
    async def update(self, query: ProjectQuery, record: ProjectRecord) -> list[Project]:
        """Update the rows matching the query.

        Returns:
            The rows actually updated; empty when nothing matched
        """
        raise NotImplementedError("ProjectStore.update() must be implemented by adapter")

    @abstractmethod
    async def delete(self, query: ProjectQuery) -> list[Project]:
        """Delete the rows matching the query.

        Returns:
            The rows actually deleted; empty when nothing matched
        """
        raise NotImplementedError("ProjectStore.delete() must be implemented by adapter")


class IdentityProvider(ABC):
    """Abstract base class for the authentication provider."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session."""
        raise NotImplementedError

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, display_name: str
    ) -> AuthSession | None:
        """Register an account.

        Returns:
            A session when the provider signs the user in immediately, or None
            when the account must first be confirmed by email
        """
        raise NotImplementedError

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        """Revoke a session."""
        raise NotImplementedError

    @abstractmethod
    async def refresh_session(self, refresh_token: str) -> AuthSession:
        """Exchange a refresh token for a new session.

        Raises:
            NotAuthenticatedError: If the refresh token is no longer valid
        """
        raise NotImplementedError

    @abstractmethod
    async def reset_password(self, email: str) -> None:
        """Send a password-reset email."""
        raise NotImplementedError

    @abstractmethod
    async def get_identity(self, access_token: str) -> Identity:
        """Resolve a session token into the identity it belongs to.

        Raises:
            NotAuthenticatedError: If the token is invalid or expired
        """
        raise NotImplementedError

"""Identity service - session lifecycle of the current user."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from plansync_cli.models import (
    AccessDeniedError,
    AuthSession,
    Identity,
    NotAuthenticatedError,
    PlanSyncError,
    Result,
    ValidationError,
)
from plansync_cli.repositories import IdentityProvider
from plansync_cli.services.config_service import ConfigService
from plansync_cli.utils.logger import get_logger

MIN_PASSWORD_LENGTH = 6

IdentityListener = Callable[[Identity | None], Awaitable[Any]]


class IdentityService:
    """Tracks who is signed in and publishes identity changes.

    The current session is persisted through ``ConfigService`` so it survives
    between CLI invocations. Listeners registered with ``subscribe`` are
    awaited, in registration order, after every identity change.
    """

    def __init__(self, provider: IdentityProvider, config_service: ConfigService):
        """Initialize the identity service.

        Args:
            provider: IdentityProvider implementation for auth calls
            config_service: Where the session tokens are stored
        """
        self.provider = provider
        self.config_service = config_service
        self.loading = False
        self.last_error: str | None = None
        self._identity: Identity | None = None
        self._listeners: list[IdentityListener] = []
        self.logger = get_logger("identity")

    @property
    def identity(self) -> Identity | None:
        """The signed-in identity, or None."""
        return self._identity

    @property
    def session_token(self) -> str | None:
        credentials = self.config_service.load_credentials()
        return credentials["token"] if credentials else None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener for identity changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set_identity(self, identity: Identity | None) -> None:
        self._identity = identity
        for listener in list(self._listeners):
            await listener(identity)

    def _store_session(self, session: AuthSession) -> None:
        self.config_service.save_credentials(
            session.access_token,
            session.refresh_token,
            user_id=session.identity.id,
            email=session.identity.email,
        )

    def _fail(self, error: PlanSyncError) -> Result:
        self.last_error = error.message
        self.logger.warning("identity operation failed: %s", error.message)
        return Result.failure(error)

    async def restore_session(self) -> Result[Identity | None]:
        """Resolve the stored session into an identity.

        An expired token is refreshed when a refresh token is available. A
        session the provider rejects is forgotten. A provider outage keeps
        the stored session and reports the failure.
        """
        self.loading = True
        self.last_error = None
        try:
            credentials = self.config_service.load_credentials()
            if not credentials:
                identity = None
            else:
                identity = await self._resolve(credentials)
        except PlanSyncError as e:
            return self._fail(e)
        finally:
            self.loading = False

        await self._set_identity(identity)
        return Result.success(identity)

    async def _resolve(self, credentials: dict[str, str]) -> Identity | None:
        try:
            return await self.provider.get_identity(credentials["token"])
        except (NotAuthenticatedError, AccessDeniedError):
            pass

        refresh_token = credentials.get("refresh_token")
        if refresh_token:
            try:
                session = await self.provider.refresh_session(refresh_token)
            except (NotAuthenticatedError, AccessDeniedError):
                pass
            else:
                self._store_session(session)
                return session.identity

        self.logger.info("stored session rejected, signing out locally")
        self.config_service.clear_credentials()
        return None

    async def sign_in(self, email: str, password: str) -> Result[Identity]:
        """Sign in with email and password."""
        self.last_error = None
        if not email.strip() or not password:
            return self._fail(ValidationError("Email and password are required"))

        try:
            session = await self.provider.sign_in(email.strip(), password)
        except PlanSyncError as e:
            return self._fail(e)

        self._store_session(session)
        self.logger.info("signed in as %s", session.identity.id)
        await self._set_identity(session.identity)
        return Result.success(session.identity)

    async def sign_up(
        self, email: str, password: str, display_name: str
    ) -> Result[Identity | None]:
        """Create an account.

        Returns:
            The new identity when the provider signs the user straight in, or
            a successful None when the account awaits email confirmation
        """
        self.last_error = None
        if not display_name.strip():
            return self._fail(ValidationError("Display name is required"))
        if not email.strip() or not password:
            return self._fail(ValidationError("Email and password are required"))
        if len(password) < MIN_PASSWORD_LENGTH:
            return self._fail(
                ValidationError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
                )
            )

        try:
            session = await self.provider.sign_up(
                email.strip(), password, display_name.strip()
            )
        except PlanSyncError as e:
            return self._fail(e)

        if session is None:
            self.logger.info("sign-up pending email confirmation")
            return Result.success(None)

        self._store_session(session)
        await self._set_identity(session.identity)
        return Result.success(session.identity)

    async def sign_out(self) -> Result[None]:
        """Sign out locally, then revoke the session with the provider.

        Listeners learn about the sign-out before any network call. A failed
        revocation is logged; the local session is gone either way.
        """
        self.last_error = None
        token = self.session_token
        self.config_service.clear_credentials()
        await self._set_identity(None)

        if token:
            try:
                await self.provider.sign_out(token)
            except PlanSyncError as e:
                self.logger.warning("remote sign-out failed: %s", e.message)
        return Result.success(None)

    async def reset_password(self, email: str) -> Result[None]:
        """Send a password-reset email."""
        self.last_error = None
        if not email.strip():
            return self._fail(ValidationError("Email is required"))
        try:
            await self.provider.reset_password(email.strip())
        except PlanSyncError as e:
            return self._fail(e)
        return Result.success(None)

"""Composition root - builds and wires the services for one session."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from plansync_cli.adapters import RestApiIdentityProvider, RestApiProjectStore
from plansync_cli.models import NotAuthenticatedError
from plansync_cli.services.api.client import APIClient
from plansync_cli.services.config_service import ConfigService, get_config_service
from plansync_cli.services.identity_service import IdentityService
from plansync_cli.services.project_sync_service import ProjectSyncService


@dataclass
class AppServices:
    """The services one CLI invocation works with."""

    config_service: ConfigService
    client: APIClient
    identity: IdentityService
    projects: ProjectSyncService

    async def close(self) -> None:
        self.projects.detach()
        await self.client.close()


def build_app_services(
    config_service: ConfigService | None = None,
    *,
    follow_session: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppServices:
    """Construct the adapters and services explicitly.

    Args:
        config_service: Configuration and session storage
        follow_session: Subscribe the project cache to identity changes
        transport: Optional httpx transport, used by tests

    Raises:
        ValidationError: If the store location or key is not configured
    """
    config_service = config_service or get_config_service()
    config = config_service.require_store()

    client = APIClient(config_service, transport=transport)
    identity = IdentityService(
        RestApiIdentityProvider(client, config.auth.redirect_url), config_service
    )
    projects = ProjectSyncService(RestApiProjectStore(client, config.store.table), identity)
    if follow_session:
        projects.attach()

    return AppServices(
        config_service=config_service,
        client=client,
        identity=identity,
        projects=projects,
    )


@asynccontextmanager
async def app_session(
    config_service: ConfigService | None = None,
    *,
    require_identity: bool = True,
    follow_session: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[AppServices]:
    """Build the services, restore the stored session, and clean up after.

    Raises:
        NotAuthenticatedError: If ``require_identity`` and nobody is signed in
    """
    services = build_app_services(
        config_service, follow_session=follow_session, transport=transport
    )
    try:
        identity = (await services.identity.restore_session()).unwrap()
        if require_identity and identity is None:
            raise NotAuthenticatedError("Not signed in. Use 'plansync auth login' first.")
        yield services
    finally:
        await services.close()

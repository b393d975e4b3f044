"""HTTP client for the PlanSync record store and auth provider."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from plansync_cli.services.config_service import ConfigService, get_config_service
from plansync_cli.utils.logger import get_logger


class APIClient:
    """HTTP client for the hosted project backend."""

    def __init__(
        self,
        config_service: ConfigService | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config_manager = config_service or get_config_service()
        self.config = self.config_manager.config
        self.base_url = self.config.store.url
        self.anon_key = self.config.store.anon_key
        self.timeout = self.config.store.timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.logger = get_logger("api")

    async def __aenter__(self) -> APIClient:
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self, skip_auth: bool = False) -> dict[str, str]:
        """Get HTTP headers with authentication.

        The public key goes with every request. The bearer token is the
        session token when signed in, otherwise the public key itself.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.anon_key}",
        }

        if not skip_auth:
            credentials = self.config_manager.load_credentials()
            if credentials and "token" in credentials:
                headers["Authorization"] = f"Bearer {credentials['token']}"

        return headers

    async def _get_client(self, skip_auth: bool = False) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        # Always update headers to include latest auth token
        self._client.headers.update(self._get_headers(skip_auth=skip_auth))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _try_refresh_token(self) -> bool:
        """Try to refresh the session token. Returns True if successful."""
        credentials = self.config_manager.load_credentials()
        if not credentials or "refresh_token" not in credentials:
            return False

        try:
            response = await self.request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": credentials["refresh_token"]},
                skip_auth=True,
                retry=0,
            )
        except httpx.HTTPError as e:
            self.logger.warning("token refresh failed: %s", e)
            return False

        data = response.json()
        if "access_token" not in data:
            return False

        self.config_manager.save_credentials(
            data["access_token"],
            data.get("refresh_token") or credentials["refresh_token"],
            user_id=credentials.get("user_id"),
            email=credentials.get("email"),
        )
        self.logger.info("session token refreshed")
        return True

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        retry: int | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make an HTTP request to the backend."""
        if retry is None:
            retry = self.config.store.retry

        client = await self._get_client(skip_auth=skip_auth)
        url = f"{path}" if path.startswith("/") else f"/{path}"

        last_exception: Exception | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                    headers=headers,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Expired session - refresh once and replay
                if e.response.status_code == 401 and not skip_auth:
                    if await self._try_refresh_token():
                        client = await self._get_client(skip_auth=skip_auth)
                        response = await client.request(
                            method=method,
                            url=url,
                            json=json,
                            params=params,
                            headers=headers,
                        )
                        response.raise_for_status()
                        return response
                    raise

                # Don't retry client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            if attempt < retry:
                self.logger.debug(
                    "%s %s failed (attempt %d), retrying", method, url, attempt + 1
                )
                # Wait before retry (simple exponential backoff)
                await asyncio.sleep(2**attempt)

        # All retries failed
        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request(
            "GET", path, params=params, headers=headers, skip_auth=skip_auth
        )

    async def post(
        self,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request(
            "POST", path, json=json, params=params, headers=headers, skip_auth=skip_auth
        )

    async def patch(
        self,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request("PATCH", path, json=json, params=params, headers=headers)

    async def delete(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, params=params, headers=headers)

"""Tests for API client."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from plansync_cli.services.api.client import APIClient


def make_client(config_service, handler):
    return APIClient(config_service, transport=httpx.MockTransport(handler))


@pytest.fixture
def no_sleep():
    with patch("plansync_cli.services.api.client.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


def test_client_initialization(configured):
    """Test API client initialization."""
    client = APIClient(configured)

    assert client.base_url == "https://store.test"
    assert client.anon_key == "anon-key"
    assert client.timeout == 30
    assert client._client is None


def test_headers_without_session(configured):
    """The public key doubles as bearer token when signed out."""
    headers = APIClient(configured)._get_headers()

    assert headers["apikey"] == "anon-key"
    assert headers["Authorization"] == "Bearer anon-key"
    assert headers["Content-Type"] == "application/json"


def test_headers_with_session(configured):
    """Test the stored session token is sent unless auth is skipped."""
    configured.save_credentials("session-token", "refresh-token")
    client = APIClient(configured)

    assert client._get_headers()["Authorization"] == "Bearer session-token"
    assert client._get_headers(skip_auth=True)["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_request_sends_params_and_headers(configured):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[{"id": "p1"}])

    async with make_client(configured, handler) as client:
        response = await client.get(
            "/rest/v1/projects", params={"id": "eq.p1"}, headers={"X-Test": "1"}
        )

    assert response.json() == [{"id": "p1"}]
    request = seen[0]
    assert request.url.path == "/rest/v1/projects"
    assert request.url.params["id"] == "eq.p1"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["X-Test"] == "1"
    assert client._client is None


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(configured, no_sleep):
    configured.config.store.retry = 3
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, json={"message": "bad filter"})

    client = make_client(configured, handler)
    with pytest.raises(httpx.HTTPStatusError):
        await client.get("/rest/v1/projects")
    await client.close()

    assert len(calls) == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_server_errors_are_retried_with_backoff(configured, no_sleep):
    configured.config.store.retry = 2
    responses = [httpx.Response(503), httpx.Response(502), httpx.Response(200, json=[])]

    def handler(request):
        return responses.pop(0)

    client = make_client(configured, handler)
    response = await client.get("/rest/v1/projects")
    await client.close()

    assert response.status_code == 200
    assert [c.args[0] for c in no_sleep.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_network_errors_raise_after_retries(configured, no_sleep):
    configured.config.store.retry = 1

    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    client = make_client(configured, handler)
    with pytest.raises(httpx.ConnectError):
        await client.get("/rest/v1/projects")
    await client.close()

    assert no_sleep.await_count == 1


@pytest.mark.asyncio
async def test_expired_session_is_refreshed_and_replayed(configured):
    configured.save_credentials("old-token", "refresh-1", user_id="u1")
    seen = []

    def handler(request):
        seen.append((request.url.path, request.headers["Authorization"]))
        if request.url.path == "/auth/v1/token":
            assert request.url.params["grant_type"] == "refresh_token"
            assert json.loads(request.content) == {"refresh_token": "refresh-1"}
            return httpx.Response(
                200, json={"access_token": "new-token", "refresh_token": "refresh-2"}
            )
        if request.headers["Authorization"] == "Bearer old-token":
            return httpx.Response(401, json={"message": "JWT expired"})
        return httpx.Response(200, json=[])

    client = make_client(configured, handler)
    response = await client.get("/rest/v1/projects")
    await client.close()

    assert response.status_code == 200
    assert seen == [
        ("/rest/v1/projects", "Bearer old-token"),
        ("/auth/v1/token", "Bearer anon-key"),
        ("/rest/v1/projects", "Bearer new-token"),
    ]
    credentials = configured.load_credentials()
    assert credentials["token"] == "new-token"
    assert credentials["refresh_token"] == "refresh-2"
    assert credentials["user_id"] == "u1"


@pytest.mark.asyncio
async def test_unauthorized_without_refresh_token(configured):
    configured.save_credentials("old-token")

    def handler(request):
        return httpx.Response(401, json={"message": "JWT expired"})

    client = make_client(configured, handler)
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await client.get("/rest/v1/projects")
    await client.close()

    assert exc_info.value.response.status_code == 401

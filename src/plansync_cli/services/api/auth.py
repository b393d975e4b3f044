"""Authentication API endpoints."""

from __future__ import annotations

from plansync_cli.services.api.client import APIClient


class AuthAPI:
    """Authentication API client (GoTrue-style endpoints)."""

    def __init__(self, client: APIClient):
        self.client = client

    async def login(self, email: str, password: str) -> dict:
        """Login with email and password."""
        response = await self.client.post(
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            skip_auth=True,
        )
        return response.json()

    async def signup(self, email: str, password: str, display_name: str) -> dict:
        """Register a new account. The display name is stored as user metadata."""
        response = await self.client.post(
            "/auth/v1/signup",
            json={
                "email": email,
                "password": password,
                "data": {"full_name": display_name, "display_name": display_name},
            },
            skip_auth=True,
        )
        return response.json()

    async def logout(self, access_token: str) -> None:
        """Revoke the given session token."""
        await self.client.post(
            "/auth/v1/logout",
            headers={"Authorization": f"Bearer {access_token}"},
            skip_auth=True,
        )

    async def recover(self, email: str, redirect_to: str | None = None) -> None:
        """Send a password-reset email."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self.client.post(
            "/auth/v1/recover",
            json={"email": email},
            params=params,
            skip_auth=True,
        )

    async def get_user(self, access_token: str) -> dict:
        """Get the user a session token belongs to."""
        response = await self.client.get(
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {access_token}"},
            skip_auth=True,
        )
        return response.json()

    async def refresh_token(self, refresh_token: str) -> dict:
        """Exchange a refresh token for a new session."""
        response = await self.client.post(
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
            skip_auth=True,
        )
        return response.json()

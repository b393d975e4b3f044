"""Record store API endpoints (PostgREST-style filtering)."""

from __future__ import annotations

from typing import Any

from plansync_cli.services.api.client import APIClient

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


class RecordsAPI:
    """Filtered CRUD over one table of the record store."""

    def __init__(self, client: APIClient, table: str = "projects"):
        self.client = client
        self.table = table

    @property
    def path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def select(
        self,
        filters: dict[str, str],
        *,
        order: str | None = None,
        single: bool = False,
    ) -> list[dict]:
        """List rows matching the filters."""
        params: dict[str, Any] = {"select": "*", **filters}
        if order:
            params["order"] = order
        if single:
            params["limit"] = 1
        response = await self.client.get(self.path, params=params)
        return response.json()

    async def insert(self, row: dict[str, Any]) -> list[dict]:
        """Insert a row and return it as stored."""
        response = await self.client.post(
            self.path,
            json=row,
            params={"select": "*"},
            headers=RETURN_REPRESENTATION,
        )
        return response.json()

    async def update(self, filters: dict[str, str], changes: dict[str, Any]) -> list[dict]:
        """Update matching rows and return the rows actually changed."""
        response = await self.client.patch(
            self.path,
            json=changes,
            params={"select": "*", **filters},
            headers=RETURN_REPRESENTATION,
        )
        return response.json()

    async def delete(self, filters: dict[str, str]) -> list[dict]:
        """Delete matching rows and return the rows actually removed."""
        response = await self.client.delete(
            self.path,
            params={"select": "*", **filters},
            headers=RETURN_REPRESENTATION,
        )
        return response.json()

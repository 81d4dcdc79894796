"""API test helpers — build catalog data through the HTTP surface."""

from __future__ import annotations

from itertools import count

import pytest_asyncio
from httpx import AsyncClient

_seq = count(1)


class ApiSeeder:
    """Creates entities via the API and returns their ids."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def _post(self, url: str, payload: dict) -> dict:
        response = await self.client.post(url, json=payload)
        assert response.status_code in (200, 201), response.text
        return response.json()

    async def user(self) -> int:
        n = next(_seq)
        return (await self._post("/api/v1/users", {"name": f"User {n}", "email": f"user{n}@example.com"}))["id"]

    async def domain(self) -> int:
        return (await self._post("/api/v1/domains", {"name": f"Domain {next(_seq)}"}))["id"]

    async def module(self, *domain_ids: int, threshold_score: float | None = None) -> int:
        payload: dict = {"title": f"Module {next(_seq)}"}
        if threshold_score is not None:
            payload["threshold_score"] = threshold_score
        module_id = (await self._post("/api/v1/modules", payload))["id"]
        if domain_ids:
            await self._post(f"/api/v1/modules/{module_id}/domains", {"domain_ids": list(domain_ids)})
        return module_id

    async def join(self, user_id: int, *domain_ids: int) -> dict[int, int]:
        """Link the user to domains; returns domain_id -> user_domain_id."""
        await self._post(f"/api/v1/users/{user_id}/domains", {"domain_ids": list(domain_ids)})
        response = await self.client.get(f"/api/v1/users/{user_id}/domains")
        return {d["domain_id"]: d["user_domain_id"] for d in response.json()}

    async def option(self, is_correct: bool) -> int:
        payload = {"option_text": f"Answer {next(_seq)}", "is_correct": is_correct}
        return (await self._post("/api/v1/options", payload))["id"]


@pytest_asyncio.fixture
async def seed(client: AsyncClient) -> ApiSeeder:
    return ApiSeeder(client)

"""Tool endpoint tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
class TestToolsApi:
    async def test_assign_and_switch_with_cooldown(self, client: AsyncClient, seed, clock) -> None:
        user = await seed.user()
        domain = await seed.domain()
        scopes = await seed.join(user, domain)
        scope = scopes[domain]
        editor = (await client.post("/api/v1/tools", json={"name": "Editor"})).json()["id"]
        terminal = (await client.post("/api/v1/tools", json={"name": "Terminal"})).json()["id"]

        response = await client.post("/api/v1/user-tools", json={"user_domain_id": scope, "tool_id": editor})
        assert response.status_code == 201

        response = await client.post("/api/v1/user-tools", json={"user_domain_id": scope, "tool_id": terminal})
        assert response.status_code == 409

        switch = {"tool_id": terminal, "reason": "prefer cli", "acting_user_id": user}
        clock.advance(days=29.9)
        response = await client.put(f"/api/v1/user-tools/{scope}", json=switch)
        assert response.status_code == 429
        assert response.json()["remaining_days"] == 1

        clock.advance(days=0.1)
        response = await client.put(f"/api/v1/user-tools/{scope}", json=switch)
        assert response.status_code == 200
        assert response.json()["tool_id"] == terminal

        response = await client.put(f"/api/v1/user-tools/{scope}", json=switch)
        assert response.status_code == 409

        current = await client.get(f"/api/v1/user-tools/{scope}")
        assert current.json()["tool_id"] == terminal

    async def test_list_tools(self, client: AsyncClient) -> None:
        await client.post("/api/v1/tools", json={"name": "Zed"})
        await client.post("/api/v1/tools", json={"name": "Atom"})
        response = await client.get("/api/v1/tools")
        assert [t["name"] for t in response.json()] == ["Atom", "Zed"]

    async def test_update_tool(self, client: AsyncClient, seed) -> None:
        user = await seed.user()
        editor = (await client.post("/api/v1/tools", json={"name": "Editor"})).json()["id"]
        await client.post("/api/v1/tools", json={"name": "Terminal"})

        response = await client.patch(f"/api/v1/tools/{editor}", json={"user_id": user, "name": "terminal"})
        assert response.status_code == 409

        response = await client.patch(
            f"/api/v1/tools/{editor}", json={"user_id": user, "name": "IDE", "reason": "rename"}
        )
        assert response.status_code == 200
        assert response.json()["name"] == "IDE"

        response = await client.patch("/api/v1/tools/404", json={"user_id": user, "name": "Ghost"})
        assert response.status_code == 404

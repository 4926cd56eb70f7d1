"""
Tests for the admin registry endpoints.
"""

import pytest
from httpx import AsyncClient

from shiftbook.services.admin_service import is_admin


@pytest.mark.asyncio
async def test_add_and_list_admins(client: AsyncClient):
    response = await client.post("/api/v1/admins/", json={"name": "Sara", "email": "Sara@Example.com"})
    assert response.status_code == 201
    assert response.json()["email"] == "sara@example.com"

    listing = await client.get("/api/v1/admins/")
    assert [a["email"] for a in listing.json()] == ["sara@example.com"]


@pytest.mark.asyncio
async def test_duplicate_email_case_insensitive(client: AsyncClient):
    await client.post("/api/v1/admins/", json={"name": "Sara", "email": "sara@example.com"})

    response = await client.post("/api/v1/admins/", json={"name": "Sara 2", "email": "SARA@example.com"})
    assert response.status_code == 409
    assert response.json()["code"] == "ADMIN_EXISTS"


@pytest.mark.asyncio
async def test_invalid_email(client: AsyncClient):
    response = await client.post("/api/v1/admins/", json={"name": "Sara", "email": "not-an-email"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_admin_revokes_access(client: AsyncClient, db_session):
    created = (
        await client.post("/api/v1/admins/", json={"name": "Sara", "email": "sara@example.com"})
    ).json()
    assert await is_admin(db_session, "SARA@example.com")

    response = await client.delete(f"/api/v1/admins/{created['id']}")
    assert response.status_code == 204
    assert not await is_admin(db_session, "sara@example.com")

    again = await client.delete(f"/api/v1/admins/{created['id']}")
    assert again.status_code == 404

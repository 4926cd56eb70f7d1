"""
Tests for shift endpoints.
"""

import pytest
from httpx import AsyncClient

SHIFT = {
    "date": "2026-11-20",
    "start_time": "09:00",
    "end_time": "11:00",
    "capacity": 30,
    "price": 150,
}


@pytest.mark.asyncio
async def test_create_shift(client: AsyncClient):
    response = await client.post("/api/v1/shifts/", json=SHIFT)
    assert response.status_code == 201
    data = response.json()
    assert data["capacity"] == 30
    assert data["booked"] == 0
    assert data["remaining"] == 30
    assert data["price"] == 150


@pytest.mark.asyncio
async def test_create_shift_ignores_booked(client: AsyncClient):
    """A client cannot seed the booked counter."""
    response = await client.post("/api/v1/shifts/", json={**SHIFT, "booked": 12})
    assert response.status_code == 201
    assert response.json()["booked"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"capacity": 0},
        {"price": -1},
        {"date": "20-11-2026"},
        {"start_time": "25:00"},
        {"start_time": "12:00", "end_time": "10:00"},
    ],
)
async def test_create_shift_validation(client: AsyncClient, overrides):
    response = await client.post("/api/v1/shifts/", json={**SHIFT, **overrides})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_shifts_in_time_order(client: AsyncClient):
    await client.post("/api/v1/shifts/", json={**SHIFT, "date": "2026-11-21"})
    await client.post("/api/v1/shifts/", json={**SHIFT, "start_time": "13:00", "end_time": "15:00"})
    await client.post("/api/v1/shifts/", json=SHIFT)

    response = await client.get("/api/v1/shifts/")
    assert response.status_code == 200
    assert [(s["date"], s["start_time"]) for s in response.json()] == [
        ("2026-11-20", "09:00"),
        ("2026-11-20", "13:00"),
        ("2026-11-21", "09:00"),
    ]


@pytest.mark.asyncio
async def test_get_shift_not_found(client: AsyncClient):
    response = await client.get("/api/v1/shifts/99999")
    assert response.status_code == 404
    assert response.json()["code"] == "SHIFT_NOT_FOUND"


@pytest.mark.asyncio
async def test_update_shift_keeps_booked(client: AsyncClient, make_shift):
    shift = await make_shift(capacity=10, booked=4)

    response = await client.put(
        f"/api/v1/shifts/{shift.id}",
        json={**SHIFT, "capacity": 12, "price": 175.5},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["capacity"] == 12
    assert data["price"] == 175.5
    assert data["booked"] == 4
    assert data["remaining"] == 8


@pytest.mark.asyncio
async def test_update_missing_shift(client: AsyncClient):
    response = await client.put("/api/v1/shifts/99999", json=SHIFT)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_shift_keeps_bookings(client: AsyncClient, make_shift, make_booking):
    shift = await make_shift()
    booking = await make_booking(shift.id)

    response = await client.delete(f"/api/v1/shifts/{shift.id}")
    assert response.status_code == 204

    assert (await client.get(f"/api/v1/shifts/{shift.id}")).status_code == 404
    orphan = await client.get(f"/api/v1/bookings/{booking.id}")
    assert orphan.status_code == 200
    assert orphan.json()["shift_id"] == shift.id

    assert (await client.delete(f"/api/v1/shifts/{shift.id}")).status_code == 404


@pytest.mark.asyncio
async def test_recount(client: AsyncClient, make_shift, make_booking):
    shift = await make_shift(capacity=10, booked=9)
    await make_booking(shift.id)

    response = await client.post(f"/api/v1/shifts/{shift.id}/recount")
    assert response.status_code == 200
    assert response.json()["booked"] == 1

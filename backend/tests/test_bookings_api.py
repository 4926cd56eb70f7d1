"""
Tests for booking endpoints, from reservation to the door check.
"""

import pytest
from httpx import AsyncClient


def booking_json(shift_id, **overrides):
    body = {
        "shift_id": shift_id,
        "full_name": "Nour Hassan",
        "phone_number": "01012345678",
        "group_name": "A",
        "application_number": "42",
        "transaction_id": "TX-991",
        "sender_phone": "01199998888",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_reserve_seat(client: AsyncClient, test_shift):
    response = await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["ticket_number"] == 1001
    assert data["attended"] is False
    assert data["transaction_id"] == "TX-991"

    shift = (await client.get(f"/api/v1/shifts/{test_shift.id}")).json()
    assert shift["booked"] == 1
    assert shift["remaining"] == 9


@pytest.mark.asyncio
async def test_reserve_full_shift(client: AsyncClient, make_shift):
    shift = await make_shift(capacity=3, booked=3)
    response = await client.post("/api/v1/bookings/", json=booking_json(shift.id))
    assert response.status_code == 409
    assert response.json()["code"] == "SHIFT_FULL"


@pytest.mark.asyncio
async def test_reserve_unknown_shift(client: AsyncClient):
    response = await client.post("/api/v1/bookings/", json=booking_json(99999))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reserve_missing_fields(client: AsyncClient, test_shift):
    response = await client.post("/api/v1/bookings/", json={"shift_id": test_shift.id})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_status_flow_and_attendance(client: AsyncClient, test_shift):
    booking = (await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))).json()
    url = f"/api/v1/bookings/{booking['id']}"

    early = await client.post(f"{url}/attendance")
    assert early.status_code == 409

    confirmed = await client.patch(f"{url}/status", json={"status": "CONFIRMED"})
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "CONFIRMED"

    back = await client.patch(f"{url}/status", json={"status": "PENDING"})
    assert back.status_code == 200
    assert back.json()["status"] == "PENDING"
    assert (await client.get(f"/api/v1/shifts/{test_shift.id}")).json()["booked"] == 1
    await client.patch(f"{url}/status", json={"status": "CONFIRMED"})

    entry = await client.post(f"{url}/attendance")
    assert entry.status_code == 200
    assert entry.json()["attended"] is True

    again = await client.post(f"{url}/attendance")
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_reject_releases_seat(client: AsyncClient, test_shift):
    booking = (await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))).json()

    response = await client.patch(
        f"/api/v1/bookings/{booking['id']}/status", json={"status": "REJECTED"}
    )
    assert response.status_code == 200

    shift = (await client.get(f"/api/v1/shifts/{test_shift.id}")).json()
    assert shift["booked"] == 0


@pytest.mark.asyncio
async def test_unknown_status_value(client: AsyncClient, test_shift):
    booking = (await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))).json()
    response = await client.patch(
        f"/api/v1/bookings/{booking['id']}/status", json={"status": "CANCELLED"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_booking(client: AsyncClient, test_shift):
    booking = (await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))).json()

    response = await client.delete(f"/api/v1/bookings/{booking['id']}")
    assert response.status_code == 204

    assert (await client.get(f"/api/v1/bookings/{booking['id']}")).status_code == 404
    assert (await client.get(f"/api/v1/shifts/{test_shift.id}")).json()["booked"] == 0
    assert (await client.delete(f"/api/v1/bookings/{booking['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_list_and_lookup(client: AsyncClient, test_shift):
    await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))
    await client.post(
        "/api/v1/bookings/",
        json=booking_json(test_shift.id, full_name="Karim Fathy", phone_number="01500000000"),
    )

    everything = await client.get("/api/v1/bookings/")
    assert len(everything.json()) == 2

    pending = await client.get("/api/v1/bookings/", params={"status": "PENDING", "search": "karim"})
    assert [b["full_name"] for b in pending.json()] == ["Karim Fathy"]

    by_ticket = await client.get("/api/v1/bookings/lookup", params={"q": "1001"})
    assert by_ticket.status_code == 200
    assert by_ticket.json()["full_name"] == "Nour Hassan"

    by_phone = await client.get("/api/v1/bookings/lookup", params={"q": "01500000000"})
    assert by_phone.json()["ticket_number"] == 1002

    missing = await client.get("/api/v1/bookings/lookup", params={"q": "4040"})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, make_shift):
    shift = await make_shift(capacity=10, price=200)
    ids = []
    for phone in ("01000000001", "01000000002", "01000000003"):
        created = await client.post("/api/v1/bookings/", json=booking_json(shift.id, phone_number=phone))
        ids.append(created.json()["id"])

    await client.patch(f"/api/v1/bookings/{ids[0]}/status", json={"status": "CONFIRMED"})
    await client.patch(f"/api/v1/bookings/{ids[1]}/status", json={"status": "CONFIRMED"})
    await client.patch(f"/api/v1/bookings/{ids[2]}/status", json={"status": "REJECTED"})
    await client.post(f"/api/v1/bookings/{ids[0]}/attendance")

    response = await client.get("/api/v1/stats")
    assert response.status_code == 200
    assert response.json() == {
        "total_bookings": 3,
        "pending_bookings": 0,
        "confirmed_bookings": 2,
        "rejected_bookings": 1,
        "attended_bookings": 1,
        "total_revenue": 400.0,
    }


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/api/v1/shifts/")
    assert "x-request-id" in response.headers
    assert "x-response-time" in response.headers


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient, test_shift):
    await client.post("/api/v1/bookings/", json=booking_json(test_shift.id))

    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["redis"] == {"status": "disabled"}

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert 'reservation_attempts_total{result="success"}' in metrics.text
    assert "tickets_allocated_total" in metrics.text

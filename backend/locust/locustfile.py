"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Ticket uniqueness + capacity under contention
  locust -f locustfile.py --tags admin        # Public bookings racing dashboard actions
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

After a run, verify against the database:
  SELECT ticket_number, COUNT(*) FROM bookings GROUP BY 1 HAVING COUNT(*) > 1;  -- no rows
  SELECT s.id, s.booked, COUNT(b.id) FILTER (WHERE b.status <> 'REJECTED')
    FROM shifts s LEFT JOIN bookings b ON b.shift_id = s.id GROUP BY s.id;     -- equal
"""

import random
import string
from locust import HttpUser, task, between, tag, events

# Shared state
CONTENDED_SHIFT_ID = None
BOOKING_IDS = []


def random_phone():
    return "01" + "".join(random.choices(string.digits, k=9))


def booking_draft(shift_id):
    return {
        "shift_id": shift_id,
        "full_name": "Load " + "".join(random.choices(string.ascii_lowercase, k=6)),
        "phone_number": random_phone(),
        "group_name": random.choice(["A", "B", "C"]),
        "application_number": str(random.randint(1, 500)),
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: shift for the contention test is created by the first user")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many visitors reserve on one shift

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    Every 201 must carry a distinct ticket number. booked may overshoot
    capacity slightly (the pre-check is advisory) but must equal the number
    of non-rejected bookings once the run is over.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONTENDED_SHIFT_ID
        if CONTENDED_SHIFT_ID is None:
            resp = self.client.post("/api/v1/shifts/", json={
                "date": "2026-12-01",
                "start_time": "09:00",
                "end_time": "11:00",
                "capacity": 50,
                "price": 150,
            })
            if resp.status_code == 201:
                CONTENDED_SHIFT_ID = resp.json()["id"]
                print(f"\n✓ Created shift {CONTENDED_SHIFT_ID} with 50 seats\n")

    @tag("concurrency")
    @task
    def reserve(self):
        if not CONTENDED_SHIFT_ID:
            return

        with self.client.post(
            "/api/v1/bookings/",
            json=booking_draft(CONTENDED_SHIFT_ID),
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                BOOKING_IDS.append(resp.json()["id"])
                resp.success()
            elif resp.status_code in (409, 503):
                resp.success()  # Expected: full, or "try again"
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class DashboardUser(HttpUser):
    """
    TEST 2: Admins confirming, rejecting and deleting while visitors book

    Run: locust -f locustfile.py --tags admin,concurrency -u 60 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    @tag("admin")
    @task(5)
    def change_status(self):
        if not BOOKING_IDS:
            return
        booking_id = random.choice(BOOKING_IDS)
        with self.client.patch(
            f"/api/v1/bookings/{booking_id}/status",
            json={"status": random.choice(["CONFIRMED", "REJECTED", "PENDING"])},
            name="/api/v1/bookings/{id}/status",
            catch_response=True,
        ) as resp:
            if resp.status_code in (200, 404, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("admin")
    @task(2)
    def check_in(self):
        if not BOOKING_IDS:
            return
        booking_id = random.choice(BOOKING_IDS)
        with self.client.post(
            f"/api/v1/bookings/{booking_id}/attendance",
            name="/api/v1/bookings/{id}/attendance",
            catch_response=True,
        ) as resp:
            if resp.status_code in (200, 404, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("admin")
    @task(1)
    def delete_booking(self):
        if not BOOKING_IDS:
            return
        booking_id = BOOKING_IDS.pop(random.randrange(len(BOOKING_IDS)))
        with self.client.delete(
            f"/api/v1/bookings/{booking_id}",
            name="/api/v1/bookings/{id}",
            catch_response=True,
        ) as resp:
            if resp.status_code in (204, 404):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("admin")
    @task(3)
    def list_shifts(self):
        self.client.get("/api/v1/shifts/")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    @tag("edge")
    @task
    def unknown_shift(self):
        with self.client.post(
            "/api/v1/bookings/",
            json=booking_draft(999999),
            catch_response=True,
        ) as resp:
            if resp.status_code == 404:
                resp.success()
            else:
                resp.failure(f"Expected 404, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_fields(self):
        with self.client.post(
            "/api/v1/bookings/",
            json={"shift_id": 1},
            catch_response=True,
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def zero_capacity_shift(self):
        with self.client.post(
            "/api/v1/shifts/",
            json={"date": "2026-12-01", "start_time": "09:00", "end_time": "10:00", "capacity": 0},
            catch_response=True,
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/bookings/",
            data="not json at all",
            catch_response=True,
        ) as resp:
            if resp.status_code in [400, 422]:
                resp.success()
            else:
                resp.failure(f"Expected 400/422, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_ticket_lookup(self):
        with self.client.get(
            "/api/v1/bookings/lookup?q=99999999",
            name="/api/v1/bookings/lookup",
            catch_response=True,
        ) as resp:
            if resp.status_code == 404:
                resp.success()
            else:
                resp.failure(f"Expected 404, got {resp.status_code}")

"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Reservation metrics
reservation_attempts = Counter(
    'reservation_attempts_total',
    'Total reservation attempts',
    ['result']  # success, shift_full, not_found, allocation_failed
)

reservation_latency = Histogram(
    'reservation_latency_seconds',
    'Reservation latency (allocate + persist + ledger)',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Ledger metrics
tickets_allocated = Counter(
    'tickets_allocated_total',
    'Ticket numbers issued by the allocator'
)

ledger_adjustments = Counter(
    'ledger_adjustments_total',
    'Capacity ledger adjustments',
    ['direction', 'result']  # increment/decrement; committed, missing_shift, failed
)

transaction_conflicts = Counter(
    'transaction_conflicts_total',
    'Compare-and-swap retries caused by concurrent writers',
    ['table']
)

status_transitions = Counter(
    'booking_status_transitions_total',
    'Booking status transitions',
    ['from_status', 'to_status']
)

attendance_checkins = Counter(
    'attendance_checkins_total',
    'Attendance check-ins',
    ['result']  # accepted, rejected
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation(result: str):
    """Record reservation attempt. Result: success, shift_full, not_found, allocation_failed"""
    reservation_attempts.labels(result=result).inc()


def record_ledger_adjustment(delta: int, result: str):
    direction = "increment" if delta > 0 else "decrement"
    ledger_adjustments.labels(direction=direction, result=result).inc()


def record_conflict(table: str):
    transaction_conflicts.labels(table=table).inc()


def record_transition(from_status: str, to_status: str):
    status_transitions.labels(from_status=from_status, to_status=to_status).inc()


def record_checkin(accepted: bool):
    attendance_checkins.labels(result="accepted" if accepted else "rejected").inc()

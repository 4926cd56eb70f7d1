"""
Reservation façade: the public booking action.

  1. allocate a ticket number        (ticket allocator, own transaction)
  2. persist a PENDING booking       (lifecycle manager)
  3. booked += 1 on the shift        (capacity ledger, own transaction)

Ordering matters. The ticket is taken before the booking exists, so a
failure after step 1 burns a number that is never reused (gaps are fine).
A failure after step 2 leaves a booking not yet counted against capacity;
that gap is accepted and repaired by a recount, not rolled back.

The capacity pre-check is the same one the booking wizard does when a
visitor picks a shift. It reads booked outside the ledger transaction, so
simultaneous reservations for the last seat can all pass it and push booked
past capacity. The ledger does not refuse them.
"""

import time

from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.config import get_settings
from shiftbook.core.errors import AllocationFailed, ShiftFull, ShiftNotFound
from shiftbook.core.logging import get_logger
from shiftbook.core.metrics import record_reservation, reservation_latency
from shiftbook.models.booking import Booking
from shiftbook.schemas.booking import BookingCreate
from shiftbook.services.booking_service import create_booking
from shiftbook.services.capacity_ledger import adjust_best_effort
from shiftbook.services.shift_service import get_shift
from shiftbook.services.ticket_allocator import allocate_ticket

logger = get_logger(__name__)


async def reserve(db: AsyncSession, draft: BookingCreate) -> Booking:
    """
    Book a seat on draft.shift_id. The returned booking carries its ticket number.

    Raises ShiftNotFound, ShiftFull (pre-check) or AllocationFailed; in each
    case no booking is created.
    """
    start_time = time.perf_counter()

    try:
        shift = await get_shift(db, draft.shift_id)
    except ShiftNotFound:
        record_reservation("not_found")
        raise

    if get_settings().ENFORCE_CAPACITY_PRECHECK and shift.is_full:
        record_reservation("shift_full")
        logger.warning(
            "reservation_rejected_full",
            shift_id=shift.id,
            booked=shift.booked,
            capacity=shift.capacity,
        )
        raise ShiftFull(shift.id)

    try:
        ticket_number = await allocate_ticket(db)
    except AllocationFailed:
        record_reservation("allocation_failed")
        raise

    booking = await create_booking(db, draft, ticket_number)
    await adjust_best_effort(db, booking.shift_id, 1)

    duration = time.perf_counter() - start_time
    reservation_latency.observe(duration)
    record_reservation("success")
    logger.info(
        "reservation_completed",
        booking_id=booking.id,
        shift_id=booking.shift_id,
        ticket_number=ticket_number,
        duration_ms=round(duration * 1000, 2),
    )
    return booking

"""
Booking lifecycle manager.

Owns booking records and their status transitions, and keeps each shift's
booked counter in step with them through the capacity ledger.

STATE MACHINE
=============

  A booking holds a slot on its shift iff status != REJECTED. Any status
  can move to any other; only moves across REJECTED touch the ledger.

    PENDING   -> CONFIRMED   no capacity change (slot held since creation)
    CONFIRMED -> PENDING     no capacity change
    PENDING   -> REJECTED    ledger -1
    CONFIRMED -> REJECTED    ledger -1
    REJECTED  -> CONFIRMED   ledger +1 (an admin reversing a rejection)
    REJECTED  -> PENDING     ledger +1
    any       -> deleted     ledger -1 first, unless REJECTED

  attended: false -> true once, only while CONFIRMED.

Each transition is two steps: persist the booking, then adjust the ledger.
They are not one unit. A crash in between leaves the booking correct and the
counter off by one until `capacity_ledger.recount` runs; ledger failures are
logged, never surfaced, because the booking record is the source of truth.

Status writes and deletes are conditional on the status that was read, so
two admins acting on the same booking at once never apply the same ledger
delta twice: the loser re-reads and works from the winner's result. Other
fields are last-writer-wins.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, cast, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.config import get_settings
from shiftbook.core.errors import BookingNotFound, InvalidTransition
from shiftbook.core.logging import get_logger
from shiftbook.core.metrics import record_checkin, record_conflict, record_transition
from shiftbook.models.booking import Booking, BookingStatus
from shiftbook.schemas.booking import BookingCreate
from shiftbook.services.capacity_ledger import adjust_best_effort
from shiftbook.services.change_feed import change_feed

logger = get_logger(__name__)

PENDING = BookingStatus.PENDING
CONFIRMED = BookingStatus.CONFIRMED
REJECTED = BookingStatus.REJECTED

# (from, to) -> ledger delta
TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], int] = {
    (PENDING, CONFIRMED): 0,
    (CONFIRMED, PENDING): 0,
    (PENDING, REJECTED): -1,
    (CONFIRMED, REJECTED): -1,
    (REJECTED, CONFIRMED): 1,
    (REJECTED, PENDING): 1,
}


def capacity_delta(old: BookingStatus, new: BookingStatus) -> int:
    """Ledger delta for a status change."""
    if old == new:
        return 0
    return TRANSITIONS[(old, new)]


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()

    if not booking:
        raise BookingNotFound(booking_id)
    return booking


async def create_booking(db: AsyncSession, draft: BookingCreate, ticket_number: int) -> Booking:
    """Persist a new PENDING booking carrying an already-allocated ticket number."""
    booking = Booking(
        **draft.model_dump(),
        status=PENDING.value,
        ticket_number=ticket_number,
        attended=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(booking)
    await db.commit()
    await db.refresh(booking)

    logger.info(
        "booking_created",
        booking_id=booking.id,
        shift_id=booking.shift_id,
        ticket_number=ticket_number,
    )
    await change_feed.publish("bookings", "created", booking.id)
    return booking


async def change_status(db: AsyncSession, booking_id: int, new_status: BookingStatus) -> Booking:
    """
    Admin status change. Setting the current status again is a no-op.

    If another admin changes the booking between our read and our write,
    the write does not land; the booking is re-read and the move is applied
    from its fresh status (or becomes a no-op). Raises BookingNotFound.
    """
    booking = await get_booking(db, booking_id)

    for _ in range(get_settings().TRANSACTION_MAX_ATTEMPTS):
        old_status = booking.booking_status
        if old_status == new_status:
            return booking
        delta = capacity_delta(old_status, new_status)

        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == old_status.value)
            .values(status=new_status.value)
        )
        if result.rowcount == 1:
            break

        # Changed or deleted by another admin since we read it.
        await db.rollback()
        record_conflict(Booking.__tablename__)
        booking = await get_booking(db, booking_id)
    else:
        raise InvalidTransition("Booking kept changing, please try again", reason="CONFLICT")
    await db.commit()

    record_transition(old_status.value, new_status.value)
    logger.info(
        "booking_status_changed",
        booking_id=booking_id,
        shift_id=booking.shift_id,
        from_status=old_status.value,
        to_status=new_status.value,
    )
    await change_feed.publish("bookings", "updated", booking_id)

    if delta:
        await adjust_best_effort(db, booking.shift_id, delta)
    return await get_booking(db, booking_id)


async def delete_booking(db: AsyncSession, booking_id: int) -> None:
    """
    Remove a booking, releasing its slot first if it holds one.

    The delete only lands if the booking still has the status it was read
    with. When it does not, the released slot is taken back and the delete
    is retried from a fresh read; a booking deleted by someone else in the
    meantime raises BookingNotFound.
    """
    for _ in range(get_settings().TRANSACTION_MAX_ATTEMPTS):
        booking = await get_booking(db, booking_id)
        shift_id = booking.shift_id
        status = booking.booking_status

        if status.occupies_slot:
            await adjust_best_effort(db, shift_id, -1)

        result = await db.execute(
            delete(Booking).where(Booking.id == booking_id, Booking.status == status.value)
        )
        if result.rowcount == 1:
            break

        await db.rollback()
        record_conflict(Booking.__tablename__)
        if status.occupies_slot:
            await adjust_best_effort(db, shift_id, 1)
    else:
        raise InvalidTransition("Booking kept changing, please try again", reason="CONFLICT")
    await db.commit()

    logger.info("booking_deleted", booking_id=booking_id, shift_id=shift_id, status=status.value)
    await change_feed.publish("bookings", "deleted", booking_id)


async def mark_attended(db: AsyncSession, booking_id: int) -> Booking:
    """
    Record entry for a confirmed booking, once.

    Raises InvalidTransition for a booking that is not CONFIRMED or has
    already been checked in; the booking is left untouched.
    """
    booking = await get_booking(db, booking_id)
    _check_can_attend(booking)

    # Conditional write: of two concurrent check-ins only one matches.
    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.status == CONFIRMED.value,
            Booking.attended.is_(False),
        )
        .values(attended=True)
    )
    if result.rowcount == 0:
        await db.rollback()
        _check_can_attend(await get_booking(db, booking_id))
        # Status flipped away from CONFIRMED and back while we raced.
        raise InvalidTransition("Booking changed during check-in", reason="CONFLICT")
    await db.commit()

    record_checkin(True)
    logger.info("booking_attended", booking_id=booking_id, ticket_number=booking.ticket_number)
    await change_feed.publish("bookings", "updated", booking_id)
    return await get_booking(db, booking_id)


def _check_can_attend(booking: Booking) -> None:
    if booking.attended:
        record_checkin(False)
        logger.info("checkin_rejected", booking_id=booking.id, reason="already_attended")
        raise InvalidTransition("Ticket has already been used for entry", reason="ALREADY_ATTENDED")
    if booking.booking_status is not CONFIRMED:
        record_checkin(False)
        logger.info("checkin_rejected", booking_id=booking.id, reason="not_confirmed")
        raise InvalidTransition("Only confirmed bookings can be checked in", reason="NOT_CONFIRMED")


async def list_bookings(
    db: AsyncSession,
    shift_id: Optional[int] = None,
    status: Optional[BookingStatus] = None,
    search: Optional[str] = None,
) -> list[Booking]:
    """Bookings newest first, optionally filtered by shift, status and a search term."""
    query = select(Booking)

    if shift_id is not None:
        query = query.where(Booking.shift_id == shift_id)
    if status is not None:
        query = query.where(Booking.status == status.value)
    if search:
        term = f"%{search.strip()}%"
        query = query.where(
            or_(
                cast(Booking.ticket_number, String).like(term),
                Booking.full_name.ilike(term),
                Booking.phone_number.like(term),
                Booking.national_id.like(term),
                Booking.sender_phone.like(term),
            )
        )

    result = await db.execute(
        query.order_by(Booking.created_at.desc(), Booking.id.desc()).execution_options(
            populate_existing=True
        )
    )
    return list(result.scalars().all())


async def find_for_entry(db: AsyncSession, query: str) -> Booking:
    """
    Entry-check lookup: exact ticket number or phone number, as typed by the
    door staff or decoded from a scanned code.
    """
    query = query.strip()
    if not query:
        raise BookingNotFound(query)

    ticket_number = _as_ticket_number(query)
    conditions = [Booking.phone_number == query]
    if ticket_number is not None:
        conditions.insert(0, Booking.ticket_number == ticket_number)

    result = await db.execute(
        select(Booking)
        .where(or_(*conditions))
        .order_by(Booking.created_at.desc())
        .execution_options(populate_existing=True)
    )
    matches = list(result.scalars().all())
    if not matches:
        raise BookingNotFound(query)

    # A ticket-number hit beats a phone-number hit.
    for booking in matches:
        if ticket_number is not None and booking.ticket_number == ticket_number:
            return booking
    return matches[0]


def _as_ticket_number(query: str) -> Optional[int]:
    # Phone numbers are digits too; anything longer than a ticket is a phone.
    if query.isdigit() and len(query) <= 9:
        return int(query)
    return None

"""
Capacity ledger: the only writer of a shift's `booked` counter.

Every adjustment is its own compare-and-swap transaction, so concurrent
+1/-1 calls can never be lost to a read-then-write race.

No ceiling is enforced here. Capacity is checked earlier, when a visitor
picks a shift, and that check can race with other reservations; booked may
therefore briefly exceed capacity. That overshoot is accepted and visible to
admins rather than turned into a write-time rejection.

Adjusting a shift that no longer exists is not an error: deleted shifts
leave their bookings behind and releasing their slots has nothing to update.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.errors import CapacityAdjustFailed, ShiftNotFound
from shiftbook.core.logging import get_logger
from shiftbook.core.metrics import record_ledger_adjustment
from shiftbook.db.transaction import TransactionAborted, run_transaction
from shiftbook.models.booking import Booking, BookingStatus
from shiftbook.models.shift import Shift
from shiftbook.services.change_feed import change_feed

logger = get_logger(__name__)


async def adjust(db: AsyncSession, shift_id: int, delta: int) -> Optional[int]:
    """
    Atomically apply booked += delta. Returns the new booked value, or None
    when the shift does not exist.

    Raises CapacityAdjustFailed if the transaction cannot commit.
    """
    if delta not in (1, -1):
        raise ValueError(f"ledger delta must be +1 or -1, got {delta}")

    def apply(booked):
        return None if booked is None else booked + delta

    try:
        result = await run_transaction(db, Shift, shift_id, "booked", apply)
    except TransactionAborted as e:
        record_ledger_adjustment(delta, "failed")
        raise CapacityAdjustFailed(shift_id, delta) from e

    if not result.committed:
        record_ledger_adjustment(delta, "missing_shift")
        logger.warning("ledger_shift_missing", shift_id=shift_id, delta=delta)
        return None

    record_ledger_adjustment(delta, "committed")
    logger.info(
        "ledger_adjusted",
        shift_id=shift_id,
        delta=delta,
        booked=result.value,
        attempts=result.attempts,
    )
    await change_feed.publish("shifts", "updated", shift_id)
    return result.value


async def adjust_best_effort(db: AsyncSession, shift_id: int, delta: int) -> Optional[int]:
    """
    Adjust as a side effect of a booking change.

    The booking record is the source of truth; the counter is derived. A
    failed adjustment is logged and swallowed so the triggering operation
    still succeeds. `recount` repairs a counter left stale this way.
    """
    try:
        return await adjust(db, shift_id, delta)
    except CapacityAdjustFailed as e:
        logger.error("capacity_adjust_failed", shift_id=e.shift_id, delta=e.delta)
        return None


async def count_occupied(db: AsyncSession, shift_id: int) -> int:
    """Number of bookings currently holding a slot on the shift."""
    result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(Booking.shift_id == shift_id, Booking.status != BookingStatus.REJECTED.value)
    )
    return result.scalar_one()


async def recount(db: AsyncSession, shift_id: int) -> int:
    """
    Reset booked to the number of non-rejected bookings on the shift.

    Admin repair for counters left stale by a crash between a booking write
    and its ledger adjustment. Adjustments that land between the count and
    the write are overwritten; run it on a quiet shift.
    """
    occupied = await count_occupied(db, shift_id)

    def reset(booked):
        return None if booked is None else occupied

    try:
        result = await run_transaction(db, Shift, shift_id, "booked", reset)
    except TransactionAborted as e:
        raise CapacityAdjustFailed(shift_id, 0) from e

    if not result.committed:
        raise ShiftNotFound(shift_id)

    logger.info("ledger_recounted", shift_id=shift_id, booked=occupied)
    await change_feed.publish("shifts", "updated", shift_id)
    return occupied

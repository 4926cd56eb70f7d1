"""
Shift service handling admin CRUD on the shift catalogue.

`booked` is never written here: new shifts start at 0 and every later
change goes through the capacity ledger. Edits to the other fields are
last-writer-wins.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.errors import ShiftNotFound
from shiftbook.core.logging import get_logger
from shiftbook.models.shift import Shift
from shiftbook.schemas.shift import ShiftCreate, ShiftUpdate
from shiftbook.services.change_feed import change_feed

logger = get_logger(__name__)


async def add_shift(db: AsyncSession, shift_data: ShiftCreate) -> Shift:
    """Create a shift with no seats booked."""
    shift = Shift(**shift_data.model_dump(), booked=0, version=1)
    db.add(shift)
    await db.commit()
    await db.refresh(shift)

    logger.info("shift_created", shift_id=shift.id, date=shift.date, capacity=shift.capacity)
    await change_feed.publish("shifts", "created", shift.id)
    return shift


async def get_shift(db: AsyncSession, shift_id: int) -> Shift:
    result = await db.execute(
        select(Shift).where(Shift.id == shift_id).execution_options(populate_existing=True)
    )
    shift = result.scalar_one_or_none()

    if not shift:
        raise ShiftNotFound(shift_id)
    return shift


async def list_shifts(db: AsyncSession) -> list[Shift]:
    result = await db.execute(
        select(Shift)
        .order_by(Shift.date.asc(), Shift.start_time.asc(), Shift.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def update_shift(db: AsyncSession, shift_id: int, shift_data: ShiftUpdate) -> Shift:
    """Admin edit of date, times, capacity and price."""
    result = await db.execute(
        update(Shift).where(Shift.id == shift_id).values(**shift_data.model_dump())
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ShiftNotFound(shift_id)
    await db.commit()

    logger.info("shift_updated", shift_id=shift_id, capacity=shift_data.capacity)
    await change_feed.publish("shifts", "updated", shift_id)
    return await get_shift(db, shift_id)


async def delete_shift(db: AsyncSession, shift_id: int) -> None:
    """
    Remove the shift only. Its bookings keep their shift_id and no ledger
    adjustment is made for them.
    """
    result = await db.execute(delete(Shift).where(Shift.id == shift_id))
    if result.rowcount == 0:
        await db.rollback()
        raise ShiftNotFound(shift_id)
    await db.commit()

    logger.info("shift_deleted", shift_id=shift_id)
    await change_feed.publish("shifts", "deleted", shift_id)

"""
Dashboard figures computed from the booking records.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.models.booking import Booking, BookingStatus
from shiftbook.models.shift import Shift
from shiftbook.schemas.stats import StatsResponse


async def get_stats(db: AsyncSession) -> StatsResponse:
    counts = dict(
        (await db.execute(select(Booking.status, func.count()).group_by(Booking.status))).all()
    )
    attended = (
        await db.execute(select(func.count()).select_from(Booking).where(Booking.attended.is_(True)))
    ).scalar_one()

    # Revenue only counts confirmed bookings whose shift still exists.
    revenue = (
        await db.execute(
            select(func.coalesce(func.sum(Shift.price), 0))
            .select_from(Booking)
            .join(Shift, Shift.id == Booking.shift_id)
            .where(Booking.status == BookingStatus.CONFIRMED.value)
        )
    ).scalar_one()

    return StatsResponse(
        total_bookings=sum(counts.values()),
        pending_bookings=counts.get(BookingStatus.PENDING.value, 0),
        confirmed_bookings=counts.get(BookingStatus.CONFIRMED.value, 0),
        rejected_bookings=counts.get(BookingStatus.REJECTED.value, 0),
        attended_bookings=attended,
        total_revenue=float(revenue),
    )

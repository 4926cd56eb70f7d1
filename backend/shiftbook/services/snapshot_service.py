"""
Collection snapshots for the read surface.

Consumers of the change feed do not receive diffs: after each event they get
the whole current collection, the same shape the dashboard renders from.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.schemas.admin import AdminResponse
from shiftbook.schemas.booking import BookingResponse
from shiftbook.schemas.shift import ShiftResponse
from shiftbook.services.admin_service import list_admins
from shiftbook.services.booking_service import list_bookings
from shiftbook.services.shift_service import list_shifts


async def load_snapshot(db: AsyncSession, collection: str) -> list[dict]:
    if collection == "shifts":
        return [ShiftResponse.model_validate(s).model_dump(mode="json") for s in await list_shifts(db)]
    if collection == "bookings":
        return [BookingResponse.model_validate(b).model_dump(mode="json") for b in await list_bookings(db)]
    if collection == "admins":
        return [AdminResponse.model_validate(a).model_dump(mode="json") for a in await list_admins(db)]
    raise ValueError(f"unknown collection: {collection!r}")

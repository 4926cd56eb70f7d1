"""
Shift endpoints. Listing and detail are public; the rest is dashboard-only.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.db.session import get_db
from shiftbook.schemas.shift import ShiftCreate, ShiftResponse, ShiftUpdate
from shiftbook.services.capacity_ledger import recount
from shiftbook.services.shift_service import add_shift, delete_shift, get_shift, list_shifts, update_shift

router = APIRouter(prefix="/shifts", tags=["Shifts"])


@router.post("/", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
async def create_shift_endpoint(shift_data: ShiftCreate, db: AsyncSession = Depends(get_db)):
    """Create a shift. Seats booked always start at 0."""
    return await add_shift(db, shift_data)


@router.get("/", response_model=list[ShiftResponse])
async def list_shifts_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_shifts(db)


@router.get("/{shift_id}", response_model=ShiftResponse)
async def get_shift_endpoint(shift_id: int, db: AsyncSession = Depends(get_db)):
    return await get_shift(db, shift_id)


@router.put("/{shift_id}", response_model=ShiftResponse)
async def update_shift_endpoint(
    shift_id: int,
    shift_data: ShiftUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit date, times, capacity or price. Seats booked are not editable."""
    return await update_shift(db, shift_id, shift_data)


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift_endpoint(shift_id: int, db: AsyncSession = Depends(get_db)):
    """Delete the shift only; its bookings are kept."""
    await delete_shift(db, shift_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{shift_id}/recount", response_model=ShiftResponse)
async def recount_shift_endpoint(shift_id: int, db: AsyncSession = Depends(get_db)):
    """Reset seats booked to the number of non-rejected bookings."""
    await recount(db, shift_id)
    return await get_shift(db, shift_id)

"""
Booking endpoints: public reservation plus the dashboard's lifecycle actions.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.db.session import get_db
from shiftbook.models.booking import BookingStatus
from shiftbook.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from shiftbook.services.booking_service import (
    change_status,
    delete_booking,
    find_for_entry,
    get_booking,
    list_bookings,
    mark_attended,
)
from shiftbook.services.reservation_service import reserve

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(draft: BookingCreate, db: AsyncSession = Depends(get_db)):
    """
    Reserve a seat on a shift.

    The booking is created PENDING with a fresh ticket number and counts
    against the shift's capacity straight away. Returns 409 if the shift is
    already full and 503 if no ticket number could be issued (try again).
    """
    return await reserve(db, draft)


@router.get("/", response_model=list[BookingResponse])
async def list_bookings_endpoint(
    shift_id: Optional[int] = Query(None),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """Bookings newest first."""
    return await list_bookings(db, shift_id=shift_id, status=status_filter, search=search)


@router.get("/lookup", response_model=BookingResponse)
async def lookup_booking_endpoint(
    q: str = Query(..., min_length=1, max_length=32),
    db: AsyncSession = Depends(get_db),
):
    """Entry check: find a booking by exact ticket number or phone number."""
    return await find_for_entry(db, q)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(booking_id: int, db: AsyncSession = Depends(get_db)):
    return await get_booking(db, booking_id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def change_status_endpoint(
    booking_id: int,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Confirm, reject or reopen a booking. Shift capacity follows the status."""
    return await change_status(db, booking_id, body.status)


@router.post("/{booking_id}/attendance", response_model=BookingResponse)
async def mark_attended_endpoint(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Check a confirmed booking in at the door. A ticket can be used once."""
    return await mark_attended(db, booking_id)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking_endpoint(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a booking, releasing its seat unless it was rejected."""
    await delete_booking(db, booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

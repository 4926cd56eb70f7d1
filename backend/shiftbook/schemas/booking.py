"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from shiftbook.models.booking import BookingStatus


class BookingCreate(BaseModel):
    """Booking draft submitted by the public booking flow."""

    shift_id: int
    full_name: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., min_length=5, max_length=32)
    group_name: str = Field(..., min_length=1, max_length=100)
    application_number: str = Field(..., min_length=1, max_length=100)
    national_id: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=255)
    university: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)
    user_id: Optional[str] = Field(None, max_length=128)
    transaction_id: Optional[str] = Field(None, max_length=100)
    sender_phone: Optional[str] = Field(None, max_length=32)


class BookingResponse(BaseModel):
    id: int
    shift_id: int
    full_name: str
    phone_number: str
    group_name: str
    application_number: str
    national_id: Optional[str]
    email: Optional[str]
    university: Optional[str]
    notes: Optional[str]
    user_id: Optional[str]
    transaction_id: Optional[str]
    sender_phone: Optional[str]
    status: BookingStatus
    ticket_number: int
    attended: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingStatusUpdate(BaseModel):
    status: BookingStatus

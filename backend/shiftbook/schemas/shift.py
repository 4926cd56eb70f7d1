"""
Pydantic schemas for shift request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ShiftCreate(BaseModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    capacity: int = Field(..., gt=0, le=100000)
    price: float = Field(0, ge=0)

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ShiftUpdate(ShiftCreate):
    """Admin edit. `booked` is deliberately absent: only the ledger writes it."""


class ShiftResponse(BaseModel):
    id: int
    date: str
    start_time: str
    end_time: str
    capacity: int
    booked: int
    remaining: int
    price: float
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

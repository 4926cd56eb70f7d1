from shiftbook.schemas.shift import ShiftCreate, ShiftUpdate, ShiftResponse
from shiftbook.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from shiftbook.schemas.admin import AdminCreate, AdminResponse
from shiftbook.schemas.stats import StatsResponse

__all__ = [
    "ShiftCreate", "ShiftUpdate", "ShiftResponse",
    "BookingCreate", "BookingResponse", "BookingStatusUpdate",
    "AdminCreate", "AdminResponse",
    "StatsResponse",
]

from pydantic import BaseModel


class StatsResponse(BaseModel):
    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    rejected_bookings: int
    attended_bookings: int
    total_revenue: float

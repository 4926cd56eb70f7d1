from shiftbook.models.shift import Shift
from shiftbook.models.booking import Booking, BookingStatus
from shiftbook.models.ticket_counter import TicketCounter, TICKET_COUNTER_ID
from shiftbook.models.admin import Admin

__all__ = ["Shift", "Booking", "BookingStatus", "TicketCounter", "TICKET_COUNTER_ID", "Admin"]

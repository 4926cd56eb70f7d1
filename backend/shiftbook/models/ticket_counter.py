"""
Ticket counter: a single logical row holding the last issued ticket number.

A missing row means no ticket has been issued yet (the allocator treats it
as the configured starting value).
"""

from sqlalchemy import Column, Integer

from shiftbook.db.base import Base

TICKET_COUNTER_ID = 1


class TicketCounter(Base):
    __tablename__ = "ticket_counters"

    id = Column(Integer, primary_key=True, autoincrement=False)
    value = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<TicketCounter(value={self.value})>"

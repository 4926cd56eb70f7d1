"""
Booking model: one applicant's reservation against one shift.

Key design decisions:
- `shift_id` is a plain reference, not a foreign key: deleting a shift leaves
  its bookings in place (orphans are a presentation concern)
- `ticket_number` is unique at the database level as a backstop to the
  allocator's own guarantee
- A booking occupies a capacity slot iff status != REJECTED
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint

from shiftbook.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"

    @property
    def occupies_slot(self) -> bool:
        return self is not BookingStatus.REJECTED


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    shift_id = Column(Integer, nullable=False, index=True)

    # Applicant identity
    user_id = Column(String(128), nullable=True)
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=False, index=True)
    national_id = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    university = Column(String(255), nullable=True)
    group_name = Column(String(100), nullable=False)
    application_number = Column(String(100), nullable=False)
    notes = Column(String(1000), nullable=True)

    # Payment reference (transfer id and the phone the money was sent from)
    transaction_id = Column(String(100), nullable=True)
    sender_phone = Column(String(32), nullable=True)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    ticket_number = Column(Integer, nullable=False, unique=True, index=True)
    attended = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'REJECTED')", name="check_booking_status"
        ),
    )

    @property
    def booking_status(self) -> BookingStatus:
        return BookingStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, ticket={self.ticket_number}, "
            f"shift={self.shift_id}, status={self.status})>"
        )

"""
Shift model: a bookable time slot with a fixed capacity.

Key design decisions:
- `booked` is a denormalized occupied-slot counter, written only by the
  capacity ledger through a compare-and-swap on `version`
- No CHECK constraint ties booked to capacity: transient overshoot under
  concurrent reservations is tolerated and corrected, not prevented
- Index on (date, start_time) for the public shift listing order
"""

from sqlalchemy import Column, Integer, String, Float, Index, CheckConstraint

from shiftbook.db.base import Base, TimestampMixin


class Shift(Base, TimestampMixin):
    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    capacity = Column(Integer, nullable=False)
    booked = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0)

    # Compare-and-swap version for ledger writes
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="check_shift_capacity_positive"),
        CheckConstraint("price >= 0", name="check_shift_price_non_negative"),
        Index("ix_shifts_date_start", "date", "start_time"),
    )

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.booked, 0)

    @property
    def is_full(self) -> bool:
        return self.booked >= self.capacity

    def __repr__(self) -> str:
        return f"<Shift(id={self.id}, date={self.date}, booked={self.booked}/{self.capacity})>"

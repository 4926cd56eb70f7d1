"""
Domain errors for the reservation ledger.

Every error carries a stable code and a user-safe message. The API layer maps
codes to HTTP status codes; services never raise HTTPException themselves.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    ALLOCATION_FAILED = "ALLOCATION_FAILED"
    CAPACITY_ADJUST_FAILED = "CAPACITY_ADJUST_FAILED"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    SHIFT_NOT_FOUND = "SHIFT_NOT_FOUND"
    ADMIN_NOT_FOUND = "ADMIN_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    SHIFT_FULL = "SHIFT_FULL"
    ADMIN_EXISTS = "ADMIN_EXISTS"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class AllocationFailed(DomainError):
    """The ticket counter transaction could not commit."""

    def __init__(self, reason: str = "") -> None:
        super().__init__(
            code=ErrorCode.ALLOCATION_FAILED,
            message="Could not issue a ticket number, please try again",
        )
        self.reason = reason


class CapacityAdjustFailed(DomainError):
    """A ledger transaction on a shift's booked counter could not commit."""

    def __init__(self, shift_id: int, delta: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_ADJUST_FAILED,
            message="Capacity update failed",
        )
        self.shift_id = shift_id
        self.delta = delta


class NotFound(DomainError):
    """Base for lookups of records that no longer exist."""


class BookingNotFound(NotFound):
    def __init__(self, booking_id: int | str) -> None:
        super().__init__(code=ErrorCode.BOOKING_NOT_FOUND, message="Booking not found")
        self.booking_id = booking_id


class ShiftNotFound(NotFound):
    def __init__(self, shift_id: int) -> None:
        super().__init__(code=ErrorCode.SHIFT_NOT_FOUND, message="Shift not found")
        self.shift_id = shift_id


class AdminNotFound(NotFound):
    def __init__(self, admin_id: int) -> None:
        super().__init__(code=ErrorCode.ADMIN_NOT_FOUND, message="Admin not found")
        self.admin_id = admin_id


class InvalidTransition(DomainError):
    """A status or attendance change the state machine does not allow."""

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TRANSITION, message=message)
        self.reason = reason


class ShiftFull(DomainError):
    def __init__(self, shift_id: int) -> None:
        super().__init__(code=ErrorCode.SHIFT_FULL, message="This shift is fully booked")
        self.shift_id = shift_id


class AdminExists(DomainError):
    def __init__(self, email: str) -> None:
        super().__init__(code=ErrorCode.ADMIN_EXISTS, message="Email already registered as admin")
        self.email = email

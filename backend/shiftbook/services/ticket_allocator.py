"""
Ticket allocator: issues unique, strictly increasing ticket numbers.

The counter is a single row updated through the compare-and-swap
transaction, so correctness reduces to the store's conditional UPDATE:
two concurrent callers can read the same value, but only one of them can
commit `current + 1`; the other re-reads and commits `current + 2`.

Numbers are never reused. A number allocated for a reservation that later
fails is simply skipped, so the sequence may have gaps.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.config import get_settings
from shiftbook.core.errors import AllocationFailed
from shiftbook.core.logging import get_logger
from shiftbook.core.metrics import tickets_allocated
from shiftbook.db.transaction import TransactionAborted, run_transaction
from shiftbook.models.ticket_counter import TICKET_COUNTER_ID, TicketCounter

logger = get_logger(__name__)


async def allocate_ticket(db: AsyncSession) -> int:
    """
    Reserve the next ticket number.

    Raises AllocationFailed if the counter transaction never commits.
    """
    start = get_settings().TICKET_COUNTER_START

    def next_number(current):
        return (current if current is not None else start) + 1

    try:
        result = await run_transaction(db, TicketCounter, TICKET_COUNTER_ID, "value", next_number)
    except TransactionAborted as e:
        logger.error("ticket_allocation_failed", error=str(e))
        raise AllocationFailed(str(e)) from e

    tickets_allocated.inc()
    logger.info("ticket_allocated", ticket_number=result.value, attempts=result.attempts)
    return result.value


async def current_ticket(db: AsyncSession) -> int:
    """Last issued ticket number (the starting value if none was issued)."""
    value = (
        await db.execute(select(TicketCounter.value).where(TicketCounter.id == TICKET_COUNTER_ID))
    ).scalar_one_or_none()
    return value if value is not None else get_settings().TICKET_COUNTER_START

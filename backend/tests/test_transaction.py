"""
Tests for the compare-and-swap transaction primitive.
"""

import asyncio

import pytest

from shiftbook.db.transaction import TransactionAborted, run_transaction
from shiftbook.models.shift import Shift
from shiftbook.models.ticket_counter import TicketCounter
from shiftbook.services.shift_service import get_shift


@pytest.mark.asyncio
async def test_update_fn_sees_current_value(db_session, make_shift):
    shift = await make_shift(booked=3)
    seen = []

    def double(current):
        seen.append(current)
        return current * 2

    result = await run_transaction(db_session, Shift, shift.id, "booked", double)

    assert result.committed
    assert result.value == 6
    assert seen == [3]
    assert (await get_shift(db_session, shift.id)).booked == 6


@pytest.mark.asyncio
async def test_returning_none_aborts_without_writing(db_session, make_shift):
    shift = await make_shift(booked=4)

    result = await run_transaction(db_session, Shift, shift.id, "booked", lambda current: None)

    assert not result.committed
    assert result.value == 4
    assert (await get_shift(db_session, shift.id)).booked == 4


@pytest.mark.asyncio
async def test_missing_row_is_inserted(db_session):
    seen = []

    def start(current):
        seen.append(current)
        return 7

    result = await run_transaction(db_session, TicketCounter, 1, "value", start)

    assert result.committed
    assert seen == [None]
    assert (await db_session.get(TicketCounter, 1)).value == 7


@pytest.mark.asyncio
async def test_concurrent_increments_all_land(session_factory, make_shift):
    shift = await make_shift(capacity=100, booked=0)
    shift_id = shift.id

    async def increment():
        async with session_factory() as session:
            return await run_transaction(session, Shift, shift_id, "booked", lambda v: v + 1)

    results = await asyncio.gather(*(increment() for _ in range(8)))

    assert sorted(r.value for r in results) == list(range(1, 9))
    async with session_factory() as session:
        assert (await get_shift(session, shift_id)).booked == 8


@pytest.mark.asyncio
async def test_no_attempts_left_raises(db_session, make_shift):
    shift = await make_shift(booked=0)
    calls = []

    def increment(current):
        calls.append(current)
        return current + 1

    with pytest.raises(TransactionAborted):
        await run_transaction(db_session, Shift, shift.id, "booked", increment, max_attempts=0)
    assert calls == []


@pytest.mark.asyncio
async def test_constraint_violation_is_not_retried(db_session, make_shift):
    """A CHECK failure on an existing row aborts on the first attempt."""
    shift = await make_shift(capacity=5)
    shift_id = shift.id
    calls = []

    def zero_capacity(current):
        calls.append(current)
        return 0

    with pytest.raises(TransactionAborted):
        await run_transaction(db_session, Shift, shift_id, "capacity", zero_capacity, max_attempts=25)

    assert calls == [5]
    assert (await get_shift(db_session, shift_id)).capacity == 5

"""
Pytest fixtures for test database, client, and seed data.

Each test gets a fresh SQLite file so that ledger transactions, which open
their own sessions, see the same data as the test. Set TEST_DATABASE_URL to
run the suite against PostgreSQL instead.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shiftbook.main import app
from shiftbook.api.routes.feed import get_session_factory
from shiftbook.db.base import Base
from shiftbook.db.session import get_db, make_engine
from shiftbook.models.booking import Booking, BookingStatus
from shiftbook.models.shift import Shift
from shiftbook.schemas.booking import BookingCreate


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"
    test_engine = make_engine(url)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get a session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_shift(db_session: AsyncSession):
    """Factory inserting a shift directly, bypassing the service layer."""

    async def _make_shift(capacity: int = 10, booked: int = 0, price: float = 100.0, **fields) -> Shift:
        shift = Shift(
            date=fields.get("date", "2026-11-20"),
            start_time=fields.get("start_time", "09:00"),
            end_time=fields.get("end_time", "11:00"),
            capacity=capacity,
            booked=booked,
            price=price,
            version=1,
        )
        db_session.add(shift)
        await db_session.commit()
        await db_session.refresh(shift)
        return shift

    return _make_shift


@pytest_asyncio.fixture
async def test_shift(make_shift) -> Shift:
    """A shift with 10 seats and none booked."""
    return await make_shift(capacity=10)


@pytest.fixture
def draft():
    """Factory for booking drafts."""

    def _draft(shift_id: int, **overrides) -> BookingCreate:
        fields = {
            "shift_id": shift_id,
            "full_name": "Nour Hassan",
            "phone_number": "01012345678",
            "group_name": "A",
            "application_number": "42",
        }
        fields.update(overrides)
        return BookingCreate(**fields)

    return _draft


@pytest.fixture
def make_booking(db_session: AsyncSession):
    """Factory inserting a booking row without touching the ledger."""
    counter = {"next": 5000}

    async def _make_booking(shift_id: int, status: BookingStatus = BookingStatus.PENDING, **fields) -> Booking:
        counter["next"] += 1
        booking = Booking(
            shift_id=shift_id,
            full_name=fields.get("full_name", "Seed Applicant"),
            phone_number=fields.get("phone_number", "01100000000"),
            group_name="B",
            application_number="7",
            status=status.value,
            ticket_number=fields.get("ticket_number", counter["next"]),
            attended=fields.get("attended", False),
        )
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _make_booking

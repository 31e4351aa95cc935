from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leave_engine.db import get_session
from leave_engine.main import app
from leave_engine.models import SQLModel
from leave_engine.models.employee import Employee
from leave_engine.models.enums import EmploymentStatus, LeaveStatus
from leave_engine.models.leave import LeaveRecord, LeaveType

if TYPE_CHECKING:
    import uuid
    from collections.abc import AsyncIterator, Awaitable, Callable
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

    MakeEmployee = Callable[..., Awaitable[Employee]]
    AddLeaveRecord = Callable[..., Awaitable[LeaveRecord]]


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create a throwaway SQLite database with every table for one test."""
    _engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'leave_engine.db'}")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Yield a database session for seeding and calling services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    """Async HTTP client whose requests each get their own session on the test database."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


@pytest.fixture
async def leave_type(db_session: AsyncSession) -> LeaveType:
    """A committed Vacation leave type."""
    vacation = LeaveType(name="Vacation", color_scheme="blue")
    db_session.add(vacation)
    await db_session.commit()
    return vacation


@pytest.fixture
def make_employee(db_session: AsyncSession) -> MakeEmployee:
    """Factory that commits an employee and returns it."""

    async def _make(
        hiring_date: date | None = date(2023, 3, 10),
        carried_forward_days: int = 0,
        employment_status: EmploymentStatus = EmploymentStatus.ACTIVE,
        first_name: str = "Test",
        last_name: str = "Employee",
    ) -> Employee:
        employee = Employee(
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}@example.com",
            hiring_date=hiring_date,
            carried_forward_days=carried_forward_days,
            employment_status=employment_status.value,
        )
        db_session.add(employee)
        await db_session.commit()
        return employee

    return _make


@pytest.fixture
def add_leave_record(db_session: AsyncSession, leave_type: LeaveType) -> AddLeaveRecord:
    """Factory that commits a leave record directly, as the approval workflow would leave it."""

    async def _add(
        employee_id: uuid.UUID,
        start_date: date,
        end_date: date,
        status: LeaveStatus = LeaveStatus.APPROVED,
        leave_type_id: uuid.UUID | None = None,
    ) -> LeaveRecord:
        record = LeaveRecord(
            employee_id=employee_id,
            leave_type_id=leave_type_id or leave_type.id,
            start_date=start_date,
            end_date=end_date,
            status=status.value,
        )
        db_session.add(record)
        await db_session.commit()
        return record

    return _add

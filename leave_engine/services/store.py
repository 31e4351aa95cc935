"""Narrow read/write contracts between the leave engine and the database.

Every call is bounded by ``store_timeout_seconds`` and any driver failure or
timeout surfaces as :class:`StoreUnavailable`. Rows cross this boundary as
validated pydantic transfer objects wherever the caller only reads them.
"""

# ruff: noqa: TC003
from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col

from leave_engine.config import get_settings
from leave_engine.exceptions import EmployeeNotFound, LeaveTypeNotFound, StoreUnavailable
from leave_engine.models.carryover import CarryoverEntry
from leave_engine.models.employee import Employee
from leave_engine.models.enums import CarryoverSource, EmploymentStatus, LeaveStatus
from leave_engine.models.leave import LeaveRecord, LeaveType
from leave_engine.schemas.employee import ActiveEmployee, EmployeeRecord
from leave_engine.schemas.leave import LeaveSpan

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_call(operation: str) -> AsyncIterator[None]:
    """Bound a store operation in time and translate driver failures."""
    timeout = get_settings().store_timeout_seconds
    try:
        async with asyncio.timeout(timeout):
            yield
    except IntegrityError:
        raise
    except TimeoutError as exc:
        logger.error("Store call %s timed out after %.1fs", operation, timeout)
        raise StoreUnavailable(f"Leave store timed out during {operation}") from exc
    except SQLAlchemyError as exc:
        logger.error("Store call %s failed: %s", operation, exc)
        raise StoreUnavailable(f"Leave store failed during {operation}") from exc


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


async def get_employee(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeRecord:
    """Fetch the engine-relevant employee fields. Raises EmployeeNotFound."""
    async with _store_call("get_employee"):
        result = await session.execute(select(Employee).where(col(Employee.id) == employee_id))
        employee = result.scalar_one_or_none()
    if employee is None:
        raise EmployeeNotFound(employee_id)
    return EmployeeRecord.model_validate(employee)


async def lock_employee(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeRecord:
    """Fetch an employee with a row lock held until the transaction ends.

    Serializes balance-dependent writes for one employee; employees never
    contend with each other.
    """
    async with _store_call("lock_employee"):
        result = await session.execute(select(Employee).where(col(Employee.id) == employee_id).with_for_update())
        employee = result.scalar_one_or_none()
    if employee is None:
        raise EmployeeNotFound(employee_id)
    return EmployeeRecord.model_validate(employee)


async def list_active_employees_with_hiring_date(session: AsyncSession) -> list[ActiveEmployee]:
    """List active employees that have a hiring date, oldest hire first."""
    async with _store_call("list_active_employees_with_hiring_date"):
        result = await session.execute(
            select(Employee)
            .where(
                col(Employee.employment_status) == EmploymentStatus.ACTIVE.value,
                col(Employee.hiring_date).is_not(None),
            )
            .order_by(col(Employee.hiring_date), col(Employee.id))
        )
        employees = list(result.scalars().all())
    return [ActiveEmployee.model_validate(e) for e in employees]


async def update_carried_forward(session: AsyncSession, employee_id: uuid.UUID, days: int) -> None:
    """Overwrite an employee's carried-forward days within the caller's transaction."""
    async with _store_call("update_carried_forward"):
        result = await session.execute(
            update(Employee).where(col(Employee.id) == employee_id).values(carried_forward_days=days)
        )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        raise EmployeeNotFound(employee_id)


# ---------------------------------------------------------------------------
# Leave types and records
# ---------------------------------------------------------------------------


async def get_leave_type(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    """Fetch a leave type. Raises LeaveTypeNotFound."""
    async with _store_call("get_leave_type"):
        result = await session.execute(select(LeaveType).where(col(LeaveType.id) == leave_type_id))
        leave_type = result.scalar_one_or_none()
    if leave_type is None:
        raise LeaveTypeNotFound(leave_type_id)
    return leave_type


async def list_leave_types(session: AsyncSession) -> list[LeaveType]:
    async with _store_call("list_leave_types"):
        result = await session.execute(select(LeaveType).order_by(col(LeaveType.name)))
        return list(result.scalars().all())


async def query_leave_spans(
    session: AsyncSession,
    employee_id: uuid.UUID,
    status: LeaveStatus,
    range_start: date | None = None,
    range_end: date | None = None,
) -> list[LeaveSpan]:
    """Return spans of the employee's records in ``status`` whose start date is in range.

    Either bound may be omitted to leave that side open.
    """
    filters = [
        col(LeaveRecord.employee_id) == employee_id,
        col(LeaveRecord.status) == status.value,
    ]
    if range_start is not None:
        filters.append(col(LeaveRecord.start_date) >= range_start)
    if range_end is not None:
        filters.append(col(LeaveRecord.start_date) <= range_end)

    async with _store_call("query_leave_spans"):
        result = await session.execute(
            select(col(LeaveRecord.start_date), col(LeaveRecord.end_date), col(LeaveRecord.leave_type_id)).where(
                *filters
            )
        )
        rows = result.all()
    return [LeaveSpan(start_date=r.start_date, end_date=r.end_date, leave_type_id=r.leave_type_id) for r in rows]


async def query_approved_leave_records(
    session: AsyncSession,
    employee_id: uuid.UUID,
    range_start: date,
    range_end: date,
) -> list[LeaveSpan]:
    """Approved records whose start date falls inside ``[range_start, range_end]``."""
    return await query_leave_spans(session, employee_id, LeaveStatus.APPROVED, range_start, range_end)


async def insert_leave_record(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    start_date: date,
    end_date: date,
    reason: str | None,
) -> LeaveRecord:
    """Insert a pending leave record within the caller's transaction."""
    record = LeaveRecord(
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        status=LeaveStatus.PENDING.value,
    )
    async with _store_call("insert_leave_record"):
        session.add(record)
        await session.flush()
    return record


async def list_leave_records(
    session: AsyncSession,
    employee_id: uuid.UUID,
    status: LeaveStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[LeaveRecord], int]:
    """List an employee's leave records, newest first, with the unpaginated total."""
    filters = [col(LeaveRecord.employee_id) == employee_id]
    if status is not None:
        filters.append(col(LeaveRecord.status) == status.value)

    async with _store_call("list_leave_records"):
        count_result = await session.execute(select(func.count()).select_from(LeaveRecord).where(*filters))
        total = count_result.scalar_one()
        result = await session.execute(
            select(LeaveRecord)
            .where(*filters)
            .order_by(col(LeaveRecord.created_at).desc(), col(LeaveRecord.start_date).desc())
            .offset(offset)
            .limit(limit)
        )
        records = list(result.scalars().all())
    return records, total


# ---------------------------------------------------------------------------
# Carryover entries
# ---------------------------------------------------------------------------


async def get_system_carryover_entry(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_year_start: date,
) -> CarryoverEntry | None:
    """Return the year-end carryover already recorded for this leave year, if any."""
    async with _store_call("get_system_carryover_entry"):
        result = await session.execute(
            select(CarryoverEntry).where(
                col(CarryoverEntry.employee_id) == employee_id,
                col(CarryoverEntry.leave_year_start) == leave_year_start,
                col(CarryoverEntry.source) == CarryoverSource.SYSTEM.value,
            )
        )
        return result.scalar_one_or_none()


async def insert_carryover_entry(session: AsyncSession, entry: CarryoverEntry) -> CarryoverEntry:
    async with _store_call("insert_carryover_entry"):
        session.add(entry)
        await session.flush()
    return entry


async def commit(session: AsyncSession) -> None:
    """Commit the caller's unit of work."""
    async with _store_call("commit"):
        await session.commit()

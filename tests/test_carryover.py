"""Tests for year-end carryover: cap, idempotency, failure isolation, lookahead, status and manual overrides."""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select
from sqlmodel import col

from leave_engine.exceptions import EmployeeNotFound, StoreUnavailable
from leave_engine.models.audit import AuditLog
from leave_engine.models.carryover import CarryoverEntry
from leave_engine.models.employee import Employee
from leave_engine.models.enums import EmploymentStatus
from leave_engine.services import carryover, store
from leave_engine.services.balance import get_detailed_balance
from leave_engine.services.carryover import (
    get_carryover_status,
    get_employees_needing_carryover,
    process_bulk_carryover,
    process_employee_carryover,
    set_manual_carryover,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.leave import LeaveRecord
    from leave_engine.schemas.balance import LeaveYearWindow
    from leave_engine.schemas.employee import EmployeeRecord

    MakeEmployee = Callable[..., Awaitable[Employee]]
    AddLeaveRecord = Callable[..., Awaitable[LeaveRecord]]

ADMIN_ID = uuid.uuid4()
ADMIN_HEADERS = {"X-User-Id": str(ADMIN_ID), "X-Role": "admin"}


async def _carried_forward(session: AsyncSession, employee_id: uuid.UUID) -> int:
    result = await session.execute(select(col(Employee.carried_forward_days)).where(col(Employee.id) == employee_id))
    return result.scalar_one()


async def _count_entries(session: AsyncSession, employee_id: uuid.UUID, source: str) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(CarryoverEntry)
        .where(col(CarryoverEntry.employee_id) == employee_id, col(CarryoverEntry.source) == source)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Single employee
# ---------------------------------------------------------------------------


async def test_carryover_is_capped(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    """60 unused days carry over as 48 and the next entitlement is 72."""
    employee = await make_employee(hiring_date=date(2022, 1, 15), carried_forward_days=48)
    employee_id = employee.id
    await add_leave_record(employee_id, date(2024, 2, 1), date(2024, 2, 12))

    result = await process_employee_carryover(db_session, employee_id, date(2025, 1, 20))

    assert result.success is True
    assert result.already_processed is False
    assert result.previous_balance == 60
    assert result.carried_forward == 48
    assert result.new_annual_entitlement == 72
    assert result.leave_year_start == date(2024, 1, 15)
    assert result.leave_year_end == date(2025, 1, 14)
    assert await _carried_forward(db_session, employee_id) == 48


async def test_carryover_below_cap_carries_full_balance(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10))
    employee_id = employee.id
    await add_leave_record(employee_id, date(2024, 8, 1), date(2024, 8, 10))

    result = await process_employee_carryover(db_session, employee_id, date(2025, 3, 12))

    assert result.success is True
    assert result.previous_balance == 14
    assert result.carried_forward == 14
    assert result.new_annual_entitlement == 38
    assert await _carried_forward(db_session, employee_id) == 14


async def test_carryover_of_exhausted_balance_is_zero(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10), carried_forward_days=20)
    employee_id = employee.id
    await add_leave_record(employee_id, date(2024, 4, 1), date(2024, 5, 20))

    result = await process_employee_carryover(db_session, employee_id, date(2025, 3, 12))

    assert result.previous_balance == 0
    assert result.carried_forward == 0
    assert result.new_annual_entitlement == 24
    assert await _carried_forward(db_session, employee_id) == 0


async def test_carryover_rerun_for_same_leave_year_is_noop(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10))
    employee_id = employee.id
    await add_leave_record(employee_id, date(2024, 8, 1), date(2024, 8, 10))

    first = await process_employee_carryover(db_session, employee_id, date(2025, 3, 12))
    second = await process_employee_carryover(db_session, employee_id, date(2025, 6, 1))

    assert second.success is True
    assert second.already_processed is True
    assert second.carried_forward == first.carried_forward == 14
    assert second.previous_balance == 14
    assert await _carried_forward(db_session, employee_id) == 14
    assert await _count_entries(db_session, employee_id, "SYSTEM") == 1


async def test_carryover_is_audited(db_session: AsyncSession, make_employee: MakeEmployee) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10), carried_forward_days=5)
    employee_id = employee.id

    await process_employee_carryover(db_session, employee_id, date(2025, 3, 12), actor_id=ADMIN_ID)

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "CARRYOVER"))
    log = result.scalar_one()
    assert log.actor_id == ADMIN_ID
    assert log.before_json == {"employee_id": str(employee_id), "carried_forward_days": 5}
    assert log.after_json is not None
    assert log.after_json["carried_forward"] == 29


async def test_carryover_missing_hiring_date_is_reported(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee(hiring_date=None, carried_forward_days=12)
    employee_id = employee.id

    result = await process_employee_carryover(db_session, employee_id, date(2025, 3, 1))

    assert result.success is False
    assert result.error is not None
    assert "hiring date" in result.error
    assert await _carried_forward(db_session, employee_id) == 12


async def test_carryover_unknown_employee_is_reported(db_session: AsyncSession) -> None:
    result = await process_employee_carryover(db_session, uuid.uuid4(), date(2025, 3, 1))
    assert result.success is False
    assert result.error is not None
    assert "not found" in result.error


async def test_carryover_before_first_anniversary_is_skipped(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee(hiring_date=date(2024, 5, 20), carried_forward_days=7)
    employee_id = employee.id

    result = await process_employee_carryover(db_session, employee_id, date(2025, 3, 1))

    assert result.skipped is True
    assert result.success is False
    assert result.error is not None
    assert "2025-05-20" in result.error
    assert await _carried_forward(db_session, employee_id) == 7
    assert await _count_entries(db_session, employee_id, "SYSTEM") == 0


async def test_carryover_leaves_year_in_progress_untouched(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    """A run days before the anniversary closes the year that already ended, not the one about to."""
    employee = await make_employee(hiring_date=date(2023, 3, 10))
    employee_id = employee.id
    await add_leave_record(employee_id, date(2023, 4, 1), date(2023, 4, 24))

    result = await process_employee_carryover(db_session, employee_id, date(2025, 3, 5))

    assert result.success is True
    assert result.leave_year_start == date(2023, 3, 10)
    assert result.leave_year_end == date(2024, 3, 9)
    assert result.previous_balance == 0
    assert result.carried_forward == 0
    assert await _carried_forward(db_session, employee_id) == 0

    snapshot = await get_detailed_balance(db_session, employee_id, date(2025, 3, 5))
    assert snapshot.leave_year_start == date(2024, 3, 10)
    assert snapshot.current_balance == 24


async def test_carryover_runs_either_side_of_anniversary(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10))
    employee_id = employee.id
    await add_leave_record(employee_id, date(2023, 6, 1), date(2023, 6, 4))
    await add_leave_record(employee_id, date(2024, 5, 1), date(2024, 5, 10))

    before = await process_employee_carryover(db_session, employee_id, date(2025, 3, 5))
    on_anniversary = await process_employee_carryover(db_session, employee_id, date(2025, 3, 10))
    rerun = await process_employee_carryover(db_session, employee_id, date(2025, 3, 11))

    assert before.leave_year_start == date(2023, 3, 10)
    assert before.carried_forward == 20
    assert on_anniversary.already_processed is False
    assert on_anniversary.leave_year_start == date(2024, 3, 10)
    assert on_anniversary.previous_balance == 34
    assert on_anniversary.carried_forward == 34
    assert on_anniversary.new_annual_entitlement == 58
    assert rerun.already_processed is True
    assert rerun.carried_forward == 34
    assert await _carried_forward(db_session, employee_id) == 34
    assert await _count_entries(db_session, employee_id, "SYSTEM") == 2


async def test_carryover_locks_employee_before_reading_balance(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10))
    calls: list[str] = []

    original_lock = store.lock_employee
    original_balance = carryover.balance_for_window

    async def _lock(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeRecord:
        calls.append("lock")
        return await original_lock(session, employee_id)

    async def _balance(session: AsyncSession, record: EmployeeRecord, window: LeaveYearWindow) -> object:
        calls.append("balance")
        return await original_balance(session, record, window)

    monkeypatch.setattr(store, "lock_employee", _lock)
    monkeypatch.setattr(carryover, "balance_for_window", _balance)

    result = await process_employee_carryover(db_session, employee.id, date(2025, 3, 12))

    assert result.success is True
    assert calls == ["lock", "balance"]


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


async def test_bulk_carryover_skips_ineligible_employees(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    active = await make_employee(first_name="Alice", hiring_date=date(2023, 3, 10))
    terminated = await make_employee(
        first_name="Terry",
        hiring_date=date(2021, 6, 1),
        employment_status=EmploymentStatus.TERMINATED,
    )
    unanchored = await make_employee(first_name="Dave", hiring_date=None)
    active_id, terminated_id, unanchored_id = active.id, terminated.id, unanchored.id

    bulk = await process_bulk_carryover(db_session, date(2025, 3, 1))

    assert bulk.processed == 1
    assert bulk.succeeded == 1
    assert bulk.failed == 0
    assert [r.employee_id for r in bulk.results] == [active_id]
    assert await _carried_forward(db_session, terminated_id) == 0
    assert await _carried_forward(db_session, unanchored_id) == 0


async def test_bulk_carryover_counts_new_hires_as_skipped(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    veteran = await make_employee(first_name="Alice", hiring_date=date(2023, 3, 10))
    new_hire = await make_employee(first_name="Nina", hiring_date=date(2024, 9, 1))
    veteran_id, new_hire_id = veteran.id, new_hire.id

    bulk = await process_bulk_carryover(db_session, date(2025, 3, 1))

    assert bulk.processed == 2
    assert bulk.succeeded == 1
    assert bulk.skipped == 1
    assert bulk.failed == 0
    by_id = {r.employee_id: r for r in bulk.results}
    assert by_id[new_hire_id].skipped is True
    assert by_id[veteran_id].carried_forward == 24
    assert await _count_entries(db_session, new_hire_id, "SYSTEM") == 0


async def test_bulk_carryover_isolates_failures(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    alice = await make_employee(first_name="Alice", hiring_date=date(2023, 3, 10))
    bob = await make_employee(first_name="Bob", hiring_date=date(2021, 6, 1))
    alice_id, bob_id = alice.id, bob.id

    original = carryover.balance_for_window

    async def _flaky(session: AsyncSession, employee: EmployeeRecord, window: LeaveYearWindow) -> object:
        if employee.id == bob_id:
            raise StoreUnavailable
        return await original(session, employee, window)

    monkeypatch.setattr(carryover, "balance_for_window", _flaky)

    bulk = await process_bulk_carryover(db_session, date(2025, 3, 1))

    assert bulk.processed == 2
    assert bulk.succeeded == 1
    assert bulk.failed == 1
    by_id = {r.employee_id: r for r in bulk.results}
    assert by_id[bob_id].success is False
    assert by_id[bob_id].error is not None
    assert by_id[alice_id].success is True
    assert await _carried_forward(db_session, alice_id) == 24
    assert await _carried_forward(db_session, bob_id) == 0


async def test_bulk_carryover_survives_unexpected_error(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    alice = await make_employee(first_name="Alice", hiring_date=date(2023, 3, 10))
    bob = await make_employee(first_name="Bob", hiring_date=date(2021, 6, 1))
    alice_id, bob_id = alice.id, bob.id

    original = carryover.process_employee_carryover

    async def _explodes_for_bob(
        session: AsyncSession,
        employee_id: uuid.UUID,
        today: date | None = None,
        *,
        actor_id: uuid.UUID,
    ) -> object:
        if employee_id == bob_id:
            msg = "boom"
            raise RuntimeError(msg)
        return await original(session, employee_id, today, actor_id=actor_id)

    monkeypatch.setattr(carryover, "process_employee_carryover", _explodes_for_bob)

    bulk = await process_bulk_carryover(db_session, date(2025, 3, 1))

    assert bulk.processed == 2
    assert bulk.failed == 1
    by_id = {r.employee_id: r for r in bulk.results}
    assert by_id[bob_id].error == "boom"
    assert by_id[alice_id].success is True


async def test_bulk_carryover_with_no_employees(db_session: AsyncSession) -> None:
    bulk = await process_bulk_carryover(db_session, date(2025, 3, 1))
    assert bulk.processed == 0
    assert bulk.results == []


# ---------------------------------------------------------------------------
# Lookahead
# ---------------------------------------------------------------------------


async def test_employees_needing_carryover_window(db_session: AsyncSession, make_employee: MakeEmployee) -> None:
    today_hire = await make_employee(first_name="Today", hiring_date=date(2020, 6, 1))
    edge_hire = await make_employee(first_name="Edge", hiring_date=date(2021, 6, 8))
    await make_employee(first_name="Late", hiring_date=date(2019, 6, 9))
    await make_employee(first_name="Passed", hiring_date=date(2018, 5, 31))
    await make_employee(
        first_name="Gone",
        hiring_date=date(2020, 6, 2),
        employment_status=EmploymentStatus.TERMINATED,
    )
    await make_employee(first_name="Nodate", hiring_date=None)

    due = await get_employees_needing_carryover(db_session, 7, date(2024, 6, 1))

    assert set(due) == {today_hire.id, edge_hire.id}


async def test_employees_needing_carryover_across_year_end(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee(hiring_date=date(2020, 1, 2))

    due = await get_employees_needing_carryover(db_session, 7, date(2024, 12, 28))

    assert due == [employee.id]


async def test_employees_needing_carryover_default_lookahead(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee(hiring_date=date(2021, 6, 8))
    await make_employee(first_name="Other", hiring_date=date(2021, 6, 9))

    due = await get_employees_needing_carryover(db_session, today=date(2024, 6, 1))

    assert due == [employee.id]


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


async def test_carryover_status_lists_active_employees(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    add_leave_record: AddLeaveRecord,
) -> None:
    employee = await make_employee(
        first_name="Alice",
        last_name="Johnson",
        hiring_date=date(2023, 3, 10),
        carried_forward_days=10,
    )
    await add_leave_record(employee.id, date(2024, 5, 1), date(2024, 5, 5))
    await make_employee(first_name="Terry", employment_status=EmploymentStatus.TERMINATED)

    status = await get_carryover_status(db_session, date(2024, 4, 1))

    assert status.total == 1
    item = status.items[0]
    assert item.employee_id == employee.id
    assert item.name == "Alice Johnson"
    assert item.carried_forward == 10
    assert item.current_balance == 29
    assert item.next_anniversary == date(2025, 3, 10)
    assert item.error is None


async def test_carryover_status_reports_balance_errors(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    employee = await make_employee(hiring_date=date(2023, 3, 10))

    async def _broken(*args: object, **kwargs: object) -> object:
        raise StoreUnavailable

    monkeypatch.setattr(carryover, "balance_for_employee", _broken)

    status = await get_carryover_status(db_session, date(2024, 4, 1))

    assert status.items[0].employee_id == employee.id
    assert status.items[0].current_balance is None
    assert status.items[0].error is not None


# ---------------------------------------------------------------------------
# Manual override
# ---------------------------------------------------------------------------


async def test_manual_carryover_clamps_to_cap(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    caplog: pytest.LogCaptureFixture,
) -> None:
    employee = await make_employee()
    employee_id = employee.id

    with caplog.at_level(logging.WARNING, logger="leave_engine.services.carryover"):
        response = await set_manual_carryover(db_session, employee_id, 60, actor_id=ADMIN_ID)

    assert response.carried_forward == 48
    assert response.requested_days == 60
    assert response.clamped is True
    assert "adjusted from 60 to 48" in caplog.text
    assert await _carried_forward(db_session, employee_id) == 48


async def test_manual_carryover_clamps_negative_to_zero(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee(carried_forward_days=15)
    employee_id = employee.id

    response = await set_manual_carryover(db_session, employee_id, -5, actor_id=ADMIN_ID)

    assert response.carried_forward == 0
    assert response.clamped is True
    assert await _carried_forward(db_session, employee_id) == 0


async def test_manual_carryover_within_range(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
    caplog: pytest.LogCaptureFixture,
) -> None:
    employee = await make_employee()
    employee_id = employee.id

    with caplog.at_level(logging.WARNING, logger="leave_engine.services.carryover"):
        response = await set_manual_carryover(db_session, employee_id, 20, actor_id=ADMIN_ID)

    assert response.carried_forward == 20
    assert response.clamped is False
    assert "adjusted" not in caplog.text
    assert await _carried_forward(db_session, employee_id) == 20


async def test_manual_carryover_records_admin_entry(
    db_session: AsyncSession,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee()
    employee_id = employee.id

    await set_manual_carryover(db_session, employee_id, 20, actor_id=ADMIN_ID)
    await set_manual_carryover(db_session, employee_id, 30, actor_id=ADMIN_ID)

    assert await _count_entries(db_session, employee_id, "ADMIN") == 2
    result = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "MANUAL_CARRYOVER"))
    logs = list(result.scalars().all())
    assert len(logs) == 2
    assert all(log.actor_id == ADMIN_ID for log in logs)


async def test_manual_carryover_unknown_employee(db_session: AsyncSession) -> None:
    with pytest.raises(EmployeeNotFound):
        await set_manual_carryover(db_session, uuid.uuid4(), 10, actor_id=ADMIN_ID)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


async def test_carryover_endpoints_require_admin(async_client: AsyncClient, make_employee: MakeEmployee) -> None:
    employee = await make_employee()
    headers = {"X-User-Id": str(employee.id), "X-Role": "employee"}

    responses = [
        await async_client.get("/carryover/status", headers=headers),
        await async_client.get("/carryover/upcoming", headers=headers),
        await async_client.post("/carryover/batch", headers=headers),
        await async_client.post(f"/carryover/employees/{employee.id}", headers=headers),
        await async_client.put(f"/carryover/employees/{employee.id}", json={"days": 48}, headers=headers),
    ]

    assert [r.status_code for r in responses] == [403] * 5


async def test_run_carryover_endpoint(async_client: AsyncClient, make_employee: MakeEmployee) -> None:
    employee = await make_employee(hiring_date=date.today() - timedelta(days=400))

    resp = await async_client.post(f"/carryover/employees/{employee.id}", headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["carried_forward"] == 24
    assert data["new_annual_entitlement"] == 48


async def test_run_carryover_endpoint_reports_failure_in_body(
    async_client: AsyncClient,
    make_employee: MakeEmployee,
) -> None:
    employee = await make_employee(hiring_date=None)

    resp = await async_client.post(f"/carryover/employees/{employee.id}", headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json()["success"] is False


async def test_batch_endpoint(async_client: AsyncClient, make_employee: MakeEmployee) -> None:
    await make_employee(first_name="Alice", hiring_date=date.today() - timedelta(days=400))
    await make_employee(first_name="Bob", hiring_date=date.today() - timedelta(days=800))

    resp = await async_client.post("/carryover/batch", headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["processed"] == 2
    assert data["succeeded"] == 2


async def test_upcoming_endpoint(async_client: AsyncClient, make_employee: MakeEmployee) -> None:
    soon = date.today() + timedelta(days=3)
    later = date.today() + timedelta(days=30)
    employee = await make_employee(first_name="Soon", hiring_date=date(soon.year - 4, soon.month, soon.day))
    await make_employee(first_name="Later", hiring_date=date(later.year - 4, later.month, later.day))

    resp = await async_client.get("/carryover/upcoming", params={"days_ahead": 7}, headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json() == {"days_ahead": 7, "employee_ids": [str(employee.id)], "total": 1}


async def test_upcoming_endpoint_rejects_negative_lookahead(async_client: AsyncClient) -> None:
    resp = await async_client.get("/carryover/upcoming", params={"days_ahead": -1}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422


async def test_manual_carryover_endpoint(async_client: AsyncClient, make_employee: MakeEmployee) -> None:
    employee = await make_employee()

    resp = await async_client.put(f"/carryover/employees/{employee.id}", json={"days": 60}, headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json() == {
        "employee_id": str(employee.id),
        "requested_days": 60,
        "carried_forward": 48,
        "clamped": True,
    }

    status = await async_client.get("/carryover/status", headers=ADMIN_HEADERS)
    assert status.status_code == 200
    assert status.json()["items"][0]["carried_forward"] == 48


async def test_manual_carryover_endpoint_unknown_employee(async_client: AsyncClient) -> None:
    resp = await async_client.put(f"/carryover/employees/{uuid.uuid4()}", json={"days": 10}, headers=ADMIN_HEADERS)
    assert resp.status_code == 404

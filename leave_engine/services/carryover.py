"""Year-end carryover processing.

Closes an employee's most recently ended leave year: its unused balance,
capped at MAX_CARRYOVER_DAYS, becomes the carry of the year that follows.
The leave year still in progress is never valued or changed.

Runs are triggered externally (an admin action or an outside scheduler using
the anniversary lookahead); nothing in this module schedules itself.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING

from leave_engine.config import get_settings
from leave_engine.exceptions import AppError, MissingHiringDate, NoCompletedLeaveYear
from leave_engine.models.carryover import CarryoverEntry
from leave_engine.models.employee import MAX_CARRYOVER_DAYS
from leave_engine.models.enums import AuditAction, AuditEntityType, CarryoverSource, EmploymentStatus
from leave_engine.schemas.carryover import (
    BulkCarryoverResult,
    CarryoverResult,
    CarryoverStatusItem,
    CarryoverStatusResponse,
    ManualCarryoverResponse,
)
from leave_engine.schemas.employee import EmployeeRecord
from leave_engine.services import store
from leave_engine.services.audit import SYSTEM_ACTOR, model_to_audit_dict, values_to_audit_dict, write_audit_log
from leave_engine.services.balance import balance_for_employee, balance_for_window, compute_annual_entitlement
from leave_engine.services.leave_year import anniversary_in_year, closed_leave_year, next_anniversary

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Single employee
# ---------------------------------------------------------------------------


async def _carry_over(
    session: AsyncSession,
    employee_id: uuid.UUID,
    today: date | None,
    actor_id: uuid.UUID,
) -> CarryoverResult:
    employee = await store.lock_employee(session, employee_id)
    if employee.hiring_date is None:
        raise MissingHiringDate(employee_id)
    if today is None:
        today = date.today()

    window = closed_leave_year(employee.hiring_date, today)
    if window is None:
        first_anniversary = anniversary_in_year(employee.hiring_date, employee.hiring_date.year + 1)
        raise NoCompletedLeaveYear(employee_id, first_anniversary)

    result = CarryoverResult(
        employee_id=employee_id,
        leave_year_start=window.start,
        leave_year_end=window.end,
    )

    existing = await store.get_system_carryover_entry(session, employee_id, window.start)
    if existing is not None:
        logger.info(
            "Carryover already processed for employee=%s leave_year_start=%s: %d days",
            employee_id,
            window.start,
            existing.carried_forward,
        )
        result.previous_balance = existing.previous_balance or 0
        result.carried_forward = existing.carried_forward
        result.new_annual_entitlement = compute_annual_entitlement(existing.carried_forward)
        result.already_processed = True
        result.success = True
        return result

    # The recorded carry is still the one in force during the closed year.
    balance = await balance_for_window(session, employee, window)
    carry_amount = min(balance.current_balance, MAX_CARRYOVER_DAYS)

    await store.update_carried_forward(session, employee_id, carry_amount)
    entry = await store.insert_carryover_entry(
        session,
        CarryoverEntry(
            employee_id=employee_id,
            leave_year_start=window.start,
            leave_year_end=window.end,
            previous_balance=balance.current_balance,
            carried_forward=carry_amount,
            source=CarryoverSource.SYSTEM.value,
            actor_id=actor_id,
        ),
    )
    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.CARRYOVER,
        entity_id=entry.id,
        action=AuditAction.CARRYOVER,
        before_json=values_to_audit_dict(
            employee_id=employee_id,
            carried_forward_days=employee.carried_forward_days,
        ),
        after_json=model_to_audit_dict(entry),
    )
    await store.commit(session)

    result.previous_balance = balance.current_balance
    result.carried_forward = carry_amount
    result.new_annual_entitlement = compute_annual_entitlement(carry_amount)
    result.success = True
    logger.info(
        "Processed carryover for employee=%s leave_year=%s..%s: balance=%d carried=%d",
        employee_id,
        window.start,
        window.end,
        balance.current_balance,
        carry_amount,
    )
    return result


async def process_employee_carryover(
    session: AsyncSession,
    employee_id: uuid.UUID,
    today: date | None = None,
    *,
    actor_id: uuid.UUID = SYSTEM_ACTOR,
) -> CarryoverResult:
    """Close the employee's most recently ended leave year.

    The unused balance of the leave year that ended before the one containing
    ``today`` becomes the carry of the year in progress. Running again for the
    same closed year returns the recorded outcome instead of carrying over a
    second time. Before the first anniversary there is nothing to close and
    the result is marked ``skipped``.

    Never raises for engine or store failures: the result carries
    ``success=False`` and the error message instead.
    """
    try:
        return await _carry_over(session, employee_id, today, actor_id)
    except NoCompletedLeaveYear as exc:
        logger.info("Carryover skipped for employee=%s: %s", employee_id, exc.message)
        await session.rollback()
        return CarryoverResult(employee_id=employee_id, skipped=True, error=exc.message)
    except AppError as exc:
        logger.warning("Carryover failed for employee=%s: %s", employee_id, exc.message)
        await session.rollback()
        return CarryoverResult(employee_id=employee_id, error=exc.message)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


async def process_bulk_carryover(
    session: AsyncSession,
    today: date | None = None,
    *,
    actor_id: uuid.UUID = SYSTEM_ACTOR,
) -> BulkCarryoverResult:
    """Process carryover for every active employee with a hiring date.

    Employees are processed one after another, each in its own transaction.
    A failure for one employee is recorded in the results and does not stop
    the run or undo anyone else's carryover.
    """
    bulk = BulkCarryoverResult()
    employees = await store.list_active_employees_with_hiring_date(session)
    if not employees:
        logger.info("Bulk carryover: no active employees found")
        return bulk

    logger.info("Bulk carryover: processing %d employees", len(employees))

    for employee in employees:
        bulk.processed += 1
        try:
            result = await process_employee_carryover(session, employee.id, today, actor_id=actor_id)
        except Exception as exc:
            logger.exception("Carryover failed for employee=%s", employee.id)
            await session.rollback()
            result = CarryoverResult(employee_id=employee.id, error=str(exc) or type(exc).__name__)

        bulk.results.append(result)
        if result.skipped:
            bulk.skipped += 1
        elif result.success:
            bulk.succeeded += 1
        else:
            bulk.failed += 1

    logger.info(
        "Bulk carryover complete: %d/%d succeeded, %d skipped",
        bulk.succeeded,
        bulk.processed,
        bulk.skipped,
    )
    return bulk


# ---------------------------------------------------------------------------
# Lookahead and status
# ---------------------------------------------------------------------------


async def get_employees_needing_carryover(
    session: AsyncSession,
    days_ahead: int | None = None,
    today: date | None = None,
) -> list[uuid.UUID]:
    """Active employees whose next anniversary falls in ``[today, today + days_ahead]``."""
    if days_ahead is None:
        days_ahead = get_settings().carryover_lookahead_days
    if today is None:
        today = date.today()
    check_until = today + timedelta(days=days_ahead)

    employees = await store.list_active_employees_with_hiring_date(session)
    due = [e.id for e in employees if next_anniversary(e.hiring_date, today) <= check_until]

    logger.info("Found %d employees with an anniversary in the next %d days", len(due), days_ahead)
    return due


async def get_carryover_status(session: AsyncSession, today: date | None = None) -> CarryoverStatusResponse:
    """Carryover state of every active employee, for the admin view.

    An employee whose balance cannot be computed is still listed, with the
    error instead of a balance.
    """
    if today is None:
        today = date.today()

    employees = await store.list_active_employees_with_hiring_date(session)
    items: list[CarryoverStatusItem] = []
    for employee in employees:
        current_balance: int | None = None
        error: str | None = None
        try:
            record = EmployeeRecord(
                id=employee.id,
                hiring_date=employee.hiring_date,
                carried_forward_days=employee.carried_forward_days,
                employment_status=EmploymentStatus.ACTIVE,
            )
            current_balance = (await balance_for_employee(session, record, today)).current_balance
        except AppError as exc:
            error = exc.message

        items.append(
            CarryoverStatusItem(
                employee_id=employee.id,
                name=employee.display_name,
                hiring_date=employee.hiring_date,
                carried_forward=employee.carried_forward_days,
                current_balance=current_balance,
                next_anniversary=next_anniversary(employee.hiring_date, today, inclusive=False),
                error=error,
            )
        )

    return CarryoverStatusResponse(items=items, total=len(items))


# ---------------------------------------------------------------------------
# Manual override
# ---------------------------------------------------------------------------


async def set_manual_carryover(
    session: AsyncSession,
    employee_id: uuid.UUID,
    days: int,
    *,
    actor_id: uuid.UUID,
) -> ManualCarryoverResponse:
    """Set an employee's carried-forward days directly, bypassing the balance.

    The value is clamped to ``[0, MAX_CARRYOVER_DAYS]``.
    """
    valid_days = max(0, min(days, MAX_CARRYOVER_DAYS))
    if valid_days != days:
        logger.warning(
            "Manual carryover for employee=%s adjusted from %d to %d (max: %d)",
            employee_id,
            days,
            valid_days,
            MAX_CARRYOVER_DAYS,
        )

    employee = await store.lock_employee(session, employee_id)
    await store.update_carried_forward(session, employee_id, valid_days)
    entry = await store.insert_carryover_entry(
        session,
        CarryoverEntry(
            employee_id=employee_id,
            requested_days=days,
            carried_forward=valid_days,
            source=CarryoverSource.ADMIN.value,
            actor_id=actor_id,
        ),
    )
    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee_id,
        action=AuditAction.MANUAL_CARRYOVER,
        before_json=values_to_audit_dict(carried_forward_days=employee.carried_forward_days),
        after_json=values_to_audit_dict(
            carried_forward_days=valid_days,
            requested_days=days,
            carryover_entry_id=entry.id,
        ),
    )
    await store.commit(session)

    logger.info("Set manual carryover for employee=%s: %d days", employee_id, valid_days)
    return ManualCarryoverResponse(
        employee_id=employee_id,
        requested_days=days,
        carried_forward=valid_days,
        clamped=valid_days != days,
    )

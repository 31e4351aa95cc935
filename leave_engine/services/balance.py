# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from leave_engine.exceptions import MissingHiringDate
from leave_engine.models.employee import MAX_CARRYOVER_DAYS
from leave_engine.models.enums import LeaveStatus
from leave_engine.schemas.balance import BalanceSnapshot, LifetimeStatistics
from leave_engine.services import store
from leave_engine.services.leave_year import resolve_leave_year
from leave_engine.services.usage import inclusive_day_count, used_days

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.balance import LeaveYearWindow
    from leave_engine.schemas.employee import EmployeeRecord

logger = logging.getLogger(__name__)

BASE_ENTITLEMENT_DAYS = 24
MAX_ANNUAL_ENTITLEMENT_DAYS = BASE_ENTITLEMENT_DAYS + MAX_CARRYOVER_DAYS

# Leave type name fragments counted by lifetime statistics, in match order.
_LIFETIME_BUCKETS = ("vacation", "sick", "personal", "casual")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def effective_carryover(carried_forward: int) -> int:
    """Carried-forward days clamped to ``[0, MAX_CARRYOVER_DAYS]``."""
    return min(max(carried_forward, 0), MAX_CARRYOVER_DAYS)


def compute_annual_entitlement(carried_forward: int) -> int:
    """Base entitlement plus capped carryover; always within ``[24, 72]``."""
    return BASE_ENTITLEMENT_DAYS + effective_carryover(carried_forward)


def compute_current_balance(annual_entitlement: int, used_this_year: int) -> int:
    """Remaining days, floored at zero."""
    return max(0, annual_entitlement - used_this_year)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def balance_for_employee(
    session: AsyncSession,
    employee: EmployeeRecord,
    today: date | None = None,
) -> BalanceSnapshot:
    """Compute the balance of an already loaded employee.

    Raises MissingHiringDate when there is no anchor for the leave year.
    """
    if employee.hiring_date is None:
        raise MissingHiringDate(employee.id)
    if today is None:
        today = date.today()

    return await balance_for_window(session, employee, resolve_leave_year(employee.hiring_date, today))


async def balance_for_window(
    session: AsyncSession,
    employee: EmployeeRecord,
    window: LeaveYearWindow,
) -> BalanceSnapshot:
    """Value one leave year with the carry currently recorded on the employee."""
    used = await used_days(session, employee.id, window)

    carried = effective_carryover(employee.carried_forward_days)
    entitlement = compute_annual_entitlement(carried)
    current = compute_current_balance(entitlement, used)

    logger.debug(
        "Balance for employee=%s leave_year=%s..%s entitlement=%d carried=%d used=%d current=%d",
        employee.id,
        window.start,
        window.end,
        entitlement,
        carried,
        used,
        current,
    )

    return BalanceSnapshot(
        current_balance=current,
        annual_entitlement=entitlement,
        used_this_year=used,
        carried_forward=carried,
        leave_year_start=window.start,
        leave_year_end=window.end,
    )


async def get_detailed_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    today: date | None = None,
) -> BalanceSnapshot:
    """Full balance breakdown for an employee in the leave year containing ``today``."""
    employee = await store.get_employee(session, employee_id)
    return await balance_for_employee(session, employee, today)


async def get_my_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    today: date | None = None,
) -> int:
    """Current balance as a plain number, for display."""
    snapshot = await get_detailed_balance(session, employee_id, today)
    return snapshot.current_balance


async def get_lifetime_statistics(session: AsyncSession, employee_id: uuid.UUID) -> LifetimeStatistics:
    """Approved days since hiring, bucketed by leave type name.

    Days on types matching no bucket still count towards ``total``.
    """
    await store.get_employee(session, employee_id)
    leave_types = await store.list_leave_types(session)
    spans = await store.query_leave_spans(session, employee_id, LeaveStatus.APPROVED)

    names = {lt.id: lt.name.lower() for lt in leave_types}
    totals = dict.fromkeys(_LIFETIME_BUCKETS, 0)
    grand_total = 0

    for span in spans:
        days = inclusive_day_count(span.start_date, span.end_date)
        grand_total += days
        name = names.get(span.leave_type_id, "") if span.leave_type_id is not None else ""
        bucket = next((b for b in _LIFETIME_BUCKETS if b in name), None)
        if bucket is not None:
            totals[bucket] += days

    return LifetimeStatistics(total=grand_total, **totals)

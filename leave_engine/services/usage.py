# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from leave_engine.models.enums import LeaveStatus
from leave_engine.services import store

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.balance import LeaveYearWindow
    from leave_engine.schemas.leave import LeaveSpan


def inclusive_day_count(start_date: date, end_date: date) -> int:
    """Number of calendar days in ``[start_date, end_date]``."""
    return (end_date - start_date).days + 1


def sum_span_days(spans: Iterable[LeaveSpan]) -> int:
    return sum(inclusive_day_count(s.start_date, s.end_date) for s in spans)


async def used_days(session: AsyncSession, employee_id: uuid.UUID, window: LeaveYearWindow) -> int:
    """Approved days whose start date falls inside the leave year.

    A store failure propagates as StoreUnavailable; it is never read as zero.
    """
    spans = await store.query_approved_leave_records(session, employee_id, window.start, window.end)
    return sum_span_days(spans)


async def pending_days(session: AsyncSession, employee_id: uuid.UUID, window: LeaveYearWindow) -> int:
    """Days on pending requests whose start date falls inside the leave year."""
    spans = await store.query_leave_spans(session, employee_id, LeaveStatus.PENDING, window.start, window.end)
    return sum_span_days(spans)

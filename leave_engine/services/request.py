# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from leave_engine.exceptions import InsufficientBalance, InvalidRange
from leave_engine.models.enums import AuditAction, AuditEntityType, LeaveStatus
from leave_engine.schemas.balance import LeaveYearWindow
from leave_engine.schemas.leave import LeaveRecordListResponse, LeaveRecordResponse
from leave_engine.services import store
from leave_engine.services.audit import model_to_audit_dict, write_audit_log
from leave_engine.services.balance import balance_for_employee
from leave_engine.services.usage import inclusive_day_count, pending_days

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.leave import LeaveRecord
    from leave_engine.schemas.leave import CreateLeaveRequestPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_record_response(record: LeaveRecord) -> LeaveRecordResponse:
    """Map a leave record model to its response schema."""
    return LeaveRecordResponse(
        id=record.id,
        employee_id=record.employee_id,
        leave_type_id=record.leave_type_id,
        start_date=record.start_date,
        end_date=record.end_date,
        duration_days=inclusive_day_count(record.start_date, record.end_date),
        status=LeaveStatus(record.status),
        reason=record.reason,
        created_at=record.created_at,
        approved_by=record.approved_by,
        approved_at=record.approved_at,
        comments=record.comments,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    employee_id: uuid.UUID,
    payload: CreateLeaveRequestPayload,
    today: date | None = None,
    *,
    actor_id: uuid.UUID | None = None,
) -> LeaveRecordResponse:
    """Admit a new leave request as a pending record.

    Flow:
    1. Reject a reversed date range
    2. Lock the employee row for the rest of the transaction
    3. Verify the leave type exists
    4. Compute the balance for the leave year containing ``today``
    5. Subtract days already held by pending requests in that year
    6. Reject if the request exceeds what is left; nothing is written
    7. Insert the pending record and audit it
    8. Commit

    The row lock makes steps 4 through 8 one unit per employee, so two
    concurrent requests cannot both spend the same days.
    """
    # 1. Range check.
    if payload.end_date < payload.start_date:
        raise InvalidRange(payload.start_date, payload.end_date)
    days_requested = inclusive_day_count(payload.start_date, payload.end_date)

    # 2. Per-employee lock.
    employee = await store.lock_employee(session, employee_id)

    # 3. Leave type.
    await store.get_leave_type(session, payload.leave_type_id)

    # 4. Balance.
    balance = await balance_for_employee(session, employee, today)

    # 5. Pending holds.
    window = LeaveYearWindow(start=balance.leave_year_start, end=balance.leave_year_end)
    held = await pending_days(session, employee_id, window)
    available = max(0, balance.current_balance - held)

    # 6. Admission decision.
    if days_requested > available:
        logger.info(
            "Rejected leave request for employee=%s: requested=%d available=%d (balance=%d pending=%d)",
            employee_id,
            days_requested,
            available,
            balance.current_balance,
            held,
        )
        raise InsufficientBalance(days_requested, available)

    # 7. Insert and audit.
    record = await store.insert_leave_record(
        session,
        employee_id=employee_id,
        leave_type_id=payload.leave_type_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )
    await write_audit_log(
        session,
        actor_id=actor_id or employee_id,
        entity_type=AuditEntityType.LEAVE_RECORD,
        entity_id=record.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(record),
    )

    # 8. Commit.
    await store.commit(session)
    logger.info(
        "Admitted leave record=%s for employee=%s: %d days (%s..%s)",
        record.id,
        employee_id,
        days_requested,
        payload.start_date,
        payload.end_date,
    )
    return _build_leave_record_response(record)


async def list_leave_records(
    session: AsyncSession,
    employee_id: uuid.UUID,
    status_filter: LeaveStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRecordListResponse:
    """List an employee's leave records, newest first."""
    await store.get_employee(session, employee_id)
    records, total = await store.list_leave_records(session, employee_id, status_filter, offset, limit)
    return LeaveRecordListResponse(
        items=[_build_leave_record_response(r) for r in records],
        total=total,
    )

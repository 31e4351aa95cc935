# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leave_engine.api.deps import AuthDep, validate_employee_scope
from leave_engine.db import SessionDep
from leave_engine.models.enums import LeaveStatus
from leave_engine.schemas.leave import (
    CreateLeaveRequestPayload,
    LeaveRecordListResponse,
    LeaveRecordResponse,
)
from leave_engine.services import request as request_service

leave_requests_router = APIRouter(
    prefix="/employees/{employee_id}/leave-requests",
    tags=["leave-requests"],
    dependencies=[Depends(validate_employee_scope)],
)


@leave_requests_router.post("", response_model=LeaveRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    employee_id: uuid.UUID,
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRecordResponse:
    """Submit a new leave request; it is admitted only if the balance covers it."""
    return await request_service.create_leave_request(session, employee_id, payload, actor_id=auth.user_id)


@leave_requests_router.get("", response_model=LeaveRecordListResponse)
async def list_leave_requests(
    employee_id: uuid.UUID,
    session: SessionDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRecordListResponse:
    """List the employee's leave requests, newest first."""
    return await request_service.list_leave_records(session, employee_id, status_filter, offset, limit)

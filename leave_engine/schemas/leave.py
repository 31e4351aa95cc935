# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from leave_engine.models.enums import LeaveStatus

# ---------------------------------------------------------------------------
# Store transfer objects
# ---------------------------------------------------------------------------


class LeaveSpan(BaseModel):
    """Date span of a leave record as returned by usage queries."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    start_date: date
    end_date: date
    leave_type_id: uuid.UUID | None = None


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(BaseModel):
    """Request body for creating a new leave request.

    Date order is checked by the admission controller so that a reversed
    range is reported as InvalidRange rather than a generic validation error.
    """

    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRecordResponse(BaseModel):
    """Response schema for a single leave record."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    duration_days: int
    status: LeaveStatus
    reason: str | None
    created_at: datetime
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    comments: str | None


class LeaveRecordListResponse(BaseModel):
    """Paginated list of leave records."""

    items: list[LeaveRecordResponse]
    total: int

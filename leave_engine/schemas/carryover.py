# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field


class CarryoverResult(BaseModel):
    """Outcome of rolling one employee's unused balance into the next leave year."""

    employee_id: uuid.UUID
    previous_balance: int = 0
    carried_forward: int = 0
    new_annual_entitlement: int = 24
    leave_year_start: date | None = None
    leave_year_end: date | None = None
    already_processed: bool = False
    skipped: bool = False
    success: bool = False
    error: str | None = None


class BulkCarryoverResult(BaseModel):
    """Aggregate outcome of a carryover run over every active employee."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[CarryoverResult] = Field(default_factory=list)


class ManualCarryoverPayload(BaseModel):
    """Request body for an administrative carryover override."""

    days: int


class ManualCarryoverResponse(BaseModel):
    """Result of an administrative carryover override."""

    employee_id: uuid.UUID
    requested_days: int
    carried_forward: int
    clamped: bool


class UpcomingAnniversariesResponse(BaseModel):
    """Employees whose anniversary falls within the lookahead window."""

    days_ahead: int
    employee_ids: list[uuid.UUID]
    total: int


class CarryoverStatusItem(BaseModel):
    """Carryover state of a single active employee."""

    employee_id: uuid.UUID
    name: str
    hiring_date: date
    carried_forward: int
    current_balance: int | None
    next_anniversary: date
    error: str | None = None


class CarryoverStatusResponse(BaseModel):
    """Carryover state of every active employee."""

    items: list[CarryoverStatusItem]
    total: int

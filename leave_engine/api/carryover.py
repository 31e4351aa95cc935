# ruff: noqa: B008, TC001, TC003
"""Admin endpoints for year-end carryover.

These are the hooks an outside scheduler or an administrator calls; the
service never triggers a run on its own.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from leave_engine.api.deps import AdminDep, require_admin
from leave_engine.config import get_settings
from leave_engine.db import SessionDep
from leave_engine.schemas.carryover import (
    BulkCarryoverResult,
    CarryoverResult,
    CarryoverStatusResponse,
    ManualCarryoverPayload,
    ManualCarryoverResponse,
    UpcomingAnniversariesResponse,
)
from leave_engine.services import carryover as carryover_service

carryover_router = APIRouter(
    prefix="/carryover",
    tags=["carryover"],
    dependencies=[Depends(require_admin)],
)


@carryover_router.post("/employees/{employee_id}", response_model=CarryoverResult)
async def run_carryover(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> CarryoverResult:
    """Carry one employee's unused balance into the next leave year."""
    return await carryover_service.process_employee_carryover(session, employee_id, actor_id=auth.user_id)


@carryover_router.post("/batch", response_model=BulkCarryoverResult)
async def run_carryover_batch(
    session: SessionDep,
    auth: AdminDep,
) -> BulkCarryoverResult:
    """Run carryover for every active employee with a hiring date."""
    return await carryover_service.process_bulk_carryover(session, actor_id=auth.user_id)


@carryover_router.get("/upcoming", response_model=UpcomingAnniversariesResponse)
async def upcoming_anniversaries(
    session: SessionDep,
    days_ahead: int | None = Query(default=None, ge=0, le=366),
) -> UpcomingAnniversariesResponse:
    """List employees whose anniversary is within ``days_ahead`` days."""
    if days_ahead is None:
        days_ahead = get_settings().carryover_lookahead_days
    employee_ids = await carryover_service.get_employees_needing_carryover(session, days_ahead)
    return UpcomingAnniversariesResponse(days_ahead=days_ahead, employee_ids=employee_ids, total=len(employee_ids))


@carryover_router.get("/status", response_model=CarryoverStatusResponse)
async def carryover_status(session: SessionDep) -> CarryoverStatusResponse:
    """Carryover state of every active employee."""
    return await carryover_service.get_carryover_status(session)


@carryover_router.put("/employees/{employee_id}", response_model=ManualCarryoverResponse)
async def set_manual_carryover(
    employee_id: uuid.UUID,
    payload: ManualCarryoverPayload,
    session: SessionDep,
    auth: AdminDep,
) -> ManualCarryoverResponse:
    """Override an employee's carried-forward days (clamped to the carryover cap)."""
    return await carryover_service.set_manual_carryover(session, employee_id, payload.days, actor_id=auth.user_id)

# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from leave_engine.api.deps import validate_employee_scope
from leave_engine.db import SessionDep
from leave_engine.schemas.balance import BalanceSnapshot, BalanceValueResponse, LifetimeStatistics
from leave_engine.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balance",
    tags=["balances"],
    dependencies=[Depends(validate_employee_scope)],
)


@employee_balance_router.get("", response_model=BalanceValueResponse)
async def get_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
) -> BalanceValueResponse:
    """Get the employee's current leave balance as a single number."""
    current = await balance_service.get_my_balance(session, employee_id)
    return BalanceValueResponse(employee_id=employee_id, current_balance=current)


@employee_balance_router.get("/detailed", response_model=BalanceSnapshot)
async def get_detailed_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
) -> BalanceSnapshot:
    """Get the full balance breakdown for the current leave year."""
    return await balance_service.get_detailed_balance(session, employee_id)


@employee_balance_router.get("/lifetime", response_model=LifetimeStatistics)
async def get_lifetime_statistics(
    employee_id: uuid.UUID,
    session: SessionDep,
) -> LifetimeStatistics:
    """Get approved leave days since hiring, by leave type."""
    return await balance_service.get_lifetime_statistics(session, employee_id)

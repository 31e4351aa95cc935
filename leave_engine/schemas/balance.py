# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LeaveYearWindow(BaseModel):
    """An anniversary-anchored leave year, inclusive on both ends."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode="after")
    def _validate_order(self) -> Self:
        if self.end < self.start:
            msg = "window end must not precede window start"
            raise ValueError(msg)
        return self

    @property
    def length_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class BalanceSnapshot(BaseModel):
    """Full balance breakdown for one employee, computed fresh on every read."""

    current_balance: int = Field(ge=0)
    annual_entitlement: int
    used_this_year: int = Field(ge=0)
    carried_forward: int = Field(ge=0)
    leave_year_start: date
    leave_year_end: date


class BalanceValueResponse(BaseModel):
    """Simple numeric balance for display."""

    employee_id: uuid.UUID
    current_balance: int


class LifetimeStatistics(BaseModel):
    """Approved leave days since hiring, bucketed by leave type name."""

    vacation: int = 0
    sick: int = 0
    personal: int = 0
    casual: int = 0
    total: int = 0
